"""
URL-encoded form decoding.

Query strings and urlencoded POST bodies are split into (key, value) pairs.
Decoding is deliberately lenient: escapes are not validated and nothing here
ever raises on malformed input.
"""

PERCENT = ord('%')
PLUS = ord('+')
SPACE = ord(' ')


def _hex_digit(ch):
    # Letters are case-folded by masking off the 0x20 bit
    if ch >= ord('A'):
        return (ch & 0xDF) - ord('A') + 10
    return ch - ord('0')


def hex2char(pair):
    """Value of a two character hex escape, masked to a single byte"""
    return (_hex_digit(pair[0]) * 16 + _hex_digit(pair[1])) & 0xFF


def descape(buf):
    """
    Decode '+' to space and '%XX' to the byte 0xXX.

    A '%' with fewer than two characters after it is copied through as is.
    """
    out = bytearray()
    i = 0
    n = len(buf)
    while i < n:
        ch = buf[i]
        if ch == PERCENT and i + 3 <= n:
            out.append(hex2char(buf[i + 1:i + 3]))
            i += 3
        elif ch == PLUS:
            out.append(SPACE)
            i += 1
        else:
            out.append(ch)
            i += 1
    return bytes(out)


def to_text(raw):
    return raw.decode("utf-8", "surrogateescape")


def count_keys(buf):
    if not buf:
        return 0
    return buf.count(b'&') + 1


def get_vars(buf):
    """
    Split an ampersand separated buffer into an ordered list of pairs.

    Each pair is (key, value) with value None when the segment has no '='.
    Empty segments are skipped.
    """
    key_count = count_keys(buf)
    pairs = []
    if key_count == 0:
        return pairs

    for segment in buf.split(b'&'):
        if not segment:
            continue
        key, eq, value = segment.partition(b'=')
        if eq:
            pair = (to_text(descape(key)), to_text(descape(value)))
        else:
            pair = (to_text(descape(key)), None)
        if len(pairs) < key_count:
            pairs.append(pair)
    return pairs


def find_var(pairs, name):
    """First pair named `name`, or None"""
    for pair in pairs:
        if pair[0] == name:
            return pair
    return None
