import re

from .errors import AcquisitionError
from .log import log_debug, log_warning

DEFAULT_CHUNK_SIZE = 4096
NO_MEMORY = "Couldn't allocate memory to read post data"

_ATOI = re.compile(r'[ \t\n\v\f\r]*([+-]?[0-9]+)')


def atoi(value):
    """C atoi: optional sign and leading digits, 0 when there are none"""
    if value is None:
        return 0
    match = _ATOI.match(value)
    if not match:
        return 0
    return int(match.group(1))


class PostData:
    def __init__(self, buf, warning=None):
        self.buf = buf
        self.warning = warning

    def __len__(self):
        return len(self.buf)


def get_query_string(environ):
    query = environ.get("QUERY_STRING")
    if query is None:
        return b""
    return query.encode("utf-8", "surrogateescape")


def get_post_data(environ, stream):
    """
    Read the request body from a binary stream.

    With CONTENT_LENGTH set, room for that many bytes is reserved up front and
    reads continue until they arrived or the stream ended. Ending early is
    only a warning: the partial body is kept. Without it, reads until end of
    stream.
    """
    content_length = environ.get("CONTENT_LENGTH")
    limit = None
    if content_length is not None:
        limit = atoi(content_length)
        if limit < 0:
            raise AcquisitionError(NO_MEMORY)
        try:
            buf = bytearray(limit)
        except (MemoryError, OverflowError) as e:
            raise AcquisitionError(NO_MEMORY) from e
    else:
        buf = bytearray()

    length = 0
    warning = None
    while limit is None or length < limit:
        want = DEFAULT_CHUNK_SIZE if limit is None else min(DEFAULT_CHUNK_SIZE, limit - length)
        try:
            data = stream.read(want)
        except OSError as e:
            raise AcquisitionError(f"Couldn't read CGI input {e.errno}") from e
        if not data:
            if limit is not None:
                warning = f"Missing content data (Content-Length: {content_length})"
                log_warning(f"cgiProgram: {warning}")
            break
        buf[length:length + len(data)] = data
        length += len(data)

    log_debug(f"Read {length} bytes of post data", environ)
    return PostData(bytes(buf[:length]), warning)
