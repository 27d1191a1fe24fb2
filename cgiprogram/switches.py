"""
Command line switches.

Under a web server the real command line usually can't be controlled, so the
switches may also be given as an HTTP_SWITCHES query variable or environment
variable, eg. HTTP_SWITCHES="-a -e -q".
"""

import re

from .acquire import atoi
from .decode import descape, find_var, to_text
from .errors import UsageError

MAX_ARGV = 64
SWITCH_BUFFER_SIZE = 1024
SWITCHES_VAR = "HTTP_SWITCHES"

USAGE = (
    "usage: cgiProgram -aenp [-b bytes] [-h lines]\n"
    "\t[-l location] [-s status] [-t timeout]\n"
    "\tor set the HTTP_SWITCHES environment variable\n"
)

_WHITESPACE = re.compile(rb'[ \t\n]+')


class Flags:
    """What to output for this invocation. Built once by parse_flags."""

    def __init__(self):
        self.output_args = False
        self.output_env = False
        self.output_query = False
        self.output_post = False
        self.non_parsed_header = False
        self.output_bytes = 0
        self.output_header_lines = 0
        self.response_status = 0
        self.timeout = 0
        self.output_location = None

    def nothing_requested(self):
        return not (self.output_bytes or self.output_args or self.output_env
                    or self.output_query or self.output_post
                    or self.output_location is not None or self.response_status)

    def __repr__(self):
        return f"Flags({vars(self)!r})"


def find_switches(query_vars, environ):
    pair = find_var(query_vars, SWITCHES_VAR)
    if pair is not None and pair[1] is not None:
        return pair[1]
    return environ.get(SWITCHES_VAR)


def split_switches(switches):
    raw = switches.encode("utf-8", "surrogateescape")[:SWITCH_BUFFER_SIZE - 1]
    tokens = [t for t in _WHITESPACE.split(descape(raw)) if t]
    return [to_text(t) for t in tokens[:MAX_ARGV - 2]]


def get_argv(argv, query_vars, environ):
    """Effective argv: the real one, or one built from HTTP_SWITCHES"""
    switches = find_switches(query_vars, environ)
    if switches is None:
        return list(argv)
    return [argv[0]] + split_switches(switches)


def parse_flags(argv, program_name=None):
    """
    Parse switches into Flags.

    Letters may be combined ("-aeq"). Switches taking an argument consume the
    following argv entries in order, so "-bs 100 404" is valid.
    """
    flags = Flags()
    if program_name is None:
        program_name = argv[0] if argv else ""
    if "nph-" in program_name:
        flags.non_parsed_header = True

    def next_arg(switch):
        nonlocal i
        i += 1
        if i >= len(argv):
            raise UsageError(f"Missing argument for -{switch}", switch)
        return argv[i]

    i = 1
    while i < len(argv):
        arg = argv[i]
        if not arg.startswith('-'):
            i += 1
            continue
        for switch in arg[1:]:
            if switch == 'a':
                flags.output_args = True
            elif switch == 'b':
                flags.output_bytes = atoi(next_arg(switch))
            elif switch == 'e':
                flags.output_env = True
            elif switch == 'h':
                flags.output_header_lines = atoi(next_arg(switch))
                flags.non_parsed_header = True
            elif switch == 'l':
                flags.output_location = next_arg(switch)
                if flags.response_status == 0:
                    flags.response_status = 302
            elif switch == 'n':
                flags.non_parsed_header = True
            elif switch == 'p':
                flags.output_post = True
            elif switch == 'q':
                flags.output_query = True
            elif switch == 's':
                flags.response_status = atoi(next_arg(switch))
            elif switch == 't':
                # Accepted for compatibility, nothing acts on it
                flags.timeout = atoi(next_arg(switch))
            else:
                raise UsageError(f"Unknown switch -{switch}", switch)
        i += 1
    return flags
