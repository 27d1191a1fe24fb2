"""
cgiProgram - test CGI program

Usage:
    cgiProgram [switches]
        -a                  Output the args (used for ISINDEX queries)
        -b bytes            Output content "bytes" long
        -e                  Output the environment
        -h lines            Output header "lines" long
        -l location         Output "location" header
        -n                  Non-parsed-header output
        -p                  Output the post data
        -q                  Output the query data
        -s status           Output "status" header
        -t timeout          Accepted and ignored
        default             Output args, env, query and post

Alternatively, pass the switches in the HTTP_SWITCHES query variable or
environment variable, eg. HTTP_SWITCHES="-a -e -q".
"""

import os
import sys

from .acquire import get_post_data, get_query_string
from .decode import get_vars
from .errors import AcquisitionError, UsageError
from .log import log_debug, log_error
from .render import Renderer
from .switches import USAGE, get_argv, parse_flags

EXIT_OK = 0
EXIT_ERROR = 2
EXIT_USAGE = 255

FORM_URLENCODED = "application/x-www-form-urlencoded"


class Invocation:
    """Everything known about one run of the program"""

    def __init__(self, argv, environ):
        self.program_name = argv[0] if argv else "cgiProgram"
        self.original_argv = list(argv) or [self.program_name]
        self.environ = environ
        self.argv = self.original_argv
        self.method = environ.get("REQUEST_METHOD") or "GET"
        self.query_vars = []
        self.post_buf = None
        self.post_vars = []
        self.flags = None
        self.error = None
        self.warnings = []

    def fail(self, error):
        # First error wins
        if self.error is None:
            self.error = error


def resolve(invocation):
    query = get_query_string(invocation.environ)
    invocation.query_vars = get_vars(query)
    invocation.argv = get_argv(invocation.original_argv, invocation.query_vars,
                               invocation.environ)
    invocation.flags = parse_flags(invocation.argv, invocation.program_name)
    log_debug(f"Resolved {invocation.flags!r}", invocation.environ)


def acquire_post(invocation, stdin):
    if invocation.method != "POST":
        return
    try:
        post = get_post_data(invocation.environ, stdin)
    except AcquisitionError as e:
        invocation.fail(e)
        return
    invocation.post_buf = post.buf
    if post.warning:
        invocation.warnings.append(post.warning)
    if invocation.environ.get("CONTENT_TYPE", "") == FORM_URLENCODED:
        invocation.post_vars = get_vars(post.buf)


def run(argv, environ, stdin, stdout):
    """
    Run one CGI invocation. Streams are binary. Returns the exit status.
    """
    invocation = Invocation(argv, environ)
    try:
        resolve(invocation)
    except UsageError as e:
        sys.stderr.write(USAGE)
        sys.stderr.write(f"Error: {e}\n")
        return EXIT_USAGE

    acquire_post(invocation, stdin)

    renderer = Renderer(stdout)
    if invocation.error is not None:
        error = invocation.error
        renderer.render_error(error.status, error.message,
                              invocation.flags.non_parsed_header)
        log_error(f"cgiProgram: ERROR: {error.message}")
        return EXIT_ERROR

    renderer.render(invocation)
    return EXIT_OK


def main():
    status = run(sys.argv, dict(os.environ), sys.stdin.buffer, sys.stdout.buffer)
    sys.exit(status)


if __name__ == "__main__":
    main()
