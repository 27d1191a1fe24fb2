from http import HTTPStatus


CRLF = "\r\n"
RAW_POST_LIMIT = 50 * 1000

ENV_VARS = [
    'AUTH_TYPE',
    'CONTENT_LENGTH',
    'CONTENT_TYPE',
    'DOCUMENT_ROOT',
    'GATEWAY_INTERFACE',
    'HTTP_ACCEPT',
    'HTTP_CONNECTION',
    'HTTP_HOST',
    'HTTP_USER_AGENT',
    'PATH_INFO',
    'PATH_TRANSLATED',
    'QUERY_STRING',
    'REMOTE_ADDR',
    'REQUEST_METHOD',
    'REQUEST_URI',
    'REMOTE_USER',
    'SCRIPT_NAME',
    'SERVER_ADDR',
    'SERVER_NAME',
    'SERVER_PORT',
    'SERVER_PROTOCOL',
    'SERVER_SOFTWARE',
]


def reason_phrase(status):
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def synthetic_body(count):
    """
    Digits 0-9 repeated, with CRLF after every ten.

    Each CRLF also raises the loop bound by two, so more than `count`
    characters come out. Servers under test have always seen this output.
    """
    out = []
    digit = 0
    i = 0
    while i < count:
        out.append(chr(ord('0') + digit))
        digit += 1
        if digit > 9:
            count += 1
            if count > 0:
                out.append('\r')
            count += 1
            if count > 0:
                out.append('\n')
            digit = 0
        i += 1
    return "".join(out)


class Renderer:
    """Writes the CGI response to a binary output stream"""

    def __init__(self, out):
        self.out = out

    def write(self, text):
        if isinstance(text, str):
            text = text.encode("utf-8", "surrogateescape")
        self.out.write(text)

    def line(self, text=""):
        self.write(text + CRLF)

    def render_error(self, status, message, non_parsed_header):
        if not non_parsed_header:
            self.write(f"HTTP/1.0 {status} {message}\r\n\r\n")
            self.line(f"<HTML><BODY><p>Error: {status} -- {message}</p></BODY></HTML>")
        self.out.flush()

    def render(self, invocation):
        flags = invocation.flags
        self.render_headers(flags)

        output_args = flags.output_args
        output_env = flags.output_env
        output_query = flags.output_query
        output_post = flags.output_post
        if flags.nothing_requested():
            output_args = output_env = output_query = output_post = True

        if flags.output_bytes:
            self.write(synthetic_body(flags.output_bytes))

        self.line("<HTML><TITLE>cgiProgram: Output</TITLE><BODY>")
        if output_args:
            self.render_args(invocation.argv)
        if output_env:
            self.render_env(invocation.environ)
        if output_query:
            self.render_query(invocation.query_vars)
        if output_post:
            self.render_post(invocation.post_vars, invocation.post_buf)
        self.line("</BODY></HTML>")
        self.out.flush()

    def render_headers(self, flags):
        if flags.non_parsed_header:
            if flags.response_status == 0:
                self.line("HTTP/1.0 200 OK")
            else:
                status = flags.response_status
                self.line(f"HTTP/1.0 {status} {reason_phrase(status)}")
            self.line("Connection: close")
            self.line("X-CGI-CustomHeader: Any value at all")

        self.line("Content-type: text/html")
        for i in range(flags.output_header_lines):
            self.line(f"X-CGI-{i}: A loooooooooooooooooooooooong string")
        if flags.output_location is not None:
            self.line(f"Location: {flags.output_location}")
        if flags.response_status:
            self.line(f"Status: {flags.response_status}")
        self.line()

    def render_args(self, argv):
        self.line("<H2>Args</H2>")
        for i, arg in enumerate(argv):
            self.line(f"<P>ARG[{i}]={arg}</P>")

    def render_env(self, environ):
        self.line("<H2>Environment Variables</H2>")
        for name in ENV_VARS:
            self.line(f"<P>{name}={environ.get(name, '')}</P>")

        self.write("\r\n<H2>All Defined Environment Variables</H2>\r\n")
        for name, value in environ.items():
            self.line(f"<P>{name}={value}</P>")
        self.line()

    def render_query(self, query_vars):
        if not query_vars:
            self.line("<H2>No Query String Found</H2>")
        else:
            self.line("<H2>Decoded Query String Variables</H2>")
            for key, value in query_vars:
                self.line(f"<p>QVAR {key}={value or ''}</p>")
        self.line()

    def render_post(self, post_vars, post_buf):
        if post_vars:
            self.line("<H2>Decoded Post Variables</H2>")
            for key, value in post_vars:
                self.line(f"<p>PVAR {key}={value or ''}</p>")
        elif post_buf is not None:
            if len(post_buf) < RAW_POST_LIMIT:
                self.write(post_buf)
            else:
                self.line(f"<H2>Post Data {len(post_buf)} bytes found</H2>")
        else:
            self.line("<H2>No Post Data Found</H2>")
        self.line()
