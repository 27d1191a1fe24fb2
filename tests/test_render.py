import io

from cgiprogram.render import RAW_POST_LIMIT, Renderer, reason_phrase, synthetic_body
from cgiprogram.switches import parse_flags


def render_headers(*switches, program="cgiProgram"):
    out = io.BytesIO()
    Renderer(out).render_headers(parse_flags([program] + list(switches)))
    return out.getvalue().decode()


def render_post(post_vars, post_buf):
    out = io.BytesIO()
    Renderer(out).render_post(post_vars, post_buf)
    return out.getvalue()


def test_synthetic_body_short():
    assert synthetic_body(5) == "01234"


def test_synthetic_body_emits_more_than_requested():
    # Every CRLF pushes the bound out by two more digits
    assert synthetic_body(10) == "0123456789\r\n01"
    assert len(synthetic_body(100)) > 100


def test_synthetic_body_zero_or_negative():
    assert synthetic_body(0) == ""
    assert synthetic_body(-5) == ""


def test_reason_phrase():
    assert reason_phrase(404) == "Not Found"
    assert reason_phrase(599) == ""


def test_plain_headers():
    assert render_headers() == "Content-type: text/html\r\n\r\n"


def test_nph_headers():
    assert render_headers("-n") == (
        "HTTP/1.0 200 OK\r\n"
        "Connection: close\r\n"
        "X-CGI-CustomHeader: Any value at all\r\n"
        "Content-type: text/html\r\n"
        "\r\n"
    )


def test_nph_status_line_uses_status():
    assert render_headers("-n", "-s", "404").startswith("HTTP/1.0 404 Not Found\r\n")


def test_extra_header_lines():
    head = render_headers("-h", "2")
    assert "X-CGI-0: A loooooooooooooooooooooooong string\r\n" in head
    assert "X-CGI-1: A loooooooooooooooooooooooong string\r\n" in head
    assert "X-CGI-2" not in head


def test_location_and_status_headers():
    head = render_headers("-l", "http://example.com/")
    assert head == ("Content-type: text/html\r\n"
                    "Location: http://example.com/\r\n"
                    "Status: 302\r\n"
                    "\r\n")


def test_post_pairs():
    out = render_post([("hello", "world"), ("flag", None)], b"hello=world&flag")
    assert out == (b"<H2>Decoded Post Variables</H2>\r\n"
                   b"<p>PVAR hello=world</p>\r\n"
                   b"<p>PVAR flag=</p>\r\n"
                   b"\r\n")


def test_raw_post_written_verbatim():
    assert render_post([], b"\x00binary\xff") == b"\x00binary\xff\r\n"


def test_large_raw_post_reports_size():
    out = render_post([], b"z" * RAW_POST_LIMIT)
    assert out == b"<H2>Post Data 50000 bytes found</H2>\r\n\r\n"


def test_no_post():
    assert render_post([], None) == b"<H2>No Post Data Found</H2>\r\n\r\n"


def test_error_page():
    out = io.BytesIO()
    Renderer(out).render_error(400, "Can't read CGI input", non_parsed_header=False)
    assert out.getvalue() == (b"HTTP/1.0 400 Can't read CGI input\r\n\r\n"
                              b"<HTML><BODY><p>Error: 400 -- Can't read CGI input</p></BODY></HTML>\r\n")


def test_error_page_nph_writes_nothing():
    out = io.BytesIO()
    Renderer(out).render_error(400, "boom", non_parsed_header=True)
    assert out.getvalue() == b""
