"""
Local CGI host for cgiProgram.

A small Flask app that runs the scripts of a cgi-bin directory as CGI
programs, one subprocess per request, so the test program can be tried
without setting up a web server:

    python -m cgiprogram.host --port 8081
    curl 'http://localhost:8081/cgiProgram.cgi.py?HTTP_SWITCHES=-q+-a&x=1'
    curl -i 'http://localhost:8081/nph-cgiProgram.cgi.py?HTTP_SWITCHES=-s+404'
"""

import argparse
import os
import subprocess
import sys

from flask import Flask, Response, abort, request

import cgiprogram
from .log import log_error, log_info, log_warning

DEFAULT_CGI_DIR = os.path.join("www", "cgi-bin")
DEFAULT_TIMEOUT = 10
SERVER_SOFTWARE = f"cgiprogram-host/{cgiprogram.__version__}"

# Hop-by-hop or consumed here, never passed on to the client
SKIPPED_HEADERS = {"status", "connection", "transfer-encoding"}


class CgiResponse:
    def __init__(self, status, headers, body):
        self.status = status
        self.headers = headers
        self.body = body


def _split_head(output):
    candidates = []
    for sep in (b"\r\n\r\n", b"\n\n"):
        pos = output.find(sep)
        if pos >= 0:
            candidates.append((pos, sep))
    if not candidates:
        return None, output
    pos, sep = min(candidates)
    return output[:pos], output[pos + len(sep):]


def parse_cgi_output(output):
    """
    Turn CGI program output into a status, header list and body.

    Handles both non-parsed-header output (starting with an HTTP status
    line) and regular CGI output with optional Status and Location headers.
    Returns None when there is no header block.
    """
    head, body = _split_head(output)
    if head is None:
        return None

    lines = head.decode("latin-1").replace("\r\n", "\n").split("\n")
    status = None
    if lines and lines[0].startswith("HTTP/"):
        parts = lines[0].split(" ", 2)
        try:
            status = int(parts[1])
        except (IndexError, ValueError):
            return None
        lines = lines[1:]

    headers = []
    location = None
    for line in lines:
        if ':' not in line:
            continue
        name, value = line.split(':', 1)
        name = name.strip()
        value = value.strip()
        if name.lower() == "status":
            try:
                status = int(value.split()[0])
            except (IndexError, ValueError):
                log_warning(f"Ignoring malformed Status header: {value!r}")
            continue
        if name.lower() == "location":
            location = value
        if name.lower() in SKIPPED_HEADERS:
            continue
        headers.append((name, value))

    if status is None:
        status = 302 if location else 200
    return CgiResponse(status, headers, body)


def wsgi_to_env(value):
    # WSGI strings hold raw bytes as latin-1, the child re-encodes env with os.fsencode
    return os.fsdecode(value.encode("latin-1"))


def build_environ(script_name, script_path, cgi_dir):
    env = {
        "GATEWAY_INTERFACE": "CGI/1.1",
        "REQUEST_METHOD": request.method,
        "QUERY_STRING": os.fsdecode(request.query_string),
        "SCRIPT_NAME": "/" + script_name,
        "SCRIPT_FILENAME": script_path,
        "DOCUMENT_ROOT": os.path.abspath(cgi_dir),
        "SERVER_NAME": request.environ.get("SERVER_NAME", ""),
        "SERVER_PORT": str(request.environ.get("SERVER_PORT", "")),
        "SERVER_PROTOCOL": request.environ.get("SERVER_PROTOCOL", "HTTP/1.0"),
        "SERVER_SOFTWARE": SERVER_SOFTWARE,
        "REMOTE_ADDR": request.remote_addr or "",
        "PATH": os.environ.get("PATH", os.defpath),
    }
    if request.environ.get("REQUEST_URI"):
        env["REQUEST_URI"] = wsgi_to_env(request.environ["REQUEST_URI"])
    else:
        env["REQUEST_URI"] = request.full_path.rstrip("?")
    # The scripts import cgiprogram, make this copy importable
    package_root = os.path.dirname(os.path.dirname(os.path.abspath(cgiprogram.__file__)))
    pythonpath = [package_root]
    if os.environ.get("PYTHONPATH"):
        pythonpath.append(os.environ["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(pythonpath)

    for name, value in request.headers.items():
        key = name.upper().replace("-", "_")
        if key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            continue
        env["HTTP_" + key] = wsgi_to_env(value)
    return env


def create_app(cgi_dir=DEFAULT_CGI_DIR, timeout=DEFAULT_TIMEOUT):
    app = Flask(__name__)
    app.config["CGI_DIR"] = cgi_dir
    app.config["CGI_TIMEOUT"] = timeout

    @app.route('/<path:script>', methods=['GET', 'POST', 'PUT', 'DELETE'])
    def run_script(script):
        cgi_dir = app.config["CGI_DIR"]
        script_path = os.path.abspath(os.path.join(cgi_dir, script))
        if not script_path.startswith(os.path.abspath(cgi_dir) + os.sep):
            abort(404)
        if not os.path.isfile(script_path):
            abort(404)

        env = build_environ(script, script_path, cgi_dir)
        body = request.get_data()
        if body or request.method in ("POST", "PUT"):
            env["CONTENT_LENGTH"] = str(len(body))
            env["CONTENT_TYPE"] = request.content_type or ""

        try:
            proc = subprocess.run(
                [sys.executable, script_path],
                input=body,
                env=env,
                cwd=os.path.dirname(script_path),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=app.config["CGI_TIMEOUT"],
            )
        except subprocess.TimeoutExpired:
            log_error(f"{script}: timed out after {app.config['CGI_TIMEOUT']}s")
            return Response("<html><body><h1>504 Gateway Timeout</h1></body></html>",
                            status=504, mimetype="text/html")

        if proc.stderr:
            sys.stderr.write(proc.stderr.decode("utf-8", "replace"))
        parsed = parse_cgi_output(proc.stdout)
        if parsed is None:
            log_error(f"{script}: exited {proc.returncode} without a response")
            return Response("<html><body><h1>502 Bad Gateway</h1></body></html>",
                            status=502, mimetype="text/html")

        log_info(f"{request.method} /{script} -> {parsed.status} (exit {proc.returncode})")
        return Response(parsed.body, status=parsed.status, headers=parsed.headers)

    return app


def main():
    parser = argparse.ArgumentParser(description='Run cgi-bin scripts behind a local HTTP server')
    parser.add_argument('--host', type=str, default='localhost',
                        help='Address to listen on (default: localhost)')
    parser.add_argument('--port', type=int, default=8081,
                        help='Port to listen on (default: 8081)')
    parser.add_argument('--cgi-dir', type=str, default=DEFAULT_CGI_DIR,
                        help=f'Directory holding the CGI scripts (default: {DEFAULT_CGI_DIR})')
    parser.add_argument('--timeout', type=int, default=DEFAULT_TIMEOUT,
                        help=f'Seconds before a script is killed (default: {DEFAULT_TIMEOUT})')
    args = parser.parse_args()

    app = create_app(args.cgi_dir, args.timeout)
    log_info(f"Serving {args.cgi_dir} on http://{args.host}:{args.port}/")
    app.run(host=args.host, port=args.port, use_reloader=False)


if __name__ == "__main__":
    main()
