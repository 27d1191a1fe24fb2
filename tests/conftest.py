import io
import os

import pytest

from cgiprogram.program import run

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
CGI_DIR = os.path.join(ROOT, 'www', 'cgi-bin')


class Result:
    def __init__(self, status, output):
        self.status = status
        self.output = output
        self.text = output.decode("utf-8", "surrogateescape")

    @property
    def head(self):
        return self.text.split("\r\n\r\n", 1)[0]

    @property
    def body(self):
        return self.text.split("\r\n\r\n", 1)[1]


@pytest.fixture
def invoke():
    """Run the program in-process: invoke(argv, env, stdin=b"")"""
    def _invoke(argv=None, env=None, stdin=b""):
        out = io.BytesIO()
        status = run(argv or ["cgiProgram"], dict(env or {}), io.BytesIO(stdin), out)
        return Result(status, out.getvalue())
    return _invoke
