"""
cgiProgram - test CGI program

Echoes its invocation context (args, environment, query and post data) as an
HTML page, or emits a synthetic response of a given size, status and header
count so a web server's CGI handling can be exercised.
"""

__version__ = "1.0.0"
