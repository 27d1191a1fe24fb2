import os
import sys
from datetime import datetime


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    WHITE = '\033[97m'
    END = '\033[0m'


def _stream():
    # Looked up per call, sys.stderr may have been replaced
    return sys.stderr


def debug_enabled(environ=None):
    environ = os.environ if environ is None else environ
    return bool(environ.get("CGIPROGRAM_DEBUG"))


def log(message, color=Colors.WHITE):
    stream = _stream()
    timestamp = datetime.now().strftime("%H:%M:%S")
    if stream.isatty():
        stream.write(f"{color}[{timestamp}] {message}{Colors.END}\n")
    else:
        # Web servers capture CGI stderr into their error log
        stream.write(f"[{timestamp}] {message}\n")
    stream.flush()


def log_success(message):
    log(f"✅ {message}", Colors.GREEN)


def log_error(message):
    log(f"❌ {message}", Colors.RED)


def log_warning(message):
    log(f"⚠️  {message}", Colors.YELLOW)


def log_info(message):
    log(f"ℹ️  {message}", Colors.BLUE)


def log_debug(message, environ=None):
    if debug_enabled(environ):
        log(f"[DEBUG] {message}", Colors.CYAN)
