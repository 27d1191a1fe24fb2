class CgiError(Exception):
    """Base class for cgiProgram errors"""


class UsageError(CgiError):
    """Unrecognized switch or switch missing its argument"""

    def __init__(self, message, switch=None):
        super().__init__(message)
        self.switch = switch


class AcquisitionError(CgiError):
    """Request input could not be read. Always answered with a 400."""

    status = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message
