"""Exception hierarchy raised by the file sinks."""


class SinkError(Exception):
    """Base class for every sink failure. Carries the OS errno when one exists."""

    def __init__(self, message: str, errno: int | None = None):
        super().__init__(message)
        self.errno = errno


class ConfigurationError(SinkError):
    """Invalid sink parameters, detected before any file is touched."""


class FileOpenError(SinkError):
    def __init__(self, path: str, errno: int | None = None, reason: str = ""):
        message = f"failed opening file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message, errno)
        self.path = path


class RotationError(SinkError):
    """A delete or rename step of a size rotation failed."""

    def __init__(self, message: str, path: str, errno: int | None = None):
        super().__init__(message, errno)
        self.path = path
