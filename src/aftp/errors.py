from __future__ import annotations


class FTPError(Exception):
    """Base class for errors raised while serving a session."""


class MalformedAddress(FTPError, ValueError):
    pass


class DataChannelError(FTPError):
    pass


class NoPriorAddress(DataChannelError):
    def __init__(self) -> None:
        super().__init__("previous command not PORT")


class DialFailure(DataChannelError):
    def __init__(self, address: str, cause: OSError):
        super().__init__(f"dial {address}: {cause}")
        self.address = address
        self.cause = cause


class FileOpenError(FTPError):
    def __init__(self, path: str, cause: OSError | ValueError):
        super().__init__(f"open {path}: {getattr(cause, 'strerror', None) or cause}")
        self.path = path
        self.cause = cause
