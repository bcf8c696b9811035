"""
TFS error hierarchy.

InvalidPathError and FileDoesNotExistError are recoverable lookup outcomes that
the web gateway renders as an error page. ConnectionFailureError and
TransferError are fatal for the request that raised them.
"""
from __future__ import annotations


class TfsError(Exception):
    """Base class for all TFS errors"""


class InvalidPathError(TfsError):
    """The path does not satisfy the namespace syntax rules"""

    def __init__(self, path: str, reason: str = "invalid path"):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} ({reason})")


class FileDoesNotExistError(TfsError):
    """No namespace entry exists for the path"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(path)


class FileAlreadyExistsError(TfsError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(path)


class ConnectionFailureError(TfsError):
    """The master or the storage data plane could not be reached"""

    def __init__(self, address: str, reason: str = ""):
        self.address = address
        self.reason = reason
        message = f"Unable to connect to {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TransferError(TfsError):
    """An I/O failure while bytes were being moved between the cluster and a client"""
