"""
Storage Client

Reads file bytes from the cluster data plane.

Usage:
    client = StorageClient(timeout_seconds=30)
    connection = client.connect("tfs://10.0.1.1:29998")
    try:
        remote_file = connection.get_file("/logs/app.log")
        if remote_file is not None:
            with remote_file.get_in_stream(ReadType.NO_CACHE) as stream:
                data = stream.read()
    finally:
        connection.close()

A StorageConnection is a single TCP connection owned by its caller. Requests
on it are sequential: while an InStream is open the connection is busy, and
a stream closed before its end leaves the connection unusable.
"""

from __future__ import annotations

import io
import logging
import socket
from typing import Optional
from urllib.parse import urlparse

from shared.config import CLIENT_TIMEOUT_SECONDS, SCHEME
from shared.exceptions import (
    ConnectionFailureError,
    FileDoesNotExistError,
    InvalidPathError,
    TfsError,
    TransferError,
)
from shared.socket_protocol import SocketProtocol
from shared.types import ClientFileInfo, NetAddress, ReadType

logger = logging.getLogger(__name__)


def parse_address(master_uri: str) -> NetAddress:
    """Parse 'tfs://host:port' into a NetAddress"""
    parsed = urlparse(master_uri)
    if parsed.scheme + "://" != SCHEME or not parsed.hostname or not parsed.port:
        raise ValueError(f"Expected {SCHEME}<host>:<port>, got {master_uri!r}")
    return NetAddress(parsed.hostname, parsed.port)


def format_address(address: NetAddress) -> str:
    return f"{SCHEME}{address.host}:{address.port}"


class StorageClient:
    """Opens connections to the data plane; holds no connection itself"""

    def __init__(self, timeout_seconds: float = CLIENT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds

    def connect(self, master_uri: str) -> "StorageConnection":
        """
        Open a new connection to the data plane.

        Raises:
            ConnectionFailureError: the address is unreachable
        """
        address = parse_address(master_uri)
        try:
            sock = socket.create_connection((address.host, address.port), timeout=self.timeout_seconds)
        except OSError as e:
            logger.error(f"Connection to {master_uri} failed: {e}")
            raise ConnectionFailureError(master_uri, str(e)) from e
        logger.debug(f"Connected to {master_uri}")
        return StorageConnection(sock, master_uri)


class StorageConnection:
    def __init__(self, sock: socket.socket, master_uri: str):
        self.master_uri = master_uri
        self.protocol = SocketProtocol(sock)
        self.closed = False
        self._stream: Optional[InStream] = None
        self._broken = False

    def get_file(self, path: str) -> Optional["RemoteFile"]:
        """Return a handle on the file at `path`, or None if it does not exist"""
        response = self._request({"action": "get_file", "path": path})
        if response.get("ok"):
            return RemoteFile(self, ClientFileInfo.from_dict(response["file"]))
        if response.get("error") == "file_not_found":
            return None
        self._raise_for(response, path)

    def open_stream(self, path: str, read_type: ReadType) -> "InStream":
        response = self._request({"action": "read", "path": path, "read_type": read_type.value})
        if not response.get("ok"):
            self._raise_for(response, path)
        self._stream = InStream(self, path, int(response["length"]))
        return self._stream

    def health(self) -> bool:
        return bool(self._request({"action": "health"}).get("ok"))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.protocol.close()
        logger.debug(f"Connection to {self.master_uri} closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, payload: dict) -> dict:
        if self.closed:
            raise TfsError(f"Connection to {self.master_uri} is closed")
        if self._broken:
            raise TfsError(f"Connection to {self.master_uri} was abandoned mid-stream")
        if self._stream is not None:
            raise TfsError("A stream is still open on this connection")
        try:
            self.protocol.send_frame(payload)
            response = self.protocol.receive_frame()
        except OSError as e:
            raise ConnectionFailureError(self.master_uri, str(e)) from e
        if response is None:
            raise ConnectionFailureError(self.master_uri, "connection closed by peer")
        return response

    def _raise_for(self, response: dict, path: str):
        error = response.get("error")
        message = response.get("message") or path
        if error == "file_not_found":
            raise FileDoesNotExistError(path)
        if error == "invalid_path":
            raise InvalidPathError(path, message)
        raise TfsError(f"{error}: {message}")

    def _stream_closed(self, stream: "InStream") -> None:
        if stream.remaining > 0:
            self._broken = True
        self._stream = None


class RemoteFile:
    """A file handle bound to the connection that resolved it"""

    def __init__(self, connection: StorageConnection, info: ClientFileInfo):
        self.connection = connection
        self.info = info

    @property
    def path(self) -> str:
        return self.info.path

    def length(self) -> int:
        return self.info.length

    def get_in_stream(self, read_type: ReadType = ReadType.NO_CACHE) -> "InStream":
        return self.connection.open_stream(self.path, read_type)


class InStream(io.RawIOBase):
    """Sequential reader over the raw bytes of one read response"""

    def __init__(self, connection: StorageConnection, path: str, length: int):
        super().__init__()
        self.connection = connection
        self.path = path
        self.length = length
        self.remaining = length

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self.remaining == 0:
            return 0
        view = memoryview(buffer).cast("B")[:min(len(buffer), self.remaining)]
        try:
            count = self.connection.protocol.reader.readinto1(view)
        except OSError as e:
            raise TransferError(f"Read of {self.path} failed: {e}") from e
        if count == 0:
            raise TransferError(
                f"Stream for {self.path} ended after {self.length - self.remaining} of {self.length} bytes"
            )
        self.remaining -= count
        return count

    def close(self) -> None:
        if not self.closed:
            self.connection._stream_closed(self)
        super().close()
