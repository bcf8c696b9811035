"""
Download gateway

Turns a namespace path into a byte stream for an HTTP client:

    resolve path -> master lookup -> open connection + stream -> frame headers -> copy bytes

Lookup failures (missing file, invalid path) become an ErrorRecord for the
browse page; nothing is framed or written for them. Every resource acquired
along the way is released exactly once through an ExitStack that only ever
holds what was actually opened.
"""
from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional, Protocol, Tuple

from client.storage_client import InStream, RemoteFile, StorageClient, format_address
from shared.config import STREAM_BUFFER_BYTES
from shared.exceptions import (
    ConnectionFailureError,
    FileDoesNotExistError,
    InvalidPathError,
    TfsError,
    TransferError,
)
from shared.types import ClientFileInfo, ReadType
from shared import uri

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"
# Largest length the size-typed content length setter accepts
MAX_NATIVE_CONTENT_LENGTH = 2**31 - 1
ERROR_PREFIX = "Error: Invalid Path "


class ResponseSink(Protocol):
    """Header side of an HTTP response; all of it is set before the first body byte"""

    def set_content_type(self, content_type: str) -> None: ...

    def set_content_length(self, length: int) -> None: ...

    def add_header(self, name: str, value: str) -> None: ...


@dataclass(frozen=True)
class ErrorRecord:
    kind: str  # "FileDoesNotExist" | "InvalidPath"
    path: str
    message: str


def resolve_request_path(raw_path: Optional[str]) -> str:
    """The requested path, or the namespace root when none was given"""
    if not raw_path:
        return uri.SEPARATOR
    return raw_path


def frame_response(sink: ResponseSink, length: int, path: str) -> None:
    sink.set_content_type(OCTET_STREAM)
    if length <= MAX_NATIVE_CONTENT_LENGTH:
        sink.set_content_length(length)
    else:
        sink.add_header("Content-Length", str(length))
    sink.add_header("Content-Disposition", "attachment;filename=" + uri.get_name(path))


def report_error(error: TfsError) -> ErrorRecord:
    if isinstance(error, FileDoesNotExistError):
        return ErrorRecord("FileDoesNotExist", error.path, ERROR_PREFIX + str(error))
    if isinstance(error, InvalidPathError):
        return ErrorRecord("InvalidPath", error.path, ERROR_PREFIX + str(error))
    raise TypeError(f"No error page for {type(error).__name__}")


def _release(name: str, release: Callable[[], None]) -> None:
    try:
        release()
    except Exception as e:
        logger.error(f"Failed to close {name}: {e}")


def _close_output(out: BinaryIO) -> None:
    try:
        out.flush()
    finally:
        out.close()


class Transfer:
    """
    Bytes of one file on their way to a client.

    Owns the storage connection and input stream opened for the download;
    close() releases them (stream first, then connection) and is safe to call
    more than once.
    """

    def __init__(self, path: str, length: int, stream: BinaryIO, resources: ExitStack,
                 buffer_size: int = STREAM_BUFFER_BYTES):
        self.path = path
        self.length = length
        self.stream = stream
        self.buffer_size = buffer_size
        self.bytes_sent = 0
        self._resources = resources

    def __iter__(self) -> Iterator[bytes]:
        try:
            yield from self._chunks()
        finally:
            self.close()

    def write_to(self, out: BinaryIO) -> int:
        """Copy every byte to `out`, then flush and close it; returns the byte count"""
        try:
            try:
                for chunk in self._chunks():
                    try:
                        out.write(chunk)
                    except OSError as e:
                        logger.error(f"Write of {self.path} to client failed after {self.bytes_sent} bytes: {e}")
                        raise TransferError(f"Write of {self.path} failed: {e}") from e
            finally:
                _release("response output", lambda: _close_output(out))
        finally:
            self.close()
        return self.bytes_sent

    def close(self) -> None:
        self._resources.close()

    def _chunks(self) -> Iterator[bytes]:
        # never reads past the framed length
        while self.bytes_sent < self.length:
            try:
                chunk = self.stream.read(min(self.buffer_size, self.length - self.bytes_sent))
            except (OSError, TfsError) as e:
                logger.error(f"Read of {self.path} failed after {self.bytes_sent} of {self.length} bytes: {e}")
                if isinstance(e, TransferError):
                    raise
                raise TransferError(f"Read of {self.path} failed: {e}") from e
            if not chunk:
                break
            self.bytes_sent += len(chunk)
            yield chunk

        if self.bytes_sent != self.length:
            logger.error(f"Stream for {self.path} ended after {self.bytes_sent} of {self.length} bytes")
            raise TransferError(f"Short read of {self.path}: {self.bytes_sent} of {self.length} bytes")
        logger.debug(f"Streamed {self.bytes_sent} bytes of {self.path}")


class DownloadServlet:
    """
    Serves file downloads for the web UI.

    The metadata authority is injected and only read from; every other
    resource is created per request and owned by that request.
    """

    def __init__(
        self,
        master_info,
        storage_client: Optional[StorageClient] = None,
        read_type: ReadType = ReadType.NO_CACHE,
        buffer_size: int = STREAM_BUFFER_BYTES,
    ):
        """
        Args:
            master_info: MasterInfo or MasterClient; provides get_client_file_info
                and get_master_address
            storage_client: Opens data-plane connections (a fresh one per download)
            read_type: Read policy for downloads
            buffer_size: Copy chunk size
        """
        self.master_info = master_info
        self.storage_client = storage_client or StorageClient()
        self.read_type = read_type
        self.buffer_size = buffer_size

    def lookup(self, path: str) -> ClientFileInfo:
        """
        Raises:
            FileDoesNotExistError: nothing exists at the path
            InvalidPathError: the master rejected the path
        """
        info = self.master_info.get_client_file_info(path)
        if info is None:
            raise FileDoesNotExistError(path)
        return info

    def open_file(self, path: str, resources: ExitStack) -> Tuple[RemoteFile, InStream]:
        """
        Connect to the data plane and open a read stream for `path`.

        Each resource is registered on `resources` as soon as it exists.

        Raises:
            ConnectionFailureError: the data plane is unreachable
            FileDoesNotExistError: the file disappeared after the lookup
        """
        master_uri = format_address(self.master_info.get_master_address())
        connection = self.storage_client.connect(master_uri)
        resources.callback(_release, "storage connection", connection.close)

        remote_file = connection.get_file(path)
        if remote_file is None:
            raise FileDoesNotExistError(path)
        stream = remote_file.get_in_stream(self.read_type)
        resources.callback(_release, "input stream", stream.close)
        return remote_file, stream

    def prepare(self, raw_path: Optional[str], sink: ResponseSink) -> Transfer:
        """
        Resolve, open and frame a download. On success the returned Transfer
        owns the open resources; on any exception nothing is left open.
        """
        path = resolve_request_path(raw_path)
        info = self.lookup(path)
        if info.path != path:
            logger.debug(f"{path} resolved to {info.path}")

        with ExitStack() as resources:
            try:
                remote_file, stream = self.open_file(info.path, resources)
            except ConnectionFailureError as e:
                logger.error(f"Download of {info.path} failed: {e}")
                raise
            length = remote_file.length()
            if stream.length != length:
                logger.error(f"Block for {info.path} holds {stream.length} bytes, master reports {length}")
                raise TransferError(f"Length mismatch for {info.path}: block {stream.length}, metadata {length}")
            frame_response(sink, length, info.path)
            return Transfer(info.path, length, stream, resources.pop_all(), self.buffer_size)

    def do_get(self, raw_path: Optional[str], sink) -> Optional[ErrorRecord]:
        """
        Serve a download into a push-style sink that also provides
        get_output_stream(). Returns an ErrorRecord instead of writing
        anything when the path is missing or invalid.
        """
        try:
            transfer = self.prepare(raw_path, sink)
        except (FileDoesNotExistError, InvalidPathError) as e:
            logger.info(f"Download rejected: {e}")
            return report_error(e)
        transfer.write_to(sink.get_output_stream())
        return None
