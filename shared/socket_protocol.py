"""
Data-plane wire framing.

Requests and response headers are newline-delimited JSON frames. A successful
read response header is followed on the same socket by exactly `length` raw
bytes, so frames are parsed from a buffered reader rather than from raw
socket.recv() chunks.
"""
from __future__ import annotations

import json
import socket
from typing import Any, BinaryIO

MAX_FRAME_BYTES = 64 * 1024


def send_json_line(sock: socket.socket, payload: dict[str, Any]) -> None:
    body = (json.dumps(payload) + "\n").encode("utf-8")
    sock.sendall(body)


def read_json_line(reader: BinaryIO) -> dict[str, Any]:
    line = reader.readline(MAX_FRAME_BYTES + 1)
    if not line:
        raise ConnectionError("No data received")
    if len(line) > MAX_FRAME_BYTES or not line.endswith(b"\n"):
        raise ConnectionError("Frame too large or truncated")
    return json.loads(line.decode("utf-8"))


class SocketProtocol:
    """Framing over one connected socket, sharing a single buffered reader"""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.reader = sock.makefile("rb")

    def send_frame(self, payload: dict[str, Any]) -> None:
        send_json_line(self.sock, payload)

    def receive_frame(self) -> dict[str, Any] | None:
        try:
            return read_json_line(self.reader)
        except ConnectionError:
            return None

    def send_stream(self, source: BinaryIO, length: int, buffer_size: int) -> int:
        """Send exactly `length` bytes from `source`; returns the number sent"""
        remaining = length
        while remaining > 0:
            chunk = source.read(min(buffer_size, remaining))
            if not chunk:
                raise ConnectionError(f"Source ended with {remaining} of {length} bytes unsent")
            self.sock.sendall(chunk)
            remaining -= len(chunk)
        return length

    def close(self) -> None:
        try:
            self.reader.close()
        finally:
            self.sock.close()
