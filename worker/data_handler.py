"""
Worker Data Handler

TCP socket server for the cluster data plane. Clients connect to the address
the master publishes, then issue any number of requests on that connection:

- {"action": "health"}
- {"action": "get_file", "path": ...}            -> file attributes from the master
- {"action": "read", "path": ..., "read_type": ...} -> {"ok": true, "length": n} + n raw bytes

Protocol: newline-delimited JSON frames (shared/socket_protocol.py), raw
payload bytes after a successful read header.
"""

import socket
import threading
import logging
from typing import Dict, Optional

from shared.config import STREAM_BUFFER_BYTES
from shared.exceptions import FileDoesNotExistError, InvalidPathError
from shared.socket_protocol import SocketProtocol
from shared.types import ReadType
from worker.block_store import BlockStore

logger = logging.getLogger(__name__)


class DataServer:
    """
    Data plane server.
    Resolves metadata through the master and streams bytes out of the block store.
    """

    def __init__(
        self,
        host: str,
        port: int,
        master_info,
        block_store: BlockStore,
        buffer_size: int = STREAM_BUFFER_BYTES
    ):
        """
        Initialize data server.

        Args:
            host: Listen address (e.g., "0.0.0.0" or "127.0.0.1")
            port: Data port; 0 picks a free port, readable from self.port after start
            master_info: Metadata authority used to answer get_file
            block_store: Source of file bytes
            buffer_size: Chunk size when streaming a read response
        """
        self.host = host
        self.port = port
        self.master_info = master_info
        self.block_store = block_store
        self.buffer_size = buffer_size

        self.server_socket: Optional[socket.socket] = None
        self.running = False
        self.ready = threading.Event()

        logger.info(f"Data server initialized: {host}:{port}")

    def start(self):
        """Start listening for requests (blocks until stop() is called)"""
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((self.host, self.port))
        self.server_socket.listen(16)
        self.port = self.server_socket.getsockname()[1]
        self.running = True
        self.ready.set()

        logger.info(f"Data server listening on {self.host}:{self.port}")

        while self.running:
            try:
                client_socket, client_addr = self.server_socket.accept()
                logger.debug(f"Accepted connection from {client_addr}")

                # Handle each client in a separate thread
                client_thread = threading.Thread(
                    target=self._handle_client,
                    args=(client_socket, client_addr),
                    daemon=True
                )
                client_thread.start()

            except OSError as e:
                if self.running:
                    logger.error(f"Error accepting connection: {e}")

    def start_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.start, name="tfs-data-server", daemon=True)
        thread.start()
        self.ready.wait(timeout=10)
        return thread

    def stop(self):
        """Stop the data server"""
        self.running = False
        if self.server_socket:
            try:
                self.server_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # not connected; close() below still releases it
            self.server_socket.close()
        logger.info("Data server stopped")

    def _handle_client(self, client_socket: socket.socket, client_addr):
        """Serve requests from one client until it disconnects"""
        protocol = SocketProtocol(client_socket)
        try:
            while True:
                frame = protocol.receive_frame()
                if frame is None:
                    break  # Connection closed

                action = frame.get("action")
                if action == "read":
                    self._handle_read(protocol, frame)
                else:
                    protocol.send_frame(self._process_request(frame))

        except (OSError, ValueError) as e:
            logger.warning(f"Connection to {client_addr} failed: {e}")
        finally:
            protocol.close()
            logger.debug(f"Connection closed: {client_addr}")

    def _process_request(self, request: Dict) -> Dict:
        action = request.get("action")
        if action == "health":
            return {"ok": True}
        if action == "get_file":
            path = str(request.get("path") or "")
            try:
                info = self.master_info.get_client_file_info(path)
            except InvalidPathError as e:
                return {"ok": False, "error": "invalid_path", "message": e.reason}
            if info is None:
                return {"ok": False, "error": "file_not_found", "message": path}
            return {"ok": True, "file": info.to_dict()}
        return {"ok": False, "error": "unknown_action", "message": str(action)}

    def _handle_read(self, protocol: SocketProtocol, request: Dict):
        path = str(request.get("path") or "")
        try:
            read_type = ReadType(request.get("read_type", ReadType.NO_CACHE.value))
            handle, length = self.block_store.open(path, read_type)
        except ValueError:
            protocol.send_frame({"ok": False, "error": "bad_request",
                                 "message": f"unknown read_type {request.get('read_type')}"})
            return
        except InvalidPathError as e:
            protocol.send_frame({"ok": False, "error": "invalid_path", "message": e.reason})
            return
        except FileDoesNotExistError:
            protocol.send_frame({"ok": False, "error": "file_not_found", "message": path})
            return

        with handle:
            protocol.send_frame({"ok": True, "length": length})
            protocol.send_stream(handle, length, self.buffer_size)
        logger.debug(f"Served {length} bytes of {path} ({read_type.value})")
