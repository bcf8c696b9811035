"""
Master Client

HTTP client for the master's namespace API. Offers the same lookup interface
as master.master_info.MasterInfo, so a web gateway can run in-process with the
master or as a separate service pointed at it.
"""

import logging
from typing import Any, Dict, Optional

import requests

from shared.config import CLIENT_TIMEOUT_SECONDS, MASTER_BASE_URL
from shared.exceptions import (
    ConnectionFailureError,
    FileAlreadyExistsError,
    InvalidPathError,
    TfsError,
)
from shared.types import ClientFileInfo, NetAddress

logger = logging.getLogger(__name__)


class MasterClient:
    """
    Client for the master Files API.

    Usage:
        master = MasterClient("http://10.0.1.1:19998")
        info = master.get_client_file_info("/logs/app.log")
        address = master.get_master_address()
    """

    def __init__(self, base_url: str = MASTER_BASE_URL, timeout_seconds: float = CLIENT_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _call(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Master request {method} {path} failed: {e}")
            raise ConnectionFailureError(self.base_url, str(e)) from e

    @staticmethod
    def _detail(resp: requests.Response) -> str:
        try:
            payload = resp.json()
        except ValueError:
            return resp.text
        if isinstance(payload, dict):
            return str(payload.get("detail") or payload)
        return str(payload)

    def _check(self, resp: requests.Response, path: str) -> Dict[str, Any]:
        if 200 <= resp.status_code < 300:
            return resp.json()
        detail = self._detail(resp)
        if resp.status_code == 400:
            raise InvalidPathError(path, detail)
        if resp.status_code == 409:
            raise FileAlreadyExistsError(path)
        raise TfsError(f"HTTP {resp.status_code}: {detail}")

    def get_client_file_info(self, path: str) -> Optional[ClientFileInfo]:
        resp = self._call("GET", "/files/info", params={"path": path})
        if resp.status_code == 404:
            return None
        return ClientFileInfo.from_dict(self._check(resp, path))

    def get_master_address(self) -> NetAddress:
        payload = self._check(self._call("GET", "/master/address"), "/")
        return NetAddress(str(payload["host"]), int(payload["port"]))

    def create_file(self, path: str, length: int) -> ClientFileInfo:
        resp = self._call("POST", "/files", json={"path": path, "length": length})
        return ClientFileInfo.from_dict(self._check(resp, path))

    def create_symlink(self, path: str, target: str) -> ClientFileInfo:
        resp = self._call("POST", "/files/symlink", json={"path": path, "target": target})
        return ClientFileInfo.from_dict(self._check(resp, path))
