from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any
import enum


class ReadType(str, enum.Enum):
    """How a worker sources the bytes of a read"""
    NO_CACHE = "NO_CACHE"  # authoritative under-storage copy only, cache tier untouched
    CACHE = "CACHE"  # serve from cache tier, populating it on a miss


@dataclass(frozen=True)
class NetAddress:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ClientFileInfo:
    """File attributes as reported by the master"""
    id: int
    name: str
    path: str  # canonical path, may differ from the path that was looked up
    length: int
    is_folder: bool = False
    creation_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ClientFileInfo":
        return cls(
            id=int(payload.get("id", 0) or 0),
            name=str(payload.get("name", "") or ""),
            path=str(payload["path"]),
            length=int(payload.get("length", 0) or 0),
            is_folder=bool(payload.get("is_folder", False)),
            creation_time_ms=int(payload.get("creation_time_ms", 0) or 0),
        )
