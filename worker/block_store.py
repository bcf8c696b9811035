"""
Block store with an authoritative under-storage tier and a local cache tier.

A file's bytes live at <underfs_root>/<path>. Reads with ReadType.CACHE are
served from <cache_root>/<path>, which is filled from under storage on a miss.
ReadType.NO_CACHE reads never consult or populate the cache tier.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Tuple, Union

from shared.exceptions import FileDoesNotExistError, InvalidPathError
from shared.types import ReadType
from shared import uri

logger = logging.getLogger(__name__)


class BlockStore:
    def __init__(self, underfs_root: str, cache_root: str):
        self.underfs_root = Path(underfs_root).resolve()
        self.cache_root = Path(cache_root).resolve()
        self.underfs_root.mkdir(parents=True, exist_ok=True)
        self.cache_root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Block store initialized: underfs={self.underfs_root}, cache={self.cache_root}")

    def put(self, path: str, data: Union[bytes, BinaryIO]) -> int:
        """Write the authoritative copy of a file; returns its length"""
        target = self._locate(self.underfs_root, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as out:
            if isinstance(data, (bytes, bytearray)):
                out.write(data)
            else:
                shutil.copyfileobj(data, out)
        self.evict(path)
        return target.stat().st_size

    def open(self, path: str, read_type: ReadType = ReadType.NO_CACHE) -> Tuple[BinaryIO, int]:
        """
        Open a file for sequential reading.

        Returns:
            (binary file object, length in bytes); the caller closes the file

        Raises:
            FileDoesNotExistError: no block exists for the path
        """
        source = self._locate(self.underfs_root, path)
        if not source.is_file():
            raise FileDoesNotExistError(path)

        if read_type == ReadType.CACHE:
            cached = self._locate(self.cache_root, path)
            if not cached.is_file():
                self._fill_cache(source, cached)
                logger.debug(f"Cache fill for {path}")
            source = cached

        handle = open(source, "rb")
        return handle, os.fstat(handle.fileno()).st_size

    def is_cached(self, path: str) -> bool:
        return self._locate(self.cache_root, path).is_file()

    def evict(self, path: str) -> None:
        cached = self._locate(self.cache_root, path)
        if cached.is_file():
            cached.unlink()

    def remove(self, path: str) -> None:
        """Drop both copies of a file"""
        self.evict(path)
        self._locate(self.underfs_root, path).unlink(missing_ok=True)

    def _fill_cache(self, source: Path, cached: Path) -> None:
        cached.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=cached.parent, prefix=".fill-")
        try:
            with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
                shutil.copyfileobj(src, out)
            os.replace(tmp_name, cached)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _locate(self, root: Path, path: str) -> Path:
        canonical = uri.canonicalize(path)
        target = (root / canonical.lstrip(uri.SEPARATOR)).resolve()
        if target != root and root not in target.parents:
            raise InvalidPathError(path, "path escapes the storage root")
        return target
