"""
MasterInfo - namespace metadata service

Answers "does this path exist and where does it really live" for every other
component. Lookups validate the path, reduce it to canonical form and follow
symbolic links, so the path in the returned ClientFileInfo is authoritative
and may differ from the one that was asked for.

MasterInfo holds no per-request state; each call opens its own session, so
one instance is safe to share between request threads.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from master.models import Inode, InodeType
from shared.exceptions import FileAlreadyExistsError, InvalidPathError
from shared.types import ClientFileInfo, NetAddress
from shared import uri

logger = logging.getLogger(__name__)

MAX_SYMLINK_DEPTH = 8


def to_client_file_info(inode: Inode) -> ClientFileInfo:
    created = inode.created_at or datetime.utcnow()
    return ClientFileInfo(
        id=inode.id,
        name=inode.name,
        path=inode.path,
        length=int(inode.length or 0),
        is_folder=inode.is_folder,
        creation_time_ms=int(created.timestamp() * 1000),
    )


class MasterInfo:
    """Namespace lookups and updates backed by the inode table"""

    def __init__(self, session_factory, master_address: NetAddress):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker for the namespace database
            master_address: host/port of the data plane served alongside this master
        """
        self.session_factory = session_factory
        self.master_address = master_address
        self._ensure_root()

    def get_master_address(self) -> NetAddress:
        return self.master_address

    def get_client_file_info(self, path: str) -> Optional[ClientFileInfo]:
        """
        Look up a path and return its attributes under the canonical path.

        Returns:
            ClientFileInfo, or None when nothing exists at the (resolved) path

        Raises:
            InvalidPathError: the path breaks the namespace rules, or resolves
                through too many symbolic links
        """
        current = uri.canonicalize(path)
        db = self.session_factory()
        try:
            for _ in range(MAX_SYMLINK_DEPTH + 1):
                inode = self._get_inode(db, current)
                if inode is None:
                    logger.debug(f"No inode for {current} (requested {path})")
                    return None
                if inode.inode_type != InodeType.SYMLINK:
                    return to_client_file_info(inode)
                current = uri.canonicalize(inode.symlink_target)
            raise InvalidPathError(path, "too many levels of symbolic links")
        finally:
            db.close()

    def create_file(self, path: str, length: int) -> ClientFileInfo:
        """Register a file of `length` bytes, creating missing parent folders"""
        if length < 0:
            raise ValueError("length must be >= 0")
        return self._create(path, InodeType.FILE, length=length)

    def mkdirs(self, path: str) -> ClientFileInfo:
        canonical = uri.canonicalize(path)
        db = self.session_factory()
        try:
            inode = self._mkdirs(db, canonical)
            db.commit()
            return to_client_file_info(inode)
        finally:
            db.close()

    def create_symlink(self, path: str, target: str) -> ClientFileInfo:
        return self._create(path, InodeType.SYMLINK, symlink_target=uri.canonicalize(target))

    # ------------------------------------------------------------------

    def _create(self, path: str, inode_type: InodeType, length: int = 0,
                symlink_target: Optional[str] = None) -> ClientFileInfo:
        canonical = uri.canonicalize(path)
        if uri.is_root(canonical):
            raise FileAlreadyExistsError(canonical)
        db = self.session_factory()
        try:
            if self._get_inode(db, canonical) is not None:
                raise FileAlreadyExistsError(canonical)
            parent = self._mkdirs(db, uri.get_parent(canonical))
            inode = Inode(
                path=canonical,
                name=uri.get_name(canonical),
                parent_id=parent.id,
                inode_type=inode_type,
                length=length,
                symlink_target=symlink_target,
            )
            db.add(inode)
            db.commit()
            db.refresh(inode)
            logger.info(f"Created {inode_type.value} {canonical}")
            return to_client_file_info(inode)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _mkdirs(self, db: Session, canonical: str) -> Inode:
        """Return the folder at `canonical`, creating it and its ancestors if needed"""
        inode = self._get_inode(db, canonical)
        if inode is not None:
            if not inode.is_folder:
                raise InvalidPathError(canonical, "a parent component is not a folder")
            return inode
        parent = self._mkdirs(db, uri.get_parent(canonical))
        inode = Inode(
            path=canonical,
            name=uri.get_name(canonical),
            parent_id=parent.id,
            inode_type=InodeType.FOLDER,
        )
        db.add(inode)
        db.flush()
        return inode

    def _get_inode(self, db: Session, canonical: str) -> Optional[Inode]:
        return db.scalars(select(Inode).where(Inode.path == canonical)).first()

    def _ensure_root(self):
        db = self.session_factory()
        try:
            if self._get_inode(db, uri.ROOT) is None:
                db.add(Inode(path=uri.ROOT, name="", inode_type=InodeType.FOLDER))
                db.commit()
        finally:
            db.close()
