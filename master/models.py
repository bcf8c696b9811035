from sqlalchemy import Column, Integer, BigInteger, String, Enum, ForeignKey, DateTime
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime
import enum

Base = declarative_base()

# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class InodeType(str, enum.Enum):
    """Kind of namespace entry"""
    FILE = "FILE"
    FOLDER = "FOLDER"
    SYMLINK = "SYMLINK"

# ============================================================================
# CORE MODEL DEFINITIONS
# ============================================================================

class Inode(Base):
    """One entry of the namespace, keyed by its canonical path"""
    __tablename__ = "inodes"
    
    id = Column(Integer, primary_key=True)
    path = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("inodes.id"), nullable=True)
    inode_type = Column(Enum(InodeType), nullable=False, default=InodeType.FILE)
    
    length = Column(BigInteger, default=0)  # bytes, files only
    symlink_target = Column(String, nullable=True)  # absolute path, symlinks only
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    parent = relationship("Inode", remote_side=[id], back_populates="children")
    children = relationship("Inode", back_populates="parent")

    @property
    def is_folder(self) -> bool:
        return self.inode_type == InodeType.FOLDER
