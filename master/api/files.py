"""
Master Files API

Namespace lookups for remote components (web gateways, loaders) and the
address of the data plane they should stream bytes from.

Endpoints:
- GET /files/info?path=...: file attributes under the canonical path
- POST /files: register file metadata
- POST /files/symlink: create a symbolic link
- GET /master/address: data-plane host/port
"""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
import logging

from shared.exceptions import FileAlreadyExistsError, InvalidPathError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


# Will be injected by service.py
_master_info = None

def set_master_info(master_info):
    """Set MasterInfo reference (called by service.py)"""
    global _master_info
    _master_info = master_info


def _require_master_info():
    if _master_info is None:
        raise HTTPException(status_code=503, detail="Master not initialized")
    return _master_info


class FileInfoResponse(BaseModel):
    id: int
    name: str
    path: str
    length: int
    is_folder: bool
    creation_time_ms: int


class FileCreate(BaseModel):
    path: str
    length: int = Field(ge=0)


class SymlinkCreate(BaseModel):
    path: str
    target: str


class AddressResponse(BaseModel):
    host: str
    port: int


@router.get("/files/info", response_model=FileInfoResponse)
def get_file_info(path: str = Query("/")):
    master_info = _require_master_info()
    try:
        info = master_info.get_client_file_info(path)
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    if info is None:
        raise HTTPException(status_code=404, detail=path)
    return info.to_dict()


@router.post("/files", response_model=FileInfoResponse)
def create_file(req: FileCreate):
    master_info = _require_master_info()
    try:
        return master_info.create_file(req.path, req.length).to_dict()
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except FileAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=f"{e} already exists")


@router.post("/files/symlink", response_model=FileInfoResponse)
def create_symlink(req: SymlinkCreate):
    master_info = _require_master_info()
    try:
        return master_info.create_symlink(req.path, req.target).to_dict()
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except FileAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=f"{e} already exists")


@router.get("/master/address", response_model=AddressResponse)
def get_master_address():
    address = _require_master_info().get_master_address()
    return {"host": address.host, "port": address.port}
