"""
Shared pytest fixtures: an in-memory master, a temporary block store and a
live data server on an ephemeral port.
"""
from __future__ import annotations

import pytest

from master.database import create_session_factory
from master.master_info import MasterInfo
from shared.types import NetAddress
from worker.block_store import BlockStore
from worker.data_handler import DataServer


@pytest.fixture
def master_info(tmp_path) -> MasterInfo:
    session_factory = create_session_factory(f"sqlite:///{tmp_path / 'master.db'}")
    return MasterInfo(session_factory, NetAddress("127.0.0.1", 0))


@pytest.fixture
def block_store(tmp_path) -> BlockStore:
    return BlockStore(str(tmp_path / "underfs"), str(tmp_path / "cache"))


@pytest.fixture
def data_server(master_info, block_store):
    server = DataServer("127.0.0.1", 0, master_info, block_store, buffer_size=4096)
    server.start_in_background()
    master_info.master_address = NetAddress("127.0.0.1", server.port)
    yield server
    server.stop()


@pytest.fixture
def load_file(master_info, block_store):
    """Put bytes into under storage and register them with the master"""

    def _load(path: str, data: bytes):
        block_store.put(path, data)
        return master_info.create_file(path, len(data))

    return _load
