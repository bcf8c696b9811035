import io

import pytest

from shared.exceptions import FileDoesNotExistError
from shared.types import ReadType


def test_no_cache_read_bypasses_cache_tier(block_store):
    block_store.put("/a/file.bin", b"payload")
    handle, length = block_store.open("/a/file.bin", ReadType.NO_CACHE)
    with handle:
        assert handle.read() == b"payload"
    assert length == 7
    assert not block_store.is_cached("/a/file.bin")


def test_cache_read_fills_cache_tier(block_store):
    block_store.put("/a/file.bin", b"payload")
    handle, _ = block_store.open("/a/file.bin", ReadType.CACHE)
    handle.close()
    assert block_store.is_cached("/a/file.bin")


def test_no_cache_read_sees_authoritative_copy(block_store):
    block_store.put("/f", b"old")
    block_store.open("/f", ReadType.CACHE)[0].close()
    # rewrite under storage behind the cache's back
    (block_store.underfs_root / "f").write_bytes(b"new!")

    handle, length = block_store.open("/f", ReadType.NO_CACHE)
    with handle:
        assert handle.read() == b"new!"
    assert length == 4


def test_put_evicts_stale_cache(block_store):
    block_store.put("/f", b"one")
    block_store.open("/f", ReadType.CACHE)[0].close()
    block_store.put("/f", io.BytesIO(b"two"))
    assert not block_store.is_cached("/f")


def test_missing_block(block_store):
    with pytest.raises(FileDoesNotExistError):
        block_store.open("/missing")


def test_folder_has_no_block(block_store):
    block_store.put("/dir/f", b"x")
    with pytest.raises(FileDoesNotExistError):
        block_store.open("/dir")


def test_remove_drops_both_copies(block_store):
    block_store.put("/gone", b"bytes")
    handle, _ = block_store.open("/gone", ReadType.CACHE)
    handle.close()

    block_store.remove("/gone")

    assert not block_store.is_cached("/gone")
    with pytest.raises(FileDoesNotExistError):
        block_store.open("/gone")
