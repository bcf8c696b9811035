import socket

import pytest

from client.storage_client import StorageClient, format_address, parse_address
from shared.exceptions import ConnectionFailureError, FileDoesNotExistError, TfsError, TransferError
from shared.types import NetAddress, ReadType


def _uri(data_server):
    return format_address(NetAddress("127.0.0.1", data_server.port))


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_parse_address_round_trip():
    assert parse_address("tfs://10.0.1.1:29998") == NetAddress("10.0.1.1", 29998)
    with pytest.raises(ValueError):
        parse_address("http://10.0.1.1:29998")


def test_connect_failure_is_connection_failure():
    client = StorageClient(timeout_seconds=2)
    with pytest.raises(ConnectionFailureError):
        client.connect(f"tfs://127.0.0.1:{_free_port()}")


def test_read_whole_file(data_server, load_file):
    data = bytes(range(256)) * 100
    load_file("/bin/blob", data)

    with StorageClient().connect(_uri(data_server)) as connection:
        assert connection.health()
        remote_file = connection.get_file("/bin/blob")
        assert remote_file.length() == len(data)
        with remote_file.get_in_stream(ReadType.NO_CACHE) as stream:
            assert stream.read() == data


def test_get_file_missing_returns_none(data_server):
    with StorageClient().connect(_uri(data_server)) as connection:
        assert connection.get_file("/missing") is None


def test_open_vanished_block_is_not_found(data_server, master_info):
    # metadata without bytes, as if the block disappeared after the lookup
    master_info.create_file("/ghost", 10)
    with StorageClient().connect(_uri(data_server)) as connection:
        remote_file = connection.get_file("/ghost")
        with pytest.raises(FileDoesNotExistError):
            remote_file.get_in_stream()


def test_connection_serves_sequential_requests(data_server, load_file):
    load_file("/one", b"1" * 10)
    load_file("/two", b"2" * 20)
    with StorageClient().connect(_uri(data_server)) as connection:
        for path, expected in (("/one", b"1" * 10), ("/two", b"2" * 20)):
            with connection.get_file(path).get_in_stream() as stream:
                assert stream.read() == expected


def test_cache_read_populates_worker_cache(data_server, load_file, block_store):
    load_file("/cached", b"abc")
    with StorageClient().connect(_uri(data_server)) as connection:
        with connection.get_file("/cached").get_in_stream(ReadType.CACHE) as stream:
            assert stream.read() == b"abc"
    assert block_store.is_cached("/cached")


def test_no_cache_read_leaves_worker_cache_alone(data_server, load_file, block_store):
    load_file("/uncached", b"abc")
    with StorageClient().connect(_uri(data_server)) as connection:
        with connection.get_file("/uncached").get_in_stream(ReadType.NO_CACHE) as stream:
            stream.read()
    assert not block_store.is_cached("/uncached")


def test_abandoned_stream_poisons_connection(data_server, load_file):
    load_file("/big", b"x" * 100_000)
    connection = StorageClient().connect(_uri(data_server))
    try:
        stream = connection.get_file("/big").get_in_stream()
        stream.read(10)
        stream.close()
        with pytest.raises(TfsError):
            connection.get_file("/big")
    finally:
        connection.close()


def test_short_stream_is_transfer_error(data_server, load_file):
    load_file("/short", b"y" * 50)
    connection = StorageClient().connect(_uri(data_server))
    stream = connection.get_file("/short").get_in_stream()
    stream.length = stream.remaining = 60  # expect more than the worker will send
    received = b""
    while len(received) < 50:
        received += stream.read(50 - len(received))
    assert received == b"y" * 50
    connection.protocol.sock.shutdown(socket.SHUT_WR)
    with pytest.raises(TransferError):
        stream.read(10)
    connection.close()


def test_close_is_idempotent(data_server):
    connection = StorageClient().connect(_uri(data_server))
    connection.close()
    connection.close()
    assert connection.closed
