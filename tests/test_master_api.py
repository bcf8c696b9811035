import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from client.master_client import MasterClient
from master.api import files
from shared.exceptions import FileAlreadyExistsError, InvalidPathError
from shared.types import NetAddress


@pytest.fixture
def api(master_info):
    master_info.master_address = NetAddress("10.0.0.5", 29998)
    files.set_master_info(master_info)
    app = FastAPI()
    app.include_router(files.router)
    yield TestClient(app)
    files.set_master_info(None)


def test_file_info(api, master_info):
    master_info.create_file("/docs/readme.txt", 99)
    resp = api.get("/files/info", params={"path": "/docs//readme.txt"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["path"] == "/docs/readme.txt"
    assert body["length"] == 99
    assert body["is_folder"] is False


def test_file_info_not_found(api):
    assert api.get("/files/info", params={"path": "/missing"}).status_code == 404


def test_file_info_invalid(api):
    assert api.get("/files/info", params={"path": "no-slash"}).status_code == 400


def test_create_file_and_conflict(api):
    resp = api.post("/files", json={"path": "/new/file.bin", "length": 5})
    assert resp.status_code == 200
    assert resp.json()["name"] == "file.bin"
    assert api.post("/files", json={"path": "/new/file.bin", "length": 5}).status_code == 409


def test_create_file_rejects_negative_length(api):
    assert api.post("/files", json={"path": "/neg", "length": -1}).status_code == 422


def test_master_address(api):
    assert api.get("/master/address").json() == {"host": "10.0.0.5", "port": 29998}


def test_uninitialized_master_is_unavailable():
    files.set_master_info(None)
    app = FastAPI()
    app.include_router(files.router)
    assert TestClient(app).get("/master/address").status_code == 503


def test_master_client_against_api(api, master_info):
    client = MasterClient("http://testserver", session=api)
    master_info.create_file("/a/b.txt", 3)

    info = client.get_client_file_info("//a/b.txt")
    assert info.path == "/a/b.txt"
    assert info.length == 3
    assert client.get_client_file_info("/zzz") is None
    assert client.get_master_address() == NetAddress("10.0.0.5", 29998)

    with pytest.raises(InvalidPathError):
        client.get_client_file_info("bad")

    link = client.create_symlink("/latest", "/a/b.txt")
    assert link.path == "/latest"
    assert client.get_client_file_info("/latest").path == "/a/b.txt"

    client.create_file("/c.bin", 7)
    with pytest.raises(FileAlreadyExistsError):
        client.create_file("/c.bin", 7)


def test_invalid_path_detail_is_the_reason(api):
    resp = api.get("/files/info", params={"path": "/a/../b"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "path component '..' is not allowed"


def test_master_client_names_invalid_path_once(api):
    client = MasterClient("http://testserver", session=api)

    with pytest.raises(InvalidPathError) as exc_info:
        client.get_client_file_info("/a/../b")

    assert exc_info.value.reason == "path component '..' is not allowed"
    assert str(exc_info.value) == "/a/../b (path component '..' is not allowed)"
