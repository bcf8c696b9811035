import pytest

from shared.exceptions import FileAlreadyExistsError, InvalidPathError


def test_root_exists_as_folder(master_info):
    info = master_info.get_client_file_info("/")
    assert info.path == "/"
    assert info.is_folder


def test_lookup_missing_path_returns_none(master_info):
    assert master_info.get_client_file_info("/nope.txt") is None


def test_create_file_creates_parents(master_info):
    created = master_info.create_file("/data/logs/app.log", 1234)
    assert created.path == "/data/logs/app.log"
    assert created.name == "app.log"
    assert created.length == 1234

    parent = master_info.get_client_file_info("/data/logs")
    assert parent.is_folder


def test_lookup_reports_canonical_path(master_info):
    master_info.create_file("/data/app.log", 10)
    info = master_info.get_client_file_info("//data//app.log/")
    assert info.path == "/data/app.log"
    assert info.length == 10


def test_lookup_follows_symlinks(master_info):
    master_info.create_file("/releases/v2/build.tar", 42)
    master_info.create_symlink("/releases/latest", "/releases/v2/build.tar")

    info = master_info.get_client_file_info("/releases/latest")
    assert info.path == "/releases/v2/build.tar"
    assert info.name == "build.tar"
    assert info.length == 42


def test_dangling_symlink_is_not_found(master_info):
    master_info.create_symlink("/broken", "/missing/target")
    assert master_info.get_client_file_info("/broken") is None


def test_symlink_loop_is_invalid(master_info):
    master_info.create_symlink("/a", "/b")
    master_info.create_symlink("/b", "/a")
    with pytest.raises(InvalidPathError):
        master_info.get_client_file_info("/a")


def test_invalid_path_raises(master_info):
    with pytest.raises(InvalidPathError):
        master_info.get_client_file_info("not/absolute")


def test_create_existing_file_fails(master_info):
    master_info.create_file("/x", 1)
    with pytest.raises(FileAlreadyExistsError):
        master_info.create_file("/x", 2)


def test_file_cannot_be_used_as_folder(master_info):
    master_info.create_file("/plain", 1)
    with pytest.raises(InvalidPathError):
        master_info.create_file("/plain/child", 1)


def test_negative_length_rejected(master_info):
    with pytest.raises(ValueError):
        master_info.create_file("/neg", -1)
