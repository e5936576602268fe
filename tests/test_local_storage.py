"""Tests for the local filesystem storage backend."""

import os

import pytest

from assetvault.errors import InvalidStoragePath, StorageFailure
from assetvault.storage import LocalStorageProvider, Locator, LocatorKind, Outcome


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(tmp_path / "uploads")


def test_upload_returns_the_relative_path(storage):
    locator = storage.upload(b"hello", "1/assets/2/original-1-abcdef.jpg")

    assert locator.kind is LocatorKind.PATH
    assert locator.value == "1/assets/2/original-1-abcdef.jpg"
    assert (storage.root / "1" / "assets" / "2" / "original-1-abcdef.jpg").read_bytes() == b"hello"


@pytest.mark.parametrize("payload", [b"", b"\x00\xff" * 1024, os.urandom(4096)])
def test_upload_then_get_buffer_round_trips(storage, payload):
    locator = storage.upload(payload, "1/assets/2/file.bin")
    assert storage.get_buffer(locator) == payload
    assert storage.exists(locator) is True


def test_upload_overwrites_same_path(storage):
    storage.upload(b"first", "1/assets/2/a.jpg")
    locator = storage.upload(b"second", "1/assets/2/a.jpg")
    assert storage.get_buffer(locator) == b"second"


def test_missing_file_is_absent_not_an_error(storage):
    locator = Locator.path("1/assets/2/missing.jpg")

    result = storage.fetch(locator)

    assert result.outcome is Outcome.NOT_FOUND
    assert storage.get_buffer(locator) is None
    assert storage.exists(locator) is False


def test_delete_is_idempotent(storage):
    locator = storage.upload(b"bytes", "1/assets/2/a.jpg")

    assert storage.delete(locator) is Outcome.OK
    assert storage.delete(locator) is Outcome.NOT_FOUND
    assert storage.delete(Locator.path("9/assets/9/never.jpg")) is Outcome.NOT_FOUND
    assert storage.exists(locator) is False


def test_read_errors_other_than_missing_propagate(storage):
    # A directory where a file is expected is an I/O failure, not "absent"
    (storage.root / "1" / "assets" / "2" / "dir.jpg").mkdir(parents=True)

    with pytest.raises(StorageFailure):
        storage.fetch(Locator.path("1/assets/2/dir.jpg"))


def test_delete_errors_other_than_missing_propagate(storage):
    (storage.root / "1" / "assets" / "2" / "dir.jpg").mkdir(parents=True)

    with pytest.raises(StorageFailure):
        storage.delete(Locator.path("1/assets/2/dir.jpg"))


def test_paths_cannot_escape_the_root(storage):
    with pytest.raises(InvalidStoragePath):
        storage.upload(b"x", "../outside.jpg")
    with pytest.raises(InvalidStoragePath):
        storage.get_buffer(Locator.path("1/../../outside.jpg"))


def test_url_locators_read_as_absent(storage):
    locator = Locator.url("https://cdn.example.com/1/assets/2/a.jpg")

    assert storage.delete(locator) is Outcome.NOT_FOUND
    assert storage.exists(locator) is False
    assert storage.fetch(locator).outcome is Outcome.NOT_FOUND
    assert storage.get_buffer(locator) is None
    assert not any(storage.root.rglob("*"))
