""" Tests for storage collaborators and the configuration repository """

import json
import os

import pytest

from ldapconf import StorageFailure
from ldapconf.models import ConfigurationRecord
from ldapconf.storage import ConfigRepository, DirectoryStorage, MemoryStorage


class BrokenStorage(MemoryStorage):
    """Storage that fails every operation, as an unavailable backend would"""

    def get(self, key):
        raise ConnectionError("storage unavailable")

    def put(self, key, value):
        raise ConnectionError("storage unavailable")


@pytest.fixture(name="storage", params=["memory", "directory"])
def fixture_storage(request, tmp_path):
    """Each storage collaborator shipped with ldapconf"""
    if request.param == "memory":
        return MemoryStorage()
    return DirectoryStorage(str(tmp_path / "storage"))


def test_storage_get_missing(storage):
    """Missing keys read as None"""
    assert storage.get("config") is None


def test_storage_put_replaces(storage):
    """A put replaces the previous value"""
    storage.put("config", b"first")
    storage.put("config", b"second")
    assert storage.get("config") == b"second"


def test_directory_storage_no_leftovers(tmp_path):
    """Only the key's file is left behind after a write"""
    storage = DirectoryStorage(str(tmp_path))
    storage.put("config", b"{}")
    assert os.listdir(tmp_path) == ["config"]


@pytest.mark.parametrize("key", ["", "../config", ".hidden"])
def test_directory_storage_bad_key(tmp_path, key):
    """Keys can't escape the storage directory"""
    with pytest.raises(StorageFailure):
        DirectoryStorage(str(tmp_path)).put(key, b"{}")


def test_load_not_configured(storage):
    """Nothing stored means not configured, not an error"""
    assert ConfigRepository(storage).load() is None


def test_save_load(storage):
    """A saved record loads back unchanged"""
    repository = ConfigRepository(storage)
    record = ConfigurationRecord(
        url="ldaps://ldap.example.org",
        userdn="ou=People,dc=example,dc=org",
        groupdn="ou=Groups,dc=example,dc=org",
        upndomain="example.org",
        userattr="uid",
        certificate="-----BEGIN CERTIFICATE-----\n...",
        insecure_tls=True,
        starttls=False,
    )
    repository.save(record)
    assert repository.load() == record


def test_save_shape():
    """The record is stored as one JSON object under a single key"""
    storage = MemoryStorage()
    ConfigRepository(storage).save(ConfigurationRecord(userattr="uid"))
    assert list(storage.data.keys()) == ["config"]
    assert json.loads(storage.data["config"]) == {
        "url": "ldap://127.0.0.1",
        "userdn": "",
        "groupdn": "",
        "upndomain": "",
        "userattr": "uid",
        "certificate": "",
        "insecure_tls": False,
        "starttls": False,
    }


def test_load_applies_defaults():
    """Fields missing from the stored record take their defaults"""
    storage = MemoryStorage({"config": b'{"groupdn": "ou=Groups,dc=example,dc=org"}'})
    record = ConfigRepository(storage).load()
    assert record.url == "ldap://127.0.0.1"
    assert record.userattr == "cn"
    assert record.groupdn == "ou=Groups,dc=example,dc=org"


@pytest.mark.parametrize(
    "raw",
    [
        b"not json",
        b"[]",
        b'{"insecure_tls": "yes"}',
        b'{"starttls": 1}',
        b'{"url": 389}',
    ],
)
def test_load_undecodable(raw):
    """A corrupt stored record is a storage failure"""
    with pytest.raises(StorageFailure) as excinfo:
        ConfigRepository(MemoryStorage({"config": raw})).load()
    assert "could not decode configuration" in excinfo.value.message


def test_load_null_keeps_default():
    """Stored nulls leave the defaults in place"""
    storage = MemoryStorage(
        {"config": b'{"url": null, "userattr": null, "userdn": "ou=People"}'}
    )
    record = ConfigRepository(storage).load()
    assert record.url == "ldap://127.0.0.1"
    assert record.userattr == "cn"
    assert record.userdn == "ou=People"


def test_storage_errors_wrapped():
    """Errors raised by the storage collaborator become StorageFailure"""
    repository = ConfigRepository(BrokenStorage())
    with pytest.raises(StorageFailure) as excinfo:
        repository.load()
    assert "storage unavailable" in excinfo.value.message
    with pytest.raises(StorageFailure):
        repository.save(ConfigurationRecord())
