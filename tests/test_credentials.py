from __future__ import annotations

import json

import pytest

from travel_desk.core.credentials import (
    CredentialStore,
    FileCredentialStore,
    InMemoryCredentialStore,
    normalize_company_id,
)


def test_company_id_normalization():
    assert normalize_company_id('  ObjectId("65f1c0ffee0000000000c0de") ') == "65f1c0ffee0000000000c0de"
    assert normalize_company_id("'65f1c0ffee0000000000c0de'") == "65f1c0ffee0000000000c0de"
    assert normalize_company_id("   ") is None
    assert normalize_company_id(None) is None


def test_in_memory_store():
    store = InMemoryCredentialStore(token=" tok ", company_id='"abc"')
    assert store.get_token() == "tok"
    assert store.get_company_id() == "abc"
    store.clear_token()
    assert store.get_token() is None
    assert store.get_company_id() == "abc"


def test_file_store_round_trip(tmp_path):
    path = tmp_path / "credentials.json"
    store = FileCredentialStore(str(path))
    assert store.get_token() is None
    store.set_token("tok-1")
    store.set_company_id("abc")
    assert json.loads(path.read_text(encoding="utf-8")) == {"token": "tok-1", "companyId": "abc"}

    reopened = FileCredentialStore(str(path))
    assert reopened.get_token() == "tok-1"
    reopened.clear_token()
    assert FileCredentialStore(str(path)).get_token() is None
    assert FileCredentialStore(str(path)).get_company_id() == "abc"


def test_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileCredentialStore(str(path)).get_token() is None


def test_store_backends_must_implement_storage():
    class HalfStore(CredentialStore):
        def _read(self, key):
            return None

    with pytest.raises(TypeError):
        HalfStore()
