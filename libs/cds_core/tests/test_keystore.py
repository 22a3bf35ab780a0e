from __future__ import annotations

import json
from base64 import b64encode

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from cds.errors import (
    InvalidKeyError,
    InvalidKeyLengthError,
    KeyNotFoundError,
    MissingFieldError,
    NoKeyLoadedError,
)
from cds.security.keystore import KeyStore, keystore_from_env

SEED = bytes(range(32))
SEED_B64 = b64encode(SEED).decode("ascii")


def test_load_key_sets_current_and_lists():
    ks = KeyStore()
    identity = ks.load_key("sub.example.org", "k1", SEED_B64)
    assert identity.private_seed == SEED
    assert identity.algorithm == "ed25519"
    assert ks.get_current() == {"key_id": "k1", "subscriber_id": "sub.example.org"}
    assert ks.list_keys() == [{"key_id": "k1", "subscriber_id": "sub.example.org"}]
    assert "k1" in ks and len(ks) == 1


def test_loading_second_key_makes_it_current_and_switch_back():
    ks = KeyStore()
    ks.load_key("sub-a", "k1", SEED_B64)
    ks.load_key("sub-b", "k2", b64encode(b"\x07" * 32).decode("ascii"))
    assert ks.get_current()["key_id"] == "k2"
    assert {k["key_id"] for k in ks.list_keys()} == {"k1", "k2"}

    ks.set_current("k1")
    assert ks.get_current() == {"key_id": "k1", "subscriber_id": "sub-a"}


def test_reload_same_key_id_overwrites():
    ks = KeyStore()
    ks.load_key("sub-a", "k1", SEED_B64)
    ks.load_key("sub-b", "k1", b64encode(b"\x02" * 32).decode("ascii"))
    assert len(ks) == 1
    assert ks.current_identity().subscriber_id == "sub-b"
    assert ks.current_identity().private_seed == b"\x02" * 32


@pytest.mark.parametrize(
    "args,missing",
    [
        (("", "k1", SEED_B64), ["subscriberId"]),
        (("sub", None, SEED_B64), ["keyId"]),
        (("sub", "k1", ""), ["privateKey"]),
        ((None, None, None), ["subscriberId", "keyId", "privateKey"]),
    ],
)
def test_missing_fields(args, missing):
    ks = KeyStore()
    with pytest.raises(MissingFieldError) as ei:
        ks.load_key(*args)
    assert ei.value.fields == missing
    assert ei.value.code == "missing_field"
    assert ks.get_current() is None


def test_31_byte_key_rejected_and_current_unchanged():
    ks = KeyStore()
    ks.load_key("sub", "good", SEED_B64)
    with pytest.raises(InvalidKeyLengthError) as ei:
        ks.load_key("sub", "short", b64encode(b"\x01" * 31).decode("ascii"))
    assert ei.value.length == 31
    assert ks.get_current() == {"key_id": "good", "subscriber_id": "sub"}
    assert "short" not in ks


def test_64_byte_key_rejected():
    ks = KeyStore()
    with pytest.raises(InvalidKeyLengthError):
        ks.load_key("sub", "k", b64encode(b"\x01" * 64).decode("ascii"))


def test_invalid_base64_rejected():
    ks = KeyStore()
    with pytest.raises(InvalidKeyError):
        ks.load_key("sub", "k", "not*base64!")


def test_unpadded_base64_accepted():
    ks = KeyStore()
    ks.load_key("sub", "k", SEED_B64.rstrip("="))
    assert ks.current_identity().private_seed == SEED


def test_set_current_unknown_key():
    ks = KeyStore()
    ks.load_key("sub", "k1", SEED_B64)
    with pytest.raises(KeyNotFoundError):
        ks.set_current("nope")
    assert ks.get_current()["key_id"] == "k1"


def test_clear_empties_store():
    ks = KeyStore()
    ks.load_key("sub", "k1", SEED_B64)
    ks.clear()
    assert ks.get_current() is None
    assert ks.list_keys() == []
    with pytest.raises(NoKeyLoadedError):
        ks.current_identity()


def test_public_key_matches_seed():
    ks = KeyStore()
    ks.load_key("sub", "k1", SEED_B64)
    expected = Ed25519PrivateKey.from_private_bytes(SEED).public_key().public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
    )
    assert ks.public_key_b64() == b64encode(expected).decode("ascii")
    assert ks.public_key_b64("k1") == ks.public_key_b64()
    with pytest.raises(KeyNotFoundError):
        ks.public_key_b64("other")


def test_identity_repr_hides_seed():
    ks = KeyStore()
    identity = ks.load_key("sub", "k1", SEED_B64)
    assert SEED_B64 not in repr(identity)
    assert "private_seed" not in repr(identity)


def test_load_key_file(tmp_path):
    p = tmp_path / "key.json"
    p.write_text(json.dumps({"subscriberId": "sub", "keyId": "k9", "privateKey": SEED_B64}), encoding="utf-8")
    ks = KeyStore()
    ks.load_key_file(str(p))
    assert ks.get_current() == {"key_id": "k9", "subscriber_id": "sub"}


def test_load_key_file_unreadable(tmp_path):
    ks = KeyStore()
    with pytest.raises(InvalidKeyError):
        ks.load_key_file(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(InvalidKeyError):
        ks.load_key_file(str(bad))


def test_keystore_from_env_json(monkeypatch):
    monkeypatch.setenv(
        "CDS_SIGNING_KEY_JSON", json.dumps({"subscriber_id": "env-sub", "key_id": "ek", "private_key": SEED_B64})
    )
    monkeypatch.delenv("CDS_SIGNING_KEY_PATH", raising=False)
    ks = keystore_from_env()
    assert ks.get_current() == {"key_id": "ek", "subscriber_id": "env-sub"}


def test_keystore_from_env_path(monkeypatch, tmp_path):
    p = tmp_path / "key.json"
    p.write_text(json.dumps({"subscriberId": "sub", "keyId": "pk", "privateKey": SEED_B64}), encoding="utf-8")
    monkeypatch.delenv("CDS_SIGNING_KEY_JSON", raising=False)
    monkeypatch.setenv("CDS_SIGNING_KEY_PATH", str(p))
    assert keystore_from_env().get_current()["key_id"] == "pk"


def test_keystore_from_env_empty(monkeypatch):
    monkeypatch.delenv("CDS_SIGNING_KEY_JSON", raising=False)
    monkeypatch.delenv("CDS_SIGNING_KEY_PATH", raising=False)
    ks = keystore_from_env()
    assert len(ks) == 0 and ks.get_current() is None


def test_keystore_from_env_malformed(monkeypatch):
    monkeypatch.setenv("CDS_SIGNING_KEY_JSON", "{not json")
    with pytest.raises(InvalidKeyError):
        keystore_from_env()
