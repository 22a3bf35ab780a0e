from __future__ import annotations

from base64 import b64decode, b64encode

import pytest

from cds.crypto.blake2b_hash import blake2b_512, compute_digest, digest_header_value

EMPTY_BLAKE2B_512 = bytes.fromhex(
    "786a02f742015903c6c6fd852552d272912f4740e15847618a86e217f71f5419"
    "d25e1031afee585313896444934eb04b903a685b1448b755d56f701afe9be2ce"
)


def test_known_vector_empty_input():
    assert blake2b_512(b"") == EMPTY_BLAKE2B_512
    assert compute_digest("") == b64encode(EMPTY_BLAKE2B_512).decode("ascii")


def test_digest_is_64_bytes_and_deterministic():
    body = '{"context":{"action":"discover"},"message":{"text_search":"driver"}}'
    d1 = compute_digest(body)
    d2 = compute_digest(body)
    assert d1 == d2
    assert len(b64decode(d1)) == 64


def test_str_and_utf8_bytes_agree():
    body = '{"name":"Chennai–Bengaluru"}'
    assert compute_digest(body) == compute_digest(body.encode("utf-8"))


def test_single_byte_change_changes_digest():
    assert compute_digest(b'{"a":1}') != compute_digest(b'{"a":2}')


def test_header_value_prefix():
    v = digest_header_value(b"{}")
    assert v.startswith("BLAKE-512=")
    assert v[len("BLAKE-512="):] == compute_digest(b"{}")


def test_rejects_non_bytes():
    with pytest.raises(TypeError):
        blake2b_512("text")  # type: ignore[arg-type]
