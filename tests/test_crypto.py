"""Tests for the SHA-1 helpers."""

import string

import pytest

from hibpkit.crypto import SHA1_DIGEST_LENGTH, digest, sha1, sha1_hex


@pytest.mark.parametrize("text", ["", "password", "pässwörd", "🔑" * 50, "a" * 10000])
def test_hex_digest_is_40_lowercase_hex(text):
    digest = sha1_hex(text)
    assert len(digest) == 40
    assert set(digest) <= set(string.hexdigits.lower())


def test_known_digests():
    assert sha1_hex("password") == "5baa61e4c9b93f3f0682250b6cf8331b7ee68fd8"
    assert sha1_hex("") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_deterministic():
    assert sha1_hex("correct horse") == sha1_hex("correct horse")


def test_raw_digest_length():
    assert len(sha1(b"password")) == SHA1_DIGEST_LENGTH
    assert sha1(b"password").hex() == sha1_hex("password")


def test_text_digest_hashes_utf8_bytes():
    assert digest("pässwörd") == sha1("pässwörd".encode("utf-8"))
    assert len(digest("")) == SHA1_DIGEST_LENGTH
    assert digest("password").hex() == sha1_hex("password")


def test_unencodable_text_has_no_digest():
    assert digest("\ud800") is None
    assert sha1_hex("\ud800") is None
