"""
SHA-1 helpers for the Pwned Passwords range lookup.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import hashlib

SHA1_DIGEST_LENGTH = 20


def sha1(data: bytes) -> bytes:
    """Return the raw 20-byte SHA-1 digest of data."""
    return hashlib.sha1(data).digest()


def digest(text: str) -> bytes | None:
    """Return the raw SHA-1 digest of the UTF-8 encoded text.

    Returns None when the text cannot be encoded as UTF-8 (for example
    a string holding a lone surrogate).
    """
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return sha1(data)


def sha1_hex(text: str) -> str | None:
    """Return the lowercase hex SHA-1 of the UTF-8 encoded text, or None."""
    raw = digest(text)
    return raw.hex() if raw is not None else None
