# SPDX-License-Identifier: MIT
"""Checksum utilities for release artifacts.

Checksums are SHA-512 digests of the full artifact, encoded as standard
base64 without ``=`` padding.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import BinaryIO

from .artifact import rewinding

CHUNK_SIZE = 64 * 1024


def encode_digest(digest: bytes) -> str:
    """Encode raw bytes as padding-free standard base64."""
    return base64.b64encode(digest).rstrip(b"=").decode("ascii")


def sha512_stream(stream: BinaryIO) -> bytes:
    """Return the raw SHA-512 digest of the remaining bytes in ``stream``."""
    sha512 = hashlib.sha512()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        sha512.update(chunk)
    return sha512.digest()


def compute_checksum(stream: BinaryIO) -> str:
    """Compute the checksum of a seekable binary stream.

    The whole stream is read from byte 0 exactly once. Its position is reset
    to 0 afterwards, including when reading fails.

    Args:
        stream: Seekable binary file-like object

    Returns:
        Padding-free base64 SHA-512 digest (86 characters)

    Raises:
        OSError: If the stream cannot be fully read
    """
    with rewinding(stream) as f:
        return encode_digest(sha512_stream(f))


def verify_checksum(stream: BinaryIO, expected: str) -> bool:
    """Return True if ``stream`` hashes to the ``expected`` checksum."""
    return hmac.compare_digest(compute_checksum(stream), expected.rstrip("="))
