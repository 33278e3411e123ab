# SPDX-License-Identifier: MIT
"""Detached Ed25519 signatures for release artifacts.

Two signing modes are supported:

``ed25519ph`` (default)
    The artifact is streamed through SHA-512 and the pre-hash is signed with
    Ed25519ph (RFC 8032), binding the product identifier as the signing
    context. Memory use does not depend on the artifact size, and a
    signature made for one product does not verify for another.

``ed25519``
    The whole artifact is read into memory and signed with pure Ed25519.
    Kept for compatibility with verifiers that cannot do Ed25519ph; a
    warning is logged whenever it is used.

Signing keys are hex strings of the 64-byte Ed25519 private key
(32-byte seed followed by the 32-byte public key).
"""

from __future__ import annotations

import base64
import binascii
import hmac
import logging
from enum import Enum
from typing import BinaryIO

from Crypto.Hash import SHA512
from Crypto.PublicKey.ECC import EccKey
from Crypto.Signature import eddsa

from .artifact import rewinding
from .checksum import CHUNK_SIZE, encode_digest
from .errors import SigningError, SigningKeyError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 64
SEED_SIZE = 32


class SigningAlgorithm(str, Enum):
    """Closed set of supported signing modes."""

    ED25519PH = "ed25519ph"
    ED25519 = "ed25519"

    @classmethod
    def parse(cls, value: "str | SigningAlgorithm") -> "SigningAlgorithm":
        """Return the algorithm named by ``value``.

        Raises:
            UnsupportedAlgorithmError: If ``value`` names no known mode
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedAlgorithmError(str(value)) from None

    def __str__(self) -> str:
        return self.value


DEFAULT_ALGORITHM = SigningAlgorithm.ED25519PH


def decode_signing_key(encoded: str) -> bytes:
    """Decode a hex-encoded Ed25519 private key.

    Surrounding whitespace, such as the trailing newline of a key file, is
    ignored.

    Raises:
        SigningKeyError: If the value is not hex, is not 64 bytes long, or its
            public half does not belong to its seed
    """
    try:
        key = bytes.fromhex(encoded.strip())
    except ValueError as e:
        raise SigningKeyError(f"bad signing key ({str(e).lower()})") from e

    if len(key) != PRIVATE_KEY_SIZE:
        raise SigningKeyError(
            f"bad signing key length (got {len(key)} expected {PRIVATE_KEY_SIZE})",
            actual=len(key),
            expected=PRIVATE_KEY_SIZE,
        )

    derived = _private_key(key).public_key().export_key(format="raw")
    if not hmac.compare_digest(derived, key[SEED_SIZE:]):
        raise SigningKeyError("bad signing key (public key does not match seed)")

    return key


def _private_key(key: bytes) -> EccKey:
    try:
        return eddsa.import_private_key(key[:SEED_SIZE])
    except ValueError as e:
        raise SigningKeyError(f"bad signing key ({str(e).lower()})") from e


def _signer(key: EccKey, context: bytes):
    try:
        return eddsa.new(key, "rfc8032", context=context)
    except ValueError as e:
        raise SigningError(f"signing context is not acceptable ({str(e).lower()})") from e


def _sha512_prehash(stream: BinaryIO):
    prehash = SHA512.new()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        prehash.update(chunk)
    return prehash


def public_key_from_signing_key(encoded: str) -> bytes:
    """Return the raw 32-byte public key for a hex-encoded private key."""
    key = _private_key(decode_signing_key(encoded))
    return key.public_key().export_key(format="raw")


def compute_signature(
    encoded_key: str,
    stream: BinaryIO,
    *,
    context: str,
    algorithm: "SigningAlgorithm | str" = DEFAULT_ALGORITHM,
) -> str:
    """Sign the full content of ``stream``.

    The key and algorithm are validated before the stream is touched. The
    stream is read from byte 0 and reset to 0 afterwards, even on failure.

    Args:
        encoded_key: Hex-encoded 64-byte Ed25519 private key
        stream: Seekable binary stream of the artifact
        context: Domain-separation string, normally the product identifier
            (only used by ``ed25519ph``)
        algorithm: Signing mode

    Returns:
        Padding-free base64 signature

    Raises:
        SigningKeyError: If the key is malformed
        UnsupportedAlgorithmError: If the algorithm is unknown
        SigningError: If the signing operation fails
        OSError: If the stream cannot be read
    """
    key = decode_signing_key(encoded_key)
    algorithm = SigningAlgorithm.parse(algorithm)
    private_key = _private_key(key)

    if algorithm is SigningAlgorithm.ED25519PH:
        signer = _signer(private_key, context.encode("utf-8"))
        with rewinding(stream) as f:
            prehash = _sha512_prehash(f)
        logger.debug("signing sha512 prehash %s", prehash.hexdigest()[:16])
        message = prehash
    elif algorithm is SigningAlgorithm.ED25519:
        logger.warning(
            "using ed25519 to sign large files is not recommended (use ed25519ph instead)"
        )
        signer = _signer(private_key, b"")
        with rewinding(stream) as f:
            message = f.read()
    else:
        raise UnsupportedAlgorithmError(str(algorithm))

    try:
        signature = signer.sign(message)
    except (TypeError, ValueError) as e:
        raise SigningError(f"signing failed ({str(e).lower()})") from e

    return encode_digest(signature)


def _decode_signature(signature: str) -> bytes:
    padded = signature + "=" * (-len(signature) % 4)
    return base64.b64decode(padded, validate=True)


def verify_signature(
    public_key: bytes,
    stream: BinaryIO,
    signature: str,
    *,
    context: str,
    algorithm: "SigningAlgorithm | str" = DEFAULT_ALGORITHM,
) -> bool:
    """Check a padding-free base64 signature against the content of ``stream``.

    Returns False for a signature that does not verify, including one made
    under a different context. The stream is reset to byte 0 afterwards.
    """
    algorithm = SigningAlgorithm.parse(algorithm)
    try:
        raw_signature = _decode_signature(signature)
        key = eddsa.import_public_key(public_key)
    except (binascii.Error, ValueError):
        return False

    if algorithm is SigningAlgorithm.ED25519PH:
        verifier = _signer(key, context.encode("utf-8"))
        with rewinding(stream) as f:
            message = _sha512_prehash(f)
    elif algorithm is SigningAlgorithm.ED25519:
        verifier = _signer(key, b"")
        with rewinding(stream) as f:
            message = f.read()
    else:
        raise UnsupportedAlgorithmError(str(algorithm))

    try:
        verifier.verify(message, raw_signature)
    except ValueError:
        return False
    return True
