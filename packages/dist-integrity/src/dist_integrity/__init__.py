# SPDX-License-Identifier: MIT
"""Integrity metadata for published release artifacts.

This package computes everything the registry needs to know about an
artifact before it is uploaded: the SHA-512 checksum, an optional Ed25519
detached signature, and the validated release descriptor.

Example:
    >>> from dist_integrity import ArtifactFile, ReleaseOptions, build_release
    >>> with ArtifactFile.open("build/app") as artifact:  # doctest: +SKIP
    ...     release = build_release(artifact, ReleaseOptions(version="2.1.0"), product="p")
"""

__version__ = "0.1.0"

from .artifact import ArtifactFile, rewinding
from .checksum import compute_checksum, encode_digest, verify_checksum
from .errors import (
    ArtifactError,
    DistError,
    ReleaseValidationError,
    SigningError,
    SigningKeyError,
    UnsupportedAlgorithmError,
)
from .release import (
    BINARY_FILETYPE,
    CHANNELS,
    ReleaseDescriptor,
    ReleaseOptions,
    build_release,
    parse_constraints,
    parse_release_version,
    read_signing_key,
    resolve_filename,
    resolve_filetype,
)
from .signing import (
    DEFAULT_ALGORITHM,
    PRIVATE_KEY_SIZE,
    SigningAlgorithm,
    compute_signature,
    decode_signing_key,
    public_key_from_signing_key,
    verify_signature,
)

__all__ = [
    # File handle
    "ArtifactFile",
    "rewinding",
    # Checksums
    "compute_checksum",
    "encode_digest",
    "verify_checksum",
    # Signatures
    "SigningAlgorithm",
    "DEFAULT_ALGORITHM",
    "PRIVATE_KEY_SIZE",
    "compute_signature",
    "decode_signing_key",
    "public_key_from_signing_key",
    "verify_signature",
    # Release descriptors
    "ReleaseDescriptor",
    "ReleaseOptions",
    "build_release",
    "parse_constraints",
    "parse_release_version",
    "read_signing_key",
    "resolve_filename",
    "resolve_filetype",
    "BINARY_FILETYPE",
    "CHANNELS",
    # Errors
    "DistError",
    "ArtifactError",
    "ReleaseValidationError",
    "SigningError",
    "SigningKeyError",
    "UnsupportedAlgorithmError",
]
