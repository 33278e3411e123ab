# SPDX-License-Identifier: MIT
"""Release descriptor assembly.

Turns flag-level inputs into a validated, immutable :class:`ReleaseDescriptor`
ready to be registered. Checks that need no I/O (the version and the signing
key) run before the artifact is hashed or signed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from dist_version import InvalidVersionError, parse_version

from .artifact import ArtifactFile
from .checksum import compute_checksum
from .errors import ReleaseValidationError, SigningKeyError
from .signing import (
    DEFAULT_ALGORITHM,
    SigningAlgorithm,
    compute_signature,
    decode_signing_key,
)

logger = logging.getLogger(__name__)

AUTO_FILETYPE = "auto"
BINARY_FILETYPE = "bin"
CHANNELS = ("stable", "rc", "beta", "alpha", "dev")
DEFAULT_CHANNEL = "stable"


def parse_release_version(value: str) -> str:
    """Validate ``value`` as a semantic version and return its canonical form.

    Raises:
        ReleaseValidationError: Naming the rejected string and the reason
    """
    try:
        version = parse_version(value)
    except InvalidVersionError as e:
        raise ReleaseValidationError(
            f'version "{value}" is not acceptable ({e.reason.lower()})'
        ) from e
    return str(version)


def _extension(filename: str) -> str:
    # Suffix from the last dot of the final path element, dot included.
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


def resolve_filetype(filename: str, filetype: str = AUTO_FILETYPE) -> str:
    """Resolve the release filetype.

    An explicit filetype is used verbatim. ``"auto"`` takes the filename's
    extension (``"app.tar.gz"`` gives ``".gz"``), but an empty or purely
    numeric extension, as in ``"app-1.0.1"``, is treated as a version
    segment and resolves to ``"bin"``.
    """
    if filetype != AUTO_FILETYPE:
        return filetype

    extension = _extension(filename)
    suffix = extension[1:]
    if not suffix or suffix.isdigit():
        return BINARY_FILETYPE
    return extension


def resolve_filename(path: str | os.PathLike[str], override: Optional[str] = None) -> str:
    """Return ``override`` if given, else the basename of ``path``."""
    if override:
        return override
    return Path(os.fspath(path)).name


def parse_constraints(values: Iterable[str]) -> frozenset[str]:
    """Parse entitlement constraints from comma-separated strings.

    >>> sorted(parse_constraints(["a,b", "b"]))
    ['a', 'b']
    """
    constraints: set[str] = set()
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if item:
                constraints.add(item)
    return frozenset(constraints)


def read_signing_key(path: str | os.PathLike[str]) -> str:
    """Read a hex-encoded signing key from a key file (``~`` is expanded).

    Raises:
        SigningKeyError: If the path cannot be expanded or read, or the file
            is not ASCII text
    """
    expanded = os.path.expanduser(os.fspath(path))
    if expanded.startswith("~"):
        raise SigningKeyError("signing-key path is not expandable (cannot resolve home directory)")
    try:
        with open(expanded, "rb") as f:
            content = f.read()
    except OSError as e:
        reason = (e.strerror or str(e)).lower()
        raise SigningKeyError(f"signing-key path is not readable ({reason})") from e

    try:
        return content.decode("ascii")
    except UnicodeDecodeError as e:
        raise SigningKeyError(f"bad signing key ({e.reason})") from e


@dataclass(frozen=True)
class ReleaseOptions:
    """Raw release inputs as supplied by the command line.

    Attributes:
        version: Version string, validated as SemVer
        filename: Filename override (defaults to the artifact basename)
        filetype: Explicit filetype or ``"auto"``
        name: Optional human-readable release name
        description: Optional description (e.g. release notes)
        platform: Target platform, e.g. ``linux/amd64``
        channel: Release channel
        checksum: Pre-computed checksum, skips hashing when set
        signature: Pre-computed signature, skips signing when set
        signing_key_path: Path to a hex-encoded private key file
        signing_key: Inline hex-encoded private key
        signing_algorithm: Signing mode
        entitlements: Comma-separated entitlement identifiers
    """

    version: str
    filename: Optional[str] = None
    filetype: str = AUTO_FILETYPE
    name: Optional[str] = None
    description: Optional[str] = None
    platform: Optional[str] = None
    channel: str = DEFAULT_CHANNEL
    checksum: Optional[str] = None
    signature: Optional[str] = None
    signing_key_path: Optional[str] = None
    signing_key: Optional[str] = None
    signing_algorithm: SigningAlgorithm | str = DEFAULT_ALGORITHM
    entitlements: tuple[str, ...] = ()

    @property
    def has_signing_key(self) -> bool:
        return bool(self.signing_key_path or self.signing_key)

    def resolve_signing_key(self) -> Optional[str]:
        """Return the key material, preferring the key file over the inline key."""
        if self.signing_key_path:
            return read_signing_key(self.signing_key_path)
        return self.signing_key or None


@dataclass(frozen=True)
class ReleaseDescriptor:
    """Immutable release metadata sent to the registry."""

    product: str
    version: str
    filename: str
    filesize: int
    filetype: str
    channel: str
    checksum: str
    platform: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    signature: Optional[str] = None
    constraints: frozenset[str] = field(default_factory=frozenset)

    def to_attributes(self) -> dict[str, Any]:
        attributes: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "filename": self.filename,
            "filesize": self.filesize,
            "filetype": self.filetype,
            "platform": self.platform,
            "channel": self.channel,
            "checksum": self.checksum,
        }
        if self.signature is not None:
            attributes["signature"] = self.signature
        return attributes

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON:API document used to upsert this release."""
        return {
            "data": {
                "type": "releases",
                "attributes": self.to_attributes(),
                "relationships": {
                    "product": {"data": {"type": "products", "id": self.product}},
                    "constraints": {
                        "data": [
                            {
                                "type": "constraints",
                                "relationships": {
                                    "entitlement": {
                                        "data": {"type": "entitlements", "id": entitlement}
                                    }
                                },
                            }
                            for entitlement in sorted(self.constraints)
                        ]
                    },
                },
            }
        }


def build_release(
    artifact: ArtifactFile,
    options: ReleaseOptions,
    *,
    product: str,
) -> ReleaseDescriptor:
    """Resolve ``options`` against ``artifact`` into a ReleaseDescriptor.

    Pre-computed checksum and signature take precedence. Without any key
    material no signature is produced and no signing is attempted.

    Raises:
        ReleaseValidationError: If the version is not valid SemVer
        SigningKeyError: If the key file or key is unusable
        UnsupportedAlgorithmError: If the signing algorithm is unknown
        SigningError: If signing fails
        OSError: If the artifact cannot be read
    """
    filename = resolve_filename(artifact.path, options.filename)
    filetype = resolve_filetype(filename, options.filetype)
    constraints = parse_constraints(options.entitlements)
    version = parse_release_version(options.version)

    signature = options.signature or None
    key: Optional[str] = None
    if signature is None and options.has_signing_key:
        # Reject unusable key material before reading the artifact.
        key = options.resolve_signing_key()
        if key is not None:
            decode_signing_key(key)
            SigningAlgorithm.parse(options.signing_algorithm)

    checksum = options.checksum
    if not checksum:
        checksum = compute_checksum(artifact.stream)
        logger.debug("computed checksum for %s", filename)

    if key is not None:
        signature = compute_signature(
            key,
            artifact.stream,
            context=product,
            algorithm=options.signing_algorithm,
        )
        logger.debug("computed %s signature for %s", options.signing_algorithm, filename)

    return ReleaseDescriptor(
        product=product,
        version=version,
        filename=filename,
        filesize=artifact.size,
        filetype=filetype,
        channel=options.channel,
        checksum=checksum,
        platform=options.platform or None,
        name=options.name or None,
        description=options.description or None,
        signature=signature,
        constraints=constraints,
    )
