# SPDX-License-Identifier: MIT
"""Semantic version grammar for release versions.

Only strict SemVer 2.0.0 is accepted: ``MAJOR.MINOR.PATCH`` with optional
pre-release (``-rc.1``) and build metadata (``+build.7``). Prefixed or
truncated forms such as ``v1.0.0`` or ``1.0`` are rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class InvalidVersionError(ValueError):
    """Raised when a version string does not follow semantic versioning.

    Attributes:
        version: The rejected input, unchanged
        reason: Human-readable parser error
    """

    def __init__(self, version: str, reason: str = ""):
        self.version = version
        self.reason = reason or f"Invalid semantic version: {version}"
        super().__init__(self.reason)


@dataclass(frozen=True, slots=True)
class Version:
    """A parsed semantic version.

    ``str(version)`` is the canonical form and round-trips any valid input.
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(version_string: str) -> Version:
    """Parse a semantic version string.

    Args:
        version_string: ``MAJOR.MINOR.PATCH[-prerelease][+build]``

    Returns:
        The parsed Version

    Raises:
        InvalidVersionError: If the string is empty or not valid SemVer

    Examples:
        >>> str(parse_version("2.1.0-rc.1"))
        '2.1.0-rc.1'
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    if not version_string.strip():
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = SEMVER_PATTERN.fullmatch(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )
