# SPDX-License-Identifier: MIT
"""Semantic version parsing for published releases.

Example:
    >>> from dist_version import parse_version
    >>> str(parse_version("1.0.0"))
    '1.0.0'
"""

__version__ = "0.1.0"

from .semver import (
    SEMVER_PATTERN,
    InvalidVersionError,
    Version,
    parse_version,
)

__all__ = [
    "Version",
    "parse_version",
    "InvalidVersionError",
    "SEMVER_PATTERN",
]
