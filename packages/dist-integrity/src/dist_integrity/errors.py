# SPDX-License-Identifier: MIT
"""Exceptions raised while preparing a release for publishing.

Every error here is terminal for an invocation. Messages are single-line and
meant to be shown to the operator as-is.
"""

from __future__ import annotations


class DistError(Exception):
    """Base class for release publishing errors."""

    pass


class ArtifactError(DistError):
    """Raised when the artifact path cannot be opened as a regular file."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class ReleaseValidationError(DistError):
    """Raised when release metadata fails validation."""

    pass


class SigningKeyError(DistError):
    """Raised when the signing key cannot be decoded or has the wrong size.

    Attributes:
        actual: Decoded key length in bytes, if decoding succeeded
        expected: Required key length in bytes
    """

    def __init__(self, message: str, actual: int | None = None, expected: int | None = None):
        self.actual = actual
        self.expected = expected
        super().__init__(message)


class UnsupportedAlgorithmError(DistError):
    """Raised when a signing algorithm selector is not recognized."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f'signing algorithm "{algorithm}" is not supported')


class SigningError(DistError):
    """Raised when the signing operation itself fails."""

    pass
