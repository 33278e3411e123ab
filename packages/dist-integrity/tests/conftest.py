# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for integrity tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from Crypto.Signature import eddsa

PRODUCT_ID = "2313b7e7-1ea6-4a01-901e-2931de6bb1e2"


@pytest.fixture
def signing_seed() -> bytes:
    """A fixed Ed25519 seed so signatures are reproducible."""
    return bytes(range(32))


@pytest.fixture
def public_key(signing_seed: bytes) -> bytes:
    """Raw 32-byte public key matching ``signing_seed``."""
    return eddsa.import_private_key(signing_seed).public_key().export_key(format="raw")


@pytest.fixture
def signing_key(signing_seed: bytes, public_key: bytes) -> str:
    """Hex-encoded 64-byte private key (seed followed by public key)."""
    return (signing_seed + public_key).hex()


@pytest.fixture
def product_id() -> str:
    return PRODUCT_ID


@pytest.fixture
def artifact_path(tmp_path: Path) -> Path:
    """A small release artifact on disk."""
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    path = build_dir / "app"
    path.write_bytes(b"\x7fELF" + b"release payload " * 512)
    return path
