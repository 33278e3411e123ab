# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest
from click.testing import CliRunner
from Crypto.Signature import eddsa

ACCOUNT_ID = "1fddcec8-8dd3-4d8d-9b16-215cac0f9b52"
PRODUCT_ID = "2313b7e7-1ea6-4a01-901e-2931de6bb1e2"
API_URL = "https://registry.example.com/v1"
STORAGE_URL = "https://storage.example.com/artifacts/rel-1?signature=abc"


class FakeRegistry:
    """In-memory registry and storage endpoint behind httpx.MockTransport."""

    def __init__(self) -> None:
        self.releases: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.uploads: list[httpx.Request] = []
        self.upsert_error: Optional[httpx.Response] = None
        self.upload_status = 200

    def registry_handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == f"/v1/accounts/{ACCOUNT_ID}/releases" and request.method == "PUT":
            if self.upsert_error is not None:
                return self.upsert_error
            document = json.loads(request.content)
            self.releases["rel-1"] = document["data"]
            return httpx.Response(
                200,
                json={
                    "data": {
                        "id": "rel-1",
                        "type": "releases",
                        "attributes": document["data"]["attributes"],
                    }
                },
            )

        if path == f"/v1/accounts/{ACCOUNT_ID}/releases/rel-1/artifact":
            return httpx.Response(307, headers={"Location": STORAGE_URL})

        return httpx.Response(
            404,
            json={"errors": [{"title": "Not found", "detail": f"no route {path}"}]},
        )

    def storage_handler(self, request: httpx.Request) -> httpx.Response:
        self.uploads.append(request)
        return httpx.Response(self.upload_status)

    @property
    def registry_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.registry_handler)

    @property
    def storage_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.storage_handler)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def signing_seed() -> bytes:
    return bytes(range(32, 64))


@pytest.fixture
def public_key(signing_seed: bytes) -> bytes:
    return eddsa.import_private_key(signing_seed).public_key().export_key(format="raw")


@pytest.fixture
def signing_key(signing_seed: bytes, public_key: bytes) -> str:
    """Hex-encoded 64-byte private key."""
    return (signing_seed + public_key).hex()


@pytest.fixture
def artifact_path(tmp_path: Path) -> Path:
    """A release artifact at build/app."""
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    path = build_dir / "app"
    path.write_bytes(bytes(range(256)) * 300)
    return path
