# SPDX-License-Identifier: MIT
"""Integration test: End-to-end publish flow.

Tests the complete flow of:
1. Hashing and optionally signing a build artifact
2. Upserting the release against a mock registry
3. Following the registry's redirect to storage
4. Streaming the artifact and verifying what arrived
"""

from __future__ import annotations

import base64
import hashlib
import io
import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from Crypto.Signature import eddsa

from dist_cli.config import DistConfig
from dist_cli.publish import prepare_release, publish_release
from dist_integrity import SigningKeyError, verify_checksum, verify_signature

ACCOUNT_ID = "1fddcec8-8dd3-4d8d-9b16-215cac0f9b52"
PRODUCT_ID = "2313b7e7-1ea6-4a01-901e-2931de6bb1e2"
API_URL = "https://registry.example.com/v1"
STORAGE_URL = "https://storage.example.com/artifacts/rel-42"


class TestEndToEndPublishFlow:
    """Integration tests for the complete publish flow."""

    @pytest.fixture
    def artifact_path(self, tmp_path: Path) -> Path:
        """A release artifact at build/app with a few hundred KiB of content."""
        build_dir = tmp_path / "build"
        build_dir.mkdir()
        path = build_dir / "app"
        path.write_bytes(hashlib.sha256(b"seed").digest() * 10_000)
        return path

    @pytest.fixture
    def signing_key(self) -> tuple[str, bytes]:
        """Hex-encoded private key and the matching raw public key."""
        seed = bytes(range(100, 132))
        public_key = eddsa.import_private_key(seed).public_key().export_key(format="raw")
        return (seed + public_key).hex(), public_key

    @pytest.fixture
    def exchange(self) -> dict[str, Any]:
        """Record of everything the registry and storage saw."""
        return {"release": None, "upload": None, "registry_requests": []}

    @pytest.fixture
    def registry_transport(self, exchange: dict[str, Any]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            exchange["registry_requests"].append(request)
            if request.url.path.endswith("/releases") and request.method == "PUT":
                document = json.loads(request.content)
                exchange["release"] = document["data"]
                return httpx.Response(
                    200,
                    json={
                        "data": {
                            "id": "rel-42",
                            "type": "releases",
                            "attributes": document["data"]["attributes"],
                        }
                    },
                )
            if request.url.path.endswith("/releases/rel-42/artifact"):
                return httpx.Response(307, headers={"Location": STORAGE_URL})
            return httpx.Response(404, json={"errors": [{"title": "Not found"}]})

        return httpx.MockTransport(handler)

    @pytest.fixture
    def upload_client(self, exchange: dict[str, Any]):
        def handler(request: httpx.Request) -> httpx.Response:
            exchange["upload"] = request
            return httpx.Response(200)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            yield client

    def _config(self, artifact_path: Path, **overrides: Any) -> DistConfig:
        options: dict[str, Any] = {
            "path": str(artifact_path),
            "version": "2.1.0",
            "account": ACCOUNT_ID,
            "product": PRODUCT_ID,
            "token": "prod-token",
            "api_url": API_URL,
        }
        options.update(overrides)
        return DistConfig.from_options(**options)

    def test_unsigned_release(
        self,
        artifact_path: Path,
        registry_transport: httpx.MockTransport,
        upload_client: httpx.Client,
        exchange: dict[str, Any],
    ) -> None:
        content = artifact_path.read_bytes()

        release = publish_release(
            self._config(artifact_path),
            transport=registry_transport,
            upload_client=upload_client,
        )

        assert release.id == "rel-42"
        assert release.upload_target.url == STORAGE_URL

        attributes = exchange["release"]["attributes"]
        assert attributes["version"] == "2.1.0"
        assert attributes["filename"] == "app"
        assert attributes["filetype"] == "bin"
        assert attributes["filesize"] == len(content)
        assert attributes["channel"] == "stable"
        assert "signature" not in attributes

        expected = base64.b64encode(hashlib.sha512(content).digest()).decode().rstrip("=")
        assert attributes["checksum"] == expected
        assert verify_checksum(io.BytesIO(content), attributes["checksum"])

        upload = exchange["upload"]
        assert upload.url == STORAGE_URL
        assert upload.content == content
        assert "Authorization" not in upload.headers

        upsert = exchange["registry_requests"][0]
        assert upsert.headers["Authorization"] == "Bearer prod-token"
        assert upsert.url.path == f"/v1/accounts/{ACCOUNT_ID}/releases"

    def test_signed_release_verifies(
        self,
        artifact_path: Path,
        signing_key: tuple[str, bytes],
        registry_transport: httpx.MockTransport,
        upload_client: httpx.Client,
        exchange: dict[str, Any],
    ) -> None:
        key, public_key = signing_key

        publish_release(
            self._config(artifact_path, signing_key=key, entitlements=["pro,team"]),
            transport=registry_transport,
            upload_client=upload_client,
        )

        attributes = exchange["release"]["attributes"]
        signature = attributes["signature"]
        assert not signature.endswith("=")

        with artifact_path.open("rb") as f:
            assert verify_signature(public_key, f, signature, context=PRODUCT_ID)
            # Bound to the product: another product context does not verify.
            assert not verify_signature(public_key, f, signature, context="other-product")

        constraints = exchange["release"]["relationships"]["constraints"]["data"]
        entitlements = [c["relationships"]["entitlement"]["data"]["id"] for c in constraints]
        assert entitlements == ["pro", "team"]

    def test_bad_key_stops_before_network(
        self,
        artifact_path: Path,
        registry_transport: httpx.MockTransport,
        upload_client: httpx.Client,
        exchange: dict[str, Any],
    ) -> None:
        with pytest.raises(SigningKeyError, match="bad signing key"):
            publish_release(
                self._config(artifact_path, signing_key="not-hex"),
                transport=registry_transport,
                upload_client=upload_client,
            )

        assert exchange["registry_requests"] == []
        assert exchange["upload"] is None

    def test_prepare_release_is_offline(self, artifact_path: Path) -> None:
        config = self._config(artifact_path, account=None, token=None, dry_run=True)

        descriptor = prepare_release(config)

        assert descriptor.product == PRODUCT_ID
        assert descriptor.filesize == artifact_path.stat().st_size
        assert descriptor.signature is None
