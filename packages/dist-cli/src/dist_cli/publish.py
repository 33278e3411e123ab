# SPDX-License-Identifier: MIT
"""The publish pipeline: checksum, sign, register, upload.

Stages run strictly in order over one exclusively-owned artifact handle.
A failed upload leaves the release registered without an artifact; running
the pipeline again upserts the same release and retries the upload.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from rich.console import Console

from dist_integrity import ArtifactFile, ReleaseDescriptor, build_release

from .client import RegistryClient, Release
from .config import DistConfig
from .upload import upload_artifact

logger = logging.getLogger(__name__)


def prepare_release(config: DistConfig) -> ReleaseDescriptor:
    """Build the release descriptor without touching the network."""
    with ArtifactFile.open(config.path) as artifact:
        return build_release(artifact, config.release, product=config.product)


def publish_release(
    config: DistConfig,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    upload_client: Optional[httpx.Client] = None,
    show_progress: bool = False,
    console: Optional[Console] = None,
) -> Release:
    """Publish the artifact described by ``config``.

    Args:
        config: Resolved invocation settings
        transport: Transport for registry requests
        upload_client: Client for the artifact transfer
        show_progress: Render a transfer bar during the upload
        console: Console for the transfer bar

    Returns:
        The registered release

    Raises:
        DistError: For input, validation and signing failures (before any
            network call)
        APIError: If the registry rejects the release
        httpx.HTTPError: On transport or upload failures
    """
    with ArtifactFile.open(config.path) as artifact:
        descriptor = build_release(artifact, config.release, product=config.product)

        with RegistryClient(
            config.account,
            config.token,
            base_url=config.api_url,
            transport=transport,
        ) as registry:
            release = registry.upsert_release(descriptor)

        logger.debug("uploading %s to release %s", descriptor.filename, release.id)
        upload_artifact(
            artifact,
            release.upload_target,
            client=upload_client,
            show_progress=show_progress,
            console=console,
        )

    return release
