# SPDX-License-Identifier: MIT
"""Streaming artifact upload.

The artifact is sent as a sized stream of chunks read through a large
buffered reader, so memory use is bounded by the buffer rather than by the
artifact size. Failures are raised to the caller unchanged and are not
retried.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Iterator, Optional

import httpx
from rich.console import Console

from dist_integrity import ArtifactFile

from .client import UploadTarget
from .progress import TransferProgress

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 50 * 1024 * 1024  # 50 MiB
UPLOAD_CHUNK_SIZE = 1024 * 1024


def iter_chunks(reader: BinaryIO, chunk_size: int = UPLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield successive reads of at most ``chunk_size`` bytes until EOF."""
    for chunk in iter(lambda: reader.read(chunk_size), b""):
        yield chunk


def _put(client: httpx.Client, target: UploadTarget, reader: BinaryIO, size: int) -> httpx.Response:
    response = client.put(
        target.url,
        content=iter_chunks(reader),
        headers={
            "Content-Type": "application/octet-stream",
            "Content-Length": str(size),
        },
    )
    response.raise_for_status()
    return response


def upload_artifact(
    artifact: ArtifactFile,
    target: UploadTarget,
    *,
    client: Optional[httpx.Client] = None,
    show_progress: bool = False,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    console: Optional[Console] = None,
) -> httpx.Response:
    """Upload the full content of ``artifact`` to ``target``.

    Args:
        artifact: Open artifact; read from byte 0 and rewound afterwards
        target: Upload target returned by the registry
        client: HTTP client to use (a short-lived one is created otherwise);
            it must not carry registry credentials
        show_progress: Render a transfer bar while uploading
        buffer_size: Size of the read buffer placed over the artifact
        console: Console for the transfer bar

    Returns:
        The storage endpoint's response

    Raises:
        httpx.HTTPError: If the transfer fails or is rejected
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=httpx.Timeout(60.0, write=None))

    try:
        with artifact.rewound() as stream:
            buffered = io.BufferedReader(stream, buffer_size=buffer_size)  # type: ignore[arg-type]
            try:
                if show_progress:
                    with TransferProgress(
                        artifact.size, description=artifact.name, console=console
                    ) as progress:
                        response = _put(client, target, progress.wrap(buffered), artifact.size)
                else:
                    response = _put(client, target, buffered, artifact.size)
            finally:
                # The artifact owns the raw stream; don't let the buffer close it.
                buffered.detach()
    finally:
        if owns_client:
            client.close()

    logger.debug("uploaded %d bytes of %s", artifact.size, artifact.name)
    return response
