# SPDX-License-Identifier: MIT
"""The artifact file handle shared by the digest, signing and upload passes."""

from __future__ import annotations

import os
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from .errors import ArtifactError


@contextmanager
def rewinding(stream: BinaryIO) -> Iterator[BinaryIO]:
    """Yield ``stream`` positioned at byte 0 and seek back to 0 on exit.

    The seek on exit runs even when the body raises, so a failed pass never
    leaves the cursor mid-file for the next one.
    """
    stream.seek(0)
    try:
        yield stream
    finally:
        stream.seek(0)


class ArtifactFile:
    """An open, seekable release artifact with a known name and size.

    The handle is exclusively owned by one publishing pipeline. Each full
    pass over the content goes through :meth:`rewound`.

    Attributes:
        path: Expanded filesystem path
        name: Basename of the path
        size: Size in bytes at open time
    """

    def __init__(self, path: Path, stream: BinaryIO, size: int) -> None:
        self.path = path
        self.name = path.name
        self.size = size
        self._stream = stream

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> "ArtifactFile":
        """Open ``path`` for reading after expanding a leading ``~``.

        Raises:
            ArtifactError: If the path cannot be expanded, is a directory,
                or is not readable
        """
        raw = os.fspath(path)
        expanded = os.path.expanduser(raw)
        if expanded.startswith("~"):
            raise ArtifactError(
                raw, f'path "{raw}" is not expandable (cannot resolve home directory)'
            )

        if os.path.isdir(expanded):
            raise ArtifactError(expanded, f'path "{expanded}" is a directory (must be a file)')

        try:
            # Unbuffered: the upload pass installs its own buffer size.
            stream = open(expanded, "rb", buffering=0)
        except OSError as e:
            reason = (e.strerror or str(e)).lower()
            raise ArtifactError(expanded, f'path "{expanded}" is not readable ({reason})') from e

        try:
            size = os.fstat(stream.fileno()).st_size
        except OSError as e:
            stream.close()
            reason = (e.strerror or str(e)).lower()
            raise ArtifactError(expanded, f'path "{expanded}" is not readable ({reason})') from e

        return cls(Path(expanded), stream, size)

    @property
    def stream(self) -> BinaryIO:
        """The underlying unbuffered stream."""
        return self._stream

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def rewound(self) -> AbstractContextManager[BinaryIO]:
        """Scoped access to the stream from byte 0, reset to 0 afterwards."""
        return rewinding(self._stream)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "ArtifactFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ArtifactFile(path={str(self.path)!r}, size={self.size})"
