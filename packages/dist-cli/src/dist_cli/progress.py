# SPDX-License-Identifier: MIT
"""Upload progress rendering.

:class:`ProgressReader` is a pass-through decorator over a binary reader
that reports how many bytes each read returned. :class:`TransferProgress`
renders those counts as a bar with throughput and ETA on a background
refresh thread.
"""

from __future__ import annotations

import sys
from typing import Any, BinaryIO, Callable, Optional, TextIO

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

REFRESH_INTERVAL = 0.18
BAR_WIDTH = 60


class ProgressReader:
    """Forward reads to ``reader`` and report byte counts to ``observer``.

    Returned data and raised exceptions are exactly those of the wrapped
    reader; the observer only sees the length of each successful read.
    """

    def __init__(self, reader: BinaryIO, observer: Callable[[int], None]) -> None:
        self._reader = reader
        self._observer = observer

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        if data:
            self._observer(len(data))
        return data

    def read1(self, size: int = -1) -> bytes:
        data = self._reader.read1(size)  # type: ignore[attr-defined]
        if data:
            self._observer(len(data))
        return data

    def readinto(self, buffer: Any) -> Optional[int]:
        count = self._reader.readinto(buffer)  # type: ignore[attr-defined]
        if count:
            self._observer(count)
        return count

    def readable(self) -> bool:
        return True

    def __getattr__(self, name: str) -> Any:
        return getattr(self._reader, name)


class TransferProgress:
    """A transient transfer bar for ``total`` bytes.

    Use as a context manager: entering starts the refresh thread, leaving
    stops it and waits for the final render.
    """

    def __init__(
        self,
        total: int,
        description: str = "",
        *,
        console: Optional[Console] = None,
        refresh_interval: float = REFRESH_INTERVAL,
    ) -> None:
        self.total = total
        self.description = description
        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(bar_width=BAR_WIDTH),
            DownloadColumn(binary_units=True),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=True,
            refresh_per_second=1 / refresh_interval,
        )
        self._task: Optional[TaskID] = None

    @property
    def completed(self) -> float:
        if self._task is None:
            return 0
        task = next(t for t in self._progress.tasks if t.id == self._task)
        return task.completed

    @property
    def finished(self) -> bool:
        return self._progress.finished

    def advance(self, count: int) -> None:
        if self._task is not None:
            self._progress.update(self._task, advance=count)

    def wrap(self, reader: BinaryIO) -> ProgressReader:
        """Return ``reader`` decorated to advance this bar."""
        return ProgressReader(reader, self.advance)

    def __enter__(self) -> "TransferProgress":
        self._progress.start()
        self._task = self._progress.add_task(self.description, total=self.total)
        return self

    def __exit__(self, *exc_info: object) -> None:
        # stop() joins the refresh thread after a last render.
        self._progress.stop()


def should_show_progress(stream: Optional[TextIO] = None) -> bool:
    """Return True when ``stream`` (default stdout) is an interactive terminal."""
    stream = stream if stream is not None else sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
