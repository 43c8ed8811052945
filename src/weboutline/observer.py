"""Progress and warning reporting for outline generation."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Protocol, TextIO


class OutlineObserver(Protocol):
    def on_progress(self, processed: int, total: int, percent: int) -> None: ...

    def on_warning(self, message: str) -> None: ...


class NullObserver:
    """Discard everything."""

    def on_progress(self, processed: int, total: int, percent: int) -> None:
        pass

    def on_warning(self, message: str) -> None:
        pass


class ConsoleObserver:
    """Print progress and warnings to stderr."""

    def __init__(self, stream: TextIO | None = None, progress: bool = True) -> None:
        self.stream = stream
        self.progress = progress

    def _out(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the output
        return self.stream if self.stream is not None else sys.stderr

    def on_progress(self, processed: int, total: int, percent: int) -> None:
        if not self.progress:
            return
        print(f"Creating bookmarks... {percent}% ({processed}/{total})", file=self._out())

    def on_warning(self, message: str) -> None:
        print(f"Warning: {message}", file=self._out())


@dataclass
class Progress:
    """Count processed outline items and report every ten percent."""

    total: int
    processed: int = 0
    last_reported: int = 0

    def step(self, observer: OutlineObserver) -> None:
        self.processed += 1
        percent = self.processed * 100 // self.total if self.total else 100
        crossed = percent // 10 > self.last_reported // 10
        if crossed or self.processed == self.total:
            observer.on_progress(self.processed, self.total, percent)
            self.last_reported = percent
