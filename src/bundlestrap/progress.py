"""Byte counter drawn on the terminal while an archive downloads."""

import shutil
import sys
import time
from typing import Callable, TextIO

REDRAW_INTERVAL_SECONDS = 0.1


def format_size(num_bytes: int) -> str:
    """Return a short human-readable size (``512 B``, ``1.5 MiB``)."""
    size = float(num_bytes)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{int(size)} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


class DownloadIndicator:
    """Redraw a single status line as chunks arrive.

    Drawing happens on the downloading thread, at most once per ``interval``.
    Nothing is written unless the stream is a TTY, and the first write error
    switches the indicator off for the rest of the download.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        interval: float = REDRAW_INTERVAL_SECONDS,
        label: str = "Downloading",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._interval = interval
        self._label = label
        self._clock = clock
        self._active = hasattr(self._stream, "isatty") and self._stream.isatty()
        self._received = 0
        self._started_at = 0.0
        self._drawn_at: float | None = None
        self._width = 0

    @property
    def bytes_received(self) -> int:
        return self._received

    @property
    def active(self) -> bool:
        return self._active

    def __enter__(self) -> "DownloadIndicator":
        self._received = 0
        self._started_at = self._clock()
        self._drawn_at = None
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finish()

    def advance(self, count: int) -> None:
        self._received += count
        if not self._active:
            return
        now = self._clock()
        if self._drawn_at is not None and now - self._drawn_at < self._interval:
            return
        self._drawn_at = now
        self._emit("\r" + self.status_text(now))

    def status_text(self, now: float | None = None) -> str:
        now = self._clock() if now is None else now
        elapsed = max(now - self._started_at, 0.0)
        text = f"{self._label} {format_size(self._received)}"
        if elapsed >= 1:
            text += f" ({format_size(int(self._received / elapsed))}/s)"
        limit = max(shutil.get_terminal_size(fallback=(80, 24)).columns - 1, 10)
        text = text[:limit]
        # Pad over whatever the previous, possibly longer, line left behind.
        padded = text.ljust(self._width)
        self._width = len(text)
        return padded

    def finish(self) -> None:
        """Erase the status line if one was drawn."""
        if not self._active or self._drawn_at is None:
            return
        self._emit("\r" + " " * self._width + "\r")
        self._drawn_at = None
        self._width = 0

    def _emit(self, text: str) -> None:
        try:
            self._stream.write(text)
            self._stream.flush()
        except OSError:
            self._active = False
