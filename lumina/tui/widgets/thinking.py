"""Thinking indicator — animated dots shown while a reply is pending."""

from __future__ import annotations

import time

from textual.timer import Timer
from textual.widgets import Static


def _format_elapsed(seconds: float) -> str:
    """Under 60s: Xs, otherwise Xm Ys."""
    secs = int(seconds)
    if secs < 60:
        return f"{secs}s"
    m, s = divmod(secs, 60)
    return f"{m}m {s}s"


class ThinkingIndicator(Static):
    """Three bouncing dots plus elapsed time."""

    FRAMES = ("●  ·  ·", "·  ●  ·", "·  ·  ●", "·  ●  ·")

    def __init__(self, **kwargs) -> None:
        super().__init__("", classes="thinking-indicator", **kwargs)
        self._frame: int = 0
        self._timer: Timer | None = None
        self._started_at: float = 0.0

    def on_mount(self) -> None:
        self._started_at = time.monotonic()
        self._render_frame()
        self._timer = self.set_interval(0.15, self._advance)

    def on_unmount(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _advance(self) -> None:
        self._frame = (self._frame + 1) % len(self.FRAMES)
        self._render_frame()

    def _render_frame(self) -> None:
        elapsed = _format_elapsed(time.monotonic() - self._started_at)
        self.update(f"[dim]{self.FRAMES[self._frame]}  {elapsed}[/dim]")
