"""Status bar — bottom bar showing model, session status and theme."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget


class StatusBar(Widget):
    """Single-line status bar."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $panel;
    }
    """

    model: reactive[str] = reactive("—")
    status: reactive[str] = reactive("idle")
    dark: reactive[bool] = reactive(True)
    turns: reactive[int] = reactive(0)

    def render(self) -> Text:
        status_colors = {
            "idle": "green",
            "sending": "yellow",
            "error": "red bold",
        }
        color = status_colors.get(self.status, "white")

        bar = Text()
        bar.append(" Lumina ", style="bold")
        bar.append("│ ", style="dim")
        bar.append(self.model, style="cyan")
        bar.append(" │ ", style="dim")
        bar.append(f"● {self.status}", style=color)
        bar.append(" │ ", style="dim")
        bar.append(f"{self.turns} turns", style="dim")
        bar.append(" │ ", style="dim")
        bar.append("dark" if self.dark else "light", style="dim")
        bar.append("  ctrl+d theme · ctrl+q quit", style="dim italic")
        return bar
