"""User preferences — persistent settings stored in ~/.lumina/preferences.json.

Only UI settings live here. Conversation history is never persisted.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PREFS_PATH = Path.home() / ".lumina" / "preferences.json"


@dataclass
class UserPreferences:
    """User preference settings.

    Attributes:
        dark_mode: Render with the dark token palette (default) or the light one.
        show_greeting: Show the time-of-day greeting on an empty conversation.
    """

    dark_mode: bool = True
    show_greeting: bool = True

    def validate(self) -> None:
        """Ensure all values are within allowed ranges."""
        if not isinstance(self.dark_mode, bool):
            self.dark_mode = True
        if not isinstance(self.show_greeting, bool):
            self.show_greeting = True

    def save(self, path: Path | None = None) -> None:
        """Persist preferences to disk."""
        target = path or PREFS_PATH
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(asdict(self), indent=2))
        except OSError:
            logger.debug("Failed to save preferences to %s", target, exc_info=True)

    @classmethod
    def load(cls, path: Path | None = None) -> UserPreferences:
        """Load preferences from disk, returning defaults if missing/corrupt."""
        target = path or PREFS_PATH
        try:
            if target.exists():
                data = json.loads(target.read_text())
                prefs = cls(**{
                    k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__
                })
                prefs.validate()
                logger.debug("Loaded preferences from %s", target)
                return prefs
            else:
                logger.debug("Preferences file not found at %s; using defaults", target)
        except (OSError, ValueError, TypeError, AttributeError):
            logger.warning("Failed to load preferences from %s; using defaults", target)
        return cls()
