"""User preferences: persistent settings stored in ~/.resubmit/preferences.json.

Controls whether retrying a process asks before resetting the working tree.
Settings are global (not per-session) since they reflect user preferences
rather than session state.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PREFS_PATH = Path.home() / ".resubmit" / "preferences.json"

GIT_RESET_CHOICES = ("ask", "always", "never")


@dataclass
class UserPreferences:
    """User preference settings.

    Attributes:
        git_reset_on_retry: Controls behavior when retrying a process.
            - "ask": Show the confirmation each time (default).
            - "always": Reset the working tree without asking.
            - "never": Keep the working tree without asking.
        force_when_dirty: Retry even with uncommitted changes when the
            confirmation is skipped.
    """

    git_reset_on_retry: str = "ask"
    force_when_dirty: bool = False

    def validate(self) -> None:
        """Ensure all values are within allowed ranges."""
        if self.git_reset_on_retry not in GIT_RESET_CHOICES:
            self.git_reset_on_retry = "ask"
        if not isinstance(self.force_when_dirty, bool):
            self.force_when_dirty = False

    def save(self, path: Path | None = None) -> None:
        """Persist preferences to disk."""
        target = path or PREFS_PATH
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            target.write_text(json.dumps(asdict(self), indent=2))
        except OSError:
            logger.warning("Failed to save preferences to %s", target)

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
            logger.debug("Preferences file not found at %s; using defaults", target)
        except (OSError, ValueError, TypeError, AttributeError):
            logger.warning("Failed to load preferences from %s; using defaults", target)
        return cls()
