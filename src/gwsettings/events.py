"""Structured warnings raised while resolving settings."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsWarning:
    """Non-fatal notice about a resolved setting."""

    key: str
    message: str
    replacement: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {"key": self.key, "message": self.message, "replacement": self.replacement}


@dataclass
class WarningCollector:
    """Collect warnings, at most one per setting key."""

    _warnings: list[SettingsWarning] = field(default_factory=list)

    def emit(self, warning: SettingsWarning) -> bool:
        """Record *warning* unless its key already warned; return True if recorded."""
        if any(existing.key == warning.key for existing in self._warnings):
            return False
        self._warnings.append(warning)
        LOGGER.warning(warning.message)
        return True

    @property
    def warnings(self) -> tuple[SettingsWarning, ...]:
        """Return the warnings recorded so far, in emission order."""
        return tuple(self._warnings)


__all__ = ["SettingsWarning", "WarningCollector"]
