"""Enumerations for CLI exit codes."""
from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Well-known exit codes returned by the ``gwsettings`` CLI."""

    OK = 0
    VALIDATION = 2
    ENVIRONMENT = 3
