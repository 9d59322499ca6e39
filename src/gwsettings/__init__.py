"""gwsettings package bootstrap.

Exposes lightweight metadata used by the CLI and packaging machinery. The
settings engine itself lives in :mod:`gwsettings.settings`.
"""
from __future__ import annotations

__all__ = ["__version__"]

# NOTE: The version is duplicated in ``pyproject.toml`` and managed by Hatch.
__version__ = "0.1.0"
