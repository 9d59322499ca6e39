"""Raw value retrieval from the environment and secret files."""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from .errors import MissingRequiredValue

LOGGER = logging.getLogger(__name__)

DEFAULT_SECRETS_DIR = Path("/run/secrets")
DEFAULT_SECRET_FILE_SUFFIX = "_SECRETFILE"


class EnvSource:
    """Read raw setting values from an injected environment mapping.

    The source never caches: each call looks the key up again, which keeps the
    resolution pass a plain sequence of independent reads.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        *,
        secrets_dir: Path = DEFAULT_SECRETS_DIR,
        secret_file_suffix: str = DEFAULT_SECRET_FILE_SUFFIX,
    ) -> None:
        """Wrap *env* (``os.environ`` when omitted) and the secrets mount."""
        self._env: Mapping[str, str] = os.environ if env is None else env
        self._secrets_dir = secrets_dir
        self._secret_file_suffix = secret_file_suffix

    def get(self, key: str, *, default: str | None = None, compulsory: bool = False) -> str:
        """Return the value of *key*, falling back to *default* when empty.

        Raises :class:`MissingRequiredValue` when *compulsory* is set and the
        variable is absent or empty.
        """
        if compulsory and default is not None:
            raise ValueError(f"{key}: a compulsory value cannot have a default")
        value = self._env.get(key, "")
        if value:
            return value
        if compulsory:
            raise MissingRequiredValue(key)
        if default is not None:
            LOGGER.debug("%s not set, using default %r", key, default)
            return default
        return ""

    def secret_file_path(self, key: str) -> Path:
        """Return the secret file consulted for *key*."""
        override = self._env.get(f"{key}{self._secret_file_suffix}", "")
        if override:
            return Path(override)
        return self._secrets_dir / key.lower()

    def get_secret(
        self,
        key: str,
        *,
        fallback_file: Path | None = None,
        compulsory: bool = True,
    ) -> bytes:
        """Return secret material for *key*.

        Lookup order: the secret file, the plain environment variable, then
        *fallback_file*. Missing, unreadable or empty origins are skipped.
        """
        secret_path = self.secret_file_path(key)
        data = _read_file(secret_path)
        if data:
            LOGGER.debug("%s read from secret file %s", key, secret_path)
            return data

        value = self._env.get(key, "")
        if value:
            LOGGER.debug("%s read from environment", key)
            return value.encode("utf-8")

        if fallback_file is not None:
            data = _read_file(fallback_file)
            if data:
                LOGGER.debug("%s read from file %s", key, fallback_file)
                return data

        if compulsory:
            raise MissingRequiredValue(key)
        return b""


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return b""
    except OSError as exc:
        LOGGER.debug("Cannot read %s: %s", path, exc)
        return b""


__all__ = ["DEFAULT_SECRETS_DIR", "DEFAULT_SECRET_FILE_SUFFIX", "EnvSource"]
