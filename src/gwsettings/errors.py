"""Error hierarchy raised while resolving gateway settings.

Every error carries the environment key being resolved and, where it is safe
to do so, the raw value that was rejected. Secret material (PEM payloads) is
never stored on the exception.
"""
from __future__ import annotations


class SettingsError(RuntimeError):
    """Base class for settings resolution failures."""

    def __init__(self, message: str, *, key: str | None = None, value: str | None = None) -> None:
        """Record *message* alongside the offending key and raw value."""
        super().__init__(message)
        self.key = key
        self.value = value


class MissingRequiredValue(SettingsError):
    """Raised when a compulsory setting has no value."""

    def __init__(self, key: str) -> None:
        """Build the error for the missing *key*."""
        super().__init__(f"environment variable {key} is required but not set", key=key)


class InvalidChoice(SettingsError):
    """Raised when a value is not one of the allowed choices."""

    def __init__(self, key: str, value: str, allowed: tuple[str, ...]) -> None:
        """Build the error naming the rejected *value* and the allowed set."""
        joined = ", ".join(allowed)
        super().__init__(
            f"environment variable {key}: value {value!r} is not one of the "
            f"possible choices: {joined}",
            key=key,
            value=value,
        )
        self.allowed = allowed


class InvalidRange(SettingsError):
    """Raised when a value is not an integer inside the allowed bounds."""

    def __init__(self, key: str, value: str, minimum: int, maximum: int) -> None:
        """Build the error naming the rejected *value* and the bounds."""
        super().__init__(
            f"environment variable {key}: value {value!r} is not an integer "
            f"between {minimum} and {maximum} inclusive",
            key=key,
            value=value,
        )
        self.minimum = minimum
        self.maximum = maximum


class InvalidFormat(SettingsError):
    """Raised when a value does not match the expected textual format."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        """Build the error naming the rejected *value* and the *expected* format."""
        super().__init__(
            f"environment variable {key}: value {value!r} is not a valid {expected}",
            key=key,
            value=value,
        )
        self.expected = expected


class PEMDecodeFailure(SettingsError):
    """Raised when no usable PEM block can be decoded from the input."""

    def __init__(self, reason: str, *, key: str | None = None) -> None:
        """Build the error; the raw input is deliberately not recorded."""
        prefix = f"environment variable {key}: " if key else ""
        super().__init__(f"{prefix}{reason}", key=key)


class DeprecatedVariableConflict(SettingsError):
    """Raised when a deprecated key and its replacement disagree."""

    def __init__(self, deprecated: str, replacement: str) -> None:
        """Build the error naming both keys."""
        super().__init__(
            f"environment variables {deprecated} (deprecated) and {replacement} "
            "are both set with different values; remove "
            f"{deprecated} and keep {replacement}",
            key=deprecated,
        )
        self.replacement = replacement


__all__ = [
    "DeprecatedVariableConflict",
    "InvalidChoice",
    "InvalidFormat",
    "InvalidRange",
    "MissingRequiredValue",
    "PEMDecodeFailure",
    "SettingsError",
]
