"""Retrocompatible handling of renamed environment variables.

A deprecated key keeps working, with a warning, while its replacement is
preferred. Once a user has set the deprecated key it is read as compulsory, so
a half-configured deprecated path never silently falls back to a default.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .errors import DeprecatedVariableConflict
from .events import SettingsWarning, WarningCollector
from .sources import EnvSource
from .validators import ValidationRule

T = TypeVar("T")


class AliasState(Enum):
    """Resolution states of a deprecated/replacement key pair."""

    UNSET = "unset"
    DEPRECATED_PRESENT = "deprecated-present"
    CANONICAL_ONLY = "canonical-only"


@dataclass(frozen=True)
class AliasPolicy:
    """A deprecated key, its replacement and the replacement's default."""

    deprecated: str
    replacement: str
    default: str | None = None
    compulsory: bool = False

    @property
    def message(self) -> str:
        """Return the warning shown when the deprecated key is used."""
        return (
            f"You are using the old environment variable {self.deprecated}, "
            f"please consider changing it to {self.replacement}"
        )


@dataclass(frozen=True)
class AliasResolution(Generic[T]):
    """Outcome of resolving an alias."""

    state: AliasState
    value: T
    warning: SettingsWarning | None = None


class AliasResolver:
    """Resolve a setting that may still be configured through a deprecated key."""

    def __init__(self, source: EnvSource, warnings: WarningCollector) -> None:
        """Bind the resolver to a value *source* and a warnings channel."""
        self._source = source
        self._warnings = warnings
        self.state = AliasState.UNSET

    def resolve(self, policy: AliasPolicy, rule: ValidationRule[T]) -> AliasResolution[T]:
        """Resolve *policy* with *rule* and return the typed value."""
        if self.state is not AliasState.UNSET:
            raise RuntimeError("alias resolver instances resolve a single setting")

        deprecated_raw = self._source.get(policy.deprecated)
        if not deprecated_raw:
            self.state = AliasState.CANONICAL_ONLY
            raw = self._source.get(
                policy.replacement,
                default=policy.default,
                compulsory=policy.compulsory,
            )
            return AliasResolution(state=self.state, value=rule.apply(raw, key=policy.replacement))

        self.state = AliasState.DEPRECATED_PRESENT
        warning = SettingsWarning(
            key=policy.deprecated,
            message=policy.message,
            replacement=policy.replacement,
        )
        self._warnings.emit(warning)
        # Second read: the value may have vanished since the presence check.
        raw = self._source.get(policy.deprecated, compulsory=True)
        value = rule.apply(raw, key=policy.deprecated)

        replacement_raw = self._source.get(policy.replacement)
        if replacement_raw:
            replacement_value = rule.apply(replacement_raw, key=policy.replacement)
            if replacement_value != value:
                raise DeprecatedVariableConflict(policy.deprecated, policy.replacement)
        return AliasResolution(state=self.state, value=value, warning=warning)


def resolve_alias(
    source: EnvSource,
    warnings: WarningCollector,
    policy: AliasPolicy,
    rule: ValidationRule[T],
) -> T:
    """Resolve *policy* with a fresh :class:`AliasResolver` and return the value."""
    return AliasResolver(source, warnings).resolve(policy, rule).value


__all__ = [
    "AliasPolicy",
    "AliasResolution",
    "AliasResolver",
    "AliasState",
    "resolve_alias",
]
