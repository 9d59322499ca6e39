"""Pure validators turning raw setting strings into typed values.

Each ``parse_*`` function takes the raw string plus rule parameters and either
returns the typed value or raises a :class:`~gwsettings.errors.SettingsError`
subclass naming the key and the offending input. The frozen rule dataclasses
at the bottom bundle a validator with its parameters so the reader can treat
every setting the same way.
"""
from __future__ import annotations

import ipaddress
import re
from collections.abc import Collection
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Protocol, TypeVar

from . import pem
from .errors import InvalidChoice, InvalidFormat, InvalidRange

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

T_co = TypeVar("T_co", covariant=True)

ON = "on"
OFF = "off"

# Nanoseconds per unit, following Go's time.ParseDuration.
_DURATION_UNITS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_MAX_DURATION_NS = 2**63 - 1
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_CIDR_PREFIX_RE = re.compile(r"[0-9]+")
_HOSTNAME_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_HOSTNAME_RE = re.compile(rf"{_HOSTNAME_LABEL}(?:\.{_HOSTNAME_LABEL})*")
_HOSTNAME_MAX_LENGTH = 253


def split_csv(raw: str) -> list[str]:
    """Split *raw* on commas without trimming; empty input yields no tokens."""
    if not raw:
        return []
    return raw.split(",")


def parse_int_range(raw: str, minimum: int, maximum: int, *, key: str) -> int:
    """Return *raw* as an integer within ``[minimum, maximum]``."""
    if _INTEGER_RE.fullmatch(raw) is None:
        raise InvalidRange(key, raw, minimum, maximum)
    try:
        value = int(raw, 10)
    except ValueError as exc:
        raise InvalidRange(key, raw, minimum, maximum) from exc
    if not minimum <= value <= maximum:
        raise InvalidRange(key, raw, minimum, maximum)
    return value


def parse_choice(raw: str, allowed: Collection[str], *, key: str) -> str:
    """Return *raw* when it is exactly one of *allowed*."""
    if raw not in allowed:
        raise InvalidChoice(key, raw, tuple(allowed))
    return raw


def parse_csv_choices(raw: str, allowed: Collection[str], *, key: str) -> tuple[str, ...]:
    """Return the comma separated tokens of *raw*, each one of *allowed*.

    Tokens keep their input order and are matched exactly as split.
    """
    return tuple(parse_choice(token, allowed, key=key) for token in split_csv(raw))


def parse_on_off(raw: str, *, key: str) -> bool:
    """Map ``on``/``off`` (case-sensitive) to a boolean."""
    if raw == ON:
        return True
    if raw == OFF:
        return False
    raise InvalidFormat(key, raw, "on/off value")


def parse_duration(raw: str, *, key: str) -> timedelta:
    """Parse a duration such as ``24h``, ``1h30m`` or ``1.5s``.

    The grammar is a sequence of decimal numbers each followed by a unit
    (``ns``, ``us``, ``µs``, ``ms``, ``s``, ``m``, ``h``) with an optional
    leading sign. A bare ``0`` is accepted.
    """
    text = raw
    negative = False
    if text[:1] in {"+", "-"}:
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise InvalidFormat(key, raw, "duration")

    total = Decimal(0)
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise InvalidFormat(key, raw, "duration")
        number, unit = match.groups()
        try:
            total += Decimal(number) * _DURATION_UNITS[unit]
        except InvalidOperation as exc:  # pragma: no cover - regex guarantees digits
            raise InvalidFormat(key, raw, "duration") from exc
        position = match.end()

    # Durations are signed 64-bit nanosecond counts.
    if total > (_MAX_DURATION_NS + 1 if negative else _MAX_DURATION_NS):
        raise InvalidFormat(key, raw, "duration")
    nanoseconds = -total if negative else total
    return timedelta(microseconds=float(nanoseconds / 1000))


def parse_ip_address(raw: str, *, key: str) -> IPAddress:
    """Parse an IPv4 or IPv6 address; scoped addresses are rejected."""
    if "%" in raw:
        raise InvalidFormat(key, raw, "IP address")
    try:
        return ipaddress.ip_address(raw)
    except ValueError as exc:
        raise InvalidFormat(key, raw, "IP address") from exc


def parse_ip_or_cidr(raw: str, *, key: str) -> IPAddress | IPNetwork:
    """Parse *raw* as a bare IP address or, failing that, a CIDR range."""
    try:
        return parse_ip_address(raw, key=key)
    except InvalidFormat:
        pass
    _, sep, prefix = raw.partition("/")
    if not sep or _CIDR_PREFIX_RE.fullmatch(prefix) is None:
        raise InvalidFormat(key, raw, "IP address or CIDR range")
    try:
        return ipaddress.ip_network(raw, strict=False)
    except ValueError as exc:
        raise InvalidFormat(key, raw, "IP address or CIDR range") from exc


def parse_ip_or_cidr_list(raw: str, *, key: str) -> tuple[str, ...]:
    """Validate every comma separated entry of *raw* as an IP or CIDR range."""
    tokens = split_csv(raw)
    for token in tokens:
        parse_ip_or_cidr(token, key=key)
    return tuple(tokens)


def is_hostname(value: str) -> bool:
    """Return True when *value* has the shape of an RFC 1123 hostname."""
    return len(value) <= _HOSTNAME_MAX_LENGTH and _HOSTNAME_RE.fullmatch(value) is not None


def parse_hostnames(raw: str, *, key: str) -> tuple[str, ...]:
    """Validate every comma separated entry of *raw* as a hostname.

    Stops at the first invalid entry.
    """
    tokens = split_csv(raw)
    for token in tokens:
        if not is_hostname(token):
            raise InvalidFormat(key, token, "hostname")
    return tuple(tokens)


class ValidationRule(Protocol[T_co]):
    """A validator bound to its parameters."""

    def apply(self, raw: str, *, key: str) -> T_co:
        """Validate *raw* read from *key*."""
        ...


@dataclass(frozen=True)
class Range:
    """Inclusive integer range."""

    minimum: int
    maximum: int

    def apply(self, raw: str, *, key: str) -> int:
        """Return *raw* as an integer within the range."""
        return parse_int_range(raw, self.minimum, self.maximum, key=key)


@dataclass(frozen=True)
class Choice:
    """Membership in a fixed set."""

    allowed: tuple[str, ...]

    def apply(self, raw: str, *, key: str) -> str:
        """Return *raw* when it is one of the allowed values."""
        return parse_choice(raw, self.allowed, key=key)


@dataclass(frozen=True)
class CSVChoice:
    """Comma separated tokens, each a member of a fixed set."""

    allowed: tuple[str, ...]

    def apply(self, raw: str, *, key: str) -> tuple[str, ...]:
        """Return the comma separated tokens of *raw*, each allowed."""
        return parse_csv_choices(raw, self.allowed, key=key)


@dataclass(frozen=True)
class OnOff:
    """``on``/``off`` boolean."""

    def apply(self, raw: str, *, key: str) -> bool:
        """Return *raw* as a boolean."""
        return parse_on_off(raw, key=key)


@dataclass(frozen=True)
class Duration:
    """Go-style duration expression."""

    def apply(self, raw: str, *, key: str) -> timedelta:
        """Return *raw* as a :class:`~datetime.timedelta`."""
        return parse_duration(raw, key=key)


@dataclass(frozen=True)
class IPAddressRule:
    """Single IP address."""

    def apply(self, raw: str, *, key: str) -> IPAddress:
        """Return *raw* as an IP address."""
        return parse_ip_address(raw, key=key)


@dataclass(frozen=True)
class IPOrCIDR:
    """Comma separated IP addresses or CIDR ranges."""

    def apply(self, raw: str, *, key: str) -> tuple[str, ...]:
        """Validate *raw* and return its entries as written."""
        return parse_ip_or_cidr_list(raw, key=key)


@dataclass(frozen=True)
class HostnamePattern:
    """Comma separated hostnames."""

    def apply(self, raw: str, *, key: str) -> tuple[str, ...]:
        """Validate *raw* and return its hostnames."""
        return parse_hostnames(raw, key=key)


@dataclass(frozen=True)
class PEMExtract:
    """PEM block reduced to its inline base64 payload."""

    kind: str

    def apply(self, raw: str, *, key: str) -> str:
        """Return the inline base64 payload of the PEM block in *raw*."""
        return pem.extract(raw, self.kind, key=key)


__all__ = [
    "CSVChoice",
    "Choice",
    "Duration",
    "HostnamePattern",
    "IPAddressRule",
    "IPOrCIDR",
    "OnOff",
    "PEMExtract",
    "Range",
    "ValidationRule",
    "is_hostname",
    "parse_choice",
    "parse_csv_choices",
    "parse_duration",
    "parse_hostnames",
    "parse_int_range",
    "parse_ip_address",
    "parse_ip_or_cidr",
    "parse_ip_or_cidr_list",
    "parse_on_off",
    "split_csv",
]
