"""Tests for the pure validator functions and rule variants."""
from __future__ import annotations

import ipaddress
from datetime import timedelta

import pytest

from gwsettings.errors import InvalidChoice, InvalidFormat, InvalidRange
from gwsettings.validators import (
    Choice,
    CSVChoice,
    Duration,
    HostnamePattern,
    IPAddressRule,
    IPOrCIDR,
    OnOff,
    Range,
    is_hostname,
    parse_choice,
    parse_csv_choices,
    parse_duration,
    parse_hostnames,
    parse_int_range,
    parse_ip_address,
    parse_ip_or_cidr,
    parse_ip_or_cidr_list,
    parse_on_off,
    split_csv,
)

PROVIDERS = ("cloudflare", "google", "quad9")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("0", 0), ("5", 5), ("+3", 3)],
)
def test_parse_int_range_accepts_bounds(raw: str, expected: int) -> None:
    """Values inside the inclusive range are returned as integers."""
    assert parse_int_range(raw, 0, 5, key="DOT_VERBOSITY") == expected


@pytest.mark.parametrize("raw", ["6", "-1", "abc", "", " 5", "1.5", "5_0", "9" * 5000])
def test_parse_int_range_rejects(raw: str) -> None:
    """Out-of-range and non-integer text raises InvalidRange."""
    with pytest.raises(InvalidRange) as excinfo:
        parse_int_range(raw, 0, 5, key="DOT_VERBOSITY")

    assert excinfo.value.key == "DOT_VERBOSITY"
    assert excinfo.value.value == raw


def test_parse_choice_is_exact() -> None:
    """Choices are matched exactly, including case."""
    assert parse_choice("google", PROVIDERS, key="K") == "google"
    with pytest.raises(InvalidChoice):
        parse_choice("Google", PROVIDERS, key="K")


def test_parse_csv_choices_preserves_order() -> None:
    """CSV tokens come back in input order."""
    assert parse_csv_choices("google,cloudflare", PROVIDERS, key="K") == ("google", "cloudflare")
    assert parse_csv_choices("", PROVIDERS, key="K") == ()


def test_parse_csv_choices_names_rejected_token() -> None:
    """The first rejected token is reported."""
    with pytest.raises(InvalidChoice) as excinfo:
        parse_csv_choices("cloudflare,notreal,other", PROVIDERS, key="DOT_PROVIDERS")

    assert excinfo.value.value == "notreal"
    assert "notreal" in str(excinfo.value)


def test_parse_csv_choices_does_not_trim() -> None:
    """Whitespace around tokens is significant."""
    with pytest.raises(InvalidChoice) as excinfo:
        parse_csv_choices("cloudflare, google", PROVIDERS, key="K")

    assert excinfo.value.value == " google"


def test_split_csv() -> None:
    """Empty input yields no tokens; empty tokens are kept."""
    assert split_csv("") == []
    assert split_csv("a,,b") == ["a", "", "b"]


def test_parse_on_off() -> None:
    """Only lower-case on/off are accepted."""
    assert parse_on_off("on", key="DOT") is True
    assert parse_on_off("off", key="DOT") is False
    for raw in ("ON", "Off", "yes", "true", "1", ""):
        with pytest.raises(InvalidFormat):
            parse_on_off(raw, key="DOT")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("24h", timedelta(hours=24)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5s", timedelta(seconds=1.5)),
        ("300ms", timedelta(milliseconds=300)),
        ("10us", timedelta(microseconds=10)),
        ("10µs", timedelta(microseconds=10)),
        ("2m3s", timedelta(minutes=2, seconds=3)),
        ("+5m", timedelta(minutes=5)),
        ("-2m", timedelta(minutes=-2)),
        ("0", timedelta(0)),
        (".5h", timedelta(minutes=30)),
        ("2562047h", timedelta(hours=2562047)),
        ("-2562047h", timedelta(hours=-2562047)),
    ],
)
def test_parse_duration_valid(raw: str, expected: timedelta) -> None:
    """Well-formed durations parse to the conventional value."""
    assert parse_duration(raw, key="DNS_UPDATE_PERIOD") == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "24",
        "h",
        "1d",
        "abc",
        "1h 30m",
        " 24h",
        "1.2.3s",
        "-",
        "24H",
        "1h-30m",
        "3000000h",
        "-2562048h",
    ],
)
def test_parse_duration_invalid(raw: str) -> None:
    """Malformed durations raise InvalidFormat."""
    with pytest.raises(InvalidFormat) as excinfo:
        parse_duration(raw, key="DNS_UPDATE_PERIOD")

    assert excinfo.value.key == "DNS_UPDATE_PERIOD"


def test_parse_ip_address() -> None:
    """IPv4 and IPv6 addresses parse; everything else is rejected."""
    assert parse_ip_address("1.1.1.1", key="K") == ipaddress.ip_address("1.1.1.1")
    assert parse_ip_address("2606:4700::1111", key="K").version == 6
    for raw in ("1.1.1", "not-an-ip", "fe80::1%eth0", "10.0.0.0/8", ""):
        with pytest.raises(InvalidFormat):
            parse_ip_address(raw, key="K")


def test_parse_ip_or_cidr_accepts_either_form() -> None:
    """Bare addresses and CIDR ranges are both valid."""
    assert parse_ip_or_cidr("192.168.1.1", key="K") == ipaddress.ip_address("192.168.1.1")
    assert parse_ip_or_cidr("10.0.0.0/8", key="K") == ipaddress.ip_network("10.0.0.0/8")
    assert parse_ip_or_cidr("10.0.0.1/8", key="K") == ipaddress.ip_network("10.0.0.0/8")
    assert parse_ip_or_cidr("fd00::/8", key="K").version == 6


@pytest.mark.parametrize(
    "raw",
    [
        "not-an-ip",
        "10.0.0.0/33",
        "10.0.0/8",
        "/8",
        "",
        "10.0.0.0/255.0.0.0",
        "10.0.0.0/0.255.255.255",
        "10.0.0.0/+8",
    ],
)
def test_parse_ip_or_cidr_rejects_when_both_fail(raw: str) -> None:
    """Only values that are neither address nor range fail."""
    with pytest.raises(InvalidFormat):
        parse_ip_or_cidr(raw, key="DOT_PRIVATE_ADDRESS")


def test_parse_ip_or_cidr_list_keeps_tokens() -> None:
    """Validated tokens are returned as written."""
    assert parse_ip_or_cidr_list("10.0.0.1/8,192.168.1.1", key="K") == (
        "10.0.0.1/8",
        "192.168.1.1",
    )
    assert parse_ip_or_cidr_list("", key="K") == ()


@pytest.mark.parametrize(
    "value",
    ["a", "example.com", "sub.domain.example.org", "xn--bcher-kva.example", "1.2.3.4"],
)
def test_is_hostname_accepts(value: str) -> None:
    """Conventional hostnames are accepted."""
    assert is_hostname(value)


@pytest.mark.parametrize(
    "value",
    [
        "",
        "-bad.com",
        "bad-.com",
        "under_score.com",
        "*.example.com",
        "example.com.",
        "two..dots",
        "a" * 64 + ".com",
        ".".join(["a" * 63] * 4),
    ],
)
def test_is_hostname_rejects(value: str) -> None:
    """Wildcards, underscores and malformed labels are rejected."""
    assert not is_hostname(value)


def test_parse_hostnames_fails_fast_on_first_bad_entry() -> None:
    """The first invalid hostname is named in the error."""
    with pytest.raises(InvalidFormat) as excinfo:
        parse_hostnames("good.com,bad_host,-worse", key="UNBLOCK")

    assert excinfo.value.value == "bad_host"
    assert parse_hostnames("good.com,example.org", key="UNBLOCK") == ("good.com", "example.org")


def test_rule_variants_delegate_to_validators() -> None:
    """Each rule applies its validator with the bound parameters."""
    assert Range(0, 2).apply("2", key="K") == 2
    assert Choice(PROVIDERS).apply("quad9", key="K") == "quad9"
    assert CSVChoice(PROVIDERS).apply("quad9,google", key="K") == ("quad9", "google")
    assert OnOff().apply("on", key="K") is True
    assert Duration().apply("1m", key="K") == timedelta(minutes=1)
    assert str(IPAddressRule().apply("8.8.8.8", key="K")) == "8.8.8.8"
    assert IPOrCIDR().apply("10.0.0.0/8", key="K") == ("10.0.0.0/8",)
    assert HostnamePattern().apply("example.com", key="K") == ("example.com",)
    with pytest.raises(InvalidRange):
        Range(0, 2).apply("3", key="K")
