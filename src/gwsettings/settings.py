"""Domain-grouped, immutable settings built from a :class:`Reader`.

:func:`resolve_settings` is the single linear resolution pass run at process
startup. It either returns a complete :class:`AllSettings` or raises the first
:class:`~gwsettings.errors.SettingsError` encountered.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

from .config import AppConfig, load_config
from .constants import CYBERGHOST
from .events import SettingsWarning, WarningCollector
from .reader import Reader
from .sources import EnvSource
from .validators import IPAddress

LOGGER = logging.getLogger(__name__)

REDACTED = "[redacted]"


@dataclass(frozen=True)
class DNSSettings:
    """DNS over TLS and plaintext DNS settings."""

    enabled: bool
    providers: tuple[str, ...]
    verbosity: int
    verbosity_details: int
    validation_log_level: int
    block_malicious: bool
    block_surveillance: bool
    block_ads: bool
    unblock: tuple[str, ...]
    caching: bool
    private_addresses: tuple[str, ...]
    ipv6: bool
    update_period: timedelta
    plaintext_address: IPAddress
    keep_nameserver: bool

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "enabled": self.enabled,
            "providers": list(self.providers),
            "verbosity": self.verbosity,
            "verbosity_details": self.verbosity_details,
            "validation_log_level": self.validation_log_level,
            "block_malicious": self.block_malicious,
            "block_surveillance": self.block_surveillance,
            "block_ads": self.block_ads,
            "unblock": list(self.unblock),
            "caching": self.caching,
            "private_addresses": list(self.private_addresses),
            "ipv6": self.ipv6,
            "update_period_seconds": self.update_period.total_seconds(),
            "plaintext_address": str(self.plaintext_address),
            "keep_nameserver": self.keep_nameserver,
        }


@dataclass(frozen=True)
class CyberghostSettings:
    """Cyberghost server selection and OpenVPN client credentials."""

    group: str
    regions: tuple[str, ...]
    client_key: str
    client_certificate: str

    def to_dict(self, *, reveal_secrets: bool = False) -> dict[str, object]:
        """Return a serialisable representation; credentials are redacted by default."""
        return {
            "group": self.group,
            "regions": list(self.regions),
            "client_key": self.client_key if reveal_secrets else REDACTED,
            "client_certificate": self.client_certificate if reveal_secrets else REDACTED,
        }


@dataclass(frozen=True)
class AllSettings:
    """Every settings group resolved for this process run."""

    vpn_provider: str
    dns: DNSSettings
    cyberghost: CyberghostSettings | None
    warnings: tuple[SettingsWarning, ...] = ()

    def to_dict(self, *, reveal_secrets: bool = False) -> dict[str, object]:
        """Return a JSON-serialisable representation of the settings."""
        return {
            "vpn_provider": self.vpn_provider,
            "dns": self.dns.to_dict(),
            "cyberghost": (
                self.cyberghost.to_dict(reveal_secrets=reveal_secrets)
                if self.cyberghost is not None
                else None
            ),
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


def get_dns_settings(reader: Reader) -> DNSSettings:
    """Resolve the DNS settings group."""
    return DNSSettings(
        enabled=reader.get_dns_over_tls(),
        providers=reader.get_dns_over_tls_providers(),
        verbosity=reader.get_dns_over_tls_verbosity(),
        verbosity_details=reader.get_dns_over_tls_verbosity_details(),
        validation_log_level=reader.get_dns_over_tls_validation_log_level(),
        block_malicious=reader.get_dns_malicious_blocking(),
        block_surveillance=reader.get_dns_surveillance_blocking(),
        block_ads=reader.get_dns_ads_blocking(),
        unblock=reader.get_dns_unblocked_hostnames(),
        caching=reader.get_dns_over_tls_caching(),
        private_addresses=reader.get_dns_over_tls_private_addresses(),
        ipv6=reader.get_dns_over_tls_ipv6(),
        update_period=reader.get_dns_update_period(),
        plaintext_address=reader.get_dns_plaintext(),
        keep_nameserver=reader.get_dns_keep_nameserver(),
    )


def get_cyberghost_settings(reader: Reader) -> CyberghostSettings:
    """Resolve the Cyberghost settings group."""
    return CyberghostSettings(
        group=reader.get_cyberghost_group(),
        regions=reader.get_cyberghost_regions(),
        client_key=reader.get_cyberghost_client_key(),
        client_certificate=reader.get_cyberghost_client_certificate(),
    )


def resolve_settings(reader: Reader) -> AllSettings:
    """Resolve every settings group in one pass."""
    vpn_provider = reader.get_vpn_provider()
    dns = get_dns_settings(reader)
    cyberghost = get_cyberghost_settings(reader) if vpn_provider == CYBERGHOST else None
    LOGGER.debug("Settings resolved for VPN provider %s", vpn_provider)
    return AllSettings(
        vpn_provider=vpn_provider,
        dns=dns,
        cyberghost=cyberghost,
        warnings=reader.warnings,
    )


def build_reader(
    env: Mapping[str, str] | None = None,
    *,
    config: AppConfig | None = None,
) -> Reader:
    """Return a reader wired to *env* and the tool configuration."""
    app_config = config or load_config(env=env)
    source = EnvSource(
        env,
        secrets_dir=app_config.secrets_dir,
        secret_file_suffix=app_config.secret_file_suffix,
    )
    return Reader(source, warnings=WarningCollector(), files=app_config.files)


def load_settings(
    env: Mapping[str, str] | None = None,
    *,
    config: AppConfig | None = None,
) -> AllSettings:
    """Resolve settings from *env* (``os.environ`` when omitted)."""
    return resolve_settings(build_reader(env, config=config))


__all__ = [
    "AllSettings",
    "CyberghostSettings",
    "DNSSettings",
    "build_reader",
    "get_cyberghost_settings",
    "get_dns_settings",
    "load_settings",
    "resolve_settings",
]
