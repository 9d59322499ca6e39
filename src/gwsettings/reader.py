"""Per-setting read and validate pipeline.

Each ``get_*`` method reads one environment key through the injected
:class:`~gwsettings.sources.EnvSource`, applies its validation rule and returns
the typed value. Methods are independent of each other; the first failure
propagates to the caller unchanged.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import TypeVar

from .alias import AliasPolicy, resolve_alias
from .config import CredentialFilesConfig
from .constants import (
    CYBERGHOST_GROUPS,
    CYBERGHOST_REGIONS,
    VPN_PROVIDERS,
    dot_provider_choices,
)
from .events import SettingsWarning, WarningCollector
from .pem import CERTIFICATE, PRIVATE_KEY
from .sources import EnvSource
from .validators import (
    Choice,
    CSVChoice,
    Duration,
    HostnamePattern,
    IPAddress,
    IPAddressRule,
    IPOrCIDR,
    OnOff,
    PEMExtract,
    Range,
    ValidationRule,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

SURVEILLANCE_ALIAS = AliasPolicy(
    deprecated="BLOCK_NSA",
    replacement="BLOCK_SURVEILLANCE",
    default="off",
)


class Reader:
    """Read gateway settings from environment variables and secret files."""

    def __init__(
        self,
        source: EnvSource,
        *,
        warnings: WarningCollector | None = None,
        files: CredentialFilesConfig | None = None,
    ) -> None:
        """Initialise the reader around a value *source*."""
        self._source = source
        self._warnings = warnings if warnings is not None else WarningCollector()
        self._files = files or CredentialFilesConfig()

    @property
    def warnings(self) -> tuple[SettingsWarning, ...]:
        """Return the warnings emitted by this reader so far."""
        return self._warnings.warnings

    def _read(
        self,
        key: str,
        rule: ValidationRule[T],
        *,
        default: str | None = None,
        compulsory: bool = False,
    ) -> T:
        raw = self._source.get(key, default=default, compulsory=compulsory)
        value = rule.apply(raw, key=key)
        LOGGER.debug("Resolved %s", key)
        return value

    def _read_pem(self, key: str, kind: str, fallback_file: Path) -> str:
        raw = self._source.get_secret(key, fallback_file=fallback_file)
        return PEMExtract(kind).apply(raw.decode("utf-8", errors="replace"), key=key)

    # DNS over TLS

    def get_dns_over_tls(self) -> bool:
        """Return whether DNS over TLS is enabled (``DOT``)."""
        return self._read("DOT", OnOff(), default="on")

    def get_dns_over_tls_providers(self) -> tuple[str, ...]:
        """Return the DNS over TLS providers to use (``DOT_PROVIDERS``)."""
        return self._read("DOT_PROVIDERS", CSVChoice(dot_provider_choices()), default="cloudflare")

    def get_dns_over_tls_verbosity(self) -> int:
        """Return the Unbound verbosity level (``DOT_VERBOSITY``)."""
        return self._read("DOT_VERBOSITY", Range(0, 5), default="1")

    def get_dns_over_tls_verbosity_details(self) -> int:
        """Return the Unbound log detail level (``DOT_VERBOSITY_DETAILS``)."""
        return self._read("DOT_VERBOSITY_DETAILS", Range(0, 4), default="0")

    def get_dns_over_tls_validation_log_level(self) -> int:
        """Return the Unbound DNSSEC validation log level (``DOT_VALIDATION_LOGLEVEL``)."""
        return self._read("DOT_VALIDATION_LOGLEVEL", Range(0, 2), default="0")

    def get_dns_malicious_blocking(self) -> bool:
        """Return whether malicious hostnames are blocked (``BLOCK_MALICIOUS``)."""
        return self._read("BLOCK_MALICIOUS", OnOff(), default="on")

    def get_dns_surveillance_blocking(self) -> bool:
        """Return whether surveillance hostnames are blocked.

        Reads ``BLOCK_SURVEILLANCE``, honouring the deprecated ``BLOCK_NSA``.
        """
        return resolve_alias(self._source, self._warnings, SURVEILLANCE_ALIAS, OnOff())

    def get_dns_ads_blocking(self) -> bool:
        """Return whether ads hostnames are blocked (``BLOCK_ADS``)."""
        return self._read("BLOCK_ADS", OnOff(), default="off")

    def get_dns_unblocked_hostnames(self) -> tuple[str, ...]:
        """Return hostnames removed from the block lists (``UNBLOCK``)."""
        return self._read("UNBLOCK", HostnamePattern())

    def get_dns_over_tls_caching(self) -> bool:
        """Return whether Unbound caching is enabled (``DOT_CACHING``)."""
        return self._read("DOT_CACHING", OnOff(), default="on")

    def get_dns_over_tls_private_addresses(self) -> tuple[str, ...]:
        """Return private IPs and CIDR ranges (``DOT_PRIVATE_ADDRESS``)."""
        return self._read("DOT_PRIVATE_ADDRESS", IPOrCIDR())

    def get_dns_over_tls_ipv6(self) -> bool:
        """Return whether IPv6 DNS over TLS is used (``DOT_IPV6``)."""
        return self._read("DOT_IPV6", OnOff(), default="off")

    def get_dns_update_period(self) -> timedelta:
        """Return the block list refresh period (``DNS_UPDATE_PERIOD``)."""
        return self._read("DNS_UPDATE_PERIOD", Duration(), default="24h")

    def get_dns_plaintext(self) -> IPAddress:
        """Return the plaintext DNS server used without DoT (``DNS_PLAINTEXT_ADDRESS``)."""
        return self._read("DNS_PLAINTEXT_ADDRESS", IPAddressRule(), default="1.1.1.1")

    def get_dns_keep_nameserver(self) -> bool:
        """Return whether /etc/resolv.conf nameservers are kept (``DNS_KEEP_NAMESERVER``)."""
        return self._read("DNS_KEEP_NAMESERVER", OnOff(), default="off")

    # VPN provider

    def get_vpn_provider(self) -> str:
        """Return the VPN service provider (``VPNSP``)."""
        return self._read("VPNSP", Choice(VPN_PROVIDERS), default="private internet access")

    def get_cyberghost_group(self) -> str:
        """Return the Cyberghost server group (``CYBERGHOST_GROUP``)."""
        return self._read(
            "CYBERGHOST_GROUP",
            Choice(CYBERGHOST_GROUPS),
            default="Premium UDP Europe",
        )

    def get_cyberghost_regions(self) -> tuple[str, ...]:
        """Return the Cyberghost server countries (``REGION``); empty means any."""
        return self._read("REGION", CSVChoice(CYBERGHOST_REGIONS))

    def get_cyberghost_client_key(self) -> str:
        """Return the inline OpenVPN client key payload.

        Read from the ``OPENVPN_CLIENTKEY`` secret file, the variable itself or
        the configured client key file, in that order.
        """
        return self._read_pem("OPENVPN_CLIENTKEY", PRIVATE_KEY, self._files.client_key)

    def get_cyberghost_client_certificate(self) -> str:
        """Return the inline OpenVPN client certificate payload.

        Read from the ``OPENVPN_CLIENTCRT`` secret file, the variable itself or
        the configured client certificate file, in that order.
        """
        return self._read_pem("OPENVPN_CLIENTCRT", CERTIFICATE, self._files.client_cert)


__all__ = ["Reader", "SURVEILLANCE_ALIAS"]
