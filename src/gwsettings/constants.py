"""Static tables used to validate gateway settings."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderData:
    """Endpoints of a DNS over TLS provider."""

    ipv4: tuple[str, ...]
    ipv6: tuple[str, ...]
    host: str


DOT_PROVIDERS: dict[str, ProviderData] = {
    "cloudflare": ProviderData(
        ipv4=("1.1.1.1", "1.0.0.1"),
        ipv6=("2606:4700:4700::1111", "2606:4700:4700::1001"),
        host="cloudflare-dns.com",
    ),
    "google": ProviderData(
        ipv4=("8.8.8.8", "8.8.4.4"),
        ipv6=("2001:4860:4860::8888", "2001:4860:4860::8844"),
        host="dns.google",
    ),
    "quad9": ProviderData(
        ipv4=("9.9.9.9", "149.112.112.112"),
        ipv6=("2620:fe::fe", "2620:fe::9"),
        host="dns.quad9.net",
    ),
    "quadrant": ProviderData(
        ipv4=("12.159.2.159",),
        ipv6=("2001:19f0::f",),
        host="dns-tls.qis.io",
    ),
    "cleanbrowsing": ProviderData(
        ipv4=("185.228.168.9", "185.228.169.9"),
        ipv6=("2a0d:2a00:1::2", "2a0d:2a00:2::2"),
        host="security-filter-dns.cleanbrowsing.org",
    ),
    "securedns": ProviderData(
        ipv4=("146.185.167.43",),
        ipv6=("2a03:b0c0:0:1010::e9a:3001",),
        host="dot.securedns.eu",
    ),
    "libredns": ProviderData(
        ipv4=("116.202.176.26",),
        ipv6=(),
        host="dot.libredns.gr",
    ),
}


def get_provider_data(name: str) -> ProviderData | None:
    """Return the endpoints for DNS over TLS provider *name*, if known."""
    return DOT_PROVIDERS.get(name)


def dot_provider_choices() -> tuple[str, ...]:
    """Return the known DNS over TLS provider identifiers."""
    return tuple(DOT_PROVIDERS)


VPN_PROVIDERS: tuple[str, ...] = (
    "private internet access",
    "mullvad",
    "windscribe",
    "surfshark",
    "cyberghost",
    "vyprvpn",
    "nordvpn",
    "purevpn",
    "privado",
)
CYBERGHOST = "cyberghost"

CYBERGHOST_GROUPS: tuple[str, ...] = (
    "Premium UDP Europe",
    "Premium UDP USA",
    "Premium UDP Asia",
    "NoSpy UDP Europe",
    "Premium TCP Europe",
    "Premium TCP USA",
    "Premium TCP Asia",
    "NoSpy TCP Europe",
)

CYBERGHOST_REGIONS: tuple[str, ...] = (
    "Albania", "Algeria", "Andorra", "Argentina", "Armenia", "Australia",
    "Austria", "Bahamas", "Bangladesh", "Belarus", "Belgium", "Bosnia and Herzegovina",
    "Brazil", "Bulgaria", "Cambodia", "Canada", "Chile", "China", "Colombia",
    "Costa Rica", "Croatia", "Cyprus", "Czech Republic", "Denmark", "Egypt",
    "Estonia", "Finland", "France", "Georgia", "Germany", "Greece", "Greenland",
    "Hong Kong", "Hungary", "Iceland", "India", "Indonesia", "Iran", "Ireland",
    "Isle of Man", "Israel", "Italy", "Japan", "Kazakhstan", "Kenya", "Latvia",
    "Liechtenstein", "Lithuania", "Luxembourg", "Macao", "Macedonia", "Malaysia",
    "Malta", "Mexico", "Moldova", "Monaco", "Mongolia", "Montenegro", "Morocco",
    "Netherlands", "New Zealand", "Nigeria", "Norway", "Pakistan", "Panama",
    "Philippines", "Poland", "Portugal", "Qatar", "Romania", "Russian Federation",
    "Saudi Arabia", "Serbia", "Singapore", "Slovakia", "Slovenia", "South Africa",
    "Spain", "Sri Lanka", "Sweden", "Switzerland", "Taiwan", "Thailand", "Turkey",
    "Ukraine", "United Arab Emirates", "United Kingdom", "United States",
    "Venezuela", "Vietnam",
)


__all__ = [
    "CYBERGHOST",
    "CYBERGHOST_GROUPS",
    "CYBERGHOST_REGIONS",
    "DOT_PROVIDERS",
    "ProviderData",
    "VPN_PROVIDERS",
    "dot_provider_choices",
    "get_provider_data",
]
