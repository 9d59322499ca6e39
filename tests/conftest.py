"""Shared fixtures for the gwsettings test suite."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from gwsettings.config import AppConfig, load_config
from gwsettings.events import WarningCollector
from gwsettings.reader import Reader
from gwsettings.sources import EnvSource


@dataclass(frozen=True)
class PEMMaterial:
    """PEM encoded credentials generated for a test run."""

    key_pkcs8: bytes
    key_traditional: bytes
    certificate: bytes
    key_der: bytes
    certificate_der: bytes


@pytest.fixture(scope="session")
def pem_material() -> PEMMaterial:
    """Generate an RSA key and a matching self-signed certificate."""
    now = datetime.now(UTC)
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "client.example")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=60))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return PEMMaterial(
        key_pkcs8=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        key_traditional=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        certificate=cert.public_bytes(serialization.Encoding.PEM),
        key_der=key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        certificate_der=cert.public_bytes(serialization.Encoding.DER),
    )


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Tool configuration pointing every path into *tmp_path*."""
    return load_config(
        config_file=tmp_path / "missing.yml",
        env={},
        overrides={
            "secrets_dir": str(tmp_path / "secrets"),
            "files": {
                "client_key": str(tmp_path / "client.key"),
                "client_cert": str(tmp_path / "client.crt"),
            },
        },
    )


@pytest.fixture
def make_reader(app_config: AppConfig):
    """Return a factory building a reader over an environment mapping."""

    def _factory(env: dict[str, str]) -> Reader:
        source = EnvSource(
            env,
            secrets_dir=app_config.secrets_dir,
            secret_file_suffix=app_config.secret_file_suffix,
        )
        return Reader(source, warnings=WarningCollector(), files=app_config.files)

    return _factory
