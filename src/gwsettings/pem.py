"""PEM block decoding and credential payload extraction.

OpenVPN configuration templates embed client keys and certificates inline as
one unbroken base64 token. :func:`extract` is the single place producing that
format, whatever line wrapping the source PEM used.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

from .errors import PEMDecodeFailure

LOGGER = logging.getLogger(__name__)

PRIVATE_KEY = "PRIVATE KEY"
CERTIFICATE = "CERTIFICATE"

_LINE_WIDTH = 64
# Blanks dropped from a block body before base64 decoding.
_BODY_BLANKS = str.maketrans("", "", " \t\r")
_BLOCK_RE = re.compile(
    r"-----BEGIN (?P<type>[^\r\n-]+)-----[ \t]*\r?\n"
    r"(?P<body>(?:.*?\n)?)"
    r"-----END (?P=type)-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class PEMBlock:
    """A decoded PEM block."""

    type: str
    data: bytes
    headers: tuple[tuple[str, str], ...] = ()


def decode_block(raw: bytes | str, *, key: str | None = None) -> PEMBlock:
    """Decode the first well-formed PEM block found in *raw*.

    Text before the block is ignored. Raises :class:`PEMDecodeFailure` when
    no block can be decoded.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    for match in _BLOCK_RE.finditer(text):
        block = _parse_match(match.group("type"), match.group("body"))
        if block is not None:
            return block
    raise PEMDecodeFailure("cannot decode PEM block", key=key)


def _parse_match(block_type: str, body: str) -> PEMBlock | None:
    lines = body.replace("\r\n", "\n").split("\n")
    headers: list[tuple[str, str]] = []
    if lines and ":" in lines[0]:
        while lines and lines[0].strip():
            name, sep, value = lines.pop(0).partition(":")
            if not sep:
                return None
            headers.append((name.strip(), value.strip()))
        if lines:
            lines.pop(0)
    payload = "".join(lines).translate(_BODY_BLANKS)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    return PEMBlock(type=block_type, data=data, headers=tuple(headers))


def encode_block(block: PEMBlock) -> str:
    """Return the canonical PEM encoding of *block* (64 column body)."""
    lines = [f"-----BEGIN {block.type}-----"]
    if block.headers:
        lines.extend(f"{name}: {value}" for name, value in block.headers)
        lines.append("")
    encoded = base64.b64encode(block.data).decode("ascii")
    lines.extend(
        encoded[index : index + _LINE_WIDTH] for index in range(0, len(encoded), _LINE_WIDTH)
    )
    lines.append(f"-----END {block.type}-----")
    return "\n".join(lines) + "\n"


def _type_matches(block_type: str, kind: str) -> bool:
    return block_type == kind or block_type.endswith(f" {kind}")


def extract(raw: bytes | str, kind: str, *, key: str | None = None) -> str:
    """Return the header-stripped, newline-free base64 payload of *raw*.

    *kind* is ``"PRIVATE KEY"`` or ``"CERTIFICATE"``; qualified block types
    such as ``RSA PRIVATE KEY`` satisfy ``PRIVATE KEY``. The key material is
    not validated cryptographically.
    """
    block = decode_block(raw, key=key)
    if not _type_matches(block.type, kind):
        raise PEMDecodeFailure(
            f"PEM block of type {block.type!r} is not a {kind.lower()}",
            key=key,
        )
    if block.headers:
        LOGGER.debug("Dropping %d PEM header(s) from %s", len(block.headers), key or kind)
    canonical = encode_block(PEMBlock(type=block.type, data=block.data))
    payload = canonical.replace("\n", "")
    payload = payload.removeprefix(f"-----BEGIN {block.type}-----")
    return payload.removesuffix(f"-----END {block.type}-----")


def extract_private_key(raw: bytes | str, *, key: str | None = None) -> str:
    """Extract a private key payload."""
    return extract(raw, PRIVATE_KEY, key=key)


def extract_certificate(raw: bytes | str, *, key: str | None = None) -> str:
    """Extract a certificate payload."""
    return extract(raw, CERTIFICATE, key=key)


def restore_block(payload: str, block_type: str) -> str:
    """Re-wrap an extracted *payload* into a PEM block of *block_type*."""
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PEMDecodeFailure(f"payload is not valid base64: {exc}") from exc
    return encode_block(PEMBlock(type=block_type, data=data))


def inspect_block(block: PEMBlock) -> dict[str, object]:
    """Describe the certificate or private key held in *block*.

    Unlike :func:`extract`, this loads the DER content with ``cryptography``
    so it fails on structurally valid PEM wrapping garbage.
    """
    description: dict[str, object] = {
        "type": block.type,
        "size": len(block.data),
        "sha256": hashlib.sha256(block.data).hexdigest(),
    }
    if _type_matches(block.type, CERTIFICATE):
        try:
            cert = x509.load_der_x509_certificate(block.data)
        except ValueError as exc:
            raise PEMDecodeFailure(f"cannot load certificate: {exc}") from exc
        description.update(
            {
                "subject": cert.subject.rfc4514_string(),
                "issuer": cert.issuer.rfc4514_string(),
                "serial_number": format(cert.serial_number, "x"),
                "not_valid_before": _as_utc(cert.not_valid_before_utc).isoformat(),
                "not_valid_after": _as_utc(cert.not_valid_after_utc).isoformat(),
            }
        )
        return description
    if _type_matches(block.type, PRIVATE_KEY):
        if block.headers:
            raise PEMDecodeFailure("encrypted private keys cannot be inspected")
        try:
            private_key = serialization.load_der_private_key(block.data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise PEMDecodeFailure(f"cannot load private key: {exc}") from exc
        description["algorithm"] = _describe_key(private_key)
        return description
    raise PEMDecodeFailure(f"unsupported PEM block type {block.type!r}")


def _describe_key(private_key: object) -> str:
    if isinstance(private_key, rsa.RSAPrivateKey):
        return f"RSA {private_key.key_size}"
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return f"EC {private_key.curve.name}"
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return "Ed25519"
    if isinstance(private_key, ed448.Ed448PrivateKey):
        return "Ed448"
    return type(private_key).__name__


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


__all__ = [
    "CERTIFICATE",
    "PEMBlock",
    "PRIVATE_KEY",
    "decode_block",
    "encode_block",
    "extract",
    "extract_certificate",
    "extract_private_key",
    "inspect_block",
    "restore_block",
]
