"""
settings-audit — certificate inspection

File: src/settings_audit/security/certificates.py
Last updated: 2026-10-17

Purpose
- Produce redacted debug facts for trusted certificates pinned by web-service actions.

Functional requirements
- Report identity and validity facts only: subject, issuer, serial, validity window,
  fingerprints, key type. Never return key material or the encoded certificate body.
- A certificate that cannot be decoded yields an ``error`` fact instead of raising.
"""

from __future__ import annotations

import textwrap
from typing import Final, Protocol, runtime_checkable

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa

_PEM_HEADER: Final[str] = "-----BEGIN CERTIFICATE-----"
_PEM_FOOTER: Final[str] = "-----END CERTIFICATE-----"


@runtime_checkable
class CertificateInspector(Protocol):
    """Turns one encoded certificate into a flat map of redacted facts."""

    def describe(self, certificate: str) -> dict[str, str]: ...


class X509CertificateInspector:
    """Certificate inspector backed by ``cryptography``'s X.509 loader."""

    def describe(self, certificate: str) -> dict[str, str]:
        try:
            parsed = x509.load_pem_x509_certificate(_as_pem(certificate).encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            return {"error": f"unable to decode certificate: {exc}"}

        facts: dict[str, str] = {
            "subject": parsed.subject.rfc4514_string(),
            "issuer": parsed.issuer.rfc4514_string(),
            "serial": format(parsed.serial_number, "X"),
            "issueDate": parsed.not_valid_before_utc.isoformat(),
            "expireDate": parsed.not_valid_after_utc.isoformat(),
            "sha1Hash": parsed.fingerprint(hashes.SHA1()).hex().upper(),  # noqa: S303
            "sha256Hash": parsed.fingerprint(hashes.SHA256()).hex().upper(),
            "keyType": _key_type(parsed),
        }
        hash_algorithm = parsed.signature_hash_algorithm
        if hash_algorithm is not None:
            facts["signatureHash"] = hash_algorithm.name
        return facts


def _as_pem(certificate: str) -> str:
    stripped = certificate.strip()
    if stripped.startswith(_PEM_HEADER):
        return stripped
    body = "".join(stripped.split())
    wrapped = "\n".join(textwrap.wrap(body, 64))
    return f"{_PEM_HEADER}\n{wrapped}\n{_PEM_FOOTER}\n"


def _key_type(certificate: x509.Certificate) -> str:
    public_key = certificate.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        return f"RSA-{public_key.key_size}"
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return f"EC-{public_key.curve.name}"
    if isinstance(public_key, dsa.DSAPublicKey):
        return f"DSA-{public_key.key_size}"
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return "Ed25519"
    if isinstance(public_key, ed448.Ed448PublicKey):
        return "Ed448"
    return type(public_key).__name__


__all__ = ["CertificateInspector", "X509CertificateInspector"]
