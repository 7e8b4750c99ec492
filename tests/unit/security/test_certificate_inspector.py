"""
settings-audit — unit tests for certificate inspection

File: tests/unit/security/test_certificate_inspector.py
Last updated: 2026-10-17

Purpose
- Verify redacted certificate facts for pinned web-service certificates.

What this test file should cover
- Identity, validity and fingerprint facts for PEM and bare base64 input.
- No key material in the returned facts.
- Undecodable input reported as an ``error`` fact.
"""

from __future__ import annotations

import datetime as dt

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from settings_audit.security import CertificateInspector, X509CertificateInspector


def _self_signed_pem(common_name: str = "hooks.example.invalid") -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    not_before = dt.datetime(2026, 1, 1, tzinfo=dt.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(0x1F2E)
        .not_valid_before(not_before)
        .not_valid_after(not_before + dt.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.mark.unit
def test_inspector_satisfies_protocol() -> None:
    assert isinstance(X509CertificateInspector(), CertificateInspector)


@pytest.mark.unit
def test_describe_reports_identity_and_validity() -> None:
    facts = X509CertificateInspector().describe(_self_signed_pem())

    assert facts["subject"] == "CN=hooks.example.invalid"
    assert facts["issuer"] == facts["subject"]
    assert facts["serial"] == "1F2E"
    assert facts["issueDate"].startswith("2026-01-01T00:00:00")
    assert facts["expireDate"].startswith("2027-01-01")
    assert facts["keyType"] == "EC-secp256r1"
    assert facts["signatureHash"] == "sha256"
    assert len(facts["sha256Hash"]) == 64
    assert "error" not in facts


@pytest.mark.unit
def test_describe_accepts_bare_base64_body() -> None:
    pem = _self_signed_pem("bare.example.invalid")
    body = "".join(line for line in pem.splitlines() if not line.startswith("-----"))

    facts = X509CertificateInspector().describe(body)

    assert facts["subject"] == "CN=bare.example.invalid"


@pytest.mark.unit
def test_describe_never_returns_encoded_material() -> None:
    pem = _self_signed_pem()
    body_lines = [line for line in pem.splitlines() if line and not line.startswith("-----")]

    facts = X509CertificateInspector().describe(pem)

    rendered = " ".join(facts.values())
    assert all(line not in rendered for line in body_lines)
    assert "BEGIN" not in rendered


@pytest.mark.unit
@pytest.mark.parametrize(
    "garbage", ["", "not a certificate", "-----BEGIN CERTIFICATE-----\nAAAA\n"]
)
def test_undecodable_certificate_yields_error_fact(garbage: str) -> None:
    facts = X509CertificateInspector().describe(garbage)

    assert set(facts) == {"error"}
    assert facts["error"].startswith("unable to decode certificate")
