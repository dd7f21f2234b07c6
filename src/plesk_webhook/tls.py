"""In-memory self-signed TLS identity for the HTTPS listener."""

from __future__ import annotations

import ssl
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from plesk_webhook.config import AppConfig

_VALIDITY = timedelta(days=3650)
_CLOCK_SKEW = timedelta(minutes=5)


@dataclass(frozen=True)
class TlsIdentity:
    """PEM-encoded certificate and unencrypted PKCS#8 private key."""

    cert_pem: bytes
    key_pem: bytes


def identity_hostnames(config: AppConfig) -> list[str]:
    """Subject alternative names for the webhook certificate."""
    names = ["localhost", f"{config.solver_name}.cert-manager.svc.cluster.local"]
    names.extend(name for name in config.extra_tls_names if name not in names)
    return names


def generate_self_signed(hostnames: list[str]) -> TlsIdentity:
    """Generate an ECDSA P-256 self-signed certificate covering ``hostnames``.

    The first hostname becomes the subject common name.
    """
    if not hostnames:
        raise ValueError("At least one hostname is required for the TLS certificate")

    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, hostnames[0])])
    now = datetime.now(UTC)
    ski = x509.SubjectKeyIdentifier.from_public_key(key.public_key())

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - _CLOCK_SKEW)
        .not_valid_after(now + _VALIDITY)
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(h) for h in hostnames]), critical=False)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(ski, critical=False)
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski), critical=False)
        .sign(key, hashes.SHA256())
    )

    return TlsIdentity(
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
        key_pem=key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ),
    )


def build_server_context(identity: TlsIdentity) -> ssl.SSLContext:
    """Load ``identity`` into a server-side SSL context.

    ``ssl`` only loads key material from files, so the PEMs are written to a
    private temporary directory that is removed before returning.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    with tempfile.TemporaryDirectory() as tmp:
        cert_path = Path(tmp) / "tls.crt"
        key_path = Path(tmp) / "tls.key"
        cert_path.write_bytes(identity.cert_pem)
        key_path.write_bytes(identity.key_pem)
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    return context
