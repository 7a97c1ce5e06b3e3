from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat
from cryptography.x509.oid import NameOID

from .errors import GenerationFailure
from .files import write_bytes

log = logging.getLogger(__name__)

KEY_SIZE = 2048
VALIDITY_DAYS = 365
KEY_FILENAME = "certificate.key"
CERT_FILENAME = "certificate.crt"


@dataclass(frozen=True)
class TlsKeypair:
    key_path: Path
    cert_path: Path


def load_or_create_self_signed(directory: Path, common_name: str, *, owner: str | None) -> TlsKeypair:
    key_path = directory / KEY_FILENAME
    cert_path = directory / CERT_FILENAME
    if key_path.exists() and cert_path.exists():
        return TlsKeypair(key_path=key_path, cert_path=cert_path)

    try:
        key_pem, cert_pem = _generate(common_name)
        write_bytes(key_path, key_pem, mode=0o600, owner=owner)
        write_bytes(cert_path, cert_pem, mode=0o644, owner=owner)
    except (OSError, ValueError) as exc:
        raise GenerationFailure(f"failed to generate TLS keypair in {directory}: {exc}") from exc
    log.info("generated self-signed certificate for CN=%s in %s", common_name, directory)
    return TlsKeypair(key_path=key_path, cert_path=cert_path)


def _generate(common_name: str) -> tuple[bytes, bytes]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=VALIDITY_DAYS))
    )
    san = _subject_alt_name(common_name)
    if san is not None:
        builder = builder.add_extension(san, critical=False)
    cert = builder.sign(key, hashes.SHA256())

    key_pem = key.private_bytes(Encoding.PEM, PrivateFormat.TraditionalOpenSSL, NoEncryption())
    cert_pem = cert.public_bytes(Encoding.PEM)
    return key_pem, cert_pem


def _subject_alt_name(common_name: str) -> x509.SubjectAlternativeName | None:
    try:
        return x509.SubjectAlternativeName([x509.IPAddress(ipaddress.ip_address(common_name))])
    except ValueError:
        pass
    if not common_name:
        return None
    return x509.SubjectAlternativeName([x509.DNSName(common_name)])
