"""Crypto provider capability and its default implementation.

Core components depend on the CryptoProvider protocol rather than on a
concrete library. CryptographyProvider is backed by pyca/cryptography; tests
may substitute a fake.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from signing.domain.states import HashAlgorithm

PUBLIC_EXPONENT = 65537

_HASHES: dict[HashAlgorithm, type[hashes.HashAlgorithm]] = {
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
    HashAlgorithm.MD5: hashes.MD5,
}


@dataclass(frozen=True)
class CertificateFields:
    """Metadata read from an X.509 certificate."""

    subject: str
    issuer: str
    serial_number: int
    not_before: datetime
    not_after: datetime
    public_key_der: bytes


class CryptoProvider(Protocol):
    """Primitive operations the signing core delegates to."""

    @property
    def supported_digests(self) -> frozenset[HashAlgorithm]: ...

    def generate_asymmetric_key_pair(self, key_size: int) -> tuple[Any, Any]:
        """Return (private_key, public_key) for RSA-PSS with SHA-256."""
        ...

    def key_size(self, key: Any) -> int: ...

    def sign(self, private_key: Any, message: bytes, salt_length: int) -> bytes: ...

    def verify(self, public_key: Any, signature: bytes, message: bytes, salt_length: int) -> bool: ...

    def digest(self, algorithm: HashAlgorithm, data: bytes) -> bytes: ...

    def hmac_sha256(self, key: bytes, data: bytes) -> bytes: ...

    def export_public_der(self, public_key: Any) -> bytes: ...

    def export_private_der(self, private_key: Any) -> bytes: ...

    def load_public_der(self, der: bytes) -> Any: ...

    def load_private_der(self, der: bytes) -> Any: ...

    def public_key_of(self, private_key: Any) -> Any: ...

    def self_signed_certificate_pem(
        self,
        private_key: Any,
        subject: str,
        serial_number: int,
        not_before: datetime,
        not_after: datetime,
    ) -> str: ...

    def read_certificate_pem(self, pem: bytes) -> CertificateFields: ...


class CryptographyProvider:
    """CryptoProvider backed by pyca/cryptography."""

    @property
    def supported_digests(self) -> frozenset[HashAlgorithm]:
        return frozenset(_HASHES)

    def generate_asymmetric_key_pair(self, key_size: int) -> tuple[Any, Any]:
        private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)
        return private_key, private_key.public_key()

    def key_size(self, key: Any) -> int:
        return int(key.key_size)

    def sign(self, private_key: Any, message: bytes, salt_length: int) -> bytes:
        return private_key.sign(message, self._pss(salt_length), hashes.SHA256())

    def verify(self, public_key: Any, signature: bytes, message: bytes, salt_length: int) -> bool:
        try:
            public_key.verify(signature, message, self._pss(salt_length), hashes.SHA256())
        except InvalidSignature:
            return False
        return True

    def digest(self, algorithm: HashAlgorithm, data: bytes) -> bytes:
        h = hashes.Hash(_HASHES[algorithm]())
        h.update(data)
        return h.finalize()

    def hmac_sha256(self, key: bytes, data: bytes) -> bytes:
        h = hmac.HMAC(key, hashes.SHA256())
        h.update(data)
        return h.finalize()

    def export_public_der(self, public_key: Any) -> bytes:
        return public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def export_private_der(self, private_key: Any) -> bytes:
        return private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def load_public_der(self, der: bytes) -> Any:
        key = serialization.load_der_public_key(der)
        if not isinstance(key, rsa.RSAPublicKey):
            raise TypeError(f"Expected an RSA public key, got {type(key).__name__}")
        return key

    def load_private_der(self, der: bytes) -> Any:
        key = serialization.load_der_private_key(der, password=None)
        if not isinstance(key, rsa.RSAPrivateKey):
            raise TypeError(f"Expected an RSA private key, got {type(key).__name__}")
        return key

    def public_key_of(self, private_key: Any) -> Any:
        return private_key.public_key()

    def self_signed_certificate_pem(
        self,
        private_key: Any,
        subject: str,
        serial_number: int,
        not_before: datetime,
        not_after: datetime,
    ) -> str:
        name = _subject_name(subject)
        certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=True,
                    key_encipherment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                critical=False,
            )
            .sign(
                private_key,
                hashes.SHA256(),
                rsa_padding=padding.PSS(
                    mgf=padding.MGF1(hashes.SHA256()),
                    salt_length=padding.PSS.DIGEST_LENGTH,
                ),
            )
        )
        return certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8")

    def read_certificate_pem(self, pem: bytes) -> CertificateFields:
        cert = x509.load_pem_x509_certificate(pem)
        return CertificateFields(
            subject=cert.subject.rfc4514_string(),
            issuer=cert.issuer.rfc4514_string(),
            serial_number=cert.serial_number,
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
            public_key_der=self.export_public_der(cert.public_key()),
        )

    @staticmethod
    def _pss(salt_length: int) -> padding.PSS:
        return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=salt_length)


def _subject_name(subject: str) -> x509.Name:
    """Parse an RFC 4514 subject such as "CN=example.com,O=Org,C=US".

    Free text that is not a distinguished name becomes a bare common name.
    """
    if "=" in subject:
        try:
            name = x509.Name.from_rfc4514_string(subject)
            if len(name) > 0:
                return name
        except ValueError:
            pass
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)])
