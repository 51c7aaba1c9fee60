"""Value objects exchanged between the signing core and its callers."""

import base64
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .states import CertificateSource, CertificateStatus, KeyUsage

SIGNATURE_ALGORITHM = "RSA-PSS"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=False)
class PublicKeyHandle:
    """Verify-only public key. `key` is the provider's native key object."""

    key: Any = field(repr=False)
    key_size: int
    key_id: str
    algorithm: str = SIGNATURE_ALGORITHM
    usage: KeyUsage = field(default=KeyUsage.VERIFY, init=False)


@dataclass(frozen=True, eq=False)
class PrivateKeyHandle:
    """Sign-only private key. `key_id` identifies the matching public key."""

    key: Any = field(repr=False)
    key_size: int
    key_id: str
    algorithm: str = SIGNATURE_ALGORITHM
    usage: KeyUsage = field(default=KeyUsage.SIGN, init=False)


@dataclass(frozen=True)
class KeyPair:
    """Public and private halves generated (or imported) together."""

    public: PublicKeyHandle
    private: PrivateKeyHandle

    @property
    def key_size(self) -> int:
        return self.public.key_size

    @property
    def key_id(self) -> str:
        return self.public.key_id


@dataclass(frozen=True)
class SignatureResult:
    signature: bytes
    algorithm: str
    key_size: int
    salt_length: int
    created_at: datetime

    @property
    def signature_b64(self) -> str:
        """Standard base64 text accepted by SignatureEngine.verify."""
        return base64.b64encode(self.signature).decode("ascii")


@dataclass(frozen=True)
class HashResult:
    algorithm: str
    digest_hex: str
    input_size: int
    computed_at: datetime


@dataclass(frozen=True)
class CertificateRecord:
    """Subject/issuer/validity metadata, optionally bound to a key pair.

    `public_key_ref` is the key id of the bound public key; it is a lookup
    reference only and is None for imported records without known key material.
    """

    subject: str
    issuer: str
    serial_number: str
    valid_from: datetime
    valid_to: datetime
    public_key_ref: str | None
    source: CertificateSource = CertificateSource.ISSUED

    @property
    def is_self_signed(self) -> bool:
        return self.issuer == self.subject

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "issuer": self.issuer,
            "serialNumber": self.serial_number,
            "validFrom": self.valid_from.isoformat(),
            "validTo": self.valid_to.isoformat(),
            "publicKey": self.public_key_ref,
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], source: CertificateSource = CertificateSource.IMPORTED
    ) -> "CertificateRecord":
        """Build a record from the to_dict() layout.

        Raises:
            KeyError, TypeError, ValueError: On missing or malformed fields.
        """
        valid_from = _parse_aware(data["validFrom"])
        valid_to = _parse_aware(data["validTo"])
        if valid_to <= valid_from:
            raise ValueError("validTo must be after validFrom")
        public_key = data.get("publicKey")
        return cls(
            subject=str(data["subject"]),
            issuer=str(data["issuer"]),
            serial_number=str(data["serialNumber"]).upper(),
            valid_from=valid_from,
            valid_to=valid_to,
            public_key_ref=str(public_key) if public_key else None,
            source=source,
        )


def _parse_aware(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def certificate_status(
    record: CertificateRecord,
    now: datetime | None = None,
    expiring_within: timedelta = timedelta(days=30),
) -> CertificateStatus:
    """Derive the displayed status of a record; nothing is stored."""
    now = now or utc_now()
    if record.valid_to < now:
        return CertificateStatus.EXPIRED
    if record.valid_to < now + expiring_within:
        return CertificateStatus.EXPIRING_SOON
    return CertificateStatus.VALID


@dataclass(frozen=True)
class TimestampToken:
    """Decoded contents of a timestamp token."""

    timestamp: datetime
    nonce: str
    data: str
    algorithm: str
    authority: str
    digest: str | None = None
    mac: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.mac is not None


@dataclass(frozen=True)
class TimestampVerification:
    valid: bool
    timestamp: datetime | None = None
    authority: str | None = None
