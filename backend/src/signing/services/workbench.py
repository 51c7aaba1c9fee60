"""Wiring of the signing core components from application settings."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from shared.config import Settings
from shared.security import load_timestamp_secret

from signing.core.certificates import CertificateIssuer
from signing.core.clock import Clock, RandomSource, SystemClock, SystemRandom
from signing.core.digest import DigestEngine
from signing.core.keys import KeyPairManager
from signing.core.provider import CryptographyProvider, CryptoProvider
from signing.core.signatures import SignatureEngine
from signing.core.timestamps import TimestampAuthority
from signing.domain.states import CertificateExportFormat, KeySize, TimestampMode
from signing.services.stores import CertificateStore, TimestampHistory

logger = logging.getLogger(__name__)


@dataclass
class SigningServices:
    """One instance of each core component plus the caller-owned stores."""

    keys: KeyPairManager
    signatures: SignatureEngine
    digests: DigestEngine
    certificates: CertificateIssuer
    timestamps: TimestampAuthority
    clock: Clock
    default_key_size: int = KeySize.RSA_2048
    key_generation_timeout: float | None = None
    salt_length: int = 32
    default_validity_days: int = 365
    expiring_within: timedelta = timedelta(days=30)
    export_format: CertificateExportFormat = CertificateExportFormat.RECORD
    certificate_store: CertificateStore = field(default_factory=CertificateStore)
    timestamp_history: TimestampHistory = field(default_factory=TimestampHistory)


def build_services(
    settings: Settings,
    provider: CryptoProvider | None = None,
    clock: Clock | None = None,
    random: RandomSource | None = None,
) -> SigningServices:
    """Build the service container.

    Raises:
        ValueError: If a mode or format setting has an unknown value.
        SecretConfigError: If TIMESTAMP_SECRET is set but invalid.
    """
    provider = provider or CryptographyProvider()
    clock = clock or SystemClock()
    random = random or SystemRandom()

    mode = TimestampMode(settings.TIMESTAMP_MODE.lower())
    secret = load_timestamp_secret(settings.TIMESTAMP_SECRET) if mode == TimestampMode.HMAC else None
    if mode == TimestampMode.ENCODED:
        logger.warning(
            "Timestamp authority running in encoded mode - tokens are not authenticated"
        )

    services = SigningServices(
        keys=KeyPairManager(provider),
        signatures=SignatureEngine(provider, clock),
        digests=DigestEngine(provider, clock),
        certificates=CertificateIssuer(
            provider, clock, random, max_validity_days=settings.CERT_MAX_VALIDITY_DAYS
        ),
        timestamps=TimestampAuthority(
            provider,
            mode=mode,
            secret=secret,
            authority_id=settings.TIMESTAMP_AUTHORITY_ID,
            clock=clock,
            random=random,
        ),
        clock=clock,
        default_key_size=settings.DEFAULT_KEY_SIZE,
        key_generation_timeout=settings.KEY_GENERATION_TIMEOUT_SECONDS or None,
        salt_length=settings.SIGNATURE_SALT_LENGTH,
        default_validity_days=settings.CERT_DEFAULT_VALIDITY_DAYS,
        expiring_within=timedelta(days=settings.CERT_EXPIRING_SOON_DAYS),
        export_format=CertificateExportFormat(settings.CERT_EXPORT_FORMAT.lower()),
    )

    logger.info(
        "signing_services_ready",
        extra={"timestamp_mode": mode.value, "export_format": services.export_format.value},
    )
    return services
