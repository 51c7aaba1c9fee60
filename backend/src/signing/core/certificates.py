"""Self-signed certificate records bound to a key pair.

Two text formats are supported:
- record: the JSON record inside CERTIFICATE markers. Not readable by X.509
  tooling; kept for compatibility with existing exports.
- x509: a genuine self-signed X.509 v3 certificate signed with RSA-PSS.

Import accepts either format. No chain or revocation checks are performed.
"""

import json
import logging
from datetime import timedelta

from opentelemetry import trace

from signing.core.clock import Clock, RandomSource, SystemClock, SystemRandom
from signing.core.errors import DecodingError, IssuanceError
from signing.core.pem import armor, dearmor
from signing.core.provider import CryptoProvider
from signing.domain.models import (
    CertificateRecord,
    KeyPair,
    PrivateKeyHandle,
    PublicKeyHandle,
)
from signing.domain.states import CertificateExportFormat, CertificateSource, HashAlgorithm
from signing.metrics import signing_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CERTIFICATE_LABEL = "CERTIFICATE"


class CertificateIssuer:
    """Issues, exports and imports certificate records.

    Records are returned to the caller, which owns the certificate store.
    """

    SERIAL_NUMBER_BYTES = 16
    DEFAULT_VALIDITY_DAYS = 365
    MAX_VALIDITY_DAYS = 3650

    def __init__(
        self,
        provider: CryptoProvider,
        clock: Clock | None = None,
        random: RandomSource | None = None,
        max_validity_days: int = MAX_VALIDITY_DAYS,
    ) -> None:
        self._provider = provider
        self._clock = clock or SystemClock()
        self._random = random or SystemRandom()
        self._max_validity_days = max_validity_days

    def issue_self_signed(
        self,
        subject: str,
        validity_days: int,
        key_pair: KeyPair,
    ) -> CertificateRecord:
        """Issue a self-signed record for `key_pair`.

        Args:
            subject: Subject text, e.g. "CN=example.com,O=Organization,C=US".
            validity_days: Days from now until the record expires.
            key_pair: Key pair the record is bound to.

        Raises:
            IssuanceError: If the subject is empty, the validity is out of
                range, or the key pair is incomplete.
        """
        with tracer.start_as_current_span("CertificateIssuer.issue_self_signed") as span:
            if not isinstance(subject, str) or not subject.strip():
                raise IssuanceError("Certificate subject must not be empty")
            subject = subject.strip()

            if isinstance(validity_days, bool) or not isinstance(validity_days, int):
                raise IssuanceError("Validity period must be a whole number of days")
            if validity_days <= 0:
                raise IssuanceError("Validity period must be at least one day")
            if validity_days > self._max_validity_days:
                raise IssuanceError(
                    f"Certificate validity cannot exceed {self._max_validity_days} days"
                )

            self._check_key_pair(key_pair)
            span.set_attribute("validity_days", validity_days)

            serial = self._random.token_bytes(self.SERIAL_NUMBER_BYTES).hex().upper()
            valid_from = self._clock.now()
            valid_to = valid_from + timedelta(days=validity_days)

            record = CertificateRecord(
                subject=subject,
                issuer=subject,
                serial_number=serial,
                valid_from=valid_from,
                valid_to=valid_to,
                public_key_ref=key_pair.key_id,
                source=CertificateSource.ISSUED,
            )

            span.set_attribute("serial", serial)
            signing_metrics.record_certificate_issued()
            logger.info(
                "certificate_issued",
                extra={
                    "serial": serial,
                    "key_id": key_pair.key_id,
                    "not_after": valid_to.isoformat(),
                },
            )
            return record

    def export(
        self,
        record: CertificateRecord,
        fmt: CertificateExportFormat = CertificateExportFormat.RECORD,
        key_pair: KeyPair | None = None,
    ) -> str:
        if fmt == CertificateExportFormat.X509:
            if key_pair is None:
                raise IssuanceError("X.509 export needs the key pair the record is bound to")
            return self.export_x509(record, key_pair)
        return self.export_record(record)

    def export_record(self, record: CertificateRecord) -> str:
        """Encode the record as base64 JSON inside CERTIFICATE markers."""
        payload = json.dumps(record.to_dict()).encode("utf-8")
        return armor(payload, CERTIFICATE_LABEL)

    def export_x509(self, record: CertificateRecord, key_pair: KeyPair) -> str:
        """Build and sign a genuine X.509 certificate for a self-signed record.

        Raises:
            IssuanceError: If the record is not self-signed, the key pair is not
                the one the record references, or certificate building fails.
        """
        with tracer.start_as_current_span("CertificateIssuer.export_x509") as span:
            span.set_attribute("serial", record.serial_number)
            self._check_key_pair(key_pair)
            if not record.is_self_signed:
                raise IssuanceError("Only self-signed records can be exported as X.509")
            if record.public_key_ref != key_pair.key_id:
                raise IssuanceError("Key pair does not match the certificate record")

            try:
                return self._provider.self_signed_certificate_pem(
                    key_pair.private.key,
                    subject=record.subject,
                    serial_number=int(record.serial_number, 16),
                    not_before=record.valid_from,
                    not_after=record.valid_to,
                )
            except Exception as e:
                logger.error(
                    "certificate_export_failed",
                    extra={"serial": record.serial_number, "error": str(e)},
                )
                raise IssuanceError(f"Failed to build X.509 certificate: {e}") from e

    def import_external(self, text: str) -> CertificateRecord:
        """Read a certificate from PEM text.

        Accepts an X.509 certificate or a record container from export_record().

        Raises:
            DecodingError: If the text is neither.
        """
        with tracer.start_as_current_span("CertificateIssuer.import_external") as span:
            if not isinstance(text, str) or f"-----BEGIN {CERTIFICATE_LABEL}-----" not in text:
                raise DecodingError("Input is not a PEM certificate")

            try:
                record = self._from_x509(text)
                fmt = CertificateExportFormat.X509
            except Exception as x509_error:
                try:
                    record = self._from_record(text)
                    fmt = CertificateExportFormat.RECORD
                except Exception as e:
                    logger.warning(
                        "certificate_import_failed",
                        extra={"x509_error": str(x509_error), "record_error": str(e)},
                    )
                    raise DecodingError(f"Failed to import certificate: {e}") from e

            span.set_attribute("format", fmt.value)
            span.set_attribute("serial", record.serial_number)
            signing_metrics.record_certificate_imported(fmt.value)
            logger.info(
                "certificate_imported",
                extra={"serial": record.serial_number, "format": fmt.value},
            )
            return record

    def _from_x509(self, text: str) -> CertificateRecord:
        fields = self._provider.read_certificate_pem(text.encode("utf-8"))
        if fields.not_after <= fields.not_before:
            raise ValueError("Certificate validity window is empty")
        serial = format(fields.serial_number, "X")
        if len(serial) % 2:
            serial = "0" + serial
        return CertificateRecord(
            subject=fields.subject,
            issuer=fields.issuer,
            serial_number=serial,
            valid_from=fields.not_before,
            valid_to=fields.not_after,
            public_key_ref=self._provider.digest(HashAlgorithm.SHA256, fields.public_key_der).hex(),
            source=CertificateSource.IMPORTED,
        )

    def _from_record(self, text: str) -> CertificateRecord:
        data = json.loads(dearmor(text, CERTIFICATE_LABEL).decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Certificate record must be a JSON object")
        return CertificateRecord.from_dict(data, source=CertificateSource.IMPORTED)

    @staticmethod
    def _check_key_pair(key_pair: KeyPair) -> None:
        if not isinstance(key_pair, KeyPair):
            raise IssuanceError("A key pair is required")
        if not isinstance(key_pair.public, PublicKeyHandle) or not isinstance(
            key_pair.private, PrivateKeyHandle
        ):
            raise IssuanceError("Key pair must hold a public and a private key")
        if key_pair.public.key_id != key_pair.private.key_id:
            raise IssuanceError("Key pair halves do not match")
