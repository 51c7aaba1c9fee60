"""Local timestamp tokens.

A token is base64 of a JSON object with `timestamp`, `nonce`, `data` (first
100 characters of the input), `algorithm` and `authority`. In HMAC mode the
object also carries `digest` (SHA-256 of the full input) and `mac`, an
HMAC-SHA-256 under the authority secret over the compact JSON array of
digest, timestamp, nonce, authority, data and algorithm. In encoded mode
verification only checks that the token decodes, so anyone can forge one.
"""

import base64
import binascii
import hmac
import json
import logging
import re
from datetime import datetime, timezone

from opentelemetry import trace

from signing.core.clock import Clock, RandomSource, SystemClock, SystemRandom
from signing.core.errors import TimestampDecodeError
from signing.core.provider import CryptoProvider
from signing.domain.models import TimestampToken, TimestampVerification
from signing.domain.states import HashAlgorithm, TimestampMode
from signing.metrics import signing_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DATA_PREFIX_LENGTH = 100
NONCE_BYTES = 16
DEFAULT_AUTHORITY_ID = "Local Timestamp Authority"

_REQUIRED_FIELDS = ("timestamp", "nonce", "data", "algorithm", "authority")
_MAC_FIELDS = ("digest", "timestamp", "nonce", "authority", "data", "algorithm")
_NONCE_PATTERN = re.compile(r"[0-9a-f]{%d}" % (2 * NONCE_BYTES))


class TimestampAuthority:
    """Creates and verifies timestamp tokens in the configured mode."""

    def __init__(
        self,
        provider: CryptoProvider,
        mode: TimestampMode = TimestampMode.HMAC,
        secret: bytes | None = None,
        authority_id: str = DEFAULT_AUTHORITY_ID,
        clock: Clock | None = None,
        random: RandomSource | None = None,
    ) -> None:
        if mode == TimestampMode.HMAC and not secret:
            raise ValueError("HMAC timestamp mode requires a secret")
        self._provider = provider
        self._mode = TimestampMode(mode)
        self._secret = secret or b""
        self._authority_id = authority_id
        self._clock = clock or SystemClock()
        self._random = random or SystemRandom()

    @property
    def mode(self) -> TimestampMode:
        return self._mode

    @property
    def authority_id(self) -> str:
        return self._authority_id

    def create_token(self, data: bytes, authority_id: str | None = None) -> str:
        """Create a token asserting that `data` existed now."""
        with tracer.start_as_current_span("TimestampAuthority.create_token") as span:
            authority = authority_id or self._authority_id
            timestamp = self._clock.now().astimezone(timezone.utc).isoformat()
            nonce = self._random.token_bytes(NONCE_BYTES).hex()

            payload: dict[str, str] = {
                "timestamp": timestamp,
                "nonce": nonce,
                "data": bytes(data).decode("utf-8", errors="replace")[:DATA_PREFIX_LENGTH],
                "algorithm": HashAlgorithm.SHA256.value,
                "authority": authority,
            }
            if self._mode == TimestampMode.HMAC:
                payload["digest"] = self._provider.digest(HashAlgorithm.SHA256, bytes(data)).hex()
                payload["mac"] = base64.b64encode(self._mac(payload)).decode("ascii")

            span.set_attribute("mode", self._mode.value)
            span.set_attribute("input_size", len(data))
            signing_metrics.record_timestamp_created(self._mode.value)
            logger.info(
                "timestamp_created",
                extra={"timestamp": timestamp, "authority": authority, "mode": self._mode.value},
            )

            encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
            return base64.b64encode(encoded).decode("ascii")

    def decode_token(self, token: str) -> TimestampToken:
        """Decode a token without checking its authenticity.

        Raises:
            TimestampDecodeError: If the token is not base64 JSON with the
                required fields.
        """
        return self._decode(token)[1]

    def verify_token(self, token: str, data: bytes | None = None) -> TimestampVerification:
        """Verify a token. Never raises.

        Args:
            token: Token text produced by create_token.
            data: Optional original input; in HMAC mode its digest must match.

        Returns:
            valid=True with the embedded timestamp and authority, or valid=False
            with no fields.
        """
        with tracer.start_as_current_span("TimestampAuthority.verify_token") as span:
            span.set_attribute("mode", self._mode.value)
            try:
                payload, decoded = self._decode(token)
            except TimestampDecodeError as e:
                logger.debug("timestamp_rejected", extra={"reason": "undecodable", "error": str(e)})
                return self._result(None)

            if self._mode == TimestampMode.HMAC:
                try:
                    authentic = self._authentic(payload, data)
                except Exception as e:
                    logger.debug(
                        "timestamp_rejected", extra={"reason": "provider_error", "error": str(e)}
                    )
                    authentic = False
                if not authentic:
                    return self._result(None)

            span.set_attribute("valid", True)
            return self._result(decoded)

    def _decode(self, token: str) -> tuple[dict[str, str], TimestampToken]:
        try:
            raw = base64.b64decode("".join(token.split()), validate=True)
            payload = json.loads(raw.decode("utf-8"))
        except (AttributeError, TypeError, binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise TimestampDecodeError(f"Malformed timestamp token: {e}") from e

        if not isinstance(payload, dict):
            raise TimestampDecodeError("Timestamp token must encode a JSON object")
        missing = [name for name in _REQUIRED_FIELDS if not isinstance(payload.get(name), str)]
        if missing:
            raise TimestampDecodeError(f"Timestamp token is missing fields: {', '.join(missing)}")
        if not _NONCE_PATTERN.fullmatch(payload["nonce"]):
            raise TimestampDecodeError(
                f"Timestamp nonce must be {2 * NONCE_BYTES} lowercase hex characters"
            )

        try:
            timestamp = datetime.fromisoformat(payload["timestamp"])
        except ValueError as e:
            raise TimestampDecodeError(f"Invalid timestamp: {e}") from e
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        digest = payload.get("digest")
        mac = payload.get("mac")
        decoded = TimestampToken(
            timestamp=timestamp,
            nonce=payload["nonce"],
            data=payload["data"],
            algorithm=payload["algorithm"],
            authority=payload["authority"],
            digest=digest if isinstance(digest, str) else None,
            mac=mac if isinstance(mac, str) else None,
        )
        return payload, decoded

    def _authentic(self, payload: dict[str, str], data: bytes | None) -> bool:
        digest = payload.get("digest")
        mac = payload.get("mac")
        if not isinstance(digest, str) or not isinstance(mac, str):
            logger.debug("timestamp_rejected", extra={"reason": "unauthenticated"})
            return False
        try:
            presented = base64.b64decode(mac, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("timestamp_rejected", extra={"reason": "undecodable_mac"})
            return False

        expected = self._mac(payload)
        if not hmac.compare_digest(presented, expected):
            logger.debug("timestamp_rejected", extra={"reason": "mac_mismatch"})
            return False

        if data is not None:
            actual = self._provider.digest(HashAlgorithm.SHA256, bytes(data)).hex()
            if not hmac.compare_digest(actual, digest.lower()):
                logger.debug("timestamp_rejected", extra={"reason": "data_mismatch"})
                return False
        return True

    def _mac(self, payload: dict[str, str]) -> bytes:
        # JSON array encoding keeps field boundaries unambiguous
        fields = [payload[name] for name in _MAC_FIELDS]
        message = json.dumps(fields, separators=(",", ":")).encode("utf-8")
        return self._provider.hmac_sha256(self._secret, message)

    def _result(self, decoded: TimestampToken | None) -> TimestampVerification:
        valid = decoded is not None
        signing_metrics.record_timestamp_verification(
            self._mode.value, "valid" if valid else "invalid"
        )
        if decoded is None:
            return TimestampVerification(valid=False)
        return TimestampVerification(
            valid=True, timestamp=decoded.timestamp, authority=decoded.authority
        )
