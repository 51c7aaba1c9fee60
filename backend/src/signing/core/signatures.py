"""RSA-PSS signing and verification over raw message bytes."""

import base64
import binascii
import logging

from opentelemetry import trace

from signing.core.clock import Clock, SystemClock
from signing.core.errors import SignatureError
from signing.core.provider import CryptoProvider
from signing.domain.models import (
    SIGNATURE_ALGORITHM,
    PrivateKeyHandle,
    PublicKeyHandle,
    SignatureResult,
)
from signing.domain.states import HashAlgorithm, KeyUsage
from signing.metrics import signing_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_SALT_LENGTH = 32


def max_salt_length(key_size: int) -> int:
    """Largest PSS salt for a modulus of `key_size` bits with SHA-256."""
    em_len = (key_size - 1 + 7) // 8
    return em_len - HashAlgorithm.SHA256.digest_size - 2


class SignatureEngine:
    """Signs with private key handles and verifies with public key handles."""

    def __init__(self, provider: CryptoProvider, clock: Clock | None = None) -> None:
        self._provider = provider
        self._clock = clock or SystemClock()

    def sign(
        self,
        message: bytes,
        private_key: PrivateKeyHandle,
        salt_length: int = DEFAULT_SALT_LENGTH,
    ) -> SignatureResult:
        """Sign `message` with RSA-PSS (MGF1-SHA-256, SHA-256).

        Returns:
            SignatureResult recording the bit length of the key actually used.

        Raises:
            SignatureError: If the key cannot sign, the salt length is out of
                range, or the provider fails.
        """
        with tracer.start_as_current_span("SignatureEngine.sign") as span:
            if not isinstance(private_key, PrivateKeyHandle) or private_key.usage != KeyUsage.SIGN:
                raise SignatureError("Key does not have the sign capability")

            key_size = private_key.key_size
            span.set_attribute("key_size", key_size)
            span.set_attribute("message_size", len(message))

            if not 0 <= salt_length <= max_salt_length(key_size):
                raise SignatureError(
                    f"Salt length {salt_length} out of range for a {key_size}-bit key"
                )

            try:
                signature = self._provider.sign(private_key.key, bytes(message), salt_length)
            except Exception as e:
                logger.error(
                    "signing_failed",
                    extra={"key_id": private_key.key_id, "error": str(e)},
                )
                raise SignatureError(f"Failed to sign data: {e}") from e

            signing_metrics.record_signature_created(key_size)
            logger.info(
                "message_signed",
                extra={
                    "key_id": private_key.key_id,
                    "key_size": key_size,
                    "message_size": len(message),
                },
            )

            return SignatureResult(
                signature=signature,
                algorithm=SIGNATURE_ALGORITHM,
                key_size=key_size,
                salt_length=salt_length,
                created_at=self._clock.now(),
            )

    def verify(
        self,
        message: bytes,
        signature_encoded: str,
        public_key: PublicKeyHandle,
        salt_length: int = DEFAULT_SALT_LENGTH,
    ) -> bool:
        """Check a base64 signature over `message`.

        Never raises: undecodable input, a wrong-length signature, a key
        without the verify capability or a provider fault all return False.
        """
        with tracer.start_as_current_span("SignatureEngine.verify") as span:
            valid = self._verify(message, signature_encoded, public_key, salt_length)
            span.set_attribute("valid", valid)
            signing_metrics.record_signature_verification("valid" if valid else "invalid")
            return valid

    def _verify(
        self,
        message: bytes,
        signature_encoded: str,
        public_key: PublicKeyHandle,
        salt_length: int,
    ) -> bool:
        if not isinstance(public_key, PublicKeyHandle) or public_key.usage != KeyUsage.VERIFY:
            logger.debug("signature_rejected", extra={"reason": "missing_verify_capability"})
            return False

        try:
            signature = base64.b64decode("".join(signature_encoded.split()), validate=True)
        except (binascii.Error, ValueError, TypeError, AttributeError):
            logger.debug("signature_rejected", extra={"reason": "undecodable"})
            return False

        if len(signature) != (public_key.key_size + 7) // 8:
            logger.debug(
                "signature_rejected",
                extra={"reason": "length_mismatch", "signature_size": len(signature)},
            )
            return False

        try:
            return self._provider.verify(public_key.key, signature, bytes(message), salt_length)
        except Exception as e:
            logger.debug("signature_rejected", extra={"reason": "provider_error", "error": str(e)})
            return False
