"""Key pair generation and PEM encoding.

Generates RSA key pairs for RSA-PSS/SHA-256 signing and moves them in and out
of PEM text (SPKI for public keys, PKCS8 for private keys).
"""

import asyncio
import logging
import time
from typing import Any

from opentelemetry import trace

from signing.core.errors import DecodingError, EncodingError, GenerationError
from signing.core.pem import armor, dearmor
from signing.core.provider import CryptoProvider
from signing.domain.models import KeyPair, PrivateKeyHandle, PublicKeyHandle
from signing.domain.states import HashAlgorithm, KeySize
from signing.metrics import signing_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PUBLIC_KEY_LABEL = "PUBLIC KEY"
PRIVATE_KEY_LABEL = "PRIVATE KEY"


class KeyPairManager:
    """Creates, exports and imports RSA-PSS key pairs.

    Holds no key state: every handle it returns belongs to the caller.
    """

    SUPPORTED_KEY_SIZES = frozenset(int(size) for size in KeySize)

    def __init__(self, provider: CryptoProvider) -> None:
        self._provider = provider

    def generate_key_pair(self, key_size: int = KeySize.RSA_2048) -> KeyPair:
        """Generate a new key pair.

        Args:
            key_size: Modulus size in bits (2048, 3072 or 4096).

        Raises:
            GenerationError: If the size is unsupported or the provider fails.
        """
        with tracer.start_as_current_span("KeyPairManager.generate_key_pair") as span:
            if isinstance(key_size, bool) or key_size not in self.SUPPORTED_KEY_SIZES:
                raise GenerationError(
                    f"Unsupported key size {key_size!r}, expected one of "
                    f"{sorted(self.SUPPORTED_KEY_SIZES)}"
                )
            key_size = int(key_size)
            span.set_attribute("key_size", key_size)

            start_time = time.time()
            try:
                private_key, public_key = self._provider.generate_asymmetric_key_pair(key_size)
                key_pair = self._wrap(private_key, public_key)
            except Exception as e:
                logger.error(
                    "key_generation_failed",
                    extra={"key_size": key_size, "error": str(e)},
                )
                raise GenerationError(f"Failed to generate key pair: {e}") from e

            duration = time.time() - start_time
            signing_metrics.record_key_pair_generated(key_size, duration)
            span.set_attribute("key_id", key_pair.key_id)

            logger.info(
                "key_pair_generated",
                extra={
                    "key_size": key_size,
                    "key_id": key_pair.key_id,
                    "duration_seconds": duration,
                },
            )
            return key_pair

    async def generate_key_pair_async(
        self, key_size: int = KeySize.RSA_2048, timeout: float | None = None
    ) -> KeyPair:
        """Generate a key pair in a worker thread, bounded by `timeout` seconds.

        The worker thread is not interrupted on timeout or cancellation; the
        caller is released and the late result is discarded.

        Raises:
            GenerationError: On failure or when the timeout elapses.
            asyncio.CancelledError: If the awaiting task is cancelled.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.generate_key_pair, key_size), timeout=timeout
            )
        except TimeoutError as e:
            logger.warning(
                "key_generation_timed_out",
                extra={"key_size": key_size, "timeout_seconds": timeout},
            )
            raise GenerationError(f"Key generation exceeded {timeout} seconds") from e

    def export_public_key(self, key: PublicKeyHandle) -> str:
        """Encode a public key as SPKI PEM.

        Raises:
            EncodingError: If the handle is not a public key or export fails.
        """
        if not isinstance(key, PublicKeyHandle):
            raise EncodingError("export_public_key requires a public key handle")
        try:
            return armor(self._provider.export_public_der(key.key), PUBLIC_KEY_LABEL)
        except Exception as e:
            logger.error("public_key_export_failed", extra={"error": str(e)})
            raise EncodingError(f"Failed to export public key: {e}") from e

    def export_private_key(self, key: PrivateKeyHandle) -> str:
        """Encode a private key as unencrypted PKCS8 PEM.

        Raises:
            EncodingError: If the handle is not a private key or export fails.
        """
        if not isinstance(key, PrivateKeyHandle):
            raise EncodingError("export_private_key requires a private key handle")
        try:
            return armor(self._provider.export_private_der(key.key), PRIVATE_KEY_LABEL)
        except Exception as e:
            logger.error("private_key_export_failed", extra={"error": str(e)})
            raise EncodingError(f"Failed to export private key: {e}") from e

    def import_public_key(self, text: str) -> PublicKeyHandle:
        """Load a verify-only handle from SPKI PEM text.

        Raises:
            DecodingError: On malformed base64 or invalid key data.
        """
        try:
            der = dearmor(text, PUBLIC_KEY_LABEL)
            key = self._provider.load_public_der(der)
            handle = PublicKeyHandle(
                key=key,
                key_size=self._provider.key_size(key),
                key_id=self._key_id(der),
            )
        except Exception as e:
            logger.warning("public_key_import_failed", extra={"error": str(e)})
            raise DecodingError(f"Failed to import public key: {e}") from e

        signing_metrics.record_key_imported("public")
        return handle

    def import_private_key(self, text: str) -> PrivateKeyHandle:
        """Load a sign-only handle from PKCS8 PEM text.

        Raises:
            DecodingError: On malformed base64 or invalid key data.
        """
        try:
            der = dearmor(text, PRIVATE_KEY_LABEL)
            key = self._provider.load_private_der(der)
            public_der = self._provider.export_public_der(self._provider.public_key_of(key))
            handle = PrivateKeyHandle(
                key=key,
                key_size=self._provider.key_size(key),
                key_id=self._key_id(public_der),
            )
        except Exception as e:
            logger.warning("private_key_import_failed", extra={"error": str(e)})
            raise DecodingError(f"Failed to import private key: {e}") from e

        signing_metrics.record_key_imported("private")
        return handle

    def import_key_pair(self, public_text: str, private_text: str) -> KeyPair:
        """Load both halves and check that they belong together.

        Raises:
            DecodingError: If either half is invalid or they do not match.
        """
        public = self.import_public_key(public_text)
        private = self.import_private_key(private_text)
        if public.key_id != private.key_id:
            raise DecodingError("Public and private keys do not belong to the same key pair")
        return KeyPair(public=public, private=private)

    def _wrap(self, private_key: Any, public_key: Any) -> KeyPair:
        key_size = self._provider.key_size(private_key)
        key_id = self._key_id(self._provider.export_public_der(public_key))
        return KeyPair(
            public=PublicKeyHandle(key=public_key, key_size=key_size, key_id=key_id),
            private=PrivateKeyHandle(key=private_key, key_size=key_size, key_id=key_id),
        )

    def _key_id(self, spki_der: bytes) -> str:
        """Lowercase hex SHA-256 of the SPKI encoding."""
        return self._provider.digest(HashAlgorithm.SHA256, spki_der).hex()
