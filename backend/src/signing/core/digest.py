"""Message digests over byte sequences."""

import logging

from opentelemetry import trace

from signing.core.clock import Clock, SystemClock
from signing.core.errors import DigestError
from signing.core.md5 import md5_digest
from signing.core.provider import CryptoProvider
from signing.domain.models import HashResult
from signing.domain.states import HashAlgorithm
from signing.metrics import signing_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def parse_algorithm(algorithm: str | HashAlgorithm) -> HashAlgorithm:
    """Resolve an identifier such as "SHA-256" or "sha-256".

    Raises:
        DigestError: For an unrecognized identifier.
    """
    if isinstance(algorithm, HashAlgorithm):
        return algorithm
    try:
        return HashAlgorithm(str(algorithm).strip().upper())
    except ValueError:
        raise DigestError(f"Unsupported hash algorithm: {algorithm!r}") from None


class DigestEngine:
    """Computes lowercase hex digests.

    Algorithms the provider supports are delegated to it; MD5 falls back to
    the built-in RFC 1321 implementation when the provider lacks it.
    """

    def __init__(self, provider: CryptoProvider, clock: Clock | None = None) -> None:
        self._provider = provider
        self._clock = clock or SystemClock()

    def digest(self, data: bytes, algorithm: str | HashAlgorithm) -> str:
        """Return the lowercase hex digest of `data`.

        Raises:
            DigestError: For an unrecognized algorithm or a provider failure.
        """
        alg = parse_algorithm(algorithm)
        with tracer.start_as_current_span("DigestEngine.digest") as span:
            span.set_attribute("algorithm", alg.value)
            span.set_attribute("input_size", len(data))

            if alg in self._provider.supported_digests:
                backend = "provider"
                try:
                    raw = self._provider.digest(alg, bytes(data))
                except Exception as e:
                    logger.error(
                        "digest_failed",
                        extra={"algorithm": alg.value, "error": str(e)},
                    )
                    raise DigestError(f"Failed to calculate {alg.value} hash: {e}") from e
            elif alg is HashAlgorithm.MD5:
                backend = "builtin"
                raw = md5_digest(bytes(data))
            else:
                raise DigestError(f"{alg.value} is not available from the crypto provider")

            signing_metrics.record_digest_computed(alg.value, backend)
            return raw.hex()

    def compute(self, data: bytes, algorithm: str | HashAlgorithm) -> HashResult:
        """Digest `data` and describe the result."""
        alg = parse_algorithm(algorithm)
        return HashResult(
            algorithm=alg.value,
            digest_hex=self.digest(data, alg),
            input_size=len(data),
            computed_at=self._clock.now(),
        )

    def compute_all(self, data: bytes) -> list[HashResult]:
        """Digest `data` with every supported algorithm."""
        return [self.compute(data, alg) for alg in HashAlgorithm]

    @staticmethod
    def compare(first: str, second: str) -> bool:
        """Case-insensitive equality of two hex digests, ignoring surrounding whitespace."""
        return first.strip().lower() == second.strip().lower()
