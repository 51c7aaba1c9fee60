"""Typed errors raised by the signing core.

Every core operation surfaces one of these to its caller. Only the predicate
operations (signature verification, timestamp verification) turn failures
into a negative result instead of raising.
"""


class CryptoCoreError(Exception):
    """Base class for all signing core errors."""

    pass


class GenerationError(CryptoCoreError):
    """Raised when the provider cannot produce the requested key material."""

    pass


class EncodingError(CryptoCoreError):
    """Raised when a key cannot be exported."""

    pass


class DecodingError(CryptoCoreError):
    """Raised on malformed input to an import or decode operation."""

    pass


class SignatureError(CryptoCoreError):
    """Raised when signing fails (capability mismatch or provider fault)."""

    pass


class DigestError(CryptoCoreError):
    """Raised for an unrecognized digest algorithm."""

    pass


class IssuanceError(CryptoCoreError):
    """Raised for invalid certificate issuance parameters."""

    pass


class TimestampDecodeError(CryptoCoreError):
    """Raised when a timestamp token cannot be decoded."""

    pass
