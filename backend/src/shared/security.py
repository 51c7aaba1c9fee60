"""Shared secret handling for the timestamp authority."""

import base64
import binascii
import logging
import secrets

logger = logging.getLogger(__name__)

TIMESTAMP_SECRET_BYTES = 32


class SecretConfigError(Exception):
    """Raised when a configured secret cannot be decoded."""

    pass


def generate_timestamp_secret() -> str:
    """
    Generate a timestamp authority secret as standard base64.

    Use this utility to produce a value for TIMESTAMP_SECRET.
    """
    return base64.b64encode(secrets.token_bytes(TIMESTAMP_SECRET_BYTES)).decode("ascii")


def load_timestamp_secret(encoded: str | None) -> bytes:
    """Decode the configured HMAC secret, or generate an ephemeral one.

    Tokens authenticated with an ephemeral secret stop verifying after a restart.

    Raises:
        SecretConfigError: If the value is not base64 or is shorter than 16 bytes.
    """
    if not encoded:
        logger.warning(
            "Timestamp secret generated but not persisted - set TIMESTAMP_SECRET to keep "
            "tokens verifiable across restarts"
        )
        return secrets.token_bytes(TIMESTAMP_SECRET_BYTES)

    try:
        secret = base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise SecretConfigError(f"Invalid TIMESTAMP_SECRET: {e}") from e

    if len(secret) < 16:
        raise SecretConfigError("TIMESTAMP_SECRET must decode to at least 16 bytes")
    return secret
