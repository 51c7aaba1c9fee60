"""Clock and randomness capabilities injected into the core."""

import secrets
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


class RandomSource(Protocol):
    def token_bytes(self, n: int) -> bytes:
        """Return n bytes from a cryptographically secure generator."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SystemRandom:
    """RandomSource backed by the operating system CSPRNG."""

    def token_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)
