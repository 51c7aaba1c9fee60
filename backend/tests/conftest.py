"""Shared fixtures: provider, deterministic clock/randomness and pre-generated key pairs."""

from datetime import datetime, timedelta, timezone

import pytest

from signing.core.keys import KeyPairManager
from signing.core.provider import CryptographyProvider
from signing.domain.models import KeyPair

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class SequenceRandom:
    """RandomSource yielding a counter-derived byte pattern."""

    def __init__(self, start: int = 1) -> None:
        self.counter = start

    def token_bytes(self, n: int) -> bytes:
        value = self.counter
        self.counter += 1
        return value.to_bytes(n, "big")


@pytest.fixture(scope="session")
def provider() -> CryptographyProvider:
    return CryptographyProvider()


@pytest.fixture(scope="session")
def key_manager(provider) -> KeyPairManager:
    return KeyPairManager(provider)


@pytest.fixture(scope="session")
def key_pair(key_manager) -> KeyPair:
    """A 2048-bit key pair shared across the test session."""
    return key_manager.generate_key_pair(2048)


@pytest.fixture(scope="session")
def other_key_pair(key_manager) -> KeyPair:
    return key_manager.generate_key_pair(2048)


@pytest.fixture(scope="session")
def key_pairs_by_size(key_manager) -> dict[int, KeyPair]:
    """One key pair per supported size."""
    return {size: key_manager.generate_key_pair(size) for size in (2048, 3072, 4096)}


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def random_source() -> SequenceRandom:
    return SequenceRandom()
