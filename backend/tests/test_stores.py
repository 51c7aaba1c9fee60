"""Tests for the certificate store and timestamp history."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from signing.domain.models import CertificateRecord
from signing.services.stores import (
    CertificateStore,
    ConflictError,
    NotFoundError,
    TimestampHistory,
)

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def _record(serial: str) -> CertificateRecord:
    return CertificateRecord(
        subject="CN=store",
        issuer="CN=store",
        serial_number=serial,
        valid_from=FIXED_NOW,
        valid_to=FIXED_NOW + timedelta(days=1),
        public_key_ref=None,
    )


class TestCertificateStore:
    """Tests for CertificateStore."""

    @pytest.mark.asyncio
    async def test_add_and_list_in_insertion_order(self):
        store = CertificateStore()
        await store.add(_record("0B"))
        await store.add(_record("0A"))

        entries = await store.list_all()

        assert [e.record.serial_number for e in entries] == ["0B", "0A"]

    @pytest.mark.asyncio
    async def test_duplicate_serial_conflicts(self):
        """Test that serial numbers are unique regardless of case."""
        store = CertificateStore()
        await store.add(_record("ABCD"))

        with pytest.raises(ConflictError):
            await store.add(_record("abcd"))

    @pytest.mark.asyncio
    async def test_get_is_case_insensitive(self, key_pair):
        store = CertificateStore()
        await store.add(_record("ABCD"), key_pair)

        entry = await store.get("abcd")

        assert entry.record.serial_number == "ABCD"
        assert entry.key_pair is key_pair

    @pytest.mark.asyncio
    async def test_get_missing_raises(self):
        with pytest.raises(NotFoundError):
            await CertificateStore().get("FF")

    @pytest.mark.asyncio
    async def test_delete(self):
        store = CertificateStore()
        await store.add(_record("01"))

        await store.delete("01")

        assert await store.list_all() == []
        with pytest.raises(NotFoundError):
            await store.delete("01")

    @pytest.mark.asyncio
    async def test_concurrent_adds_of_same_serial(self):
        """Test that only one of many concurrent adds of a serial succeeds."""
        store = CertificateStore()

        results = await asyncio.gather(
            *(store.add(_record("0C")) for _ in range(20)), return_exceptions=True
        )

        assert sum(not isinstance(r, Exception) for r in results) == 1
        assert len(await store.list_all()) == 1


class TestTimestampHistory:
    """Tests for TimestampHistory."""

    @pytest.mark.asyncio
    async def test_newest_first(self):
        history = TimestampHistory()
        first = await history.add("first", "t1", FIXED_NOW, "TSA")
        second = await history.add("second", "t2", FIXED_NOW, "TSA")

        assert [r.id for r in await history.list_all()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_preview_truncated_with_ellipsis(self):
        """Test that long documents are previewed by their first 100 characters."""
        history = TimestampHistory()

        long_record = await history.add("y" * 150, "t", FIXED_NOW, "TSA")
        short_record = await history.add("y" * 100, "t", FIXED_NOW, "TSA")

        assert long_record.data_preview == "y" * 100 + "..."
        assert short_record.data_preview == "y" * 100

    @pytest.mark.asyncio
    async def test_delete(self):
        history = TimestampHistory()
        record = await history.add("doc", "t", FIXED_NOW, "TSA")

        await history.delete(record.id)

        assert await history.list_all() == []

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self):
        with pytest.raises(NotFoundError):
            await TimestampHistory().delete(uuid4())
