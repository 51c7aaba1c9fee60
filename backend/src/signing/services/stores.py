"""Caller-owned collections: the certificate store and the timestamp history.

The signing core never keeps records; these stores do, on behalf of the
presentation layer, and serialise mutation with an asyncio lock.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from signing.domain.models import CertificateRecord, KeyPair

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class NotFoundError(Exception):
    """Raised when a store entry does not exist."""

    pass


class ConflictError(Exception):
    """Raised when an entry with the same identifier already exists."""

    pass


@dataclass(frozen=True)
class StoredCertificate:
    """A certificate record plus the key pair it was issued for, when known."""

    record: CertificateRecord
    key_pair: KeyPair | None = None


@dataclass(frozen=True)
class TimestampRecord:
    id: UUID
    data_preview: str
    token: str
    timestamp: datetime
    authority: str


class CertificateStore:
    """Ordered certificate collection keyed by serial number."""

    def __init__(self) -> None:
        self._entries: dict[str, StoredCertificate] = {}
        self._lock = asyncio.Lock()

    async def add(self, record: CertificateRecord, key_pair: KeyPair | None = None) -> StoredCertificate:
        """Append a record.

        Raises:
            ConflictError: If a record with the same serial number is stored.
        """
        serial = record.serial_number.upper()
        async with self._lock:
            if serial in self._entries:
                raise ConflictError(f"Certificate {serial} is already in the store")
            entry = StoredCertificate(record=record, key_pair=key_pair)
            self._entries[serial] = entry

        logger.info("certificate_stored", extra={"serial": serial, "source": record.source})
        return entry

    async def list_all(self) -> list[StoredCertificate]:
        async with self._lock:
            return list(self._entries.values())

    async def get(self, serial_number: str) -> StoredCertificate:
        async with self._lock:
            entry = self._entries.get(serial_number.upper())
        if entry is None:
            raise NotFoundError(f"Certificate {serial_number} not found")
        return entry

    async def delete(self, serial_number: str) -> None:
        serial = serial_number.upper()
        async with self._lock:
            if self._entries.pop(serial, None) is None:
                raise NotFoundError(f"Certificate {serial_number} not found")

        logger.info("certificate_deleted", extra={"serial": serial})


class TimestampHistory:
    """Timestamp tokens created through the API, newest first."""

    def __init__(self) -> None:
        self._records: list[TimestampRecord] = []
        self._lock = asyncio.Lock()

    async def add(self, data: str, token: str, timestamp: datetime, authority: str) -> TimestampRecord:
        preview = data[:PREVIEW_LENGTH] + ("..." if len(data) > PREVIEW_LENGTH else "")
        record = TimestampRecord(
            id=uuid4(),
            data_preview=preview,
            token=token,
            timestamp=timestamp,
            authority=authority,
        )
        async with self._lock:
            self._records.insert(0, record)
        return record

    async def list_all(self) -> list[TimestampRecord]:
        async with self._lock:
            return list(self._records)

    async def delete(self, record_id: UUID) -> None:
        async with self._lock:
            for index, record in enumerate(self._records):
                if record.id == record_id:
                    del self._records[index]
                    return
        raise NotFoundError(f"Timestamp {record_id} not found")
