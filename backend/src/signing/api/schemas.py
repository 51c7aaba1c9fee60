"""Pydantic schemas for signing API request/response validation."""

import base64
import binascii
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from signing.domain.states import (
    CertificateExportFormat,
    CertificateSource,
    CertificateStatus,
    KeySize,
    TimestampMode,
)


class DataEncoding(StrEnum):
    UTF8 = "utf-8"
    BASE64 = "base64"  # file uploads


def decode_data(data: str, encoding: DataEncoding) -> bytes:
    """Turn a request payload into bytes.

    Raises:
        ValueError: If base64 content is malformed.
    """
    if encoding == DataEncoding.BASE64:
        try:
            return base64.b64decode("".join(data.split()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 data: {e}") from e
    return data.encode("utf-8")


class DataPayload(BaseModel):
    """Text, or base64 file content when encoding is "base64"."""

    data: str
    encoding: DataEncoding = DataEncoding.UTF8


# =============================================================================
# Keys
# =============================================================================


class GenerateKeyPairRequest(BaseModel):
    key_size: KeySize | None = None


class KeyPairResponse(BaseModel):
    public_key_pem: str
    private_key_pem: str
    key_size: int
    key_id: str
    algorithm: str


class ImportKeysRequest(BaseModel):
    public_key_pem: str = Field(..., min_length=1)
    private_key_pem: str | None = None


class ImportKeysResponse(BaseModel):
    key_id: str
    key_size: int
    has_private_key: bool


# =============================================================================
# Signatures
# =============================================================================


class SignRequest(DataPayload):
    private_key_pem: str = Field(..., min_length=1)
    salt_length: int | None = Field(None, ge=0)


class SignatureResponse(BaseModel):
    signature: str
    algorithm: str
    key_size: int
    salt_length: int
    created_at: datetime


class VerifyRequest(DataPayload):
    signature: str
    public_key_pem: str = Field(..., min_length=1)
    salt_length: int | None = Field(None, ge=0)


class VerifyResponse(BaseModel):
    valid: bool


# =============================================================================
# Digests
# =============================================================================


class DigestRequest(DataPayload):
    algorithm: str = "SHA-256"


class HashResponse(BaseModel):
    algorithm: str
    digest: str
    input_size: int
    computed_at: datetime


class HashListResponse(BaseModel):
    items: list[HashResponse]


class CompareRequest(BaseModel):
    first: str
    second: str


class CompareResponse(BaseModel):
    match: bool


class AlgorithmInfo(BaseModel):
    name: str
    digest_size: int
    hex_length: int
    strength: str


# =============================================================================
# Certificates
# =============================================================================


class IssueCertificateRequest(BaseModel):
    """Request body for issuing a self-signed certificate with a fresh key pair."""

    subject: str = Field(..., min_length=1, max_length=1024)
    validity_days: int | None = Field(None, ge=1)
    key_size: KeySize | None = None


class CertificateResponse(BaseModel):
    subject: str
    issuer: str
    serial_number: str
    valid_from: datetime
    valid_to: datetime
    public_key_ref: str | None
    source: CertificateSource
    status: CertificateStatus
    has_key_pair: bool


class IssuedCertificateResponse(BaseModel):
    certificate: CertificateResponse
    public_key_pem: str
    private_key_pem: str


class CertificateListResponse(BaseModel):
    items: list[CertificateResponse]
    total: int


class ImportCertificateRequest(BaseModel):
    pem: str = Field(..., min_length=1)


class CertificateExportResponse(BaseModel):
    serial_number: str
    format: CertificateExportFormat
    pem: str
    filename: str


# =============================================================================
# Timestamps
# =============================================================================


class CreateTimestampRequest(DataPayload):
    authority: str | None = Field(None, max_length=200)


class TimestampResponse(BaseModel):
    id: UUID
    token: str
    timestamp: datetime
    authority: str
    data_preview: str


class TimestampListResponse(BaseModel):
    items: list[TimestampResponse]
    mode: TimestampMode


class VerifyTimestampRequest(BaseModel):
    token: str
    data: str | None = None
    encoding: DataEncoding = DataEncoding.UTF8


class TimestampVerificationResponse(BaseModel):
    valid: bool
    timestamp: datetime | None = None
    authority: str | None = None
    mode: TimestampMode
