"""Timestamp authority API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from signing.api.deps import get_services, payload_bytes
from signing.api.schemas import (
    CreateTimestampRequest,
    TimestampListResponse,
    TimestampResponse,
    TimestampVerificationResponse,
    VerifyTimestampRequest,
)
from signing.core.errors import TimestampDecodeError
from signing.services.stores import NotFoundError, TimestampRecord
from signing.services.workbench import SigningServices

router = APIRouter(prefix="/api/timestamps", tags=["timestamps"])


def _to_response(record: TimestampRecord) -> TimestampResponse:
    return TimestampResponse(
        id=record.id,
        token=record.token,
        timestamp=record.timestamp,
        authority=record.authority,
        data_preview=record.data_preview,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TimestampResponse)
async def create_timestamp(
    body: CreateTimestampRequest,
    services: SigningServices = Depends(get_services),
) -> TimestampResponse:
    """
    Create a timestamp token for a document and add it to the history.

    - Errors: 400 BAD_REQUEST (empty document, invalid base64)
    """
    data = payload_bytes(body.data, body.encoding)
    if not data.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Document data to timestamp must not be empty",
        )

    token = services.timestamps.create_token(data, body.authority)
    try:
        decoded = services.timestamps.decode_token(token)
    except TimestampDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None

    record = await services.timestamp_history.add(
        data=data.decode("utf-8", errors="replace"),
        token=token,
        timestamp=decoded.timestamp,
        authority=decoded.authority,
    )
    return _to_response(record)


@router.get("", response_model=TimestampListResponse)
async def list_timestamps(
    services: SigningServices = Depends(get_services),
) -> TimestampListResponse:
    """List created timestamps, newest first."""
    records = await services.timestamp_history.list_all()
    return TimestampListResponse(
        items=[_to_response(r) for r in records],
        mode=services.timestamps.mode,
    )


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_timestamp(
    record_id: UUID,
    services: SigningServices = Depends(get_services),
) -> None:
    try:
        await services.timestamp_history.delete(record_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None


@router.post("/verify", response_model=TimestampVerificationResponse)
async def verify_timestamp(
    body: VerifyTimestampRequest,
    services: SigningServices = Depends(get_services),
) -> TimestampVerificationResponse:
    """
    Verify a timestamp token.

    - Returns valid=false for malformed, forged or tampered tokens
    - When data is supplied in hmac mode, the token must cover exactly that data
    """
    data = payload_bytes(body.data, body.encoding) if body.data is not None else None
    result = services.timestamps.verify_token(body.token, data)
    return TimestampVerificationResponse(
        valid=result.valid,
        timestamp=result.timestamp,
        authority=result.authority,
        mode=services.timestamps.mode,
    )
