"""Digest API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from signing.api.deps import get_services, payload_bytes
from signing.api.schemas import (
    AlgorithmInfo,
    CompareRequest,
    CompareResponse,
    DataPayload,
    DigestRequest,
    HashListResponse,
    HashResponse,
)
from signing.core.digest import DigestEngine
from signing.core.errors import DigestError
from signing.domain.models import HashResult
from signing.domain.states import HashAlgorithm
from signing.services.workbench import SigningServices

router = APIRouter(prefix="/api/digests", tags=["digests"])


def _to_response(result: HashResult) -> HashResponse:
    return HashResponse(
        algorithm=result.algorithm,
        digest=result.digest_hex,
        input_size=result.input_size,
        computed_at=result.computed_at,
    )


@router.get("/algorithms", response_model=list[AlgorithmInfo])
async def list_algorithms() -> list[AlgorithmInfo]:
    """List supported digest algorithms with their strength rating."""
    return [
        AlgorithmInfo(
            name=alg.value,
            digest_size=alg.digest_size,
            hex_length=alg.digest_size * 2,
            strength=alg.strength,
        )
        for alg in HashAlgorithm
    ]


@router.post("", response_model=HashResponse)
async def compute_digest(
    body: DigestRequest,
    services: SigningServices = Depends(get_services),
) -> HashResponse:
    """
    Compute a digest of text or base64 file content.

    - Errors: 400 BAD_REQUEST (unknown algorithm, invalid base64)
    """
    data = payload_bytes(body.data, body.encoding)
    try:
        return _to_response(services.digests.compute(data, body.algorithm))
    except DigestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None


@router.post("/all", response_model=HashListResponse)
async def compute_all_digests(
    body: DataPayload,
    services: SigningServices = Depends(get_services),
) -> HashListResponse:
    """Compute the digest of the input with every supported algorithm."""
    data = payload_bytes(body.data, body.encoding)
    return HashListResponse(items=[_to_response(r) for r in services.digests.compute_all(data)])


@router.post("/compare", response_model=CompareResponse)
async def compare_digests(body: CompareRequest) -> CompareResponse:
    """Compare two hex digests, ignoring case and surrounding whitespace."""
    return CompareResponse(match=DigestEngine.compare(body.first, body.second))
