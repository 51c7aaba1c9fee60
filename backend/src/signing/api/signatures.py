"""Signing and verification API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from signing.api.deps import get_services, payload_bytes
from signing.api.schemas import SignatureResponse, SignRequest, VerifyRequest, VerifyResponse
from signing.core.errors import DecodingError, SignatureError
from signing.services.workbench import SigningServices

router = APIRouter(prefix="/api/signatures", tags=["signatures"])


@router.post("/sign", response_model=SignatureResponse)
async def sign(
    body: SignRequest,
    services: SigningServices = Depends(get_services),
) -> SignatureResponse:
    """
    Sign a document with a PEM private key.

    - Errors: 400 BAD_REQUEST (invalid key, salt length or data)
    """
    message = payload_bytes(body.data, body.encoding)
    salt_length = services.salt_length if body.salt_length is None else body.salt_length
    try:
        private_key = services.keys.import_private_key(body.private_key_pem)
        result = services.signatures.sign(message, private_key, salt_length=salt_length)
    except (DecodingError, SignatureError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    return SignatureResponse(
        signature=result.signature_b64,
        algorithm=result.algorithm,
        key_size=result.key_size,
        salt_length=result.salt_length,
        created_at=result.created_at,
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify(
    body: VerifyRequest,
    services: SigningServices = Depends(get_services),
) -> VerifyResponse:
    """
    Verify a base64 signature with a PEM public key.

    - Returns valid=false for any mismatch or undecodable signature
    - Errors: 400 BAD_REQUEST only when the public key itself is malformed
    """
    message = payload_bytes(body.data, body.encoding)
    salt_length = services.salt_length if body.salt_length is None else body.salt_length
    try:
        public_key = services.keys.import_public_key(body.public_key_pem)
    except DecodingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    valid = services.signatures.verify(
        message, body.signature, public_key, salt_length=salt_length
    )
    return VerifyResponse(valid=valid)
