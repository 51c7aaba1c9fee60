"""Key management API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from signing.api.deps import get_services
from signing.api.schemas import (
    GenerateKeyPairRequest,
    ImportKeysRequest,
    ImportKeysResponse,
    KeyPairResponse,
)
from signing.core.errors import DecodingError, EncodingError, GenerationError
from signing.services.workbench import SigningServices

router = APIRouter(prefix="/api/keys", tags=["keys"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=KeyPairResponse)
async def generate_key_pair(
    body: GenerateKeyPairRequest,
    services: SigningServices = Depends(get_services),
) -> KeyPairResponse:
    """
    Generate an RSA-PSS key pair.

    - Key size: 2048, 3072 or 4096 (defaults to DEFAULT_KEY_SIZE)
    - Errors: 422 unsupported size, 504 generation timeout
    """
    key_size = body.key_size or services.default_key_size
    try:
        key_pair = await services.keys.generate_key_pair_async(
            key_size, timeout=services.key_generation_timeout
        )
        return KeyPairResponse(
            public_key_pem=services.keys.export_public_key(key_pair.public),
            private_key_pem=services.keys.export_private_key(key_pair.private),
            key_size=key_pair.key_size,
            key_id=key_pair.key_id,
            algorithm=key_pair.public.algorithm,
        )
    except GenerationError as e:
        if isinstance(e.__cause__, TimeoutError):
            raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e)) from None
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except EncodingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None


@router.post("/import", response_model=ImportKeysResponse)
async def import_keys(
    body: ImportKeysRequest,
    services: SigningServices = Depends(get_services),
) -> ImportKeysResponse:
    """
    Check PEM keys and report what they contain.

    - When both halves are given they must belong to the same key pair
    - Errors: 400 BAD_REQUEST (malformed or mismatched keys)
    """
    try:
        if body.private_key_pem:
            key_pair = services.keys.import_key_pair(body.public_key_pem, body.private_key_pem)
            return ImportKeysResponse(
                key_id=key_pair.key_id, key_size=key_pair.key_size, has_private_key=True
            )
        public = services.keys.import_public_key(body.public_key_pem)
        return ImportKeysResponse(
            key_id=public.key_id, key_size=public.key_size, has_private_key=False
        )
    except DecodingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
