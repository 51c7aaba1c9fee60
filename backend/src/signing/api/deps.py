"""Service injection for the API routers."""

from fastapi import HTTPException, status

from signing.api.schemas import DataEncoding, decode_data
from signing.services.workbench import SigningServices

# Global service container, set during application startup
_services: SigningServices | None = None


def set_services(services: SigningServices | None) -> None:
    """Set the global service container."""
    global _services
    _services = services


def get_services() -> SigningServices:
    """Get the global service container."""
    if _services is None:
        raise RuntimeError("SigningServices not initialized")
    return _services


def payload_bytes(data: str, encoding: DataEncoding) -> bytes:
    """Decode a request payload, answering 400 on invalid base64."""
    try:
        return decode_data(data, encoding)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
