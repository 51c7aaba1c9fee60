"""Certificate store API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from signing.api.deps import get_services
from signing.api.schemas import (
    CertificateExportResponse,
    CertificateListResponse,
    CertificateResponse,
    ImportCertificateRequest,
    IssueCertificateRequest,
    IssuedCertificateResponse,
)
from signing.core.errors import DecodingError, EncodingError, GenerationError, IssuanceError
from signing.domain.models import certificate_status
from signing.domain.states import CertificateExportFormat
from signing.services.stores import ConflictError, NotFoundError, StoredCertificate
from signing.services.workbench import SigningServices

router = APIRouter(prefix="/api/certificates", tags=["certificates"])


def _to_response(entry: StoredCertificate, services: SigningServices) -> CertificateResponse:
    record = entry.record
    return CertificateResponse(
        subject=record.subject,
        issuer=record.issuer,
        serial_number=record.serial_number,
        valid_from=record.valid_from,
        valid_to=record.valid_to,
        public_key_ref=record.public_key_ref,
        source=record.source,
        status=certificate_status(record, services.clock.now(), services.expiring_within),
        has_key_pair=entry.key_pair is not None,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IssuedCertificateResponse)
async def issue_certificate(
    body: IssueCertificateRequest,
    services: SigningServices = Depends(get_services),
) -> IssuedCertificateResponse:
    """
    Generate a key pair and issue a self-signed certificate for it.

    - Validity: 1 to CERT_MAX_VALIDITY_DAYS (default CERT_DEFAULT_VALIDITY_DAYS)
    - Errors: 400 BAD_REQUEST (invalid subject or validity), 504 key generation timeout
    """
    validity_days = body.validity_days or services.default_validity_days
    key_size = body.key_size or services.default_key_size
    try:
        key_pair = await services.keys.generate_key_pair_async(
            key_size, timeout=services.key_generation_timeout
        )
        record = services.certificates.issue_self_signed(body.subject, validity_days, key_pair)
        entry = await services.certificate_store.add(record, key_pair)
        return IssuedCertificateResponse(
            certificate=_to_response(entry, services),
            public_key_pem=services.keys.export_public_key(key_pair.public),
            private_key_pem=services.keys.export_private_key(key_pair.private),
        )
    except GenerationError as e:
        if isinstance(e.__cause__, TimeoutError):
            raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e)) from None
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except IssuanceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    except EncodingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None


@router.get("", response_model=CertificateListResponse)
async def list_certificates(
    services: SigningServices = Depends(get_services),
) -> CertificateListResponse:
    """List stored certificates in insertion order with their current status."""
    entries = await services.certificate_store.list_all()
    return CertificateListResponse(
        items=[_to_response(entry, services) for entry in entries],
        total=len(entries),
    )


@router.post("/import", status_code=status.HTTP_201_CREATED, response_model=CertificateResponse)
async def import_certificate(
    body: ImportCertificateRequest,
    services: SigningServices = Depends(get_services),
) -> CertificateResponse:
    """
    Import an X.509 PEM certificate or an exported certificate record.

    - Errors: 400 BAD_REQUEST (unreadable certificate), 409 CONFLICT (serial already stored)
    """
    try:
        record = services.certificates.import_external(body.pem)
        entry = await services.certificate_store.add(record)
    except DecodingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _to_response(entry, services)


@router.get("/{serial_number}", response_model=CertificateResponse)
async def get_certificate(
    serial_number: str,
    services: SigningServices = Depends(get_services),
) -> CertificateResponse:
    try:
        entry = await services.certificate_store.get(serial_number)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    return _to_response(entry, services)


@router.delete("/{serial_number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_certificate(
    serial_number: str,
    services: SigningServices = Depends(get_services),
) -> None:
    """Remove a certificate from the store."""
    try:
        await services.certificate_store.delete(serial_number)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None


@router.get("/{serial_number}/export", response_model=CertificateExportResponse)
async def export_certificate(
    serial_number: str,
    fmt: CertificateExportFormat | None = Query(None, alias="format"),
    services: SigningServices = Depends(get_services),
) -> CertificateExportResponse:
    """
    Export a stored certificate.

    - format=record: JSON record in CERTIFICATE markers (not X.509)
    - format=x509: genuine self-signed X.509, only for certificates issued here
    - Errors: 404 NOT_FOUND, 409 CONFLICT (x509 requested without key pair)
    """
    export_format = fmt or services.export_format
    try:
        entry = await services.certificate_store.get(serial_number)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None

    if export_format == CertificateExportFormat.X509 and entry.key_pair is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="X.509 export is only available for certificates issued with a stored key pair",
        )

    try:
        pem = services.certificates.export(entry.record, export_format, entry.key_pair)
    except IssuanceError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None

    return CertificateExportResponse(
        serial_number=entry.record.serial_number,
        format=export_format,
        pem=pem,
        filename=f"certificate_{entry.record.serial_number}.crt",
    )
