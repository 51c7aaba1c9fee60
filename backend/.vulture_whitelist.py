from backend.src.main import health_check, prometheus_metrics
from backend.src.shared.config import Settings
from backend.src.shared.security import generate_timestamp_secret
from backend.src.signing.api import certificates, digests, keys, signatures, timestamps
from backend.src.signing.domain.models import (
    HashResult,
    SignatureResult,
    TimestampToken,
)
from backend.src.signing.domain.states import CertificateStatus, KeySize

# Pydantic Settings
Settings.model_config
Settings.APP_ENV

# Domain values (read by API schemas and tests)
SignatureResult.created_at
HashResult.computed_at
TimestampToken.nonce
TimestampToken.data
TimestampToken.algorithm
TimestampToken.digest
TimestampToken.is_authenticated
CertificateStatus.EXPIRING_SOON
KeySize.RSA_3072
KeySize.RSA_4096

# FastAPI routes
health_check
prometheus_metrics
keys.generate_key_pair
keys.import_keys
signatures.sign
signatures.verify
digests.list_algorithms
digests.compute_digest
digests.compute_all_digests
digests.compare_digests
certificates.issue_certificate
certificates.list_certificates
certificates.import_certificate
certificates.get_certificate
certificates.delete_certificate
certificates.export_certificate
timestamps.create_timestamp
timestamps.list_timestamps
timestamps.delete_timestamp
timestamps.verify_timestamp

# Utilities for operators and tests
generate_timestamp_secret
