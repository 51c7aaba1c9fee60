"""Cryptographic core of the signature workbench.

This package provides:
- Key pair generation and PEM encoding (KeyPairManager)
- RSA-PSS signing and verification (SignatureEngine)
- Message digests, including an RFC 1321 MD5 fallback (DigestEngine)
- Self-signed certificate records (CertificateIssuer)
- Timestamp tokens (TimestampAuthority)

Components are stateless; key material, records and tokens belong to the caller.
"""

from signing.core.certificates import CertificateIssuer
from signing.core.digest import DigestEngine
from signing.core.keys import KeyPairManager
from signing.core.provider import CryptographyProvider, CryptoProvider
from signing.core.signatures import SignatureEngine
from signing.core.timestamps import TimestampAuthority

__all__ = [
    "CertificateIssuer",
    "CryptoProvider",
    "CryptographyProvider",
    "DigestEngine",
    "KeyPairManager",
    "SignatureEngine",
    "TimestampAuthority",
]
