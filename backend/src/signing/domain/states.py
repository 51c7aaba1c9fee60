from enum import IntEnum, StrEnum


class KeySize(IntEnum):
    """Supported RSA modulus sizes in bits."""

    RSA_2048 = 2048
    RSA_3072 = 3072
    RSA_4096 = 4096


class KeyUsage(StrEnum):
    """Capability tag carried by a key handle."""

    SIGN = "sign"
    VERIFY = "verify"


class HashAlgorithm(StrEnum):
    """All digest algorithms offered by the digest engine."""

    SHA1 = "SHA-1"
    SHA256 = "SHA-256"
    SHA384 = "SHA-384"
    SHA512 = "SHA-512"
    MD5 = "MD5"

    @property
    def digest_size(self) -> int:
        """Digest length in bytes."""
        return _DIGEST_SIZES[self]

    @property
    def strength(self) -> str:
        return _STRENGTH[self]


_DIGEST_SIZES = {
    HashAlgorithm.SHA1: 20,
    HashAlgorithm.SHA256: 32,
    HashAlgorithm.SHA384: 48,
    HashAlgorithm.SHA512: 64,
    HashAlgorithm.MD5: 16,
}

_STRENGTH = {
    HashAlgorithm.SHA1: "Weak",
    HashAlgorithm.SHA256: "Strong",
    HashAlgorithm.SHA384: "Very Strong",
    HashAlgorithm.SHA512: "Very Strong",
    HashAlgorithm.MD5: "Broken",
}


class CertificateStatus(StrEnum):
    """Displayed status of a certificate record, derived from its validity window."""

    VALID = "Valid"
    EXPIRING_SOON = "Expiring Soon"
    EXPIRED = "Expired"


class CertificateSource(StrEnum):
    ISSUED = "issued"
    IMPORTED = "imported"


class CertificateExportFormat(StrEnum):
    RECORD = "record"  # JSON record inside CERTIFICATE markers, not X.509
    X509 = "x509"


class TimestampMode(StrEnum):
    """Which verification guarantee the timestamp authority provides."""

    ENCODED = "encoded"  # decodability only, tokens are forgeable
    HMAC = "hmac"
