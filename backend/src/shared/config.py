from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Signature Workbench"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Observability
    TRACE_CONSOLE_EXPORT: bool = False
    METRICS_CONSOLE_EXPORT: bool = False

    # Keys and signatures
    DEFAULT_KEY_SIZE: int = 2048
    KEY_GENERATION_TIMEOUT_SECONDS: float = 60.0
    SIGNATURE_SALT_LENGTH: int = 32

    # Certificates
    CERT_DEFAULT_VALIDITY_DAYS: int = 365
    CERT_MAX_VALIDITY_DAYS: int = 3650
    CERT_EXPIRING_SOON_DAYS: int = 30
    CERT_EXPORT_FORMAT: str = "record"  # "record" or "x509"

    # Timestamp authority
    TIMESTAMP_MODE: str = "hmac"  # "hmac" or "encoded"
    TIMESTAMP_AUTHORITY_ID: str = "Local Timestamp Authority"
    TIMESTAMP_SECRET: Optional[str] = None  # base64, generated at startup if unset


settings = Settings()
