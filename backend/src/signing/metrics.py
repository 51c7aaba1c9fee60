"""OpenTelemetry metrics for the signing core."""

from opentelemetry import metrics

meter = metrics.get_meter("signing")

# Key material
key_pairs_generated_total = meter.create_counter(
    name="signing_key_pairs_generated_total",
    description="Total key pairs generated",
    unit="1",
)

key_generation_duration = meter.create_histogram(
    name="signing_key_generation_duration_seconds",
    description="Key pair generation duration in seconds",
    unit="s",
)

keys_imported_total = meter.create_counter(
    name="signing_keys_imported_total",
    description="Total keys imported from PEM text",
    unit="1",
)

# Signatures
signatures_created_total = meter.create_counter(
    name="signing_signatures_created_total",
    description="Total signatures created",
    unit="1",
)

signature_verifications_total = meter.create_counter(
    name="signing_signature_verifications_total",
    description="Total signature verifications",
    unit="1",
)

# Digests
digests_computed_total = meter.create_counter(
    name="signing_digests_computed_total",
    description="Total digests computed",
    unit="1",
)

# Certificates
certificates_issued_total = meter.create_counter(
    name="signing_certificates_issued_total",
    description="Total self-signed certificate records issued",
    unit="1",
)

certificates_imported_total = meter.create_counter(
    name="signing_certificates_imported_total",
    description="Total certificates imported",
    unit="1",
)

# Timestamps
timestamp_tokens_created_total = meter.create_counter(
    name="signing_timestamp_tokens_created_total",
    description="Total timestamp tokens created",
    unit="1",
)

timestamp_verifications_total = meter.create_counter(
    name="signing_timestamp_verifications_total",
    description="Total timestamp token verifications",
    unit="1",
)


class SigningMetrics:
    """Facade for signing metrics with proper labels."""

    def record_key_pair_generated(self, key_size: int, duration_seconds: float) -> None:
        """Record key generation. Labels: key_size=2048|3072|4096"""
        key_pairs_generated_total.add(1, {"key_size": key_size})
        key_generation_duration.record(duration_seconds, {"key_size": key_size})

    def record_key_imported(self, kind: str) -> None:
        """Record key import. Labels: kind=public|private"""
        keys_imported_total.add(1, {"kind": kind})

    def record_signature_created(self, key_size: int) -> None:
        signatures_created_total.add(1, {"key_size": key_size})

    def record_signature_verification(self, result: str) -> None:
        """Record verification. Labels: result=valid|invalid"""
        signature_verifications_total.add(1, {"result": result})

    def record_digest_computed(self, algorithm: str, backend: str) -> None:
        """Record digest. Labels: algorithm, backend=provider|builtin"""
        digests_computed_total.add(1, {"algorithm": algorithm, "backend": backend})

    def record_certificate_issued(self) -> None:
        certificates_issued_total.add(1)

    def record_certificate_imported(self, fmt: str) -> None:
        """Record import. Labels: format=x509|record"""
        certificates_imported_total.add(1, {"format": fmt})

    def record_timestamp_created(self, mode: str) -> None:
        timestamp_tokens_created_total.add(1, {"mode": mode})

    def record_timestamp_verification(self, mode: str, result: str) -> None:
        """Record token verification. Labels: mode=hmac|encoded, result=valid|invalid"""
        timestamp_verifications_total.add(1, {"mode": mode, "result": result})


# Singleton instance
signing_metrics = SigningMetrics()
