"""Unit tests for RSA-PSS signing and verification."""

import base64
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from signing.core.errors import SignatureError
from signing.core.signatures import DEFAULT_SALT_LENGTH, SignatureEngine, max_salt_length
from signing.domain.models import PublicKeyHandle


@pytest.fixture
def engine(provider, clock):
    return SignatureEngine(provider, clock=clock)


class ExplodingVerifyProvider:
    """Wraps a provider and fails every verification with a non-signature error."""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def verify(self, public_key, signature, message, salt_length):
        raise MemoryError("backend fault")


class TestSigning:
    """Tests for SignatureEngine.sign."""

    def test_sign_produces_modulus_length_signature(self, engine, key_pair, clock):
        """Test that a 2048-bit key yields a 256-byte signature."""
        result = engine.sign(b"Invoice #42: $100", key_pair.private)

        assert len(result.signature) == 256
        assert result.algorithm == "RSA-PSS"
        assert result.key_size == 2048
        assert result.salt_length == DEFAULT_SALT_LENGTH
        assert result.created_at == clock.now()
        assert base64.b64decode(result.signature_b64) == result.signature

    @pytest.mark.parametrize("key_size", [3072, 4096])
    def test_result_records_actual_key_size(self, engine, key_pairs_by_size, key_size):
        """Test that the recorded key size is that of the key used."""
        result = engine.sign(b"payload", key_pairs_by_size[key_size].private)

        assert result.key_size == key_size
        assert len(result.signature) == key_size // 8

    def test_signature_is_standard_pss(self, engine, key_pair):
        """Test that the signature verifies with plain RSA-PSS/SHA-256 and salt 32."""
        message = b"interoperable"
        result = engine.sign(message, key_pair.private)

        key_pair.public.key.verify(
            result.signature,
            message,
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=32),
            hashes.SHA256(),
        )

    def test_signatures_are_randomized(self, engine, key_pair):
        """Test that PSS salts make repeated signatures differ."""
        first = engine.sign(b"same", key_pair.private)
        second = engine.sign(b"same", key_pair.private)

        assert first.signature != second.signature

    def test_sign_empty_message(self, engine, key_pair):
        """Test that an empty message can be signed and verified."""
        result = engine.sign(b"", key_pair.private)

        assert engine.verify(b"", result.signature_b64, key_pair.public)

    def test_sign_with_public_key_raises(self, engine, key_pair):
        """Test that a verify-only handle cannot sign."""
        with pytest.raises(SignatureError, match="sign capability"):
            engine.sign(b"data", key_pair.public)

    @pytest.mark.parametrize("salt_length", [-1, 223])
    def test_salt_length_out_of_range_raises(self, engine, key_pair, salt_length):
        """Test that salts beyond the PSS limit for the key are refused."""
        assert max_salt_length(2048) == 222

        with pytest.raises(SignatureError, match="Salt length"):
            engine.sign(b"data", key_pair.private, salt_length=salt_length)

    def test_custom_salt_length(self, engine, key_pair):
        """Test that signing and verifying agree on a non-default salt."""
        result = engine.sign(b"data", key_pair.private, salt_length=0)

        assert result.salt_length == 0
        assert engine.verify(b"data", result.signature_b64, key_pair.public, salt_length=0)
        assert not engine.verify(b"data", result.signature_b64, key_pair.public)

    def test_sign_records_metrics(self, engine, key_pair):
        """Test that signing records the key size used."""
        with patch("signing.core.signatures.signing_metrics") as mock_metrics:
            engine.sign(b"data", key_pair.private)

        mock_metrics.record_signature_created.assert_called_once_with(2048)


class TestVerification:
    """Tests for SignatureEngine.verify."""

    def test_valid_signature_verifies(self, engine, key_pair):
        """Test the sign/verify round trip."""
        result = engine.sign(b"Invoice #42: $100", key_pair.private)

        assert engine.verify(b"Invoice #42: $100", result.signature_b64, key_pair.public)

    def test_altered_message_fails(self, engine, key_pair):
        """Test that changing the message invalidates the signature."""
        result = engine.sign(b"Invoice #42: $100", key_pair.private)

        assert not engine.verify(b"Invoice #43: $100", result.signature_b64, key_pair.public)

    def test_wrong_key_fails(self, engine, key_pair, other_key_pair):
        """Test that another pair's public key does not verify."""
        result = engine.sign(b"data", key_pair.private)

        assert not engine.verify(b"data", result.signature_b64, other_key_pair.public)

    def test_flipped_bit_fails(self, engine, key_pair):
        """Test that a single flipped bit in the signature invalidates it."""
        result = engine.sign(b"data", key_pair.private)
        tampered = bytearray(result.signature)
        tampered[10] ^= 0x01

        assert not engine.verify(
            b"data", base64.b64encode(bytes(tampered)).decode(), key_pair.public
        )

    def test_wrapped_base64_accepted(self, engine, key_pair):
        """Test that whitespace inside the encoded signature is ignored."""
        result = engine.sign(b"data", key_pair.private)
        encoded = result.signature_b64
        wrapped = "\n".join(encoded[i : i + 64] for i in range(0, len(encoded), 64))

        assert engine.verify(b"data", wrapped, key_pair.public)

    @pytest.mark.parametrize(
        "signature",
        ["", "not-base64!!", "QUJD", base64.b64encode(b"\x00" * 255).decode(), None],
    )
    def test_malformed_signature_returns_false(self, engine, key_pair, signature):
        """Test that undecodable or wrong-length signatures are invalid, not errors."""
        assert engine.verify(b"data", signature, key_pair.public) is False

    def test_private_handle_cannot_verify(self, engine, key_pair):
        """Test that a sign-only handle is refused for verification."""
        result = engine.sign(b"data", key_pair.private)

        assert engine.verify(b"data", result.signature_b64, key_pair.private) is False

    def test_size_mismatch_between_handle_and_signature(self, engine, key_pair, key_pairs_by_size):
        """Test that a 3072-bit signature is rejected by a 2048-bit key."""
        result = engine.sign(b"data", key_pairs_by_size[3072].private)

        assert engine.verify(b"data", result.signature_b64, key_pair.public) is False

    def test_provider_fault_returns_false(self, provider, key_pair):
        """Test that unexpected provider errors fail closed."""
        signer = SignatureEngine(provider)
        result = signer.sign(b"data", key_pair.private)
        engine = SignatureEngine(ExplodingVerifyProvider(provider))

        assert engine.verify(b"data", result.signature_b64, key_pair.public) is False

    def test_imported_public_key_verifies(self, engine, key_manager, key_pair):
        """Test that a public key moved through PEM still verifies."""
        result = engine.sign(b"data", key_pair.private)
        imported = key_manager.import_public_key(key_manager.export_public_key(key_pair.public))

        assert isinstance(imported, PublicKeyHandle)
        assert engine.verify(b"data", result.signature_b64, imported)

    def test_verification_records_outcome(self, engine, key_pair):
        """Test that each verification records valid or invalid."""
        result = engine.sign(b"data", key_pair.private)

        with patch("signing.core.signatures.signing_metrics") as mock_metrics:
            engine.verify(b"data", result.signature_b64, key_pair.public)
            engine.verify(b"other", result.signature_b64, key_pair.public)

        calls = [c.args[0] for c in mock_metrics.record_signature_verification.call_args_list]
        assert calls == ["valid", "invalid"]
