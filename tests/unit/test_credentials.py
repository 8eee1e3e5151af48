"""
Tests for Credentials and SignatureMethod.
"""
import dataclasses

import pytest

from ohhauth.credentials import Credentials, SignatureMethod
from ohhauth.exceptions import InvalidInput


class TestSignatureMethod:
    """Test signature method parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("HMAC-SHA1", SignatureMethod.HMAC_SHA1),
        ("hmac-sha1", SignatureMethod.HMAC_SHA1),
        (" HMAC-SHA256 ", SignatureMethod.HMAC_SHA256),
        (SignatureMethod.HMAC_SHA256, SignatureMethod.HMAC_SHA256),
    ])
    def test_parse(self, value, expected):
        assert SignatureMethod.parse(value) is expected

    @pytest.mark.parametrize("value", ["PLAINTEXT", "RSA-SHA1", ""])
    def test_unsupported(self, value):
        with pytest.raises(InvalidInput, match="Unsupported signature method"):
            SignatureMethod.parse(value)

    def test_hash_algorithms(self):
        assert SignatureMethod.HMAC_SHA1.hash_algorithm().name == "sha1"
        assert SignatureMethod.HMAC_SHA256.hash_algorithm().name == "sha256"


class TestCredentials:
    """Test the Credentials value type."""

    def test_defaults(self):
        credentials = Credentials("key", "secret")
        assert credentials.token is None
        assert credentials.token_secret is None
        assert credentials.signature_method is SignatureMethod.HMAC_SHA1
        assert not credentials.has_token

    def test_string_signature_method_coerced(self):
        credentials = Credentials("key", "secret", signature_method="HMAC-SHA256")
        assert credentials.signature_method is SignatureMethod.HMAC_SHA256

    def test_invalid_signature_method(self):
        with pytest.raises(InvalidInput):
            Credentials("key", "secret", signature_method="MD5")

    def test_immutable(self):
        credentials = Credentials("key", "secret")
        with pytest.raises(dataclasses.FrozenInstanceError):
            credentials.consumer_secret = "other"

    def test_repr_hides_secrets(self):
        """Secrets never appear in repr (and therefore in logs)."""
        credentials = Credentials("key", "top-secret", token="tok", token_secret="also-secret")
        text = repr(credentials)
        assert "key" in text
        assert "tok" in text
        assert "top-secret" not in text
        assert "also-secret" not in text

    def test_validate_ok(self):
        Credentials("key", "secret").validate()

    def test_validate_reports_all_missing(self):
        with pytest.raises(InvalidInput, match="consumer_key, consumer_secret"):
            Credentials("", "").validate()
