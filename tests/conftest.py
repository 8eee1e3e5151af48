"""
Shared fixtures for signing tests.

Published test vectors:
- OAuth Core 1.0 Appendix A (photos.example.net)
- RFC 5849 §3.4.1 (example.com/request)
"""
# Load .env BEFORE any other imports so OHHAUTH_* settings are visible
from pathlib import Path
from dotenv import load_dotenv

_repo_root = Path(__file__).parent.parent
load_dotenv(_repo_root / ".env")

import pytest

from ohhauth import Credentials, FixedNonceSource, SignatureMethod


@pytest.fixture
def photos_credentials():
    """Client and token credentials from the OAuth Core 1.0 Appendix A example."""
    return Credentials(
        consumer_key="dpf43f3p2l4k3l03",
        consumer_secret="kd94hf93k423kf44",
        token="nnch734d00sl2jdk",
        token_secret="pfkkdhi9sl3r4s00",
    )


@pytest.fixture
def photos_request():
    """Request from the OAuth Core 1.0 Appendix A example."""
    return {
        "method": "GET",
        "base_url": "http://photos.example.net/photos",
        "parameters": {"file": "vacation.jpg", "size": "original"},
        "nonce": "kllo9940pd9333jh",
        "timestamp": 1191242096,
    }


@pytest.fixture
def two_legged_credentials():
    """Client credentials only (no token)."""
    return Credentials(consumer_key="consumer-key", consumer_secret="consumer-secret")


@pytest.fixture
def sha256_credentials():
    return Credentials(
        consumer_key="consumer-key",
        consumer_secret="consumer-secret",
        token="access-token",
        token_secret="token-secret",
        signature_method=SignatureMethod.HMAC_SHA256,
    )


@pytest.fixture
def fixed_nonce():
    return FixedNonceSource("0123456789abcdef0123456789abcdef")


@pytest.fixture
def fixed_clock():
    """Clock frozen at 1700000000."""
    return lambda: 1700000000.0
