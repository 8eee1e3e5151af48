"""
OhhAuth - OAuth 1.0 Request Signing

HMAC-SHA1 / HMAC-SHA256 request signatures and Authorization headers for
clients of OAuth 1.0 APIs (RFC 5849), plus a matching verifier.

Components:
- signer: signature base string, HMAC signature, Authorization header
- encoding: RFC 3986 percent-encoding and parameter normalization
- credentials: consumer/token credentials and signature method
- nonce: injectable nonce sources
- verify: server-side verification and nonce replay cache
- httpx_auth: httpx.Auth that signs outgoing requests
"""

from ohhauth.credentials import Credentials, SignatureMethod
from ohhauth.encoding import (
    normalize_base_url,
    normalize_parameters,
    percent_decode,
    percent_encode,
)
from ohhauth.exceptions import InvalidInput
from ohhauth.nonce import FixedNonceSource, SeededNonceSource, generate_nonce
from ohhauth.signer import (
    SignedRequest,
    build_authorization_header,
    compute_signature,
    create_signature_base_string,
    sign,
)
from ohhauth.verify import (
    NonceCache,
    VerificationError,
    VerificationResult,
    parse_authorization_header,
    verify_request,
)
from ohhauth.httpx_auth import OAuth1Auth, sign_httpx_request

__version__ = "1.0.0"

__all__ = [
    # Credentials
    "Credentials",
    "SignatureMethod",
    # Encoding
    "normalize_base_url",
    "normalize_parameters",
    "percent_decode",
    "percent_encode",
    # Errors
    "InvalidInput",
    # Nonces
    "FixedNonceSource",
    "SeededNonceSource",
    "generate_nonce",
    # Signing
    "SignedRequest",
    "build_authorization_header",
    "compute_signature",
    "create_signature_base_string",
    "sign",
    # Verification
    "NonceCache",
    "VerificationError",
    "VerificationResult",
    "parse_authorization_header",
    "verify_request",
    # httpx
    "OAuth1Auth",
    "sign_httpx_request",
]
