"""
Signature Verification

Checks OAuth 1.0 signed requests on the receiving side. Useful for test
doubles of remote APIs and for services that accept OAuth 1.0 clients.

Checks (in order):
    1. Authorization header parses and uses the OAuth scheme
    2. Required protocol parameters are present
    3. Consumer key, token and signature method match the credentials
    4. Timestamp is an integer within ±tolerance of now
    5. Nonce has not been seen before (if a checker is provided)
    6. HMAC matches (constant-time comparison)
"""

import base64
import binascii
import logging
import re
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hmac

from ohhauth.credentials import Credentials, SignatureMethod
from ohhauth.encoding import Parameters, iter_parameters, percent_decode
from ohhauth.exceptions import InvalidInput
from ohhauth.signer import SIGNATURE_PARAMETER, build_signing_key, create_signature_base_string

logger = logging.getLogger(__name__)


# Timestamp tolerance: ±5 minutes
TIMESTAMP_TOLERANCE_SECONDS = 300

# Default TTL for the nonce cache (must be > timestamp tolerance)
NONCE_TTL_SECONDS = 600

MAX_CACHED_NONCES = 10000

REQUIRED_PARAMETERS = (
    "oauth_consumer_key",
    "oauth_nonce",
    "oauth_signature",
    "oauth_signature_method",
    "oauth_timestamp",
)

_HEADER_PAIR = re.compile(r'\s*([^=\s,]+)\s*=\s*"((?:[^"\\]|\\.)*)"\s*(?:,|$)')


class VerificationError(Enum):
    """Enumeration of possible verification failures."""
    INVALID_HEADER = "invalid_header"
    MISSING_PARAMETERS = "missing_parameters"
    CONSUMER_KEY_MISMATCH = "consumer_key_mismatch"
    TOKEN_MISMATCH = "token_mismatch"
    SIGNATURE_METHOD_MISMATCH = "signature_method_mismatch"
    INVALID_TIMESTAMP_FORMAT = "invalid_timestamp_format"
    TIMESTAMP_TOO_OLD = "timestamp_too_old"
    TIMESTAMP_TOO_NEW = "timestamp_too_new"
    NONCE_REUSED = "nonce_reused"
    INVALID_SIGNATURE_FORMAT = "invalid_signature_format"
    SIGNATURE_VERIFICATION_FAILED = "signature_verification_failed"


@dataclass
class VerificationResult:
    """
    Result of signature verification.

    Attributes:
        success: Whether verification succeeded
        error: Error type if verification failed
        error_message: Human-readable error message
        consumer_key: Consumer key from the header (if present)
        timestamp: Parsed timestamp (if valid)
        nonce: Nonce from the header (if present)
    """
    success: bool
    error: Optional[VerificationError] = None
    error_message: Optional[str] = None
    consumer_key: Optional[str] = None
    timestamp: Optional[int] = None
    nonce: Optional[str] = None

    @classmethod
    def ok(cls, consumer_key: str, timestamp: int, nonce: str) -> "VerificationResult":
        """Create a successful result."""
        return cls(success=True, consumer_key=consumer_key, timestamp=timestamp, nonce=nonce)

    @classmethod
    def fail(
        cls,
        error: VerificationError,
        message: str,
        consumer_key: Optional[str] = None,
    ) -> "VerificationResult":
        """Create a failed result."""
        return cls(success=False, error=error, error_message=message, consumer_key=consumer_key)


def parse_authorization_header(value: str) -> Dict[str, str]:
    """
    Parse an 'OAuth k="v", ...' header into decoded parameters.

    The realm attribute is dropped since it is not part of the signature.

    Args:
        value: Authorization header value

    Returns:
        Dict of decoded protocol parameters

    Raises:
        InvalidInput: If the scheme is not OAuth or a pair is malformed
    """
    if not value:
        raise InvalidInput("Authorization header is empty")

    scheme, _, rest = value.strip().partition(" ")
    if scheme.lower() != "oauth":
        raise InvalidInput(f"Unsupported authorization scheme: '{scheme}'")

    params: Dict[str, str] = {}
    position = 0
    rest = rest.strip()
    while position < len(rest):
        match = _HEADER_PAIR.match(rest, position)
        if not match:
            raise InvalidInput(f"Malformed Authorization header near: '{rest[position:position + 20]}'")
        key = percent_decode(match.group(1))
        raw_value = match.group(2)
        if key == "realm":
            position = match.end()
            continue
        if key in params:
            raise InvalidInput(f"Duplicate parameter '{key}' in Authorization header")
        params[key] = percent_decode(raw_value)
        position = match.end()

    return params


def validate_timestamp(timestamp: int, now: float, tolerance_seconds: int) -> Optional[VerificationError]:
    """Return an error if the timestamp is outside ±tolerance of now."""
    delta = int(now) - timestamp
    if delta > tolerance_seconds:
        return VerificationError.TIMESTAMP_TOO_OLD
    if delta < -tolerance_seconds:
        return VerificationError.TIMESTAMP_TOO_NEW
    return None


def verify_request(
    method: str,
    url: str,
    parameters: Optional[Parameters],
    authorization_header: str,
    credentials: Credentials,
    *,
    check_nonce_reuse: Optional[Callable[[str], bool]] = None,
    now: Optional[float] = None,
    tolerance_seconds: int = TIMESTAMP_TOLERANCE_SECONDS,
) -> VerificationResult:
    """
    Verify an OAuth 1.0 signed request.

    Args:
        method: HTTP method of the received request
        url: Full request URL (query parameters are part of the signature)
        parameters: Form body parameters, if any
        authorization_header: Received Authorization header value
        credentials: Expected credentials (looked up by the caller)
        check_nonce_reuse: Optional callback returning True if the nonce was
            already used, e.g. NonceCache().check_and_record
        now: Current time in seconds (default: time.time())
        tolerance_seconds: Allowed clock skew

    Returns:
        VerificationResult with success status and details

    Example:
        >>> cache = NonceCache()
        >>> result = verify_request("GET", url, None, header, creds,
        ...                         check_nonce_reuse=cache.check_and_record)
        >>> if not result.success:
        ...     reject(result.error_message)
    """
    result = _check_request(
        method,
        url,
        parameters,
        authorization_header,
        credentials,
        check_nonce_reuse,
        time.time() if now is None else now,
        tolerance_seconds,
    )
    if not result.success:
        logger.warning(
            f"Verification failed for consumer {result.consumer_key}: {method} {url} "
            f"({result.error.value}: {result.error_message})"
        )
    return result


def _check_request(
    method: str,
    url: str,
    parameters: Optional[Parameters],
    authorization_header: str,
    credentials: Credentials,
    check_nonce_reuse: Optional[Callable[[str], bool]],
    current: float,
    tolerance_seconds: int,
) -> VerificationResult:
    # 1. Parse header
    try:
        oauth_params = parse_authorization_header(authorization_header)
    except InvalidInput as e:
        return VerificationResult.fail(VerificationError.INVALID_HEADER, str(e))

    consumer_key = oauth_params.get("oauth_consumer_key")

    # 2. Required parameters
    missing = [name for name in REQUIRED_PARAMETERS if not oauth_params.get(name)]
    if credentials.has_token and not oauth_params.get("oauth_token"):
        missing.append("oauth_token")
    if missing:
        return VerificationResult.fail(
            VerificationError.MISSING_PARAMETERS,
            f"Missing protocol parameters: {', '.join(missing)}",
            consumer_key,
        )

    # 3. Identity and method
    if consumer_key != credentials.consumer_key:
        return VerificationResult.fail(
            VerificationError.CONSUMER_KEY_MISMATCH,
            f"Unknown consumer key: '{consumer_key}'",
            consumer_key,
        )
    if oauth_params.get("oauth_token") != (credentials.token or None):
        return VerificationResult.fail(
            VerificationError.TOKEN_MISMATCH,
            "Token does not match credentials",
            consumer_key,
        )
    try:
        signature_method = SignatureMethod.parse(oauth_params["oauth_signature_method"])
    except InvalidInput as e:
        return VerificationResult.fail(VerificationError.SIGNATURE_METHOD_MISMATCH, str(e), consumer_key)
    if signature_method is not credentials.signature_method:
        return VerificationResult.fail(
            VerificationError.SIGNATURE_METHOD_MISMATCH,
            f"Expected {credentials.signature_method.value}, got {signature_method.value}",
            consumer_key,
        )

    # 4. Timestamp
    timestamp_str = oauth_params["oauth_timestamp"]
    if not (timestamp_str.isascii() and timestamp_str.isdigit()):
        return VerificationResult.fail(
            VerificationError.INVALID_TIMESTAMP_FORMAT,
            f"Invalid timestamp format: '{timestamp_str}'",
            consumer_key,
        )
    timestamp = int(timestamp_str)
    ts_error = validate_timestamp(timestamp, current, tolerance_seconds)
    if ts_error == VerificationError.TIMESTAMP_TOO_OLD:
        return VerificationResult.fail(ts_error, f"Timestamp too old: {timestamp} (now: {int(current)})", consumer_key)
    if ts_error == VerificationError.TIMESTAMP_TOO_NEW:
        return VerificationResult.fail(
            ts_error, f"Timestamp too far in future: {timestamp} (now: {int(current)})", consumer_key
        )

    # 5. Nonce reuse
    nonce = oauth_params["oauth_nonce"]
    if check_nonce_reuse is not None and check_nonce_reuse(nonce):
        return VerificationResult.fail(VerificationError.NONCE_REUSED, f"Nonce already used: '{nonce}'", consumer_key)

    # 6. Signature
    try:
        signature_bytes = base64.b64decode(oauth_params[SIGNATURE_PARAMETER], validate=True)
    except (binascii.Error, ValueError) as e:
        return VerificationResult.fail(
            VerificationError.INVALID_SIGNATURE_FORMAT, f"Invalid base64 signature: {e}", consumer_key
        )

    try:
        signed_pairs = iter_parameters(parameters) + [
            (k, v) for k, v in oauth_params.items() if k != SIGNATURE_PARAMETER
        ]
        base_string = create_signature_base_string(method, url, signed_pairs)
    except InvalidInput as e:
        return VerificationResult.fail(VerificationError.INVALID_HEADER, str(e), consumer_key)

    mac = hmac.HMAC(
        build_signing_key(credentials.consumer_secret, credentials.token_secret),
        signature_method.hash_algorithm(),
    )
    mac.update(base_string.encode("ascii"))
    try:
        mac.verify(signature_bytes)
    except InvalidSignature:
        return VerificationResult.fail(
            VerificationError.SIGNATURE_VERIFICATION_FAILED,
            "Signature verification failed",
            consumer_key,
        )

    return VerificationResult.ok(consumer_key=consumer_key, timestamp=timestamp, nonce=nonce)


class NonceCache:
    """
    Thread-safe record of recently used nonces for replay prevention.

    Nonces expire after ttl_seconds; when the cache is full the oldest
    entries are evicted first.
    """

    def __init__(
        self,
        ttl_seconds: float = NONCE_TTL_SECONDS,
        max_entries: int = MAX_CACHED_NONCES,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def check_and_record(self, nonce: str) -> bool:
        """
        Check if nonce was used and record it.

        Returns:
            True if nonce was already used (replay attack), False if new
        """
        with self._lock:
            now = self._clock()
            self._cleanup(now)

            if nonce in self._seen:
                return True

            self._seen[nonce] = now
            if len(self._seen) > self.max_entries:
                self._enforce_limit()
            return False

    def _cleanup(self, now: float) -> None:
        """Remove nonces older than TTL."""
        cutoff = now - self.ttl_seconds
        expired = [n for n, ts in self._seen.items() if ts < cutoff]
        for nonce in expired:
            del self._seen[nonce]

    def _enforce_limit(self) -> None:
        """Remove oldest nonces if over limit."""
        oldest = sorted(self._seen.items(), key=lambda x: x[1])
        for nonce, _ in oldest[:len(self._seen) - self.max_entries]:
            del self._seen[nonce]
