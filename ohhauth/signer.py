"""
OAuth 1.0 Request Signing

Computes HMAC-SHA1 / HMAC-SHA256 request signatures and the matching
Authorization header value (RFC 5849 §3.4 and §3.5.1).

Signature Base String Format:
    {METHOD}&{enc(base_url)}&{enc(normalized_parameters)}

Signing Key Format:
    {enc(consumer_secret)}&{enc(token_secret or "")}

Signing is a pure function of its inputs plus the nonce and timestamp. Both
can be passed explicitly or produced by injected sources, which makes the
output fully deterministic in tests.
"""

import base64
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from cryptography.hazmat.primitives import hmac

from ohhauth.credentials import Credentials, SignatureMethod
from ohhauth.encoding import (
    Parameters,
    iter_parameters,
    normalize_parameters,
    percent_encode,
    split_url,
)
from ohhauth.exceptions import InvalidInput
from ohhauth.nonce import NonceSource, generate_nonce

logger = logging.getLogger(__name__)


OAUTH_VERSION = "1.0"

# Protocol parameters the signer generates itself
GENERATED_PARAMETERS = frozenset([
    "oauth_consumer_key",
    "oauth_nonce",
    "oauth_signature_method",
    "oauth_timestamp",
    "oauth_token",
    "oauth_version",
])

SIGNATURE_PARAMETER = "oauth_signature"


@dataclass(frozen=True)
class SignedRequest:
    """
    Result of signing a request.

    Attributes:
        signature_base_string: The exact string the HMAC was computed over
        authorization_header: Value for the HTTP Authorization header
        signature: Base64-encoded signature
        oauth_params: Protocol parameters placed in the header (incl. signature)
    """
    signature_base_string: str
    authorization_header: str
    signature: str
    oauth_params: Dict[str, str] = field(default_factory=dict)

    def __iter__(self):
        # base_string, header = sign(...)
        return iter((self.signature_base_string, self.authorization_header))

    @property
    def headers(self) -> Dict[str, str]:
        """Headers to attach to the outgoing request."""
        return {"Authorization": self.authorization_header}


def create_signature_base_string(
    method: str,
    base_url: str,
    parameters: Parameters,
) -> str:
    """
    Create the signature base string (RFC 5849 §3.4.1).

    Args:
        method: HTTP method (normalized to uppercase)
        base_url: Absolute URL; any query parameters are folded into the set
        parameters: All request and protocol parameters (without oauth_signature)

    Returns:
        Signature base string

    Raises:
        InvalidInput: If method or URL is empty or the URL is not absolute

    Example:
        >>> create_signature_base_string("get", "HTTP://Example.com:80/a", {"b": "c d"})
        'GET&http%3A%2F%2Fexample.com%2Fa&b%3Dc%2520d'
    """
    if not method or not method.strip():
        raise InvalidInput("HTTP method must not be empty")

    normalized_url, query_pairs = split_url(base_url)
    pairs = query_pairs + iter_parameters(parameters)
    parameter_string = normalize_parameters(pairs)

    return "&".join([
        percent_encode(method.strip().upper()),
        percent_encode(normalized_url),
        percent_encode(parameter_string),
    ])


def build_signing_key(consumer_secret: str, token_secret: Optional[str] = None) -> bytes:
    """Build the HMAC key from the client and token secrets."""
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"
    return key.encode("ascii")


def compute_signature(
    base_string: str,
    consumer_secret: str,
    token_secret: Optional[str] = None,
    signature_method: Union[SignatureMethod, str] = SignatureMethod.HMAC_SHA1,
) -> str:
    """
    Compute the base64-encoded HMAC over a signature base string.

    Args:
        base_string: Output of create_signature_base_string()
        consumer_secret: Client shared secret
        token_secret: Token shared secret (empty for two-legged flows)
        signature_method: HMAC-SHA1 or HMAC-SHA256

    Returns:
        Base64-encoded signature
    """
    method = SignatureMethod.parse(signature_method)
    mac = hmac.HMAC(build_signing_key(consumer_secret, token_secret), method.hash_algorithm())
    mac.update(base_string.encode("ascii"))
    return base64.b64encode(mac.finalize()).decode("ascii")


def build_authorization_header(oauth_params: Dict[str, str], realm: Optional[str] = None) -> str:
    """
    Compose the Authorization header value (RFC 5849 §3.5.1).

    Only oauth_* parameters are included. The realm, if given, comes first
    and is not percent-encoded beyond quoting.

    Example:
        >>> build_authorization_header({"oauth_nonce": "a b", "x": "1"})
        'OAuth oauth_nonce="a%20b"'
    """
    entries: List[str] = []
    if realm is not None:
        escaped_realm = realm.replace("\\", "\\\\").replace('"', '\\"')
        entries.append(f'realm="{escaped_realm}"')

    for key, value in sorted(oauth_params.items()):
        if not key.startswith("oauth_"):
            continue
        entries.append(f'{percent_encode(key)}="{percent_encode(value)}"')

    return "OAuth " + ", ".join(entries)


def _check_reserved(pairs: Iterable[Tuple[str, str]]) -> None:
    for key, _ in pairs:
        if key == SIGNATURE_PARAMETER:
            raise InvalidInput("Parameters must not include 'oauth_signature'")
        if key in GENERATED_PARAMETERS:
            raise InvalidInput(f"Parameter '{key}' is generated by the signer and must not be supplied")


def sign(
    method: str,
    base_url: str,
    parameters: Optional[Parameters],
    credentials: Credentials,
    *,
    nonce: Optional[str] = None,
    timestamp: Optional[Union[int, str]] = None,
    nonce_source: Optional[NonceSource] = None,
    clock: Optional[Callable[[], float]] = None,
    realm: Optional[str] = None,
) -> SignedRequest:
    """
    Sign a request and build its Authorization header.

    Performs the following steps:
    1. Validate method, URL, credentials and parameter names
    2. Generate nonce and timestamp unless supplied
    3. Merge protocol parameters into the request parameters
    4. Build the signature base string
    5. HMAC it with the signing key and base64-encode the digest
    6. Compose the Authorization header

    Args:
        method: HTTP method
        base_url: Absolute request URL. Query parameters on it are signed too.
        parameters: Request parameters (mapping or (key, value) pairs).
            Extra protocol parameters such as oauth_callback or
            oauth_verifier may be passed here and end up in the header.
        credentials: Client and token credentials
        nonce: Fixed nonce (skips nonce_source)
        timestamp: Fixed timestamp in seconds (skips clock)
        nonce_source: Callable producing a nonce (default: generate_nonce)
        clock: Callable returning seconds since epoch (default: time.time)
        realm: Optional realm for the header (not signed)

    Returns:
        SignedRequest with base string, header value and signature

    Raises:
        InvalidInput: On empty method/URL, missing consumer credentials or
            reserved parameter names

    Example:
        >>> signed = sign("GET", "https://api.example.com/items", {"page": "2"}, creds)
        >>> headers = {"Authorization": signed.authorization_header}
    """
    if not method or not method.strip():
        raise InvalidInput("HTTP method must not be empty")
    if not base_url or not base_url.strip():
        raise InvalidInput("Base URL must not be empty")
    if credentials is None:
        raise InvalidInput("Credentials are required")
    credentials.validate()

    request_pairs = iter_parameters(parameters)
    _check_reserved(request_pairs)
    _, query_pairs = split_url(base_url)
    _check_reserved(query_pairs)

    if nonce is None:
        nonce = (nonce_source or generate_nonce)()
    if not nonce:
        raise InvalidInput("Nonce must not be empty")
    if timestamp is None:
        timestamp = int((clock or time.time)())

    protocol_params = {
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce,
        "oauth_signature_method": credentials.signature_method.value,
        "oauth_timestamp": str(timestamp),
        "oauth_version": OAUTH_VERSION,
    }
    if credentials.has_token:
        protocol_params["oauth_token"] = credentials.token

    base_string = create_signature_base_string(
        method,
        base_url,
        request_pairs + list(protocol_params.items()),
    )
    signature = compute_signature(
        base_string,
        credentials.consumer_secret,
        credentials.token_secret,
        credentials.signature_method,
    )

    header_params = dict(protocol_params)
    for key, value in request_pairs:
        if key.startswith("oauth_"):
            header_params[key] = value
    header_params[SIGNATURE_PARAMETER] = signature

    logger.debug(
        f"Signed request: method={method.strip().upper()}, url={base_url}, "
        f"signature_method={credentials.signature_method.value}, params={len(request_pairs)}"
    )

    return SignedRequest(
        signature_base_string=base_string,
        authorization_header=build_authorization_header(header_params, realm=realm),
        signature=signature,
        oauth_params=header_params,
    )
