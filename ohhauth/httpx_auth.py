"""
httpx Integration

Signs outgoing httpx requests with OAuth 1.0. The auth only sets the
Authorization header; sending the request is left to the caller's client.

Usage:
    credentials = Credentials("key", "secret", token="tok", token_secret="tok-secret")
    with httpx.Client(auth=OAuth1Auth(credentials)) as client:
        client.get("https://api.example.com/1.1/statuses", params={"count": 5})
"""

import logging
from typing import Callable, Generator, List, Optional, Tuple

import httpx

from ohhauth.credentials import Credentials
from ohhauth.encoding import parse_form_body
from ohhauth.nonce import NonceSource
from ohhauth.signer import SignedRequest, sign

logger = logging.getLogger(__name__)


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _form_parameters(request: httpx.Request) -> List[Tuple[str, str]]:
    """Body parameters, only when the body is a single-part form."""
    content_type = request.headers.get("Content-Type", "")
    if content_type.split(";", 1)[0].strip().lower() != FORM_CONTENT_TYPE:
        return []
    return parse_form_body(request.content)


def sign_httpx_request(
    request: httpx.Request,
    credentials: Credentials,
    *,
    realm: Optional[str] = None,
    nonce_source: Optional[NonceSource] = None,
    clock: Optional[Callable[[], float]] = None,
) -> SignedRequest:
    """
    Sign an httpx.Request in place.

    Query parameters come from the request URL, body parameters from a
    form-encoded body. The Authorization header is replaced.

    Args:
        request: Request with its body already available (not streaming)
        credentials: OAuth credentials
        realm: Optional realm for the header
        nonce_source: Injected nonce source
        clock: Injected clock

    Returns:
        SignedRequest describing the signature that was applied

    Raises:
        InvalidInput: If the request cannot be signed
    """
    signed = sign(
        request.method,
        str(request.url),
        _form_parameters(request),
        credentials,
        nonce_source=nonce_source,
        clock=clock,
        realm=realm,
    )
    request.headers["Authorization"] = signed.authorization_header
    return signed


class OAuth1Auth(httpx.Auth):
    """httpx authentication that signs every request with OAuth 1.0."""

    requires_request_body = True

    def __init__(
        self,
        credentials: Credentials,
        *,
        realm: Optional[str] = None,
        nonce_source: Optional[NonceSource] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        credentials.validate()
        self.credentials = credentials
        self.realm = realm
        self.nonce_source = nonce_source
        self.clock = clock

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        sign_httpx_request(
            request,
            self.credentials,
            realm=self.realm,
            nonce_source=self.nonce_source,
            clock=self.clock,
        )
        yield request
