"""
Percent-Encoding and Parameter Normalization

Implements the byte-exact encoding rules of RFC 5849 §3.4.1 and §3.6.

Encoding rules:
    - Unreserved characters (A-Z a-z 0-9 - . _ ~) are never encoded
    - Everything else is UTF-8 encoded and written as %XX (uppercase hex)

Normalized parameter string:
    {enc(key)}={enc(value)}&... sorted by encoded key, then encoded value
"""

from typing import Iterable, List, Mapping, Tuple, Union
from urllib.parse import parse_qsl, quote, unquote, urlsplit

from ohhauth.exceptions import InvalidInput


# Ports dropped from the base string URL (RFC 5849 §3.4.1.2)
DEFAULT_PORTS = {"http": 80, "https": 443}

Parameters = Union[Mapping[str, object], Iterable[Tuple[str, object]]]


def percent_encode(value: object) -> str:
    """
    Percent-encode a value using the RFC 3986 unreserved character set.

    Args:
        value: String (or value convertible with str()) to encode

    Returns:
        Encoded ASCII string

    Example:
        >>> percent_encode("Ladies + Gentlemen")
        'Ladies%20%2B%20Gentlemen'
    """
    if value is None:
        raise InvalidInput("Cannot percent-encode None")
    if isinstance(value, bytes):
        raw = value
    else:
        raw = str(value).encode("utf-8")
    return quote(raw, safe="~")


def percent_decode(value: str) -> str:
    """
    Reverse percent_encode().

    Raises:
        InvalidInput: If the escapes do not decode to UTF-8
    """
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise InvalidInput(f"Percent-encoded value is not valid UTF-8: '{value}'") from e


def iter_parameters(parameters: Parameters) -> List[Tuple[str, str]]:
    """
    Flatten a parameter mapping or pair sequence into (key, value) strings.

    Pairs allow the same name to appear more than once, which a plain
    mapping cannot express.

    Raises:
        InvalidInput: If a key is empty or a value is None
    """
    if parameters is None:
        return []
    items = parameters.items() if isinstance(parameters, Mapping) else parameters

    pairs = []
    for key, value in items:
        if key is None or str(key) == "":
            raise InvalidInput("Parameter names must be non-empty")
        if value is None:
            raise InvalidInput(f"Parameter '{key}' has no value")
        pairs.append((str(key), str(value)))
    return pairs


def normalize_parameters(pairs: Iterable[Tuple[str, str]]) -> str:
    """
    Build the normalized parameter string (RFC 5849 §3.4.1.3.2).

    Args:
        pairs: (key, value) pairs, not yet encoded

    Returns:
        Encoded pairs sorted by key then value and joined with '&'
    """
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in pairs)
    return "&".join(f"{k}={v}" for k, v in encoded)


def normalize_base_url(url: str) -> str:
    """
    Normalize a URL for use in the signature base string.

    Lowercases scheme and host, drops default ports, userinfo, query and
    fragment, and turns an empty path into '/'.

    Args:
        url: Absolute http(s) URL

    Returns:
        Base string URI

    Raises:
        InvalidInput: If the URL is empty or not absolute
    """
    if not url or not url.strip():
        raise InvalidInput("Base URL must not be empty")

    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.hostname:
        raise InvalidInput(f"Base URL must be absolute: '{url}'")

    scheme = parts.scheme.lower()
    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"

    try:
        port = parts.port
    except ValueError as e:
        raise InvalidInput(f"Invalid port in base URL: '{url}'") from e

    netloc = host
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{host}:{port}"

    path = parts.path or "/"
    return f"{scheme}://{netloc}{path}"


def split_url(url: str) -> Tuple[str, List[Tuple[str, str]]]:
    """
    Split a URL into its normalized base and its decoded query parameters.

    Returns:
        Tuple of (base_url, query_pairs)
    """
    base_url = normalize_base_url(url)
    query = urlsplit(url.strip()).query
    return base_url, parse_form_body(query)


def parse_form_body(body: Union[str, bytes]) -> List[Tuple[str, str]]:
    """
    Decode an application/x-www-form-urlencoded string into pairs.

    Blank values are kept ('c2' becomes ('c2', '')) and '+' decodes to a
    space, as RFC 5849 §3.4.1.3.1 requires. Escapes must decode to UTF-8;
    anything else would be re-encoded differently from the bytes sent.

    Raises:
        InvalidInput: If the body or one of its escapes is not valid UTF-8
    """
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if not body:
            return []
        return parse_qsl(body, keep_blank_values=True, errors="strict")
    except UnicodeDecodeError as e:
        raise InvalidInput(f"Form-encoded parameters are not valid UTF-8: {e.reason}") from e
