"""
Credentials

Client (consumer) and token credentials plus the signature method used to
sign with them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from cryptography.hazmat.primitives import hashes

from ohhauth.exceptions import InvalidInput

if TYPE_CHECKING:
    from ohhauth.config import Settings


class SignatureMethod(str, Enum):
    """Supported values of oauth_signature_method."""
    HMAC_SHA1 = "HMAC-SHA1"
    HMAC_SHA256 = "HMAC-SHA256"

    @classmethod
    def parse(cls, value) -> "SignatureMethod":
        """
        Parse a signature method name (case-insensitive).

        Raises:
            InvalidInput: If the method is not supported
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        for method in cls:
            if method.value == normalized:
                return method
        raise InvalidInput(
            f"Unsupported signature method '{value}' "
            f"(expected one of: {', '.join(m.value for m in cls)})"
        )

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Hash used by the HMAC for this method."""
        if self is SignatureMethod.HMAC_SHA256:
            return hashes.SHA256()
        return hashes.SHA1()


@dataclass(frozen=True)
class Credentials:
    """
    OAuth 1.0 credentials for a single signed request.

    Attributes:
        consumer_key: Client identifier (required)
        consumer_secret: Client shared secret (required)
        token: Access or request token (absent for two-legged flows)
        token_secret: Secret belonging to the token
        signature_method: HMAC-SHA1 (default) or HMAC-SHA256
    """
    consumer_key: str
    consumer_secret: str
    token: Optional[str] = None
    token_secret: Optional[str] = None
    signature_method: SignatureMethod = SignatureMethod.HMAC_SHA1

    def __post_init__(self):
        # Accept plain strings like "HMAC-SHA256"
        object.__setattr__(self, "signature_method", SignatureMethod.parse(self.signature_method))

    def __repr__(self) -> str:
        return (
            f"Credentials(consumer_key={self.consumer_key!r}, token={self.token!r}, "
            f"signature_method={self.signature_method.value!r})"
        )

    def validate(self) -> None:
        """
        Check that the client credentials are usable for signing.

        Raises:
            InvalidInput: If the consumer key or secret is missing
        """
        missing = []
        if not self.consumer_key:
            missing.append("consumer_key")
        if not self.consumer_secret:
            missing.append("consumer_secret")
        if missing:
            raise InvalidInput(f"Missing required credentials: {', '.join(missing)}")

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_settings(cls, settings: Optional["Settings"] = None) -> "Credentials":
        """
        Build credentials from OHHAUTH_* environment settings.

        Args:
            settings: Settings instance (defaults to get_settings())

        Raises:
            InvalidInput: If the consumer key or secret is not configured
        """
        from ohhauth.config import get_settings

        settings = settings or get_settings()
        credentials = cls(
            consumer_key=settings.consumer_key or "",
            consumer_secret=settings.consumer_secret or "",
            token=settings.token or None,
            token_secret=settings.token_secret or None,
            signature_method=settings.signature_method,
        )
        credentials.validate()
        return credentials
