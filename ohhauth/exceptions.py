"""
Error Types

Signing fails loudly: a malformed request would otherwise be rejected by the
remote server with no useful diagnostic.
"""


class InvalidInput(ValueError):
    """
    Raised when a request cannot be signed as given.

    Covers an empty method or URL, a relative URL, missing consumer
    credentials, reserved parameter names and unsupported signature methods.
    Messages name the offending field but never include secret values.
    """
