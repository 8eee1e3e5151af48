"""
Nonce Sources

A nonce source is any zero-argument callable returning a string. The signer
takes one as a dependency so tests can pin the nonce and assert exact output.
"""

import random
import secrets
import threading
from typing import Callable

NonceSource = Callable[[], str]

# 32 hex characters = 16 random bytes
DEFAULT_NONCE_LENGTH = 32


def generate_nonce(length: int = DEFAULT_NONCE_LENGTH) -> str:
    """
    Generate a cryptographically random hex nonce.

    Args:
        length: Number of hex characters (rounded up to an even count)

    Returns:
        Random hex string
    """
    if length < 8:
        raise ValueError(f"Nonce length too short: {length} (minimum 8)")
    return secrets.token_hex((length + 1) // 2)[:length]


class SeededNonceSource:
    """
    Reproducible nonce source backed by random.Random.

    Not suitable for production traffic. Intended for tests and for replaying
    a recorded signing session.
    """

    def __init__(self, seed, length: int = DEFAULT_NONCE_LENGTH):
        self._random = random.Random(seed)
        self._length = length
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            bits = self._random.getrandbits(self._length * 4)
        return f"{bits:0{self._length}x}"


class FixedNonceSource:
    """Always returns the same nonce."""

    def __init__(self, value: str):
        self.value = value

    def __call__(self) -> str:
        return self.value
