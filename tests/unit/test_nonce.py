"""
Tests for nonce sources.
"""
import re
import threading

import pytest

from ohhauth.nonce import FixedNonceSource, SeededNonceSource, generate_nonce


HEX = re.compile(r"^[0-9a-f]+$")


class TestGenerateNonce:
    """Test the default cryptographic nonce source."""

    def test_default_length(self):
        nonce = generate_nonce()
        assert len(nonce) == 32
        assert HEX.match(nonce)

    def test_odd_length(self):
        assert len(generate_nonce(13)) == 13

    def test_unique(self):
        assert len({generate_nonce() for _ in range(1000)}) == 1000

    def test_too_short(self):
        with pytest.raises(ValueError):
            generate_nonce(4)


class TestSeededNonceSource:
    """Test the reproducible nonce source."""

    def test_same_seed_same_sequence(self):
        first = SeededNonceSource("seed")
        second = SeededNonceSource("seed")
        assert [first() for _ in range(5)] == [second() for _ in range(5)]

    def test_different_seeds(self):
        assert SeededNonceSource(1)() != SeededNonceSource(2)()

    def test_format(self):
        nonce = SeededNonceSource(1, length=16)()
        assert len(nonce) == 16
        assert HEX.match(nonce)

    def test_shared_between_threads(self):
        """Concurrent callers never receive the same nonce."""
        source = SeededNonceSource(42)
        results = []
        lock = threading.Lock()

        def draw():
            values = [source() for _ in range(200)]
            with lock:
                results.extend(values)

        threads = [threading.Thread(target=draw) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 800
        assert len(set(results)) == 800


class TestFixedNonceSource:

    def test_constant(self):
        source = FixedNonceSource("abc")
        assert source() == source() == "abc"
