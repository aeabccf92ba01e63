"""
Fixtures used in the tests
"""
import pytest

from tapwallet.cryptography import secp256k1


@pytest.fixture(scope="session")
def curve():
    """The shared secp256k1 context. Built once per test session."""
    return secp256k1()
