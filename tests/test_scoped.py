"""
Tests for the ScopedSecret buffer
"""
import pytest

from tapwallet.core import ScopedSecret, WipedSecretError


def test_reveal_is_read_only():
    secret = ScopedSecret(b'\x01' * 32)
    with secret.reveal() as view:
        assert bytes(view) == b'\x01' * 32
        with pytest.raises(TypeError):
            view[0] = 0
    with pytest.raises(ValueError):
        len(view)  # released


def test_bytearray_source_is_taken_over():
    source = bytearray(range(1, 33))
    secret = ScopedSecret(source)
    assert source == bytearray(32)
    assert secret.to_bytes() == bytes(range(1, 33))


def test_wipe():
    secret = ScopedSecret.from_int(0xdeadbeef)
    assert secret.to_int() == 0xdeadbeef
    assert len(secret) == 32

    secret.wipe()
    secret.wipe()
    assert secret.is_wiped
    assert secret._buffer == bytearray(32)
    for access in (secret.to_int, secret.to_bytes, secret.copy):
        with pytest.raises(WipedSecretError):
            access()
    with pytest.raises(WipedSecretError):
        with secret.reveal():
            pass


def test_context_manager_wipes_on_error():
    with pytest.raises(RuntimeError):
        with ScopedSecret(b'\xff' * 16) as secret:
            raise RuntimeError("boom")
    assert secret.is_wiped


def test_copy_is_independent():
    secret = ScopedSecret(b'\x07' * 32)
    copy = secret.copy()
    secret.wipe()
    assert copy.to_bytes() == b'\x07' * 32


def test_equality_and_repr():
    a, b = ScopedSecret(b'\x02' * 32), ScopedSecret(b'\x02' * 32)
    assert a == b
    assert a != ScopedSecret(b'\x03' * 32)
    assert "02" not in repr(a)
    assert repr(a) == "ScopedSecret(<32 bytes>)"

    a.wipe()
    assert repr(a) == "ScopedSecret(<wiped>)"
    with pytest.raises(WipedSecretError):
        _ = a == b
    with pytest.raises(TypeError):
        hash(b)
