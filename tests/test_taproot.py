"""
Tests for the Taproot key types and the TapTweak, using the BIP86 reference vectors
"""
from secrets import token_bytes

import pytest

from tapwallet.core import InvalidSecretKeyError, InvalidTweakError, ScopedSecret
from tapwallet.cryptography import InternalKeyPair, InternalXOnlyKey, OutputXOnlyKey, TweakedKeyPair, \
    internal_from_secret, tweak, tweak_public_key

# m/86'/0'/0'/0/0 of "abandon ... about". The leaf public key has odd y.
LEAF_SECRET = "41f41d69260df4cf277826a9b65a3717e4eeddbeedf637f212ca096576479361"
INTERNAL_KEY = "cc8a4bc64d897bddc5fbc2f670f7a8ba0b386779106cf1223c6fc5d7cd6fc115"
OUTPUT_KEY = "a60869f0dbcf1dc659c9cecbaf8050135ea9e8cdc487053f1dc6880949dc684c"

# BIP86 internal -> output key pairs for m/86'/0'/0'/0/1 and m/86'/0'/0'/1/0
KNOWN_TWEAKS = [
    (INTERNAL_KEY, OUTPUT_KEY),
    ("83dfe85a3151d2517290da461fe2815591ef69f2b18a2ce63f01697a8b313145",
     "a82f29944d65b86ae6b5e5cc75e294ead6c59391a1edc5e016e3498c67fc7bbb"),
    ("399f1b2f4393f29a18c937859c5dd8a77350103157eb880f02e8c08214277cef",
     "882d74e5d0572d5a816cef0041a96b6c1de832f6f9676d9605c44d5e9a97d3dc"),
]


def test_internal_from_secret_normalizes_parity(curve):
    secret = int(LEAF_SECRET, 16)
    assert not curve.multiply_generator(secret).has_even_y

    keypair, internal_key = internal_from_secret(curve, bytes.fromhex(LEAF_SECRET))
    assert isinstance(keypair, InternalKeyPair) and isinstance(internal_key, InternalXOnlyKey)
    assert internal_key.hex() == INTERNAL_KEY
    assert keypair.public_point.has_even_y
    assert keypair.x_only() == internal_key

    # Same key from every accepted secret form
    assert internal_from_secret(curve, secret)[1] == internal_key
    source = ScopedSecret(bytes.fromhex(LEAF_SECRET))
    assert internal_from_secret(curve, source)[1] == internal_key
    assert not source.is_wiped


@pytest.mark.parametrize("internal_hex, output_hex", KNOWN_TWEAKS)
def test_tweak_public_key(curve, internal_hex, output_hex):
    output_key, parity = tweak_public_key(curve, InternalXOnlyKey(bytes.fromhex(internal_hex)))
    assert isinstance(output_key, OutputXOnlyKey)
    assert output_key.hex() == output_hex
    assert parity in (0, 1)


def test_tweak_keypair(curve):
    keypair, internal_key = internal_from_secret(curve, bytes.fromhex(LEAF_SECRET))
    tweaked = tweak(curve, keypair)
    assert isinstance(tweaked, TweakedKeyPair)
    assert tweaked.x_only().hex() == OUTPUT_KEY
    assert tweaked.output_parity == 1

    # Secret and public halves of the tweak agree
    output_key, parity = tweak_public_key(curve, internal_key)
    assert tweaked.x_only() == output_key and tweaked.output_parity == parity

    msg = token_bytes(32)
    sig = tweaked.sign(curve, msg)
    assert tweaked.verify(curve, msg, sig)
    assert not keypair.verify(curve, msg, sig), "Output key signature must not verify under the internal key"


def test_tweak_with_merkle_root(curve):
    keypair, internal_key = internal_from_secret(curve, token_bytes(32))
    merkle_root = token_bytes(32)
    tweaked = tweak(curve, keypair, merkle_root)
    assert tweaked.x_only() == tweak_public_key(curve, internal_key, merkle_root)[0]
    assert tweaked.x_only() != tweak(curve, keypair).x_only()

    with pytest.raises(ValueError):
        tweak(curve, keypair, token_bytes(31))


def test_tweaked_keys_cannot_be_tweaked_again(curve):
    keypair, _ = internal_from_secret(curve, token_bytes(32))
    tweaked = tweak(curve, keypair)

    with pytest.raises(TypeError):
        tweak(curve, tweaked)
    with pytest.raises(TypeError):
        tweak_public_key(curve, tweaked.x_only())
    with pytest.raises(TypeError):
        tweak_public_key(curve, tweaked)


def test_double_tweak_changes_the_key(curve):
    """
    Explicitly relabelling an output key as internal and tweaking it again yields a different, valid key
    """
    output_key, _ = tweak_public_key(curve, InternalXOnlyKey(bytes.fromhex(INTERNAL_KEY)))
    double_tweaked, _ = tweak_public_key(curve, InternalXOnlyKey(output_key.to_bytes()))
    assert double_tweaked.hex() != OUTPUT_KEY
    assert curve.is_x_on_curve(double_tweaked.x)


def test_key_types_are_distinct():
    raw = token_bytes(32)
    internal_key, output_key = InternalXOnlyKey(raw), OutputXOnlyKey(raw)
    assert internal_key != output_key
    assert internal_key.to_bytes() == output_key.to_bytes()
    assert not isinstance(output_key, InternalXOnlyKey)
    assert not issubclass(TweakedKeyPair, InternalKeyPair) and not issubclass(InternalKeyPair, TweakedKeyPair)

    with pytest.raises(AttributeError):
        internal_key._x = bytes(32)
    with pytest.raises(ValueError):
        InternalXOnlyKey(token_bytes(33))


def test_invalid_secrets(curve):
    with pytest.raises(InvalidSecretKeyError):
        internal_from_secret(curve, bytes(32))
    with pytest.raises(InvalidSecretKeyError):
        internal_from_secret(curve, curve.order)
    with pytest.raises(InvalidSecretKeyError):
        internal_from_secret(curve, token_bytes(31))


def test_keypair_wipe(curve):
    with internal_from_secret(curve, token_bytes(32))[0] as keypair:
        assert not keypair.is_wiped
    assert keypair.is_wiped


def test_tweak_not_below_order_is_rejected(curve, monkeypatch):
    """
    A TapTweak hash >= n has no valid output key. Both the public and the key pair tweak refuse it.
    """
    import tapwallet.cryptography.taproot as taproot_module
    monkeypatch.setattr(taproot_module, "taptweak_hash", lambda data: b'\xff' * 32)

    keypair, internal_key = internal_from_secret(curve, bytes.fromhex(LEAF_SECRET))
    with pytest.raises(InvalidTweakError):
        tweak_public_key(curve, internal_key)
    with pytest.raises(InvalidTweakError):
        tweak(curve, keypair, token_bytes(32))
