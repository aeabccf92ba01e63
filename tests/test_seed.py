"""
Tests for the BIP39 seed deriver
"""
import pytest

from tapwallet.core import NormalizationError, ScopedSecret
from tapwallet.wallet import derive_seed

ABANDON_PHRASE = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
ABANDON_SEED = "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc19a5ac40b389cd370d086206dec8aa6c43daea66" \
               "90f20ad3d8d48b2d2ce9e38e4"
TREZOR_SEED = "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e53495531f09a6987599d18264c1e1c92f2cf141630c7a3c" \
              "4ab7c81b2f001698e7463b04"


def test_known_seeds():
    seed = derive_seed(ABANDON_PHRASE)
    assert isinstance(seed, ScopedSecret)
    assert len(seed) == 64
    assert seed.to_bytes() == bytes.fromhex(ABANDON_SEED)
    assert derive_seed(ABANDON_PHRASE, "TREZOR").to_bytes() == bytes.fromhex(TREZOR_SEED)


def test_input_forms_agree():
    from_str = derive_seed(ABANDON_PHRASE, "TREZOR")
    assert derive_seed(ABANDON_PHRASE.split(), "TREZOR") == from_str
    assert derive_seed(ABANDON_PHRASE.encode("utf-8"), b"TREZOR") == from_str
    assert derive_seed("  " + ABANDON_PHRASE.replace(" ", "   ") + "\n", "TREZOR") == from_str


def test_passphrase_is_nfkd_normalized():
    composed = derive_seed(ABANDON_PHRASE, "caf\u00e9")
    decomposed = derive_seed(ABANDON_PHRASE, "cafe\u0301")
    assert composed == decomposed
    assert composed != derive_seed(ABANDON_PHRASE, "cafe")


def test_malformed_input():
    with pytest.raises(NormalizationError):
        derive_seed(b"abandon \xff about")
    with pytest.raises(NormalizationError):
        derive_seed(ABANDON_PHRASE, b"\xc3")
    with pytest.raises(NormalizationError):
        derive_seed(ABANDON_PHRASE, "\ud800")


def test_seed_wipes_on_scope_exit():
    with derive_seed(ABANDON_PHRASE) as seed:
        assert seed.to_bytes() == bytes.fromhex(ABANDON_SEED)
    assert seed.is_wiped
