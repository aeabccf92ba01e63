"""
Tests for bech32 and bech32m segwit address encoding
"""
from secrets import token_bytes

import pytest

from tapwallet.core import Bech32Error
from tapwallet.cryptography import Encoding, bech32_decode, bech32_encode, convertbits, decode_segwit_address, \
    encode_segwit_address

# (address, hrp, witness version, program)
VALID_ADDRESSES = [
    ("BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4", "bc", 0, "751e76e8199196d454941c45d1b3a323f1433bd6"),
    ("tb1qrp33g0q5c5txsp9arysrx4k6zdkfs4nce4xj0gdcccefvpysxf3q0sl5k7", "tb", 0,
     "1863143c14c5166804bd19203356da136c985678cd4d27a1b8c6329604903262"),
    ("bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0", "bc", 1,
     "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"),
]

INVALID_ADDRESSES = [
    # Version 1 with a bech32 checksum
    ("bc", "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqh2y7hd"),
    # Version 0 with a bech32m checksum
    ("bc", "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kemeawh"),
    # Mixed case
    ("bc", "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqZK5JJ0"),
    # Wrong human-readable part
    ("tb", "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0"),
]


@pytest.mark.parametrize("address, hrp, witver, program", VALID_ADDRESSES)
def test_known_addresses(address, hrp, witver, program):
    assert decode_segwit_address(hrp, address) == (witver, bytes.fromhex(program))
    assert encode_segwit_address(hrp, witver, bytes.fromhex(program)) == address.lower()


@pytest.mark.parametrize("hrp, address", INVALID_ADDRESSES)
def test_invalid_addresses(hrp, address):
    with pytest.raises(Bech32Error):
        decode_segwit_address(hrp, address)


def test_bech32_decode_returns_none_for_bad_checksum():
    good = "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0"
    bad = good[:-1] + ("q" if good[-1] != "q" else "p")
    assert bech32_decode(bad) == (None, None, None)
    assert bech32_decode("1" + good) == (None, None, None)

    hrp, data, spec = bech32_decode(good)
    assert hrp == "bc" and spec is Encoding.BECH32M
    assert bech32_encode(hrp, data, spec) == good


def test_program_length_rules():
    with pytest.raises(Bech32Error):
        encode_segwit_address("bc", 0, token_bytes(25))
    with pytest.raises(Bech32Error):
        encode_segwit_address("bc", 1, token_bytes(41))
    with pytest.raises(Bech32Error):
        encode_segwit_address("bc", 17, token_bytes(32))


def test_convertbits():
    data = list(token_bytes(32))
    five_bit = convertbits(data, 8, 5)
    assert all(0 <= v < 32 for v in five_bit)
    assert convertbits(five_bit, 5, 8, False) == data
    assert convertbits([256], 8, 5) is None
