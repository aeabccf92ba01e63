"""
Bech32 and Bech32m encoding for segregated witness addresses (BIP173, BIP350)

The low-level functions follow the reference implementation and return None on invalid input. The segwit address
functions raise Bech32Error with the reason.
"""
from enum import Enum

from tapwallet.core import BECH32CODE, Bech32Error

__all__ = ["Encoding", "bech32_polymod", "bech32_hrp_expand", "bech32_create_checksum", "bech32_verify_checksum",
           "bech32_encode", "bech32_decode", "convertbits", "encode_segwit_address", "decode_segwit_address"]

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
GENERATORS = (0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3)
CHECKSUM_LENGTH = 6


class Encoding(Enum):
    """Enumeration type to list the various supported encodings."""
    BECH32 = BECH32CODE.BECH32
    BECH32M = BECH32CODE.BECH32M

    @property
    def const(self) -> int:
        return 1 if self is Encoding.BECH32 else BECH32CODE.BECH32M_CONST


def bech32_polymod(values) -> int:
    """Internal function that computes the Bech32 checksum."""
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1ffffff) << 5 ^ value
        for i, generator in enumerate(GENERATORS):
            chk ^= generator if ((top >> i) & 1) else 0
    return chk


def bech32_hrp_expand(hrp: str) -> list[int]:
    """Expand the HRP into values for checksum computation."""
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def bech32_verify_checksum(hrp: str, data: list[int]) -> Encoding | None:
    """Returns the encoding whose constant the checksum matches, if any"""
    const = bech32_polymod(bech32_hrp_expand(hrp) + data)
    for encoding in Encoding:
        if const == encoding.const:
            return encoding
    return None


def bech32_create_checksum(hrp: str, data: list[int], spec: Encoding) -> list[int]:
    """Compute the checksum values given HRP and data."""
    values = bech32_hrp_expand(hrp) + data
    polymod = bech32_polymod(values + [0] * CHECKSUM_LENGTH) ^ spec.const
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def bech32_encode(hrp: str, data: list[int], spec: Encoding) -> str:
    """Compute a Bech32 string given HRP and data values."""
    combined = data + bech32_create_checksum(hrp, data, spec)
    return hrp + '1' + ''.join(CHARSET[d] for d in combined)


def bech32_decode(bech: str) -> tuple[str | None, list[int] | None, Encoding | None]:
    """Validate a Bech32/Bech32m string, and determine HRP and data."""
    if any(ord(x) < 33 or ord(x) > 126 for x in bech) or (bech.lower() != bech and bech.upper() != bech):
        return None, None, None
    bech = bech.lower()
    pos = bech.rfind('1')
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(bech) or len(bech) > BECH32CODE.MAX_LENGTH:
        return None, None, None
    if not all(x in CHARSET for x in bech[pos + 1:]):
        return None, None, None
    hrp = bech[:pos]
    data = [CHARSET.find(x) for x in bech[pos + 1:]]
    spec = bech32_verify_checksum(hrp, data)
    if spec is None:
        return None, None, None
    return hrp, data[:-CHECKSUM_LENGTH], spec


def convertbits(data, frombits: int, tobits: int, pad: bool = True) -> list[int] | None:
    """General power-of-2 base conversion."""
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1
    for value in data:
        if value < 0 or (value >> frombits):
            return None
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        return None
    return ret


def decode_segwit_address(hrp: str, address: str) -> tuple[int, bytes]:
    """
    Decode a segwit address into (witness version, witness program)
    """
    hrpgot, data, spec = bech32_decode(address)
    if hrpgot is None:
        raise Bech32Error(f"Invalid bech32 string: {address!r}")
    if hrpgot != hrp:
        raise Bech32Error(f"Human-readable part {hrpgot!r} does not match expected {hrp!r}")
    if not data:
        raise Bech32Error("Address has an empty data part")

    witver = data[0]
    decoded = convertbits(data[1:], 5, 8, False)
    if decoded is None or len(decoded) < 2 or len(decoded) > 40:
        raise Bech32Error("Witness program must be between 2 and 40 bytes")
    if witver > 16:
        raise Bech32Error(f"Invalid witness version {witver}")
    if witver == 0 and len(decoded) not in (20, 32):
        raise Bech32Error("Version 0 witness program must be 20 or 32 bytes")
    if (witver == 0 and spec != Encoding.BECH32) or (witver != 0 and spec != Encoding.BECH32M):
        raise Bech32Error(f"Witness version {witver} address uses the wrong checksum variant ({spec.name})")
    return witver, bytes(decoded)


def encode_segwit_address(hrp: str, witver: int, witprog: bytes) -> str:
    """
    Encode a segwit address. Version 0 uses bech32, versions 1 through 16 use bech32m.
    """
    if not 0 <= witver <= 16:
        raise Bech32Error(f"Invalid witness version {witver}")
    spec = Encoding.BECH32 if witver == 0 else Encoding.BECH32M
    address = bech32_encode(hrp, [witver] + convertbits(witprog, 8, 5), spec)

    # Round trip to apply the program length rules
    decode_segwit_address(hrp, address)
    return address
