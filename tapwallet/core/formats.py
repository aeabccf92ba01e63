"""
The Bitcoin standard formats
"""
from enum import Enum
from typing import Final

from .exceptions import UnsupportedNetworkError

__all__ = ["ECC", "WALLET", "XKEYS", "TAPROOT", "BECH32CODE", "Network"]


class ECC:
    COORD_BYTES: Final[int] = 32
    COMPRESSED_BYTES: Final[int] = 33
    SIG_BYTES: Final[int] = 64
    WINDOW_BITS: Final[int] = 4


class WALLET:
    """
    We provide a Mnemonic dictionary which is BIP39 compliant. This forces the Mnemonic to be of a certain size
    depending on the entropy byte length chosen
    """
    MNEMONIC: Final[dict] = {
        16: {"bit_length": 128, "word_count": 12, "checksum_bits": 4},
        20: {"bit_length": 160, "word_count": 15, "checksum_bits": 5},
        24: {"bit_length": 192, "word_count": 18, "checksum_bits": 6},
        28: {"bit_length": 224, "word_count": 21, "checksum_bits": 7},
        32: {"bit_length": 256, "word_count": 24, "checksum_bits": 8},
    }
    DEFAULT_WORD_COUNT: Final[int] = 12
    WORDLIST_SIZE: Final[int] = 2048
    WORD_BITS: Final[int] = 11
    BITLEN_KEY: Final[str] = "bit_length"
    WORD_KEY: Final[str] = "word_count"
    CHECKSUM_KEY: Final[str] = "checksum_bits"
    SALT_PREFIX: Final[str] = "mnemonic"
    SEED_ITERATIONS: Final[int] = 2048
    DKLEN: Final[int] = 64


class XKEYS:
    """
    Constants related to the extended public and private keys
    """
    SEED_KEY: Final[bytes] = b'Bitcoin seed'
    CHAIN_LENGTH: Final[int] = 32
    FINGERPRINT_LENGTH: Final[int] = 4
    SERIAL_LENGTH: Final[int] = 78
    MIN_SEED_BYTES: Final[int] = 16
    MAX_SEED_BYTES: Final[int] = 64
    MAX_DEPTH: Final[int] = 255

    # Hardened derivation threshold
    HARDENED_OFFSET: Final[int] = 0x80000000
    MAX_INDEX: Final[int] = 0xffffffff

    # BIP86 purpose
    TAPROOT_PURPOSE: Final[int] = 86


class TAPROOT:
    """
    Witness program constants for P2TR outputs
    """
    WITNESS_VERSION: Final[int] = 1
    PROGRAM_LENGTH: Final[int] = 32
    MERKLE_ROOT_LENGTH: Final[int] = 32
    OP_1: Final[bytes] = b'\x51'
    PUSH_32: Final[bytes] = b'\x20'
    DEFAULT_SIGHASH: Final[int] = 0x00
    SIGHASH_TYPES: Final[tuple] = (0x01, 0x02, 0x03, 0x81, 0x82, 0x83)


class BECH32CODE:
    BECH32: Final[int] = 1
    BECH32M: Final[int] = 2
    BECH32M_CONST: Final[int] = 0x2bc830a3
    MAX_LENGTH: Final[int] = 90


class Network(Enum):
    """
    The networks a wallet can derive for. Each member carries its bech32 HRP, its BIP44 coin type and its BIP32
    serialization version bytes.
    """
    MAINNET = ("bc", 0, "0488ade4", "0488b21e")
    TESTNET = ("tb", 1, "04358394", "043587cf")

    def __init__(self, hrp: str, coin_type: int, xprv: str, xpub: str):
        self.hrp = hrp
        self.coin_type = coin_type
        self.xprv_version = bytes.fromhex(xprv)
        self.xpub_version = bytes.fromhex(xpub)

    @classmethod
    def from_tag(cls, tag: "str | Network") -> "Network":
        """
        Accepts a Network, a member name or an HRP (case-insensitive)
        """
        if isinstance(tag, Network):
            return tag
        if isinstance(tag, str):
            lowered = tag.strip().lower()
            for network in cls:
                if lowered in (network.name.lower(), network.hrp):
                    return network
        raise UnsupportedNetworkError(f"Unrecognized network tag: {tag!r}")

    @classmethod
    def from_hrp(cls, hrp: str) -> "Network":
        for network in cls:
            if network.hrp == hrp.lower():
                return network
        raise UnsupportedNetworkError(f"No network uses human-readable part {hrp!r}")

    @classmethod
    def from_version(cls, version: bytes) -> "Network":
        for network in cls:
            if version in (network.xprv_version, network.xpub_version):
                return network
        raise UnsupportedNetworkError(f"Unrecognized extended key version bytes: {version.hex()}")
