"""
Base58 and Base58Check encoding, used for BIP32 extended key serialization
"""
import re

from tapwallet.core import Base58Error
from tapwallet.cryptography.hash_functions import hash256

__all__ = ["encode_base58", "decode_base58", "encode_base58check", "decode_base58check"]

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
CHECKSUM_BYTES = 4


def encode_base58(data: bytes) -> str:
    """
    We return the base58 encoding of the given bytes data
    """
    base = len(BASE58_ALPHABET)
    n = int.from_bytes(data, byteorder="big")
    encoded_string = ""

    while n > 0:
        n, temp_index = divmod(n, base)
        encoded_string = BASE58_ALPHABET[temp_index] + encoded_string

    # Each leading zero byte becomes a leading "1"
    leading_zeros = len(data) - len(bytes(data).lstrip(b'\x00'))
    return ("1" * leading_zeros) + encoded_string


def decode_base58(data: str) -> bytes:
    """
    Given a base58 encoded string, return the underlying bytes.
    """
    total = 0
    for char in data:
        char_i = BASE58_ALPHABET.find(char)
        if char_i < 0:
            raise Base58Error(f"Invalid base58 character: {char!r}")
        total = total * 58 + char_i

    decoded_bytes = total.to_bytes((total.bit_length() + 7) // 8, "big")

    # Each leading '1' represents a leading zero byte
    leading_zeros = len(re.match(r"^1*", data).group(0))
    return (b'\x00' * leading_zeros) + decoded_bytes


def encode_base58check(data: bytes) -> str:
    """
    Given bytes data, we return the base58 encoding along with checksum
    """
    checksum = hash256(data)[:CHECKSUM_BYTES]
    return encode_base58(bytes(data) + checksum)


def decode_base58check(data: str) -> bytes:
    """
    Decode a Base58Check string and return the payload without its checksum. Raises Base58Error if the checksum fails.
    """
    decoded_bytecheck = decode_base58(data)
    if len(decoded_bytecheck) < CHECKSUM_BYTES:
        raise Base58Error("Base58Check string too short to hold a checksum")
    d_bytes, d_checksum = decoded_bytecheck[:-CHECKSUM_BYTES], decoded_bytecheck[-CHECKSUM_BYTES:]
    if hash256(d_bytes)[:CHECKSUM_BYTES] != d_checksum:
        raise Base58Error("Decoded checksum does not equal given checksum")
    return d_bytes
