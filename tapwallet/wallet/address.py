"""
P2TR address encoding and decoding

An address binds a network (through its bech32 human-readable part) to a witness version 1 program, the 32-byte
x-only output key. Only OutputXOnlyKey values can be encoded. Internal keys are tweaked first by p2tr_address().
"""
from tapwallet.core import TAPROOT, AddressError, Bech32Error, Network, UnsupportedNetworkError
from tapwallet.cryptography.bech32 import bech32_decode, decode_segwit_address, encode_segwit_address
from tapwallet.cryptography.ecc import EllipticCurve
from tapwallet.cryptography.taproot import InternalXOnlyKey, OutputXOnlyKey, tweak_public_key

__all__ = ["encode_address", "p2tr_address", "decode_address", "decode_taproot_address", "script_pubkey",
           "output_key_from_script_pubkey"]

WITNESS_VERSION = TAPROOT.WITNESS_VERSION
PROGRAM_LENGTH = TAPROOT.PROGRAM_LENGTH


def encode_address(output_key: OutputXOnlyKey, network: Network | str) -> str:
    """
    bech32m(hrp, witness version 1, x-only output key)
    """
    if not isinstance(output_key, OutputXOnlyKey):
        raise TypeError(f"encode_address requires an OutputXOnlyKey, got {type(output_key).__name__}")
    network = Network.from_tag(network)
    return encode_segwit_address(network.hrp, WITNESS_VERSION, output_key.to_bytes())


def p2tr_address(curve: EllipticCurve, internal_key: InternalXOnlyKey, network: Network | str,
                 merkle_root: bytes = None) -> str:
    """
    Tweak the internal key (key path only when merkle_root is None) and encode the output key
    """
    output_key, _ = tweak_public_key(curve, internal_key, merkle_root)
    return encode_address(output_key, network)


def decode_address(address: str) -> tuple[Network, int, bytes]:
    """
    Returns (network, witness version, witness program) for any valid segwit address of a supported network
    """
    hrp, _, _ = bech32_decode(address)
    if hrp is None:
        raise AddressError(f"Not a valid bech32 string: {address!r}")
    try:
        network = Network.from_hrp(hrp)
    except UnsupportedNetworkError as e:
        raise AddressError(str(e)) from e

    try:
        witver, program = decode_segwit_address(network.hrp, address)
    except Bech32Error as e:
        raise AddressError(str(e)) from e
    return network, witver, program


def decode_taproot_address(address: str) -> tuple[Network, OutputXOnlyKey]:
    """
    Decode an address and require a witness version 1, 32-byte program
    """
    network, witver, program = decode_address(address)
    if witver != WITNESS_VERSION or len(program) != PROGRAM_LENGTH:
        raise AddressError(f"Not a taproot address: witness version {witver}, program length {len(program)}")
    return network, OutputXOnlyKey(program)


def script_pubkey(output_key: OutputXOnlyKey) -> bytes:
    """
    OP_1 OP_PUSHBYTES_32 <x-only output key>
    """
    if not isinstance(output_key, OutputXOnlyKey):
        raise TypeError(f"script_pubkey requires an OutputXOnlyKey, got {type(output_key).__name__}")
    return TAPROOT.OP_1 + TAPROOT.PUSH_32 + output_key.to_bytes()


def output_key_from_script_pubkey(spk: bytes) -> OutputXOnlyKey:
    if len(spk) != 2 + PROGRAM_LENGTH or spk[:1] != TAPROOT.OP_1 or spk[1:2] != TAPROOT.PUSH_32:
        raise AddressError("scriptPubKey is not a P2TR output")
    return OutputXOnlyKey(spk[2:])
