"""
Methods for creating a Schnorr signature and verifying

Every function takes the curve context explicitly. Messages are the 32-byte digests produced by the caller.
"""
from tapwallet.core import ECC, TAPROOT, SchnorrError
from tapwallet.cryptography.ecc import EllipticCurve, Point
from tapwallet.cryptography.hash_functions import schnorr_aux_hash, schnorr_challenge_hash, schnorr_nonce_hash

#  --- CONSTANTS
BYTE_LEN = ECC.COORD_BYTES
SIG_LEN = ECC.SIG_BYTES

__all__ = ["schnorr_sig", "schnorr_verify", "parse_schnorr_signature"]


def schnorr_sig(curve: EllipticCurve, priv_key: int, msg: bytes, aux_bytes: bytes = None) -> bytes:
    """
    Produces a BIP-340 Schnorr signature for the given message and private key.

    Parameters
    ----------
    curve : EllipticCurve
        The shared curve context.
    priv_key : int
        The signer's secret scalar in [1, n).
    msg : bytes
        The 32-byte message digest.
    aux_bytes : bytes
        Optional 32-byte auxiliary randomness. Defaults to 32 zero bytes, which makes the signature reproducible.

    Returns
    -------
        64-byte signature (r || s)

    Algorithm (BIP-340)
    -------------------
    1) P = d·G. If y(P) is odd, set d' = n − d; else d' = d.
    2) t = bytes32(d') XOR tagged_hash("BIP0340/aux", aux_rand)
       k0 = int(tagged_hash("BIP0340/nonce", t || bytes32(x(P)) || msg)) mod n. Abort if k0 == 0.
    3) R = k0·G. If y(R) is odd, set k = n − k0; else k = k0.
    4) e = int(tagged_hash("BIP0340/challenge", bytes32(x(R)) || bytes32(x(P)) || msg)) mod n.
    5) Signature = bytes32(x(R)) || bytes32((k + e·d') mod n)
    """
    n = curve.order
    aux_bytes = b'\x00' * BYTE_LEN if aux_bytes is None else aux_bytes

    # --- Input validation -- #
    if not (1 <= priv_key < n):
        raise SchnorrError(f"Private key must be in range [1, {n})")
    if len(msg) != BYTE_LEN:
        raise SchnorrError(f"Message to sign must be exactly {BYTE_LEN} bytes")
    if len(aux_bytes) != BYTE_LEN:
        raise SchnorrError(f"Auxiliary bytes must be exactly {BYTE_LEN} bytes")

    # 1. Public key with even y-coordinate
    schnorr_point = curve.multiply_generator(priv_key)
    if not schnorr_point.has_even_y:
        priv_key = n - priv_key
    schnorr_xbytes = schnorr_point.x.to_bytes(BYTE_LEN, "big")

    # 2. Deterministic nonce
    aux_rand_hash = schnorr_aux_hash(aux_bytes)
    masked_key = priv_key ^ int.from_bytes(aux_rand_hash, "big")
    k_prime = int.from_bytes(schnorr_nonce_hash(masked_key.to_bytes(BYTE_LEN, "big") + schnorr_xbytes + msg),
                             "big") % n
    if k_prime == 0:
        raise SchnorrError("Generated 0-nonce for Schnorr signature")

    # 3. Public nonce
    nonce_point = curve.multiply_generator(k_prime)
    if not nonce_point.has_even_y:
        k_prime = n - k_prime
    nonce_xbytes = nonce_point.x.to_bytes(BYTE_LEN, "big")

    # 4. Challenge
    challenge = int.from_bytes(schnorr_challenge_hash(nonce_xbytes + schnorr_xbytes + msg), "big") % n

    # 5. Signature
    s = (k_prime + challenge * priv_key) % n
    sig = nonce_xbytes + s.to_bytes(BYTE_LEN, "big")

    if not schnorr_verify(curve, schnorr_xbytes, msg, sig):
        raise SchnorrError("Generated invalid signature.")
    return sig


def schnorr_verify(curve: EllipticCurve, xonly_pubkey: int | bytes, msg: bytes, sig: bytes) -> bool:
    """
    Verifies a BIP-340 Schnorr signature against an x-only public key.

    Malformed input lengths raise SchnorrError. A well-formed signature that fails any arithmetic check returns False:
        - x(P) not on the curve
        - r >= p or s >= n
        - R = s·G − e·P is the point at infinity, has odd y, or x(R) != r
    """
    n, p = curve.order, curve.p

    # --- INPUT VALIDATION --- #
    if isinstance(xonly_pubkey, (bytes, bytearray)):
        if len(xonly_pubkey) != BYTE_LEN:
            raise SchnorrError(f"x-only public key must be exactly {BYTE_LEN} bytes")
        pubkey_x = int.from_bytes(xonly_pubkey, "big")
    else:
        pubkey_x = xonly_pubkey
    if len(sig) != SIG_LEN:
        raise SchnorrError(f"Attached signature not {SIG_LEN} bytes.")
    if len(msg) != BYTE_LEN:
        raise SchnorrError(f"Signed message must be exactly {BYTE_LEN} bytes")

    r_bytes, s_bytes = sig[:BYTE_LEN], sig[BYTE_LEN:]
    r, s = int.from_bytes(r_bytes, "big"), int.from_bytes(s_bytes, "big")
    if r >= p or s >= n:
        return False

    # 1. Public key point with even y
    try:
        pubkey = curve.lift_x(pubkey_x)
    except ValueError:
        return False

    # 2. Challenge
    challenge_hash = schnorr_challenge_hash(r_bytes + pubkey.x.to_bytes(BYTE_LEN, "big") + msg)
    challenge = int.from_bytes(challenge_hash, "big") % n

    # 3. R = s·G + (n - e)·P
    nonce_point: Point = curve.add_points(
        curve.multiply_generator(s),
        curve.scalar_multiplication(n - challenge, pubkey)
    )
    if not nonce_point or not nonce_point.has_even_y:
        return False
    return nonce_point.x == r


def parse_schnorr_signature(sig_bytes: bytes) -> tuple[bytes, int]:
    """
    Splits a witness signature into (64-byte signature, sighash type).

    A 64-byte signature carries the default sighash 0x00. A 65-byte signature carries an explicit sighash byte, which
    may not be 0x00.
    """
    if len(sig_bytes) == SIG_LEN:
        return bytes(sig_bytes), TAPROOT.DEFAULT_SIGHASH
    if len(sig_bytes) == SIG_LEN + 1:
        sighash_type = sig_bytes[-1]
        if sighash_type not in TAPROOT.SIGHASH_TYPES:
            raise SchnorrError(f"Invalid sighash type for 65-byte signature: {hex(sighash_type)}")
        return bytes(sig_bytes[:SIG_LEN]), sighash_type
    raise SchnorrError(f"Schnorr signature must be {SIG_LEN} or {SIG_LEN + 1} bytes, got {len(sig_bytes)}")
