"""
Shortcuts for the hash functions used by the derivation pipeline. Each function returns the bytes digest
"""
import hashlib
import hmac

from ripemd.ripemd160 import ripemd160 as _ripemd160

from tapwallet.core import WALLET

__all__ = ["hash160", "hash256", "hmac_sha512", "pbkdf2_sha512", "ripemd160", "sha256", "sha512",
           "schnorr_aux_hash", "schnorr_challenge_hash", "schnorr_nonce_hash", "tagged_sha256", "taptweak_hash"]


# --- SHA --- #
def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha512(data: bytes) -> bytes:
    return hashlib.sha512(data).digest()


# --- RIPEMD --- #

def ripemd160(data: bytes) -> bytes:
    # Pure python implementation; hashlib only offers ripemd160 on some OpenSSL builds
    return _ripemd160(bytes(data))


# --- BTC HASH FUNCTIONS --- #

def hash256(data: bytes) -> bytes:
    """SHA256(SHA256(data))"""
    return sha256(sha256(data))


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    return ripemd160(sha256(data))


# --- WALLET HASHES --- #
def hmac_sha512(key: bytes, message: bytes) -> bytes:
    return hmac.new(key=bytes(key), msg=bytes(message), digestmod=hashlib.sha512).digest()


def pbkdf2_sha512(password: bytes, salt: bytes, iterations: int = WALLET.SEED_ITERATIONS,
                  dklen: int = WALLET.DKLEN) -> bytes:
    """
    PBKDF2-HMAC-SHA512 over already normalized and encoded inputs.
    """
    return hashlib.pbkdf2_hmac('sha512', password, salt, iterations, dklen)


# --- TAGGED HASH FUNCTIONS --- #

def tagged_sha256(tag: bytes, data: bytes) -> bytes:
    # Get tagged hash
    tag_hash = sha256(tag)

    # Return SHA256( tag_hash || tag_hash || data )
    return sha256(tag_hash + tag_hash + bytes(data))


# --- TAPROOT TAGGED HASH FUNCTIONS --- #
def taptweak_hash(data: bytes) -> bytes:
    return tagged_sha256(b'TapTweak', data)


# --- SCHNORR BIP0340 TAGGED HASH FUNCTIONS --- #
def schnorr_aux_hash(data: bytes) -> bytes:
    return tagged_sha256(b'BIP0340/aux', data)


def schnorr_nonce_hash(data: bytes) -> bytes:
    return tagged_sha256(b'BIP0340/nonce', data)


def schnorr_challenge_hash(data: bytes) -> bytes:
    return tagged_sha256(b'BIP0340/challenge', data)
