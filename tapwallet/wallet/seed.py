"""
Stretches a mnemonic and optional passphrase into the 64-byte BIP39 seed
"""
import unicodedata

from tapwallet.core import WALLET, NormalizationError, ScopedSecret
from tapwallet.cryptography.hash_functions import pbkdf2_sha512

__all__ = ["derive_seed", "normalize_text"]


def normalize_text(text: str | bytes) -> str:
    """
    NFKD-normalize text. Bytes must be valid UTF-8 and strings may not carry lone surrogates.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as e:
            raise NormalizationError(f"Input is not valid UTF-8: {e}") from e
    if not isinstance(text, str):
        raise TypeError(f"Expected str or bytes, got {type(text).__name__}")

    normalized = unicodedata.normalize("NFKD", text)
    try:
        normalized.encode("utf-8")
    except UnicodeEncodeError as e:
        raise NormalizationError(f"Input cannot be encoded as UTF-8: {e}") from e
    return normalized


def derive_seed(mnemonic_words: str | bytes | list[str], passphrase: str | bytes = "") -> ScopedSecret:
    """
    PBKDF2-HMAC-SHA512 with 2048 iterations over the normalized mnemonic, salted with "mnemonic" + passphrase.

    The words are joined by single spaces. The mnemonic is not checked against the wordlist here; that is the codec's
    job. The seed is returned as a ScopedSecret owned by the caller.
    """
    if isinstance(mnemonic_words, (list, tuple)):
        words = [normalize_text(w) for w in mnemonic_words]
    else:
        words = normalize_text(mnemonic_words).split()

    password = " ".join(words).encode("utf-8")
    salt = (WALLET.SALT_PREFIX + normalize_text(passphrase)).encode("utf-8")
    return ScopedSecret(pbkdf2_sha512(password, salt, WALLET.SEED_ITERATIONS, WALLET.DKLEN))
