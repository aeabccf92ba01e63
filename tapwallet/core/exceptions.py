"""
The custom exceptions used throughout tapwallet

Input validation errors are caller mistakes and are never retried. Key arithmetic errors cover the negligible cases
where a derived scalar falls outside [1, n); for a single fixed derivation path they are fatal.
"""
__all__ = ["WalletError", "InputValidationError", "EntropySourceError", "InvalidEntropyError", "InvalidWordCountError",
           "UnknownWordError", "ChecksumMismatchError", "NormalizationError", "InvalidPathSyntaxError",
           "UnsupportedNetworkError", "AddressError", "KeyArithmeticError", "InvalidSecretKeyError",
           "InvalidChildKeyError", "InvalidTweakError", "WipedSecretError", "ExtendedKeyError", "SchnorrError",
           "Bech32Error", "Base58Error"]


class WalletError(Exception):
    """
    Parent class for Wallet errors
    """
    pass


# --- INPUT VALIDATION --- #

class InputValidationError(WalletError):
    """
    Parent class for errors caused by malformed caller input
    """
    pass


class InvalidEntropyError(InputValidationError):
    """
    For entropy whose byte length is not BIP39 compliant
    """
    pass


class InvalidWordCountError(InputValidationError):
    """
    For a mnemonic whose length is not one of 12, 15, 18, 21 or 24 words
    """
    pass


class UnknownWordError(InputValidationError):
    """
    For a mnemonic word missing from the word list
    """
    pass


class ChecksumMismatchError(InputValidationError):
    """
    For a mnemonic whose embedded checksum bits don't match the hash of its entropy
    """
    pass


class NormalizationError(InputValidationError):
    """
    For mnemonic or passphrase input that is not well-formed UTF-8
    """
    pass


class InvalidPathSyntaxError(InputValidationError):
    """
    For derivation path strings not of the form m(/\\d+'?)*
    """
    pass


class UnsupportedNetworkError(InputValidationError):
    """
    For unrecognized network tags or address prefixes
    """
    pass


class AddressError(InputValidationError):
    """
    For addresses and scriptPubKeys that don't carry a Taproot witness program
    """
    pass


# --- KEY ARITHMETIC --- #

class KeyArithmeticError(WalletError):
    """
    Parent class for derived scalars outside the valid range
    """
    pass


class InvalidSecretKeyError(KeyArithmeticError):
    """
    For a secret key equal to zero or not less than the curve order
    """
    pass


class InvalidChildKeyError(KeyArithmeticError):
    """
    For a BIP32 child derivation producing an invalid scalar
    """
    pass


class InvalidTweakError(KeyArithmeticError):
    """
    For a TapTweak hash not less than the curve order, or a tweak sending the key to infinity
    """
    pass


# --- EVERYTHING ELSE --- #

class EntropySourceError(WalletError):
    """
    Raised when no cryptographically secure random source is available
    """
    pass


class WipedSecretError(WalletError):
    """
    For access to secret material after it has been overwritten
    """
    pass


class ExtendedKeyError(WalletError):
    """Custom exception for extended key operations"""
    pass


class SchnorrError(WalletError):
    """
    Raised during Schnorr signatures for out of bound values
    """
    pass


class Bech32Error(WalletError):
    """
    For use in bech32 and bech32m encoding/decoding
    """
    pass


class Base58Error(WalletError):
    """
    For use in base58 and base58check encoding/decoding
    """
    pass
