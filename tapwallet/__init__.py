"""
tapwallet - BIP39 mnemonic to BIP86 Taproot address derivation, with BIP340 Schnorr signing

Subpackages:
    core: formats, networks, exceptions, logging and scoped secrets
    cryptography: secp256k1 curve context, hashes, Schnorr, bech32m and Taproot keys
    data: BIP39 wordlist and base58check
    wallet: mnemonic, seed, derivation paths, extended keys, addresses and TaprootWallet
"""
__version__ = "0.1.0"
