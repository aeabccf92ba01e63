"""
Elliptic curve cryptography, hash functions, signatures and Taproot keys
"""
# cryptography/__init__.py

from tapwallet.cryptography.bech32 import *
from tapwallet.cryptography.ecc import *
from tapwallet.cryptography.ecc_math import *
from tapwallet.cryptography.hash_functions import *
from tapwallet.cryptography.schnorr import *
from tapwallet.cryptography.taproot import *
