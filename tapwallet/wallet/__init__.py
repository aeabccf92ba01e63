"""
Wallet pipeline: mnemonic codec, seed deriver, derivation paths, extended keys, addresses and the Taproot wallet
"""

# wallet/__init__.py
from tapwallet.wallet.address import *
from tapwallet.wallet.derivation import *
from tapwallet.wallet.mnemonic import *
from tapwallet.wallet.seed import *
from tapwallet.wallet.wallet import *
from tapwallet.wallet.xkeys import *
