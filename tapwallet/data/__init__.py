"""
Data files and encodings used by tapwallet
"""

# data/__init__.py
from tapwallet.data.base58 import *
from tapwallet.data.wordlist import *
