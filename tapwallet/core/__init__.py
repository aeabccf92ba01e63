"""
Contains the core elements that are used within tapwallet

Core:
    -Provides the reference formats and network parameters
    -Provides custom exceptions for the derivation pipeline
    -Provides the logger factory and the scoped secret container
"""
# core/__init__.py
from tapwallet.core.exceptions import *
from tapwallet.core.formats import *
from tapwallet.core.logging import *
from tapwallet.core.scoped import *
