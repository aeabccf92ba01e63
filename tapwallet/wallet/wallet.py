"""
The TaprootWallet class - ties together Mnemonic, ExtendedPrivateKey and the Taproot tweak for BIP86 key-path wallets

    mnemonic -> seed -> master xprv -> m/86'/coin'/account'/change/index -> internal key pair -> tweaked key pair
                                                                                           -> receive address

The wallet keeps only the leaf's internal and tweaked key pairs. Seed, master and intermediate nodes are wiped as soon
as the leaf is derived.
"""
import json

from tapwallet.core import WALLET, Network, ScopedSecret, get_logger
from tapwallet.cryptography.ecc import EllipticCurve
from tapwallet.cryptography.schnorr import schnorr_verify
from tapwallet.cryptography.taproot import InternalKeyPair, InternalXOnlyKey, OutputXOnlyKey, TweakedKeyPair, \
    internal_from_secret, tweak, tweak_public_key
from tapwallet.wallet.address import encode_address, p2tr_address, script_pubkey
from tapwallet.wallet.derivation import DerivationPath, Normal
from tapwallet.wallet.mnemonic import Mnemonic
from tapwallet.wallet.xkeys import ExtendedPrivateKey

__all__ = ["TaprootWallet", "derive_receive_addresses"]

DEFAULT_NETWORK = Network.TESTNET

logger = get_logger(__name__)


def _validated_mnemonic(mnemonic: Mnemonic | list[str] | str) -> Mnemonic:
    """Validated Mnemonic. Raises the codec's errors for an invalid phrase."""
    if isinstance(mnemonic, Mnemonic):
        mnemonic.decode()
        return mnemonic
    return Mnemonic.parse(mnemonic)


class TaprootWallet:
    """
    Key-path-only Taproot wallet for a single derivation path. Immutable after construction.
    """
    __slots__ = ("_curve", "_network", "_path", "_internal_keypair", "_tweaked_keypair", "_output_key", "_address")

    def __init__(self, curve: EllipticCurve, secret: ScopedSecret | bytes, network: Network | str = DEFAULT_NETWORK,
                 path: DerivationPath | str | None = None):
        """
        Build the wallet from a raw leaf secret. The caller keeps ownership of the secret passed in.

        Args:
            curve: The shared curve context
            secret: 32-byte leaf secret key
            network: Selects the address human-readable part
            path: The derivation path that produced the secret, for display only
        """
        network = Network.from_tag(network)
        if isinstance(path, str):
            path = DerivationPath.parse(path)

        internal_keypair, internal_key = internal_from_secret(curve, secret)
        tweaked_keypair = tweak(curve, internal_keypair)
        output_key = tweaked_keypair.x_only()

        for name, value in (("_curve", curve), ("_network", network), ("_path", path),
                            ("_internal_keypair", internal_keypair), ("_tweaked_keypair", tweaked_keypair),
                            ("_output_key", output_key), ("_address", encode_address(output_key, network))):
            object.__setattr__(self, name, value)

        logger.info(f"Taproot wallet ready: {network.name} {path or 'm'} -> {self._address}")

    def __setattr__(self, key, value):
        raise AttributeError("TaprootWallet is immutable once constructed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.wipe()

    def __repr__(self):
        return f"TaprootWallet(network={self._network.name}, path={self._path}, address={self._address})"

    # --- CONSTRUCTORS --- #

    @classmethod
    def from_secret(cls, curve: EllipticCurve, secret: ScopedSecret | bytes, network: Network | str = DEFAULT_NETWORK,
                    path: DerivationPath | str | None = None) -> "TaprootWallet":
        return cls(curve, secret, network, path)

    @classmethod
    def from_seed(cls, curve: EllipticCurve, seed: ScopedSecret | bytes, network: Network | str = DEFAULT_NETWORK,
                  path: DerivationPath | str | None = None) -> "TaprootWallet":
        """
        Derive the wallet at path (default m/86'/coin'/0'/0/0) from a BIP32 seed
        """
        network = Network.from_tag(network)
        path = DerivationPath.bip86(network) if path is None else path
        if isinstance(path, str):
            path = DerivationPath.parse(path)

        with ExtendedPrivateKey.master_from_seed(curve, seed, network) as master:
            with master.derive_path(curve, path) as leaf:
                return cls(curve, leaf.secret, network, path)

    @classmethod
    def from_mnemonic(cls, curve: EllipticCurve, mnemonic: Mnemonic | list[str] | str, passphrase: str | bytes = "",
                      network: Network | str = DEFAULT_NETWORK, account: int = 0, change: int = 0,
                      index: int = 0) -> "TaprootWallet":
        """
        Validate the mnemonic, stretch it into a seed and derive m/86'/coin'/account'/change/index
        """
        network = Network.from_tag(network)
        mnemonic = _validated_mnemonic(mnemonic)
        path = DerivationPath.bip86(network, account, change, index)
        with mnemonic.to_seed(passphrase) as seed:
            return cls.from_seed(curve, seed, network, path)

    @classmethod
    def generate(cls, curve: EllipticCurve, word_count: int = WALLET.DEFAULT_WORD_COUNT, passphrase: str | bytes = "",
                 network: Network | str = DEFAULT_NETWORK) -> tuple[Mnemonic, "TaprootWallet"]:
        """
        New mnemonic from fresh entropy and the wallet at its first receive address
        """
        mnemonic = Mnemonic.generate(word_count)
        return mnemonic, cls.from_mnemonic(curve, mnemonic, passphrase, network)

    # --- PROPERTIES --- #

    @property
    def network(self) -> Network:
        return self._network

    @property
    def path(self) -> DerivationPath | None:
        return self._path

    @property
    def internal_keypair(self) -> InternalKeyPair:
        return self._internal_keypair

    @property
    def tweaked_keypair(self) -> TweakedKeyPair:
        return self._tweaked_keypair

    @property
    def internal_xonly(self) -> InternalXOnlyKey:
        return self._internal_keypair.x_only()

    @property
    def output_key(self) -> OutputXOnlyKey:
        return self._output_key

    @property
    def output_parity(self) -> int:
        return self._tweaked_keypair.output_parity

    @property
    def address(self) -> str:
        return self._address

    @property
    def script_pubkey(self) -> bytes:
        return script_pubkey(self._output_key)

    # --- SIGNING --- #

    def sign_keypath(self, msg: bytes, aux_bytes: bytes = None) -> bytes:
        """
        Schnorr signature with the tweaked key pair, for spending the output key directly
        """
        return self._tweaked_keypair.sign(self._curve, msg, aux_bytes)

    def sign_script_leaf(self, msg: bytes, aux_bytes: bytes = None) -> bytes:
        """
        Schnorr signature with the internal key pair, for scripts inside a committed script tree
        """
        return self._internal_keypair.sign(self._curve, msg, aux_bytes)

    def verify_keypath(self, msg: bytes, sig: bytes) -> bool:
        return schnorr_verify(self._curve, self._output_key.to_bytes(), msg, sig)

    def verify_script_leaf(self, msg: bytes, sig: bytes) -> bool:
        return schnorr_verify(self._curve, self.internal_xonly.to_bytes(), msg, sig)

    def commit_address(self, merkle_root: bytes) -> str:
        """
        Address committing to an externally built script tree, given its 32-byte merkle root
        """
        return p2tr_address(self._curve, self.internal_xonly, self._network, merkle_root)

    # --- DISPLAY --- #

    def to_dict(self) -> dict:
        """
        Public data only
        """
        return {
            "network": self._network.name.lower(),
            "path": str(self._path) if self._path is not None else None,
            "internal_key": self.internal_xonly.hex(),
            "output_key": self._output_key.hex(),
            "output_parity": self.output_parity,
            "address": self._address,
            "script_pubkey": self.script_pubkey.hex()
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)

    # --- LIFETIME --- #

    @property
    def is_wiped(self) -> bool:
        return self._internal_keypair.is_wiped and self._tweaked_keypair.is_wiped

    def wipe(self):
        self._internal_keypair.wipe()
        self._tweaked_keypair.wipe()


def derive_receive_addresses(curve: EllipticCurve, mnemonic: Mnemonic | list[str] | str, passphrase: str | bytes = "",
                             network: Network | str = DEFAULT_NETWORK, account: int = 0, change: int = 0,
                             start: int = 0, count: int = 1) -> list[dict]:
    """
    Walk m/86'/coin'/account'/change/i for i in [start, start + count) and return the public data of each address
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    network = Network.from_tag(network)
    mnemonic = _validated_mnemonic(mnemonic)
    chain_path = DerivationPath.bip86(network, account, change)
    chain_path = DerivationPath(chain_path.components[:-1])

    addresses = []
    with mnemonic.to_seed(passphrase) as seed, \
            ExtendedPrivateKey.master_from_seed(curve, seed, network) as master, \
            master.derive_path(curve, chain_path) as chain_node:
        for i in range(start, start + count):
            with chain_node.derive_child(curve, Normal(i)) as leaf:
                internal_keypair, internal_key = internal_from_secret(curve, leaf.secret)
            internal_keypair.wipe()

            output_key, parity = tweak_public_key(curve, internal_key)
            addresses.append({
                "path": str(chain_path / Normal(i)),
                "internal_key": internal_key.hex(),
                "output_key": output_key.hex(),
                "output_parity": parity,
                "address": encode_address(output_key, network)
            })

    logger.debug(f"Derived {count} receive addresses on {chain_path} ({network.name})")
    return addresses
