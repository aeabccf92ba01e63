"""
Extended private keys - BIP32 hierarchical deterministic derivation

Secret key and chain code each live in a ScopedSecret. derive_path() wipes every intermediate node it creates, so
only the starting node (owned by the caller) and the returned leaf outlive the walk.
"""
import hmac

from tapwallet.core import XKEYS, Base58Error, ExtendedKeyError, InvalidChildKeyError, InvalidSecretKeyError, \
    Network, ScopedSecret, UnsupportedNetworkError, get_logger
from tapwallet.cryptography.ecc import EllipticCurve
from tapwallet.cryptography.hash_functions import hash160, hmac_sha512
from tapwallet.data import decode_base58check, encode_base58check
from tapwallet.wallet.derivation import ChildIndex, DerivationPath

__all__ = ["ExtendedPrivateKey", "master_from_seed", "derive_child", "derive_path"]

SEED_KEY = XKEYS.SEED_KEY
CHAIN_LENGTH = XKEYS.CHAIN_LENGTH
FINGERPRINT_LENGTH = XKEYS.FINGERPRINT_LENGTH
SERIAL_LENGTH = XKEYS.SERIAL_LENGTH
KEY_LENGTH = 32

logger = get_logger(__name__)


class ExtendedPrivateKey:
    """
    BIP32 extended private key: {secret, chain code, depth, parent fingerprint, child number} plus the network that
    selects the serialization version bytes.
    """
    __slots__ = ("_secret", "_chain_code", "depth", "parent_fingerprint", "child_number", "network")

    def __init__(self,
                 secret: ScopedSecret,
                 chain_code: ScopedSecret,
                 depth: int = 0,
                 parent_fingerprint: bytes = b'\x00' * FINGERPRINT_LENGTH,
                 child_number: ChildIndex | None = None,
                 network: Network = Network.MAINNET,
                 ):
        """
        Args:
            secret: 32-byte secret key
            chain_code: 32-byte chain code
            depth: Depth in the derivation tree, 0 for the master node
            parent_fingerprint: First 4 bytes of HASH160 of the parent's compressed public key
            child_number: The step that produced this node; None for the master node
            network: Selects xprv/tprv version bytes
        """
        # --- Validation --- #
        if len(secret) != KEY_LENGTH:
            raise ExtendedKeyError(f"Secret key must be {KEY_LENGTH} bytes")
        if len(chain_code) != CHAIN_LENGTH:
            raise ExtendedKeyError(f"Chain code must be {CHAIN_LENGTH} bytes")
        if len(parent_fingerprint) != FINGERPRINT_LENGTH:
            raise ExtendedKeyError(f"Parent fingerprint must be {FINGERPRINT_LENGTH} bytes")
        if not 0 <= depth <= XKEYS.MAX_DEPTH:
            raise ExtendedKeyError(f"Depth must be in range [0, {XKEYS.MAX_DEPTH}]")

        self._secret = secret
        self._chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = bytes(parent_fingerprint)
        self.child_number = child_number
        self.network = Network.from_tag(network)

    # --- OVERRIDES --- #

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.wipe()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ExtendedPrivateKey):
            return NotImplemented
        return hmac.compare_digest(self.to_bytes(), other.to_bytes())

    __hash__ = None

    def __repr__(self):
        child = "master" if self.child_number is None else str(self.child_number)
        return f"ExtendedPrivateKey(depth={self.depth}, child={child}, network={self.network.name})"

    # --- PROPERTIES --- #

    @property
    def secret(self) -> ScopedSecret:
        return self._secret

    @property
    def chain_code(self) -> ScopedSecret:
        return self._chain_code

    @property
    def child_value(self) -> int:
        return 0 if self.child_number is None else self.child_number.value

    @property
    def is_wiped(self) -> bool:
        return self._secret.is_wiped

    # --- CONSTRUCTION --- #

    @classmethod
    def master_from_seed(cls, curve: EllipticCurve, seed: ScopedSecret | bytes,
                         network: Network | str = Network.MAINNET) -> "ExtendedPrivateKey":
        """
        I = HMAC-SHA512("Bitcoin seed", seed). Left half is the master secret, right half the chain code.
        """
        if not XKEYS.MIN_SEED_BYTES <= len(seed) <= XKEYS.MAX_SEED_BYTES:
            raise ExtendedKeyError(f"Seed must be between {XKEYS.MIN_SEED_BYTES} and {XKEYS.MAX_SEED_BYTES} bytes")

        if isinstance(seed, ScopedSecret):
            with seed.reveal() as seed_view:
                seed_hash = bytearray(hmac_sha512(key=SEED_KEY, message=seed_view))
        else:
            seed_hash = bytearray(hmac_sha512(key=SEED_KEY, message=seed))
        try:
            secret = ScopedSecret(seed_hash[:KEY_LENGTH])
            chain_code = ScopedSecret(seed_hash[KEY_LENGTH:])
        finally:
            seed_hash[:] = bytes(len(seed_hash))

        k = secret.to_int()
        if k == 0 or k >= curve.order:
            secret.wipe()
            chain_code.wipe()
            raise InvalidSecretKeyError("Master secret key is zero or not below the curve order")
        return cls(secret, chain_code, network=network)

    @classmethod
    def from_serial(cls, curve: EllipticCurve, data: bytes) -> "ExtendedPrivateKey":
        """
        Parse the 78-byte serialization:
            version || depth || parent fingerprint || child number || chain code || 0x00 || secret key
        Version bytes select the network. Only private keys are accepted.
        """
        if len(data) != SERIAL_LENGTH:
            raise ExtendedKeyError(f"Serialized extended key must be {SERIAL_LENGTH} bytes, got {len(data)}")

        version, depth = data[:4], data[4]
        parent_fingerprint, child_value = data[5:9], int.from_bytes(data[9:13], "big")
        chain_code, key_data = data[13:45], data[45:]

        try:
            network = Network.from_version(version)
        except UnsupportedNetworkError as e:
            raise ExtendedKeyError(str(e)) from e
        if version != network.xprv_version:
            raise ExtendedKeyError("Extended public keys cannot be parsed as private keys")
        if key_data[0] != 0:
            raise ExtendedKeyError("Private key data must start with 0x00")
        if depth == 0 and (parent_fingerprint != b'\x00' * FINGERPRINT_LENGTH or child_value != 0):
            raise ExtendedKeyError("Master key with non-zero parent fingerprint or child number")

        k = int.from_bytes(key_data[1:], "big")
        if not 1 <= k < curve.order:
            raise ExtendedKeyError("Private key not in range [1, n)")

        child_number = None if depth == 0 else ChildIndex.from_value(child_value)
        return cls(ScopedSecret(key_data[1:]), ScopedSecret(chain_code), depth, parent_fingerprint, child_number,
                   network)

    @classmethod
    def from_xprv(cls, curve: EllipticCurve, xprv: str) -> "ExtendedPrivateKey":
        try:
            data = decode_base58check(xprv)
        except Base58Error as e:
            raise ExtendedKeyError(f"Invalid extended key encoding: {e}") from e
        return cls.from_serial(curve, data)

    # --- KEYS --- #

    def public_key(self, curve: EllipticCurve) -> bytes:
        """Compressed SEC public key"""
        return curve.compressed(curve.multiply_generator(self._secret.to_int()))

    def fingerprint(self, curve: EllipticCurve) -> bytes:
        """
        Calculate the fingerprint of the key
        """
        return hash160(self.public_key(curve))[:FINGERPRINT_LENGTH]

    # --- DERIVATION --- #

    def derive_child(self, curve: EllipticCurve, index: ChildIndex | int) -> "ExtendedPrivateKey":
        """
        Derive the child at the given index. An int is read as a serialized 32-bit child number.

        Raises InvalidChildKeyError if IL >= n or the child key is zero. The index is not skipped.
        """
        if isinstance(index, int):
            index = ChildIndex.from_value(index)
        if self.depth >= XKEYS.MAX_DEPTH:
            raise ExtendedKeyError(f"Cannot derive beyond depth {XKEYS.MAX_DEPTH}")

        # Compressed parent key: HMAC data for normal children and source of the fingerprint
        parent_public_key = self.public_key(curve)

        # --- HMAC SHA512 --- #
        payload = index.hmac_payload(parent_public_key, self._secret)
        try:
            with self._chain_code.reveal() as chain_code:
                key_hash = bytearray(hmac_sha512(key=chain_code, message=payload))
        finally:
            payload[:] = bytes(len(payload))

        try:
            tweak_int = int.from_bytes(key_hash[:KEY_LENGTH], "big")
            if tweak_int >= curve.order:
                raise InvalidChildKeyError(f"Derived tweak at index {index} is not below the curve order")
            child_int = (self._secret.to_int() + tweak_int) % curve.order
            if child_int == 0:
                raise InvalidChildKeyError(f"Derived child key at index {index} is zero")
            child_chain_code = ScopedSecret(key_hash[KEY_LENGTH:])
        finally:
            key_hash[:] = bytes(len(key_hash))

        return ExtendedPrivateKey(
            secret=ScopedSecret.from_int(child_int, KEY_LENGTH),
            chain_code=child_chain_code,
            depth=self.depth + 1,
            parent_fingerprint=hash160(parent_public_key)[:FINGERPRINT_LENGTH],
            child_number=index,
            network=self.network
        )

    def derive_path(self, curve: EllipticCurve, path: DerivationPath | str) -> "ExtendedPrivateKey":
        """
        Apply derive_child for each path component. Intermediate nodes are wiped, including on error.
        """
        if isinstance(path, str):
            path = DerivationPath.parse(path)

        node = self
        try:
            for component in path:
                child = node.derive_child(curve, component)
                if node is not self:
                    node.wipe()
                node = child
        except Exception:
            if node is not self:
                node.wipe()
            raise

        logger.debug(f"Derived {path} ({self.network.name}) at depth {node.depth}")
        return node

    # --- SERIALIZATION --- #

    def _serialize(self, version: bytes, key_data: bytes) -> bytes:
        return b''.join([
            version,
            self.depth.to_bytes(1, "big"),
            self.parent_fingerprint,
            self.child_value.to_bytes(4, "big"),
            self._chain_code.to_bytes(),
            key_data
        ])

    def to_bytes(self) -> bytes:
        """
        Returns the 78-byte private serialization. The result is an unmanaged copy of secret material.
        """
        return self._serialize(self.network.xprv_version, b'\x00' + self._secret.to_bytes())

    def to_xprv(self) -> str:
        return encode_base58check(self.to_bytes())

    def to_xpub(self, curve: EllipticCurve) -> str:
        return encode_base58check(self._serialize(self.network.xpub_version, self.public_key(curve)))

    # --- LIFETIME --- #

    def wipe(self):
        self._secret.wipe()
        self._chain_code.wipe()


# --- MODULE LEVEL --- #

def master_from_seed(curve: EllipticCurve, seed: ScopedSecret | bytes,
                     network: Network | str = Network.MAINNET) -> ExtendedPrivateKey:
    return ExtendedPrivateKey.master_from_seed(curve, seed, network)


def derive_child(curve: EllipticCurve, parent: ExtendedPrivateKey, index: ChildIndex | int) -> ExtendedPrivateKey:
    return parent.derive_child(curve, index)


def derive_path(curve: EllipticCurve, master: ExtendedPrivateKey, path: DerivationPath | str) -> ExtendedPrivateKey:
    return master.derive_path(curve, path)
