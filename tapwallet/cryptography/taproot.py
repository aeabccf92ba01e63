"""
Taproot key types and the BIP341 TapTweak

Internal and output keys are different capabilities. They get distinct classes with no conversion methods between
them, and every function that consumes one checks the class it was handed:

    InternalKeyPair --tweak()--> TweakedKeyPair
    InternalXOnlyKey --tweak_public_key()--> OutputXOnlyKey

A TweakedKeyPair or OutputXOnlyKey can never be fed back into tweak() or tweak_public_key().
"""
from tapwallet.core import ECC, TAPROOT, InvalidSecretKeyError, InvalidTweakError, ScopedSecret, get_logger
from tapwallet.cryptography.ecc import EllipticCurve, Point
from tapwallet.cryptography.hash_functions import taptweak_hash
from tapwallet.cryptography.schnorr import schnorr_sig, schnorr_verify

__all__ = ["XOnlyPublicKey", "InternalXOnlyKey", "OutputXOnlyKey", "InternalKeyPair", "TweakedKeyPair",
           "internal_from_secret", "tweak", "tweak_public_key"]

BYTE_LEN = ECC.COORD_BYTES

logger = get_logger(__name__)


# --- X-ONLY PUBLIC KEYS --- #

class XOnlyPublicKey:
    """
    A 32-byte x-only public key (BIP340). The point it stands for is the one with even y-coordinate.
    """
    __slots__ = ("_x",)

    def __init__(self, xonly: bytes | int):
        if isinstance(xonly, int):
            if not 0 <= xonly < 1 << (8 * BYTE_LEN):
                raise ValueError("x-only key integer out of range")
            xonly = xonly.to_bytes(BYTE_LEN, "big")
        if len(xonly) != BYTE_LEN:
            raise ValueError(f"x-only key must be {BYTE_LEN} bytes")
        object.__setattr__(self, "_x", bytes(xonly))

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def x(self) -> int:
        return int.from_bytes(self._x, "big")

    def to_bytes(self) -> bytes:
        return self._x

    def hex(self) -> str:
        return self._x.hex()

    def to_point(self, curve: EllipticCurve) -> Point:
        """Lift to the even-y curve point. Raises ValueError if x is not on the curve."""
        return curve.lift_x(self.x)

    def __eq__(self, other):
        # An internal key never compares equal to an output key
        if type(other) is not type(self):
            return NotImplemented
        return self._x == other._x

    def __hash__(self):
        return hash((type(self).__name__, self._x))

    def __repr__(self):
        return f"{type(self).__name__}({self._x.hex()})"


class InternalXOnlyKey(XOnlyPublicKey):
    """The untweaked key: identity and script-tree commitment role"""
    __slots__ = ()


class OutputXOnlyKey(XOnlyPublicKey):
    """The tweaked key that locks the P2TR output"""
    __slots__ = ()


# --- KEY PAIRS --- #

class _SchnorrKeyPair:
    """
    Secret scalar plus its public point. Shared signing and lifetime behaviour only.
    """
    __slots__ = ("_secret", "_point")

    def __init__(self, secret: ScopedSecret, point: Point):
        self._secret = secret
        self._point = point

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.wipe()

    def __repr__(self):
        return f"{type(self).__name__}(x_only={self._point.x.to_bytes(BYTE_LEN, 'big').hex()})"

    @property
    def public_point(self) -> Point:
        return self._point

    @property
    def is_wiped(self) -> bool:
        return self._secret.is_wiped

    def sign(self, curve: EllipticCurve, msg: bytes, aux_bytes: bytes = None) -> bytes:
        return schnorr_sig(curve, self._secret.to_int(), msg, aux_bytes)

    def verify(self, curve: EllipticCurve, msg: bytes, sig: bytes) -> bool:
        return schnorr_verify(curve, self._point.x, msg, sig)

    def wipe(self):
        self._secret.wipe()


class InternalKeyPair(_SchnorrKeyPair):
    """
    The untweaked key pair. The secret is stored in its even-y form, so the public point always has even y and
    matches x_only().
    """
    __slots__ = ()

    def x_only(self) -> InternalXOnlyKey:
        return InternalXOnlyKey(self._point.x)


class TweakedKeyPair(_SchnorrKeyPair):
    """
    The output key pair d' = d + t with Q = P + tG. Q is kept as computed; output_parity records whether its
    y-coordinate is odd, as required for control blocks.
    """
    __slots__ = ()

    @property
    def output_parity(self) -> int:
        return self._point.y % 2

    def x_only(self) -> OutputXOnlyKey:
        return OutputXOnlyKey(self._point.x)


# --- CONSTRUCTION AND TWEAK --- #

def internal_from_secret(curve: EllipticCurve, secret: ScopedSecret | bytes | int) \
        -> tuple[InternalKeyPair, InternalXOnlyKey]:
    """
    Lift a raw 32-byte secret to the internal key pair. If d·G has odd y, the secret is negated.

    A ScopedSecret argument is left untouched; the key pair owns a separate copy.
    """
    if isinstance(secret, ScopedSecret):
        d = secret.to_int()
    elif isinstance(secret, int):
        d = secret
    else:
        if len(secret) != BYTE_LEN:
            raise InvalidSecretKeyError(f"Secret key must be {BYTE_LEN} bytes")
        d = int.from_bytes(secret, "big")

    if not 1 <= d < curve.order:
        raise InvalidSecretKeyError("Secret key scalar must be in range [1, n)")

    point = curve.multiply_generator(d)
    if not point.has_even_y:
        d = curve.order - d
        point = curve.negate(point)

    keypair = InternalKeyPair(ScopedSecret.from_int(d, BYTE_LEN), point)
    return keypair, keypair.x_only()


def _tweak_scalar(curve: EllipticCurve, internal_key: InternalXOnlyKey, merkle_root: bytes | None) -> int:
    """
    t = int(TaggedHash("TapTweak", x(P) || merkle_root)). No merkle root means the key-path-only commitment.
    """
    if merkle_root is None:
        merkle_root = b''
    elif len(merkle_root) != TAPROOT.MERKLE_ROOT_LENGTH:
        raise ValueError(f"Merkle root must be {TAPROOT.MERKLE_ROOT_LENGTH} bytes")

    t = int.from_bytes(taptweak_hash(internal_key.to_bytes() + bytes(merkle_root)), "big")
    if t >= curve.order:
        raise InvalidTweakError("TapTweak scalar exceeds curve order")
    return t


def tweak_public_key(curve: EllipticCurve, internal_key: InternalXOnlyKey, merkle_root: bytes = None) \
        -> tuple[OutputXOnlyKey, int]:
    """
    Returns the output key Q = lift_x(P) + tG and the parity of Q.y
    """
    if not isinstance(internal_key, InternalXOnlyKey):
        raise TypeError(f"tweak_public_key requires an InternalXOnlyKey, got {type(internal_key).__name__}")

    t = _tweak_scalar(curve, internal_key, merkle_root)
    output_point = curve.add_points(internal_key.to_point(curve), curve.multiply_generator(t))
    if not output_point:
        raise InvalidTweakError("Tweaked output key is the point at infinity")
    return OutputXOnlyKey(output_point.x), output_point.y % 2


def tweak(curve: EllipticCurve, internal_keypair: InternalKeyPair, merkle_root: bytes = None) -> TweakedKeyPair:
    """
    Apply the TapTweak to the internal key pair exactly once. Passing anything other than an InternalKeyPair, in
    particular an already tweaked key pair, raises TypeError.
    """
    if not isinstance(internal_keypair, InternalKeyPair):
        raise TypeError(f"tweak requires an InternalKeyPair, got {type(internal_keypair).__name__}")

    internal_key = internal_keypair.x_only()
    t = _tweak_scalar(curve, internal_key, merkle_root)

    # Internal secret is already in even-y form
    d = (internal_keypair._secret.to_int() + t) % curve.order
    output_point = curve.add_points(internal_keypair.public_point, curve.multiply_generator(t))
    if d == 0 or not output_point:
        raise InvalidTweakError("Tweaked secret key is zero")

    tweaked = TweakedKeyPair(ScopedSecret.from_int(d, BYTE_LEN), output_point)
    logger.debug(f"Tweaked internal key {internal_key.hex()} -> output key {tweaked.x_only().hex()} "
                 f"(parity {tweaked.output_parity}, script tree: {merkle_root is not None})")
    return tweaked
