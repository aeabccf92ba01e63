"""
Derivation path components and the DerivationPath class

A path component is either Normal or Hardened. The variant decides what goes into the child HMAC, so no caller ever
compares an index against 2^31 to pick the branch.
"""
import re
from dataclasses import dataclass
from typing import ClassVar, Iterator

from tapwallet.core import XKEYS, InvalidPathSyntaxError, Network, ScopedSecret

__all__ = ["ChildIndex", "Normal", "Hardened", "DerivationPath"]

HARDENED_OFFSET = XKEYS.HARDENED_OFFSET
PATH_PATTERN = re.compile(r"m(/[0-9]+'?)*")


@dataclass(frozen=True)
class ChildIndex:
    """
    A single derivation step. index is the unhardened number in [0, 2^31).
    """
    index: int
    hardened: ClassVar[bool] = False
    marker: ClassVar[str] = ""

    def __post_init__(self):
        if type(self) is ChildIndex:
            raise TypeError("ChildIndex is abstract; use Normal or Hardened")
        if not isinstance(self.index, int) or not 0 <= self.index < HARDENED_OFFSET:
            raise ValueError(f"Child index must be in range [0, {HARDENED_OFFSET})")

    def __str__(self):
        return f"{self.index}{self.marker}"

    @property
    def value(self) -> int:
        """The serialized 32-bit child number"""
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(4, "big")

    def hmac_payload(self, parent_public_key: bytes, parent_secret: ScopedSecret) -> bytearray:
        """
        The data half of HMAC-SHA512(parent chain code, data). parent_public_key is the compressed SEC encoding of the
        parent point, computed once by the caller.
        """
        raise NotImplementedError

    @staticmethod
    def from_value(value: int) -> "ChildIndex":
        """Inverse of .value"""
        if not 0 <= value <= XKEYS.MAX_INDEX:
            raise ValueError(f"Child number {value} out of 32-bit range")
        if value >= HARDENED_OFFSET:
            return Hardened(value - HARDENED_OFFSET)
        return Normal(value)


@dataclass(frozen=True)
class Normal(ChildIndex):
    """Non-hardened step: HMAC data is serP(parent public key) || ser32(i)"""

    @property
    def value(self) -> int:
        return self.index

    def hmac_payload(self, parent_public_key: bytes, parent_secret: ScopedSecret) -> bytearray:
        return bytearray(parent_public_key + self.to_bytes())


@dataclass(frozen=True)
class Hardened(ChildIndex):
    """Hardened step: HMAC data is 0x00 || ser256(parent secret) || ser32(i + 2^31)"""
    marker: ClassVar[str] = "'"
    hardened: ClassVar[bool] = True

    @property
    def value(self) -> int:
        return self.index + HARDENED_OFFSET

    def hmac_payload(self, parent_public_key: bytes, parent_secret: ScopedSecret) -> bytearray:
        payload = bytearray(b'\x00')
        with parent_secret.reveal() as secret:
            payload += secret
        payload += self.to_bytes()
        return payload


@dataclass(frozen=True)
class DerivationPath:
    """
    An ordered sequence of child steps from the master node. str() gives the apostrophe notation, e.g. m/86'/1'/0'/0/0
    """
    components: tuple[ChildIndex, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "components", tuple(self.components))
        for component in self.components:
            if not isinstance(component, (Normal, Hardened)):
                raise TypeError(f"Path components must be Normal or Hardened, got {type(component).__name__}")

    @classmethod
    def parse(cls, path: str) -> "DerivationPath":
        """
        Strict syntax m(/\\d+'?)*. Only an apostrophe marks hardening.
        """
        if not isinstance(path, str) or not PATH_PATTERN.fullmatch(path):
            raise InvalidPathSyntaxError(f"Invalid derivation path: {path!r}")

        components = []
        for part in path.split("/")[1:]:
            hardened = part.endswith("'")
            index = int(part.rstrip("'"))
            if index >= HARDENED_OFFSET:
                raise InvalidPathSyntaxError(f"Path index {index} must be below {HARDENED_OFFSET}")
            components.append(Hardened(index) if hardened else Normal(index))
        return cls(tuple(components))

    @classmethod
    def bip86(cls, network: Network | str = Network.MAINNET, account: int = 0, change: int = 0,
              index: int = 0) -> "DerivationPath":
        """
        m/86'/coin_type'/account'/change/index
        """
        network = Network.from_tag(network)
        return cls((
            Hardened(XKEYS.TAPROOT_PURPOSE),
            Hardened(network.coin_type),
            Hardened(account),
            Normal(change),
            Normal(index),
        ))

    def __str__(self):
        return "/".join(["m"] + [str(c) for c in self.components])

    def __iter__(self) -> Iterator[ChildIndex]:
        return iter(self.components)

    def __len__(self):
        return len(self.components)

    def __truediv__(self, component: ChildIndex) -> "DerivationPath":
        return DerivationPath(self.components + (component,))

    @property
    def depth(self) -> int:
        return len(self.components)
