"""
The ScopedSecret class - a mutable byte buffer for seeds, chain codes and secret keys that can be overwritten with
zeroes when its owner is done with it.

Python gives no guarantee that immutable bytes or ints are ever cleared, so secret material lives in a bytearray owned
by exactly one ScopedSecret. Access goes through reveal(), which hands out a read-only view that is released when the
block exits. Using the object as a context manager wipes the buffer on every exit path, including exceptions.
"""
import hmac
from contextlib import contextmanager
from typing import Iterator

from .exceptions import WipedSecretError

__all__ = ["ScopedSecret"]


class ScopedSecret:
    __slots__ = ("_buffer", "_wiped")

    def __init__(self, data: bytes | bytearray | memoryview):
        self._buffer = bytearray(data)
        self._wiped = False

        # Take ownership of a mutable source
        if isinstance(data, bytearray):
            data[:] = bytes(len(data))

    @classmethod
    def from_int(cls, value: int, length: int = 32) -> "ScopedSecret":
        return cls(value.to_bytes(length, "big"))

    # --- OVERRIDES --- #
    def __enter__(self) -> "ScopedSecret":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buffer)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ScopedSecret):
            return NotImplemented
        self._check()
        other._check()
        return hmac.compare_digest(self._buffer, other._buffer)

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._buffer)} bytes"
        return f"ScopedSecret(<{state}>)"

    # --- ACCESS --- #
    def _check(self):
        if self._wiped:
            raise WipedSecretError("Secret material has already been wiped")

    @contextmanager
    def reveal(self) -> Iterator[memoryview]:
        """
        Yields a read-only view of the secret bytes, valid only inside the with-block
        """
        self._check()
        view = memoryview(self._buffer).toreadonly()
        try:
            yield view
        finally:
            view.release()

    def to_int(self) -> int:
        self._check()
        return int.from_bytes(self._buffer, "big")

    def to_bytes(self) -> bytes:
        """
        Returns an immutable copy. The copy is outside the scope of wipe().
        """
        self._check()
        return bytes(self._buffer)

    def copy(self) -> "ScopedSecret":
        self._check()
        return ScopedSecret(bytes(self._buffer))

    # --- LIFETIME --- #
    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """
        Overwrite the buffer with zeroes. Safe to call more than once.
        """
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True
