"""
Elliptic Curve Class

An EllipticCurve instance is the curve context shared by every stage of the derivation pipeline. Construction builds a
fixed-base window table for the generator, so a context is built once (see secp256k1()) and passed explicitly to the
components that need curve arithmetic. Instances hold no secret material and refuse mutation after construction, so
they are safe to share read-only between threads.
"""
import json
from dataclasses import dataclass
from typing import Optional, Tuple

from tapwallet.core import ECC
from tapwallet.cryptography.ecc_math import inverse_mod, is_quadratic_residue, sqrt_mod_prime

__all__ = ["EllipticCurve", "Point", "secp256k1"]

WINDOW_BITS = ECC.WINDOW_BITS
WINDOW_SIZE = 1 << WINDOW_BITS


@dataclass(frozen=True)
class Point:
    """Immutable point representation. Point() is the point at infinity."""
    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        """Ensure point at infinity is always (None, None)"""
        if (self.x is None) != (self.y is None):
            raise ValueError("Point at infinity must have both coordinates as None")

    def __bool__(self) -> bool:
        """Point at infinity is falsy"""
        return self.x is not None and self.y is not None

    def __iter__(self):
        """Allow tuple unpacking: x, y = point"""
        return iter((self.x, self.y))

    @property
    def has_even_y(self) -> bool:
        return bool(self) and self.y % 2 == 0


class EllipticCurve:
    """
    We instantiate an elliptic curve E of the form

        y^2 = x^3 + ax + b (mod p).

    We let E(F_p) denote the corresponding cyclic abelian group, comprised of the rational points of E and the
    point at infinity. The order variable refers to the order of this group, generated by the given generator.
    """
    __slots__ = ("a", "b", "p", "order", "generator", "curve", "_window_table")

    def __init__(self, a: int, b: int, p: int, order: int, generator: Tuple[int, int] | Point,
                 curve: Optional[str] = None):
        # Verify non-singular
        if (4 * pow(a, 3) + 27 * pow(b, 2)) % p == 0:
            raise ValueError("Cannot use Singular curve in ECC")

        generator = Point(*generator) if isinstance(generator, tuple) else generator
        for name, value in (("a", a), ("b", b), ("p", p), ("order", order), ("generator", generator),
                            ("curve", curve)):
            object.__setattr__(self, name, value)

        if not self.is_point_on_curve(generator):
            raise ValueError("Generator is not a point on the curve")

        object.__setattr__(self, "_window_table", self._build_window_table())

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable once constructed")

    def __repr__(self):
        hex_dict = {
            'a': hex(self.a),
            'b': hex(self.b),
            'p': hex(self.p),
            'order': hex(self.order),
            'generator': (hex(self.generator.x), hex(self.generator.y)),
        }
        if self.curve:
            hex_dict.update({'curve': self.curve})
        return json.dumps(hex_dict)

    # --- Precomputation --- #

    def _build_window_table(self) -> tuple:
        """
        Row i holds j * 16^i * G for j = 0..15, so that n*G is a sum of one entry per 4-bit window of n.
        """
        rows = []
        base = self.generator
        for _ in range((self.order.bit_length() + WINDOW_BITS - 1) // WINDOW_BITS):
            row = [Point(), base]
            for _ in range(2, WINDOW_SIZE):
                row.append(self.add_points(row[-1], base))
            rows.append(tuple(row))
            base = self.add_points(row[-1], base)
        return tuple(rows)

    # --- Points on curve --- #

    def x_terms(self, x: int) -> int:
        """Compute x^3 + ax + b mod p."""
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    def is_point_on_curve(self, point: Point) -> bool:
        """Returns true if the given point is on the curve. The point at infinity is on every curve."""
        if not point:
            return True
        x, y = point
        if not (0 <= x < self.p and 0 <= y < self.p):
            return False
        return (y * y - self.x_terms(x)) % self.p == 0

    def is_x_on_curve(self, x: int) -> bool:
        """
        x is the first coordinate of a point iff x^3 + ax + b is a quadratic residue modulo p (0 included).
        """
        return 0 <= x < self.p and is_quadratic_residue(self.x_terms(x), self.p)

    def lift_x(self, x: int) -> Point:
        """
        Returns the unique point with first coordinate x and even y-coordinate (BIP340 lift_x)
        """
        if not 0 <= x < self.p:
            raise ValueError("x coordinate not a field element")
        y = sqrt_mod_prime(self.x_terms(x), self.p)
        if y is None:
            raise ValueError(f"Given x coordinate {hex(x)} is not on the curve.")
        return Point(x, y if y % 2 == 0 else self.p - y)

    def compressed(self, point: Point) -> bytes:
        """Returns the 33-byte SEC compressed encoding"""
        if not point:
            raise ValueError("Point at infinity has no compressed encoding")
        prefix = b'\x02' if point.y % 2 == 0 else b'\x03'
        return prefix + point.x.to_bytes(ECC.COORD_BYTES, "big")

    # --- Group operations --- #

    def negate(self, point: Point) -> Point:
        if not point:
            return point
        return Point(point.x, (-point.y) % self.p)

    def add_points(self, point1: Point, point2: Point) -> Point:
        """
        Adding points using the elliptic curve addition rules.
        """
        # Point at infinity cases
        if not point1:
            return point2
        if not point2:
            return point1

        x1, y1 = point1
        x2, y2 = point2

        if x1 == x2:
            # Inverses, or a point on the x-axis doubled
            if (y1 + y2) % self.p == 0:
                return Point()
            m = (3 * x1 * x1 + self.a) * inverse_mod(2 * y1, self.p) % self.p
        else:
            m = (y2 - y1) * inverse_mod(x2 - x1, self.p) % self.p

        x3 = (m * m - x1 - x2) % self.p
        y3 = (m * (x1 - x3) - y1) % self.p
        return Point(x3, y3)

    def scalar_multiplication(self, n: int, point: Point) -> Point:
        """
        Double-and-add from the most significant bit. Multiples of the generator use the window table instead.
        """
        if not point:
            return Point()
        if point == self.generator:
            return self.multiply_generator(n)

        n %= self.order
        result = Point()
        for bit in bin(n)[2:] if n else "":
            result = self.add_points(result, result)
            if bit == "1":
                result = self.add_points(result, point)
        return result

    def multiply_generator(self, n: int) -> Point:
        """Multiply generator by scalar n using one table lookup per window"""
        n %= self.order
        result = Point()
        mask = WINDOW_SIZE - 1
        for row in self._window_table:
            if n == 0:
                break
            result = self.add_points(result, row[n & mask])
            n >>= WINDOW_BITS
        return result


def secp256k1() -> EllipticCurve:
    """
    Build the secp256k1 curve context. Construction precomputes the generator table; callers keep one instance.
    """
    return EllipticCurve(
        a=0,
        b=7,
        p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
        order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
        generator=(0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
                   0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8),
        curve="secp256k1"
    )
