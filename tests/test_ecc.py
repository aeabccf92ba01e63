"""
Testing the Point and EllipticCurve classes and methods
"""
import random
from secrets import randbits

import pytest

from tapwallet.cryptography import EllipticCurve, Point, is_quadratic_residue, sqrt_mod_prime

MIN_RAND = 0
MAX_RAND = 0xffff

TWO_G = Point(
    0xc6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5,
    0x1ae168fea63dc339a3c58419466ceaeef7f632653266d0e1236431a950cfe52a
)


def test_point_at_infinity(curve):
    """
    We test aspects of the point at infinity, represented by Point() = (None, None)
    We also verify (None, x) and (x, None) yield value errors when constructed
    """
    inf_pt1 = Point()
    inf_pt2 = Point(x=None, y=None)

    assert inf_pt1 == inf_pt2, "Point at infinity construction mismatch."
    assert not inf_pt1, "Point at infinity should be falsy"
    assert curve.is_point_on_curve(inf_pt1), "Point at infinity not on curve error"

    with pytest.raises(ValueError):
        Point(x=random.randint(MIN_RAND, MAX_RAND), y=None)
    with pytest.raises(ValueError):
        Point(x=None, y=random.randint(MIN_RAND, MAX_RAND))


def test_small_curve_arithmetic():
    """
    We use the curve y^2 = x^3 + 7 (mod 11), which has 12 rational points including the point at infinity:
        (2,2), (2,9), (3,1), (3,10), (4,4), (4,7), (5,0), (6,5), (6,6), (7,3), (7,8)
    (2,2) + (2,9) = point at infinity
    (2,2) + (3,1) = (7,3)
    """
    points = [(2, 2), (2, 9), (3, 1), (3, 10), (4, 4), (4, 7), (5, 0), (6, 5), (6, 6), (7, 3), (7, 8)]
    known_order = 12
    test_curve = EllipticCurve(a=0, b=7, p=11, order=known_order, generator=Point(2, 2))

    for pt in points:
        assert test_curve.is_point_on_curve(Point(*pt)), f"{pt} should be on the curve"
    on_curve = [(x, y) for x in range(11) for y in range(11) if test_curve.is_point_on_curve(Point(x, y))]
    assert on_curve == points, "Listed points must be every affine point of the curve"
    assert not test_curve.is_point_on_curve(Point(8, 1))

    # Point addition
    p1, p2, p3 = Point(2, 2), Point(2, 9), Point(3, 1)
    known_point = Point(7, 3)
    assert test_curve.add_points(p1, p2) == Point()
    assert test_curve.add_points(p1, p3) == known_point
    assert test_curve.add_points(p3, p1) == known_point
    assert test_curve.negate(known_point) == Point(7, 8)

    # Scalar multiplication agrees with repeated addition, for an arbitrary point and for the table-backed generator
    for base in (known_point, test_curve.generator):
        running = Point()
        for k in range(1, known_order + 1):
            running = test_curve.add_points(running, base)
            assert test_curve.scalar_multiplication(k, base) == running
        assert running == Point(), "Every point order divides the group order"

    # x coordinates
    assert test_curve.is_x_on_curve(5)
    assert not test_curve.is_x_on_curve(8)
    assert test_curve.lift_x(5) == Point(5, 0)
    assert test_curve.lift_x(7) == Point(7, 8)
    assert test_curve.lift_x(4) == Point(4, 4)
    with pytest.raises(ValueError):
        test_curve.lift_x(8)


def test_rejects_invalid_curves():
    with pytest.raises(ValueError):
        EllipticCurve(a=0, b=0, p=11, order=12, generator=Point(2, 2))
    with pytest.raises(ValueError):
        EllipticCurve(a=0, b=7, p=11, order=12, generator=Point(8, 1))


def test_secp256k1(curve):
    assert curve.curve == "secp256k1"
    assert curve.multiply_generator(1) == curve.generator
    assert curve.multiply_generator(2) == TWO_G
    assert curve.add_points(curve.generator, curve.generator) == TWO_G
    assert curve.multiply_generator(curve.order) == Point()

    random_256_bit_integer = randbits(256)
    random_point = curve.multiply_generator(random_256_bit_integer)
    (t_x, t_y) = random_point
    inverse_random_point = Point(t_x, -t_y % curve.p)
    assert curve.scalar_multiplication(curve.order - 1, random_point) == inverse_random_point

    # Window table agrees with double-and-add
    a, b = randbits(256), randbits(256)
    sum_point = curve.add_points(curve.multiply_generator(a), curve.multiply_generator(b))
    assert curve.multiply_generator(a + b) == sum_point
    assert curve.scalar_multiplication(b, curve.multiply_generator(a)) == curve.multiply_generator(a * b)


def test_lift_x_and_compression(curve):
    random_point = curve.multiply_generator(randbits(256))
    lifted = curve.lift_x(random_point.x)
    assert lifted.has_even_y
    assert lifted in (random_point, curve.negate(random_point))

    compressed = curve.compressed(random_point)
    assert len(compressed) == 33
    assert compressed[0] == (0x02 if random_point.has_even_y else 0x03)
    assert compressed[1:] == random_point.x.to_bytes(32, "big")

    # x = 5 has x^3 + 7 = 132, a non-residue modulo p
    assert not curve.is_x_on_curve(5)
    with pytest.raises(ValueError):
        curve.lift_x(5)
    with pytest.raises(ValueError):
        curve.lift_x(curve.p)


def test_curve_is_immutable(curve):
    with pytest.raises(AttributeError):
        curve.order = 7
    with pytest.raises(AttributeError):
        curve.generator = TWO_G


def test_sqrt_mod_prime():
    # 17 = 1 (mod 4) exercises Tonelli-Shanks, 23 = 3 (mod 4) the direct root
    for p in (17, 23, 97):
        for n in range(p):
            r = sqrt_mod_prime(n, p)
            if is_quadratic_residue(n, p):
                assert r is not None and r * r % p == n
            else:
                assert r is None
