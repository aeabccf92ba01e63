"""
Helper functions for the mathematics of elliptic curves over prime fields
"""

__all__ = ["legendre_symbol", "is_quadratic_residue", "sqrt_mod_prime", "inverse_mod"]


def legendre_symbol(r: int, p: int) -> int:
    """
    Returns (r | p) = {
        0 if r % p == 0
        1 if r % p != 0 and r is a quadratic residue mod p
        -1 if r % p != 0 and r is a quadratic non-residue mod p
    }
    We use Euler's criterion which states:
        (r | p) = r^((p-1)/2) (mod p)
    """
    if r % p == 0:
        return 0
    criterion = pow(r, (p - 1) // 2, p)
    return -1 if criterion == p - 1 else 1


def is_quadratic_residue(n: int, p: int) -> bool:
    """
    Returns True if (n|p) != -1. (We include 0 as quadratic residues.)
    """
    return legendre_symbol(n, p) != -1


def sqrt_mod_prime(n: int, p: int) -> int | None:
    """
    Returns r with r^2 = n (mod p), or None if n is a non-residue.

    For p = 3 (mod 4) the root is n^((p+1)/4). Otherwise we fall back to Tonelli-Shanks.
    """
    n %= p
    if n == 0:
        return 0
    if not is_quadratic_residue(n, p):
        return None

    if p % 4 == 3:
        return pow(n, (p + 1) // 4, p)

    # Write p - 1 = 2^s * q with q odd
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    # Any quadratic non-residue
    z = 2
    while is_quadratic_residue(z, p):
        z += 1

    m, c, t, r = s, pow(z, q, p), pow(n, q, p), pow(n, (q + 1) // 2, p)
    while t != 1:
        # Least i with t^(2^i) = 1
        i, factor = 0, t
        while factor != 1:
            factor = factor * factor % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c = i, b * b % p
        t, r = t * c % p, r * b % p
    return r


def inverse_mod(n: int, p: int) -> int:
    if n % p == 0:
        raise ZeroDivisionError("0 has no inverse modulo p")
    return pow(n, -1, p)
