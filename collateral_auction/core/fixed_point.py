# collateral_auction/core/fixed_point.py

"""
Checked fixed-point helpers over the unsigned 256-bit domain.

Every result is range-checked; leaving [0, MAX_UINT] raises instead of
wrapping, so a bad intermediate aborts the whole operation that produced it.
"""

from .. import config
from .errors import AuctionHouseError, FailureReason

WAD = config.WAD
RAY = config.RAY
RAD = config.RAD
MAX_UINT = config.MAX_UINT


def _checked(value: int) -> int:
    if value > MAX_UINT:
        raise AuctionHouseError(FailureReason.ARITHMETIC_OVERFLOW, str(value))
    if value < 0:
        raise AuctionHouseError(FailureReason.ARITHMETIC_UNDERFLOW, str(value))
    return value


def add(x: int, y: int) -> int:
    return _checked(x + y)


def subtract(x: int, y: int) -> int:
    return _checked(x - y)


def multiply(x: int, y: int) -> int:
    return _checked(x * y)


def wmultiply(x: int, y: int) -> int:
    return multiply(x, y) // WAD


def rmultiply(x: int, y: int) -> int:
    return multiply(x, y) // RAY


def wdivide(x: int, y: int) -> int:
    if y == 0:
        raise AuctionHouseError(FailureReason.ARITHMETIC_OVERFLOW, "division by zero")
    return multiply(x, WAD) // y


def rdivide(x: int, y: int) -> int:
    if y == 0:
        raise AuctionHouseError(FailureReason.ARITHMETIC_OVERFLOW, "division by zero")
    return multiply(x, RAY) // y


def rpower(x: int, n: int, base: int) -> int:
    """
    x**n for a fixed-point x with the given base, by repeated squaring.

    Each squaring and multiplication rounds half up, matching the usual
    on-chain rpow so discount schedules are reproducible to the last unit.
    """
    if x == 0:
        return base if n == 0 else 0
    z = base if n % 2 == 0 else x
    half = base // 2
    n //= 2
    while n:
        xx = multiply(x, x)
        x = add(xx, half) // base
        if n % 2:
            zx = multiply(z, x)
            z = add(zx, half) // base
        n //= 2
    return z


def minimum(x: int, y: int) -> int:
    return x if x <= y else y


def maximum(x: int, y: int) -> int:
    return x if x >= y else y


def from_number(value: float, scale: int = WAD) -> int:
    """Converts a float from the simulation side into a fixed-point integer."""
    return int(round(value * scale))


def to_number(value: int, scale: int = WAD) -> float:
    return value / scale
