"""
Numeric helpers shared by the action formulas.

Every floor or ceiling taken over an accumulated fractional value is biased
by EPSILON first, so that values sitting exactly on an integer boundary
after floating-point drift still land on the intended side.
"""

import math

EPSILON = 1e-6

# Loop formulas index floors/tiers with a slightly smaller bias
FLOOR_EPSILON = 1e-7


def ceil_eps(value: float, epsilon: float = EPSILON) -> int:
    """Ceiling of value after subtracting epsilon (tick counts)."""
    return math.ceil(value - epsilon)


def floor_eps(value: float, epsilon: float = FLOOR_EPSILON) -> int:
    """Floor of value after adding epsilon (floor/tier indices)."""
    return math.floor(value + epsilon)


def fibonacci(n: int) -> int:
    """Fibonacci sequence starting at 1, 1, 2, 3, 5..."""
    a, b = 1, 0
    while n >= 0:
        a, b = a + b, a
        n -= 1
    return b


def precision3(value: float) -> float:
    """Round to three significant digits."""
    return float(f"{value:.3g}")
