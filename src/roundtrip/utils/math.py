"""
Mathematical utilities for trading calculations.

Provides precision-safe scaling between human-readable token amounts and
the atomic integer amounts used on chain.
"""

from decimal import ROUND_DOWN, Decimal
from typing import Final


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-10


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def to_atomic(amount: float, decimals: int) -> int:
    """
    Convert a human-readable amount to atomic units.

    Scaling happens on the decimal form of the amount so that values like
    0.1 scale to exactly 100000 at six decimals. Anything finer than one
    atomic unit is truncated.

    Args:
        amount: Amount in token units (e.g., 1.5 USDC).
        decimals: Token decimal precision.

    Returns:
        Amount in the token's smallest denomination.

    Example:
        >>> to_atomic(1.5, 6)
        1500000
    """
    scaled = Decimal(repr(amount)).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_atomic(atomic_amount: int, decimals: int) -> float:
    """
    Convert atomic units to a human-readable amount.

    Args:
        atomic_amount: Amount in the token's smallest denomination.
        decimals: Token decimal precision.

    Returns:
        Amount in token units.

    Example:
        >>> from_atomic(1500000, 6)
        1.5
    """
    return float(Decimal(int(atomic_amount)).scaleb(-decimals))


def format_profit(amount: float, symbol: str = "") -> str:
    """
    Format a profit amount for display.

    Args:
        amount: Profit in token units.
        symbol: Optional token symbol suffix.

    Returns:
        Signed amount string.
    """
    sign = "+" if amount >= 0 else ""
    suffix = f" {symbol}" if symbol else ""
    return f"{sign}{amount:.6f}{suffix}"
