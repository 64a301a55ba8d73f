"""
Checked uint256 arithmetic.

Python integers never overflow, so the range is enforced explicitly
to keep results identical to the contract this ledger mirrors.
"""

from rebase_vault.config.constants import MAX_UINT256
from rebase_vault.utils.exceptions import ArithmeticOverflow


def ensure_uint256(value: int, operation: str) -> int:
    """Return value if it fits in uint256, raise otherwise."""
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflow(operation)
    return value


def checked_add(a: int, b: int, operation: str = "add") -> int:
    return ensure_uint256(a + b, operation)


def checked_sub(a: int, b: int, operation: str = "sub") -> int:
    return ensure_uint256(a - b, operation)


def checked_mul(a: int, b: int, operation: str = "mul") -> int:
    return ensure_uint256(a * b, operation)


def accrual_multiplier(
    rate: int, elapsed: int, precision_factor: int
) -> int:
    """
    Linear accrual multiplier.

    Formula: precision_factor + rate * elapsed

    Args:
        rate: Per-second rate scaled by precision_factor
        elapsed: Seconds since last settlement
        precision_factor: Fixed-point scale

    Returns:
        Multiplier scaled by precision_factor (>= precision_factor)
    """
    linear = checked_mul(rate, elapsed, "rate * elapsed")
    return checked_add(precision_factor, linear, "accrual multiplier")


def apply_multiplier(
    principal: int, multiplier: int, precision_factor: int
) -> int:
    """
    Scale principal by a multiplier, rounding down.

    Formula: principal * multiplier // precision_factor
    """
    scaled = checked_mul(principal, multiplier, "principal * multiplier")
    return scaled // precision_factor
