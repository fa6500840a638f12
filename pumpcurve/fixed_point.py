"""
Overflow-checked integer math for on-chain quantities

Reserves, supply and trade amounts are u64 on chain. Python ints are
unbounded, so intermediate products never overflow here; what has to be
checked is that inputs and results stay inside the u64 range.
"""

from pumpcurve.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    InsufficientLiquidityError,
    InvalidAmountError,
)


U64_MAX = 2**64 - 1
BPS_DENOMINATOR = 10_000


def require_u64(value: int, name: str = "amount") -> int:
    """
    Validate that value is an unsigned 64-bit integer

    Raises:
        InvalidAmountError: If value is not an int or is negative
        ArithmeticOverflowError: If value exceeds U64_MAX
    """
    # bool is an int subclass but never a valid quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmountError(f"{name} must be non-negative, got {value}")
    if value > U64_MAX:
        raise ArithmeticOverflowError(f"{name} exceeds u64 range: {value}")
    return value


def require_basis_points(bps: int, name: str = "fee_basis_points") -> int:
    """Validate a basis-point rate (0 to 10000 inclusive)"""
    require_u64(bps, name)
    if bps > BPS_DENOMINATOR:
        raise InvalidAmountError(f"{name} must be <= {BPS_DENOMINATOR}, got {bps}")
    return bps


def mul_div(a: int, b: int, c: int) -> int:
    """
    Compute a * b // c with a wide intermediate product

    Raises:
        DivisionByZeroError: If c is zero
        ArithmeticOverflowError: If the quotient does not fit in u64
    """
    if c == 0:
        raise DivisionByZeroError("mul_div divisor is zero")

    result = (a * b) // c
    if result > U64_MAX:
        raise ArithmeticOverflowError(f"mul_div result exceeds u64 range: {result}")
    return result


def apply_fee_basis_points(amount: int, bps: int) -> int:
    """
    Fee owed on amount at the given rate, rounded down

    The deducted fee is never larger than the exact proportional amount.
    """
    return mul_div(amount, bps, BPS_DENOMINATOR)


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U64_MAX:
        raise ArithmeticOverflowError(f"u64 addition overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    """Subtract b from a, failing instead of wrapping below zero"""
    if b > a:
        raise InsufficientLiquidityError(f"u64 subtraction underflow: {a} - {b}")
    return a - b
