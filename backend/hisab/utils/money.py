from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[int, float, str, Decimal]

_CENT = Decimal("0.01")

# largest value a 64-bit INTEGER column holds
MAX_STORED_INT = 2 ** 63 - 1


def to_cents(value: Number) -> int:
    """Convert a decimal amount (``2.5``, ``"2.50"``) to integer cents."""
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    try:
        amount = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    cents = int(amount * 100)
    if abs(cents) > MAX_STORED_INT:
        raise ValueError(f"Amount out of range: {value!r}")
    return cents


def from_cents(cents: int) -> float:
    """Render cents as a plain JSON-friendly number (250 -> 2.5)."""
    return float(Decimal(cents) / 100)
