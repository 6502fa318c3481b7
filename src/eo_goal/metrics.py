"""Goal metrics computed with exact decimal arithmetic.

Every operation goes through ``CURRENCY_CONTEXT`` rather than the thread's
current decimal context, so results never depend on global state.
"""

from decimal import (
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)

CURRENCY_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

HUNDRED = Decimal(100)
THOUSAND = Decimal(1000)
CENTS = Decimal("0.01")


def _floor(value: Decimal) -> Decimal:
    floored = value.to_integral_value(rounding=ROUND_FLOOR, context=CURRENCY_CONTEXT)
    # Avoid rendering "-0"
    return floored if floored else Decimal(0)


def percentage_of_goal(amount: Decimal, goal: Decimal) -> str:
    """Percent of ``goal`` reached, rounded down: ``floor(amount / goal * 100)``."""
    if goal <= 0:
        raise ValueError("goal must be positive")
    scaled = CURRENCY_CONTEXT.multiply(amount, HUNDRED)
    percent = _floor(CURRENCY_CONTEXT.divide(scaled, goal))
    return f"{percent:f}"


def format_thousands(amount: Decimal) -> str:
    """Whole thousands of dollars, rounded down: ``1534230`` -> ``"$1,534k"``."""
    thousands = _floor(CURRENCY_CONTEXT.divide(amount, THOUSAND))
    return f"${thousands:,f}k"


def format_fixed(amount: Decimal) -> str:
    """Two decimal places, half-up: ``1534230.505`` -> ``"1534230.51"``."""
    return f"{amount.quantize(CENTS, rounding=ROUND_HALF_UP, context=CURRENCY_CONTEXT):f}"
