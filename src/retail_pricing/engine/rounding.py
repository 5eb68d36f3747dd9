"""
Psychological Rounding - Snaps raw prices to attractive price endings.

Prices below 1 are raised to the next tenth (0.85 → 0.90).
Prices from 1 up end in .59 or .99, always rounding upward.
If rounding lands at or below cost, a safety price just above cost is used.
"""
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP

from .models import CENT
from ..utils.logger import get_logger


logger = get_logger(__name__)

UNIT = Decimal("1")
TENTHS = Decimal("10")
CENTS = Decimal("100")

ENDING_THRESHOLD = Decimal("0.49")
LOW_ENDING = Decimal("0.59")
HIGH_ENDING = Decimal("0.99")
SAFETY_BUMP = Decimal("0.05")


def snap_to_ending(raw_price: Decimal) -> Decimal:
    """Apply the ending rules without the safety net."""
    if raw_price < UNIT:
        return (raw_price * TENTHS).to_integral_value(rounding=ROUND_CEILING) / TENTHS

    whole = raw_price.to_integral_value(rounding=ROUND_FLOOR)
    fraction = raw_price - whole
    if fraction <= ENDING_THRESHOLD:
        return whole + LOW_ENDING
    return whole + HIGH_ENDING


def safety_price(cost: Decimal) -> Decimal:
    """Cost rounded up to the cent plus a 0.05 bump."""
    ceiling = (cost * CENTS).to_integral_value(rounding=ROUND_CEILING) / CENTS
    return (ceiling + SAFETY_BUMP).quantize(CENT, rounding=ROUND_HALF_UP)


def psychological_round(raw_price: Decimal, cost: Decimal) -> Decimal:
    """Round raw_price to a price ending, guaranteeing the result exceeds cost."""
    price, _ = psychological_round_with_trace(raw_price, cost)
    return price


def psychological_round_with_trace(raw_price: Decimal, cost: Decimal) -> tuple[Decimal, list]:
    """
    Round with trace of the rounding steps.

    Returns (price, trace_steps) where each step is (step, description, value).
    """
    trace = []

    rounded = snap_to_ending(raw_price)
    if raw_price < UNIT:
        trace.append(("Rounding", "Sub-unit price raised to next tenth", f"{rounded:.2f}"))
    else:
        trace.append(("Rounding", f"Fraction of {raw_price} snapped to ending", f"{rounded:.2f}"))

    if rounded <= cost:
        fallback = safety_price(cost)
        logger.warning(
            "Rounded price %s not above cost %s, using safety price %s",
            rounded, cost, fallback
        )
        trace.append(("Safety Net", f"Rounded price not above cost {cost}", f"{fallback:.2f}"))
        rounded = fallback

    return rounded.quantize(CENT, rounding=ROUND_HALF_UP), trace
