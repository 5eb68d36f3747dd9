"""
Pricing Engine - Core price resolution from wholesale cost and strategic role.

Pipeline for every product:
- Validate cost (> 0)
- Resolve margin (cost band + role adjustment, clamped)
- Raw price = cost × (1 + margin)
- Psychological rounding with safety net
- Re-derive the margin actually realized after rounding

The engine holds no mutable state. One instance may be shared across threads.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .exceptions import InvalidCostError, PricingInvariantViolation
from .margin_resolver import resolve_margin_with_trace
from .models import BASIS_POINT, MAX_COST, PricingResult, StrategicRole, TraceStep, to_decimal
from .rounding import psychological_round_with_trace
from .rule_set import RuleSet, DEFAULT_RULE_SET
from ..utils.logger import get_logger


logger = get_logger(__name__)

RULE_VERSION = DEFAULT_RULE_SET.version


class PricingEngine:
    """
    Computes retail prices that always exceed cost.

    Resolution order:
    1. Base margin from cost bands (first match, exclusive upper bounds)
    2. Role adjustment (ANCHOR -5%, CONVENIENCE 0, IMPULSE +10%, PREMIUM +3%)
    3. Clamp to [8%, 40%]
    4. Round up to a .59/.99 ending (next tenth below 1)
    5. Safety net if rounding did not land above cost
    """

    def __init__(self, rule_set: Optional[RuleSet] = None):
        self.rule_set = rule_set or DEFAULT_RULE_SET

    @property
    def rule_version(self) -> str:
        return self.rule_set.version

    @staticmethod
    def validate_cost(cost) -> Decimal:
        """Return cost as Decimal, raising InvalidCostError unless it is finite, > 0 and < MAX_COST."""
        if cost is None:
            raise InvalidCostError("Cost is required")
        amount = to_decimal(cost)
        if not amount.is_finite():
            raise InvalidCostError(f"Cost must be finite, got {cost!r}")
        if amount <= 0:
            raise InvalidCostError("Cost must be greater than zero")
        if amount >= MAX_COST:
            raise InvalidCostError(f"Cost must be below {MAX_COST}, got {cost}")
        return amount

    def calculate_price(self, cost, role) -> PricingResult:
        """
        Calculate the final price for a product.

        Args:
            cost: Wholesale cost (Decimal, int, str or float)
            role: StrategicRole or role tag

        Returns:
            PricingResult with final price, realized margin and rule version

        Raises:
            InvalidCostError: cost is not a number greater than zero
            UnknownRoleError: role is not a known strategic role
            PricingInvariantViolation: the price came out at or below cost
        """
        cost = self.validate_cost(cost)
        role = StrategicRole.parse(role)

        trace = [TraceStep("Input", f"Pricing {role.value} product", f"cost {cost}")]

        margin, margin_trace = resolve_margin_with_trace(cost, role, self.rule_set)
        for step, desc, val in margin_trace:
            trace.append(TraceStep(step, desc, val))

        raw_price = cost * (1 + margin)
        trace.append(TraceStep("Raw Price", f"{cost} × (1 + {margin})", f"{raw_price}"))

        final_price, rounding_trace = psychological_round_with_trace(raw_price, cost)
        for step, desc, val in rounding_trace:
            trace.append(TraceStep(step, desc, val))

        applied_margin = ((final_price - cost) / cost).quantize(BASIS_POINT, rounding=ROUND_HALF_UP)
        trace.append(TraceStep("Applied Margin", "Margin realized after rounding", f"{applied_margin}"))

        if final_price <= cost:
            logger.error(
                "Pricing invariant violated: price %s not above cost %s (role %s, rules %s)",
                final_price, cost, role.value, self.rule_version
            )
            raise PricingInvariantViolation(
                f"Pricing calculation invalid: price {final_price} not above cost {cost}"
            )

        logger.debug(
            "Priced %s cost %s at %s (margin %s, rules %s)",
            role.value, cost, final_price, applied_margin, self.rule_version
        )

        return PricingResult(
            final_price=final_price,
            applied_margin=applied_margin,
            rule_version=self.rule_version,
            trace=tuple(trace),
        )


def get_engine() -> PricingEngine:
    """Engine using the configured rule set."""
    from ..config.settings import get_settings
    return PricingEngine(get_settings().rule_set)


def calculate_price(cost, role) -> PricingResult:
    """Calculate a price with the configured rule set."""
    return get_engine().calculate_price(cost, role)
