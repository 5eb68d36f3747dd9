"""
Margin Resolver - Resolves the target margin for a cost and strategic role.

Resolution order:
1. Base margin from the first cost band whose (exclusive) upper bound exceeds cost
2. Add the role adjustment
3. Clamp to [min_margin, max_margin]
"""
from decimal import Decimal

from .models import StrategicRole
from .rule_set import RuleSet, DEFAULT_RULE_SET


def clamp_margin(margin: Decimal, rule_set: RuleSet = DEFAULT_RULE_SET) -> Decimal:
    """Pull margin into [min_margin, max_margin]. Both bounds are inclusive."""
    return max(rule_set.min_margin, min(rule_set.max_margin, margin))


def resolve_margin(cost: Decimal, role, rule_set: RuleSet = DEFAULT_RULE_SET) -> Decimal:
    """Resolve the margin ratio to apply over cost."""
    margin, _ = resolve_margin_with_trace(cost, role, rule_set)
    return margin


def resolve_margin_with_trace(
    cost: Decimal,
    role,
    rule_set: RuleSet = DEFAULT_RULE_SET
) -> tuple[Decimal, list]:
    """
    Resolve margin with trace of resolution steps.

    Returns (margin, trace_steps) where each step is (step, description, value).
    """
    role = StrategicRole.parse(role)
    trace = []

    band = rule_set.find_band(cost)
    if band.max_cost is None:
        trace.append(("Cost Band", f"Cost {cost} in open-ended band", f"{band.margin}"))
    else:
        trace.append(("Cost Band", f"Cost {cost} below {band.max_cost}", f"{band.margin}"))

    adjustment = rule_set.adjustment_for(role)
    margin = band.margin + adjustment
    trace.append(("Role Adjustment", f"{role.value} adjusts by {adjustment}", f"{margin}"))

    clamped = clamp_margin(margin, rule_set)
    if clamped != margin:
        trace.append((
            "Clamp",
            f"Margin clamped to [{rule_set.min_margin}, {rule_set.max_margin}]",
            f"{clamped}"
        ))

    return clamped, trace
