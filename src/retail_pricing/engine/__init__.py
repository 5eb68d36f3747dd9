"""Engine subpackage - core pricing logic and resolution."""
from .exceptions import (
    PricingError,
    InvalidCostError,
    UnknownRoleError,
    MissingRoleError,
    RuleSetError,
    PricingInvariantViolation,
)
from .models import StrategicRole, PricingResult, TraceStep
from .rule_set import CostBand, RuleSet, DEFAULT_RULE_SET, load_rule_set
from .margin_resolver import resolve_margin
from .rounding import psychological_round
from .pricing_engine import PricingEngine, calculate_price, RULE_VERSION

__all__ = [
    'PricingEngine', 'calculate_price', 'RULE_VERSION',
    'StrategicRole', 'PricingResult', 'TraceStep',
    'CostBand', 'RuleSet', 'DEFAULT_RULE_SET', 'load_rule_set',
    'resolve_margin', 'psychological_round',
    'PricingError', 'InvalidCostError', 'UnknownRoleError', 'MissingRoleError',
    'RuleSetError', 'PricingInvariantViolation',
]
