"""
Exceptions raised by the pricing engine.

Caller errors derive from PricingError (and ValueError). A broken price > cost
guarantee is an AssertionError subclass: it signals a defect, not bad input.
"""


class PricingError(Exception):
    """Base class for caller-facing pricing errors."""


class InvalidCostError(PricingError, ValueError):
    """Cost is missing, not a number, or not strictly positive."""


class UnknownRoleError(PricingError, ValueError):
    """Strategic role tag does not name a known role."""


class MissingRoleError(PricingError, ValueError):
    """A product carries a cost but no strategic role."""


class RuleSetError(PricingError, ValueError):
    """A rule set is malformed."""


class PricingInvariantViolation(AssertionError):
    """The computed price is not above cost. Never expected in practice."""
