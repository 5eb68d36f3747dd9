"""
Data models for the pricing engine.

Uses frozen dataclasses and Decimal amounts so results can be shared
between threads and compared for exact equality.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from .exceptions import InvalidCostError, UnknownRoleError


CENT = Decimal("0.01")
BASIS_POINT = Decimal("0.0001")
# Largest cost that still prices to the cent within the default decimal context
MAX_COST = Decimal("1E+15")

# Tags exported by the storefront's product table
LEGACY_ROLE_TAGS = {
    "ANCLA": "ANCHOR",
    "CONVENIENCIA": "CONVENIENCE",
    "IMPULSO": "IMPULSE",
}


class StrategicRole(str, Enum):
    """Merchandising role of a product, used to bias its margin."""
    ANCHOR = "ANCHOR"            # traffic driver, reduced margin
    CONVENIENCE = "CONVENIENCE"  # baseline
    IMPULSE = "IMPULSE"          # opportunistic, increased margin
    PREMIUM = "PREMIUM"          # differentiated, moderately increased margin

    @classmethod
    def parse(cls, value) -> 'StrategicRole':
        """
        Resolve a role from a member, its name, or a legacy tag.

        Matching is case-insensitive. Raises UnknownRoleError otherwise.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise UnknownRoleError("Strategic role is required")

        tag = str(value).strip().upper()
        tag = LEGACY_ROLE_TAGS.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            raise UnknownRoleError(f"Unknown strategic role: {value!r}") from None


def to_decimal(value) -> Decimal:
    """
    Convert a monetary input to Decimal.

    Floats go through str() so 0.65 becomes Decimal("0.65") rather than
    its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidCostError(f"Cost must be a number, got {value!r}")
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidCostError(f"Cost must be a number, got {value!r}") from None


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class PricingResult:
    """Outcome of pricing one product."""
    final_price: Decimal
    applied_margin: Decimal
    rule_version: str
    trace: tuple[TraceStep, ...] = field(default=())

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to the record format stored against a product."""
        return {
            "finalPrice": self.final_price,
            "appliedMargin": self.applied_margin,
            "ruleVersion": self.rule_version,
        }
