"""
Rule Set - Cost bands, role adjustments and margin limits.

The built-in v1.1 tables live in DEFAULT_RULE_SET. Alternative tables can be
loaded from a JSON file for tuning without touching code:

    {
      "version": "v1.2",
      "min_margin": "0.08",
      "max_margin": "0.40",
      "cost_bands": [
        {"max_cost": "3", "margin": "0.30"},
        {"max_cost": null, "margin": "0.10"}
      ],
      "role_adjustments": {"ANCHOR": "-0.05", "CONVENIENCE": "0",
                           "IMPULSE": "0.10", "PREMIUM": "0.03"}
    }
"""
import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from .exceptions import RuleSetError, UnknownRoleError, InvalidCostError
from .models import StrategicRole, to_decimal


@dataclass(frozen=True)
class CostBand:
    """Costs strictly below max_cost get this base margin. None means open-ended."""
    max_cost: Optional[Decimal]
    margin: Decimal

    def contains(self, cost: Decimal) -> bool:
        return self.max_cost is None or cost < self.max_cost


@dataclass(frozen=True)
class RuleSet:
    """An immutable, versioned set of pricing rules."""
    version: str
    cost_bands: tuple[CostBand, ...]
    role_adjustments: Mapping[StrategicRole, Decimal]
    min_margin: Decimal
    max_margin: Decimal

    def __post_init__(self):
        # Never share containers with the caller
        object.__setattr__(self, 'cost_bands', tuple(self.cost_bands))
        object.__setattr__(self, 'role_adjustments', MappingProxyType(dict(self.role_adjustments)))
        self.validate()

    def validate(self):
        """Raise RuleSetError if the tables cannot price every positive cost."""
        if not self.version:
            raise RuleSetError("Rule set version is required")

        if not self.cost_bands:
            raise RuleSetError("At least one cost band is required")

        *bounded, last = self.cost_bands
        if last.max_cost is not None:
            raise RuleSetError("Last cost band must be open-ended (max_cost null)")

        previous = Decimal("0")
        for band in bounded:
            if band.max_cost is None:
                raise RuleSetError("Only the last cost band may be open-ended")
            if band.max_cost <= previous:
                raise RuleSetError(
                    f"Cost bands must be strictly ascending: {band.max_cost} after {previous}"
                )
            previous = band.max_cost

        missing = [r.value for r in StrategicRole if r not in self.role_adjustments]
        if missing:
            raise RuleSetError(f"Missing role adjustments for: {', '.join(missing)}")

        if self.min_margin < 0:
            raise RuleSetError("min_margin must not be negative")
        if self.min_margin > self.max_margin:
            raise RuleSetError(
                f"min_margin {self.min_margin} exceeds max_margin {self.max_margin}"
            )

    def base_margin(self, cost: Decimal) -> Decimal:
        """Base margin of the first band containing cost (bands scanned in order)."""
        return self.find_band(cost).margin

    def find_band(self, cost: Decimal) -> CostBand:
        for band in self.cost_bands:
            if band.contains(cost):
                return band
        # validate() guarantees an open-ended last band
        raise RuleSetError(f"No cost band matches cost {cost}")

    def adjustment_for(self, role: StrategicRole) -> Decimal:
        return self.role_adjustments[role]


DEFAULT_RULE_SET = RuleSet(
    version="v1.1",
    cost_bands=(
        CostBand(max_cost=Decimal("3"), margin=Decimal("0.30")),
        CostBand(max_cost=Decimal("15"), margin=Decimal("0.20")),
        CostBand(max_cost=Decimal("60"), margin=Decimal("0.15")),
        CostBand(max_cost=None, margin=Decimal("0.10")),
    ),
    role_adjustments={
        StrategicRole.ANCHOR: Decimal("-0.05"),
        StrategicRole.CONVENIENCE: Decimal("0"),
        StrategicRole.IMPULSE: Decimal("0.10"),
        StrategicRole.PREMIUM: Decimal("0.03"),
    },
    min_margin=Decimal("0.08"),
    max_margin=Decimal("0.40"),
)


def _parse_number(value, label: str) -> Decimal:
    try:
        number = to_decimal(value)
    except InvalidCostError:
        raise RuleSetError(f"{label} must be a number, got {value!r}") from None
    if not number.is_finite():
        raise RuleSetError(f"{label} must be finite, got {value!r}")
    return number


def rule_set_from_dict(data: dict) -> RuleSet:
    """Build a RuleSet from its JSON representation."""
    if not isinstance(data, dict):
        raise RuleSetError("Rule set must be a JSON object")

    try:
        raw_bands = data['cost_bands']
        raw_adjustments = data['role_adjustments']
        version = str(data['version'])
    except KeyError as e:
        raise RuleSetError(f"Rule set is missing required key {e}") from None

    if not isinstance(raw_bands, list) or not isinstance(raw_adjustments, dict):
        raise RuleSetError("cost_bands must be a list and role_adjustments an object")

    bands = []
    for i, band in enumerate(raw_bands):
        if not isinstance(band, dict):
            raise RuleSetError(f"cost_bands[{i}] must be an object")
        max_cost = band.get('max_cost')
        bands.append(CostBand(
            max_cost=None if max_cost is None else _parse_number(max_cost, f"cost_bands[{i}].max_cost"),
            margin=_parse_number(band.get('margin'), f"cost_bands[{i}].margin"),
        ))

    adjustments = {}
    for tag, value in raw_adjustments.items():
        try:
            role = StrategicRole.parse(tag)
        except UnknownRoleError as e:
            raise RuleSetError(str(e)) from None
        if role in adjustments:
            raise RuleSetError(f"Duplicate adjustment for role {role.value}")
        adjustments[role] = _parse_number(value, f"role_adjustments.{tag}")

    return RuleSet(
        version=version,
        cost_bands=tuple(bands),
        role_adjustments=adjustments,
        min_margin=_parse_number(data.get('min_margin', DEFAULT_RULE_SET.min_margin), "min_margin"),
        max_margin=_parse_number(data.get('max_margin', DEFAULT_RULE_SET.max_margin), "max_margin"),
    )


def load_rule_set(path: Path) -> RuleSet:
    """Load and validate a rule set from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise RuleSetError(f"Rule set {path} is not valid JSON: {e}") from None
    return rule_set_from_dict(data)
