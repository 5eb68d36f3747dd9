"""
Product Pricing Service - Auto-prices product records from cost and role.

Records are plain dicts using the catalog's field names (costPrice,
productRole, price, appliedMargin, pricingRuleVersion, compareAtPrice).
Nothing is persisted here: callers store the returned record.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..engine.exceptions import MissingRoleError, PricingError
from ..engine.models import PricingResult, StrategicRole
from ..engine.pricing_engine import PricingEngine, get_engine
from ..utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of product validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def has_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class ProductPricingService:
    """Service for pricing product records."""

    def __init__(self, engine: Optional[PricingEngine] = None):
        self.engine = engine or get_engine()

    def price_new_product(self, record: dict) -> dict:
        """
        Price a product about to be created.

        A product with a cost must also have a role. Auto-priced products
        lose any manual compare-at price. Products without cost are manually
        priced and returned unchanged.
        """
        cost = record.get('costPrice')
        role = record.get('productRole')

        if not has_value(cost):
            return dict(record)
        if not has_value(role):
            raise MissingRoleError("Strategic role is required when a cost price is given")

        result = self.engine.calculate_price(cost, role)
        priced = self._apply_result(record, result)
        priced['compareAtPrice'] = None
        return priced

    def reprice_product(self, existing: dict, changes: dict) -> dict:
        """
        Build the update for an existing product.

        Cost and role fall back to the stored values when the update does not
        change them. The price is recalculated only when both are known.
        """
        cost = changes.get('costPrice')
        if not has_value(cost):
            cost = existing.get('costPrice')
        role = changes.get('productRole')
        if not has_value(role):
            role = existing.get('productRole')

        if not (has_value(cost) and has_value(role)):
            return dict(changes)

        result = self.engine.calculate_price(cost, role)
        logger.info(
            "Repriced product %s: %s → %s (%s)",
            existing.get('sku', existing.get('id', '?')),
            existing.get('price'), result.final_price, result.rule_version
        )
        return self._apply_result(changes, result)

    def validate_product(self, record: dict) -> ValidationResult:
        """Validate a product record before pricing."""
        result = ValidationResult(valid=True)

        cost = record.get('costPrice')
        role = record.get('productRole')

        if not has_value(cost):
            result.warnings.append("No cost price - product is manually priced")
        else:
            try:
                PricingEngine.validate_cost(cost)
            except PricingError as e:
                result.errors.append(str(e))
                result.valid = False

            if not has_value(role):
                result.errors.append("Strategic role is required when a cost price is given")
                result.valid = False

        if has_value(role):
            try:
                StrategicRole.parse(role)
            except PricingError as e:
                result.errors.append(str(e))
                result.valid = False

        return result

    @staticmethod
    def _apply_result(record: dict, result: PricingResult) -> dict:
        updated = dict(record)
        updated['price'] = result.final_price
        updated['appliedMargin'] = result.applied_margin
        updated['pricingRuleVersion'] = result.rule_version
        return updated
