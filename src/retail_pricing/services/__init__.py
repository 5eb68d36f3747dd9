"""Services subpackage - product record pricing."""
from .product_pricing import ProductPricingService, ValidationResult

__all__ = ['ProductPricingService', 'ValidationResult']
