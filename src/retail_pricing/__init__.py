"""
Retail Pricing Package

Cost-plus pricing for catalog products.
Resolves retail prices using Cost Band → Role Adjustment → Psychological Rounding,
never pricing a product at or below its wholesale cost.
"""

__version__ = "1.1.0"
