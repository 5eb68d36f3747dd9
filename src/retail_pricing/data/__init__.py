"""Data subpackage - batch catalog pricing."""
from .price_catalog import price_catalog, price_catalog_frame

__all__ = ['price_catalog', 'price_catalog_frame']
