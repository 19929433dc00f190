"""
Sources package for the catalog administration tool.

Re-exports the source interfaces and the concrete implementations so
downstream code can import from `catalog_admin.sources` directly.
"""

from catalog_admin.sources.abstract import AbstractProductSource, ProductSource
from catalog_admin.sources.memory import SAMPLE_PRODUCTS, InMemoryProductSource
from catalog_admin.sources.postgres import PostgresProductSource

__all__ = [
    # Abstracts
    "AbstractProductSource",
    "ProductSource",
    # Concrete sources
    "InMemoryProductSource",
    "PostgresProductSource",
    "SAMPLE_PRODUCTS",
]
