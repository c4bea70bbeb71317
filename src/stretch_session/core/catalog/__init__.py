"""
Exercise catalogs for stretch-session.

A catalog maps a category id to the ordered exercises a session runs
through.
"""

from .base import CatalogProvider, Category
from .provider import InMemoryCatalog, YamlCatalog

__all__ = [
    "CatalogProvider",
    "Category",
    "InMemoryCatalog",
    "YamlCatalog",
]
