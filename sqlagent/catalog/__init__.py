"""Schema catalog and business category definitions."""

from sqlagent.catalog.categories import DEFAULT_CATEGORIES, GENERAL_CATEGORY, KEYWORD_TABLE_MAP
from sqlagent.catalog.schema import SchemaCatalog

__all__ = [
    "DEFAULT_CATEGORIES",
    "GENERAL_CATEGORY",
    "KEYWORD_TABLE_MAP",
    "SchemaCatalog",
]
