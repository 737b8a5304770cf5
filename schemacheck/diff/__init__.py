"""Structural schema diffing."""

from .detector import SchemaDiffer
from .types import (
    CATEGORY_BY_CODE,
    ChangeCategory,
    ChangeCode,
    ChangeEvent,
    categorize,
)

__all__ = [
    "CATEGORY_BY_CODE",
    "ChangeCategory",
    "ChangeCode",
    "ChangeEvent",
    "SchemaDiffer",
    "categorize",
]
