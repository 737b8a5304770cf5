"""Schema change validation.

This package classifies the structural changes between two schema versions
by their risk to existing consumers and aggregates them into a pass/fail
result.
"""

from .aggregator import ResultAggregator
from .classifier import SeverityClassifier
from .engine import SchemaChangeValidator, validate
from .errors import ClassifiedChange, Severity, ValidationResult
from .policy import CheckPolicy

__all__ = [
    "CheckPolicy",
    "ClassifiedChange",
    "ResultAggregator",
    "SchemaChangeValidator",
    "Severity",
    "SeverityClassifier",
    "ValidationResult",
    "validate",
]
