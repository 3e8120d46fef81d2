"""
Distribution engine.

Stage classes live in ``calculator.stages``; the end-to-end entry point is
``calculator.pipeline.DistributionPipeline``. Only the dependency-free
modules are re-exported here since the rule catalog imports them.
"""

from .errors import (
    AllocationInvariantError,
    CatalogError,
    DuplicateHeirError,
    InheritanceCalculationError,
    InsolventEstateError,
    NoHeirsSuppliedError,
    UnknownHeirTypeError,
    UnsupportedHeirCombinationError,
)
from .fraction_math import format_fraction, to_decimal, to_fraction

__all__ = [
    "AllocationInvariantError",
    "CatalogError",
    "DuplicateHeirError",
    "InheritanceCalculationError",
    "InsolventEstateError",
    "NoHeirsSuppliedError",
    "UnknownHeirTypeError",
    "UnsupportedHeirCombinationError",
    "format_fraction",
    "to_decimal",
    "to_fraction",
]
