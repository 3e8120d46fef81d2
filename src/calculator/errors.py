"""
Error taxonomy for the distribution engine.

Every error here is a deterministic function of the input (or of the
catalog) and aborts the computation. None of them are retried and none are
turned into a partial or zero result. The caller's response layer uses
``to_dict()`` to build whatever error payload it needs.
"""

from typing import Any, Dict, Iterable, Optional


class InheritanceCalculationError(Exception):
    """Base class for all engine errors."""

    error_code = "CALCULATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InsolventEstateError(InheritanceCalculationError):
    """Net estate value is negative (liabilities exceed assets)."""

    error_code = "INSOLVENT_ESTATE"

    def __init__(self, net_estate_value):
        super().__init__(
            f"Net estate value {net_estate_value} is negative; "
            "liabilities must be settled before distribution",
            details={"net_estate_value": str(net_estate_value)},
        )


class UnknownHeirTypeError(InheritanceCalculationError):
    """One or more heir names have no catalog entry."""

    error_code = "UNKNOWN_HEIR_TYPE"

    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))
        super().__init__(
            f"Unknown heir type(s): {', '.join(self.names)}",
            details={"unknown_heirs": self.names},
        )


class NoHeirsSuppliedError(InheritanceCalculationError):
    """The heir list is empty."""

    error_code = "NO_HEIRS_SUPPLIED"

    def __init__(self):
        super().__init__("No heirs provided for calculation.")


class DuplicateHeirError(InheritanceCalculationError):
    """The same heir category appears more than once in the input."""

    error_code = "DUPLICATE_HEIR"

    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))
        super().__init__(
            f"Heir categories supplied more than once: {', '.join(self.names)}; "
            "combine them into a single entry with a count",
            details={"duplicate_heirs": self.names},
        )


class UnsupportedHeirCombinationError(InheritanceCalculationError):
    """No rule path assigns the estate for this combination of heirs."""

    error_code = "UNSUPPORTED_HEIR_COMBINATION"

    def __init__(self, message: str, heirs: Iterable[str] = ()):
        super().__init__(message, details={"heirs": list(heirs)})


class AllocationInvariantError(InheritanceCalculationError):
    """The computed allocation violates conservation or non-negativity."""

    error_code = "ALLOCATION_INVARIANT_VIOLATED"


class CatalogError(InheritanceCalculationError):
    """The heir-type catalog or its rules are malformed."""

    error_code = "INVALID_CATALOG"
