from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from calculator.errors import (
    DuplicateHeirError,
    InsolventEstateError,
    NoHeirsSuppliedError,
    UnknownHeirTypeError,
)
from models.estate import EstateInput
from rules.catalog import RuleCatalog

# Most heads a single category can plausibly hold
PLAUSIBLE_MAX_COUNTS = {
    "husband": 1,
    "father": 1,
    "mother": 1,
    "paternal_grandfather": 1,
    "wife": 4,
}


@dataclass
class ValidationIssue:
    field: str
    message: str
    severity: str = "warning"  # "error" | "warning"


class EstateValidator:
    """
    Checks an estate before distribution.

    Hard failures raise in a fixed order: insolvent estate, empty heir
    list, unknown heir names, duplicate categories. Soft problems that do
    not stop the computation come back as warnings.
    """

    def validate(self, estate: EstateInput, catalog: RuleCatalog) -> List[ValidationIssue]:
        if estate.net_estate_value < 0:
            raise InsolventEstateError(estate.net_estate_value)

        if not estate.heirs:
            raise NoHeirsSuppliedError()

        unknown = catalog.unknown_names(estate.heir_names)
        if unknown:
            raise UnknownHeirTypeError(unknown)

        canonical = [catalog.resolve_name(name) for name in estate.heir_names]
        duplicates = [name for name, seen in Counter(canonical).items() if seen > 1]
        if duplicates:
            raise DuplicateHeirError(duplicates)

        issues: List[ValidationIssue] = []

        for name, heir in zip(canonical, estate.heirs):
            limit = PLAUSIBLE_MAX_COUNTS.get(name)
            if limit is not None and heir.count > limit:
                issues.append(
                    ValidationIssue(
                        f"heirs.{name}.count",
                        f"{heir.count} heirs of type '{name}' supplied; at most {limit} expected.",
                    )
                )

        if "husband" in canonical and "wife" in canonical:
            issues.append(
                ValidationIssue(
                    "heirs",
                    "Both husband and wife supplied; confirm the deceased's spouse.",
                )
            )

        if estate.net_estate_value == 0:
            issues.append(
                ValidationIssue(
                    "net_estate_value",
                    "Net estate value is zero; shares are computed but every amount is 0.",
                )
            )

        return issues
