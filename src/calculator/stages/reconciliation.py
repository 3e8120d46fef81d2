"""
Reconciliation stage: Awl and Radd.

- Awl: fixed shares add up to more than the estate. Every share is divided
  by the total so the shares sum to exactly 1 in the same proportions.
- Radd: shares add up to less than the estate and no residuary heir
  exists. The unallocated part goes back to the non-spouse fixed-share
  heirs in proportion to their shares; spouse shares stay as they are.
"""

from __future__ import annotations

import logging
from typing import List

from calculator.errors import AllocationInvariantError, UnsupportedHeirCombinationError
from calculator.fraction_math import (
    ONE, ZERO, divide, format_fraction, multiply, subtract, sum_fractions,
)
from calculator.stages.base import BaseStage
from calculator.stages.state import DistributionState
from models.estate import ReconciliationStatus
from models.heir import HeirRecord, HeirStatus

logger = logging.getLogger(__name__)


class ReconciliationStage(BaseStage):
    """Brings the allocated total to exactly 1."""

    name = "reconciliation"

    def apply(self, state: DistributionState) -> DistributionState:
        survivors = state.surviving
        total = sum_fractions(record.share for record in survivors)

        if total > ONE:
            return self._apply_awl(state, total)

        if total < ONE:
            if any(record.is_residuary for record in survivors):
                # The residue stage hands residuaries everything that is left
                raise AllocationInvariantError(
                    f"Residuary heirs present but only {format_fraction(total)} of the estate was allocated",
                    details={"total": format_fraction(total)},
                )
            return self._apply_radd(state, total)

        logger.debug("Shares balanced without reconciliation")
        return state.evolve(reconciliation_status=ReconciliationStatus.BALANCED)

    def _apply_awl(self, state: DistributionState, total) -> DistributionState:
        logger.info(f"Awl: fixed shares total {format_fraction(total)}, scaling down")

        records = []
        for record in state.records:
            if not record.is_excluded and record.share > ZERO:
                adjusted = divide(record.share, total)
                record = record.with_share(
                    adjusted,
                    HeirStatus.AWL_ADJUSTED,
                    f"AWL: {format_fraction(record.share)} -> {format_fraction(adjusted)} "
                    f"(factor {format_fraction(total)})",
                )
            records.append(record)

        return state.with_records(records, reconciliation_status=ReconciliationStatus.AWL)

    def _apply_radd(self, state: DistributionState, total) -> DistributionState:
        survivors = state.surviving
        spouse_total = sum_fractions(record.share for record in survivors if record.is_spouse)
        eligible = self.radd_eligible(survivors)

        if not eligible:
            raise UnsupportedHeirCombinationError(
                f"{format_fraction(subtract(ONE, total))} of the estate is unallocated and no "
                "non-spouse heir can receive it by Radd",
                heirs=[record.name for record in survivors],
            )

        pool = subtract(ONE, spouse_total)
        eligible_total = sum_fractions(record.share for record in eligible)
        eligible_names = {record.name for record in eligible}

        logger.info(
            f"Radd: {format_fraction(subtract(ONE, total))} unallocated, "
            f"returning pool {format_fraction(pool)} to {', '.join(sorted(eligible_names))}"
        )

        records = []
        for record in state.records:
            if record.is_excluded:
                pass
            elif record.name in eligible_names:
                adjusted = multiply(pool, divide(record.share, eligible_total))
                record = record.with_share(
                    adjusted,
                    HeirStatus.RADD_ADJUSTED,
                    f"RADD: {format_fraction(record.share)} -> {format_fraction(adjusted)}",
                )
            elif record.is_spouse:
                record = record.with_note(
                    f"RADD: spouse share locked at {format_fraction(record.share)}"
                )
            else:
                record = record.with_share(ZERO, HeirStatus.NOT_ALLOCATED, "NOT ALLOCATED")
            records.append(record)

        return state.with_records(records, reconciliation_status=ReconciliationStatus.RADD)

    @staticmethod
    def radd_eligible(survivors: List[HeirRecord]) -> List[HeirRecord]:
        """Non-spouse FixedShare heirs holding a non-zero share."""
        return [
            record for record in survivors
            if not record.is_spouse and record.is_fixed_share and record.share > ZERO
        ]
