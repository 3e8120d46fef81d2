"""
Residue (Asaba) distribution stage.

Whatever the fixed shares leave over is split among the Residuary heirs
by weight: two parts per male head, one per female head. A single
residuary category takes the whole residue.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from calculator.fraction_math import (
    ONE, ZERO, add, divide, format_fraction, multiply, subtract,
)
from calculator.stages.base import BaseStage
from calculator.stages.state import DistributionState
from models.heir import HeirRecord, HeirStatus
from rules.catalog import RuleCatalog

logger = logging.getLogger(__name__)


class ResidueDistributionStage(BaseStage):
    """Allocates ``1 - total_fixed`` among residuary heirs by weighted ratio."""

    name = "residue"

    def __init__(self, catalog: RuleCatalog):
        super().__init__(catalog)

    def apply(self, state: DistributionState) -> DistributionState:
        # Clamped at zero: an over-allocated estate is left to Awl
        residue = subtract(ONE, state.total_fixed)
        residuaries = [record for record in state.surviving if record.is_residuary]

        if not residuaries:
            if residue > ZERO:
                logger.debug(f"Residue {format_fraction(residue)} left for reconciliation (no residuary heir)")
            return state.evolve(residue=residue)

        if residue == ZERO:
            logger.debug("Fixed shares exhaust the estate; residuary heirs receive nothing")
            exhausted = {record.name for record in residuaries}
            records = [
                record.with_status(HeirStatus.NOT_ALLOCATED, "ASABA: residue exhausted by fixed shares")
                if record.name in exhausted else record
                for record in state.records
            ]
            return state.with_records(records, residue=residue)

        weights = self.weights(residuaries)
        total_weight = sum(weights.values())

        records = []
        for record in state.records:
            if record.name in weights:
                weight = weights[record.name]
                allocation = multiply(residue, divide(weight, total_weight))
                record = record.with_share(
                    add(record.share, allocation),
                    HeirStatus.RESIDUARY,
                    f"ASABA: allocated residue of {format_fraction(allocation)} "
                    f"(weight {weight} of {total_weight})",
                )
            records.append(record)

        return state.with_records(records, residue=residue)

    def weights(self, residuaries: List[HeirRecord]) -> Dict[str, int]:
        """
        Integer weight of each residuary category.

        With a single residuary category no ratio is needed and the weight
        is simply its head count.
        """
        if len(residuaries) == 1:
            only = residuaries[0]
            return {only.name: only.count}
        return {
            record.name: self.catalog.get(record.name).residue_weight * record.count
            for record in residuaries
        }
