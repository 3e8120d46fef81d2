"""
Exclusion (Hajb) stage.

Marks heirs blocked by the presence of a closer heir and detects the two
terminal states that end a distribution early: nobody left to inherit,
or a single heir who takes the whole estate.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from calculator.fraction_math import ONE
from calculator.stages.base import BaseStage
from calculator.stages.state import DistributionState
from models.estate import ReconciliationStatus
from models.heir import HeirStatus
from rules.catalog import RuleCatalog

logger = logging.getLogger(__name__)


class ExclusionStage(BaseStage):
    """
    Applies every Exclusion rule of the catalog in a single pass.

    Rules are checked against the original input set only. An heir that is
    itself excluded still excludes others, so the outcome does not depend
    on rule order.
    """

    name = "exclusion"

    def __init__(self, catalog: RuleCatalog):
        super().__init__(catalog)

    def apply(self, state: DistributionState) -> DistributionState:
        blocked = self.find_exclusions(state.input_counts)

        records = [
            record.excluded_by(", ".join(blocked[record.name]))
            if record.name in blocked else record
            for record in state.records
        ]
        state = state.with_records(records)

        for name, blockers in blocked.items():
            logger.debug(f"{name} excluded by {', '.join(blockers)}")

        return self._resolve_terminal(state)

    def find_exclusions(self, input_counts) -> Dict[str, List[str]]:
        """Map each excluded heir to the heirs excluding it, in catalog order."""
        blocked: Dict[str, List[str]] = {}
        for rule in self.catalog.exclusion_rules():
            if rule.primary_heir not in input_counts:
                continue
            if not rule.is_triggered_by(input_counts):
                continue
            blockers = blocked.setdefault(rule.primary_heir, [])
            if rule.condition_heir not in blockers:
                blockers.append(rule.condition_heir)
        return blocked

    @staticmethod
    def _resolve_terminal(state: DistributionState) -> DistributionState:
        survivors = state.surviving

        if not survivors:
            logger.info("All supplied heirs are excluded; nothing to allocate")
            return state.evolve(
                reconciliation_status=ReconciliationStatus.NO_HEIRS,
                is_terminal=True,
            )

        if len(survivors) == 1:
            sole = survivors[0]
            records = [
                record.with_share(ONE, HeirStatus.SOLE_HEIR, "SOLE HEIR: inherits the entire estate")
                if record.name == sole.name else record
                for record in state.records
            ]
            return state.with_records(
                records,
                reconciliation_status=ReconciliationStatus.SINGLE_HEIR,
                is_terminal=True,
            )

        return state
