"""
Share assignment stage.

Gives every surviving FixedShare heir its fixed share and settles which
heirs inherit as Residuaries. The order of the steps is fixed:

1. Spouse shares, by presence of a descendant
2. Daughters' collective share when no son survives
3. Reclassification to Residuary by a companion heir (daughter with son)
4. Reclassification to Residuary when no descendant survives (father)
5. Catalog shares and Reduction rules for every other FixedShare heir
6. Exact total of the fixed shares
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Dict, Mapping, Optional, Tuple

from calculator.fraction_math import (
    EIGHTH, HALF, QUARTER, TWO_THIRDS, ZERO, add, format_fraction,
)
from calculator.stages.base import BaseStage
from calculator.stages.state import DistributionState
from models.heir import HeirClassification, HeirRecord, HeirStatus
from rules.catalog import RuleCatalog
from rules.rule_types import HeirTypeDefinition

logger = logging.getLogger(__name__)

SON = "son"
DAUGHTER = "daughter"
DESCENDANTS = (SON, DAUGHTER)

# Spouse share as (without descendants, with descendants)
SPOUSE_SHARES: Dict[str, Tuple[Fraction, Fraction]] = {
    "husband": (HALF, QUARTER),
    "wife": (QUARTER, EIGHTH),
}


class ShareAssignmentStage(BaseStage):
    """Assigns fixed shares and final classifications to surviving heirs."""

    name = "share_assignment"

    def __init__(self, catalog: RuleCatalog):
        super().__init__(catalog)

    def apply(self, state: DistributionState) -> DistributionState:
        survivors = state.surviving_counts
        has_son = SON in survivors
        has_descendant = any(name in survivors for name in DESCENDANTS)

        records = []
        for record in state.records:
            if not record.is_excluded:
                record = self._assign(record, survivors, has_son, has_descendant)
            records.append(record)

        total_fixed = add(*(
            record.share for record in records
            if not record.is_excluded and record.is_fixed_share
        ))

        logger.debug(
            f"Fixed shares assigned: total {format_fraction(total_fixed)} "
            f"(descendant={has_descendant}, son={has_son})"
        )
        return state.with_records(
            records,
            total_fixed=total_fixed,
            has_descendant=has_descendant,
            has_son=has_son,
        )

    def _assign(
        self,
        record: HeirRecord,
        survivors: Mapping[str, int],
        has_son: bool,
        has_descendant: bool,
    ) -> HeirRecord:
        definition = self.catalog.get(record.name)

        # 1. Spouses
        if record.name in SPOUSE_SHARES:
            without_descendant, with_descendant = SPOUSE_SHARES[record.name]
            if has_descendant:
                return record.with_share(
                    with_descendant, HeirStatus.FIXED_SHARE,
                    f"FARAD: {format_fraction(with_descendant)} (descendant present)",
                )
            return record.with_share(
                without_descendant, HeirStatus.FIXED_SHARE,
                f"FARAD: {format_fraction(without_descendant)} (no descendant)",
            )

        # 2. Daughters without a son
        if record.name == DAUGHTER and not has_son:
            share = HALF if record.count == 1 else TWO_THIRDS
            label = "single daughter" if record.count == 1 else f"{record.count} daughters collectively"
            return record.with_share(
                share, HeirStatus.FIXED_SHARE,
                f"FARAD: {format_fraction(share)} ({label}, no son)",
            )

        # 3. Residuary through a companion heir
        companion = self._residuary_companion(definition, survivors)
        if record.is_fixed_share and companion:
            return self._as_residuary(record, f"ASABA: reclassified as residuary with {companion}")

        # 4. Residuary when no descendant survives
        if record.is_fixed_share and definition.residuary_without_descendants and not has_descendant:
            return self._as_residuary(record, "ASABA: reclassified as residuary (no descendant)")

        if record.is_residuary:
            return record.with_status(HeirStatus.RESIDUARY, "ASABA: awaiting residue")

        # 5. Catalog share and reductions
        return self._apply_catalog_share(record, definition, survivors)

    @staticmethod
    def _residuary_companion(
        definition: HeirTypeDefinition,
        survivors: Mapping[str, int],
    ) -> Optional[str]:
        for companion in definition.residuary_with:
            if survivors.get(companion, 0) > 0:
                return companion
        return None

    @staticmethod
    def _as_residuary(record: HeirRecord, note: str) -> HeirRecord:
        record = record.with_classification(HeirClassification.RESIDUARY, note)
        return record.with_status(HeirStatus.RESIDUARY)

    def _apply_catalog_share(
        self,
        record: HeirRecord,
        definition: HeirTypeDefinition,
        survivors: Mapping[str, int],
    ) -> HeirRecord:
        if record.count >= 2 and definition.plural_share is not None:
            share = definition.plural_share
            note = f"FARAD: {format_fraction(share)} ({record.count} heirs collectively)"
        else:
            share = definition.default_share
            note = f"FARAD: allocated {format_fraction(share)}"

        applied = None
        for rule in self.catalog.reduction_rules_for(record.name):
            if rule.is_triggered_by(survivors):
                applied = rule

        if applied is not None:
            share = applied.reduced_share
            note = (
                f"FARAD: reduced to {format_fraction(share)} "
                f"(presence of {applied.condition_heir})"
            )

        if share == ZERO:
            return record.with_share(ZERO, HeirStatus.NOT_ALLOCATED, note)
        return record.with_share(share, HeirStatus.FIXED_SHARE, note)

