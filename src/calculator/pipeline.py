"""
Distribution pipeline.

Runs one estate through validation and the four distribution stages:

    Exclusion -> ShareAssignment -> ResidueDistribution -> Reconciliation

Exclusion may end the run early (single surviving heir, or none at all).
The final state is checked for exact conservation before the report is
built. A pipeline holds no per-run state and can be shared across threads.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from calculator.errors import AllocationInvariantError, InheritanceCalculationError
from calculator.fraction_math import ONE, ZERO, format_fraction, sum_fractions
from calculator.report import DistributionReport, build_report
from calculator.stages import (
    BaseStage,
    DistributionState,
    ExclusionStage,
    ReconciliationStage,
    ResidueDistributionStage,
    ShareAssignmentStage,
)
from calculator.validation import EstateValidator
from config.catalog_loader import get_default_catalog
from config.settings import Settings, get_settings
from models.estate import EstateInput, ReconciliationStatus
from models.heir import HeirInput, HeirRecord
from rules.catalog import RuleCatalog
from services.logging_config import DistributionLogger, computation_id_var

logger = logging.getLogger(__name__)


class DistributionPipeline:
    """
    Computes the Fara'id distribution of an estate.

    Usage:
        pipeline = DistributionPipeline()
        report = pipeline.calculate({
            "net_estate_value": "160000",
            "heirs": [{"name": "wife"}, {"name": "daughter", "count": 2}, {"name": "son"}],
        })
        report.share_for("son").share_fraction   # Fraction(7, 16)
    """

    def __init__(
        self,
        catalog: Optional[RuleCatalog] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog or get_default_catalog()
        self.validator = EstateValidator()

    def calculate(self, estate: Union[EstateInput, Mapping[str, Any]]) -> DistributionReport:
        """
        Distribute an estate among its heirs.

        Args:
            estate: EstateInput, or a mapping with ``net_estate_value`` and ``heirs``

        Returns:
            DistributionReport with exact per-category fractions and amounts

        Raises:
            InheritanceCalculationError: On invalid input or an unsupported
                heir combination. Nothing is returned in that case.
        """
        if not isinstance(estate, EstateInput):
            estate = EstateInput.model_validate(estate)

        computation_id = uuid.uuid4().hex[:12]
        token = computation_id_var.set(computation_id)
        dist_logger = DistributionLogger(computation_id)
        try:
            dist_logger.start_distribution(estate.net_estate_value, len(estate.heirs))
            return self._run(estate, dist_logger)
        except InheritanceCalculationError as e:
            dist_logger.log_warning(
                f"Distribution aborted: {e.message}",
                error_code=e.error_code,
                details=e.details,
            )
            raise
        finally:
            computation_id_var.reset(token)

    def _run(self, estate: EstateInput, dist_logger: DistributionLogger) -> DistributionReport:
        step_start = dist_logger.log_step("validation")
        issues = self.validator.validate(estate, self.catalog)
        notes: List[str] = []
        for issue in issues:
            dist_logger.log_warning(issue.message, field=issue.field)
            notes.append(f"Warning: {issue.message}")
        dist_logger.complete_step("validation", step_start, warnings=len(issues))

        catalog = self.catalog.restricted_to(estate.heir_names)
        state = DistributionState.initial(self.build_records(estate.heirs, catalog))

        for stage in self.build_stages(catalog):
            step_start = dist_logger.log_step(stage.name, survivors=state.surviving_names)
            state = stage.apply(state)
            dist_logger.complete_step(
                stage.name,
                step_start,
                total=format_fraction(sum_fractions(r.share for r in state.surviving)),
            )
            if stage.name == ExclusionStage.name:
                dist_logger.log_exclusions({
                    record.name: record.trace[-1] for record in state.excluded
                })
            if state.is_terminal:
                break

        self.check_invariants(state)

        report = build_report(estate, state, self.settings, notes)
        dist_logger.log_result(
            report.reconciliation_status,
            report.total_fraction,
            {line.heir_name: line.share_fraction for line in report.shares},
        )
        return report

    @staticmethod
    def build_stages(catalog: RuleCatalog) -> List[BaseStage]:
        return [
            ExclusionStage(catalog),
            ShareAssignmentStage(catalog),
            ResidueDistributionStage(catalog),
            ReconciliationStage(catalog),
        ]

    @staticmethod
    def build_records(heirs: Iterable[HeirInput], catalog: RuleCatalog) -> List[HeirRecord]:
        """One working record per heir category, under its canonical name."""
        records = []
        for heir in heirs:
            definition = catalog.get(heir.name)
            records.append(
                HeirRecord(
                    name=definition.name,
                    count=heir.count,
                    classification=definition.classification,
                    is_spouse=definition.is_spouse,
                )
            )
        return records

    @staticmethod
    def check_invariants(state: DistributionState) -> None:
        """
        Raise AllocationInvariantError unless the final state is a valid
        distribution: no negative share, zero for every excluded heir, and
        shares summing to exactly 1 (0 when nobody inherits).
        """
        for record in state.records:
            if record.share < ZERO:
                raise AllocationInvariantError(
                    f"Negative share {format_fraction(record.share)} for '{record.name}'",
                    details={"heir": record.name},
                )
            if record.is_excluded and record.share != ZERO:
                raise AllocationInvariantError(
                    f"Excluded heir '{record.name}' holds a share",
                    details={"heir": record.name, "share": format_fraction(record.share)},
                )

        total = sum_fractions(record.share for record in state.records)
        expected = ZERO if state.reconciliation_status == ReconciliationStatus.NO_HEIRS else ONE
        if total != expected:
            raise AllocationInvariantError(
                f"Shares sum to {format_fraction(total)} instead of {format_fraction(expected)}",
                details={"total": format_fraction(total), "expected": format_fraction(expected)},
            )


def calculate_distribution(
    net_estate_value,
    heirs: Iterable[Union[HeirInput, Mapping[str, Any], str]],
    catalog: Optional[RuleCatalog] = None,
) -> DistributionReport:
    """
    Convenience wrapper around DistributionPipeline.

    ``heirs`` entries may be HeirInput objects, mappings, or bare names
    (one heir each).
    """
    heir_inputs: List[Dict[str, Any]] = []
    for heir in heirs:
        if isinstance(heir, str):
            heir_inputs.append({"name": heir})
        elif isinstance(heir, HeirInput):
            heir_inputs.append(heir.model_dump())
        else:
            heir_inputs.append(dict(heir))

    estate = EstateInput(net_estate_value=net_estate_value, heirs=heir_inputs)
    return DistributionPipeline(catalog=catalog).calculate(estate)
