"""
Distribution report.

Turns the final DistributionState into the caller-facing result: one
ShareLine per heir category with its exact fraction, a rounded decimal
rendering and the monetary amount taken from the net estate value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, List, Optional

from calculator.fraction_math import (
    ZERO, apply_to_amount, format_fraction, sum_fractions, to_decimal,
)
from calculator.stages.state import DistributionState
from models.estate import EstateInput, ReconciliationStatus
from models.heir import HeirClassification, HeirStatus


def _convert(obj):
    if isinstance(obj, Fraction):
        return format_fraction(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _convert(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_convert(v) for v in obj]
    return obj


@dataclass
class ShareLine:
    """Outcome for one heir category."""
    heir_name: str
    count: int
    classification: HeirClassification
    status: HeirStatus
    share_fraction: Fraction
    share_fraction_of_total: Decimal
    share_amount: Decimal
    per_head_fraction: Fraction
    per_head_amount: Decimal
    status_trace: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _convert(asdict(self))


@dataclass
class DistributionReport:
    """
    Result of one distribution.

    ``total_fraction`` is the exact sum of every share: 1 for any completed
    distribution and 0 when every heir was excluded.
    """
    net_estate_value: Decimal
    total_fraction: Fraction
    total_fraction_allocated: Decimal
    reconciliation_status: ReconciliationStatus
    shares: List[ShareLine] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def share_for(self, heir_name: str) -> Optional[ShareLine]:
        for line in self.shares:
            if line.heir_name == heir_name:
                return line
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dict for JSON serialization."""
        return _convert(asdict(self))


def build_report(
    estate: EstateInput,
    state: DistributionState,
    settings,
    notes: Optional[List[str]] = None,
) -> DistributionReport:
    share_places = settings.share_decimal_places
    money_places = settings.money_decimal_places
    amount = estate.net_estate_value

    lines: List[ShareLine] = []
    for record in state.records:
        if record.is_excluded and not settings.include_excluded_heirs:
            continue
        per_head = record.per_head_share
        lines.append(
            ShareLine(
                heir_name=record.name,
                count=record.count,
                classification=record.classification,
                status=record.status,
                share_fraction=record.share,
                share_fraction_of_total=to_decimal(record.share, share_places),
                share_amount=apply_to_amount(record.share, amount, money_places),
                per_head_fraction=per_head,
                per_head_amount=apply_to_amount(per_head, amount, money_places),
                status_trace="; ".join(record.trace),
            )
        )

    total = sum_fractions(record.share for record in state.records)
    status = state.reconciliation_status or ReconciliationStatus.BALANCED

    report_notes = list(notes or [])
    if total == ZERO:
        report_notes.append("No heir is entitled to a share; the estate is not distributed.")
    report_notes.append(f"Calculation finished. Reconciliation status: {status.value}")

    return DistributionReport(
        net_estate_value=amount,
        total_fraction=total,
        total_fraction_allocated=to_decimal(total, share_places),
        reconciliation_status=status,
        shares=lines,
        notes=report_notes,
    )
