"""State carried from one distribution stage to the next."""

from __future__ import annotations

from dataclasses import dataclass, replace
from fractions import Fraction
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models.estate import ReconciliationStatus
from models.heir import HeirRecord


@dataclass(frozen=True)
class DistributionState:
    """
    Snapshot of a distribution between two stages.

    ``records`` keeps every supplied heir category in input order, excluded
    ones included, so the report can explain why an heir received nothing.
    ``input_counts`` is the original heir set and never changes; exclusion
    is decided against it alone.
    """
    records: Tuple[HeirRecord, ...]
    input_counts: Mapping[str, int]
    total_fixed: Fraction = Fraction(0)
    residue: Fraction = Fraction(0)
    has_descendant: bool = False
    has_son: bool = False
    reconciliation_status: Optional[ReconciliationStatus] = None
    is_terminal: bool = False

    @classmethod
    def initial(cls, records: Iterable[HeirRecord]) -> "DistributionState":
        record_tuple = tuple(records)
        counts: Dict[str, int] = {record.name: record.count for record in record_tuple}
        return cls(records=record_tuple, input_counts=MappingProxyType(counts))

    @property
    def surviving(self) -> List[HeirRecord]:
        return [record for record in self.records if not record.is_excluded]

    @property
    def excluded(self) -> List[HeirRecord]:
        return [record for record in self.records if record.is_excluded]

    @property
    def surviving_counts(self) -> Dict[str, int]:
        return {record.name: record.count for record in self.surviving}

    @property
    def surviving_names(self) -> List[str]:
        return [record.name for record in self.surviving]

    def record(self, name: str) -> HeirRecord:
        for record in self.records:
            if record.name == name:
                return record
        raise KeyError(name)

    def with_records(self, records: Iterable[HeirRecord], **changes) -> "DistributionState":
        return replace(self, records=tuple(records), **changes)

    def evolve(self, **changes) -> "DistributionState":
        return replace(self, **changes)
