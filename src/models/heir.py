from dataclasses import dataclass, field, replace
from enum import Enum
from fractions import Fraction
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class HeirClassification(str, Enum):
    """Fara'id classification of an heir category"""
    FIXED_SHARE = "FixedShare"   # As-hab al-Faraid
    RESIDUARY = "Residuary"      # Asaba


class HeirStatus(str, Enum):
    """Machine-readable outcome for one heir category."""
    PENDING = "Pending"
    EXCLUDED = "Excluded"
    FIXED_SHARE = "FixedShare"
    RESIDUARY = "Residuary"
    AWL_ADJUSTED = "AwlAdjusted"
    RADD_ADJUSTED = "RaddAdjusted"
    SOLE_HEIR = "SoleHeir"
    NOT_ALLOCATED = "NotAllocated"


class HeirInput(BaseModel):
    """One surviving heir category as supplied by the caller"""
    name: str = Field(..., min_length=1, description="Heir type name or alias")
    count: int = Field(default=1, ge=1, description="Number of heirs in this category")

    @field_validator('name', mode='before')
    def strip_name(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v


@dataclass(frozen=True)
class HeirRecord:
    """
    Working state of one heir category during a single computation.

    Records are never mutated. Each stage returns new records built with
    the ``with_*`` helpers, so a stage can be tested on its own by feeding
    it hand-built records.

    ``status`` drives nothing downstream except reporting; the stages
    decide on ``classification``, ``is_excluded`` and ``share``. ``trace``
    is a diagnostic narration only.
    """
    name: str
    count: int
    classification: HeirClassification
    is_spouse: bool = False
    is_excluded: bool = False
    share: Fraction = Fraction(0)
    status: HeirStatus = HeirStatus.PENDING
    trace: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_residuary(self) -> bool:
        return self.classification == HeirClassification.RESIDUARY

    @property
    def is_fixed_share(self) -> bool:
        return self.classification == HeirClassification.FIXED_SHARE

    @property
    def per_head_share(self) -> Fraction:
        return self.share / self.count

    def with_note(self, note: str) -> "HeirRecord":
        return replace(self, trace=self.trace + (note,))

    def with_status(self, status: HeirStatus, note: Optional[str] = None) -> "HeirRecord":
        trace = self.trace + (note,) if note else self.trace
        return replace(self, status=status, trace=trace)

    def with_share(self, share: Fraction, status: HeirStatus, note: str) -> "HeirRecord":
        return replace(self, share=share, status=status, trace=self.trace + (note,))

    def with_classification(self, classification: HeirClassification, note: str) -> "HeirRecord":
        return replace(
            self,
            classification=classification,
            share=Fraction(0),
            trace=self.trace + (note,),
        )

    def excluded_by(self, condition_heir: str) -> "HeirRecord":
        return replace(
            self,
            is_excluded=True,
            share=Fraction(0),
            status=HeirStatus.EXCLUDED,
            trace=self.trace + (f"EXCLUDED: blocked by {condition_heir}",),
        )
