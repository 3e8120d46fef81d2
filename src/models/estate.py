from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from .heir import HeirInput


class ReconciliationStatus(str, Enum):
    """Terminal reconciliation state of one distribution; exactly one applies."""
    BALANCED = "Balanced"
    AWL = "Awl"                  # fixed shares exceeded the estate, scaled down
    RADD = "Radd"                # unallocated residue returned to non-spouse heirs
    SINGLE_HEIR = "SingleHeir"
    NO_HEIRS = "NoHeirs"         # every supplied heir was excluded


class EstateInput(BaseModel):
    """
    Input for one distribution.

    ``net_estate_value`` is assets minus liabilities, computed by the caller.
    It is not constrained here: a negative value is reported by the engine as
    an insolvent estate rather than as a generic validation failure.
    """
    net_estate_value: Decimal = Field(..., description="Assets minus liabilities")
    heirs: List[HeirInput] = Field(default_factory=list, description="Surviving heir categories in input order")

    @field_validator('net_estate_value', mode='before')
    def coerce_float_estate(cls, v):
        # Floats are converted through str to keep the printed value
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @property
    def heir_names(self) -> List[str]:
        return [heir.name for heir in self.heirs]
