"""
Rule type definitions.

Provides enums and dataclasses for heir-type definitions and conditional
Fara'id rules.
"""

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Mapping, Optional, Tuple

from models.heir import HeirClassification


class RuleKind(str, Enum):
    """Kinds of conditional rules."""
    EXCLUSION = "Exclusion"    # Hajb: condition heir blocks the primary heir entirely
    REDUCTION = "Reduction"    # Condition heir lowers the primary heir's fixed share


@dataclass(frozen=True)
class HeirTypeDefinition:
    """
    Catalog entry for one heir type.

    FixedShare heirs carry a default share; Residuary heirs never do, their
    allocation always comes out of the residue.
    """
    name: str
    classification: HeirClassification
    default_share: Optional[Fraction] = None
    name_ar: str = ""
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    is_spouse: bool = False
    # Collective share when two or more of this heir survive (e.g. sisters 2/3)
    plural_share: Optional[Fraction] = None
    # Weight per head when sharing residue (2:1 male to female)
    residue_weight: int = 1
    # Presence of any of these heirs turns a FixedShare heir into a Residuary
    residuary_with: Tuple[str, ...] = field(default_factory=tuple)
    # FixedShare heir that inherits as a pure Residuary when no descendant survives
    residuary_without_descendants: bool = False


@dataclass(frozen=True)
class ConditionalRule:
    """A single exclusion or reduction rule, keyed by heir names."""
    primary_heir: str
    condition_heir: str
    kind: RuleKind
    reduced_share: Optional[Fraction] = None
    description: str = ""
    # Condition heir must be present with at least this many heads
    min_condition_count: int = 1

    def is_triggered_by(self, counts: Mapping[str, int]) -> bool:
        """Whether the condition heir is present in ``counts`` in sufficient number."""
        return counts.get(self.condition_heir, 0) >= self.min_condition_count

    @property
    def is_exclusion(self) -> bool:
        return self.kind == RuleKind.EXCLUSION

    @property
    def is_reduction(self) -> bool:
        return self.kind == RuleKind.REDUCTION
