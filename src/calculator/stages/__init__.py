from calculator.stages.base import BaseStage
from calculator.stages.exclusion import ExclusionStage
from calculator.stages.reconciliation import ReconciliationStage
from calculator.stages.residue import ResidueDistributionStage
from calculator.stages.share_assignment import ShareAssignmentStage
from calculator.stages.state import DistributionState

__all__ = [
    "BaseStage",
    "DistributionState",
    "ExclusionStage",
    "ShareAssignmentStage",
    "ResidueDistributionStage",
    "ReconciliationStage",
]
