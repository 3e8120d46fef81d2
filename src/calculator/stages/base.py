"""Base class for distribution stages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from calculator.stages.state import DistributionState
from rules.catalog import RuleCatalog


class BaseStage(ABC):
    """
    Abstract base class for one step of the distribution pipeline.

    A stage takes a DistributionState and returns a new one; it never
    mutates its input or keeps state between calls, so a single stage
    instance can be shared by concurrent computations.
    """

    name = "stage"

    def __init__(self, catalog: Optional[RuleCatalog] = None):
        self.catalog = catalog

    @abstractmethod
    def apply(self, state: DistributionState) -> DistributionState:
        """Run the stage and return the resulting state."""
