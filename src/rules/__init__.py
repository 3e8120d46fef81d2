"""
Fara'id Rules Module.

This module provides the read-only rule catalog consumed by the
distribution engine:
- Heir-type definitions (classification, default share, spouse flag)
- Exclusion (Hajb) rules
- Reduction rules

Catalogs are normally loaded from YAML by config.catalog_loader.
"""

from .rule_types import (
    ConditionalRule,
    HeirTypeDefinition,
    RuleKind,
)
from .catalog import RuleCatalog

__all__ = [
    'ConditionalRule',
    'HeirTypeDefinition',
    'RuleKind',
    'RuleCatalog',
]
