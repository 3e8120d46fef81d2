"""
Rule catalog.

An immutable snapshot of heir-type definitions and conditional rules. The
engine reads from it but never writes, so one catalog instance can serve any
number of concurrent computations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.heir import HeirClassification
from calculator.errors import CatalogError
from .rule_types import ConditionalRule, HeirTypeDefinition, RuleKind

logger = logging.getLogger(__name__)


def _alias_key(name: str) -> str:
    return " ".join(name.strip().lower().replace("_", " ").split())


@dataclass(frozen=True)
class RuleCatalog:
    """
    Heir-type definitions plus the ordered list of conditional rules.

    Rule order is significant: when several reduction rules apply to the
    same heir, the last one in catalog order wins.

    Usage:
        catalog = RuleCatalog.build(definitions, rules)
        definition = catalog.get("Spouse (Wife)")   # resolves to "wife"
    """
    heir_types: Mapping[str, HeirTypeDefinition]
    rules: Tuple[ConditionalRule, ...] = ()
    _aliases: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if not self._aliases:
            canonical = {_alias_key(name): name for name in self.heir_types}
            object.__setattr__(self, "_aliases", MappingProxyType(canonical))

    @classmethod
    def build(
        cls,
        definitions: Iterable[HeirTypeDefinition],
        rules: Iterable[ConditionalRule] = (),
    ) -> "RuleCatalog":
        """
        Build and validate a catalog.

        Raises:
            CatalogError: If the definitions or rules are inconsistent
        """
        heir_types: Dict[str, HeirTypeDefinition] = {}
        aliases: Dict[str, str] = {}

        for definition in definitions:
            if definition.name in heir_types:
                raise CatalogError(
                    f"Heir type '{definition.name}' is defined twice",
                    details={"heir": definition.name},
                )
            _validate_definition(definition)
            heir_types[definition.name] = definition
            for alias in (definition.name,) + tuple(definition.aliases):
                key = _alias_key(alias)
                existing = aliases.get(key)
                if existing and existing != definition.name:
                    raise CatalogError(
                        f"Alias '{alias}' maps to both '{existing}' and '{definition.name}'",
                        details={"alias": alias},
                    )
                aliases[key] = definition.name

        rule_tuple = tuple(rules)
        for rule in rule_tuple:
            _validate_rule(rule, heir_types)

        for definition in heir_types.values():
            for companion in definition.residuary_with:
                if companion not in heir_types:
                    raise CatalogError(
                        f"Heir type '{definition.name}' becomes residuary with unknown heir "
                        f"'{companion}'",
                        details={"heir": definition.name},
                    )

        logger.debug(
            "Built rule catalog with %d heir types and %d rules",
            len(heir_types), len(rule_tuple),
        )
        return cls(
            heir_types=MappingProxyType(heir_types),
            rules=rule_tuple,
            _aliases=MappingProxyType(aliases),
        )

    def resolve_name(self, name: str) -> Optional[str]:
        """Map an input name or alias to its canonical heir-type name."""
        return self._aliases.get(_alias_key(name))

    def get(self, name: str) -> HeirTypeDefinition:
        canonical = self.resolve_name(name)
        if canonical is None:
            raise KeyError(name)
        return self.heir_types[canonical]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve_name(name) is not None

    def unknown_names(self, names: Iterable[str]) -> List[str]:
        return [name for name in names if name not in self]

    def exclusion_rules(self) -> List[ConditionalRule]:
        return [rule for rule in self.rules if rule.kind == RuleKind.EXCLUSION]

    def reduction_rules_for(self, heir_name: str) -> List[ConditionalRule]:
        """Reduction rules whose primary heir is ``heir_name``, in catalog order."""
        return [
            rule for rule in self.rules
            if rule.kind == RuleKind.REDUCTION and rule.primary_heir == heir_name
        ]

    def restricted_to(self, names: Sequence[str]) -> "RuleCatalog":
        """
        Catalog holding only the rules relevant to the given heirs.

        A rule is relevant if its primary or its condition heir is among
        ``names``. Definitions are kept whole.
        """
        wanted = {self.resolve_name(name) or name for name in names}
        relevant = tuple(
            rule for rule in self.rules
            if rule.primary_heir in wanted or rule.condition_heir in wanted
        )
        return RuleCatalog(heir_types=self.heir_types, rules=relevant, _aliases=self._aliases)


def _validate_definition(definition: HeirTypeDefinition) -> None:
    if definition.classification == HeirClassification.FIXED_SHARE:
        if definition.default_share is None:
            raise CatalogError(
                f"FixedShare heir '{definition.name}' has no default share",
                details={"heir": definition.name},
            )
        if not 0 < definition.default_share <= 1:
            raise CatalogError(
                f"Default share {definition.default_share} for '{definition.name}' "
                "must be in (0, 1]",
                details={"heir": definition.name},
            )
    elif definition.default_share is not None:
        raise CatalogError(
            f"Residuary heir '{definition.name}' must not declare a default share",
            details={"heir": definition.name},
        )

    if definition.plural_share is not None and not 0 < definition.plural_share <= 1:
        raise CatalogError(
            f"Plural share {definition.plural_share} for '{definition.name}' must be in (0, 1]",
            details={"heir": definition.name},
        )
    if definition.residue_weight < 1:
        raise CatalogError(
            f"Residue weight for '{definition.name}' must be at least 1",
            details={"heir": definition.name},
        )


def _validate_rule(rule: ConditionalRule, heir_types: Mapping[str, HeirTypeDefinition]) -> None:
    for heir in (rule.primary_heir, rule.condition_heir):
        if heir not in heir_types:
            raise CatalogError(
                f"Rule references unknown heir type '{heir}'",
                details={"primary_heir": rule.primary_heir, "condition_heir": rule.condition_heir},
            )
    if rule.primary_heir == rule.condition_heir:
        raise CatalogError(
            f"Heir '{rule.primary_heir}' cannot be the condition of its own rule",
            details={"heir": rule.primary_heir},
        )
    if rule.min_condition_count < 1:
        raise CatalogError(
            f"Rule for '{rule.primary_heir}' needs a minimum condition count of at least 1",
            details={"primary_heir": rule.primary_heir, "condition_heir": rule.condition_heir},
        )
    if rule.kind == RuleKind.REDUCTION:
        if rule.reduced_share is None:
            raise CatalogError(
                f"Reduction rule for '{rule.primary_heir}' has no reduced share",
                details={"primary_heir": rule.primary_heir, "condition_heir": rule.condition_heir},
            )
        if not 0 <= rule.reduced_share <= 1:
            raise CatalogError(
                f"Reduced share {rule.reduced_share} for '{rule.primary_heir}' must be in [0, 1]",
                details={"primary_heir": rule.primary_heir},
            )
    elif rule.reduced_share is not None:
        raise CatalogError(
            f"Exclusion rule for '{rule.primary_heir}' must not carry a reduced share",
            details={"primary_heir": rule.primary_heir, "condition_heir": rule.condition_heir},
        )
