"""
Fara'id Catalog Loader.

Loads heir-type definitions and conditional rules from YAML files, enabling:
- Catalog extensions (new heir types, new rules) without code changes
- Environment-specific catalogs via FARAID_CATALOG_PATH
- Exact shares only: every share is parsed as a fraction, never a float
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fractions import Fraction
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from calculator.errors import CatalogError
from calculator.fraction_math import to_fraction
from config.settings import get_settings
from models.heir import HeirClassification
from rules.catalog import RuleCatalog
from rules.rule_types import ConditionalRule, HeirTypeDefinition, RuleKind

logger = logging.getLogger(__name__)

# Default catalog directory
CONFIG_DIR = Path(__file__).parent / "fiqh_parameters"
DEFAULT_CATALOG_FILE = "default_catalog.yaml"


@dataclass
class CatalogMetadata:
    """Metadata about a catalog file."""
    version: str
    source: str
    references: List[str] = field(default_factory=list)
    last_updated: str = ""
    updated_by: str = ""
    notes: str = ""


class FiqhCatalogLoader:
    """
    Loads and caches rule catalogs from YAML files.

    Features:
    - Alias-aware heir-type definitions
    - Validation of every share, rule and reference
    - One immutable RuleCatalog per file
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the catalog loader.

        Args:
            config_dir: Directory containing YAML catalog files.
                       Defaults to src/config/fiqh_parameters/
        """
        self.config_dir = config_dir or CONFIG_DIR
        self._catalogs: Dict[Path, RuleCatalog] = {}
        self._metadata: Dict[Path, CatalogMetadata] = {}

    def load_catalog(self, path: Optional[Path] = None) -> RuleCatalog:
        """
        Load a catalog file.

        Args:
            path: Catalog file. Relative paths resolve against config_dir;
                  defaults to the bundled default catalog.

        Returns:
            Validated RuleCatalog

        Raises:
            CatalogError: If the file is missing or malformed
        """
        catalog_path = self._resolve_path(path)
        if catalog_path in self._catalogs:
            return self._catalogs[catalog_path]

        raw = self._load_from_file(catalog_path)
        catalog = self.build_catalog(raw, source=str(catalog_path))

        self._catalogs[catalog_path] = catalog
        return catalog

    def get_metadata(self, path: Optional[Path] = None) -> Optional[CatalogMetadata]:
        """Get metadata for a catalog file."""
        catalog_path = self._resolve_path(path)
        self.load_catalog(catalog_path)
        return self._metadata.get(catalog_path)

    def build_catalog(self, raw: Dict[str, Any], source: str = "<memory>") -> RuleCatalog:
        """
        Build a RuleCatalog from an already-parsed mapping.

        Expected keys: ``heir_types`` (list) and ``rules`` (list). An optional
        ``_metadata`` mapping is ignored here and handled by load_catalog.
        """
        heir_types = raw.get("heir_types") or []
        if not heir_types:
            raise CatalogError(f"Catalog {source} defines no heir types", details={"source": source})

        definitions = [self._parse_definition(entry, source) for entry in heir_types]
        rules = [self._parse_rule(entry, source) for entry in raw.get("rules") or []]

        catalog = RuleCatalog.build(definitions, rules)
        logger.info(
            f"Loaded Fara'id catalog from {source}: "
            f"{len(definitions)} heir types, {len(rules)} rules"
        )
        return catalog

    def _resolve_path(self, path: Optional[Path]) -> Path:
        if path is None:
            return (self.config_dir / DEFAULT_CATALOG_FILE).resolve()
        path = Path(path)
        if not path.is_absolute():
            path = self.config_dir / path
        return path.resolve()

    def _load_from_file(self, path: Path) -> Dict[str, Any]:
        """Load catalog data from a YAML file."""
        if not path.exists():
            raise CatalogError(f"Catalog file not found: {path}", details={"path": str(path)})

        logger.info(f"Loading Fara'id catalog from {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"Catalog file {path} is not valid YAML: {e}", details={"path": str(path)}) from e

        if not isinstance(raw, dict):
            raise CatalogError(f"Catalog file {path} must contain a mapping", details={"path": str(path)})

        if '_metadata' in raw:
            try:
                self._metadata[path] = CatalogMetadata(**raw.pop('_metadata'))
            except TypeError as e:
                raise CatalogError(f"Invalid _metadata in {path}: {e}", details={"path": str(path)}) from e
        else:
            logger.warning(f"Catalog file {path} has no _metadata section")

        return raw

    def _parse_definition(self, entry: Dict[str, Any], source: str) -> HeirTypeDefinition:
        name = entry.get("name")
        if not name:
            raise CatalogError(f"Heir type without a name in {source}", details={"entry": entry})

        try:
            classification = HeirClassification(entry.get("classification"))
        except ValueError as e:
            raise CatalogError(
                f"Heir type '{name}' has invalid classification {entry.get('classification')!r}",
                details={"heir": name},
            ) from e

        return HeirTypeDefinition(
            name=name,
            classification=classification,
            default_share=self._parse_share(entry.get("default_share"), name, "default_share"),
            name_ar=entry.get("name_ar", ""),
            aliases=tuple(entry.get("aliases") or ()),
            is_spouse=bool(entry.get("is_spouse", False)),
            plural_share=self._parse_share(entry.get("plural_share"), name, "plural_share"),
            residue_weight=int(entry.get("residue_weight", 1)),
            residuary_with=tuple(entry.get("residuary_with") or ()),
            residuary_without_descendants=bool(entry.get("residuary_without_descendants", False)),
        )

    def _parse_rule(self, entry: Dict[str, Any], source: str) -> ConditionalRule:
        primary = entry.get("primary")
        condition = entry.get("condition")
        if not primary or not condition:
            raise CatalogError(
                f"Rule in {source} needs both 'primary' and 'condition'",
                details={"entry": entry},
            )

        try:
            kind = RuleKind(entry.get("kind"))
        except ValueError as e:
            raise CatalogError(
                f"Rule for '{primary}' has invalid kind {entry.get('kind')!r}",
                details={"primary_heir": primary},
            ) from e

        return ConditionalRule(
            primary_heir=primary,
            condition_heir=condition,
            kind=kind,
            reduced_share=self._parse_share(entry.get("reduced_share"), primary, "reduced_share"),
            description=entry.get("description", ""),
            min_condition_count=int(entry.get("min_condition_count", 1)),
        )

    @staticmethod
    def _parse_share(value: Any, heir: str, field_name: str) -> Optional[Fraction]:
        """Parse a share as an exact fraction; floats are a catalog error."""
        if value is None:
            return None
        try:
            return to_fraction(value)
        except (TypeError, ValueError, ZeroDivisionError) as e:
            raise CatalogError(
                f"Invalid {field_name} {value!r} for '{heir}': {e}",
                details={"heir": heir, "field": field_name, "value": str(value)},
            ) from e


# Global singleton
_catalog_loader: Optional[FiqhCatalogLoader] = None


def get_catalog_loader() -> FiqhCatalogLoader:
    """Get the global catalog loader instance."""
    global _catalog_loader
    if _catalog_loader is None:
        _catalog_loader = FiqhCatalogLoader()
    return _catalog_loader


@lru_cache(maxsize=1)
def get_default_catalog() -> RuleCatalog:
    """
    Get the catalog configured for this process.

    Uses FARAID_CATALOG_PATH when set, otherwise the bundled default catalog.
    The returned catalog is immutable and shared across computations.
    """
    settings = get_settings()
    return get_catalog_loader().load_catalog(settings.catalog_path)


def clear_catalog_cache() -> None:
    """Clear the catalog cache (useful for testing)."""
    get_default_catalog.cache_clear()
    global _catalog_loader
    _catalog_loader = None
