"""Configuration module for the distribution engine."""

from .settings import Settings, get_settings
from .catalog_loader import (
    CatalogMetadata,
    FiqhCatalogLoader,
    clear_catalog_cache,
    get_catalog_loader,
    get_default_catalog,
)

__all__ = [
    "Settings",
    "get_settings",
    "CatalogMetadata",
    "FiqhCatalogLoader",
    "clear_catalog_cache",
    "get_catalog_loader",
    "get_default_catalog",
]
