"""Pytest configuration and fixtures for test suite."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from calculator.pipeline import DistributionPipeline
from calculator.stages import DistributionState
from config.catalog_loader import CONFIG_DIR, FiqhCatalogLoader
from config.settings import Settings
from models.heir import HeirRecord


@pytest.fixture
def catalog():
    """The bundled default catalog, loaded fresh for each test."""
    return FiqhCatalogLoader(config_dir=CONFIG_DIR).load_catalog()


@pytest.fixture
def settings():
    """Settings independent of the developer's environment and .env file."""
    return Settings(_env_file=None, catalog_path=None, include_excluded_heirs=True)


@pytest.fixture
def pipeline(catalog, settings):
    return DistributionPipeline(catalog=catalog, settings=settings)


@pytest.fixture
def make_state(catalog):
    """
    Build an initial DistributionState from ``{name: count}``.

    Usage:
        state = make_state({"husband": 1, "daughter": 2})
    """
    def _make(counts):
        records = []
        for name, count in counts.items():
            definition = catalog.get(name)
            records.append(
                HeirRecord(
                    name=definition.name,
                    count=count,
                    classification=definition.classification,
                    is_spouse=definition.is_spouse,
                )
            )
        return DistributionState.initial(records)
    return _make


def shares_of(report):
    """Map heir name to exact share fraction for a report."""
    return {line.heir_name: line.share_fraction for line in report.shares}


@pytest.fixture
def shares():
    return shares_of
