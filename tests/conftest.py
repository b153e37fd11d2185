import pytest

from treatment_finder.catalog import CatalogStore
from treatment_finder.flow import QuizFlow

from helpers.catalogs import CATALOG_DIR, example_catalog, mixed_catalog


@pytest.fixture(scope="session")
def store():
    """Load the production catalog once for the entire test session."""
    s = CatalogStore(CATALOG_DIR)
    s.load()
    return s


@pytest.fixture
def example():
    return example_catalog()


@pytest.fixture
def mixed():
    return mixed_catalog()


@pytest.fixture
def mixed_flow(mixed):
    return QuizFlow(mixed)
