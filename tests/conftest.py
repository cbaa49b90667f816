from datetime import date

import pytest

from risk_datagen.config import GeneratorConfig
from risk_datagen.generators import generate_dataset

AS_OF = date(2025, 1, 1)


def pytest_addoption(parser):
    parser.addoption(
        "--update-snapshots",
        action="store_true",
        default=False,
        help="Rewrite recorded snapshots under tests/snapshots instead of only comparing.",
    )


@pytest.fixture(scope="session")
def update_snapshots(request):
    return request.config.getoption("--update-snapshots")


@pytest.fixture(scope="session")
def as_of():
    return AS_OF


@pytest.fixture(scope="session")
def dataset():
    """Reference population: seed 42, 2000 individuals."""
    return generate_dataset(GeneratorConfig(n_individuals=2000, seed=42, as_of=AS_OF))


@pytest.fixture(scope="session")
def small_config():
    return GeneratorConfig(n_individuals=150, seed=7, as_of=AS_OF)
