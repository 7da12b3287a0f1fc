import logging

import pytest

from techshare.adapters.market import InMemoryMarketplace
from techshare.domain import Technology
from techshare.logging_config import ContextAwareFilter, LoggingConfig, _current_module
from techshare.simulation import Scenario, SimulationConfig

REGION = "USA"
SECTOR = "electricity"


@pytest.fixture
def config() -> SimulationConfig:
    """Model time 2005-2020 in steps of 5 years, so 2005 is period 0."""
    return SimulationConfig.for_testing()


@pytest.fixture
def marketplace() -> InMemoryMarketplace:
    """Coal at 2.0 and gas at 3.0 in every test period."""
    marketplace = InMemoryMarketplace()
    for period in range(4):
        marketplace.create_market("coal", REGION, period, price=2.0)
        marketplace.create_market("gas", REGION, period, price=3.0)
    return marketplace


@pytest.fixture
def scenario(config, marketplace) -> Scenario:
    return Scenario.from_config(config, marketplace)


@pytest.fixture
def make_technology(scenario):
    """Factory fixture for technologies built from structured-input fields.

    Usage:
        def test_something(make_technology):
            # Coal technology, efficiency 0.4, non-energy cost 1.0, already initialized
            coal = make_technology()

            # Override any structured-input field
            gas = make_technology("gas", fuelname="gas", efficiency=0.5)

            # Leave the technology uninitialized to add gases or outputs first
            chp = make_technology("chp", setup=False)
    """

    def _make_technology(
        name: str = "coal", year: int = 2005, *, setup: bool = True, sector: str = SECTOR, **fields
    ) -> Technology:
        technology = Technology(name, year)
        structured_fields = {"fuelname": "coal", "efficiency": 0.4, "nonenergycost": 1.0}
        structured_fields.update(fields)
        for field, value in structured_fields.items():
            technology.parse_field(field, value)
        if setup:
            technology.complete_init(sector, scenario=scenario)
        return technology

    return _make_technology


@pytest.fixture
def clean_logging_state():
    """
    Ensure clean logging state before and after each test.

    Removes ContextAwareFilter instances from the root logger and its handlers and resets the
    formatter state left behind by configure_from_yaml.
    """

    def _clean() -> None:
        root = logging.getLogger()
        for f in list(root.filters):
            if isinstance(f, ContextAwareFilter):
                root.removeFilter(f)
        for h in root.handlers:
            for f in list(h.filters):
                if isinstance(f, ContextAwareFilter):
                    h.removeFilter(f)
        LoggingConfig._installed_filter = None
        LoggingConfig.DEBUG_DUMP = False
        if hasattr(_current_module, "name"):
            _current_module.name = None

    _clean()
    yield
    _clean()
