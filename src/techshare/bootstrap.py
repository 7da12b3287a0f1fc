import logging
from pathlib import Path
from typing import Optional

from .adapters.market import InMemoryMarketplace
from .adapters.repositories import GlobalTechnologyJsonRepository, TechnologyJsonRepository, load_market_prices
from .config import default_logging_config_path
from .logging_config import LoggingConfig
from .simulation import Scenario, SimulationConfig, SubsectorRunner

logger = logging.getLogger(__name__)


def configure_logging(config: SimulationConfig) -> None:
    """Load the YAML logging configuration, falling back to basicConfig if there is none."""
    yaml_path = config.logging_config_path or default_logging_config_path()
    if yaml_path is not None and Path(yaml_path).exists():
        LoggingConfig.configure_from_yaml(yaml_path, int(config.log_level))
        logger.info("Logging configured from %s", yaml_path)
    else:
        logging.basicConfig(level=config.log_level)


def bootstrap_scenario(
    config: SimulationConfig,
    prices_path: Optional[Path] = None,
    marketplace: Optional[InMemoryMarketplace] = None,
    setup_logging: bool = True,
) -> Scenario:
    """
    Create the scenario technologies are evaluated in.

    Args:
        config: Run configuration
        prices_path: Optional JSON file of market prices to load into the marketplace
        marketplace: Marketplace to use (default: a new, empty in-memory marketplace)
        setup_logging: Configure logging from the YAML file before anything else is done

    Returns:
        Scenario holding the marketplace, model time, config and logger
    """
    if setup_logging:
        configure_logging(config)
    if marketplace is None:
        marketplace = InMemoryMarketplace()
    if prices_path is not None:
        load_market_prices(Path(prices_path), marketplace)
    return Scenario.from_config(config, marketplace)


def bootstrap_subsector(
    scenario: Scenario,
    technologies_path: Path,
    region_name: str,
    sector_name: str,
    global_technologies_path: Optional[Path] = None,
) -> SubsectorRunner:
    """Load the technologies of a subsector and complete their initialization."""
    technologies = TechnologyJsonRepository(Path(technologies_path)).list()
    if not technologies:
        logger.warning("No technologies found in %s", technologies_path)
    global_tech_db = GlobalTechnologyJsonRepository(Path(global_technologies_path)) if global_technologies_path else None
    runner = SubsectorRunner(scenario, region_name, sector_name, technologies)
    runner.complete_init(global_tech_db=global_tech_db)
    return runner
