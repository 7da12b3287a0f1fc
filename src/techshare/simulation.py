import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
import yaml

from .domain import Modeltime, Technology, TechnologyDataCollector
from .domain.calculate_shares import normalize_shares
from .domain.constants import Year
from .domain.interfaces import GDP, Demographics, DependencyFinder, GlobalTechnologyDatabase, Marketplace
from .logging_config import LoggingConfig

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """A pure, self-contained blueprint for a run."""

    start_year: Year
    end_year: Year
    time_step: int = 5

    # Report implausibly large share weights during calibration
    debug_checking: bool = False

    # Verbosity
    log_level: int | str = logging.WARNING
    logging_config_path: Optional[Path] = None
    output_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if isinstance(self.log_level, str):
            level = logging.getLevelName(self.log_level.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level {self.log_level}")
            self.log_level = level
        if self.logging_config_path is not None:
            self.logging_config_path = Path(self.logging_config_path)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        # Raises on an invalid year range or step
        Modeltime(start_year=self.start_year, end_year=self.end_year, time_step=self.time_step)

    def __repr__(self) -> str:
        return json.dumps(self.__dict__, indent=4, default=str)

    @property
    def modeltime(self) -> Modeltime:
        return Modeltime(start_year=self.start_year, end_year=self.end_year, time_step=self.time_step)

    @classmethod
    def from_yaml(cls, path: Path) -> "SimulationConfig":
        """
        Create config from a YAML file.

        Args:
            path: YAML file with at least ``start_year`` and ``end_year``

        Returns:
            SimulationConfig instance
        """
        with open(path) as f:
            raw: dict[str, Any] = yaml.safe_load(f) or {}
        unknown = set(raw) - set(cls.__dataclass_fields__)
        for key in sorted(unknown):
            logger.warning("Unknown configuration key %s in %s ignored.", key, path)
        typed_config = {key: value for key, value in raw.items() if key not in unknown}
        typed_config["start_year"] = Year(int(typed_config["start_year"]))
        typed_config["end_year"] = Year(int(typed_config["end_year"]))
        return cls(**typed_config)

    @classmethod
    def for_testing(
        cls,
        start_year: Year = Year(2005),
        end_year: Year = Year(2020),
        **kwargs: Any,
    ) -> "SimulationConfig":
        """Create config with small defaults for tests."""
        return cls(start_year=start_year, end_year=end_year, **kwargs)


@dataclass
class Scenario:
    """
    Everything a technology needs from the running model: the market ledger, model time,
    configuration and the logger it reports to.
    """

    marketplace: Marketplace
    modeltime: Modeltime
    config: SimulationConfig
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("techshare.scenario"))

    @classmethod
    def from_config(cls, config: SimulationConfig, marketplace: Marketplace, name: str = "scenario") -> "Scenario":
        return cls(
            marketplace=marketplace,
            modeltime=config.modeltime,
            config=config,
            logger=logging.getLogger(f"techshare.{name}"),
        )


class SubsectorRunner:
    """
    Runs one subsector of competing technologies through one period.

    This is the sequence a containing subsector performs around its technologies. It is not a
    market solver: prices are whatever the marketplace holds when ``run_period`` is called.
    """

    def __init__(
        self,
        scenario: Scenario,
        region_name: str,
        sector_name: str,
        technologies: Iterable[Technology],
        subsector_info: object = None,
    ) -> None:
        self.scenario = scenario
        self.region_name = region_name
        self.sector_name = sector_name
        self.technologies = list(technologies)
        self.subsector_info = subsector_info

    def __repr__(self) -> str:
        return f"SubsectorRunner: <{self.region_name} {self.sector_name} ({len(self.technologies)} technologies)>"

    def complete_init(
        self,
        dep_finder: DependencyFinder | None = None,
        global_tech_db: GlobalTechnologyDatabase | None = None,
    ) -> None:
        for technology in self.technologies:
            if not technology.is_initialized:
                technology.complete_init(
                    self.sector_name, dep_finder, self.subsector_info, None, global_tech_db, self.scenario
                )

    def init_calc(self, period: int, demographics: Demographics | None = None) -> None:
        for technology in self.technologies:
            technology.init_calc(self.region_name, self.sector_name, self.subsector_info, demographics, period)

    def total_fixed_output(self) -> float:
        return sum(technology.fixed_output_value for technology in self.technologies)

    def reset_fixed_output(self, demand: float, period: int) -> float:
        """Restore fixed output and scale it down when it exceeds demand. Returns the fixed total."""
        for technology in self.technologies:
            technology.reset_fixed_output(period)
        fixed_total = self.total_fixed_output()
        if fixed_total > demand and fixed_total > 0:
            ratio = demand / fixed_total
            logger.debug("Fixed output %s exceeds demand %s in %s; scaling by %s.", fixed_total, demand, self, ratio)
            for technology in self.technologies:
                technology.scale_fixed_output(ratio)
            fixed_total = self.total_fixed_output()
        return fixed_total

    def calculate_costs(self, period: int) -> None:
        with LoggingConfig.simulation_logging("CostEngine"):
            for technology in self.technologies:
                technology.calc_cost(self.region_name, self.sector_name, period)

    def calculate_shares(self, demand: float, fixed_total: float, gdp: GDP | None, period: int) -> None:
        with LoggingConfig.simulation_logging("ShareEngine"):
            for technology in self.technologies:
                if technology.has_no_input_or_output():
                    technology.set_tech_share(0.0)
                else:
                    technology.calc_share(self.region_name, self.sector_name, gdp, period)

            shares = normalize_shares([technology.share for technology in self.technologies])
            for technology, share in zip(self.technologies, shares):
                technology.set_tech_share(share)

            variable_share_total = sum(
                technology.share for technology in self.technologies if not technology.has_fixed_output
            )
            for technology in self.technologies:
                technology.adj_shares(demand, fixed_total, variable_share_total, period)

    def calibrate(self, demand: float, period: int) -> None:
        """Rescale the share weights of the vintages calibrated in this period."""
        with LoggingConfig.simulation_logging("ShareEngine"):
            for technology in self.technologies:
                # Outside its calibration period a weight would be scaled to zero.
                if technology.calibration_status and technology.is_vintage_period(period):
                    technology.adjust_for_calibration(demand, self.region_name, self.subsector_info, period)

    def produce(self, demand: float, gdp: GDP | None, period: int) -> None:
        with LoggingConfig.simulation_logging("ProductionDispatcher"):
            for technology in self.technologies:
                technology.production(self.region_name, self.sector_name, demand, gdp, period)
                technology.calc_emission(self.sector_name, period)

    def run_period(
        self, demand: float, gdp: GDP | None, period: int, calibrate: bool = False
    ) -> pd.DataFrame:
        """
        Evaluate the subsector for one period.

        Args:
            demand: Subsector demand for the sector's good.
            gdp: Regional GDP, only needed by technologies with a fuel preference elasticity.
            period: Model period.
            calibrate: Rescale share weights to the calibration values of the period, then
                recompute the shares with the new weights.

        Returns:
            pd.DataFrame: One row per technology with its cost, share, input, outputs and emissions.
        """
        fixed_total = self.reset_fixed_output(demand, period)
        self.calculate_costs(period)
        self.calculate_shares(demand, fixed_total, gdp, period)
        if calibrate:
            self.calibrate(demand, period)
            self.calculate_shares(demand, fixed_total, gdp, period)
        self.produce(demand, gdp, period)
        return TechnologyDataCollector().collect(self.technologies, period)
