from __future__ import annotations

import copy
import logging
import math
from typing import TYPE_CHECKING, Any, Callable

from .calculate_costs import (
    calculate_effective_efficiency,
    calculate_effective_non_energy_cost,
    calculate_fuel_cost,
    calculate_secondary_value,
    calculate_technology_cost,
    require_positive_efficiency,
)
from .calculate_shares import (
    adjust_share_for_fixed_output,
    calculate_calibrated_share_weight,
    calculate_logit_share,
    normalize_share,
)
from .calibration import CalibrationData
from .constants import (
    CAL_DEMAND_KEY,
    CAL_FIXED_DEMAND_KEY,
    CO2_NAME,
    LARGE_NUMBER,
    LARGE_SHARE_WEIGHT,
    LOGIT_EXP_DEFAULT,
    MKT_NOT_ALL_FIXED,
    PRICE_MULTIPLIER_DEFAULT,
    SEQUEST_GEOLOGIC_SUFFIX,
    SEQUEST_NON_ENERGY_SUFFIX,
    SHARE_WEIGHT_DEFAULT,
)
from .emissions import GHG, CO2Emissions
from .exceptions import CloneAfterSetupError, ContractViolationError, TechnologyError
from .outputs import Output, PrimaryOutput, SecondaryOutput
from .technology_info import OwnedParameters, ParameterBinding, SharedParameters, TechnologyInfo
from .value_objects import FixedOutput, FuelBinding

if TYPE_CHECKING:
    from ..simulation import Scenario
    from .interfaces import GDP, Demographics, DependencyFinder, GlobalTechnologyDatabase, Marketplace
    from .interfaces import TechnologyVisitor

logger = logging.getLogger(__name__)


# Structured-input field name -> (TechnologyInfo attribute, converter)
TECHNOLOGY_INFO_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "fuelname": ("fuel_name", str),
    "fuelprefElasticity": ("fuel_pref_elasticity", float),
    "efficiency": ("efficiency", float),
    "efficiencyPenalty": ("efficiency_penalty", float),
    "nonenergycost": ("non_energy_cost", float),
    "neCostPenalty": ("ne_cost_penalty", float),
    "fMultiplier": ("f_multiplier", float),
}

# Structured-input field name -> (Technology attribute, converter)
TECHNOLOGY_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "sharewt": ("share_weight", float),
    "pMultiplier": ("p_multiplier", float),
    "logitexp": ("logit_exponent", float),
    "note": ("note", str),
}

DEPRECATED_FIELDS = frozenset({"name", "year"})


class Technology:
    """
    One vintage of a technology competing for the demand of its subsector.

    Per period the technology prices itself (``calc_cost``), derives a logit share from that
    price (``calc_share``, then ``norm_share`` and ``adj_shares`` once its siblings are known),
    optionally back-solves its share weight against calibration data
    (``adjust_for_calibration``) and finally turns its share of subsector demand into output,
    fuel demand and emissions (``production``).

    Parameters are populated field by field (``parse_field``, ``add_ghg``,
    ``add_secondary_output``, ``set_calibration_data``) and the technology is finalized once
    with ``complete_init``. Cloning is only allowed before that point.
    """

    def __init__(self, name: str, year: int = 0) -> None:
        self.name = name
        self.scenario: Scenario | None = None
        self._initialized = False
        self.year = 0
        if year:
            self.set_year(year)

        self.share_weight = SHARE_WEIGHT_DEFAULT
        self.share = 0.0
        self.fuel_cost = 0.0
        self.tech_cost = 0.0
        self.p_multiplier = PRICE_MULTIPLIER_DEFAULT
        self.logit_exponent = LOGIT_EXP_DEFAULT
        self.input_quantity = 0.0
        self.note = ""

        self.fixed_output = FixedOutput.unset()
        self._fixed_output_value: float | None = None

        self.use_global_technology = False
        self.parameters: ParameterBinding | None = None
        self.calibration: CalibrationData | None = None
        self.ghgs: list[GHG] = []
        self.ghg_index: dict[str, int] = {}
        self.outputs: list[Output] = []

        self.emissions_map: dict[str, float] = {}
        self.emissions_fuel_map: dict[str, float] = {}


    def __repr__(self) -> str:
        return f"Technology: <{self.name} {self.year}>"

    # ------------------------------------------------------------------ setup

    @property
    def log(self) -> logging.Logger:
        return self.scenario.logger if self.scenario is not None else logger

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def set_year(self, year: int) -> None:
        if year <= 0:
            self.log.error("Invalid year %s passed to set year for technology %s.", year, self.name)
            return
        self.year = year

    def _owned_info(self) -> TechnologyInfo:
        """Return owned parameters, creating them on first use. Owning parameters overrides the global template."""
        if self.parameters is None or self.parameters.is_shared:
            self.parameters = OwnedParameters(TechnologyInfo(self.name))
        self.use_global_technology = False
        return self.parameters.info

    def parse_field(self, field: str, value: Any) -> bool:
        """
        Set one field from structured input.

        Args:
            field: Structured-input field name, e.g. ``efficiency`` or ``sharewt``.
            value: The raw value of the field.

        Returns:
            bool: True if the field was recognized.
        """
        if field in DEPRECATED_FIELDS:
            return True
        if field in TECHNOLOGY_INFO_FIELDS:
            attribute, convert = TECHNOLOGY_INFO_FIELDS[field]
            setattr(self._owned_info(), attribute, convert(value))
            return True
        if field in TECHNOLOGY_FIELDS:
            attribute, convert = TECHNOLOGY_FIELDS[field]
            setattr(self, attribute, convert(value))
            return True
        if field == "fixedOutput":
            self.fixed_output = FixedOutput.from_raw(float(value))
            return True
        if field == "globalTechnology":
            self.use_global_technology = True if value is None else bool(value)
            return True
        self.log.warning("Unrecognized field %s found while parsing technology %s.", field, self.name)
        return False

    def set_parameters(self, info: TechnologyInfo) -> None:
        self.parameters = OwnedParameters(info)
        self.use_global_technology = False

    def add_ghg(self, ghg: GHG) -> None:
        """Add a gas, replacing an existing gas of the same name."""
        if ghg.name in self.ghg_index:
            self.ghgs[self.ghg_index[ghg.name]] = ghg
            return
        self.ghgs.append(ghg)
        self.ghg_index[ghg.name] = len(self.ghgs) - 1

    def get_ghg(self, name: str) -> GHG | None:
        index = self.ghg_index.get(name)
        return None if index is None else self.ghgs[index]

    @property
    def ghg_names(self) -> list[str]:
        return list(self.ghg_index)

    def add_secondary_output(self, output: SecondaryOutput) -> None:
        self.outputs.append(output)

    def set_calibration_data(self, calibration: CalibrationData | None) -> None:
        self.calibration = calibration

    def clone(self) -> Technology:
        """
        Deep copy of the technology and everything it owns.

        Raises:
            CloneAfterSetupError: If ``complete_init`` has already run.
        """
        if self._initialized:
            raise CloneAfterSetupError(f"Technology {self.name} cannot be cloned after complete_init.")
        other = copy.copy(self)
        other.parameters = self.parameters.clone() if self.parameters is not None else None
        other.calibration = self.calibration.clone() if self.calibration is not None else None
        other.ghgs = [ghg.clone() for ghg in self.ghgs]
        other.ghg_index = dict(self.ghg_index)
        other.outputs = [output.clone() for output in self.outputs]
        other.emissions_map = dict(self.emissions_map)
        other.emissions_fuel_map = dict(self.emissions_fuel_map)
        return other

    def complete_init(
        self,
        sector_name: str,
        dep_finder: DependencyFinder | None = None,
        subsector_info: object = None,
        land_allocator: object = None,
        global_tech_db: GlobalTechnologyDatabase | None = None,
        scenario: Scenario | None = None,
    ) -> None:
        """
        Finalize the technology once before any period is calculated.

        Resolves the global template, validates parameters, ensures a CO2 gas and the primary
        output exist and registers the fuel dependency of the sector.

        Args:
            sector_name: Name of the sector, which is also the name of the primary output.
            dep_finder: Regional registry of which goods a sector consumes.
            subsector_info: Information record of the containing subsector.
            land_allocator: Regional land allocator. Unused by this technology type.
            global_tech_db: Source of shared parameter templates.
            scenario: Marketplace, model time, configuration and logger used by later calls.
        """
        if self._initialized:
            raise ContractViolationError(
                f"Technology {self.name} in sector {sector_name} was already initialized.", technology_name=self.name
            )
        if scenario is not None:
            self.scenario = scenario

        if self.year <= 0:
            self.log.error("Technology %s in sector %s has an invalid year attribute.", self.name, sector_name)

        if self.use_global_technology and global_tech_db is not None:
            template = global_tech_db.get_technology(self.name, self.year)
            if template is None:
                self.log.warning(
                    "No global technology %s for year %s. Using default parameters.", self.name, self.year
                )
            else:
                self.parameters = SharedParameters(template)
        if self.parameters is None:
            self.parameters = OwnedParameters(TechnologyInfo(self.name))
        if not self.parameters.is_shared:
            self.parameters.info.complete_init()

        if CO2_NAME not in self.ghg_index:
            self.add_ghg(CO2Emissions())

        self.outputs.insert(0, PrimaryOutput(sector_name))
        operates = not self.has_no_input_or_output()
        for output in self.outputs:
            output.complete_init(sector_name, dep_finder, operates)

        if dep_finder is not None and operates:
            dep_finder.add_dependency(sector_name, self.fuel_name)

        if self.fixed_output.is_active:
            self._fixed_output_value = self.fixed_output.value
        self._initialized = True

    # ------------------------------------------------------------ collaborators

    def _require_scenario(self) -> Scenario:
        if self.scenario is None:
            raise TechnologyError(f"Technology {self.name} has no scenario; call complete_init with one first.")
        return self.scenario

    @property
    def marketplace(self) -> Marketplace:
        return self._require_scenario().marketplace

    def is_vintage_period(self, period: int) -> bool:
        return self.year == self._require_scenario().modeltime.per_to_yr(period)

    # ------------------------------------------------------------- parameters

    @property
    def info(self) -> TechnologyInfo:
        if self.parameters is None:
            raise TechnologyError(f"Technology {self.name} has no parameters yet.")
        return self.parameters.info

    @property
    def fuel_name(self) -> str:
        return self.parameters.info.fuel_name if self.parameters is not None else ""

    @property
    def fuel(self) -> FuelBinding:
        return FuelBinding.from_name(self.fuel_name)

    @property
    def effective_efficiency(self) -> float:
        return calculate_effective_efficiency(self.info.efficiency, self.info.efficiency_penalty)

    @property
    def effective_non_energy_cost(self) -> float:
        return calculate_effective_non_energy_cost(self.info.non_energy_cost, self.info.ne_cost_penalty)

    @property
    def intensity(self) -> float:
        """Input needed per unit of output."""
        return 1 / require_positive_efficiency(self.effective_efficiency, self.name)

    def input_required_for_output(self, required_output: float, period: int) -> float:
        return required_output / require_positive_efficiency(self.effective_efficiency, self.name)

    # ------------------------------------------------------------ per period

    def init_calc(
        self,
        region_name: str,
        sector_name: str,
        subsector_info: object = None,
        demographics: Demographics | None = None,
        period: int = 0,
    ) -> None:
        if self.calibration is not None:
            self.calibration.init_calc(demographics, period)
            if self.calibration.get_cal_input(self.effective_efficiency) < 0:
                self.log.debug("Negative calibration value for technology %s. Calibration removed.", self.name)
                self.calibration = None

        for ghg in self.ghgs:
            ghg.init_calc(self.marketplace, region_name, self.fuel_name, subsector_info, period)
        for output in self.outputs:
            output.init_calc(region_name, period)

    def calc_secondary_value(self, region_name: str, period: int) -> float:
        """Revenue from secondary outputs net of the cost of emissions, per unit of primary output."""
        marketplace = self.marketplace
        efficiency = self.effective_efficiency
        ghg_values = [
            ghg.get_ghg_value(marketplace, region_name, self.fuel_name, self.outputs, efficiency, period)
            for ghg in self.ghgs
        ]
        output_values = [output.get_value(marketplace, region_name, period) for output in self.outputs]
        return calculate_secondary_value(ghg_values, output_values)

    def calc_cost(self, region_name: str, sector_name: str, period: int) -> None:
        fuel = self.fuel
        if not fuel.uses_market:
            fuel_price = 0.0
        else:
            price = self.marketplace.get_price(fuel.name, region_name, period)
            if price is None:
                self.log.error(
                    "Requested fuel %s with no price in technology %s in sector %s in region %s.",
                    fuel.name,
                    self.name,
                    sector_name,
                    region_name,
                )
                price = LARGE_NUMBER
            fuel_price = price

        efficiency = require_positive_efficiency(self.effective_efficiency, self.name)
        self.fuel_cost = calculate_fuel_cost(fuel_price, self.info.f_multiplier, efficiency)
        self.tech_cost = calculate_technology_cost(
            self.fuel_cost,
            self.effective_non_energy_cost,
            self.p_multiplier,
            self.calc_secondary_value(region_name, period),
        )

    def calc_share(self, region_name: str, sector_name: str, gdp: GDP | None, period: int) -> None:
        elasticity = self.info.fuel_pref_elasticity
        scaled_gdp_per_capita = None
        if elasticity != 0:
            if gdp is None:
                raise ContractViolationError(
                    f"Technology {self.name} has a fuel preference elasticity but no GDP was given.",
                    technology_name=self.name,
                )
            scaled_gdp_per_capita = gdp.get_best_scaled_gdp_per_cap(period)
        self.share = calculate_logit_share(
            self.share_weight, self.tech_cost, self.logit_exponent, elasticity, scaled_gdp_per_capita
        )
        if math.isinf(self.share):
            self.log.error(
                "Share of technology %s overflowed (cost %s, logit exponent %s).",
                self.name,
                self.tech_cost,
                self.logit_exponent,
            )

    def norm_share(self, total: float) -> None:
        self.share = normalize_share(self.share, total)

    def set_tech_share(self, share: float) -> None:
        self.share = share

    def scale_share_weight(self, factor: float) -> None:
        self.share_weight *= factor

    # ---------------------------------------------------------- fixed output

    def reset_fixed_output(self, period: int) -> None:
        if self.fixed_output.is_active:
            self._fixed_output_value = self.fixed_output.value

    def scale_fixed_output(self, ratio: float) -> None:
        """Scale the working fixed output. Technologies without fixed output are left alone."""
        if self._fixed_output_value is not None:
            self._fixed_output_value *= ratio

    @property
    def fixed_output_value(self) -> float:
        return 0.0 if self._fixed_output_value is None else self._fixed_output_value

    @property
    def has_fixed_output(self) -> bool:
        return self._fixed_output_value is not None

    def fixed_input(self, period: int) -> float:
        """Fuel needed for the fixed output, only in the vintage's own period."""
        if self._fixed_output_value is None or not self.is_vintage_period(period):
            return 0.0
        return self._fixed_output_value / require_positive_efficiency(self.effective_efficiency, self.name)

    def has_no_input_or_output(self) -> bool:
        return self.fixed_output.is_locked

    def adj_shares(
        self, subsector_demand: float, subsector_fixed_output: float, variable_share_total: float, period: int
    ) -> None:
        """
        Make this technology's share consistent with the fixed output of its subsector.

        Only correct when at most one technology in the subsector has a fixed output.
        """
        adjusted = adjust_share_for_fixed_output(
            self.share, self._fixed_output_value, subsector_demand, subsector_fixed_output, variable_share_total
        )
        if adjusted.fixed_output_value != self._fixed_output_value:
            self.log.debug(
                "Fixed output of technology %s lowered from %s to %s.",
                self.name,
                self._fixed_output_value,
                adjusted.fixed_output_value,
            )
        self.share, self._fixed_output_value = adjusted

    # ----------------------------------------------------------- calibration

    @property
    def calibration_status(self) -> bool:
        return self.calibration is not None

    def get_calibration_input(self, period: int) -> float:
        if self.calibration is not None and self.is_vintage_period(period):
            return self.calibration.get_cal_input(self.effective_efficiency)
        return 0.0

    def get_calibration_output(self, period: int) -> float:
        if self.calibration is not None and self.is_vintage_period(period):
            return self.calibration.get_cal_output(self.effective_efficiency)
        return 0.0

    def scale_calibration_input(self, factor: float) -> None:
        if self.calibration is not None:
            self.calibration.scale_value(factor)

    def output_fixed(self) -> bool:
        """True if all output is either fixed or calibrated."""
        return self.calibration_status or self.fixed_output.is_active or self.share_weight == 0

    def tech_available(self) -> bool:
        """True if the technology can vary its output in response to demand."""
        return self.calibration_status or not (self.fixed_output.is_active or self.share_weight == 0)

    def adjust_for_calibration(
        self, subsector_demand: float, region_name: str, subsector_info: object, period: int
    ) -> None:
        """
        Rescale the share weight so that output matches the calibration value of the period.

        Run inside the solver iterations, so the weights converge together with the shares.
        """
        share_weight = calculate_calibrated_share_weight(
            self.share_weight, self.share, subsector_demand, self.get_calibration_output(period)
        )
        if share_weight < 0:
            self.log.warning(
                "Share weight is less than zero in technology %s. Share weight was %s (reset to 1).",
                self.name,
                share_weight,
            )
            share_weight = 1.0
        if self._require_scenario().config.debug_checking and share_weight > LARGE_SHARE_WEIGHT:
            self.log.warning("Large share weight %s in calibration for technology %s.", share_weight, self.name)
        self.share_weight = share_weight

    def tabulate_fixed_demands(self, region_name: str, period: int, subsector_info: object = None) -> None:
        """Add this technology's fixed or calibrated fuel input to the counters of its fuel market."""
        market_info = self.marketplace.get_market_info(self.fuel_name, region_name, period, False)
        if market_info is None:
            # Renewable and no-fuel technologies have no fuel market.
            return

        if not self.output_fixed():
            market_info.set_double(CAL_DEMAND_KEY, MKT_NOT_ALL_FIXED)
            return

        fixed_or_calibrated_input = 0.0
        fixed_input = 0.0
        if self.calibration_status:
            fixed_or_calibrated_input = self.get_calibration_input(period)
        elif self.fixed_output.is_active:
            fixed_or_calibrated_input = fixed_input = self.fixed_input(period)

        existing = max(market_info.get_double(CAL_DEMAND_KEY, False), 0.0)
        market_info.set_double(CAL_DEMAND_KEY, existing + fixed_or_calibrated_input)
        # Strictly fixed demand is tracked separately since it is never scaled.
        existing = max(market_info.get_double(CAL_FIXED_DEMAND_KEY, False), 0.0)
        market_info.set_double(CAL_FIXED_DEMAND_KEY, existing + fixed_input)

    # ------------------------------------------------------------ production

    def production(
        self, region_name: str, sector_name: str, demand: float, gdp: GDP | None, period: int
    ) -> None:
        """
        Produce this technology's share of subsector demand.

        Args:
            region_name: Region of the technology.
            sector_name: Sector of the technology, also its primary output.
            demand: Subsector demand, finite and non-negative.
            gdp: Regional GDP, passed through to the gases.
            period: Model period.

        Raises:
            ContractViolationError: If ``demand`` is negative or not finite.
        """
        if not (math.isfinite(demand) and demand >= 0):
            raise ContractViolationError(
                f"Technology {self.name} was asked to produce for an invalid demand of {demand}.",
                technology_name=self.name,
            )

        primary_output = self.share * demand
        if primary_output < 0:
            self.log.error("Primary output value less than zero for technology %s.", self.name)

        self.input_quantity = primary_output / require_positive_efficiency(self.effective_efficiency, self.name)

        fuel = self.fuel
        if fuel.uses_market:
            self.marketplace.add_to_demand(fuel.name, region_name, self.input_quantity, period)

        self._calc_emissions_and_outputs(region_name, self.input_quantity, primary_output, gdp, period)

    def _calc_emissions_and_outputs(
        self, region_name: str, input_quantity: float, primary_output: float, gdp: GDP | None, period: int
    ) -> None:
        marketplace = self.marketplace
        for output in self.outputs:
            output.set_physical_output(marketplace, primary_output, region_name, period)
        # Gases may depend on the outputs, so they go last.
        for ghg in self.ghgs:
            ghg.calc_emission(marketplace, region_name, self.fuel_name, input_quantity, self.outputs, gdp, period)

    def output(self, period: int) -> float:
        """Primary output of the period."""
        return self.outputs[0].get_physical_output(period) if self.outputs else 0.0

    # ------------------------------------------------------------- emissions

    def calc_emission(self, good_name: str, period: int) -> None:
        """Tabulate the emissions of the period by gas and by fuel."""
        self.emissions_map.clear()
        self.emissions_fuel_map.clear()
        fuel_name = self.fuel_name
        for ghg in self.ghgs:
            emission = ghg.get_emission(period)
            self.emissions_map[ghg.name] = emission
            self.emissions_map[ghg.name + fuel_name] = emission
            self.emissions_map[ghg.name + SEQUEST_GEOLOGIC_SUFFIX] = ghg.get_sequest_amount_geologic()
            self.emissions_map[ghg.name + SEQUEST_NON_ENERGY_SUFFIX] = ghg.get_sequest_amount_non_energy()
            # Keyed by fuel only, so the last gas wins.
            self.emissions_fuel_map[fuel_name] = ghg.get_emiss_fuel(period)

    def get_total_ghg_cost(self, region_name: str, period: int) -> float:
        marketplace = self.marketplace
        efficiency = self.effective_efficiency
        return sum(
            ghg.get_ghg_value(marketplace, region_name, self.fuel_name, self.outputs, efficiency, period)
            for ghg in self.ghgs
        )

    def get_carbon_tax_paid(self, region_name: str, period: int) -> float:
        return sum(ghg.get_carbon_tax_paid(region_name, period) for ghg in self.ghgs)

    def copy_ghg_parameters(self, previous: GHG) -> None:
        """Carry the parameters of a gas forward from the previous vintage."""
        ghg = self.get_ghg(previous.name)
        if ghg is None:
            self.log.warning("Technology %s has no gas %s to copy parameters into.", self.name, previous.name)
            return
        ghg.copy_ghg_parameters(previous)

    def accept(self, visitor: TechnologyVisitor, period: int) -> None:
        visitor.start_visit_technology(self, period)
        for output in self.outputs:
            output.accept(visitor, period)
        for ghg in self.ghgs:
            ghg.accept(visitor, period)
        visitor.end_visit_technology(self, period)
