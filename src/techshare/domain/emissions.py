"""
Greenhouse gases emitted by a technology.

Each gas prices its own emissions from the market of the same name (a carbon tax when the
market exists, nothing otherwise) and reports the resulting net cost back to the technology,
where it lowers the technology's competitiveness. After production, each gas calculates the
physical emission for the period and posts it to its market.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Sequence

from .constants import CO2_COEF_INFO_KEY, CO2_NAME

if TYPE_CHECKING:
    from .interfaces import GDP, Marketplace, TechnologyVisitor
    from .outputs import Output

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmissionsRecord:
    """Emission quantities of one gas in one period."""

    emissions: float = 0.0
    emissions_fuel: float = 0.0
    sequestered_geologic: float = 0.0
    sequestered_non_energy: float = 0.0
    carbon_tax_paid: float = 0.0

    @classmethod
    def zero(cls) -> "EmissionsRecord":
        return cls()


class GHG(ABC):
    kind: ClassVar[str]

    def __init__(
        self,
        name: str,
        *,
        unit: str = "MTC",
        emissions_coef: float = 0.0,
        remove_fraction: float = 0.0,
        gwp: float = 1.0,
        storage_cost: float = 0.0,
    ) -> None:
        self.name = name
        self.unit = unit
        self.emissions_coef = emissions_coef
        self.remove_fraction = remove_fraction
        self.gwp = gwp
        self.storage_cost = storage_cost
        self.records: dict[int, EmissionsRecord] = {}
        self._last_period: int | None = None

    def init_calc(
        self, marketplace: Marketplace, region_name: str, fuel_name: str, subsector_info: object, period: int
    ) -> None:
        if not 0 <= self.remove_fraction <= 1:
            logger.warning(
                "Remove fraction %s of %s is outside [0, 1] and was clipped.", self.remove_fraction, self.name
            )
            self.remove_fraction = min(max(self.remove_fraction, 0.0), 1.0)

    def _tax(self, marketplace: Marketplace, region_name: str, period: int) -> float:
        price = marketplace.get_price(self.name, region_name, period)
        return 0.0 if price is None else price

    @abstractmethod
    def get_ghg_value(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        outputs: Sequence[Output],
        efficiency: float,
        period: int,
    ) -> float:
        """Return the net cost of this gas per unit of primary output. Positive values are costs."""

    @abstractmethod
    def calc_emission(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        input_quantity: float,
        outputs: Sequence[Output],
        gdp: GDP | None,
        period: int,
    ) -> None:
        """Calculate and record the emissions of the period."""

    def _record(self, marketplace: Marketplace, region_name: str, period: int, record: EmissionsRecord) -> None:
        self.records[period] = record
        self._last_period = period
        marketplace.add_to_demand(self.name, region_name, record.emissions, period)

    def get_emission(self, period: int) -> float:
        return self.records.get(period, EmissionsRecord.zero()).emissions

    def get_emiss_fuel(self, period: int) -> float:
        return self.records.get(period, EmissionsRecord.zero()).emissions_fuel

    def get_sequest_amount_geologic(self) -> float:
        if self._last_period is None:
            return 0.0
        return self.records[self._last_period].sequestered_geologic

    def get_sequest_amount_non_energy(self) -> float:
        if self._last_period is None:
            return 0.0
        return self.records[self._last_period].sequestered_non_energy

    def get_carbon_tax_paid(self, region_name: str, period: int) -> float:
        return self.records.get(period, EmissionsRecord.zero()).carbon_tax_paid

    def copy_ghg_parameters(self, previous: GHG) -> None:
        """Carry parameters of the same gas forward from a previous vintage."""
        if previous.name != self.name:
            raise ValueError(f"Cannot copy parameters of {previous.name} into {self.name}")
        self.unit = previous.unit
        self.emissions_coef = previous.emissions_coef
        self.remove_fraction = previous.remove_fraction
        self.gwp = previous.gwp
        self.storage_cost = previous.storage_cost

    def clone(self) -> GHG:
        return copy.deepcopy(self)

    def accept(self, visitor: TechnologyVisitor, period: int) -> None:
        visitor.visit_ghg(self, period)

    def __repr__(self) -> str:
        return f"{type(self).__name__}: <{self.name}>"


class CO2Emissions(GHG):
    """CO2 from fuel combustion, proportional to fuel input.

    The carbon content of the fuel is taken from the fuel market's ``CO2coef`` value where the
    market provides one, so all technologies burning the same fuel share a coefficient.
    """

    kind = "CO2"

    def __init__(self, *, non_energy_fraction: float = 0.0, **kwargs) -> None:
        super().__init__(CO2_NAME, **kwargs)
        self.non_energy_fraction = non_energy_fraction
        self.fuel_coef: float | None = None

    def init_calc(
        self, marketplace: Marketplace, region_name: str, fuel_name: str, subsector_info: object, period: int
    ) -> None:
        super().init_calc(marketplace, region_name, fuel_name, subsector_info, period)
        self.fuel_coef = None
        market_info = marketplace.get_market_info(fuel_name, region_name, period, False) if fuel_name else None
        if market_info is not None:
            coef = market_info.get_double(CO2_COEF_INFO_KEY, False)
            if coef > 0:
                self.fuel_coef = coef

    @property
    def coefficient(self) -> float:
        return self.emissions_coef if self.fuel_coef is None else self.fuel_coef

    def get_ghg_value(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        outputs: Sequence[Output],
        efficiency: float,
        period: int,
    ) -> float:
        if efficiency <= 0 or self.coefficient == 0:
            return 0.0
        tax = self._tax(marketplace, region_name, period)
        per_unit_input = (1 - self.remove_fraction) * tax * self.gwp + self.remove_fraction * self.storage_cost
        return per_unit_input * self.coefficient * (1 - self.non_energy_fraction) / efficiency

    def calc_emission(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        input_quantity: float,
        outputs: Sequence[Output],
        gdp: GDP | None,
        period: int,
    ) -> None:
        emissions_fuel = input_quantity * self.coefficient
        sequestered_non_energy = emissions_fuel * self.non_energy_fraction
        sequestered_geologic = (emissions_fuel - sequestered_non_energy) * self.remove_fraction
        emissions = emissions_fuel - sequestered_non_energy - sequestered_geologic
        tax = self._tax(marketplace, region_name, period)
        self._record(
            marketplace,
            region_name,
            period,
            EmissionsRecord(
                emissions=emissions,
                emissions_fuel=emissions_fuel,
                sequestered_geologic=sequestered_geologic,
                sequestered_non_energy=sequestered_non_energy,
                carbon_tax_paid=tax * self.gwp * emissions,
            ),
        )


class OtherGHG(GHG):
    """A non-CO2 gas (CH4, N2O, SO2, ...) driven by output, or by input if ``input_driven``."""

    kind = "other"

    def __init__(self, name: str, *, input_driven: bool = False, **kwargs) -> None:
        super().__init__(name, **kwargs)
        self.input_driven = input_driven

    def get_ghg_value(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        outputs: Sequence[Output],
        efficiency: float,
        period: int,
    ) -> float:
        tax = self._tax(marketplace, region_name, period)
        value = ((1 - self.remove_fraction) * tax * self.gwp + self.remove_fraction * self.storage_cost) * (
            self.emissions_coef
        )
        if self.input_driven:
            return value / efficiency if efficiency > 0 else 0.0
        return value

    def calc_emission(
        self,
        marketplace: Marketplace,
        region_name: str,
        fuel_name: str,
        input_quantity: float,
        outputs: Sequence[Output],
        gdp: GDP | None,
        period: int,
    ) -> None:
        if self.input_driven:
            driver = input_quantity
        else:
            driver = outputs[0].get_physical_output(period) if outputs else 0.0
        uncontrolled = driver * self.emissions_coef
        sequestered = uncontrolled * self.remove_fraction
        emissions = uncontrolled - sequestered
        tax = self._tax(marketplace, region_name, period)
        self._record(
            marketplace,
            region_name,
            period,
            EmissionsRecord(
                emissions=emissions,
                emissions_fuel=uncontrolled if self.input_driven else 0.0,
                sequestered_geologic=sequestered,
                carbon_tax_paid=tax * self.gwp * emissions,
            ),
        )


def create_ghg(kind: str, name: str | None = None, **parameters) -> GHG:
    """Create a gas from its structured-input kind."""
    if kind == CO2Emissions.kind:
        return CO2Emissions(**parameters)
    if kind == OtherGHG.kind:
        if not name:
            raise ValueError("A non-CO2 gas needs a name")
        return OtherGHG(name, **parameters)
    raise ValueError(f"Unknown greenhouse gas type '{kind}'")
