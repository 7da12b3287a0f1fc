"""
Outputs produced by a technology.

Every technology has exactly one primary output, named after its sector, at position 0 of its
output list. Secondary outputs (co-products such as electricity from a CHP plant) follow it,
are sold on their own markets and earn revenue that lowers the technology's cost.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .interfaces import DependencyFinder, Marketplace, TechnologyVisitor

logger = logging.getLogger(__name__)


class Output(ABC):
    kind: ClassVar[str]

    def __init__(self, name: str) -> None:
        self.name = name
        self.physical_output: dict[int, float] = {}

    def complete_init(self, sector_name: str, dep_finder: DependencyFinder | None, technology_operates: bool) -> None:
        pass

    def init_calc(self, region_name: str, period: int) -> None:
        pass

    @abstractmethod
    def set_physical_output(
        self, marketplace: Marketplace, primary_output: float, region_name: str, period: int
    ) -> None:
        """Record this output's quantity given the technology's primary output."""

    @abstractmethod
    def get_value(self, marketplace: Marketplace, region_name: str, period: int) -> float:
        """Return the revenue of this output per unit of primary output."""

    def get_physical_output(self, period: int) -> float:
        return self.physical_output.get(period, 0.0)

    def clone(self) -> Output:
        return copy.deepcopy(self)

    def accept(self, visitor: TechnologyVisitor, period: int) -> None:
        visitor.visit_output(self, period)

    def __repr__(self) -> str:
        return f"{type(self).__name__}: <{self.name}>"


class PrimaryOutput(Output):
    kind = "primary"

    def set_physical_output(
        self, marketplace: Marketplace, primary_output: float, region_name: str, period: int
    ) -> None:
        self.physical_output[period] = primary_output

    def get_value(self, marketplace: Marketplace, region_name: str, period: int) -> float:
        # The primary output is what the technology is priced on, so it carries no extra value.
        return 0.0


class SecondaryOutput(Output):
    kind = "secondary"

    def __init__(self, name: str, output_ratio: float = 1.0, price_mult: float = 1.0) -> None:
        super().__init__(name)
        self.output_ratio = output_ratio
        self.price_mult = price_mult

    def complete_init(self, sector_name: str, dep_finder: DependencyFinder | None, technology_operates: bool) -> None:
        if self.output_ratio < 0:
            logger.warning(
                "Secondary output %s in sector %s has a negative output ratio of %s.",
                self.name,
                sector_name,
                self.output_ratio,
            )
        if dep_finder is not None and technology_operates:
            dep_finder.add_dependency(sector_name, self.name)

    def set_physical_output(
        self, marketplace: Marketplace, primary_output: float, region_name: str, period: int
    ) -> None:
        quantity = primary_output * self.output_ratio
        self.physical_output[period] = quantity
        marketplace.add_to_supply(self.name, region_name, quantity, period)

    def get_value(self, marketplace: Marketplace, region_name: str, period: int) -> float:
        price = marketplace.get_price(self.name, region_name, period)
        if price is None:
            return 0.0
        return price * self.output_ratio * self.price_mult
