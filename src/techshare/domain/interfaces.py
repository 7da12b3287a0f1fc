"""Protocols for the collaborators a technology talks to but does not own."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .emissions import GHG
    from .models import Technology
    from .outputs import Output
    from .technology_info import GlobalTechnology


@runtime_checkable
class MarketInfo(Protocol):
    def get_double(self, key: str, required: bool = False) -> float:
        """Return a named value, 0.0 if it was never set."""
        ...

    def set_double(self, key: str, value: float) -> None:
        """Set a named value."""
        ...


@runtime_checkable
class Marketplace(Protocol):
    def get_price(self, good_name: str, region_name: str, period: int) -> float | None:
        """Return the price of a good, or None if no such market exists."""
        ...

    def add_to_demand(self, good_name: str, region_name: str, quantity: float, period: int) -> None:
        """Add a quantity to the demand of a good."""
        ...

    def add_to_supply(self, good_name: str, region_name: str, quantity: float, period: int) -> None:
        """Add a quantity to the supply of a good."""
        ...

    def get_market_info(
        self, good_name: str, region_name: str, period: int, create_if_absent: bool = False
    ) -> MarketInfo | None:
        """Return the information record of a market, or None if there is no market."""
        ...


@runtime_checkable
class GDP(Protocol):
    def get_best_scaled_gdp_per_cap(self, period: int) -> float:
        """Return regional GDP per capita scaled to the base period."""
        ...


@runtime_checkable
class Demographics(Protocol):
    def get_total(self, period: int) -> float:
        """Return total regional population."""
        ...


@runtime_checkable
class DependencyFinder(Protocol):
    def add_dependency(self, object_name: str, dependency: str) -> None:
        """Record that ``object_name`` consumes ``dependency``."""
        ...


@runtime_checkable
class GlobalTechnologyDatabase(Protocol):
    def get_technology(self, name: str, year: int) -> GlobalTechnology | None:
        """Return the completed shared parameters for a technology vintage."""
        ...


@runtime_checkable
class TechnologyVisitor(Protocol):
    def start_visit_technology(self, technology: Technology, period: int) -> None: ...

    def visit_output(self, output: Output, period: int) -> None: ...

    def visit_ghg(self, ghg: GHG, period: int) -> None: ...

    def end_visit_technology(self, technology: Technology, period: int) -> None: ...
