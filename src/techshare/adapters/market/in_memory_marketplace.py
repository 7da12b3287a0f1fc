"""
In-memory market ledger.

A market is identified by (good, region, period). Technologies read prices from it and add
demand and supply to it. No price discovery happens here: prices are set from outside, e.g. from
a prices file or by a test.
"""

import logging
from dataclasses import dataclass, field

import pandas as pd

logger = logging.getLogger(__name__)

MarketKey = tuple[str, str, int]


class InMemoryMarketInfo:
    """Named numeric values attached to a market, e.g. the CO2 coefficient of a fuel."""

    def __init__(self, values: dict[str, float] | None = None) -> None:
        self.values: dict[str, float] = dict(values or {})

    def get_double(self, key: str, required: bool = False) -> float:
        if key not in self.values:
            if required:
                logger.error("Required market info value %s was not found.", key)
            return 0.0
        return self.values[key]

    def set_double(self, key: str, value: float) -> None:
        self.values[key] = value

    def __repr__(self) -> str:
        return f"InMemoryMarketInfo({self.values})"


@dataclass
class Market:
    good_name: str
    region_name: str
    period: int
    price: float | None = None
    demand: float = 0.0
    supply: float = 0.0
    info: InMemoryMarketInfo = field(default_factory=InMemoryMarketInfo)


class InMemoryMarketplace:
    def __init__(self) -> None:
        self.markets: dict[MarketKey, Market] = {}

    def __repr__(self) -> str:
        return f"InMemoryMarketplace({len(self.markets)} markets)"

    def create_market(
        self, good_name: str, region_name: str, period: int, price: float | None = None, **info: float
    ) -> Market:
        """Create a market, or update the price and info of an existing one."""
        key = (good_name, region_name, period)
        market = self.markets.get(key)
        if market is None:
            market = Market(good_name, region_name, period)
            self.markets[key] = market
        if price is not None:
            market.price = price
        for name, value in info.items():
            market.info.set_double(name, value)
        return market

    def set_price(self, good_name: str, region_name: str, period: int, price: float) -> None:
        self.create_market(good_name, region_name, period, price=price)

    def _market(self, good_name: str, region_name: str, period: int) -> Market | None:
        return self.markets.get((good_name, region_name, period))

    def get_price(self, good_name: str, region_name: str, period: int) -> float | None:
        market = self._market(good_name, region_name, period)
        return None if market is None else market.price

    def add_to_demand(self, good_name: str, region_name: str, quantity: float, period: int) -> None:
        market = self._market(good_name, region_name, period)
        if market is None:
            logger.debug("No market for %s in %s in period %s; demand of %s dropped.", good_name, region_name, period, quantity)
            return
        market.demand += quantity

    def add_to_supply(self, good_name: str, region_name: str, quantity: float, period: int) -> None:
        market = self._market(good_name, region_name, period)
        if market is None:
            logger.debug("No market for %s in %s in period %s; supply of %s dropped.", good_name, region_name, period, quantity)
            return
        market.supply += quantity

    def get_demand(self, good_name: str, region_name: str, period: int) -> float:
        market = self._market(good_name, region_name, period)
        return 0.0 if market is None else market.demand

    def get_supply(self, good_name: str, region_name: str, period: int) -> float:
        market = self._market(good_name, region_name, period)
        return 0.0 if market is None else market.supply

    def get_market_info(
        self, good_name: str, region_name: str, period: int, create_if_absent: bool = False
    ) -> InMemoryMarketInfo | None:
        market = self._market(good_name, region_name, period)
        if market is None:
            if not create_if_absent:
                return None
            market = self.create_market(good_name, region_name, period)
        return market.info

    def clear_quantities(self, period: int | None = None) -> None:
        """Zero demand and supply, e.g. before the next solver iteration."""
        for market in self.markets.values():
            if period is None or market.period == period:
                market.demand = 0.0
                market.supply = 0.0

    def to_dataframe(self) -> pd.DataFrame:
        columns = ["good", "region", "period", "price", "demand", "supply"]
        rows = [
            (m.good_name, m.region_name, m.period, m.price, m.demand, m.supply)
            for m in sorted(self.markets.values(), key=lambda m: (m.period, m.region_name, m.good_name))
        ]
        return pd.DataFrame(rows, columns=columns)
