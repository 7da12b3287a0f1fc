from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pandas as pd

if TYPE_CHECKING:
    from .emissions import GHG
    from .models import Technology
    from .outputs import Output

logger = logging.getLogger(__name__)

OUTPUT_COLUMN_PREFIX = "output:"
EMISSION_COLUMN_PREFIX = "emission:"


class TechnologyDataCollector:
    """
    Visitor that tabulates technologies period by period.

    Each visited technology becomes one record holding its economic state, the physical
    quantity of each of its outputs and the emission of each of its gases.
    """

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []
        self._current: dict[str, Any] | None = None

    def start_visit_technology(self, technology: Technology, period: int) -> None:
        if self._current is not None:
            logger.warning("Visit of %s started before the previous visit ended.", technology.name)
        self._current = {
            "technology": technology.name,
            "year": technology.year,
            "period": period,
            "fuel": technology.fuel_name,
            "share_weight": technology.share_weight,
            "share": technology.share,
            "fuel_cost": technology.fuel_cost,
            "tech_cost": technology.tech_cost,
            "input": technology.input_quantity,
            "fixed_output": technology.fixed_output_value,
        }

    def visit_output(self, output: Output, period: int) -> None:
        if self._current is None:
            return
        self._current[OUTPUT_COLUMN_PREFIX + output.name] = output.get_physical_output(period)

    def visit_ghg(self, ghg: GHG, period: int) -> None:
        if self._current is None:
            return
        self._current[EMISSION_COLUMN_PREFIX + ghg.name] = ghg.get_emission(period)

    def end_visit_technology(self, technology: Technology, period: int) -> None:
        if self._current is None:
            return
        self.records.append(self._current)
        self._current = None

    def collect(self, technologies: list[Technology], period: int) -> pd.DataFrame:
        """Visit every technology for the period and return the records collected so far."""
        for technology in technologies:
            technology.accept(self, period)
        return self.to_dataframe()

    def to_dataframe(self) -> pd.DataFrame:
        if not self.records:
            return pd.DataFrame(columns=["technology", "year", "period"])
        df = pd.DataFrame(self.records)
        quantity_columns = [
            column
            for column in df.columns
            if column.startswith(OUTPUT_COLUMN_PREFIX) or column.startswith(EMISSION_COLUMN_PREFIX)
        ]
        # A technology without a given output or gas simply has none of it.
        if quantity_columns:
            df[quantity_columns] = df[quantity_columns].fillna(0.0)
        return df

    def total_emissions(self) -> pd.Series:
        """Emissions per gas summed over all collected records."""
        df = self.to_dataframe()
        columns = [column for column in df.columns if column.startswith(EMISSION_COLUMN_PREFIX)]
        totals = df[columns].sum()
        totals.index = [column.removeprefix(EMISSION_COLUMN_PREFIX) for column in columns]
        return totals
