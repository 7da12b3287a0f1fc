"""
Regional economy inputs for runs that have no macro model behind them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ConstantGDP:
    """GDP per capita, scaled to the base period, held fixed across periods."""

    scaled_gdp_per_capita: float = 1.0

    def __post_init__(self) -> None:
        if self.scaled_gdp_per_capita <= 0:
            raise ValueError(f"Scaled GDP per capita must be positive, got {self.scaled_gdp_per_capita}")

    def get_best_scaled_gdp_per_cap(self, period: int) -> float:
        return self.scaled_gdp_per_capita
