from __future__ import annotations

from .constants import Period, Year


class Modeltime:
    """Maps model periods to calendar years.

    Period 0 is the base year; later periods follow ``time_step`` years apart.
    """

    def __init__(self, *, start_year: Year, end_year: Year, time_step: int = 5) -> None:
        if time_step <= 0:
            raise ValueError(f"time_step must be positive, got {time_step}")
        if end_year < start_year:
            raise ValueError(f"end_year {end_year} is before start_year {start_year}")
        self.start_year = start_year
        self.end_year = end_year
        self.time_step = time_step

    @property
    def years(self) -> tuple[Year, ...]:
        return tuple(Year(y) for y in range(self.start_year, self.end_year + 1, self.time_step))

    @property
    def max_period(self) -> int:
        return len(self.years) - 1

    def per_to_yr(self, period: int) -> Year:
        if not 0 <= period <= self.max_period:
            raise IndexError(f"Period {period} outside of model time 0..{self.max_period}")
        return Year(self.start_year + period * self.time_step)

    def yr_to_per(self, year: int) -> Period:
        offset = year - self.start_year
        if offset < 0 or offset % self.time_step != 0 or year > self.end_year:
            raise ValueError(f"Year {year} is not a model year")
        return Period(offset // self.time_step)

    def __repr__(self) -> str:
        return f"Modeltime({self.start_year}-{self.end_year} step {self.time_step})"
