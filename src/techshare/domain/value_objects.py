"""
Value objects replacing the magic numbers and magic fuel names of technology input data.

A raw fixed output of -1 and the fuel names "none" or "renewable" are accepted at the
structured-input boundary and converted here, so the rest of the domain branches on
explicit states rather than on sentinel comparisons.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

from .constants import EQUALITY_TOLERANCE, FIXED_OUTPUT_DEFAULT, NO_FUEL_NAMES, RENEWABLE_FUEL_NAME


@dataclass(frozen=True)
class FixedOutput:
    """
    Exogenously forced production quantity of a technology.

    Three states are possible:
        - unset: the technology competes through its logit share (``value is None``)
        - zero-locked: the technology never produces or consumes anything (``value == 0``)
        - active: the technology produces ``value`` regardless of cost
    """

    value: float | None = None

    @classmethod
    def unset(cls) -> FixedOutput:
        return cls(None)

    @classmethod
    def from_raw(cls, raw: float | None) -> FixedOutput:
        """Build from a raw input number, where any negative number means unset."""
        if raw is None or raw < 0:
            return cls(None)
        return cls(float(raw))

    @property
    def is_unset(self) -> bool:
        return self.value is None

    @property
    def is_active(self) -> bool:
        return self.value is not None

    @property
    def is_locked(self) -> bool:
        return self.value is not None and math.isclose(self.value, 0.0, abs_tol=EQUALITY_TOLERANCE)

    def to_raw(self) -> float:
        return FIXED_OUTPUT_DEFAULT if self.value is None else self.value

    def __repr__(self) -> str:
        if self.is_unset:
            return "FixedOutput(unset)"
        if self.is_locked:
            return "FixedOutput(locked)"
        return f"FixedOutput({self.value})"


class FuelKind(Enum):
    NO_FUEL = "no_fuel"
    RENEWABLE = "renewable"
    MARKET = "market"


@dataclass(frozen=True)
class FuelBinding:
    """Describes whether a technology's fuel is bought on a market."""

    kind: FuelKind
    name: str

    @classmethod
    def from_name(cls, fuel_name: str | None) -> FuelBinding:
        name = fuel_name or ""
        if name in NO_FUEL_NAMES:
            return cls(FuelKind.NO_FUEL, name)
        if name == RENEWABLE_FUEL_NAME:
            return cls(FuelKind.RENEWABLE, name)
        return cls(FuelKind.MARKET, name)

    @property
    def uses_market(self) -> bool:
        return self.kind is FuelKind.MARKET
