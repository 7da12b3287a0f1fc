"""
Calibration data for a technology's base year.

Calibration values are read either as an input (fuel consumed) or as an output (good produced)
quantity. Conversion between the two uses the technology's effective efficiency.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from .exceptions import ContractViolationError

if TYPE_CHECKING:
    from .interfaces import Demographics


def _require_positive_efficiency(efficiency: float) -> None:
    if not efficiency > 0:
        raise ContractViolationError(f"Calibration conversion requires a positive efficiency, got {efficiency}")


class CalibrationData(ABC):
    kind: ClassVar[str]

    def __init__(self, value: float) -> None:
        self.value = value

    @abstractmethod
    def get_cal_input(self, efficiency: float) -> float:
        """Return the calibrated input quantity."""

    @abstractmethod
    def get_cal_output(self, efficiency: float) -> float:
        """Return the calibrated output quantity."""

    def scale_value(self, factor: float) -> None:
        self.value *= factor

    def init_calc(self, demographics: Demographics | None, period: int) -> None:
        pass

    def clone(self) -> CalibrationData:
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"


class CalDataInput(CalibrationData):
    kind = "input"

    def get_cal_input(self, efficiency: float) -> float:
        return self.value

    def get_cal_output(self, efficiency: float) -> float:
        return self.value * efficiency


class CalDataOutput(CalibrationData):
    kind = "output"

    def get_cal_input(self, efficiency: float) -> float:
        _require_positive_efficiency(efficiency)
        return self.value / efficiency

    def get_cal_output(self, efficiency: float) -> float:
        return self.value


class CalDataOutputPercap(CalibrationData):
    """Calibrated output given per capita; scaled by population in ``init_calc``."""

    kind = "output_percap"

    def __init__(self, value: float) -> None:
        super().__init__(value)
        self.population = 0.0

    def init_calc(self, demographics: Demographics | None, period: int) -> None:
        self.population = demographics.get_total(period) if demographics is not None else 0.0

    def get_cal_input(self, efficiency: float) -> float:
        _require_positive_efficiency(efficiency)
        return self.get_cal_output(efficiency) / efficiency

    def get_cal_output(self, efficiency: float) -> float:
        return self.value * self.population


CALIBRATION_TYPES: dict[str, type[CalibrationData]] = {
    CalDataInput.kind: CalDataInput,
    CalDataOutput.kind: CalDataOutput,
    CalDataOutputPercap.kind: CalDataOutputPercap,
}


def create_calibration_data(kind: str, value: float) -> CalibrationData:
    try:
        return CALIBRATION_TYPES[kind](value)
    except KeyError:
        raise ValueError(f"Unknown calibration type '{kind}'. Expected one of {sorted(CALIBRATION_TYPES)}")
