"""Technology cost, market share, production and emissions."""

from .calibration import CalDataInput, CalDataOutput, CalDataOutputPercap, CalibrationData, create_calibration_data
from .datacollector import TechnologyDataCollector
from .emissions import GHG, CO2Emissions, OtherGHG, create_ghg
from .exceptions import CloneAfterSetupError, ContractViolationError, TechnologyError
from .models import Technology
from .modeltime import Modeltime
from .outputs import Output, PrimaryOutput, SecondaryOutput
from .technology_info import GlobalTechnology, OwnedParameters, SharedParameters, TechnologyInfo
from .value_objects import FixedOutput, FuelBinding, FuelKind

__all__ = [
    "CalDataInput",
    "CalDataOutput",
    "CalDataOutputPercap",
    "CalibrationData",
    "create_calibration_data",
    "TechnologyDataCollector",
    "GHG",
    "CO2Emissions",
    "OtherGHG",
    "create_ghg",
    "CloneAfterSetupError",
    "ContractViolationError",
    "TechnologyError",
    "Technology",
    "Modeltime",
    "Output",
    "PrimaryOutput",
    "SecondaryOutput",
    "GlobalTechnology",
    "OwnedParameters",
    "SharedParameters",
    "TechnologyInfo",
    "FixedOutput",
    "FuelBinding",
    "FuelKind",
]
