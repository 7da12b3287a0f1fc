"""
Parameter store of a technology.

A technology either owns its parameters or points at a shared template held by a global
technology database. Both are read through the same ``TechnologyInfo`` attributes; only the
binding differs, and only owned parameters may be cloned.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from .exceptions import CloneAfterSetupError

logger = logging.getLogger(__name__)


@dataclass
class TechnologyInfo:
    name: str
    fuel_name: str = ""
    efficiency: float = 1.0
    efficiency_penalty: float = 0.0
    non_energy_cost: float = 0.0
    ne_cost_penalty: float = 0.0
    f_multiplier: float = 1.0
    fuel_pref_elasticity: float = 0.0

    def complete_init(self) -> None:
        """
        Validate parameters once, before the first period is calculated.

        Invalid values are corrected rather than rejected so that a single bad input record
        does not stop a model run.
        """
        if self.efficiency <= 0:
            logger.error(
                "Technology %s has an invalid efficiency of %s. Efficiency reset to 1.",
                self.name,
                self.efficiency,
            )
            self.efficiency = 1.0
        if not 0 <= self.efficiency_penalty < 1:
            logger.error(
                "Technology %s has an invalid efficiency penalty of %s. Penalty reset to 0.",
                self.name,
                self.efficiency_penalty,
            )
            self.efficiency_penalty = 0.0

    def clone(self) -> TechnologyInfo:
        return copy.deepcopy(self)


@dataclass
class GlobalTechnology(TechnologyInfo):
    """Technology parameters shared by every region that uses this technology vintage."""

    year: int = 0


class OwnedParameters:
    """Parameters created and owned by a single technology."""

    is_shared = False

    def __init__(self, info: TechnologyInfo) -> None:
        self.info = info

    def clone(self) -> OwnedParameters:
        return OwnedParameters(self.info.clone())

    def __repr__(self) -> str:
        return f"OwnedParameters({self.info.name})"


class SharedParameters:
    """Non-owning reference to a template held by a global technology database."""

    is_shared = True

    def __init__(self, info: TechnologyInfo) -> None:
        self.info = info

    def clone(self) -> SharedParameters:
        raise CloneAfterSetupError(
            f"Technology parameters for {self.info.name} are a shared template and cannot be cloned. "
            "Clone technologies before complete_init."
        )

    def __repr__(self) -> str:
        return f"SharedParameters({self.info.name})"


ParameterBinding = OwnedParameters | SharedParameters
