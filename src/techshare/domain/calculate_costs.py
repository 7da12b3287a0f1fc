import math
from typing import Iterable

from techshare.domain.constants import SMALL_NUMBER
from techshare.domain.exceptions import ContractViolationError


def calculate_effective_efficiency(efficiency: float, efficiency_penalty: float) -> float:
    """
    Efficiency net of the efficiency penalty (e.g. energy lost to carbon capture).

    Args:
        efficiency: Output per unit of input.
        efficiency_penalty: Fraction of the efficiency lost, in [0, 1).

    Returns:
        float: efficiency * (1 - efficiency_penalty)
    """
    return efficiency * (1 - efficiency_penalty)


def calculate_effective_non_energy_cost(non_energy_cost: float, ne_cost_penalty: float) -> float:
    """Non-energy cost marked up by its penalty."""
    return non_energy_cost * (1 + ne_cost_penalty)


def require_positive_efficiency(efficiency: float, technology_name: str | None = None) -> float:
    """Return ``efficiency`` unchanged, raising if it cannot be used as a divisor."""
    if not (efficiency > 0 and math.isfinite(efficiency)):
        raise ContractViolationError(
            f"Effective efficiency must be positive before dividing by it, got {efficiency} "
            f"for technology {technology_name}",
            technology_name=technology_name,
        )
    return efficiency


def calculate_fuel_cost(fuel_price: float, f_multiplier: float, effective_efficiency: float) -> float:
    """
    Fuel cost per unit of output.

    Args:
        fuel_price: Market price per unit of fuel input.
        f_multiplier: Fuel price multiplier.
        effective_efficiency: Output per unit of input, must be positive.

    Returns:
        float: fuel_price * f_multiplier / effective_efficiency
    """
    require_positive_efficiency(effective_efficiency)
    return (fuel_price * f_multiplier) / effective_efficiency


def calculate_secondary_value(ghg_values: Iterable[float], output_values: Iterable[float]) -> float:
    """
    Net value of everything a technology produces besides its primary output.

    GHG values are costs (positive means the gas is taxed), output values are revenues. The primary
    output is expected among ``output_values`` with a value of zero.
    """
    return sum(output_values) - sum(ghg_values)


def calculate_technology_cost(
    fuel_cost: float,
    non_energy_cost: float,
    p_multiplier: float,
    secondary_value: float = 0.0,
    floor: float = SMALL_NUMBER,
) -> float:
    """
    Levelized cost per unit of primary output.

    Costs can drift below zero while markets are out of equilibrium (e.g. a large credit for
    sequestered carbon). The result is clamped to ``floor`` so that a logit share calculated from it
    stays defined.

    Args:
        fuel_cost: Fuel cost per unit of output.
        non_energy_cost: Effective non-energy cost per unit of output.
        p_multiplier: Total price multiplier.
        secondary_value: Net value of secondary outputs and emissions, subtracted from cost.
        floor: Smallest cost returned.

    Returns:
        float: max((fuel_cost + non_energy_cost) * p_multiplier - secondary_value, floor)
    """
    cost = (fuel_cost + non_energy_cost) * p_multiplier
    cost -= secondary_value
    return max(cost, floor)
