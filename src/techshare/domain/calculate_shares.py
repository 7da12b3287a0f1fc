"""
Logit market-share arithmetic for technologies competing within a subsector.

The functions here are pure: they take the current state of one technology and return the new
values. ``Technology`` applies them and does the logging.
"""

import math
from typing import NamedTuple, Sequence

import numpy as np


def calculate_logit_share(
    share_weight: float,
    cost: float,
    logit_exponent: float,
    fuel_pref_elasticity: float = 0.0,
    scaled_gdp_per_capita: float | None = None,
) -> float:
    """
    Unnormalized logit share.

    Args:
        share_weight: Calibrated preference for the technology.
        cost: Technology cost, expected positive.
        logit_exponent: Cost sensitivity; negative so that higher cost means lower share.
        fuel_pref_elasticity: Elasticity of the share to GDP per capita. Zero disables the term.
        scaled_gdp_per_capita: Regional GDP per capita relative to the base period. Only read
            when ``fuel_pref_elasticity`` is non-zero.

    Returns:
        float: share_weight * cost ** logit_exponent [* gdp_per_capita ** fuel_pref_elasticity].
        A share that leaves the float range is returned as ``math.inf``.
    """
    try:
        share = share_weight * cost**logit_exponent
    except OverflowError:
        share = math.inf if share_weight > 0 else 0.0
    if fuel_pref_elasticity != 0:
        if scaled_gdp_per_capita is None:
            raise ValueError("A GDP per capita is needed when the fuel preference elasticity is non-zero")
        share *= scaled_gdp_per_capita**fuel_pref_elasticity
    return share


def normalize_share(share: float, total: float) -> float:
    """Divide by the sum of sibling shares; a zero sum means no technology is viable."""
    if total == 0:
        return 0.0
    return share / total


def normalize_shares(shares: Sequence[float]) -> list[float]:
    """
    Normalize a full set of sibling shares so that they sum to one (or are all zero).

    Infinite shares split the whole subsector evenly and every finite share becomes zero.
    """
    values = np.asarray(shares, dtype=float)
    overflowed = np.isposinf(values)
    if overflowed.any():
        values = overflowed.astype(float)
    total = values.sum()
    if total == 0:
        return [0.0] * len(values)
    return (values / total).tolist()


class FixedShareAdjustment(NamedTuple):
    share: float
    fixed_output_value: float | None


def adjust_share_for_fixed_output(
    share: float,
    fixed_output_value: float | None,
    subsector_demand: float,
    subsector_fixed_output: float,
    variable_share_total: float,
) -> FixedShareAdjustment:
    """
    Make one technology's share consistent with the fixed output in its subsector.

    A technology with fixed output takes exactly that fraction of demand. The variable technologies
    split what remains in proportion to their logit shares. When a fixed output exceeds the whole
    subsector demand it is lowered to the subsector's fixed total.

    This is only correct when at most one technology in the subsector has a fixed output.

    Args:
        share: Normalized logit share of the technology.
        fixed_output_value: Working fixed output of the technology, or None if it has none.
        subsector_demand: Total demand of the subsector.
        subsector_fixed_output: Sum of fixed output over the subsector's technologies.
        variable_share_total: Sum of normalized shares of the technologies without fixed output.

    Returns:
        FixedShareAdjustment: the new share and working fixed output.
    """
    if subsector_fixed_output <= 0:
        return FixedShareAdjustment(share, fixed_output_value)

    remaining_demand = max(subsector_demand - subsector_fixed_output, 0.0)

    if fixed_output_value is not None:
        if subsector_demand > 0:
            new_share = fixed_output_value / subsector_demand
            if fixed_output_value > subsector_demand:
                fixed_output_value = subsector_fixed_output
            return FixedShareAdjustment(new_share, fixed_output_value)
        return FixedShareAdjustment(0.0, fixed_output_value)

    if subsector_demand > 0 and variable_share_total != 0:
        return FixedShareAdjustment(share * (remaining_demand / subsector_demand) / variable_share_total, None)
    # Either nothing is demanded or no variable technology has a share left to rescale.
    return FixedShareAdjustment(0.0, None)


def calculate_calibrated_share_weight(
    share_weight: float, share: float, subsector_demand: float, calibration_output: float
) -> float:
    """
    Rescale a share weight so that the technology's share of demand matches its calibration value.

    A share weight of zero cannot be scaled, so it is restarted at one whenever there is something
    to calibrate to. The result may be negative if the inputs are; callers must check.
    """
    if share_weight == 0 and calibration_output > 0:
        share_weight = 1.0

    technology_demand = share * subsector_demand
    if technology_demand > 0:
        share_weight *= calibration_output / technology_demand
    return share_weight
