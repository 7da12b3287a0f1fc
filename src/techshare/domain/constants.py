from typing import NewType

Year = NewType("Year", int)
Period = NewType("Period", int)

# ===== Numerical Constants =====
SMALL_NUMBER = 1e-6  # Floor for technology cost; logit exponentiation is undefined at cost <= 0
LARGE_NUMBER = 1e99  # Substituted fuel price when a fuel has no market price
EQUALITY_TOLERANCE = 1e-10  # Absolute tolerance for comparisons against zero
LARGE_SHARE_WEIGHT = 1e6  # Share weights above this are reported when debug checking is enabled

# ===== Technology Defaults =====
LOGIT_EXP_DEFAULT = -6.0
SHARE_WEIGHT_DEFAULT = 1.0
PRICE_MULTIPLIER_DEFAULT = 1.0
FIXED_OUTPUT_DEFAULT = -1.0  # Raw value written to structured input for "no fixed output"

# ===== Fuel Names =====
NO_FUEL_NAMES = frozenset({"", "none"})
RENEWABLE_FUEL_NAME = "renewable"

# ===== Greenhouse Gases =====
CO2_NAME = "CO2"
CO2_COEF_INFO_KEY = "CO2coef"

# ===== Market Info Counters =====
CAL_DEMAND_KEY = "calDemand"
CAL_FIXED_DEMAND_KEY = "calFixedDemand"
MKT_NOT_ALL_FIXED = -1.0  # calDemand value meaning "demand for this fuel is not completely fixed"

# ===== Emission Map Suffixes =====
SEQUEST_GEOLOGIC_SUFFIX = "sequestGeologic"
SEQUEST_NON_ENERGY_SUFFIX = "sequestNonEngy"
