import logging

import pytest

from techshare.adapters.market import InMemoryMarketplace
from techshare.domain import CO2Emissions, OtherGHG, PrimaryOutput, create_ghg

REGION = "USA"


@pytest.fixture
def marketplace():
    marketplace = InMemoryMarketplace()
    marketplace.create_market("coal", REGION, 0, price=2.0, CO2coef=0.5)
    marketplace.create_market("CO2", REGION, 0, price=10.0)
    marketplace.create_market("CH4", REGION, 0, price=4.0)
    return marketplace


@pytest.fixture
def primary_output():
    return PrimaryOutput("electricity")


# ---------------------------------------------------------------------------
# CO2
# ---------------------------------------------------------------------------


def test_co2_reads_coefficient_from_fuel_market(marketplace):
    co2 = CO2Emissions(emissions_coef=0.2)

    co2.init_calc(marketplace, REGION, "coal", None, 0)

    assert co2.coefficient == 0.5


def test_co2_falls_back_to_own_coefficient(marketplace):
    co2 = CO2Emissions(emissions_coef=0.2)

    co2.init_calc(marketplace, REGION, "gas", None, 0)

    assert co2.coefficient == 0.2


def test_co2_value_is_tax_per_unit_output(marketplace, primary_output):
    co2 = CO2Emissions()
    co2.init_calc(marketplace, REGION, "coal", None, 0)

    # tax 10 * coefficient 0.5 / efficiency 0.4
    value = co2.get_ghg_value(marketplace, REGION, "coal", [primary_output], 0.4, 0)

    assert value == pytest.approx(12.5)


def test_co2_value_without_tax_market(primary_output):
    marketplace = InMemoryMarketplace()
    marketplace.create_market("coal", REGION, 0, price=2.0, CO2coef=0.5)
    co2 = CO2Emissions()
    co2.init_calc(marketplace, REGION, "coal", None, 0)

    assert co2.get_ghg_value(marketplace, REGION, "coal", [primary_output], 0.4, 0) == 0.0


def test_co2_calc_emission_with_sequestration(marketplace, primary_output):
    co2 = CO2Emissions(remove_fraction=0.9, non_energy_fraction=0.1)
    co2.init_calc(marketplace, REGION, "coal", None, 0)

    co2.calc_emission(marketplace, REGION, "coal", 100.0, [primary_output], None, 0)

    # 100 input * 0.5 = 50 uncontrolled; 5 non-energy; 0.9 of the remaining 45 stored
    assert co2.get_emiss_fuel(0) == pytest.approx(50.0)
    assert co2.get_sequest_amount_non_energy() == pytest.approx(5.0)
    assert co2.get_sequest_amount_geologic() == pytest.approx(40.5)
    assert co2.get_emission(0) == pytest.approx(4.5)
    assert co2.get_carbon_tax_paid(REGION, 0) == pytest.approx(45.0)
    assert marketplace.get_demand("CO2", REGION, 0) == pytest.approx(4.5)


def test_remove_fraction_outside_unit_interval_is_clipped(marketplace, caplog):
    co2 = CO2Emissions(remove_fraction=1.5)

    with caplog.at_level(logging.WARNING):
        co2.init_calc(marketplace, REGION, "coal", None, 0)

    assert co2.remove_fraction == 1.0
    assert "clipped" in caplog.text


def test_emission_of_a_period_without_calculation_is_zero():
    co2 = CO2Emissions()

    assert co2.get_emission(3) == 0.0
    assert co2.get_sequest_amount_geologic() == 0.0


# ---------------------------------------------------------------------------
# Other gases
# ---------------------------------------------------------------------------


def test_output_driven_gas(marketplace, primary_output):
    ch4 = OtherGHG("CH4", emissions_coef=0.01)
    primary_output.set_physical_output(marketplace, 400.0, REGION, 0)

    ch4.calc_emission(marketplace, REGION, "coal", 1000.0, [primary_output], None, 0)

    assert ch4.get_emission(0) == pytest.approx(4.0)
    assert ch4.get_emiss_fuel(0) == 0.0
    assert marketplace.get_demand("CH4", REGION, 0) == pytest.approx(4.0)


def test_input_driven_gas(marketplace, primary_output):
    ch4 = OtherGHG("CH4", emissions_coef=0.01, input_driven=True)

    ch4.calc_emission(marketplace, REGION, "coal", 1000.0, [primary_output], None, 0)

    assert ch4.get_emission(0) == pytest.approx(10.0)
    assert ch4.get_emiss_fuel(0) == pytest.approx(10.0)


def test_other_gas_value(marketplace, primary_output):
    ch4 = OtherGHG("CH4", emissions_coef=0.5, gwp=2.0)

    # tax 4 * gwp 2 * coefficient 0.5, per unit of output
    assert ch4.get_ghg_value(marketplace, REGION, "coal", [primary_output], 0.4, 0) == pytest.approx(4.0)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def test_copy_ghg_parameters():
    previous = OtherGHG("CH4", emissions_coef=0.3, gwp=21.0)
    current = OtherGHG("CH4")

    current.copy_ghg_parameters(previous)

    assert current.emissions_coef == 0.3
    assert current.gwp == 21.0


def test_copy_ghg_parameters_of_another_gas():
    with pytest.raises(ValueError):
        OtherGHG("CH4").copy_ghg_parameters(OtherGHG("N2O"))


def test_create_ghg():
    assert isinstance(create_ghg("CO2"), CO2Emissions)
    assert create_ghg("other", "N2O").name == "N2O"
    with pytest.raises(ValueError):
        create_ghg("other")
    with pytest.raises(ValueError):
        create_ghg("bogus", "X")
