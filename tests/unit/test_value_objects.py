import pytest

from techshare.domain import FixedOutput, FuelBinding, FuelKind
from techshare.domain.constants import FIXED_OUTPUT_DEFAULT


@pytest.mark.parametrize("raw", [None, -1.0, -5.0])
def test_fixed_output_from_raw_unset(raw):
    fixed_output = FixedOutput.from_raw(raw)

    assert fixed_output.is_unset
    assert not fixed_output.is_active
    assert not fixed_output.is_locked


def test_fixed_output_from_raw_zero_is_locked():
    fixed_output = FixedOutput.from_raw(0)

    assert fixed_output.is_active
    assert fixed_output.is_locked
    assert repr(fixed_output) == "FixedOutput(locked)"


def test_fixed_output_from_raw_positive_is_active():
    fixed_output = FixedOutput.from_raw(200)

    assert fixed_output.is_active
    assert not fixed_output.is_locked
    assert fixed_output.value == 200.0


def test_fixed_output_to_raw():
    assert FixedOutput.unset().to_raw() == FIXED_OUTPUT_DEFAULT
    assert FixedOutput(200.0).to_raw() == 200.0


@pytest.mark.parametrize(
    "fuel_name, kind",
    [
        ("none", FuelKind.NO_FUEL),
        ("", FuelKind.NO_FUEL),
        (None, FuelKind.NO_FUEL),
        ("renewable", FuelKind.RENEWABLE),
        ("coal", FuelKind.MARKET),
    ],
)
def test_fuel_binding_from_name(fuel_name, kind):
    fuel = FuelBinding.from_name(fuel_name)

    assert fuel.kind is kind
    assert fuel.uses_market is (kind is FuelKind.MARKET)
