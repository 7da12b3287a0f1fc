import json

import pandas as pd
import pytest

from techshare.entrypoints.cli import run_technology_period


def create_json_in_path(path, content):
    with open(path, "w") as f:
        json.dump(content, f)
    return path


@pytest.fixture
def technologies_json(tmp_path):
    """
    Write a coal and a gas technology to a temporary JSON file.
    """
    technologies = [
        {"name": "coal", "year": 2005, "parameters": {"fuel_name": "coal", "efficiency": 0.4, "non_energy_cost": 1.0}},
        {"name": "gas", "year": 2005, "parameters": {"fuel_name": "gas", "efficiency": 0.5, "non_energy_cost": 1.0}},
    ]
    return create_json_in_path(tmp_path / "technologies.json", technologies)


@pytest.fixture
def prices_json(tmp_path):
    """
    Write coal and gas prices for period 0 to a temporary JSON file.
    """
    prices = [
        {"good": "coal", "region": "USA", "period": 0, "price": 2.0, "co2_coef": 0.5},
        {"good": "gas", "region": "USA", "period": 0, "price": 3.0, "co2_coef": 0.3},
    ]
    return create_json_in_path(tmp_path / "prices.json", prices)


def test_run_technology_period_prints_results(technologies_json, prices_json, capsys):
    run_technology_period(
        ["--technologies", str(technologies_json), "--prices", str(prices_json), "--demand", "1000"]
    )

    out = capsys.readouterr().out
    assert "coal" in out
    assert "gas" in out
    assert "electricity in USA" in out


def test_run_technology_period_writes_csv(technologies_json, prices_json, tmp_path):
    output_csv = tmp_path / "output" / "results.csv"

    run_technology_period(
        [
            "--technologies",
            str(technologies_json),
            "--prices",
            str(prices_json),
            "--demand",
            "1000",
            "--output-csv",
            str(output_csv),
        ]
    )

    results = pd.read_csv(output_csv)
    assert list(results["technology"]) == ["coal", "gas"]
    assert results["share"].sum() == pytest.approx(1.0)
    assert results["output:electricity"].sum() == pytest.approx(1000.0)
    assert results.loc[0, "emission:CO2"] == pytest.approx(results.loc[0, "input"] * 0.5)


def test_run_technology_period_writes_debug_json(technologies_json, prices_json, tmp_path):
    debug_json = tmp_path / "debug.json"

    run_technology_period(
        [
            "--technologies",
            str(technologies_json),
            "--prices",
            str(prices_json),
            "--demand",
            "1000",
            "--debug-json",
            str(debug_json),
        ]
    )

    debug = json.loads(debug_json.read_text())
    assert [entry["name"] for entry in debug["root"]] == ["coal", "gas"]
    assert debug["root"][0]["tech_cost"] == pytest.approx(6.0)


def test_run_technology_period_with_config_file(technologies_json, prices_json, tmp_path, capsys):
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text("start_year: 2000\nend_year: 2010\ntime_step: 5\n")
    technologies = json.loads(technologies_json.read_text())
    for technology in technologies:
        technology["year"] = 2005
    create_json_in_path(technologies_json, technologies)
    prices = json.loads(prices_json.read_text())
    for price in prices:
        price["period"] = 1
    create_json_in_path(prices_json, prices)

    run_technology_period(
        [
            "--technologies",
            str(technologies_json),
            "--prices",
            str(prices_json),
            "--demand",
            "10",
            "--period",
            "1",
            "--config",
            str(config_yaml),
        ]
    )

    assert "period 1" in capsys.readouterr().out


def test_run_technology_period_rejects_negative_demand(technologies_json, prices_json, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_technology_period(
            ["--technologies", str(technologies_json), "--prices", str(prices_json), "--demand", "-5"]
        )

    assert excinfo.value.code == 1
    assert "Period evaluation failed" in capsys.readouterr().out


def test_run_technology_period_missing_prices_file(technologies_json, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        run_technology_period(
            ["--technologies", str(technologies_json), "--prices", str(tmp_path / "missing.json"), "--demand", "1"]
        )

    assert excinfo.value.code == 1


def test_run_technology_period_requires_demand(technologies_json):
    with pytest.raises(SystemExit) as excinfo:
        run_technology_period(["--technologies", str(technologies_json)])

    assert excinfo.value.code == 2


def test_run_technology_period_with_gdp_per_capita(tmp_path, prices_json):
    technologies = [
        {
            "name": "coal",
            "year": 2005,
            "parameters": {"fuel_name": "coal", "efficiency": 0.4, "non_energy_cost": 1.0, "fuel_pref_elasticity": 0.5},
        },
        {"name": "gas", "year": 2005, "parameters": {"fuel_name": "gas", "efficiency": 0.5, "non_energy_cost": 1.0}},
    ]
    technologies_json = create_json_in_path(tmp_path / "technologies.json", technologies)
    output_csv = tmp_path / "results.csv"
    args = ["--technologies", str(technologies_json), "--prices", str(prices_json), "--demand", "1000"]

    run_technology_period(args + ["--gdp-per-capita", "4", "--output-csv", str(output_csv)])

    results = pd.read_csv(output_csv).set_index("technology")
    # coal: 6 ** -6 * 4 ** 0.5, gas: 7 ** -6
    expected_ratio = 2 * (6.0 / 7.0) ** -6
    assert results.loc["coal", "share"] / results.loc["gas", "share"] == pytest.approx(expected_ratio)

    with pytest.raises(SystemExit) as excinfo:
        run_technology_period(args)
    assert excinfo.value.code == 1
