import json
import logging

import pytest

from techshare.adapters.market import InMemoryMarketplace
from techshare.adapters.repositories import (
    GlobalTechnologyJsonRepository,
    TechnologyInMemoryRepository,
    TechnologyJsonRepository,
    load_market_prices,
)
from techshare.adapters.repositories.json_repository import TechnologyInDb, dump_debug
from techshare.domain import CalDataOutput, GlobalTechnology, OtherGHG, SecondaryOutput, Technology

REGION = "USA"
SECTOR = "electricity"


@pytest.fixture
def repository(tmp_path):
    return TechnologyJsonRepository(tmp_path / "technologies.json")


@pytest.fixture
def chp_technology():
    technology = Technology("chp", 2005)
    for field, value in [
        ("fuelname", "gas"),
        ("efficiency", 0.5),
        ("efficiencyPenalty", 0.1),
        ("nonenergycost", 1.5),
        ("sharewt", 0.7),
        ("pMultiplier", 1.2),
        ("logitexp", -3),
        ("note", "combined heat and power"),
    ]:
        technology.parse_field(field, value)
    technology.add_ghg(OtherGHG("CH4", emissions_coef=0.01, gwp=21.0))
    technology.add_secondary_output(SecondaryOutput("steam", output_ratio=0.5))
    technology.set_calibration_data(CalDataOutput(40.0))
    return technology


def test_json_repository_technology(repository, chp_technology):
    # Given a JSON repository in a temporary directory and a technology
    #
    # When the technology is added to the repository
    repository.add(chp_technology)

    # Then the technology is in the repository when we read it through a new repository
    new_repository = TechnologyJsonRepository(repository.path)
    technology = new_repository.get("chp", 2005)

    assert technology.share_weight == 0.7
    assert technology.p_multiplier == 1.2
    assert technology.logit_exponent == -3.0
    assert technology.note == "combined heat and power"
    assert technology.info.fuel_name == "gas"
    assert technology.info.efficiency_penalty == 0.1
    assert technology.get_ghg("CH4").gwp == 21.0
    assert [output.name for output in technology.outputs] == ["steam"]
    assert isinstance(technology.calibration, CalDataOutput)
    assert technology.calibration.value == 40.0


def test_json_repository_round_trip_behaves_identically(repository, chp_technology, scenario, marketplace):
    """A reloaded technology computes the same cost, share and emissions as the original."""
    marketplace.create_market("steam", REGION, 0, price=1.0)
    marketplace.create_market("CH4", REGION, 0, price=2.0)
    repository.add(chp_technology)
    reloaded = TechnologyJsonRepository(repository.path).get("chp", 2005)

    results = []
    for technology in (chp_technology, reloaded):
        technology.complete_init(SECTOR, scenario=scenario)
        technology.init_calc(REGION, SECTOR, period=0)
        technology.calc_cost(REGION, SECTOR, 0)
        technology.calc_share(REGION, SECTOR, None, 0)
        technology.production(REGION, SECTOR, 100.0, None, 0)
        technology.calc_emission(SECTOR, 0)
        results.append((technology.tech_cost, technology.share, technology.output(0), technology.emissions_map))

    assert results[0] == results[1]


def test_json_repository_does_not_persist_primary_output(repository, make_technology):
    repository.add(make_technology())

    data = json.loads(repository.path.read_text())
    assert data["root"][0]["secondary_outputs"] == []

    reloaded = repository.get("coal", 2005)
    reloaded.complete_init(SECTOR)
    assert [output.name for output in reloaded.outputs] == [SECTOR]


def test_json_repository_global_technology_stores_flag_only(repository):
    technology = Technology("coal", 2005)
    technology.parse_field("globalTechnology", True)

    repository.add(technology)

    stored = json.loads(repository.path.read_text())["root"][0]
    assert stored["global_technology"] is True
    assert stored["parameters"] is None
    assert repository.get("coal", 2005).use_global_technology is True


def test_json_repository_add_list_replaces_same_vintage(repository, make_technology):
    repository.add_list([make_technology(), make_technology("gas", fuelname="gas")])
    repository.add(make_technology(sharewt=0.5))

    technologies = TechnologyJsonRepository(repository.path).list()

    assert sorted((t.name, t.year) for t in technologies) == [("coal", 2005), ("gas", 2005)]
    assert repository.get("coal", 2005).share_weight == 0.5


def test_json_repository_missing_file_is_empty(tmp_path):
    assert TechnologyJsonRepository(tmp_path / "missing.json").list() == []


def test_json_repository_reads_bare_list(tmp_path):
    path = tmp_path / "technologies.json"
    path.write_text(json.dumps([{"name": "wind", "year": 2010, "parameters": {"fuel_name": "none"}}]))

    technology = TechnologyJsonRepository(path).get("wind", 2010)

    assert technology.fuel_name == "none"


def test_json_repository_unknown_keys_warn(tmp_path, caplog):
    path = tmp_path / "technologies.json"
    path.write_text(json.dumps([{"name": "wind", "year": 2010, "colour": "white"}]))

    with caplog.at_level(logging.WARNING):
        technologies = TechnologyJsonRepository(path).list()

    assert len(technologies) == 1
    assert "Unrecognized field colour" in caplog.text


def test_technology_in_db_with_invalid_year_is_reported(caplog):
    # Given a stored technology with a non-positive year
    stored = TechnologyInDb(name="coal", year=-5)

    # When it is restored
    with caplog.at_level(logging.ERROR):
        technology = stored.to_domain()

    # Then the year is left unset and the anomaly is logged
    assert technology.year == 0
    assert "Invalid year" in caplog.text


def test_technology_in_db_fixed_output_round_trip(make_technology):
    technology = make_technology("hydro", fuelname="renewable", fixedOutput=200, setup=False)

    restored = TechnologyInDb.from_domain(technology).to_domain()

    assert restored.fixed_output.value == 200.0


def test_in_memory_repository(make_technology):
    repository = TechnologyInMemoryRepository()
    coal = make_technology()

    repository.add(coal)

    assert repository.get("coal", 2005) is coal
    assert repository.list() == [coal]


# ---------------------------------------------------------------------------
# Global technologies
# ---------------------------------------------------------------------------


def test_global_technology_repository_shares_templates(tmp_path):
    repository = GlobalTechnologyJsonRepository(tmp_path / "global_technologies.json")
    repository.add(GlobalTechnology("coal", fuel_name="coal", efficiency=0.5, year=2005))

    new_repository = GlobalTechnologyJsonRepository(repository.path)
    template = new_repository.get_technology("coal", 2005)

    assert template.efficiency == 0.5
    assert new_repository.get_technology("coal", 2005) is template
    assert new_repository.get_technology("coal", 2010) is None


def test_global_technology_repository_completes_templates(tmp_path):
    path = tmp_path / "global_technologies.json"
    path.write_text(json.dumps([{"name": "coal", "year": 2005, "efficiency": -1}]))

    template = GlobalTechnologyJsonRepository(path).get_technology("coal", 2005)

    assert template.efficiency == 1.0


# ---------------------------------------------------------------------------
# Market prices and diagnostics
# ---------------------------------------------------------------------------


def test_load_market_prices(tmp_path):
    path = tmp_path / "prices.json"
    path.write_text(
        json.dumps(
            [
                {"good": "coal", "region": REGION, "period": 0, "price": 2.0, "co2_coef": 0.5},
                {"good": "CO2", "region": REGION, "period": 0, "price": 10.0},
            ]
        )
    )
    marketplace = InMemoryMarketplace()

    assert load_market_prices(path, marketplace) == 2

    assert marketplace.get_price("coal", REGION, 0) == 2.0
    assert marketplace.get_market_info("coal", REGION, 0).get_double("CO2coef") == 0.5
    assert marketplace.get_market_info("CO2", REGION, 0).get_double("CO2coef") == 0.0


def test_dump_debug(make_technology):
    technology = make_technology()
    technology.calc_cost(REGION, SECTOR, 0)

    debug = json.loads(dump_debug([technology], 0))

    entry = debug["root"][0]
    assert entry["name"] == "coal"
    assert entry["tech_cost"] == pytest.approx(6.0)
    assert entry["outputs"] == {SECTOR: 0.0}
    assert entry["emissions"] == {"CO2": 0.0}
