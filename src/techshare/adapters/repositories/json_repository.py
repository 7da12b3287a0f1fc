import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Self

from pydantic import BaseModel, Field, model_validator

from ...domain import (
    GHG,
    CalibrationData,
    CO2Emissions,
    GlobalTechnology,
    OtherGHG,
    SecondaryOutput,
    Technology,
    TechnologyInfo,
    create_calibration_data,
    create_ghg,
)
from ...domain.constants import CO2_COEF_INFO_KEY, FIXED_OUTPUT_DEFAULT, LOGIT_EXP_DEFAULT
from ...domain.models import TECHNOLOGY_INFO_FIELDS
from ..market import InMemoryMarketplace

logger = logging.getLogger(__name__)


class StructuredInDb(BaseModel):
    """Base for structured-input models. Unknown keys are reported and ignored."""

    @model_validator(mode="before")
    @classmethod
    def drop_unknown_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        unknown = [key for key in data if key not in cls.model_fields]
        for key in unknown:
            logger.warning("Unrecognized field %s found while parsing %s.", key, cls.__name__)
        return {key: value for key, value in data.items() if key not in unknown}


class TechnologyInfoInDb(StructuredInDb):
    fuel_name: str = ""
    efficiency: float = 1.0
    efficiency_penalty: float = 0.0
    non_energy_cost: float = 0.0
    ne_cost_penalty: float = 0.0
    f_multiplier: float = 1.0
    fuel_pref_elasticity: float = 0.0

    def structured_fields(self) -> list[tuple[str, Any]]:
        """Structured-input (field, value) pairs for ``Technology.parse_field``."""
        return [(field, getattr(self, attribute)) for field, (attribute, _) in TECHNOLOGY_INFO_FIELDS.items()]

    def to_domain(self, name: str) -> TechnologyInfo:
        return TechnologyInfo(name=name, **self.model_dump())

    @classmethod
    def from_domain(cls, info: TechnologyInfo) -> Self:
        return cls(
            fuel_name=info.fuel_name,
            efficiency=info.efficiency,
            efficiency_penalty=info.efficiency_penalty,
            non_energy_cost=info.non_energy_cost,
            ne_cost_penalty=info.ne_cost_penalty,
            f_multiplier=info.f_multiplier,
            fuel_pref_elasticity=info.fuel_pref_elasticity,
        )


class GHGInDb(StructuredInDb):
    kind: str = CO2Emissions.kind
    name: str = CO2Emissions.kind
    unit: str = "MTC"
    emissions_coef: float = 0.0
    remove_fraction: float = 0.0
    gwp: float = 1.0
    storage_cost: float = 0.0
    non_energy_fraction: float = 0.0
    input_driven: bool = False

    def to_domain(self) -> GHG:
        parameters: dict[str, Any] = dict(
            unit=self.unit,
            emissions_coef=self.emissions_coef,
            remove_fraction=self.remove_fraction,
            gwp=self.gwp,
            storage_cost=self.storage_cost,
        )
        if self.kind == CO2Emissions.kind:
            return create_ghg(self.kind, non_energy_fraction=self.non_energy_fraction, **parameters)
        return create_ghg(self.kind, self.name, input_driven=self.input_driven, **parameters)

    @classmethod
    def from_domain(cls, ghg: GHG) -> Self:
        return cls(
            kind=ghg.kind,
            name=ghg.name,
            unit=ghg.unit,
            emissions_coef=ghg.emissions_coef,
            remove_fraction=ghg.remove_fraction,
            gwp=ghg.gwp,
            storage_cost=ghg.storage_cost,
            non_energy_fraction=ghg.non_energy_fraction if isinstance(ghg, CO2Emissions) else 0.0,
            input_driven=ghg.input_driven if isinstance(ghg, OtherGHG) else False,
        )


class SecondaryOutputInDb(StructuredInDb):
    name: str
    output_ratio: float = 1.0
    price_mult: float = 1.0

    def to_domain(self) -> SecondaryOutput:
        return SecondaryOutput(self.name, output_ratio=self.output_ratio, price_mult=self.price_mult)

    @classmethod
    def from_domain(cls, output: SecondaryOutput) -> Self:
        return cls(name=output.name, output_ratio=output.output_ratio, price_mult=output.price_mult)


class CalibrationInDb(StructuredInDb):
    kind: str
    value: float

    def to_domain(self) -> CalibrationData:
        return create_calibration_data(self.kind, self.value)

    @classmethod
    def from_domain(cls, calibration: CalibrationData) -> Self:
        return cls(kind=calibration.kind, value=calibration.value)


class TechnologyInDb(StructuredInDb):
    """
    Persistent form of a technology vintage.

    Only what was read in is stored: the primary output is recreated by ``complete_init`` and a
    technology bound to a global template stores the flag, not the template's parameters.
    """

    name: str
    year: int
    share_weight: float = 1.0
    p_multiplier: float = 1.0
    logit_exponent: float = LOGIT_EXP_DEFAULT
    fixed_output: float = FIXED_OUTPUT_DEFAULT
    note: str = ""
    global_technology: bool = False
    parameters: TechnologyInfoInDb | None = None
    calibration: CalibrationInDb | None = None
    ghgs: list[GHGInDb] = Field(default_factory=list)
    secondary_outputs: list[SecondaryOutputInDb] = Field(default_factory=list)

    def __lt__(self, other: Self) -> bool:
        return (self.name, self.year) < (other.name, other.year)

    def to_domain(self) -> Technology:
        technology = Technology(self.name, self.year)
        fields: list[tuple[str, Any]] = []
        if self.parameters is not None:
            fields.extend(self.parameters.structured_fields())
        fields.extend(
            [
                ("sharewt", self.share_weight),
                ("pMultiplier", self.p_multiplier),
                ("logitexp", self.logit_exponent),
                ("fixedOutput", self.fixed_output),
                ("note", self.note),
            ]
        )
        # Setting any parameter creates owned parameters, so the template flag goes last.
        if self.global_technology:
            fields.append(("globalTechnology", True))
        for field, value in fields:
            technology.parse_field(field, value)

        if self.calibration is not None:
            technology.set_calibration_data(self.calibration.to_domain())
        for ghg in self.ghgs:
            technology.add_ghg(ghg.to_domain())
        for output in self.secondary_outputs:
            technology.add_secondary_output(output.to_domain())
        return technology

    @classmethod
    def from_domain(cls, technology: Technology) -> Self:
        parameters = None
        if technology.parameters is not None and not technology.use_global_technology:
            parameters = TechnologyInfoInDb.from_domain(technology.parameters.info)
        return cls(
            name=technology.name,
            year=technology.year,
            share_weight=technology.share_weight,
            p_multiplier=technology.p_multiplier,
            logit_exponent=technology.logit_exponent,
            fixed_output=technology.fixed_output.to_raw(),
            note=technology.note,
            global_technology=technology.use_global_technology,
            parameters=parameters,
            calibration=(
                CalibrationInDb.from_domain(technology.calibration) if technology.calibration is not None else None
            ),
            ghgs=[GHGInDb.from_domain(ghg) for ghg in technology.ghgs],
            secondary_outputs=[
                SecondaryOutputInDb.from_domain(output)
                for output in technology.outputs
                if isinstance(output, SecondaryOutput)
            ],
        )


class TechnologyListInDb(BaseModel):
    """
    Used to make a list of technologies serializable to json.
    """

    root: list[TechnologyInDb]


class TechnologyDebugInDb(BaseModel):
    """Per-period diagnostic state of a technology. Written only, never read back."""

    name: str
    year: int
    period: int
    fuel_name: str
    share_weight: float
    efficiency: float
    non_energy_cost: float
    p_multiplier: float
    f_multiplier: float
    logit_exponent: float
    fuel_cost: float
    tech_cost: float
    share: float
    input: float
    fixed_output: float
    outputs: dict[str, float]
    emissions: dict[str, float]

    @classmethod
    def from_domain(cls, technology: Technology, period: int) -> Self:
        return cls(
            name=technology.name,
            year=technology.year,
            period=period,
            fuel_name=technology.fuel_name,
            share_weight=technology.share_weight,
            efficiency=technology.effective_efficiency,
            non_energy_cost=technology.effective_non_energy_cost,
            p_multiplier=technology.p_multiplier,
            f_multiplier=technology.info.f_multiplier,
            logit_exponent=technology.logit_exponent,
            fuel_cost=technology.fuel_cost,
            tech_cost=technology.tech_cost,
            share=technology.share,
            input=technology.input_quantity,
            fixed_output=technology.fixed_output_value,
            outputs={output.name: output.get_physical_output(period) for output in technology.outputs},
            emissions={ghg.name: ghg.get_emission(period) for ghg in technology.ghgs},
        )


class TechnologyDebugListInDb(BaseModel):
    root: list[TechnologyDebugInDb]


def dump_debug(technologies: Iterable[Technology], period: int) -> str:
    """Return the diagnostic JSON of the technologies for one period."""
    debug = TechnologyDebugListInDb(root=[TechnologyDebugInDb.from_domain(tech, period) for tech in technologies])
    return debug.model_dump_json(indent=2)


class TechnologyJsonRepository:
    """
    Repository for storing technology vintages in a json file. Uses pydantic models for serialization /
    deserialization. All input and output is done using domain models.
    """

    _all = None

    def __init__(self, path: Path) -> None:
        self.path = path

    def _fetch_all(self) -> dict[tuple[str, int], TechnologyInDb]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            file_content = f.read().strip()
        if not file_content or file_content == "[]":
            return {}
        data = json.loads(file_content)
        # Accept a bare list as well as the wrapped form written by this repository.
        technologies_in_db = TechnologyListInDb(root=data) if isinstance(data, list) else TechnologyListInDb(**data)
        return {(tech.name, tech.year): tech for tech in technologies_in_db.root}

    @property
    def all(self) -> dict[tuple[str, int], TechnologyInDb]:
        """
        Cache fetching all models from file.
        """
        if self._all is None:
            self._all = self._fetch_all()
        return self._all

    def get(self, name: str, year: int) -> Technology:
        return self.all[(name, year)].to_domain()

    def list(self) -> list[Technology]:
        return [tech_in_db.to_domain() for tech_in_db in self.all.values()]

    def _write_models(self, locked: List[TechnologyInDb]) -> None:  # use List because of list method
        self.path.parent.mkdir(parents=True, exist_ok=True)
        locked.sort()
        technologies_in_db = TechnologyListInDb(root=locked)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(technologies_in_db.model_dump_json(indent=2))
        self._all = None

    def add(self, technology: Technology) -> None:
        """Add a single technology vintage to the repository."""
        tech_in_db = TechnologyInDb.from_domain(technology)
        locked = self._fetch_all()
        locked[(tech_in_db.name, tech_in_db.year)] = tech_in_db
        self._write_models(list(locked.values()))

    def add_list(self, technologies: Iterable[Technology]) -> None:
        """Add a list of technology vintages to the repository."""
        locked = self._fetch_all()
        for technology in technologies:
            tech_in_db = TechnologyInDb.from_domain(technology)
            locked[(tech_in_db.name, tech_in_db.year)] = tech_in_db
        self._write_models(list(locked.values()))


class GlobalTechnologyInDb(TechnologyInfoInDb):
    name: str
    year: int

    def to_domain(self) -> GlobalTechnology:  # type: ignore[override]
        return GlobalTechnology(**self.model_dump())

    @classmethod
    def from_domain(cls, technology: GlobalTechnology) -> Self:  # type: ignore[override]
        return cls(name=technology.name, year=technology.year, **TechnologyInfoInDb.from_domain(technology).model_dump())


class GlobalTechnologyListInDb(BaseModel):
    root: list[GlobalTechnologyInDb]


class GlobalTechnologyJsonRepository:
    """
    Shared technology templates stored in a json file.

    Templates are loaded and completed once, then the same object is returned for every request so
    that all technologies bound to a template share it.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._templates: dict[tuple[str, int], GlobalTechnology] | None = None

    def _fetch_all(self) -> dict[tuple[str, int], GlobalTechnologyInDb]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            file_content = f.read().strip()
        if not file_content or file_content == "[]":
            return {}
        data = json.loads(file_content)
        templates_in_db = GlobalTechnologyListInDb(root=data) if isinstance(data, list) else GlobalTechnologyListInDb(**data)
        return {(tech.name, tech.year): tech for tech in templates_in_db.root}

    @property
    def templates(self) -> dict[tuple[str, int], GlobalTechnology]:
        if self._templates is None:
            self._templates = {}
            for key, tech_in_db in self._fetch_all().items():
                template = tech_in_db.to_domain()
                template.complete_init()
                self._templates[key] = template
        return self._templates

    def get_technology(self, name: str, year: int) -> GlobalTechnology | None:
        return self.templates.get((name, year))

    def list(self) -> list[GlobalTechnology]:
        return list(self.templates.values())

    def add(self, technology: GlobalTechnology) -> None:
        locked = self._fetch_all()
        locked[(technology.name, technology.year)] = GlobalTechnologyInDb.from_domain(technology)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        models = sorted(locked.values(), key=lambda tech: (tech.name, tech.year))
        with self.path.open("w", encoding="utf-8") as f:
            f.write(GlobalTechnologyListInDb(root=models).model_dump_json(indent=2))
        self._templates = None


class MarketPriceInDb(StructuredInDb):
    good: str
    region: str
    period: int
    price: float | None = None
    co2_coef: float | None = None


class MarketPriceListInDb(BaseModel):
    root: list[MarketPriceInDb]


def load_market_prices(path: Path, marketplace: InMemoryMarketplace) -> int:
    """
    Create the markets listed in a prices file.

    Args:
        path: JSON file holding a list of markets (or ``{"root": [...]}``).
        marketplace: Marketplace to create the markets in.

    Returns:
        int: Number of markets created or updated.
    """
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    prices_in_db = MarketPriceListInDb(root=data) if isinstance(data, list) else MarketPriceListInDb(**data)
    for entry in prices_in_db.root:
        info = {CO2_COEF_INFO_KEY: entry.co2_coef} if entry.co2_coef is not None else {}
        marketplace.create_market(entry.good, entry.region, entry.period, price=entry.price, **info)
    logger.info("Loaded %s markets from %s", len(prices_in_db.root), path)
    return len(prices_in_db.root)
