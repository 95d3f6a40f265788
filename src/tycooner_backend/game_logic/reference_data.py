"""Static economic reference data consumed once at session start.

The module holds the goods catalog, the facility type table, the bundled
European geography (neighbors and centroids) and the per-country economic
properties. Nothing here changes during a session; state generation in
:mod:`tycooner_backend.game_logic.bootstrap` derives countries and markets
from these tables.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path  # noqa: TC003

from pydantic import BaseModel, Field, PositiveInt, TypeAdapter, model_validator
from pydantic.config import ConfigDict

from tycooner_backend.shared.enums import FacilityType, GoodCategory


class Good(BaseModel):
    """Immutable catalog entry for a tradeable good."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: GoodCategory
    base_price: Decimal = Field(..., gt=0)
    labor_intensity: float = Field(..., ge=0, le=1)
    resource_intensity: float = Field(..., ge=0, le=1)


class FacilitySpec(BaseModel):
    """Per-type constants of a production facility."""

    model_config = ConfigDict(frozen=True)

    facility_type: FacilityType
    good_id: str
    population_divisor: PositiveInt
    output_per_day: int = Field(..., ge=0)
    base_build_cost: Decimal = Field(..., ge=0)


class CountryGeoRecord(BaseModel):
    """Geometry record produced by the offline map preprocessing tools."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    neighbors: tuple[str, ...] = Field(default_factory=tuple)
    rings: tuple[tuple[tuple[float, float], ...], ...] = Field(default_factory=tuple)
    centroid: tuple[float, float]


class CountryEconomics(BaseModel):
    """Economic properties of a country."""

    model_config = ConfigDict(frozen=True)

    population: PositiveInt
    wage_level: float = Field(..., gt=0)
    price_index: float = Field(..., gt=0)
    resource_bonus: dict[str, float] = Field(default_factory=dict)


class GeoDataset(BaseModel):
    """Geography plus economics input consumed by state generation."""

    model_config = ConfigDict(frozen=True)

    countries: tuple[CountryGeoRecord, ...]
    economics: dict[str, CountryEconomics]

    @model_validator(mode="after")
    def _validate_adjacency(self) -> GeoDataset:
        """Ensure ids are unique and every neighbor relation is mutual."""
        by_id = {record.id: record for record in self.countries}
        if len(by_id) != len(self.countries):
            msg = "Country identifiers must be unique."
            raise ValueError(msg)
        for record in self.countries:
            for neighbor_id in record.neighbors:
                neighbor = by_id.get(neighbor_id)
                if neighbor is None:
                    msg = f"Country {record.id} lists unknown neighbor {neighbor_id}."
                    raise ValueError(msg)
                if record.id not in neighbor.neighbors:
                    msg = (
                        f"Adjacency is not symmetric: {record.id} lists "
                        f"{neighbor_id} but not vice versa."
                    )
                    raise ValueError(msg)
        return self


GOODS: dict[str, Good] = {
    good.id: good
    for good in (
        Good(
            id="grain",
            name="Grain",
            category=GoodCategory.FOOD,
            base_price=Decimal(100),
            labor_intensity=0.3,
            resource_intensity=0.7,
        ),
        Good(
            id="clothing",
            name="Clothing",
            category=GoodCategory.CONSUMER,
            base_price=Decimal(126),
            labor_intensity=0.6,
            resource_intensity=0.4,
        ),
        Good(
            id="meat",
            name="Meat",
            category=GoodCategory.FOOD,
            base_price=Decimal(100),
            labor_intensity=0.4,
            resource_intensity=0.6,
        ),
        Good(
            id="consumerGoods",
            name="Consumer Goods",
            category=GoodCategory.CONSUMER,
            base_price=Decimal(100),
            labor_intensity=0.7,
            resource_intensity=0.4,
        ),
        Good(
            id="electronics",
            name="Electronics",
            category=GoodCategory.MANUFACTURED,
            base_price=Decimal(200),
            labor_intensity=0.8,
            resource_intensity=0.5,
        ),
        Good(
            id="processedFood",
            name="Processed Food",
            category=GoodCategory.FOOD,
            base_price=Decimal(30),
            labor_intensity=0.5,
            resource_intensity=0.6,
        ),
    )
}

# Iteration order is the production order within a tick.
FACILITY_SPECS: dict[FacilityType, FacilitySpec] = {
    FacilityType.FARM: FacilitySpec(
        facility_type=FacilityType.FARM,
        good_id="grain",
        population_divisor=12_000_000,
        output_per_day=1,
        base_build_cost=Decimal(3000),
    ),
    FacilityType.FACTORY: FacilitySpec(
        facility_type=FacilityType.FACTORY,
        good_id="clothing",
        population_divisor=20_000_000,
        output_per_day=1,
        base_build_cost=Decimal(5000),
    ),
    FacilityType.RANCH: FacilitySpec(
        facility_type=FacilityType.RANCH,
        good_id="meat",
        population_divisor=15_000_000,
        output_per_day=1,
        base_build_cost=Decimal(4000),
    ),
}

# Demand multiplier applied to population / 100_000 per good category.
CATEGORY_DEMAND_MULTIPLIERS: dict[GoodCategory, float] = {
    GoodCategory.FOOD: 2.0,
    GoodCategory.RAW: 0.5,
    GoodCategory.MANUFACTURED: 1.0,
    GoodCategory.CONSUMER: 1.5,
    GoodCategory.LUXURY: 0.3,
}


def _geo(
    country_id: str,
    name: str,
    neighbors: tuple[str, ...],
    lon: float,
    lat: float,
) -> CountryGeoRecord:
    return CountryGeoRecord(
        id=country_id, name=name, neighbors=neighbors, centroid=(lon, lat)
    )


# Land borders plus the Channel tunnel (GB-FR) and the Oresund bridge (DK-SE).
EUROPE_GEO: tuple[CountryGeoRecord, ...] = (
    _geo("AL", "Albania", ("ME", "XK", "MK", "GR"), 20.0, 41.1),
    _geo("AT", "Austria", ("DE", "CZ", "SK", "HU", "SI", "IT", "CH"), 14.1, 47.6),
    _geo("BA", "Bosnia and Herzegovina", ("HR", "RS", "ME"), 17.8, 44.2),
    _geo("BE", "Belgium", ("FR", "LU", "DE", "NL"), 4.6, 50.6),
    _geo("BG", "Bulgaria", ("RO", "RS", "MK", "GR"), 25.2, 42.8),
    _geo("BY", "Belarus", ("PL", "LT", "LV", "UA"), 28.0, 53.5),
    _geo("CH", "Switzerland", ("FR", "DE", "AT", "IT"), 8.2, 46.8),
    _geo("CZ", "Czechia", ("DE", "PL", "SK", "AT"), 15.3, 49.8),
    _geo(
        "DE",
        "Germany",
        ("DK", "PL", "CZ", "AT", "CH", "FR", "LU", "BE", "NL"),
        10.4,
        51.1,
    ),
    _geo("DK", "Denmark", ("DE", "SE"), 9.6, 56.0),
    _geo("EE", "Estonia", ("LV",), 25.5, 58.7),
    _geo("ES", "Spain", ("FR", "PT"), -3.6, 40.2),
    _geo("FI", "Finland", ("SE", "NO"), 26.3, 64.5),
    _geo("FR", "France", ("BE", "LU", "DE", "CH", "IT", "ES", "GB"), 2.5, 46.6),
    _geo("GB", "United Kingdom", ("FR", "IE"), -2.0, 53.9),
    _geo("GR", "Greece", ("AL", "MK", "BG"), 22.6, 39.3),
    _geo("HR", "Croatia", ("SI", "HU", "RS", "BA", "ME"), 16.4, 45.1),
    _geo("HU", "Hungary", ("AT", "SK", "UA", "RO", "RS", "HR", "SI"), 19.4, 47.2),
    _geo("IE", "Ireland", ("GB",), -8.1, 53.2),
    _geo("IT", "Italy", ("FR", "CH", "AT", "SI"), 12.6, 42.8),
    _geo("LT", "Lithuania", ("LV", "BY", "PL"), 23.9, 55.3),
    _geo("LU", "Luxembourg", ("BE", "DE", "FR"), 6.1, 49.8),
    _geo("LV", "Latvia", ("EE", "LT", "BY"), 24.9, 56.9),
    _geo("MD", "Moldova", ("RO", "UA"), 28.5, 47.2),
    _geo("ME", "Montenegro", ("HR", "BA", "RS", "XK", "AL"), 19.3, 42.8),
    _geo("MK", "North Macedonia", ("RS", "XK", "AL", "GR", "BG"), 21.7, 41.6),
    _geo("NL", "Netherlands", ("DE", "BE"), 5.6, 52.2),
    _geo("NO", "Norway", ("SE", "FI"), 9.0, 61.4),
    _geo("PL", "Poland", ("DE", "CZ", "SK", "UA", "BY", "LT"), 19.4, 52.1),
    _geo("PT", "Portugal", ("ES",), -8.0, 39.6),
    _geo("RO", "Romania", ("HU", "UA", "MD", "BG", "RS"), 25.0, 45.9),
    _geo(
        "RS",
        "Serbia",
        ("HU", "RO", "BG", "MK", "XK", "ME", "BA", "HR"),
        20.8,
        44.2,
    ),
    _geo("SE", "Sweden", ("NO", "FI", "DK"), 16.7, 62.8),
    _geo("SI", "Slovenia", ("IT", "AT", "HU", "HR"), 14.8, 46.1),
    _geo("SK", "Slovakia", ("CZ", "PL", "UA", "HU", "AT"), 19.5, 48.7),
    _geo("UA", "Ukraine", ("PL", "SK", "HU", "RO", "MD", "BY"), 31.2, 49.0),
    _geo("XK", "Kosovo", ("RS", "ME", "AL", "MK"), 20.9, 42.6),
)


def _econ(
    population: int,
    wage_level: float,
    price_index: float,
    **resource_bonus: float,
) -> CountryEconomics:
    return CountryEconomics(
        population=population,
        wage_level=wage_level,
        price_index=price_index,
        resource_bonus=resource_bonus,
    )


EUROPE_ECONOMICS: dict[str, CountryEconomics] = {
    "GB": _econ(67_000_000, 1.6, 1.9, electronics=0.9, consumerGoods=1.0),
    "DE": _econ(83_000_000, 1.5, 1.8, electronics=0.7, clothing=0.9),
    "FR": _econ(67_000_000, 1.4, 1.6, processedFood=0.8, consumerGoods=0.9),
    "IT": _econ(60_000_000, 1.2, 1.4, processedFood=0.7, clothing=0.8),
    "PL": _econ(38_000_000, 0.7, 1.0, grain=0.6, meat=0.8),
    "ES": _econ(47_000_000, 1.1, 1.3, grain=0.7, processedFood=0.8),
    "PT": _econ(10_000_000, 1.0, 1.2, grain=0.8, processedFood=0.9),
    "NL": _econ(17_000_000, 1.6, 1.8, processedFood=0.7, electronics=0.9),
    "BE": _econ(11_000_000, 1.5, 1.7, consumerGoods=0.9, meat=1.0),
    "CH": _econ(8_500_000, 2.0, 2.2, electronics=0.8, consumerGoods=0.9),
    "AT": _econ(9_000_000, 1.5, 1.7, meat=0.85, electronics=0.95),
    "CZ": _econ(10_500_000, 0.9, 1.2, clothing=0.8, consumerGoods=0.9),
    "SE": _econ(10_500_000, 1.7, 1.9, meat=0.7, electronics=0.8),
    "NO": _econ(5_500_000, 2.1, 2.3, meat=0.6, electronics=0.85),
    "FI": _econ(5_500_000, 1.6, 1.8, electronics=0.75, grain=0.85),
    "DK": _econ(6_000_000, 1.8, 2.0, processedFood=0.7, meat=0.8),
    "GR": _econ(10_500_000, 0.9, 1.1, grain=0.8, processedFood=0.9),
    "RO": _econ(19_000_000, 0.5, 0.8, grain=0.5, meat=0.7),
    "HU": _econ(9_700_000, 0.8, 1.0, grain=0.6, consumerGoods=0.85),
    "SK": _econ(5_500_000, 0.85, 1.1, clothing=0.75, consumerGoods=0.9),
    "BG": _econ(6_900_000, 0.5, 0.7, grain=0.55, clothing=0.8),
    "HR": _econ(4_000_000, 0.9, 1.1, grain=0.7, processedFood=0.85),
    "SI": _econ(2_100_000, 1.2, 1.4, clothing=0.8, consumerGoods=0.9),
    "LT": _econ(2_800_000, 0.75, 0.95, grain=0.65, processedFood=0.8),
    "LV": _econ(1_900_000, 0.7, 0.9, grain=0.6, meat=0.85),
    "EE": _econ(1_300_000, 1.0, 1.3, electronics=0.85, consumerGoods=0.9),
    "IE": _econ(5_000_000, 1.7, 1.9, electronics=0.75, meat=0.9),
    "RS": _econ(6_900_000, 0.5, 0.7, grain=0.6, meat=0.75),
    "BA": _econ(3_300_000, 0.55, 0.75, grain=0.65, meat=0.8),
    "AL": _econ(2_900_000, 0.45, 0.65, grain=0.7, processedFood=0.85),
    "MK": _econ(2_100_000, 0.5, 0.7, grain=0.65, consumerGoods=0.8),
    "ME": _econ(620_000, 0.6, 0.8, grain=0.75, processedFood=0.85),
    "LU": _econ(630_000, 2.2, 2.5, electronics=0.8, consumerGoods=0.85),
    "XK": _econ(1_800_000, 0.45, 0.6, grain=0.7, meat=0.8),
    "BY": _econ(9_400_000, 0.5, 0.7, grain=0.6, clothing=0.75),
    "UA": _econ(41_000_000, 0.4, 0.65, grain=0.5, meat=0.7),
    "MD": _econ(2_600_000, 0.4, 0.6, grain=0.6, processedFood=0.8),
}


def default_dataset() -> GeoDataset:
    """Return the bundled European dataset."""
    return GeoDataset(countries=EUROPE_GEO, economics=EUROPE_ECONOMICS)


_DATASET_ADAPTER = TypeAdapter(GeoDataset)


def load_geo_dataset(path: Path) -> GeoDataset:
    """Read a dataset produced by the offline map tools from *path*.

    The file is a JSON object with ``countries`` (list of geo records) and
    ``economics`` (mapping of country id to economic properties).
    """
    return _DATASET_ADAPTER.validate_json(path.read_bytes())


__all__ = [
    "CATEGORY_DEMAND_MULTIPLIERS",
    "EUROPE_ECONOMICS",
    "EUROPE_GEO",
    "FACILITY_SPECS",
    "GOODS",
    "CountryEconomics",
    "CountryGeoRecord",
    "FacilitySpec",
    "GeoDataset",
    "Good",
    "default_dataset",
    "load_geo_dataset",
]
