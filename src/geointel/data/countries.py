"""Per-country address schemas used by the address resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..exceptions import UnsupportedRegion
from ..models.domain import Coordinate


@dataclass(frozen=True, slots=True)
class CountrySchema:
    code: str
    alpha2: str
    name: str
    required_components: tuple[str, ...]
    optional_components: tuple[str, ...]
    southwest: Coordinate
    northeast: Coordinate

    @property
    def component_types(self) -> frozenset[str]:
        return frozenset(self.required_components + self.optional_components)

    @property
    def bounds(self) -> tuple[Coordinate, Coordinate]:
        """Viewport (southwest, northeast) used to bias geocoding toward the country."""
        return (self.southwest, self.northeast)


COUNTRY_SCHEMAS: dict[str, CountrySchema] = {
    "MWI": CountrySchema(
        code="MWI",
        alpha2="MW",
        name="Malawi",
        required_components=("street_number", "route", "locality"),
        optional_components=("postal_code", "administrative_area_level_1"),
        southwest=Coordinate(-17.125, 32.67395),
        northeast=Coordinate(-9.367541, 35.916821),
    ),
    "TZA": CountrySchema(
        code="TZA",
        alpha2="TZ",
        name="Tanzania",
        required_components=("route", "locality", "administrative_area_level_1"),
        optional_components=("street_number", "postal_code"),
        southwest=Coordinate(-11.745696, 29.327168),
        northeast=Coordinate(-0.990736, 40.443222),
    ),
    "MOZ": CountrySchema(
        code="MOZ",
        alpha2="MZ",
        name="Mozambique",
        required_components=("route", "locality", "administrative_area_level_1"),
        optional_components=("street_number", "postal_code"),
        southwest=Coordinate(-26.868685, 30.217319),
        northeast=Coordinate(-10.471883, 40.847729),
    ),
    "ZMB": CountrySchema(
        code="ZMB",
        alpha2="ZM",
        name="Zambia",
        required_components=("route", "locality", "administrative_area_level_1"),
        optional_components=("street_number", "postal_code"),
        southwest=Coordinate(-18.079473, 21.999371),
        northeast=Coordinate(-8.203547, 33.705704),
    ),
    "GBR": CountrySchema(
        code="GBR",
        alpha2="GB",
        name="United Kingdom",
        required_components=("street_number", "route", "postal_town", "postal_code"),
        optional_components=("locality", "administrative_area_level_2", "premise", "subpremise"),
        southwest=Coordinate(49.674, -8.649),
        northeast=Coordinate(61.061, 1.768),
    ),
}

_ALPHA2_INDEX: dict[str, str] = {schema.alpha2: code for code, schema in COUNTRY_SCHEMAS.items()}


def find_country(country_code: Optional[str]) -> Optional[CountrySchema]:
    """Look up a schema by ISO 3166-1 alpha-2 or alpha-3 code (case-insensitive)."""
    if not country_code:
        return None
    code = country_code.strip().upper()
    if code in COUNTRY_SCHEMAS:
        return COUNTRY_SCHEMAS[code]
    alpha3 = _ALPHA2_INDEX.get(code)
    return COUNTRY_SCHEMAS.get(alpha3) if alpha3 else None


def get_country(country_code: Optional[str]) -> CountrySchema:
    schema = find_country(country_code)
    if schema is None:
        raise UnsupportedRegion(str(country_code))
    return schema
