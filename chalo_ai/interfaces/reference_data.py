# interfaces/reference_data.py
"""
Static route reference data.
Chalo India only flies between India and Australia, so every city belongs
to exactly one of the two countries and there are no domestic routes.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional


@dataclass(frozen=True)
class City:
    id: int
    name: str
    code: str

    def to_dict(self) -> Dict:
        return asdict(self)


INDIA = "india"
AUSTRALIA = "australia"
COUNTRIES = (INDIA, AUSTRALIA)

CITIES: Dict[str, List[City]] = {
    INDIA: [
        City(1, "Delhi", "DEL"),
        City(2, "Mumbai", "BOM"),
        City(3, "Bangalore", "BLR"),
        City(4, "Chennai", "MAA"),
        City(5, "Kolkata", "CCU"),
        City(6, "Hyderabad", "HYD"),
        City(7, "Ahmedabad", "AMD"),
        City(8, "Pune", "PNQ"),
        City(9, "Goa", "GOI"),
        City(10, "Jaipur", "JAI"),
    ],
    AUSTRALIA: [
        City(1, "Melbourne", "MEL"),
        City(2, "Sydney", "SYD"),
        City(3, "Adelaide", "ADL"),
        City(4, "Brisbane", "BNE"),
        City(5, "Perth", "PER"),
        City(6, "Canberra", "CBR"),
        City(7, "Darwin", "DRW"),
        City(8, "Hobart", "HBA"),
        City(9, "Gold Coast", "OOL"),
        City(10, "Cairns", "CNS"),
    ],
}

# Lower-case city name -> IATA code, in table order
CITY_CODES: Dict[str, str] = {
    city.name.lower(): city.code
    for country in COUNTRIES
    for city in CITIES[country]
}


def is_country(value: str) -> bool:
    return value.strip().lower() in COUNTRIES


def other_country(country: str) -> str:
    """The only valid destination country for a given origin country"""
    return AUSTRALIA if country.lower() == INDIA else INDIA


def cities_in(country: str) -> List[City]:
    return CITIES.get(country.lower(), [])


def resolve_city(country: str, value: str) -> Optional[City]:
    """
    Resolve user input to a city of the given country.
    Accepts the list index (1-10), the city name or the IATA code,
    case-insensitively.
    """
    text = value.strip()
    lowered = text.lower()
    for city in cities_in(country):
        if str(city.id) == text or city.name.lower() == lowered or city.code.lower() == lowered:
            return city
    return None


def country_of_code(code: str) -> Optional[str]:
    """Infer the country an IATA code belongs to"""
    upper = code.strip().upper()
    for country in COUNTRIES:
        if any(city.code == upper for city in CITIES[country]):
            return country
    return None
