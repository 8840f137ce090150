import random
import re
from typing import Optional, Sequence

from travel_chat.models.location_models import Location
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.location_service.city_context")


class CityContext:
    """
    Current city used to answer weather questions that name no place.

    Last write wins. One instance is owned by the application and handed to
    whoever needs it.
    """

    def __init__(self, initial_city: Optional[str] = None):
        self._current_city = initial_city

    @classmethod
    def from_seed_cities(cls, cities: Sequence[str], rng: Optional[random.Random] = None) -> "CityContext":
        rng = rng or random.Random()
        city = rng.choice(list(cities)) if cities else None
        logger.info(f"City context seeded with {city}")
        return cls(city)

    def get_current_city(self) -> Optional[str]:
        return self._current_city

    def set_current_city(self, city: Optional[str]) -> None:
        if city is not None:
            city = city.strip() or None
        if city != self._current_city:
            logger.info(f"City context changed: {self._current_city} -> {city}")
        self._current_city = city


def extract_city_name(location: Location) -> str:
    if location.city:
        return location.city.strip()

    parts = location.name.split(",")
    if len(parts) > 1:
        city = re.sub(r"^(in|at|near|the)\s+", "", parts[0].strip(), flags=re.IGNORECASE)
        return re.sub(r"\s+(area|district|region)$", "", city, flags=re.IGNORECASE)

    return parts[0].strip()
