import random
import re
from typing import List, Optional

from travel_chat.models.location_models import Location, Position
from travel_chat.services.location_service.image_service import image_url_for
from travel_chat.services.location_service.lookup import lookup_coordinates, lookup_description
from travel_chat.services.location_service.normalizer import batch_ids, default_rng, fallback_reviews
from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.location_service.text_extractor")

# "1. Eiffel Tower - Iconic iron tower." ; the dash needs surrounding spaces so
# hyphenated names such as "Notre-Dame" stay whole
LOCATION_PATTERN = re.compile(
    r"^[ \t]*\d+\.[ \t]+(?P<name>[^\n]+?)(?:[ \t]+[-–—][ \t]+(?P<description>[^\n]*?))?[ \t]*$",
    re.MULTILINE,
)
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s")
_EMPHASIS = re.compile(r"[*_`]+")


def _clean_name(name: str) -> str:
    name = _EMPHASIS.sub("", name).strip()
    return name.rstrip(".:").strip()


def _first_sentence(description: Optional[str]) -> str:
    if not description:
        return ""
    sentence = _SENTENCE_BOUNDARY.split(_EMPHASIS.sub("", description).strip(), maxsplit=1)[0]
    return sentence.rstrip(".").strip()


def parse_text_locations(text: str, rng: Optional[random.Random] = None) -> List[Location]:
    """
    Best-effort extraction from numbered-list prose when the reply has no JSON.

    Coordinates come from the known-place lookup; names it does not know get
    position=None so they are listed but never placed on the map.
    """
    logger.info("Starting text-based location extraction")
    rng = rng or default_rng()
    candidates = []
    for match in LOCATION_PATTERN.finditer(text or ""):
        name, description = match.group("name"), match.group("description")
        if description is None and ": " in name:
            # "1. **Louvre**: world-famous museum"
            name, description = name.split(": ", 1)
        name = _clean_name(name)
        if len(name) < 2:
            continue
        candidates.append((name, _first_sentence(description)))

    ids = batch_ids(len(candidates))
    locations = []
    for index, (name, description) in enumerate(candidates):
        try:
            coordinates = lookup_coordinates(name)
            if coordinates is None:
                logger.warning(f"No coordinates known for '{name}', leaving it unresolved")
            locations.append(Location(
                id=ids[index],
                name=name,
                position=Position(lat=coordinates[0], lng=coordinates[1]) if coordinates else None,
                rating=round(settings.default_rating + rng.random() * settings.rating_jitter, 1),
                reviews=fallback_reviews(rng),
                description=description or lookup_description(name),
                image_url=image_url_for(name),
            ))
            logger.debug(f"Found location in text: {name}")
        except Exception as e:
            logger.error(f"Skipping text location candidate '{name}': {e}")

    return locations
