import json
import math
import random
import time
from numbers import Real
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from travel_chat.exceptions.location_exceptions import (
    InvalidCoordinatesError,
    LocationValidationError,
    MalformedJsonError,
    NoLocationsFoundError,
)
from travel_chat.models.location_models import Location, NormalizationMode, Position
from travel_chat.services.location_service.image_service import image_url_for
from travel_chat.services.location_service.lookup import lookup_description
from travel_chat.services.location_service.stream_splitter import scan_json_object
from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.location_service.normalizer")

_SNIPPET_LENGTH = 120


def default_rng() -> random.Random:
    """Random source for fallback ratings/reviews, seeded from settings when configured."""
    return random.Random(settings.random_seed)


def fallback_reviews(rng: random.Random) -> int:
    return rng.randrange(settings.min_fallback_reviews, settings.max_fallback_reviews)


def batch_ids(count: int) -> List[str]:
    """Ids for one batch: shared millisecond stamp, made unique by position."""
    stamp = int(time.time() * 1000)
    return [f"loc-{stamp}-{index}" for index in range(count)]


def _snippet(text: str) -> str:
    return text if len(text) <= _SNIPPET_LENGTH else text[:_SNIPPET_LENGTH] + "..."


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_coordinates(coords: Any) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) for a 2-element finite in-range numeric pair, None otherwise."""
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    lat, lng = coords
    if not (_is_number(lat) and _is_number(lng)):
        return None
    try:
        lat, lng = float(lat), float(lng)
    except OverflowError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return lat, lng


def _coerce_rating(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return rating if math.isfinite(rating) else None


def _coerce_reviews(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        reviews = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return reviews if reviews >= 0 else None


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _raw_name(raw: Any) -> Optional[str]:
    if isinstance(raw, dict) and isinstance(raw.get("name"), str):
        return raw["name"]
    return None


def build_location(raw: Any, location_id: str, mode: NormalizationMode,
                   rng: random.Random) -> Location:
    """
    Convert one RawLocation into a Location.

    Raises LocationValidationError (InvalidCoordinatesError for coordinates)
    when the record cannot be used; callers decide whether that aborts the batch.
    """
    name = _raw_name(raw)
    if name is None or not name.strip():
        raise LocationValidationError(f"Location record without a usable name: {raw!r}"[:200], name)
    name = name.strip()

    coords = validate_coordinates(raw.get("coordinates"))
    if coords is None:
        raise InvalidCoordinatesError(name, raw.get("coordinates"))

    rating = _coerce_rating(raw.get("rating"))
    reviews = _coerce_reviews(raw.get("reviews"))

    description = _optional_text(raw.get("description"))
    if description is None:
        description = "" if mode == NormalizationMode.STRICT else lookup_description(name)

    image_url = _optional_text(raw.get("image")) or _optional_text(raw.get("imageUrl"))

    try:
        return Location(
            id=location_id,
            name=name,
            position=Position(lat=coords[0], lng=coords[1]),
            rating=settings.default_rating if rating is None else rating,
            reviews=fallback_reviews(rng) if reviews is None else reviews,
            description=description,
            image_url=image_url or image_url_for(name),
            city=_optional_text(raw.get("city")),
            country=_optional_text(raw.get("country")),
        )
    except ValidationError as e:
        raise LocationValidationError(f"Invalid location '{name}': {e}", name) from e


def raw_locations_from_payload(data: Any) -> Optional[List[Any]]:
    """
    Pull the list of raw records out of a parsed payload.

    Accepts {"locations": [...]}, a bare list, or a bare object with a "name"
    (treated as a single record, so a missing "coordinates" is reported by name).
    Returns None when the value is not a locations payload at all.
    """
    if isinstance(data, dict):
        if isinstance(data.get("locations"), list):
            return data["locations"]
        if "name" in data:
            return [data]
        return None
    if isinstance(data, list):
        return data
    return None


def normalize_locations(data: Any, mode: NormalizationMode = NormalizationMode.STRICT,
                        rng: Optional[random.Random] = None) -> List[Location]:
    """
    Turn a parsed JSON payload into Locations, preserving input order.

    STRICT: the first invalid record aborts the batch with
    LocationValidationError/InvalidCoordinatesError, and an empty or missing
    payload raises NoLocationsFoundError.
    PERMISSIVE: invalid records are logged and dropped; never raises.
    """
    mode = NormalizationMode(mode)
    rng = rng or default_rng()

    raw_locations = raw_locations_from_payload(data)
    if not raw_locations:
        if mode == NormalizationMode.STRICT:
            raise NoLocationsFoundError("Payload contains no locations")
        logger.info("Payload contains no locations")
        return []

    ids = batch_ids(len(raw_locations))
    locations = []
    for index, raw in enumerate(raw_locations):
        try:
            locations.append(build_location(raw, ids[index], mode, rng))
        except LocationValidationError as e:
            logger.error(f"Rejected location '{e.location_name}' at index {index}: {e}")
            if mode == NormalizationMode.STRICT:
                raise
    return locations


def find_locations_payload(text: str) -> Any:
    """
    Locate and parse the locations payload embedded in free text.

    The whole text is tried first, then every balanced {...} block in order.
    Raises MalformedJsonError when JSON-like blocks exist but none parses into
    a locations payload, NoLocationsFoundError when there are no blocks at all.
    """
    stripped = text.strip()
    try:
        data = json.loads(stripped)
        if raw_locations_from_payload(data) is not None:
            return data
    except ValueError:  # JSONDecodeError, or an integer literal past the digit limit
        pass

    malformed = None
    index = text.find("{")
    while index != -1:
        end = scan_json_object(text, index)
        if end is None:
            if malformed is None:
                malformed = text[index:]
            break
        block = text[index:end]
        try:
            data = json.loads(block)
        except ValueError as e:
            logger.warning(f"Failed to parse JSON block: {e}; snippet: {_snippet(block)}")
            malformed = malformed or block
        else:
            if raw_locations_from_payload(data) is not None:
                return data
        index = text.find("{", index + 1)

    if malformed is not None:
        raise MalformedJsonError("No parseable locations JSON found", _snippet(malformed))
    raise NoLocationsFoundError("No JSON block found in text")


def parse_json_locations(text: str, rng: Optional[random.Random] = None) -> List[Location]:
    """Strict text entry point: raises on a missing payload or on the first invalid record."""
    logger.info("Starting strict JSON location extraction")
    data = find_locations_payload(text)
    return normalize_locations(data, NormalizationMode.STRICT, rng)


def extract_locations_from_response(text: str, rng: Optional[random.Random] = None) -> List[Location]:
    """Permissive text entry point: invalid records are dropped, failures give []."""
    try:
        data = find_locations_payload(text)
    except MalformedJsonError as e:
        logger.error(f"Error parsing JSON: {e}; snippet: {e.snippet}")
        return []
    except NoLocationsFoundError:
        logger.info("No JSON data found")
        return []
    return normalize_locations(data, NormalizationMode.PERMISSIVE, rng)


def location_to_payload(location: Location) -> Dict[str, Any]:
    """Serialize a Location back to the raw wire shape the model emits."""
    payload = {
        "name": location.name,
        "rating": location.rating,
        "reviews": location.reviews,
        "description": location.description,
        "image": location.image_url,
    }
    if location.position is not None:
        payload["coordinates"] = [location.position.lat, location.position.lng]
    if location.city:
        payload["city"] = location.city
    if location.country:
        payload["country"] = location.country
    return payload
