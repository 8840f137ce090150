import re

from travel_chat.models.schemas import QueryClassification
from travel_chat.utils.logging import get_logger

# Create a logger specific to this module
logger = get_logger("travel_chat.utils.query_classification")

WEATHER_KEYWORDS = re.compile(
    r"\b(weather|forecast|temperature|raining|rain|snowing|sunny|humid|degrees)\b",
    re.IGNORECASE,
)
WEATHER_PLACE = re.compile(
    r"\b(?:in|at|for)\s+(?P<place>[^\W\d_][\w .,'-]*?)"
    r"(?:\s+(?:today|tomorrow|tonight|now|right now|this week|this weekend))?\s*[?.!]*\s*$",
    re.IGNORECASE,
)


def classify_query(query: str) -> QueryClassification:
    """
    Decide whether a user message is a weather question, and for which place.

    Weather questions are answered without the LLM; everything else is a
    location query.
    """
    text = (query or "").strip()
    if not WEATHER_KEYWORDS.search(text):
        return QueryClassification(type="location")

    match = WEATHER_PLACE.search(text)
    place = match.group("place").strip(" ,.") if match else None
    logger.info(f"Weather query detected, place: {place}")
    return QueryClassification(type="weather", location=place or None)
