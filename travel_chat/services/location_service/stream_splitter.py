"""
Splits an accumulated (possibly still streaming) assistant reply into the prose
to display and the trailing JSON locations block, or recognises a weather-intent
marker instead.

The splitter is called again on every chunk with the full text received so far,
so every decision is made only from characters that can no longer change: a JSON
start is judged by what precedes the brace, a JSON block is reported only once
its braces balance, and a weather place name only once it is terminated.
"""
import re
from typing import Iterator, Optional

from travel_chat.models.location_models import StreamParseResult
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.location_service.stream_splitter")

_WEATHER_INTENT = (
    r"(?:(?:I\s+should|let\s+me|I'll|I\s+will|I'm\s+going\s+to|I\s+am\s+going\s+to)\s+check"
    r"|checking)"
    r"\s+the\s+(?:current\s+)?weather\s+(?:conditions\s+)?(?:in|for|at)\s+"
)
# "St. Petersburg", "Mt. Fuji": a dot right after one of these is part of the name
_PLACE_ABBREVIATIONS = ("St", "Ste", "Mt", "Ft", "Pt")
_ABBREVIATION_DOT = "(?:" + "|".join(r"(?<=\b" + a + ")" for a in _PLACE_ABBREVIATIONS) + r")\."
_NOT_AFTER_ABBREVIATION = "".join(r"(?<!\b" + a + ")" for a in _PLACE_ABBREVIATIONS)
_PLACE = r"(?P<place>(?:[^.!?\n{]|" + _ABBREVIATION_DOT + r")+?)"

# place name must be closed by punctuation or a newline while the reply is streaming
WEATHER_PATTERN = re.compile(
    _WEATHER_INTENT + _PLACE + _NOT_AFTER_ABBREVIATION + r"(?=[.!?\n])",
    re.IGNORECASE,
)
# once the reply is complete the end of the text closes it as well
WEATHER_PATTERN_COMPLETE = re.compile(
    _WEATHER_INTENT + _PLACE + r"\s*" + _NOT_AFTER_ABBREVIATION + r"(?=[.!?\n]|$)",
    re.IGNORECASE,
)

_SENTENCE_END = ".!?:"
_DANGLING_FENCE = re.compile(r"```[A-Za-z]*[ \t]*$")


def normalize_whitespace(text: str) -> str:
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


def is_json_start(text: str, index: int) -> bool:
    """True when the brace at `index` begins a line or follows sentence-ending punctuation."""
    if text[index] != "{":
        return False
    before = text[:index].rstrip(" \t")
    return not before or before[-1] == "\n" or before[-1] in _SENTENCE_END


def json_start_positions(text: str) -> Iterator[int]:
    index = text.find("{")
    while index != -1:
        if is_json_start(text, index):
            yield index
        index = text.find("{", index + 1)


def scan_json_object(text: str, start: int) -> Optional[int]:
    """
    Depth-counting scan from the opening brace at `start`.

    Returns the index just past the balancing closing brace, or None when the
    object is not closed yet. Braces inside string literals (including escaped
    quotes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def _prose_before(text: str, index: int) -> str:
    prose = _DANGLING_FENCE.sub("", text[:index].rstrip())
    return normalize_whitespace(prose)


def _clean_place(place: str) -> str:
    return place.strip().strip("*_\"'`").strip()


def split_streaming_message(text: str, complete: bool = False) -> StreamParseResult:
    """
    Classify the reply received so far.

    Args:
        text: full accumulated reply text, may end mid-token.
        complete: True once the stream has finished; lets a weather place name
            run to the end of the text.

    Returns:
        StreamParseResult with the displayable prose and either the JSON block
        or the weather place name (never both).
    """
    if not text:
        return StreamParseResult(text_content="")

    first_json = next(json_start_positions(text), None)

    pattern = WEATHER_PATTERN_COMPLETE if complete else WEATHER_PATTERN
    weather = pattern.search(text)
    if weather and (first_json is None or weather.start() < first_json):
        place = _clean_place(weather.group("place"))
        if place:
            logger.debug(f"Weather intent detected for '{place}'")
            return StreamParseResult(
                text_content=normalize_whitespace(text[:weather.start()]),
                weather_location=place,
            )

    if first_json is None:
        return StreamParseResult(text_content=normalize_whitespace(text))

    end = scan_json_object(text, first_json)
    prose = _prose_before(text, first_json)
    if end is None:
        # still streaming, retried on the next chunk
        return StreamParseResult(text_content=prose)

    return StreamParseResult(text_content=prose, json_content=text[first_json:end])
