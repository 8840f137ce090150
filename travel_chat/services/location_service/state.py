from typing import TypedDict, List, Optional

from travel_chat.models.location_models import Location, NormalizationMode, StreamParseResult

class ExtractionState(TypedDict, total=False):
    text: str
    complete: bool
    mode: NormalizationMode
    split: StreamParseResult
    locations: List[Location]
    source: str
