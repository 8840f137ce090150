from typing import List, Optional

from travel_chat.models.location_models import ExtractionResult, Location
from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger
from .city_context import CityContext, extract_city_name
from .pipeline import ExtractionPipeline

logger = get_logger("travel_chat.services.location_service.stream_session")

# sentence ends, line ends and braces; anything else leaves the split unchanged
_EXTRACTION_TRIGGERS = "\n.!?{}"


class LocationFeed:
    """
    The displayed location list and weather place, fed by streaming sessions.

    Only the newest message may publish, and within it only a newer chunk than
    the last one applied. A non-empty batch replaces the displayed list. When a
    message is abandoned before it finishes, whatever it displayed is rolled
    back to the list of the last finished message.
    """

    def __init__(self, pipeline: Optional[ExtractionPipeline] = None,
                 city_context: Optional[CityContext] = None):
        self.pipeline = pipeline or ExtractionPipeline()
        self.city_context = city_context
        self.locations: List[Location] = []
        self.weather_location: Optional[str] = None
        self._committed: List[Location] = []
        self._generation = 0
        self._last_sequence = 0
        self._active: Optional["StreamSession"] = None

    def start_message(self) -> "StreamSession":
        if self._active is not None and not self._active.finished:
            self._active.cancel()
            self.locations = list(self._committed)
            logger.info(f"Message {self._generation} superseded before finishing; discarded its locations")
        self._generation += 1
        self._last_sequence = 0
        self._active = StreamSession(self, self._generation)
        return self._active

    def is_current(self, session: "StreamSession") -> bool:
        return not session.cancelled and session.generation == self._generation

    def publish(self, session: "StreamSession", sequence: int, result: ExtractionResult) -> bool:
        if not self.is_current(session):
            logger.debug(f"Dropping result of superseded message {session.generation}")
            return False
        if sequence <= self._last_sequence:
            logger.debug(f"Dropping stale result for chunk {sequence}")
            return False
        self._last_sequence = sequence

        if result.weather_location:
            self.weather_location = result.weather_location
        if result.locations:
            self.locations = list(result.locations)
            first = next((loc for loc in result.locations if loc.is_resolved), result.locations[0])
            self.point_at_city(extract_city_name(first))
        return True

    def point_at_city(self, city: str) -> None:
        """Move both the city context and the weather place to `city`."""
        if not city:
            return
        if self.city_context is not None:
            self.city_context.set_current_city(city)
        self.weather_location = city

    def commit(self, session: "StreamSession") -> None:
        if self.is_current(session):
            self._committed = list(self.locations)


class StreamSession:
    """Accumulates delta chunks of one assistant message and re-runs extraction as it grows."""

    def __init__(self, feed: LocationFeed, generation: int):
        self.feed = feed
        self.generation = generation
        self.text = ""
        self.sequence = 0
        self.cancelled = False
        self.finished = False
        self.last_result = ExtractionResult()
        self._unextracted_chunks = 0

    def _should_extract(self, delta: str) -> bool:
        # classification can only change once one of these characters arrives
        if any(ch in delta for ch in _EXTRACTION_TRIGGERS):
            return True
        return self._unextracted_chunks >= settings.extraction_chunk_interval

    def _extract(self, complete: bool) -> ExtractionResult:
        try:
            return self.feed.pipeline.run(self.text, complete=complete)
        except Exception as e:
            # keep showing the prose, just without location cards
            logger.error(f"Location extraction failed for message {self.generation}: {e}", exc_info=True)
            return ExtractionResult(text_content=self.text.strip())

    def feed_chunk(self, delta: str) -> Optional[ExtractionResult]:
        """
        Append a delta chunk and return the latest extraction, None once cancelled.

        Extraction reruns only when the chunk could change the result or after
        `settings.extraction_chunk_interval` chunks; otherwise the previous
        result is returned. finish() always runs the final pass.
        """
        if self.cancelled or self.finished:
            return None
        self.text += delta
        self.sequence += 1
        self._unextracted_chunks += 1
        if not self._should_extract(delta):
            return self.last_result
        self._unextracted_chunks = 0
        self.last_result = self._extract(complete=False)
        self.feed.publish(self, self.sequence, self.last_result)
        return self.last_result

    def finish(self) -> Optional[ExtractionResult]:
        if self.cancelled or self.finished:
            return None
        self.sequence += 1
        self.last_result = self._extract(complete=True)
        self.feed.publish(self, self.sequence, self.last_result)
        self.finished = True
        self.feed.commit(self)
        return self.last_result

    def cancel(self) -> None:
        if not self.cancelled:
            logger.info(f"Cancelling stream session {self.generation}")
        self.cancelled = True
