import json
import random
from typing import Any, Optional

from langgraph.graph import StateGraph, END

from travel_chat.exceptions.location_exceptions import MalformedJsonError, NoLocationsFoundError
from travel_chat.models.location_models import ExtractionResult, NormalizationMode
from travel_chat.utils.logging import get_logger
from .normalizer import default_rng, normalize_locations, raw_locations_from_payload
from .state import ExtractionState
from .stream_splitter import split_streaming_message
from .text_extractor import parse_text_locations

logger = get_logger("travel_chat.services.location_service.pipeline")


def load_json_block(block: str) -> Any:
    try:
        return json.loads(block)
    except ValueError as e:
        snippet = block if len(block) <= 120 else block[:120] + "..."
        raise MalformedJsonError(f"Locations block is not valid JSON: {e}", snippet) from e


class ExtractionPipeline:
    """
    Split_Stream -> Parse_Json -> (Parse_Text on failure).

    A weather marker ends the run right after the split. In PERMISSIVE mode the
    run never raises; in STRICT mode an invalid record raises
    InvalidCoordinatesError and an empty result raises NoLocationsFoundError.
    """

    def __init__(self, mode: NormalizationMode = NormalizationMode.PERMISSIVE,
                 rng: Optional[random.Random] = None):
        self.mode = NormalizationMode(mode)
        self.rng = rng or default_rng()
        self.builder = StateGraph(ExtractionState)

        self.builder.add_node("Split_Stream", self.split_stream)
        self.builder.add_node("Parse_Json", self.parse_json)
        self.builder.add_node("Parse_Text", self.parse_text)

        self.builder.set_entry_point("Split_Stream")
        self.builder.add_conditional_edges(
            "Split_Stream",
            self.route_after_split,
            {"weather": END, "json": "Parse_Json", "text": "Parse_Text"},
        )
        self.builder.add_conditional_edges(
            "Parse_Json",
            self.route_after_json,
            {"done": END, "text": "Parse_Text"},
        )
        self.builder.add_edge("Parse_Text", END)

        self.graph = self.builder.compile()

    def split_stream(self, state: ExtractionState) -> ExtractionState:
        split = split_streaming_message(state["text"], complete=state.get("complete", False))
        source = "weather" if split.weather_location else "none"
        return {**state, "split": split, "locations": [], "source": source}

    def route_after_split(self, state: ExtractionState) -> str:
        split = state["split"]
        if split.weather_location:
            return "weather"
        if split.json_content:
            return "json"
        return "text"

    def parse_json(self, state: ExtractionState) -> ExtractionState:
        block = state["split"].json_content
        try:
            data = load_json_block(block)
        except MalformedJsonError as e:
            logger.warning(f"{e}; falling back to text extraction. Snippet: {e.snippet}")
            return {**state, "source": "none"}

        if raw_locations_from_payload(data) is None:
            logger.info("JSON block is not a locations payload; falling back to text extraction")
            return {**state, "source": "none"}

        locations = normalize_locations(data, state["mode"], self.rng)
        logger.info(f"Extracted {len(locations)} locations from JSON")
        return {**state, "locations": locations, "source": "json"}

    def route_after_json(self, state: ExtractionState) -> str:
        return "done" if state["source"] == "json" else "text"

    def parse_text(self, state: ExtractionState) -> ExtractionState:
        locations = parse_text_locations(state["split"].text_content, self.rng)
        if not locations and state["mode"] == NormalizationMode.STRICT:
            raise NoLocationsFoundError("Neither JSON nor a numbered list yielded a location")
        return {**state, "locations": locations, "source": "text" if locations else "none"}

    def run(self, text: str, complete: bool = False) -> ExtractionResult:
        state = self.graph.invoke({"text": text or "", "complete": complete, "mode": self.mode})
        split = state["split"]
        return ExtractionResult(
            text_content=split.text_content,
            locations=state.get("locations", []),
            weather_location=split.weather_location,
            source=state.get("source", "none"),
        )
