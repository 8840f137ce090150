import json
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from travel_chat.exceptions.custom_exceptions import LLMServiceError
from travel_chat.models.location_models import ExtractionResult
from travel_chat.models.schemas import ChatRequest
from travel_chat.routers.dependencies import get_city_context, get_location_feed
from travel_chat.services.llm_service import LLMService, get_llm_service
from travel_chat.services.location_service.city_context import CityContext
from travel_chat.services.location_service.stream_session import LocationFeed
from travel_chat.utils.query_classification import classify_query
from travel_chat.utils.logging import get_logger

# Create a logger specific to this module
logger = get_logger("travel_chat.routers.chat_completion")

router = APIRouter(prefix="", tags=["chat"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"

def result_frame(result: ExtractionResult) -> str:
    return sse({
        "text_content": result.text_content,
        "locations": [loc.model_dump(mode="json", by_alias=True) for loc in result.locations],
        "weather_location": result.weather_location,
    })


@router.post("/chat")
async def chat(
    request: ChatRequest,
    llm: LLMService = Depends(get_llm_service),
    feed: LocationFeed = Depends(get_location_feed),
    city_context: CityContext = Depends(get_city_context),
):
    """Stream the assistant reply, then the locations extracted from it"""
    last_user = next((m for m in reversed(request.messages) if m.role == "user"), None)
    classification = classify_query(last_user.content if last_user else "")

    if classification.type == "weather":
        place = classification.location or city_context.get_current_city()
        logger.info(f"Weather query for location: {place}")
        feed.weather_location = place

        async def weather_stream():
            text = f"Let me check the current weather in {place}..."
            yield sse({"text": text})
            yield result_frame(ExtractionResult(text_content=text, weather_location=place, source="weather"))
            yield "data: [DONE]\n\n"

        return StreamingResponse(weather_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    if llm.get_chat_model() is None:
        raise LLMServiceError("Ollama is not available")

    session = feed.start_message()

    async def event_stream():
        try:
            async for delta in llm.stream_chat(request.messages):
                if session.cancelled:
                    logger.info(f"Message {session.generation} superseded, stopping stream")
                    break
                await run_in_threadpool(session.feed_chunk, delta)
                yield sse({"text": delta})

            result = await run_in_threadpool(session.finish)
            if result is not None:
                logger.info(f"Stream finished with {len(result.locations)} locations ({result.source})")
                yield result_frame(result)
        except Exception as e:
            logger.error(f"Stream error: {e}", exc_info=True)
            session.cancel()
            yield sse({"error": "Stream error occurred"})
        yield "data: [DONE]\n\n"

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)
