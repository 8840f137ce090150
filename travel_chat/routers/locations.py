from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from travel_chat.exceptions.custom_exceptions import LocationExtractionHTTPError
from travel_chat.exceptions.location_exceptions import LocationExtractionError
from travel_chat.models.location_models import ExtractionResult
from travel_chat.models.schemas import (
    CityContextResponse,
    ExtractRequest,
    LocationsResponse,
    SelectLocationRequest,
)
from travel_chat.routers.dependencies import get_city_context, get_location_feed
from travel_chat.services.geocoding_service import city_from_coordinates
from travel_chat.services.location_service.city_context import CityContext, extract_city_name
from travel_chat.services.location_service.pipeline import ExtractionPipeline
from travel_chat.services.location_service.stream_session import LocationFeed
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.routers.locations")

router = APIRouter(prefix="", tags=["locations"])


@router.post("/locations/extract", response_model=ExtractionResult)
async def extract_locations(request: ExtractRequest):
    """One-shot extraction over a reply; strict mode failures come back as 422"""
    pipeline = ExtractionPipeline(mode=request.mode)
    try:
        return await run_in_threadpool(pipeline.run, request.text, complete=request.complete)
    except LocationExtractionError as e:
        logger.error(f"Strict extraction failed ({type(e).__name__}): {e}")
        raise LocationExtractionHTTPError()


@router.get("/locations", response_model=LocationsResponse)
async def displayed_locations(feed: LocationFeed = Depends(get_location_feed)):
    return LocationsResponse(locations=feed.locations, weather_location=feed.weather_location)


@router.post("/locations/select", response_model=CityContextResponse)
async def select_location(
    request: SelectLocationRequest,
    city_context: CityContext = Depends(get_city_context),
    feed: LocationFeed = Depends(get_location_feed),
):
    """Point the city context and the weather place at the selected location's city"""
    location = request.location
    logger.info(f"Location selected: {location.name}")

    city = ""
    if location.position is not None:
        city = await run_in_threadpool(city_from_coordinates, location.position.lat, location.position.lng)
    if not city:
        city = extract_city_name(location)

    city_context.set_current_city(city)
    feed.weather_location = city_context.get_current_city() or feed.weather_location
    return CityContextResponse(city=city_context.get_current_city())


@router.get("/city-context", response_model=CityContextResponse)
async def current_city(city_context: CityContext = Depends(get_city_context)):
    return CityContextResponse(city=city_context.get_current_city())
