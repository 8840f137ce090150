from fastapi import Request

from travel_chat.services.location_service.city_context import CityContext
from travel_chat.services.location_service.stream_session import LocationFeed


def get_city_context(request: Request) -> CityContext:
    return request.app.state.city_context

def get_location_feed(request: Request) -> LocationFeed:
    return request.app.state.location_feed
