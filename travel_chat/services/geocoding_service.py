import requests

from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger

logger = get_logger("travel_chat.services.geocoding_service")

_session = requests.Session()

_CITY_KEYS = ("city", "town", "village", "municipality", "county")


def city_from_coordinates(lat: float, lng: float) -> str:
    """
    Reverse geocode a position to a city name using Nominatim.

    Returns an empty string when the lookup fails or yields nothing usable.
    """
    # Adding user-agent is required by Nominatim's terms of use
    headers = {"User-Agent": settings.nominatim_user_agent}
    params = {"lat": lat, "lon": lng, "format": "json"}

    try:
        response = _session.get(
            settings.nominatim_url,
            params=params,
            headers=headers,
            timeout=settings.geocoding_timeout,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error getting city name from coordinates ({lat}, {lng}): {e}")
        return ""

    address = data.get("address") or {}
    for key in _CITY_KEYS:
        if address.get(key):
            logger.info(f"Reverse geocoded ({lat}, {lng}) to {address[key]}")
            return address[key]

    display_name = data.get("display_name") or ""
    return display_name.split(",")[0].strip()
