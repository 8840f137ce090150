from urllib.parse import quote

from travel_chat.utils.config import settings


def image_url_for(name: str) -> str:
    """Deterministic image search URL for a place name; no network call is made."""
    query = quote(f"{name.strip()} landmark")
    return settings.image_url_template.format(query=query)
