from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):

    ## In local venv use the localhost url for ollama, inside docker use "http://ollama:11434"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "mistral-nemo:12b"
    llm_temperature: float = 0.7
    ollama_timeout: int = 120

    ## Location defaults used when the model omits a field
    default_rating: float = 4.5
    rating_jitter: float = 0.5  # text-mode extraction only
    min_fallback_reviews: int = 10000
    max_fallback_reviews: int = 50000
    image_url_template: str = "https://source.unsplash.com/800x600/?{query}"

    ## Seed for rating/review defaults; leave unset in production
    random_seed: Optional[int] = None

    ## Cities the city context can start from
    seed_cities: List[str] = [
        "Paris", "Rome", "Barcelona", "Amsterdam", "Lisbon",
        "Prague", "Vienna", "Kyoto", "New York", "Istanbul",
    ]

    ## Streaming: re-extract at least every N chunks even without a sentence or line end
    extraction_chunk_interval: int = 8

    ## Reverse geocoding (OpenStreetMap Nominatim)
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "TravelChat/1.0"
    geocoding_timeout: int = 10

    log_dir: str = "logs"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
