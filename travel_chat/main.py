from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_chat.routers import chat_completion, locations
from travel_chat.services.location_service.city_context import CityContext
from travel_chat.services.location_service.normalizer import default_rng
from travel_chat.services.location_service.pipeline import ExtractionPipeline
from travel_chat.services.location_service.stream_session import LocationFeed
from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger

# Create a logger specific to this module
logger = get_logger("travel_chat.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    app.state.city_context = CityContext.from_seed_cities(settings.seed_cities)
    app.state.location_feed = LocationFeed(
        pipeline=ExtractionPipeline(rng=default_rng()),
        city_context=app.state.city_context,
    )
    logger.info("Application started - city context and location feed initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Travel Chat",
    version="1.0.0",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health")
async def health_check():
    return JSONResponse(status_code=200, content={"status": "ok"})


app.include_router(chat_completion.router)
app.include_router(locations.router)
