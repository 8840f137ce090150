import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator


class NormalizationMode(str, Enum):
    """How invalid raw records are handled: abort the batch or drop the record"""
    STRICT = "strict"
    PERMISSIVE = "permissive"


class Position(BaseModel):
    lat: float
    lng: float

    class Config:
        frozen = True

    @validator("lat")
    def validate_lat(cls, v):
        if not math.isfinite(v) or not -90 <= v <= 90:
            raise ValueError(f"latitude must be within [-90, 90], got {v}")
        return v

    @validator("lng")
    def validate_lng(cls, v):
        if not math.isfinite(v) or not -180 <= v <= 180:
            raise ValueError(f"longitude must be within [-180, 180], got {v}")
        return v

    def as_pair(self):
        return (self.lat, self.lng)


class Location(BaseModel):
    """Validated, recommendable place shown as a card and a map marker"""
    id: str
    name: str = Field(..., min_length=1)
    # None only for text-mode names the lookup does not know; never rendered on the map
    position: Optional[Position] = None
    rating: float = 4.5
    reviews: int = Field(default=0, ge=0)
    description: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    city: Optional[str] = None
    country: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True

    @validator("name")
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @property
    def is_resolved(self) -> bool:
        return self.position is not None


@dataclass(frozen=True)
class StreamParseResult:
    """Per-call classification of an accumulated streaming reply"""
    text_content: str
    json_content: Optional[str] = None
    weather_location: Optional[str] = None


class ExtractionResult(BaseModel):
    text_content: str = ""
    locations: List[Location] = []
    weather_location: Optional[str] = None
    source: str = "none"  # json | text | weather | none

    class Config:
        frozen = True
