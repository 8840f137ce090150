from pydantic import BaseModel, Field, validator
from typing import List, Optional

from travel_chat.models.location_models import Location, NormalizationMode

class ChatMessage(BaseModel):
    role: str
    content: str

    @validator("role")
    def validate_role(cls, v):
        valid_roles = {"user", "assistant"}
        if v not in valid_roles:
            raise ValueError(f"role must be one of {valid_roles}")
        return v

class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)

class QueryClassification(BaseModel):
    type: str  # weather | location
    location: Optional[str] = None

class ExtractRequest(BaseModel):
    """Request schema for one-shot extraction over a finished reply"""
    text: str = Field(..., description="Assistant reply text, prose plus optional JSON block")
    mode: NormalizationMode = Field(NormalizationMode.PERMISSIVE, description="strict aborts on the first invalid record")
    complete: bool = Field(True, description="False when the text is a prefix of a reply still streaming")

class SelectLocationRequest(BaseModel):
    location: Location

class CityContextResponse(BaseModel):
    city: Optional[str] = None

class LocationsResponse(BaseModel):
    locations: List[Location] = []
    weather_location: Optional[str] = None

