from typing import Any, Optional


class LocationExtractionError(Exception):
    """Base exception for location extraction operations"""
    pass

class MalformedJsonError(LocationExtractionError):
    """Raised when a JSON-like block in the reply fails to parse"""

    def __init__(self, message: str, snippet: Optional[str] = None):
        super().__init__(message)
        self.snippet = snippet

class LocationValidationError(LocationExtractionError):
    """Raised when a raw location record cannot become a Location"""

    def __init__(self, message: str, location_name: Optional[str] = None):
        super().__init__(message)
        self.location_name = location_name

class InvalidCoordinatesError(LocationValidationError):
    """Raised when a location's coordinates fail type or range validation"""

    def __init__(self, location_name: Optional[str], coordinates: Any = None):
        super().__init__(f"Invalid coordinates for location: {location_name}", location_name)
        self.coordinates = coordinates

class NoLocationsFoundError(LocationExtractionError):
    """Raised when neither JSON nor numbered-list prose yields a location"""
    pass
