from fastapi import HTTPException

class LLMServiceError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=503,
            detail=f"LLM service error: {detail}"
        )

class LocationExtractionHTTPError(HTTPException):
    # The underlying error is logged, the client only gets a generic notice
    def __init__(self):
        super().__init__(
            status_code=422,
            detail="Could not extract locations from the assistant reply"
        )
