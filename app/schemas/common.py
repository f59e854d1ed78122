"""Common response schemas."""
from pydantic import BaseModel
from typing import List, Optional


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    error: str
    details: Optional[List[str]] = None
