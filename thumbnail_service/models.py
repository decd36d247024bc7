"""
Pydantic models for the JSON endpoints of the thumbnail service.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status: ok or error")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    store: str = Field(..., description="Storage backend type")
    font_family: str = Field(..., description="Font family embedded in thumbnails")


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str = Field(..., description="Error message")
