"""Pydantic schemas for API requests and responses."""

from typing import Optional

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    result: str = Field(..., description="The complete short URL")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"result": "http://localhost:8080/aB3xQ9"},
            ]
        }
    }


class BatchRequestItem(BaseModel):
    """One URL of a batch shorten request."""

    correlation_id: str = Field(..., description="Client-chosen identifier echoed in the response")
    original_url: str = Field(..., description="The URL to shorten")


class BatchResponseItem(BaseModel):
    """One short URL of a batch shorten response."""

    correlation_id: str
    short_url: str


class ErrorResponse(BaseModel):
    """Error response."""

    detail: Optional[str] = Field(None, description="Detailed error information")
