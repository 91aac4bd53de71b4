"""
API request and response models for the FastAPI application.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_TEXT_LENGTH = 200


class CreateBookRequest(BaseModel):
    """Request body for creating a book."""
    title: str = Field(..., description="Book title (1-200 characters after trimming)")
    owner: str = Field(..., description="Book owner (1-200 characters after trimming)")
    availability: bool = Field(False, description="Whether the book can be borrowed")

    @field_validator('title', 'owner')
    @classmethod
    def validate_text(cls, v, info):
        """Trim surrounding whitespace and require a non-empty value."""
        v = v.strip()
        if not v:
            raise ValueError(f'{info.field_name} is required')
        if len(v) > MAX_TEXT_LENGTH:
            raise ValueError(f'{info.field_name} must be at most {MAX_TEXT_LENGTH} characters')
        return v


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    book_count: int = Field(..., description="Number of books in the store")
