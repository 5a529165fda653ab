"""
Pydantic schemas for RSVP / guestbook submissions.

Request fields are deliberately loose (Any): forms post numbers as strings,
blank strings, or nothing at all, and the service layer does the coercion
so that a bad value turns into a 400 with our own message instead of a 422.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RsvpSubmission(BaseModel):
    """Schema for an RSVP form post."""
    model_config = ConfigDict(extra="ignore")

    name: Any = Field(None, description="Guest name (required)")
    phone: Any = Field("", description="Phone number")
    guests: Any = Field(1, description="Number of people attending")
    note: Any = Field("", description="Free-text note")
    timestamp: Any = Field(None, description="Client time (ISO-8601 or epoch ms)")
    side: Any = Field(None, description="groom / bride")


class GuestbookSubmission(BaseModel):
    """Schema for a guestbook form post."""
    model_config = ConfigDict(extra="ignore")

    name: Any = Field(None, description="Guest name (required)")
    contact: Any = Field("", description="Email / phone / social handle")
    message: Any = Field(None, description="Message (required)")
    timestamp: Any = Field(None, description="Client time (ISO-8601 or epoch ms)")
    side: Any = Field(None, description="groom / bride")


class GuestbookItem(BaseModel):
    timestamp: str
    name: str
    contact: str = ""
    message: str


class GuestbookList(BaseModel):
    ok: bool = True
    items: List[GuestbookItem]


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


class HealthCheck(BaseModel):
    """Health check response."""
    status: str
    backend: Optional[str] = None
