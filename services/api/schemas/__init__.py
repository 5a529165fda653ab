"""
Pydantic schemas for API request/response validation.
"""
from .submission import (
    RsvpSubmission,
    GuestbookSubmission,
    GuestbookItem,
    GuestbookList,
    OkResponse,
    ErrorResponse,
    HealthCheck,
)

# Re-export all
__all__ = [
    "RsvpSubmission",
    "GuestbookSubmission",
    "GuestbookItem",
    "GuestbookList",
    "OkResponse",
    "ErrorResponse",
    "HealthCheck",
]
