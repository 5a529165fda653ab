"""
Validation utilities for submissions.
Rejects incomplete entries up front and coerces loose form input.
"""
import math
from typing import Any, Optional
from fastapi import HTTPException

from models import SIDES


def clean_text(value: Any) -> str:
    """
    Convert a raw form value to a trimmed string.
    None becomes "" so optional fields never store "None".
    """
    if value is None:
        return ""
    return str(value).strip()


def require_text(*values: Any, message: str) -> None:
    """
    Ensure every value is present and non-empty after trimming.

    Raises:
        HTTPException: 400 with `message` if any value is blank
    """
    for value in values:
        if not clean_text(value):
            raise HTTPException(status_code=400, detail=message)


def coerce_guest_count(value: Any) -> int:
    """
    Coerce the guest count to a positive integer.

    Missing, non-numeric, zero, negative or non-finite input becomes 1.
    Fractions are truncated ("2.7" -> 2).
    """
    if value is None or isinstance(value, bool):
        return 1
    try:
        number = float(str(value).strip())
    except ValueError:
        return 1
    if not math.isfinite(number):
        return 1
    count = int(number)
    return count if count >= 1 else 1


def normalize_side(side: Any) -> Optional[str]:
    """
    Normalize the optional side label.

    Returns:
        "groom", "bride", or None when no side was given

    Raises:
        HTTPException: 400 if the side is not one of the known labels
    """
    s = clean_text(side).lower()
    if not s:
        return None
    if s not in SIDES:
        raise HTTPException(status_code=400, detail="Unknown side")
    return s


def coerce_limit(limit: Optional[int], cap: int) -> int:
    """Clamp a requested read limit to [1, cap]; None means cap."""
    if limit is None:
        return cap
    return max(1, min(int(limit), cap))
