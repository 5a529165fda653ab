# services/api/core/timestamps.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional


def _parse_client_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a client-supplied timestamp.

    Accepts ISO-8601 strings (a trailing "Z" is allowed; naive values are
    taken as UTC) and epoch milliseconds as numbers. Anything else -> None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    s = str(value).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Any = None, offset_hours: int = 7) -> str:
    """
    Render a submission time as "YYYY-MM-DD HH:MM:SS GMT+7".

    Uses the client's timestamp when it parses, otherwise the current time.
    """
    tz = timezone(timedelta(hours=offset_hours))
    moment = _parse_client_timestamp(value) or datetime.now(timezone.utc)
    try:
        local = moment.astimezone(tz)
    except OverflowError:
        # e.g. 9999-12-31T23:00Z shifted past year 9999
        local = datetime.now(timezone.utc).astimezone(tz)
    return f"{local.strftime('%Y-%m-%d %H:%M:%S')} GMT{offset_hours:+d}"
