"""
Date and time tools.
"""

from __future__ import annotations

from datetime import datetime

import pytz

from ..tools import tool


@tool(
    description="Get the current date and time in a timezone",
    param_metadata={
        "timezone": {"description": "IANA timezone name, e.g. 'UTC' or 'Europe/London'"},
    },
)
def get_current_time(timezone: str = "UTC") -> str:
    """
    Return the current time as an ISO 8601 string.

    Raises:
        ValueError: If the timezone name is unknown.
    """
    try:
        tz = pytz.timezone(timezone)
    except pytz.exceptions.UnknownTimeZoneError as exc:
        raise ValueError(f"Unknown timezone '{timezone}'") from exc
    return datetime.now(tz).isoformat()
