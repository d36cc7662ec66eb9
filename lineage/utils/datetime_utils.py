"""
Datetime utility functions for rows coming from PostgreSQL or JSON payloads
"""
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def to_datetime(value) -> Optional[datetime]:
    """
    Convert a stored timestamp to a timezone-aware Python datetime

    Handles:
    - None -> None
    - datetime -> as-is (naive values are assumed UTC)
    - ISO string (with or without 'Z') -> parsed datetime
    - Other -> None with warning
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError as e:
            logger.warning(f"Failed to parse datetime string '{value}': {e}")
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    logger.warning(f"Cannot convert {type(value)} to Python datetime: {value}")
    return None


def utcnow() -> datetime:
    """Current time, timezone-aware"""
    return datetime.now(timezone.utc)
