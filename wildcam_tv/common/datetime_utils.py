from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from typing import Union, Optional

from wildcam_tv.common.logger import setup_logger

logger = setup_logger('DateTimeUtils')

# Deployments are in the Basel region; naive timestamps are wall-clock local time.
LOCAL_TZ = ZoneInfo('Europe/Zurich')

Timestamp = Union[datetime, str]


def parse_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    """Convert a datetime or ISO-8601 string to an aware datetime. Returns None on error."""
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError as e:
            logger.warning(f"Failed to parse timestamp '{value}': {e}")
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=LOCAL_TZ)
    return dt


def is_timestamp(value) -> bool:
    return parse_timestamp(value) is not None


def to_iso_string(value: Optional[Timestamp]) -> Optional[str]:
    """Serialize to ISO-8601 UTC with a 'Z' suffix, milliseconds only when present."""
    dt = parse_timestamp(value)
    if dt is None:
        return None

    dt = dt.astimezone(timezone.utc)
    text = dt.strftime('%Y-%m-%dT%H:%M:%S')
    if dt.microsecond:
        text += f".{dt.microsecond // 1000:03d}"
    return text + 'Z'
