# =======================================================================================
# gatepass/utils/timeutils.py - Time & Window Helpers
# =======================================================================================
import re
from datetime import date, datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DAY_START = "00:00"
DAY_END = "23:59"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@lru_cache(maxsize=32)
def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA zone name; 'UTC' never needs the tz database."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def to_reference(now: datetime, tz: tzinfo) -> datetime:
    return ensure_utc(now).astimezone(tz)


def local_date(now: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant in the reference timezone."""
    return to_reference(now, tz).date()


def local_hhmm(now: datetime, tz: tzinfo) -> str:
    """Time of day in the reference timezone, truncated to the minute."""
    return to_reference(now, tz).strftime("%H:%M")


def is_hhmm(value: str) -> bool:
    return bool(HHMM_PATTERN.match(value))
