from datetime import datetime, timedelta
from typing import Optional
from pytz import utc

# Service clock runs on UTC, matching football-data.org timestamps
SERVICE_TZ = utc

DATE_FORMAT = "%Y-%m-%d"

def get_current_time() -> datetime:
    """Get current time in the service timezone."""
    return datetime.now(SERVICE_TZ)

def get_today_str() -> str:
    """Get today's date string in the service timezone (YYYY-MM-DD)."""
    return get_current_time().strftime(DATE_FORMAT)

def get_date_window(
    days_back: int,
    days_forward: int = 0,
    now: Optional[datetime] = None,
) -> tuple[str, str]:
    """Get (date_from, date_to) strings spanning `days_back` before and `days_forward` after today."""
    now = now or get_current_time()
    date_from = (now - timedelta(days=days_back)).strftime(DATE_FORMAT)
    date_to = (now + timedelta(days=days_forward)).strftime(DATE_FORMAT)
    return date_from, date_to

def parse_utc_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp such as '2024-03-02T15:00:00Z' into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return SERVICE_TZ.localize(parsed)
    return parsed.astimezone(SERVICE_TZ)
