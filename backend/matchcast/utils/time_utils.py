import os
from datetime import datetime
from pytz import timezone

# Timezone used for fixture listings and log timestamps
DEFAULT_TZ_NAME = "America/Mexico_City"


def get_timezone():
    """Get the configured service timezone."""
    return timezone(os.getenv("FIXTURES_TIMEZONE", DEFAULT_TZ_NAME))


def get_timezone_name() -> str:
    """Get the configured timezone name as sent to API-Football."""
    return get_timezone().zone


def get_current_time() -> datetime:
    """Get current time in the service timezone."""
    return datetime.now(get_timezone())


def get_today_str() -> str:
    """Get today's date string in the service timezone (YYYY-MM-DD)."""
    return get_current_time().strftime("%Y-%m-%d")
