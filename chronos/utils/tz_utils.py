import os
from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from typing import Optional

DEFAULT_TIMEZONE = os.getenv("CHRONOS_TIMEZONE", "UTC")

def utc_to_local(dt_utc: datetime, tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Converte datetime UTC para timezone local."""
    if dt_utc.tzinfo is None:
        dt_utc = dt_utc.replace(tzinfo=timezone.utc)
    tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)
    return dt_utc.astimezone(tz)

def clock_str(dt_utc: Optional[datetime] = None, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Hora local no formato HH:MM:SS, usada para carimbar o audit log."""
    dt_utc = dt_utc or datetime.now(timezone.utc)
    return utc_to_local(dt_utc, tz_name).strftime("%H:%M:%S")

def format_countdown(seconds: int) -> str:
    """Formata segundos restantes como [H:]MM:SS."""
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    prefix = f"{h}:" if h > 0 else ""
    return f"{prefix}{m:02d}:{s:02d}"
