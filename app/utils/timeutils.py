from datetime import datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def format_short_datetime(dt: datetime) -> str:
    """'Oct 18, 02:30 PM' (mes corto, día, hora:minuto en 12h).

    Se formatea la hora tal como viene guardada (UTC), no la hora local del servidor.
    """
    return f"{dt:%b} {dt.day}, {dt:%I:%M %p}"
