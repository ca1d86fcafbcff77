from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union

DateLike = Union[date, datetime]


def utc_now() -> datetime:
    """Instante actual en UTC, sin tzinfo (todas las comparaciones son naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Optional[DateLike]) -> Optional[datetime]:
    """
    Normaliza fechas a datetime naive en UTC.

    - date -> medianoche de ese día
    - datetime con tz -> convertido a UTC y sin tzinfo
    - datetime naive -> se asume UTC
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def resolve_now(now: Optional[DateLike] = None) -> datetime:
    """Devuelve `now` normalizado o el reloj del sistema si no se inyecta."""
    if now is None:
        return utc_now()
    return to_datetime(now)
