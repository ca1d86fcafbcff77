from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Optional

from compliance_engine.shared.time_utils import DateLike, resolve_now, to_datetime


class ExpiryStateV1(str, Enum):
    """Clasificación temporal de una fecha de caducidad."""
    valid = "valid"
    expiring = "expiring"
    expired = "expired"
    unknown = "unknown"  # sin fecha de caducidad


def is_expired(valid_until: Optional[DateLike], now: Optional[DateLike] = None) -> bool:
    """True si la fecha ya pasó. None nunca está caducado."""
    if valid_until is None:
        return False
    return to_datetime(valid_until) < resolve_now(now)


def is_expiring(
    valid_until: Optional[DateLike],
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
) -> bool:
    """
    True si 0 < (valid_until - now) <= lookahead_days.

    Una fecha igual a now no cuenta (límite inferior excluido).
    """
    if valid_until is None:
        return False
    remaining = to_datetime(valid_until) - resolve_now(now)
    return timedelta(0) < remaining <= timedelta(days=lookahead_days)


def days_until_expiry(valid_until: Optional[DateLike], now: Optional[DateLike] = None) -> Optional[int]:
    """Días naturales hasta la caducidad (negativo si ya pasó) o None."""
    if valid_until is None:
        return None
    return (to_datetime(valid_until).date() - resolve_now(now).date()).days


def classify_expiry(
    valid_until: Optional[DateLike],
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
) -> ExpiryStateV1:
    """Combina is_expired/is_expiring en un único estado."""
    if valid_until is None:
        return ExpiryStateV1.unknown
    current = resolve_now(now)
    if is_expired(valid_until, now=current):
        return ExpiryStateV1.expired
    if is_expiring(valid_until, lookahead_days, now=current):
        return ExpiryStateV1.expiring
    return ExpiryStateV1.valid
