"""
Share link state machine.

All functions here are pure: they read a link (an ORM row or any object
with the same attributes) and the current time, and never mutate it.
Terminal states are judged on every read, nothing sweeps expired links.
"""
import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from driveshare.core.config import settings
from driveshare.core.errors import LinkInvalidReason, ValidationError


class LinkState(str, Enum):
    ACTIVE_UNUSED = "active-unused"
    ACTIVE_USED = "active-used"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    REVOKED = "revoked"


TERMINAL_STATES = frozenset({LinkState.EXPIRED, LinkState.EXHAUSTED, LinkState.REVOKED})

_REASONS = {
    LinkState.EXPIRED: LinkInvalidReason.EXPIRED,
    LinkState.EXHAUSTED: LinkInvalidReason.EXHAUSTED,
    LinkState.REVOKED: LinkInvalidReason.REVOKED,
}


def new_token() -> str:
    return secrets.token_urlsafe(32)


def expiry_for(expires_in_days: Any, now: datetime) -> datetime:
    if isinstance(expires_in_days, bool) or not isinstance(expires_in_days, int):
        raise ValidationError("Expiration time must be a whole number of days", field="expiresIn")
    low, high = settings.SHARE_LINK_MIN_DAYS, settings.SHARE_LINK_MAX_DAYS
    if not low <= expires_in_days <= high:
        raise ValidationError(
            f"Expiration time must be between {low} and {high} days", field="expiresIn"
        )
    return now + timedelta(days=expires_in_days)


def has_expired(link: Any, now: datetime) -> bool:
    return now > link.expires_at


def link_state(link: Any, now: datetime) -> LinkState:
    if not link.is_active:
        return LinkState.REVOKED
    if has_expired(link, now):
        return LinkState.EXPIRED
    if link.one_time_use and link.access_count > 0:
        return LinkState.EXHAUSTED
    if link.access_count > 0:
        return LinkState.ACTIVE_USED
    return LinkState.ACTIVE_UNUSED


def is_valid(link: Any, now: datetime) -> bool:
    return link_state(link, now) not in TERMINAL_STATES


def invalid_reason(link: Optional[Any], now: datetime) -> Optional[LinkInvalidReason]:
    """None when the link may be used, otherwise why it may not."""
    if link is None:
        return LinkInvalidReason.NOT_FOUND
    return _REASONS.get(link_state(link, now))
