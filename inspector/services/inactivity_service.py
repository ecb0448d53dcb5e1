"""Days since last observed cast, plus a display band."""

import math
from datetime import datetime, timezone

from inspector.models.verdict import InactivityStatus

NEVER_ACTIVE_DAYS = 999
SECONDS_PER_DAY = 86400

ACTIVE_MAX_DAYS = 30
STALE_MAX_DAYS = 90
INACTIVE_MAX_DAYS = 365


def calculate_inactivity_days(
    last_activity: datetime | None,
    now: datetime | None = None,
) -> int:
    """Whole days since last_activity, rounded up. 999 when never observed.

    The absolute difference is used so a timestamp slightly in the future
    (clock skew) still yields a small positive count.
    """
    if last_activity is None:
        return NEVER_ACTIVE_DAYS

    if now is None:
        now = datetime.now(timezone.utc)
    if last_activity.tzinfo is None:
        last_activity = last_activity.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = abs((now - last_activity).total_seconds())
    return math.ceil(seconds / SECONDS_PER_DAY)


def inactivity_status(days: int) -> InactivityStatus:
    if days <= ACTIVE_MAX_DAYS:
        return InactivityStatus.ACTIVE
    if days <= STALE_MAX_DAYS:
        return InactivityStatus.STALE
    if days <= INACTIVE_MAX_DAYS:
        return InactivityStatus.INACTIVE
    return InactivityStatus.GHOST
