"""Trading session detection from a trade's local time of day.

Session windows are defined in New York time. A local HH:MM is converted to
New York using the offsets of both zones on the trade's date (today if none
is given), so daylight-saving differences are respected.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tradelog.config import settings

logger = logging.getLogger(__name__)

NEW_YORK = "America/New_York"

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})")


class TradingSession(str, Enum):
    ASIA = "Asia"
    LONDON = "London"
    PREMARKET = "Premarket"
    NEW_YORK = "New York"


@dataclass(frozen=True)
class SessionWindow:
    session: TradingSession
    start: int  # minutes since midnight, New York time
    end: int
    priority: int  # lower opens first and wins overlaps

    def contains(self, minutes: int) -> bool:
        if self.start > self.end:  # wraps past midnight
            return minutes >= self.start or minutes < self.end
        return self.start <= minutes < self.end


SESSION_WINDOWS: tuple[SessionWindow, ...] = (
    SessionWindow(TradingSession.ASIA, 23 * 60, 6 * 60, priority=1),
    SessionWindow(TradingSession.LONDON, 3 * 60, 10 * 60, priority=2),
    SessionWindow(TradingSession.PREMARKET, 4 * 60, 9 * 60 + 30, priority=3),
    SessionWindow(TradingSession.NEW_YORK, 9 * 60 + 30, 16 * 60, priority=4),
)

NYSE_OPEN = 9 * 60 + 30


def to_new_york_minutes(hour: int, minute: int, timezone: str, on: date | None = None) -> int:
    """Minutes since midnight in New York for a local wall-clock time."""
    if timezone == NEW_YORK:
        return hour * 60 + minute
    day = on or date.today()
    try:
        local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=ZoneInfo(timezone))
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown timezone '{timezone}', treating time as New York time")
        return hour * 60 + minute
    converted = local.astimezone(ZoneInfo(NEW_YORK))
    return converted.hour * 60 + converted.minute


def detect_session(
    time: str | None,
    timezone: str | None = None,
    allowed: list[TradingSession] | None = None,
    on: date | None = None,
) -> TradingSession | None:
    """Session a trade opened in, or None.

    Args:
        time: Local ``HH:MM`` or ``HH:MM:SS``.
        timezone: IANA zone the time is expressed in; the configured
            ``session_timezone`` when None.
        allowed: Restrict matching to these sessions (all when None).
        on: Date used for the timezone offset; today when None.
    """
    if not time:
        return None
    match = _TIME_RE.match(time)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None

    if timezone is None:
        timezone = settings.session_timezone
    minutes = to_new_york_minutes(hour, minute, timezone, on)
    candidates = [w for w in SESSION_WINDOWS if allowed is None or w.session in allowed]
    matching = sorted((w for w in candidates if w.contains(minutes)), key=lambda w: w.priority)

    if matching:
        return matching[0].session
    premarket_allowed = allowed is None or TradingSession.PREMARKET in allowed
    if premarket_allowed and minutes < NYSE_OPEN:
        return TradingSession.PREMARKET
    return None
