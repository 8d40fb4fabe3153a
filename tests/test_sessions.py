"""Tests for trading session detection."""

from datetime import date

import pytest

from tradelog.config import Settings
from tradelog.services.sessions import TradingSession, detect_session, to_new_york_minutes

WINTER = date(2024, 1, 15)


@pytest.mark.parametrize(
    "time, expected",
    [
        ("02:00", TradingSession.ASIA),
        ("05:00", TradingSession.ASIA),  # Asia, London and Premarket overlap
        ("23:30", TradingSession.ASIA),
        ("07:00", TradingSession.LONDON),
        ("09:00", TradingSession.LONDON),
        ("09:45", TradingSession.LONDON),  # London runs until 10:00
        ("10:00", TradingSession.NEW_YORK),
        ("15:59:59", TradingSession.NEW_YORK),
        ("16:00", None),
        ("20:00", None),
    ],
)
def test_new_york_times(time, expected):
    assert detect_session(time) == expected


@pytest.mark.parametrize("time", [None, "", "abc", "25:00", "12:75"])
def test_unreadable_times(time):
    assert detect_session(time) is None


# ---------------------------------------------------------------------------
# Allowed sessions
# ---------------------------------------------------------------------------

class TestAllowed:
    def test_overlap_resolves_within_allowed(self):
        allowed = [TradingSession.PREMARKET, TradingSession.NEW_YORK]
        assert detect_session("09:00", allowed=allowed) == TradingSession.PREMARKET

    def test_premarket_fallback_before_open(self):
        allowed = [TradingSession.PREMARKET, TradingSession.NEW_YORK]
        assert detect_session("02:00", allowed=allowed) == TradingSession.PREMARKET

    def test_no_fallback_without_premarket(self):
        assert detect_session("09:00", allowed=[TradingSession.NEW_YORK]) is None

    def test_no_fallback_after_open(self):
        assert detect_session("17:00", allowed=[TradingSession.PREMARKET]) is None


# ---------------------------------------------------------------------------
# Timezones
# ---------------------------------------------------------------------------

class TestTimezones:
    def test_london_afternoon_is_new_york_morning(self):
        assert to_new_york_minutes(15, 0, "Europe/London", on=WINTER) == 10 * 60
        assert detect_session("15:00", timezone="Europe/London", on=WINTER) == TradingSession.NEW_YORK
        assert detect_session("14:00", timezone="Europe/London", on=WINTER) == TradingSession.LONDON

    def test_offset_gap_changes_with_daylight_saving(self):
        # US clocks move on 2024-03-10, UK clocks on 2024-03-31
        assert to_new_york_minutes(14, 0, "Europe/London", on=date(2024, 3, 20)) == 10 * 60
        assert to_new_york_minutes(14, 0, "Europe/London", on=date(2024, 7, 1)) == 9 * 60

    def test_wraps_past_midnight(self):
        assert to_new_york_minutes(9, 0, "Asia/Tokyo", on=WINTER) == 19 * 60

    def test_unknown_timezone_is_treated_as_new_york(self, caplog):
        assert detect_session("10:00", timezone="Mars/Olympus_Mons", on=WINTER) == TradingSession.NEW_YORK
        assert "Unknown timezone" in caplog.text

    def test_configured_timezone_is_the_default(self, monkeypatch):
        monkeypatch.setattr("tradelog.services.sessions.settings", Settings(session_timezone="Europe/London"))
        assert detect_session("15:00", on=WINTER) == TradingSession.NEW_YORK
        assert detect_session("14:00", on=WINTER) == TradingSession.LONDON
        # An explicit zone still wins over the configured one
        assert detect_session("15:00", timezone="America/New_York", on=WINTER) == TradingSession.NEW_YORK
        assert detect_session("09:45", timezone="America/New_York", on=WINTER) == TradingSession.LONDON
