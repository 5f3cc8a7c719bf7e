"""
KRX clock helpers. Live scans only run inside the monitoring window;
simulations never consult these.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from dart_monitor import config

SKIP_IN_SESSION = "skip_in_session"
ALWAYS = "always"


def market_now() -> datetime:
    return datetime.now(ZoneInfo(config.MARKET_TZ))


def market_time(now: datetime | None = None) -> datetime:
    """now on the market clock; naive datetimes are taken to be market time already."""
    if now is None:
        return market_now()
    if now.tzinfo is None:
        return now
    return now.astimezone(ZoneInfo(config.MARKET_TZ))


def _hhmm(now: datetime) -> int:
    return now.hour * 100 + now.minute


def is_market_open(now: datetime | None = None) -> bool:
    """Weekday and inside the MONITOR_OPEN..MONITOR_CLOSE window (inclusive)."""
    now = market_time(now)
    if now.weekday() >= 5:
        return False
    return config.MONITOR_OPEN <= _hhmm(now) <= config.MONITOR_CLOSE


def in_trading_session(now: datetime | None = None) -> bool:
    now = market_time(now)
    if now.weekday() >= 5:
        return False
    return config.SESSION_OPEN <= _hhmm(now) < config.SESSION_CLOSE


def earnings_allowed(now: datetime | None = None, policy: str | None = None) -> bool:
    """Whether a live scan should evaluate earnings filings right now."""
    policy = policy or config.EARNINGS_POLICY
    if policy == ALWAYS:
        return True
    if policy == SKIP_IN_SESSION:
        return not in_trading_session(now)
    raise ValueError(f"unknown EARNINGS_POLICY: {policy!r}")
