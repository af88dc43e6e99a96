"""Calendar-day helpers shared by the streak ledger and the activity log."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from progress_engine.config.settings import get_settings


def utcnow() -> datetime:
    return datetime.now(UTC)


def activity_day(moment: datetime | None = None) -> date:
    """Calendar day of ``moment`` (default: now) in ACTIVITY_TIMEZONE."""
    moment = moment or utcnow()
    return moment.astimezone(ZoneInfo(get_settings().ACTIVITY_TIMEZONE)).date()
