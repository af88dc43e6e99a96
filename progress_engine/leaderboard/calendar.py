"""Contribution-calendar grid, GitHub style: columns are Sunday..Saturday weeks."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta


# Upper bounds of heatmap intensity levels 1..3; anything above is level 4
LEVEL_BOUNDS = (2, 5, 10)


def activity_level(count: int) -> int:
    """Heatmap intensity 0..4 for a day with ``count`` activities."""
    if count <= 0:
        return 0
    for level, bound in enumerate(LEVEL_BOUNDS, start=1):
        if count <= bound:
            return level
    return len(LEVEL_BOUNDS) + 1


@dataclass(frozen=True, slots=True)
class ActivityDay:
    date: date
    count: int

    @property
    def level(self) -> int:
        return activity_level(self.count)


@dataclass(frozen=True, slots=True)
class ActivityCalendar:
    year: int
    days: list[ActivityDay]
    weeks: list[list[ActivityDay | None]] = field(default_factory=list)
    total_contributions: int = 0
    active_days: int = 0
    max_streak_within_year: int = 0


def grid_bounds(year: int) -> tuple[date, date]:
    """Sunday on or before Jan 1 and Saturday on or after Dec 31."""
    first = date(year, 1, 1)
    last = date(year, 12, 31)
    # date.weekday(): Monday is 0, Sunday is 6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return start, end


def longest_run(days: list[ActivityDay]) -> int:
    """Longest run of consecutive active days in a contiguous list of days."""
    best = run = 0
    for day in days:
        run = run + 1 if day.count > 0 else 0
        best = max(best, run)
    return best


def build_calendar(year: int, counts: Mapping[date, int]) -> ActivityCalendar:
    """Lay ``counts`` out over the year's week grid.

    Only in-year days feed the statistics; padding cells before Jan 1 and
    after Dec 31 are None.
    """
    start, end = grid_bounds(year)

    days: list[ActivityDay] = []
    weeks: list[list[ActivityDay | None]] = []
    week: list[ActivityDay | None] = []

    current = start
    while current <= end:
        if current.year == year:
            cell = ActivityDay(date=current, count=counts.get(current, 0))
            days.append(cell)
            week.append(cell)
        else:
            week.append(None)
        if len(week) == 7:
            weeks.append(week)
            week = []
        current += timedelta(days=1)

    return ActivityCalendar(
        year=year,
        days=days,
        weeks=weeks,
        total_contributions=sum(day.count for day in days),
        active_days=sum(1 for day in days if day.count > 0),
        max_streak_within_year=longest_run(days),
    )
