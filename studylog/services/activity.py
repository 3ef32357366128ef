"""
Activity Aggregation Engine — heat-map and streak from note timestamps.

Definitions
-----------
Every timestamp is bucketed by its UTC calendar day. Naive datetimes are
treated as already being UTC.

  Heat-map  : one ActivityItem per day of [from_date, to_date] inclusive,
              oldest first; days without events are explicit zero entries.
  Level     : 4 if count >= 10, 3 if >= 5, 2 if >= 3, 1 if >= 1, else 0.
  Streak    : consecutive active days ending at the most recent active
              day (not at "today"). Two events on one day count once.
  This month: events inside [first-of-month 00:00 UTC,
              first-of-next-month 00:00 UTC) for the month of `as_of`.

Pure functions, no I/O. Recomputed on every dashboard request.

Public API
----------
level_for_count(count)                          -> int
to_utc_day(ts)                                  -> date
daily_activity(days, from_date, to_date)        -> list[ActivityItem]
current_streak(days)                            -> int
month_bounds(as_of)                             -> tuple[datetime, datetime]
year_window(year)                               -> tuple[date, date]
aggregate(events, from_date, to_date, as_of)    -> ActivitySummary
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional


# ---------------------------------------------------------------------------
# Result types (plain dataclasses — no ORM, no Pydantic)
# ---------------------------------------------------------------------------

@dataclass
class ActivityItem:
    day: date
    count: int
    level: int   # 0–4


@dataclass
class ActivitySummary:
    total_count: int
    this_period_count: int
    current_streak_days: int
    activity: list[ActivityItem]


# ---------------------------------------------------------------------------
# Level buckets, highest threshold first
# ---------------------------------------------------------------------------

_LEVEL_THRESHOLDS = ((10, 4), (5, 3), (3, 2), (1, 1))


def level_for_count(count: int) -> int:
    for threshold, level in _LEVEL_THRESHOLDS:
        if count >= threshold:
            return level
    return 0


# ---------------------------------------------------------------------------
# UTC helpers
# ---------------------------------------------------------------------------

def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_utc_day(ts: datetime) -> date:
    """Truncate a timestamp to its UTC calendar day."""
    return _as_utc(ts).date()


def month_bounds(as_of: datetime) -> tuple[datetime, datetime]:
    """[start, end) of the UTC calendar month containing `as_of`."""
    ref = _as_utc(as_of)
    start = datetime(ref.year, ref.month, 1, tzinfo=timezone.utc)
    if ref.month == 12:
        end = datetime(ref.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(ref.year, ref.month + 1, 1, tzinfo=timezone.utc)
    return start, end


def year_window(year: int) -> tuple[date, date]:
    """Jan 1 – Dec 31 of `year`, inclusive."""
    return date(year, 1, 1), date(year, 12, 31)


# ---------------------------------------------------------------------------
# Core — heat-map
# ---------------------------------------------------------------------------

def daily_activity(
    days: Iterable[date],
    from_date: date,
    to_date: date,
) -> list[ActivityItem]:
    """
    Walk the window forward one day at a time and emit an ActivityItem
    for every day. `days` holds one entry per event (duplicates count).
    """
    counts = Counter(d for d in days if from_date <= d <= to_date)

    items: list[ActivityItem] = []
    cursor = from_date
    while cursor <= to_date:
        count = counts.get(cursor, 0)
        items.append(ActivityItem(day=cursor, count=count, level=level_for_count(count)))
        cursor += timedelta(days=1)
    return items


# ---------------------------------------------------------------------------
# Core — streak
# ---------------------------------------------------------------------------

def current_streak(days: Iterable[date]) -> int:
    """
    Length of the unbroken run of active days ending at the latest one.
    """
    active = sorted(set(days))
    if not active:
        return 0

    streak = 1
    current = active[-1]
    for prev in reversed(active[:-1]):
        gap = (current - prev).days
        if gap != 1:
            break
        streak += 1
        current = prev
    return streak


# ---------------------------------------------------------------------------
# Public — main entry point
# ---------------------------------------------------------------------------

def aggregate(
    events: Iterable[datetime],
    from_date: date,
    to_date: date,
    as_of: Optional[datetime] = None,
) -> ActivitySummary:
    """
    Compute totals, month count, streak and heat-map from raw timestamps.
    `events` may be unsorted.
    """
    if from_date > to_date:
        raise ValueError(f"window start {from_date} is after window end {to_date}")

    reference = as_of or datetime.now(tz=timezone.utc)
    month_start, month_end = month_bounds(reference)

    stamps = [_as_utc(ts) for ts in events]
    days = [ts.date() for ts in stamps]

    return ActivitySummary(
        total_count=len(stamps),
        this_period_count=sum(1 for ts in stamps if month_start <= ts < month_end),
        current_streak_days=current_streak(days),
        activity=daily_activity(days, from_date, to_date),
    )
