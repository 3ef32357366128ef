"""
Dashboard service: loads the owner's note timestamps once and hands them
to the activity engine. Nothing is cached; every call recomputes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from studylog.models.note import Note
from studylog.services.activity import ActivityItem, aggregate, to_utc_day, year_window


@dataclass
class DashboardSummary:
    user_id: int
    total_notes: int
    this_month_notes: int
    current_streak_days: int
    activity: list[ActivityItem]


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def note_timestamps(db: Session, owner_id: int) -> list[datetime]:
    rows = (
        db.query(Note.created_at)
        .filter(Note.user_id == owner_id)
        .order_by(Note.created_at.asc())
        .all()
    )
    return [row.created_at for row in rows]


def get_dashboard_summary(
    db: Session,
    owner_id: int,
    year: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> DashboardSummary:
    """
    Totals, current-month count and streak over all of the owner's notes;
    heat-map over Jan 1 – Dec 31 of `year` (defaults to the current UTC year).
    """
    reference = as_of or _now()
    from_date, to_date = year_window(year or to_utc_day(reference).year)

    summary = aggregate(note_timestamps(db, owner_id), from_date, to_date, as_of=reference)
    return DashboardSummary(
        user_id=owner_id,
        total_notes=summary.total_count,
        this_month_notes=summary.this_period_count,
        current_streak_days=summary.current_streak_days,
        activity=summary.activity,
    )
