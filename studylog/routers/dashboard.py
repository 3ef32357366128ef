"""
Dashboard router.

GET /dashboard   — totals, current-month count, streak and yearly heat-map
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studylog.core.security import get_current_user_id
from studylog.db.base import get_db
from studylog.schemas.dashboard import ActivityItemResponse, DashboardSummaryResponse
from studylog.services.dashboard import DashboardSummary, get_dashboard_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _summary_to_response(s: DashboardSummary) -> DashboardSummaryResponse:
    return DashboardSummaryResponse(
        user_id=s.user_id,
        total_notes=s.total_notes,
        this_month_notes=s.this_month_notes,
        current_streak_days=s.current_streak_days,
        activity=[
            ActivityItemResponse(date=str(a.day), count=a.count, level=a.level)
            for a in s.activity
        ],
    )


@router.get(
    "",
    response_model=DashboardSummaryResponse,
    summary="Dashboard summary for the current user",
    responses={
        200: {"description": "Counts, streak and one activity item per day of the year."},
    },
)
def dashboard(
    year: Optional[int] = Query(
        default=None,
        ge=2000,
        le=2100,
        description="Year for the activity heat-map. Defaults to the current UTC year.",
        examples=[2026],
    ),
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Recomputed from note creation timestamps on every call.

    ### Activity levels
    | count | level |
    |---|---|
    | 0 | 0 |
    | 1–2 | 1 |
    | 3–4 | 2 |
    | 5–9 | 3 |
    | 10+ | 4 |

    The streak ends at the most recent day with a note, not necessarily today.
    """
    summary = get_dashboard_summary(db=db, owner_id=owner_id, year=year)
    return _summary_to_response(summary)
