"""
Dashboard schemas.

GET /dashboard → DashboardSummaryResponse
"""
from pydantic import Field

from studylog.schemas.common import CamelModel


class ActivityItemResponse(CamelModel):
    date: str = Field(examples=["2026-01-14"])
    count: int = Field(examples=[5])
    level: int = Field(ge=0, le=4, description="Activity level (0-4).", examples=[3])


class DashboardSummaryResponse(CamelModel):
    user_id: int
    total_notes: int
    this_month_notes: int = Field(description="Notes created in the current UTC month.")
    current_streak_days: int = Field(
        description="Consecutive active days ending at the most recent active day."
    )
    activity: list[ActivityItemResponse] = Field(
        description="One item per day of the requested year, oldest first."
    )
