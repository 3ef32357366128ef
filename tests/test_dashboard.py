"""
Tests for the dashboard summary: counts, streak and the yearly heat-map.

Notes are inserted directly with explicit created_at values so results do
not depend on the wall clock.
"""
from datetime import date, datetime, timezone

from studylog.models.note import Note
from studylog.services.dashboard import get_dashboard_summary

UTC = timezone.utc


def add_notes(db, owner_id, *stamps):
    for ts in stamps:
        db.add(Note(user_id=owner_id, title="t", raw_content="r", created_at=ts))
    db.commit()


class TestDashboardService:
    def test_empty(self, db, owner_id):
        s = get_dashboard_summary(db, owner_id, year=2026, as_of=datetime(2026, 3, 1, tzinfo=UTC))
        assert s.user_id == owner_id
        assert s.total_notes == 0
        assert s.this_month_notes == 0
        assert s.current_streak_days == 0
        assert len(s.activity) == 365
        assert all(a.count == 0 and a.level == 0 for a in s.activity)

    def test_counts_and_streak(self, db, owner_id):
        add_notes(
            db, owner_id,
            datetime(2026, 3, 10, 9, tzinfo=UTC),
            datetime(2026, 3, 10, 20, tzinfo=UTC),
            datetime(2026, 3, 9, 12, tzinfo=UTC),
            datetime(2026, 3, 8, 12, tzinfo=UTC),
            datetime(2026, 3, 5, 12, tzinfo=UTC),
            datetime(2026, 2, 27, 12, tzinfo=UTC),
        )
        s = get_dashboard_summary(db, owner_id, as_of=datetime(2026, 3, 15, tzinfo=UTC))
        assert s.total_notes == 6
        assert s.this_month_notes == 5
        assert s.current_streak_days == 3

        by_day = {a.day: a for a in s.activity}
        assert by_day[date(2026, 3, 10)].count == 2
        assert by_day[date(2026, 3, 10)].level == 1
        assert by_day[date(2026, 3, 11)].count == 0

    def test_year_defaults_to_as_of(self, db, owner_id):
        s = get_dashboard_summary(db, owner_id, as_of=datetime(2028, 7, 1, tzinfo=UTC))
        assert s.activity[0].day == date(2028, 1, 1)
        assert s.activity[-1].day == date(2028, 12, 31)
        assert len(s.activity) == 366

    def test_heat_map_levels(self, db, owner_id):
        day = datetime(2026, 4, 2, 8, tzinfo=UTC)
        add_notes(db, owner_id, *[day] * 10)
        s = get_dashboard_summary(db, owner_id, year=2026, as_of=day)
        by_day = {a.day: a for a in s.activity}
        assert by_day[date(2026, 4, 2)].count == 10
        assert by_day[date(2026, 4, 2)].level == 4

    def test_scoped_to_owner(self, db, owner_id, other_owner_id):
        add_notes(db, other_owner_id, datetime(2026, 3, 1, tzinfo=UTC))
        s = get_dashboard_summary(db, owner_id, year=2026, as_of=datetime(2026, 3, 2, tzinfo=UTC))
        assert s.total_notes == 0


class TestDashboardEndpoint:
    def test_shape(self, client, auth_headers, owner_id, db):
        add_notes(db, owner_id, datetime(2026, 1, 14, 10, tzinfo=UTC))
        r = client.get("/dashboard?year=2026", headers=auth_headers)
        assert r.status_code == 200
        body = r.json()
        assert body["userId"] == owner_id
        assert body["totalNotes"] == 1
        assert len(body["activity"]) == 365
        assert body["activity"][0] == {"date": "2026-01-01", "count": 0, "level": 0}
        jan14 = next(a for a in body["activity"] if a["date"] == "2026-01-14")
        assert jan14 == {"date": "2026-01-14", "count": 1, "level": 1}
        assert "thisMonthNotes" in body
        assert body["currentStreakDays"] == 1

    def test_counts_note_created_via_api(self, client, auth_headers):
        client.post("/notes", json={"rawContent": "today"}, headers=auth_headers)
        body = client.get("/dashboard", headers=auth_headers).json()
        assert body["totalNotes"] == 1
        assert body["thisMonthNotes"] == 1
        assert body["currentStreakDays"] == 1
        assert sum(a["count"] for a in body["activity"]) == 1

    def test_year_out_of_range(self, client, auth_headers):
        r = client.get("/dashboard?year=1999", headers=auth_headers)
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_requires_token(self, client):
        assert client.get("/dashboard").status_code == 401
