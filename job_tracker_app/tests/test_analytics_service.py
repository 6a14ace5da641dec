"""
Test the dashboard analytics derived from job applications.
"""
import logging
import time
from datetime import datetime, timedelta, timezone

import pytest

from backend.services import analytics_service
from backend.services.analytics_service import compute_analytics, trailing_months
from backend.services.application_tracker import get_applications_for_user


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def local_timezone(monkeypatch):
    """Run with the process-local timezone set to the given zone.

    POSIX zone strings are used so the tests need no zoneinfo database.
    """
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def _set(zone):
        monkeypatch.setenv("TZ", zone)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()


def _record(status="applied", company="Acme", created_at="2024-06-10T12:00:00Z", **extra):
    record = {"status": status, "company": company, "created_at": created_at}
    record.update(extra)
    return record


class TestAnalyticsTotals:
    """Totals, success rate and averages."""

    @pytest.mark.parametrize("size", [0, 1, 7, 23])
    def test_total_matches_input_length(self, size):
        records = [_record(company=f"Company {i % 4}") for i in range(size)]
        assert compute_analytics(records, now=NOW).total == size

    def test_empty_input_yields_zero_rates(self):
        summary = compute_analytics([], now=NOW)

        assert summary.total == 0
        assert summary.success_rate == 0
        assert summary.average_applications_per_month == 0
        assert summary.top_companies == []
        assert summary.recent_applications == []
        assert len(summary.monthly_trends) == 6
        assert all(trend.count == 0 for trend in summary.monthly_trends)

    def test_three_application_scenario(self):
        records = [
            _record("offer", "Acme", "2024-06-01T10:00:00Z"),
            _record("rejected", "Acme", "2024-06-02T10:00:00Z"),
            _record("applied", "Globex", "2024-06-03T10:00:00Z"),
        ]
        summary = compute_analytics(records, now=NOW)

        assert summary.total == 3
        assert summary.success_rate == pytest.approx(33.333, rel=1e-3)
        assert [(c.company, c.count) for c in summary.top_companies] == [("Acme", 2), ("Globex", 1)]
        counts = {bucket.status: bucket.count for bucket in summary.status_distribution}
        assert counts == {"applied": 1, "assessment": 0, "interview": 0, "offer": 1, "rejected": 1}

    def test_average_divides_by_six_months(self):
        records = [_record() for _ in range(12)]
        assert compute_analytics(records, now=NOW).average_applications_per_month == pytest.approx(2.0)


class TestStatusDistribution:
    """The five status buckets."""

    def test_buckets_are_fixed_and_ordered(self):
        summary = compute_analytics([_record("interview")], now=NOW)

        assert [bucket.status for bucket in summary.status_distribution] == [
            "applied", "assessment", "interview", "offer", "rejected"
        ]
        interview = summary.status_distribution[2]
        assert interview.count == 1
        assert interview.color == "#FF9800"
        assert interview.icon == "event"

    def test_unknown_statuses_count_toward_total_only(self, caplog):
        records = [_record("applied"), _record("ghosted"), _record(None), _record("offer")]

        with caplog.at_level(logging.WARNING, logger=analytics_service.logger.name):
            summary = compute_analytics(records, now=NOW)

        assert summary.total == 4
        assert sum(bucket.count for bucket in summary.status_distribution) == 2
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "ghosted" in warnings[0].getMessage()

    def test_status_style_fallbacks(self):
        assert analytics_service.get_status_color("offer") == "#4CAF50"
        assert analytics_service.get_status_icon("offer") == "check-circle"
        assert analytics_service.get_status_color("unknown") == "#666"
        assert analytics_service.get_status_icon("unknown") == "help"


class TestMonthlyTrends:
    """The trailing six-month window."""

    def test_always_six_months_oldest_first(self):
        summary = compute_analytics([_record(created_at="2019-01-01T12:00:00Z")], now=NOW)

        assert [trend.month for trend in summary.monthly_trends] == [
            "2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"
        ]
        # records outside the window still count toward the total
        assert sum(trend.count for trend in summary.monthly_trends) == 0
        assert summary.total == 1

    def test_window_crosses_year_boundary(self):
        assert trailing_months(datetime(2024, 2, 10), 6) == [
            "2023-09", "2023-10", "2023-11", "2023-12", "2024-01", "2024-02"
        ]

    def test_counts_per_month(self):
        records = [
            _record(created_at="2024-06-10T12:00:00Z"),
            _record(created_at="2024-06-11T12:00:00Z"),
            _record(created_at="2024-04-15T12:00:00Z"),
        ]
        trends = {t.month: t.count for t in compute_analytics(records, now=NOW).monthly_trends}

        assert trends["2024-06"] == 2
        assert trends["2024-05"] == 0
        assert trends["2024-04"] == 1

    def test_malformed_timestamps_are_skipped(self):
        records = [_record(created_at="not a date"), _record(created_at=None), _record()]
        summary = compute_analytics(records, now=NOW)

        assert summary.total == 3
        assert sum(trend.count for trend in summary.monthly_trends) == 1


class TestTopCompaniesAndRecent:
    """Top companies ranking and the recent applications list."""

    def test_top_companies_limited_and_sorted(self):
        records = []
        for index, company in enumerate(["A", "B", "C", "D", "E", "F", "G"]):
            records.extend(_record(company=company) for _ in range(index + 1))
        top = compute_analytics(records, now=NOW).top_companies

        assert len(top) == 5
        assert [c.company for c in top] == ["G", "F", "E", "D", "C"]
        assert [c.count for c in top] == sorted((c.count for c in top), reverse=True)

    def test_tied_companies_keep_first_seen_order(self):
        records = [_record(company="Initech"), _record(company="Hooli"), _record(company="Umbrella")]
        top = compute_analytics(records, now=NOW).top_companies
        assert [c.company for c in top] == ["Initech", "Hooli", "Umbrella"]

    def test_recent_applications_newest_first(self):
        base = datetime(2024, 6, 1, 9, 0, 0)
        records = [
            _record(company=f"Company {i}", created_at=(base + timedelta(days=i)).isoformat())
            for i in [3, 0, 6, 1, 5, 2, 4]
        ]
        recent = compute_analytics(records, now=NOW).recent_applications

        assert len(recent) == 5
        assert [r["company"] for r in recent] == [
            "Company 6", "Company 5", "Company 4", "Company 3", "Company 2"
        ]

    def test_recent_applications_shorter_than_limit(self):
        records = [_record(), _record(created_at=None)]
        recent = compute_analytics(records, now=NOW).recent_applications

        assert len(recent) == 2
        # records without a timestamp sort last
        assert recent[-1]["created_at"] is None

    def test_works_on_orm_like_objects(self, test_db_session, test_user, make_application):
        make_application(test_user, company="Acme", status="offer", created_at=datetime(2024, 6, 1, 12))
        make_application(test_user, company="Globex", status="applied", created_at=datetime(2024, 5, 1, 12))
        rows = get_applications_for_user(test_db_session, user_id=test_user.id)
        summary = compute_analytics(rows, now=NOW)

        assert summary.total == 2
        assert summary.success_rate == pytest.approx(50.0)
        assert summary.recent_applications[0].company == "Acme"

    def test_unlimited_query_returns_every_row(self, test_db_session, test_user, make_application):
        for _ in range(105):
            make_application(test_user)

        assert len(get_applications_for_user(test_db_session, user_id=test_user.id)) == 100
        assert len(get_applications_for_user(test_db_session, user_id=test_user.id, limit=None)) == 105


class TestPurity:
    """compute_analytics neither mutates nor depends on hidden state."""

    def test_idempotent_and_input_untouched(self):
        records = [
            _record("offer", "Acme", "2024-03-01T12:00:00Z"),
            _record("applied", "Globex", "2024-06-01T12:00:00Z"),
            _record("interview", "Acme", "2024-05-01T12:00:00Z"),
        ]
        snapshot = [dict(r) for r in records]

        first = compute_analytics(records, now=NOW)
        second = compute_analytics(records, now=NOW)

        assert first.model_dump() == second.model_dump()
        assert records == snapshot

    def test_accepts_generators(self):
        summary = compute_analytics((_record() for _ in range(3)), now=NOW)
        assert summary.total == 3


class TestLocalCalendarEdges:
    """Timestamps that cannot be shifted into the local calendar."""

    @pytest.mark.parametrize("zone, created_at", [
        ("EST+05", "0001-01-01T00:00:00"),
        ("JST-09", "9999-12-31T23:59:59"),
    ])
    def test_out_of_range_created_at_is_skipped(self, local_timezone, zone, created_at):
        local_timezone(zone)
        records = [_record(created_at=created_at), _record(company="Globex")]

        summary = compute_analytics(records, now=NOW)

        assert summary.total == 2
        assert sum(trend.count for trend in summary.monthly_trends) == 1
        assert [r["company"] for r in summary.recent_applications] == ["Globex", "Acme"]
