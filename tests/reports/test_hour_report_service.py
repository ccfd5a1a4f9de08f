from __future__ import annotations

from datetime import datetime

import pytest

from student_portal.hours.model import HourRow
from student_portal.reports.calculator.base import HourCalculator
from student_portal.reports.service import HourReportService


def _add(hours_repo, user_id, start, end, username=None):
    hours_repo.rows.append(
        HourRow(
            id=len(hours_repo.rows) + 1,
            user_id=user_id,
            activity="Office hours",
            comments="notes",
            start_time=start,
            end_time=end,
            created_at=datetime(2025, 1, 20),
            username=username,
        )
    )


@pytest.fixture
def seeded(hours_repo):
    _add(hours_repo, "u1", datetime(2025, 1, 3, 15, 0), datetime(2025, 1, 3, 19, 0), "sen.one")
    _add(hours_repo, "u1", datetime(2025, 1, 10, 15, 0), datetime(2025, 1, 10, 17, 30), "sen.one")
    _add(hours_repo, "u2", datetime(2025, 1, 4, 15, 0), datetime(2025, 1, 4, 16, 0))
    # 23:30 on Jan 15 in Chicago, last evening of the period
    _add(hours_repo, "u2", datetime(2025, 1, 16, 5, 30), datetime(2025, 1, 16, 6, 30))
    # 01:00 on Jan 16 in Chicago, first night of the next period
    _add(hours_repo, "u1", datetime(2025, 1, 16, 7, 0), datetime(2025, 1, 16, 8, 0), "sen.one")
    return hours_repo


@pytest.fixture
def service(seeded):
    return HourReportService(seeded, tz="America/Chicago", target_hours=6)


def test_build_groups_by_period_then_user(service):
    report = service.build().to_dict()

    assert report["sortedPeriodKeys"] == ["1436", "1435"]
    assert report["TARGET_HOURS"] == 6.0
    assert report["labels"]["1435"] == "Jan 2, 2025 - Jan 15, 2025"

    first = report["periods"]["1435"]
    assert first["u1"]["total"] == 6.5
    assert first["u1"]["name"] == "sen.one"
    assert first["u1"]["met_target"] is True
    assert first["u2"]["total"] == 2.0
    assert first["u2"]["name"] == "u2"
    assert first["u2"]["met_target"] is False
    assert report["periods"]["1436"]["u1"]["total"] == 1.0


def test_entries_carry_utc_instants(service):
    entry = service.build().periods["1435"]["u1"]["entries"][0]
    assert entry["start"] == "2025-01-03T15:00:00.000Z"
    assert entry["end"] == "2025-01-03T19:00:00.000Z"
    assert entry["hours"] == 4.0
    assert entry["notes"] == "notes"


def test_build_for_one_period(service):
    report = service.build(period=1436)
    assert report.sorted_period_keys == ["1436"]
    assert list(report.periods["1436"]) == ["u1"]


def test_utc_bounds_are_local_midnights(service):
    assert service.utc_bounds(1435) == (datetime(2025, 1, 2, 6, 0), datetime(2025, 1, 16, 6, 0))


def test_csv_rows_sorted_by_total(service):
    assert service.csv_rows(period=1435) == [
        {
            "period": "Jan 2, 2025 - Jan 15, 2025",
            "user_id": "u1",
            "name": "sen.one",
            "total_hours": "6.50",
            "target_hours": "6",
            "met_target": "yes",
        },
        {
            "period": "Jan 2, 2025 - Jan 15, 2025",
            "user_id": "u2",
            "name": "u2",
            "total_hours": "2.00",
            "target_hours": "6",
            "met_target": "no",
        },
    ]


def test_period_summary(service):
    assert service.period_summary(1435) == {
        "period": 1435,
        "label": "Jan 2, 2025 - Jan 15, 2025",
        "users": 2,
        "metTarget": 1,
        "targetHours": 6.0,
    }
    assert service.period_summary(1500)["users"] == 0


def test_empty_report(hours_repo):
    report = HourReportService(hours_repo, tz="America/Chicago", target_hours=6).build()
    assert report.to_dict() == {"periods": {}, "sortedPeriodKeys": [], "TARGET_HOURS": 6.0, "labels": {}}


class CappedCalculator(HourCalculator):
    def credited_minutes(self, row: HourRow) -> int:
        return min(int((row.end_time - row.start_time).total_seconds() // 60), 60)


def test_calculator_strategy_is_pluggable(seeded):
    service = HourReportService(seeded, tz="America/Chicago", target_hours=2, calculator=CappedCalculator())

    first = service.build(period=1435).periods["1435"]
    assert first["u1"]["total"] == 2.0
    assert first["u1"]["met_target"] is True
