"""Tests for session_journal.services.trend_analyzer."""

from datetime import date, timedelta

import pytest

from session_journal.services.trend_analyzer import (
    build_metric,
    compute_trends,
    metric_direction,
)
from session_journal.types.trends import TrendPoint

FRICTION = [50, 48, 52, 49, 20, 22, 18, 21]
FIRST_MONDAY = date(2026, 1, 5)


@pytest.fixture
def weekly_entries(make_entry):
    """One session per week for eight weeks, friction dropping in week five."""
    entries = []
    for i, value in enumerate(FRICTION):
        day = FIRST_MONDAY + timedelta(weeks=i, days=2)
        entries.append(make_entry(
            f"s{i}",
            date=day.isoformat(),
            friction_score=value,
            duration_minutes=30,
            tokens_in=9000,
            tokens_out=1000,
            files_changed=["a.py", "b.py"],
        ))
    return entries


# ---------------------------------------------------------------------------
# 1. Direction
# ---------------------------------------------------------------------------

class TestMetricDirection:
    def test_improving(self):
        direction, delta = metric_direction([float(v) for v in FRICTION])
        assert direction == "improving"
        assert delta == pytest.approx(-59.3, abs=0.1)

    def test_worsening(self):
        direction, _ = metric_direction([float(v) for v in reversed(FRICTION)])
        assert direction == "worsening"

    def test_higher_is_better(self):
        direction, _ = metric_direction([float(v) for v in FRICTION], lower_is_better=False)
        assert direction == "worsening"

    def test_small_change_is_stable(self):
        assert metric_direction([10, 10, 10, 10, 10.5, 10.5, 10.5, 10.5])[0] == "stable"

    def test_too_few_points(self):
        assert metric_direction([1.0] * 7) == ("stable", 0.0)

    def test_zero_baseline(self):
        assert metric_direction([0, 0, 0, 0, 5, 5, 5, 5]) == ("stable", 0.0)


# ---------------------------------------------------------------------------
# 2. Rolling average and anomalies
# ---------------------------------------------------------------------------

def _points(values):
    return [TrendPoint(week_label=f"w{i}", value=float(v)) for i, v in enumerate(values)]


def test_rolling_average_and_anomaly():
    metric = build_metric("friction", _points(FRICTION))
    oldest_first = list(reversed(metric.points))

    assert oldest_first[0].rolling_avg == 0.0
    assert oldest_first[2].rolling_avg == 0.0
    assert oldest_first[3].rolling_avg == pytest.approx(49.75)
    assert oldest_first[3].anomaly is False
    assert oldest_first[4].rolling_avg == pytest.approx(42.25)
    assert oldest_first[4].anomaly is True


def test_constant_values_never_anomalous():
    metric = build_metric("x", _points([5] * 6))
    assert not any(p.anomaly for p in metric.points)


def test_display_window_trims_recent_first():
    metric = build_metric("friction", _points(FRICTION), display_weeks=3)
    assert [p.week_label for p in metric.points] == ["w7", "w6", "w5"]
    # statistics still cover the whole history
    assert metric.overall_avg == pytest.approx(sum(FRICTION) / 8)
    assert metric.direction == "improving"


def test_empty_metric():
    metric = build_metric("x", [])
    assert metric.points == []
    assert metric.direction == "stable"


# ---------------------------------------------------------------------------
# 3. Report
# ---------------------------------------------------------------------------

def test_compute_trends(weekly_entries):
    report = compute_trends(weekly_entries)

    assert report.total_sessions == 8
    assert report.total_weeks == 8
    friction = report.metric("friction")
    assert friction.direction == "improving"
    assert friction.points[0].value == 21
    assert friction.points[-1].week_label == "Jan 05"
    assert report.metric("tokens/file").points[0].value == pytest.approx(5000)
    assert report.metric("duration").direction == "stable"
    assert report.metric("corrections").direction == "stable"


def test_same_week_sessions_averaged(make_entry):
    entries = [
        make_entry("a", date="2026-02-09", friction_score=10),
        make_entry("b", date="2026-02-13", friction_score=30),
        make_entry("c", date="2026-02-15", friction_score=0),  # Sunday, same ISO week
    ]
    report = compute_trends(entries)
    assert report.total_weeks == 1
    assert report.metric("friction").points[0].value == 20
    # the unscored session still counts toward corrections
    assert report.metric("corrections").points[0].value == 0


def test_project_filter_and_bad_dates(make_entry):
    entries = [
        make_entry("a", date="2026-02-09", friction_score=10),
        make_entry("b", project="other", date="2026-02-09", friction_score=90),
        make_entry("c", date="garbage", friction_score=50),
    ]
    report = compute_trends(entries, project="myapp")
    assert report.project == "myapp"
    assert report.total_sessions == 1
    assert report.metric("friction").points[0].value == 10


def test_no_sessions():
    report = compute_trends([])
    assert report.total_sessions == 0
    assert report.metrics == []


def test_non_positive_display_weeks_uses_default(weekly_entries):
    assert compute_trends(weekly_entries, display_weeks=0).display_weeks == 12
