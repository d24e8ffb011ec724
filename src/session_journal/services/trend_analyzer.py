"""Weekly trends and anomalies over the session index.

Sessions are bucketed by ISO week; each metric takes the mean of its bucket.
From the fourth week on, a point carries a trailing 4-week rolling mean and
is flagged when it sits more than 1.5 standard deviations from it. The
direction compares the last four weeks against the four before. Statistics
always use the full history; the display window only trims the output.
"""

import logging
import statistics
from typing import Iterable

from session_journal.types.sessions import SessionEntry
from session_journal.types.trends import MetricTrend, TrendPoint, TrendReport, WeekBucket
from session_journal.utils.date_grouping import (
    iso_week_key,
    iso_week_start,
    parse_session_date,
    week_label,
)

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_WEEKS = 12
ROLLING_WINDOW = 4
ANOMALY_STDDEVS = 1.5
# Direction needs two full windows of history
MIN_POINTS_FOR_DIRECTION = 2 * ROLLING_WINDOW
STABLE_DELTA_PCT = 10.0

STABLE = "stable"
IMPROVING = "improving"
WORSENING = "worsening"

# (metric name, bucket field); all of these are lower-is-better
METRICS = (
    ("friction", "friction_scores"),
    ("tokens/file", "tokens_per_file"),
    ("corrections", "corrections"),
    ("duration", "durations"),
)


def compute_trends(
    entries: Iterable[SessionEntry],
    project: str = "",
    display_weeks: int = DEFAULT_DISPLAY_WEEKS,
) -> TrendReport:
    """Build the weekly trend report, optionally for a single project."""
    if display_weeks <= 0:
        display_weeks = DEFAULT_DISPLAY_WEEKS

    buckets: dict[tuple[int, int], WeekBucket] = {}
    total = 0
    for e in entries:
        if project and e.project != project:
            continue
        day = parse_session_date(e.date)
        if day is None:
            logger.debug("Skipping session %s with unusable date %r", e.session_id, e.date)
            continue
        total += 1

        key = iso_week_key(day)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = WeekBucket(year=key[0], week=key[1], start=iso_week_start(*key))
        add_to_bucket(bucket, e)

    report = TrendReport(project=project, display_weeks=display_weeks)
    if total == 0:
        return report

    ordered = [buckets[k] for k in sorted(buckets)]
    report.total_sessions = total
    report.total_weeks = len(ordered)
    report.metrics = [
        build_metric(name, _points(ordered, field_name), display_weeks)
        for name, field_name in METRICS
    ]
    return report


def add_to_bucket(bucket: WeekBucket, entry: SessionEntry) -> None:
    """Add one session's values; metrics a session cannot speak to are left out."""
    bucket.sessions += 1
    if entry.friction_score > 0:
        bucket.friction_scores.append(float(entry.friction_score))

    files = len(entry.files_changed)
    tokens = entry.tokens_in + entry.tokens_out
    if files > 0 and tokens > 0:
        bucket.tokens_per_file.append(tokens / files)

    bucket.corrections.append(float(entry.corrections))

    if entry.duration_minutes > 0:
        bucket.durations.append(float(entry.duration_minutes))


def build_metric(
    name: str,
    points: list[TrendPoint],
    display_weeks: int = DEFAULT_DISPLAY_WEEKS,
    lower_is_better: bool = True,
) -> MetricTrend:
    """Annotate oldest-first points, then return them most recent first."""
    metric = MetricTrend(name=name)
    if not points:
        return metric

    values = [p.value for p in points]
    for i, point in enumerate(points):
        if i < ROLLING_WINDOW - 1:
            continue
        window = values[i - ROLLING_WINDOW + 1:i + 1]
        mean = statistics.fmean(window)
        sd = statistics.pstdev(window)
        point.rolling_avg = mean
        point.anomaly = sd > 0 and abs(point.value - mean) > ANOMALY_STDDEVS * sd

    metric.overall_avg = statistics.fmean(values)
    metric.direction, metric.delta_pct = metric_direction(values, lower_is_better)
    metric.points = list(reversed(points))[:display_weeks]
    return metric


def metric_direction(values: list[float], lower_is_better: bool = True) -> tuple[str, float]:
    """Direction and percent change of the last four values against the previous four."""
    n = len(values)
    if n < MIN_POINTS_FOR_DIRECTION:
        return STABLE, 0.0

    recent = statistics.fmean(values[n - ROLLING_WINDOW:])
    previous = statistics.fmean(values[n - 2 * ROLLING_WINDOW:n - ROLLING_WINDOW])
    if previous == 0:
        return STABLE, 0.0

    delta = (recent - previous) / previous * 100
    if abs(delta) < STABLE_DELTA_PCT:
        return STABLE, delta

    went_down = delta < 0
    if went_down == lower_is_better:
        return IMPROVING, delta
    return WORSENING, delta


def _points(
    buckets: list[WeekBucket],
    field_name: str,
) -> list[TrendPoint]:
    points = []
    for b in buckets:
        values = getattr(b, field_name)
        if not values:
            continue
        points.append(TrendPoint(week_label=week_label(b.start), value=statistics.fmean(values)))
    return points
