"""Weekly trend types computed from the session index at report time."""

from dataclasses import dataclass, field
from datetime import date


@dataclass
class WeekBucket:
    year: int
    week: int
    start: date  # Monday of the ISO week
    friction_scores: list[float] = field(default_factory=list)
    tokens_per_file: list[float] = field(default_factory=list)
    corrections: list[float] = field(default_factory=list)
    durations: list[float] = field(default_factory=list)
    sessions: int = 0


@dataclass
class TrendPoint:
    week_label: str  # "Jan 06"
    value: float
    rolling_avg: float = 0.0  # 0 until four weeks of data exist
    anomaly: bool = False


@dataclass
class MetricTrend:
    name: str
    points: list[TrendPoint] = field(default_factory=list)  # most recent first
    overall_avg: float = 0.0
    direction: str = "stable"  # "improving", "worsening", "stable"
    delta_pct: float = 0.0


@dataclass
class TrendReport:
    project: str = ""
    total_sessions: int = 0
    total_weeks: int = 0
    display_weeks: int = 12
    metrics: list[MetricTrend] = field(default_factory=list)

    def metric(self, name: str) -> MetricTrend | None:
        for m in self.metrics:
            if m.name == name:
                return m
        return None
