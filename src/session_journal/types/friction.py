"""Friction scoring types."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Correction:
    turn_index: int  # index of the user turn within the dialogue
    text: str
    pattern: str  # "negation", "redirect", "undo", "quality", "repetition", "short-negation"


@dataclass(frozen=True)
class Signals:
    corrections: int = 0
    correction_density: float = 0.0  # corrections / user turns
    tokens_per_file: float = 0.0  # total tokens / files changed
    file_retry_density: float = 0.0  # files with 3+ modifications / files touched
    error_cycle_density: float = 0.0  # unrecovered errors / activities
    recurring_threads: bool = False


@dataclass
class FrictionResult:
    score: int = 0
    signals: Signals = field(default_factory=Signals)
    corrections: list[Correction] = field(default_factory=list)
    summary: list[str] = field(default_factory=list)


@dataclass
class ProjectFriction:
    project: str
    sessions: int = 0
    avg_score: float = 0.0
    max_score: int = 0
    total_corrections: int = 0
    high_friction: int = 0  # sessions scoring >= 40
