"""Friction scoring: five difficulty signals combined into a 0-100 score.

Each ratio signal is divided by its threshold and clamped to [0, 1] before
weighting, so a signal past its threshold saturates at its weight instead of
dominating the total.

    Signal               Threshold   Weight
    correction density   0.30        30
    tokens per file      50,000      25
    file retry density   0.50        20
    error cycle density  0.20        15
    recurring threads    (bool)      10
"""

import logging
import math
from typing import Iterable, Optional, Sequence

from session_journal.types.dialogue import Dialogue
from session_journal.types.friction import (
    Correction,
    FrictionResult,
    ProjectFriction,
    Signals,
)
from session_journal.types.messages import Stats
from session_journal.types.narrative import WRITE_KINDS, Narrative
from session_journal.types.sessions import SessionEntry
from session_journal.utils.correction_patterns import (
    LONG_ASSISTANT_MIN_CHARS,
    SHORT_NEGATION,
    is_short_negation,
    match_correction,
)
from session_journal.utils.text import significant_words, truncate

logger = logging.getLogger(__name__)

WEIGHT_CORRECTION_DENSITY = 30
WEIGHT_TOKEN_EFFICIENCY = 25
WEIGHT_FILE_RETRY_DENSITY = 20
WEIGHT_ERROR_CYCLE_DENSITY = 15
WEIGHT_RECURRING_THREADS = 10

THRESHOLD_CORRECTION_DENSITY = 0.30
THRESHOLD_TOKENS_PER_FILE = 50_000.0
THRESHOLD_FILE_RETRY_DENSITY = 0.50
THRESHOLD_ERROR_CYCLE_DENSITY = 0.20

# A file edited this many times counts as retried
RETRY_EDIT_COUNT = 3
DEFAULT_RECURRING_MIN_OVERLAP = 2
HIGH_FRICTION_SCORE = 40

CORRECTION_TEXT_MAX_CHARS = 120


def score(signals: Signals) -> int:
    """Composite friction score in [0, 100]; higher means more friction."""
    raw = (
        _clamp(signals.correction_density / THRESHOLD_CORRECTION_DENSITY) * WEIGHT_CORRECTION_DENSITY
        + _clamp(signals.tokens_per_file / THRESHOLD_TOKENS_PER_FILE) * WEIGHT_TOKEN_EFFICIENCY
        + _clamp(signals.file_retry_density / THRESHOLD_FILE_RETRY_DENSITY) * WEIGHT_FILE_RETRY_DENSITY
        + _clamp(signals.error_cycle_density / THRESHOLD_ERROR_CYCLE_DENSITY) * WEIGHT_ERROR_CYCLE_DENSITY
        + (WEIGHT_RECURRING_THREADS if signals.recurring_threads else 0)
    )
    # raw is never negative, so floor(x + 0.5) rounds half away from zero
    return max(0, min(100, int(math.floor(raw + 0.5))))


def detect_corrections(dialogue: Optional[Dialogue]) -> list[Correction]:
    """Scan user turns for corrections; at most one per turn.

    Phrase rules are tried first. Failing those, a short negation directly
    after a long assistant turn also counts.
    """
    if dialogue is None:
        return []

    corrections = []
    turn_index = 0

    for section in dialogue.sections:
        prev_assistant_long = False
        for turn in section.turns:
            if turn.role == "assistant":
                prev_assistant_long = len(turn.text) > LONG_ASSISTANT_MIN_CHARS
                continue

            lower = turn.text.lower()
            pattern = match_correction(lower)
            if not pattern and prev_assistant_long and is_short_negation(lower):
                pattern = SHORT_NEGATION
            if pattern:
                corrections.append(Correction(
                    turn_index=turn_index,
                    text=truncate(turn.text, CORRECTION_TEXT_MAX_CHARS),
                    pattern=pattern,
                ))

            turn_index += 1
            prev_assistant_long = False

    return corrections


def analyze_friction(
    dialogue: Optional[Dialogue],
    narrative: Optional[Narrative],
    stats: Stats,
    prior_threads: Sequence[str] = (),
    recurring_min_overlap: int = DEFAULT_RECURRING_MIN_OVERLAP,
) -> FrictionResult:
    """Full friction analysis. Dialogue, narrative and prior threads are optional."""
    corrections = detect_corrections(dialogue)
    user_turns = max(stats.user_messages, 1)
    files_changed = max(len(stats.files_written), 1)

    file_retry_density = 0.0
    error_cycle_density = 0.0
    recurring = False

    if narrative is not None:
        file_mods: dict[str, int] = {}
        activities = narrative.activities()
        unresolved = 0
        for a in activities:
            if a.kind in WRITE_KINDS:
                file_mods[a.description] = file_mods.get(a.description, 0) + 1
            if a.is_error and not a.recovered:
                unresolved += 1

        if file_mods:
            retried = sum(1 for n in file_mods.values() if n >= RETRY_EDIT_COUNT)
            file_retry_density = retried / len(file_mods)
        if activities:
            error_cycle_density = unresolved / len(activities)

        if prior_threads:
            recurring = has_recurring_threads(
                prior_threads, narrative.open_threads, recurring_min_overlap,
            )

    signals = Signals(
        corrections=len(corrections),
        correction_density=len(corrections) / user_turns,
        tokens_per_file=stats.total_tokens / files_changed,
        file_retry_density=file_retry_density,
        error_cycle_density=error_cycle_density,
        recurring_threads=recurring,
    )

    return FrictionResult(
        score=score(signals),
        signals=signals,
        corrections=corrections,
        summary=build_summary(signals, user_turns),
    )


def has_recurring_threads(
    prior: Sequence[str],
    current: Sequence[str],
    min_overlap: int = DEFAULT_RECURRING_MIN_OVERLAP,
) -> bool:
    """True when a prior open thread shares enough significant words with a current one."""
    current_words = [significant_words(c) for c in current]
    for p in prior:
        p_words = significant_words(p)
        for c_words in current_words:
            if len(p_words & c_words) >= min_overlap:
                return True
    return False


def build_summary(signals: Signals, user_turns: int) -> list[str]:
    """Human-readable lines for the signals that crossed a display threshold."""
    lines = []
    if signals.corrections > 0:
        lines.append(
            f"{signals.corrections} corrections in {user_turns} user turns "
            f"({signals.correction_density * 100:.0f}% density)"
        )
    if signals.tokens_per_file > 20_000:
        lines.append(f"{signals.tokens_per_file / 1000:.0f}K tokens/file changed")
    if signals.file_retry_density > 0.2:
        lines.append(f"{signals.file_retry_density * 100:.0f}% of files required 3+ edits")
    if signals.error_cycle_density > 0.1:
        lines.append(f"{signals.error_cycle_density * 100:.0f}% of activities were unresolved errors")
    if signals.recurring_threads:
        lines.append("Open threads recurring from prior session")
    return lines


def compute_project_friction(
    entries: Iterable[SessionEntry],
    project: str = "",
) -> list[ProjectFriction]:
    """Per-project friction aggregates, highest average first.

    Sessions with neither a score nor corrections were never analysed and
    are left out.
    """
    by_project: dict[str, ProjectFriction] = {}
    totals: dict[str, int] = {}

    for e in entries:
        if project and e.project != project:
            continue
        if e.friction_score == 0 and e.corrections == 0:
            continue

        pf = by_project.get(e.project)
        if pf is None:
            pf = by_project[e.project] = ProjectFriction(project=e.project)
            totals[e.project] = 0

        pf.sessions += 1
        totals[e.project] += e.friction_score
        pf.max_score = max(pf.max_score, e.friction_score)
        pf.total_corrections += e.corrections
        if e.friction_score >= HIGH_FRICTION_SCORE:
            pf.high_friction += 1

    for name, pf in by_project.items():
        pf.avg_score = totals[name] / pf.sessions

    return sorted(by_project.values(), key=lambda pf: (-pf.avg_score, pf.project))


def _clamp(v: float) -> float:
    if v < 0:
        return 0.0
    if v > 1:
        return 1.0
    return v
