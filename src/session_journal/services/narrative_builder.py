"""Build a Narrative (title, summary, tag, threads, decisions) from a transcript.

The pipeline per segment is: classify tool calls, collapse exploration runs,
then back-fill recovery flags. Everything after that reads activities only.
"""

import logging
import re
from typing import Optional, Sequence

from session_journal.services.activity_classifier import (
    aggregate_exploration,
    detect_recoveries,
    extract_activities,
    extract_commits,
)
from session_journal.services.segmenter import segment_entries
from session_journal.services.transcript_parser import first_user_message
from session_journal.services.work_renderer import render_work_performed
from session_journal.types.messages import Entry, Transcript
from session_journal.types.narrative import (
    Activity,
    ActivityKind,
    Commit,
    Narrative,
    Segment,
)
from session_journal.utils.content_sanitizer import extract_user_text
from session_journal.utils.message_classifier import is_noise_message
from session_journal.utils.text import first_line, truncate

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Session"
PLACEHOLDER_SUMMARY = "Claude Code session."

TITLE_MAX_CHARS = 80
REQUEST_MAX_CHARS = 120
THREAD_MAX_CHARS = 120
MAX_THREADS = 5
MAX_DECISIONS = 5

# "feat: ...", "fix(parser): ...", "refactor!: ..."
_CONVENTIONAL_PREFIX_RE = re.compile(r'^(\w+)(\(.*?\))?!?:\s*')


def build_narrative(transcript: Transcript, cwd: str = "") -> Optional[Narrative]:
    """Derive the narrative of one session; None when the transcript is empty."""
    if not transcript.entries:
        return None

    segments = []
    for i, raw in enumerate(segment_entries(transcript.entries)):
        activities = aggregate_exploration(extract_activities(raw, cwd))
        detect_recoveries(activities)

        timestamps = [e.timestamp for e in raw if e.timestamp is not None]
        segments.append(Segment(
            index=i,
            activities=activities,
            user_request=first_user_request(raw),
            start_time=min(timestamps) if timestamps else None,
            end_time=max(timestamps) if timestamps else None,
        ))

    commits = extract_commits(transcript.entries)
    title = infer_title(segments, transcript)

    narrative = Narrative(
        segments=segments,
        commits=commits,
        title=title,
        summary=infer_summary(segments, commits, title),
        tag=infer_tag(segments),
        decisions=extract_decisions(segments),
        open_threads=infer_open_threads(segments),
        work_performed=render_work_performed(segments),
    )
    logger.debug(
        "Narrative: %d segments, %d activities, %d commits",
        len(segments), len(narrative.activities()), len(commits),
    )
    return narrative


def first_user_request(entries: Sequence[Entry]) -> str:
    """First line of the first meaningful message the user typed in a segment."""
    for e in entries:
        if e.is_meta or e.message is None or e.message.role != "user":
            continue
        if e.message.is_tool_result_wrapper:
            continue
        text = extract_user_text(e.message)
        if not text or is_noise_message(text):
            continue
        return truncate(first_line(text), REQUEST_MAX_CHARS)
    return ""


# --- Title ---

def infer_title(segments: Sequence[Segment], transcript: Transcript) -> str:
    """First segment request, else the first usable user message, else "Session"."""
    for seg in segments:
        if seg.user_request:
            return seg.user_request

    first = first_line(first_user_message(transcript))
    if first:
        first = truncate(first, TITLE_MAX_CHARS)
        if not is_noise_message(first):
            return first

    return DEFAULT_TITLE


# --- Summary ---

def infer_summary(segments: Sequence[Segment], commits: Sequence[Commit], title: str = "") -> str:
    """Compose "<prefix>: <subject> (<outcomes>)", dropping whichever part is empty."""
    activities = _flatten(segments)
    prefix = infer_intent_prefix(activities, commits)
    subject = infer_subject(commits, title)
    outcomes = format_outcomes(activities)

    if not subject and not outcomes:
        return PLACEHOLDER_SUMMARY

    body = subject
    if outcomes:
        body = f"{subject} ({outcomes})" if subject else outcomes

    if prefix:
        return f"{prefix}: {body}"
    return body


def infer_intent_prefix(activities: Sequence[Activity], commits: Sequence[Commit] = ()) -> str:
    """Conventional-commit type of the first commit, else a guess from activity mix."""
    if commits:
        prefix = extract_conventional_prefix(commits[0].message)
        if prefix:
            return prefix

    counts = _KindCounts(activities)
    if counts.plan_modes and counts.writes <= 2:
        return "plan"
    if counts.writes and counts.tests and counts.unrecovered:
        return "fix"
    if counts.writes and counts.tests:
        return "feat"
    if counts.explores and not counts.writes and counts.total == counts.explores:
        return "explore"
    return ""


def infer_subject(commits: Sequence[Commit], title: str = "") -> str:
    if commits and commits[0].message:
        subject = strip_conventional_prefix(first_line(commits[0].message))
        if subject:
            return subject
    if title == DEFAULT_TITLE:
        return ""
    return title


def extract_conventional_prefix(message: str) -> str:
    m = _CONVENTIONAL_PREFIX_RE.match(message.strip())
    if m is None:
        return ""
    return m.group(1).lower()


def strip_conventional_prefix(message: str) -> str:
    return _CONVENTIONAL_PREFIX_RE.sub("", message.strip(), count=1).strip()


def format_outcomes(activities: Sequence[Activity]) -> str:
    """Comma-joined clause of file, test, git and recovery outcomes."""
    created = modified = test_runs = test_fails = commits = pushes = recoveries = 0
    for a in activities:
        if a.kind == ActivityKind.FILE_CREATE:
            created += 1
        elif a.kind == ActivityKind.FILE_MODIFY:
            modified += 1
        elif a.kind == ActivityKind.TEST_RUN:
            test_runs += 1
            if a.is_error or a.description.endswith("(failed)"):
                test_fails += 1
        elif a.kind == ActivityKind.GIT_COMMIT:
            commits += 1
        elif a.kind == ActivityKind.GIT_PUSH:
            pushes += 1
        if a.recovered:
            recoveries += 1

    parts = []
    if created and modified:
        parts.append(f"{created}+{modified} files")
    elif created or modified:
        parts.append(f"{created + modified} files")

    if test_runs:
        if test_fails == 0:
            parts.append("tests pass")
        elif test_fails == test_runs:
            parts.append("tests fail")
        else:
            parts.append("mixed tests")

    if commits and pushes:
        parts.append("committed and pushed")
    elif commits:
        parts.append("committed")

    if recoveries:
        parts.append(f"resolved {recoveries} errors")

    return ", ".join(parts)


# --- Tag, threads, decisions ---

def infer_tag(segments: Sequence[Segment]) -> str:
    """Single-label activity classification, first matching rule wins."""
    counts = _KindCounts(_flatten(segments))
    if counts.total == 0:
        return ""
    if counts.plan_modes and counts.writes <= 2:
        return "planning"
    if counts.writes and counts.tests:
        return "implementation"
    if counts.unrecovered and counts.writes:
        return "debugging"
    if counts.writes:
        return "implementation"
    if counts.explores:
        return "research" if counts.total <= 5 else "exploration"
    return ""


def infer_open_threads(segments: Sequence[Segment]) -> list[str]:
    """Unrecovered errors, detail preferred over description, first five."""
    threads = []
    for a in _flatten(segments):
        if a.is_error and not a.recovered:
            threads.append(truncate(a.detail or a.description, THREAD_MAX_CHARS))
    return threads[:MAX_THREADS]


def extract_decisions(segments: Sequence[Segment]) -> list[str]:
    decisions = []
    for a in _flatten(segments):
        if a.kind == ActivityKind.DECISION and a.detail:
            decisions.append(truncate(a.detail, THREAD_MAX_CHARS))
    return decisions[:MAX_DECISIONS]


def _flatten(segments: Sequence[Segment]) -> list[Activity]:
    return [a for seg in segments for a in seg.activities]


class _KindCounts:
    """Activity-kind tallies shared by the prefix and tag rules."""

    def __init__(self, activities: Sequence[Activity]):
        self.total = len(activities)
        self.writes = self.tests = self.explores = self.plan_modes = self.unrecovered = 0
        for a in activities:
            if a.kind in (ActivityKind.FILE_CREATE, ActivityKind.FILE_MODIFY):
                self.writes += 1
            elif a.kind == ActivityKind.TEST_RUN:
                self.tests += 1
            elif a.kind == ActivityKind.EXPLORE:
                self.explores += 1
            elif a.kind == ActivityKind.PLAN_MODE:
                self.plan_modes += 1
            if a.is_error and not a.recovered:
                self.unrecovered += 1
