"""Score how related two sessions of the same project are."""

from typing import Sequence

from session_journal.services.session_index import SessionIndex
from session_journal.types.sessions import RelatedSession, SessionEntry
from session_journal.utils.text import significant_words

POINTS_PER_SHARED_FILE = 3
DEFAULT_FILE_SCORE_CAP = 15
POINTS_PER_RESOLVED_THREAD = 10
POINTS_SHARED_BRANCH = 5
POINTS_SHARED_TAG = 2

DEFAULT_MIN_SCORE = 5
DEFAULT_MAX_RESULTS = 3
DEFAULT_THREAD_OVERLAP = 2

# Branches every session shares, so matching them says nothing
TRUNK_BRANCHES = frozenset({"main", "master"})


def related_sessions(
    index: SessionIndex,
    candidate: SessionEntry,
    previous_note_path: str = "",
    *,
    min_score: int = DEFAULT_MIN_SCORE,
    max_results: int = DEFAULT_MAX_RESULTS,
    file_score_cap: int = DEFAULT_FILE_SCORE_CAP,
    thread_overlap: int = DEFAULT_THREAD_OVERLAP,
) -> list[RelatedSession]:
    """Best-scoring other sessions of the candidate's project.

    The candidate itself and the note at previous_note_path are excluded.
    Results are sorted by score then date, newest first on ties.
    """
    results = []
    for entry in index.entries():
        if entry.project != candidate.project:
            continue
        if entry.session_id == candidate.session_id:
            continue
        if previous_note_path and entry.note_path == previous_note_path:
            continue

        score = compute_score(
            candidate, entry,
            file_score_cap=file_score_cap,
            thread_overlap=thread_overlap,
        )
        if score >= min_score:
            results.append(RelatedSession(entry=entry, score=score))

    results.sort(key=lambda r: (r.score, r.entry.date), reverse=True)
    return results[:max_results]


def compute_score(
    candidate: SessionEntry,
    other: SessionEntry,
    *,
    file_score_cap: int = DEFAULT_FILE_SCORE_CAP,
    thread_overlap: int = DEFAULT_THREAD_OVERLAP,
) -> int:
    shared = len(set(candidate.files_changed) & set(other.files_changed))
    score = min(shared * POINTS_PER_SHARED_FILE, file_score_cap)

    # An open thread in one session answered by a decision in the other
    resolved = (
        thread_match_count(candidate.open_threads, other.decisions, thread_overlap)
        + thread_match_count(other.open_threads, candidate.decisions, thread_overlap)
    )
    score += resolved * POINTS_PER_RESOLVED_THREAD

    if _shares_branch(candidate, other):
        score += POINTS_SHARED_BRANCH
    if candidate.tag and candidate.tag == other.tag:
        score += POINTS_SHARED_TAG

    return score


def thread_match_count(
    threads: Sequence[str],
    decisions: Sequence[str],
    min_overlap: int = DEFAULT_THREAD_OVERLAP,
) -> int:
    """Threads whose significant words overlap some decision; each counted once."""
    decision_words = [significant_words(d) for d in decisions]
    matches = 0
    for thread in threads:
        words = significant_words(thread)
        if not words:
            continue
        if any(len(words & dw) >= min_overlap for dw in decision_words):
            matches += 1
    return matches


def describe_relation(a: SessionEntry, b: SessionEntry) -> str:
    """Short reason two sessions are related, e.g. "2 shared files, tag: debugging"."""
    parts = []
    shared = len(set(a.files_changed) & set(b.files_changed))
    if shared:
        parts.append(f"{shared} shared files")
    if _shares_branch(a, b):
        parts.append(f"branch: {a.branch}")
    if a.tag and a.tag == b.tag:
        parts.append(f"tag: {a.tag}")
    return ", ".join(parts) or "related work"


def _shares_branch(a: SessionEntry, b: SessionEntry) -> bool:
    return bool(a.branch) and a.branch == b.branch and a.branch not in TRUNK_BRANCHES
