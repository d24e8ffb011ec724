"""Aggregate statistics over the session index."""

from typing import Iterable

from session_journal.types.sessions import SessionEntry
from session_journal.types.summary import (
    FileStats,
    IndexSummary,
    ModelStats,
    MonthStats,
    ProjectStats,
    TagStats,
)
from session_journal.utils.date_grouping import month_key

UNKNOWN_MODEL = "unknown"
# A file must appear in this many sessions to count as frequently changed
TOP_FILE_THRESHOLD = 10
TOP_FILE_THRESHOLD_PROJECT = 3
MAX_MONTHS = 6


def compute_summary(entries: Iterable[SessionEntry], project: str = "") -> IndexSummary:
    """Totals, averages and breakdowns, optionally restricted to one project."""
    s = IndexSummary()
    projects: dict[str, ProjectStats] = {}
    models: dict[str, ModelStats] = {}
    tags: dict[str, int] = {}
    files: dict[str, int] = {}
    months: dict[str, MonthStats] = {}

    for e in entries:
        if project and e.project != project:
            continue

        s.total_sessions += 1
        s.total_tokens_in += e.tokens_in
        s.total_tokens_out += e.tokens_out
        s.total_messages += e.messages
        s.total_tool_uses += e.tool_uses
        s.total_duration += e.duration_minutes

        ps = projects.setdefault(e.project, ProjectStats(name=e.project))
        ps.sessions += 1
        ps.tokens_in += e.tokens_in
        ps.duration += e.duration_minutes

        model = e.model or UNKNOWN_MODEL
        ms = models.setdefault(model, ModelStats(name=model))
        ms.sessions += 1
        ms.tokens_in += e.tokens_in
        ms.messages += e.messages

        if e.tag:
            tags[e.tag] = tags.get(e.tag, 0) + 1

        for path in e.files_changed:
            files[path] = files.get(path, 0) + 1

        month = month_key(e.date)
        if month:
            mm = months.setdefault(month, MonthStats(month=month))
            mm.sessions += 1
            mm.tokens_in += e.tokens_in
            mm.tokens_out += e.tokens_out

    s.active_projects = len(projects)

    if s.total_messages:
        s.avg_tokens_in_per_message = s.total_tokens_in / s.total_messages
        s.avg_tokens_out_per_message = s.total_tokens_out / s.total_messages
    if s.total_sessions:
        s.avg_tools_per_session = s.total_tool_uses / s.total_sessions
        s.avg_duration = s.total_duration / s.total_sessions

    for ms in models.values():
        if ms.messages:
            ms.tokens_per_message = ms.tokens_in / ms.messages

    s.projects = sorted(projects.values(), key=lambda p: (-p.sessions, p.name.lower()))
    s.models = sorted(models.values(), key=lambda m: (-m.sessions, m.name.lower()))

    tagged = sum(tags.values())
    s.tags = sorted(
        (TagStats(name=name, count=count, percent=count / tagged * 100) for name, count in tags.items()),
        key=lambda t: (-t.count, t.name.lower()),
    )

    threshold = TOP_FILE_THRESHOLD_PROJECT if project else TOP_FILE_THRESHOLD
    s.top_files = sorted(
        (FileStats(path=path, sessions=n) for path, n in files.items() if n >= threshold),
        key=lambda f: (-f.sessions, f.path),
    )

    s.monthly = sorted(months.values(), key=lambda m: m.month, reverse=True)[:MAX_MONTHS]
    return s
