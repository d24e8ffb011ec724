"""Run the full pipeline over transcripts and record each session in the index."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from session_journal.errors import SessionJournalError
from session_journal.services.config_manager import DEFAULT_DOMAIN, ConfigManager
from session_journal.services.dialogue_extractor import extract_dialogue
from session_journal.services.friction_scorer import analyze_friction
from session_journal.services.git_resolver import resolve_git_branch, resolve_project_name
from session_journal.services.narrative_builder import DEFAULT_TITLE, build_narrative
from session_journal.services.relevance import describe_relation, related_sessions
from session_journal.services.session_index import SessionIndex
from session_journal.services.transcript_parser import parse_transcript_file
from session_journal.types.processes import (
    BatchFailure,
    BatchReport,
    Enrichment,
    ProcessResult,
    RelatedNote,
    SessionInfo,
)
from session_journal.types.sessions import SessionEntry
from session_journal.utils.path_codec import note_rel_path, note_stem, shorten_path

logger = logging.getLogger(__name__)

SKIP_TRIVIAL = "trivial session (< 2 messages)"
SKIP_CHECKPOINT_EMPTY = "checkpoint: no substantive work yet"
SKIP_ALREADY_PROCESSED = "already processed"


def detect_session_info(
    cwd: str,
    branch: str,
    model: str,
    session_id: str,
    config: ConfigManager,
) -> SessionInfo:
    """Project from the git origin remote or directory name; domain from config prefixes.

    A transcript without a recorded branch falls back to the checkout's HEAD.
    """
    return SessionInfo(
        project=resolve_project_name(cwd),
        domain=detect_domain(cwd, config),
        branch=branch or resolve_git_branch(cwd),
        model=model,
        session_id=session_id,
        cwd=cwd,
    )


def detect_domain(cwd: str, config: ConfigManager) -> str:
    if not cwd:
        return DEFAULT_DOMAIN
    cwd = os.path.normpath(cwd)
    for domain, prefix in config.domain_paths().items():
        prefix = os.path.normpath(prefix)
        if cwd == prefix or cwd.startswith(prefix + os.sep):
            return domain
    return DEFAULT_DOMAIN


def process_transcript(
    transcript_path: str | Path,
    config: ConfigManager,
    index: SessionIndex,
    *,
    force: bool = False,
    checkpoint: bool = False,
    enrichment: Optional[Enrichment] = None,
    cwd: str = "",
    session_id: str = "",
    now: Optional[datetime] = None,
) -> ProcessResult:
    """Analyse one transcript and upsert its SessionEntry into `index`.

    The index is modified in memory only; saving is up to the caller.
    Raises TranscriptReadError when the transcript cannot be opened.
    """
    path_str = str(transcript_path)
    transcript = parse_transcript_file(transcript_path)
    stats = transcript.stats

    if stats.user_messages < 2 and stats.assistant_messages < 2:
        return ProcessResult(transcript_path=path_str, skipped=True, reason=SKIP_TRIVIAL)
    if checkpoint and stats.tool_uses == 0 and stats.assistant_messages < 3:
        return ProcessResult(transcript_path=path_str, skipped=True, reason=SKIP_CHECKPOINT_EMPTY)

    cwd = cwd or stats.cwd
    session_id = session_id or stats.session_id
    info = detect_session_info(cwd, stats.git_branch, stats.model, session_id, config)

    existing = index.get(session_id)
    if existing is not None and not existing.checkpoint and not force:
        return ProcessResult(transcript_path=path_str, skipped=True, reason=SKIP_ALREADY_PROCESSED)

    now = now or datetime.now(timezone.utc)
    date = (stats.start_time or now).strftime("%Y-%m-%d")
    # Reprocessing keeps the note's iteration so its file name does not change
    if existing is not None and existing.iteration > 0:
        iteration = existing.iteration
    else:
        iteration = index.next_iteration(info.project, date)

    previous = index.previous_session(info.project, stats.start_time or now)
    if previous is not None and previous.session_id == session_id:
        previous = None

    narrative = build_narrative(transcript, cwd)
    dialogue = extract_dialogue(transcript)

    friction = None
    if narrative is not None or dialogue is not None:
        friction = analyze_friction(
            dialogue, narrative, stats,
            prior_threads=previous.open_threads if previous else (),
            recurring_min_overlap=config.get_int("friction/recurringMinOverlap"),
        )

    title = DEFAULT_TITLE
    summary = tag = ""
    decisions: list[str] = []
    open_threads: list[str] = []
    commits: list[str] = []
    if narrative is not None:
        title = narrative.title or DEFAULT_TITLE
        summary = narrative.summary
        tag = narrative.tag
        decisions = list(narrative.decisions)
        open_threads = list(narrative.open_threads)
        commits = [c.sha for c in narrative.commits]

    if enrichment is not None:
        summary = enrichment.summary or summary
        tag = enrichment.tag or tag
        if enrichment.decisions:
            decisions = list(enrichment.decisions)
        if enrichment.open_threads:
            open_threads = list(enrichment.open_threads)

    entry = SessionEntry(
        session_id=session_id,
        note_path=note_rel_path(info.project, date, iteration),
        project=info.project,
        domain=info.domain,
        date=date,
        iteration=iteration,
        title=title,
        model=info.model,
        duration_minutes=stats.duration_minutes,
        created_at=now,
        summary=summary,
        decisions=decisions,
        open_threads=open_threads,
        tag=tag,
        files_changed=sorted(shorten_path(f, cwd) for f in stats.files_written),
        commits=commits,
        branch=info.branch,
        transcript_path=path_str,
        checkpoint=checkpoint,
        tool_counts=dict(stats.tool_counts),
        tool_uses=stats.tool_uses,
        tokens_in=stats.total_input_tokens,
        tokens_out=stats.output_tokens,
        messages=stats.messages,
        corrections=friction.signals.corrections if friction else 0,
        friction_score=friction.score if friction else 0,
    )

    related = related_sessions(
        index, entry,
        previous_note_path=previous.note_path if previous else "",
        min_score=config.get_int("related/minScore"),
        max_results=config.get_int("related/maxResults"),
        file_score_cap=config.get_int("related/fileScoreCap"),
        thread_overlap=config.get_int("related/threadOverlap"),
    )

    index.add(entry)
    logger.info(
        "Processed %s as %s (%s, iteration %d)",
        session_id, entry.note_path, info.domain, iteration,
    )

    return ProcessResult(
        transcript_path=path_str,
        entry=entry,
        narrative=narrative,
        friction=friction,
        related=[
            RelatedNote(
                name=note_stem(r.entry.note_path),
                reason=describe_relation(entry, r.entry),
                score=r.score,
            )
            for r in related
        ],
        previous_note=note_stem(previous.note_path) if previous else "",
    )


def process_batch(
    transcript_paths: Iterable[str | Path],
    config: ConfigManager,
    *,
    force: bool = False,
) -> BatchReport:
    """Process many transcripts against one index load and one save.

    A failing transcript is recorded in the report and does not stop the rest.
    Raises IndexLoadError when the existing index cannot be read.
    """
    index = SessionIndex.load(config.state_dir)
    report = BatchReport()

    for path in transcript_paths:
        try:
            result = process_transcript(path, config, index, force=force)
        except SessionJournalError as e:
            logger.warning("Failed to process %s: %s", path, e)
            report.failed.append(BatchFailure(transcript_path=str(path), error=str(e)))
            continue
        except Exception as e:
            logger.exception("Unexpected error processing %s", path)
            report.failed.append(BatchFailure(transcript_path=str(path), error=str(e)))
            continue

        if result.skipped:
            logger.debug("Skipped %s: %s", path, result.reason)
            report.skipped.append(result)
        else:
            report.processed.append(result)

    if report.processed:
        try:
            index.save()
            report.saved = True
        except SessionJournalError as e:
            logger.error("Failed to save index: %s", e)
            report.save_error = str(e)

    logger.info(
        "Batch done: %d processed, %d skipped, %d failed",
        len(report.processed), len(report.skipped), len(report.failed),
    )
    return report
