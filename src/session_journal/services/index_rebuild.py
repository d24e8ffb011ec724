"""Rebuild the session index from the notes on disk."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from session_journal.errors import IndexLoadError, NoteParseError
from session_journal.services.note_parser import Note, parse_note_file
from session_journal.services.session_index import INDEX_FILENAME, SessionIndex
from session_journal.types.sessions import SessionEntry

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"
CHECKPOINT_STATUS = "checkpoint"


def rebuild_index(sessions_dir: str | Path, state_dir: str | Path) -> tuple[SessionIndex, int]:
    """Parse every note under sessions_dir into a fresh index.

    Names starting with "_" are generated documents, not sessions, and are
    skipped along with unreadable notes and notes without a session_id.
    Transcript paths and tool counts are not stored in notes, so they are
    carried over from the current index. The new index is not saved.
    """
    sessions_dir = Path(sessions_dir).expanduser()
    state_dir = Path(state_dir).expanduser()

    try:
        old = SessionIndex.load(state_dir)
    except IndexLoadError as e:
        logger.warning("Previous index unreadable, rebuilding without it: %s", e)
        old = SessionIndex(state_dir / INDEX_FILENAME)

    index = SessionIndex(state_dir / INDEX_FILENAME)
    vault_root = sessions_dir.parent
    count = 0

    for path in sorted(sessions_dir.rglob(f"*{NOTE_SUFFIX}")):
        if not path.is_file() or path.name.startswith("_"):
            continue

        try:
            note = parse_note_file(path)
        except NoteParseError as e:
            logger.warning("rebuild: skip %s: %s", path, e)
            continue

        if not note.session_id:
            logger.warning("rebuild: skip %s: no session_id", path)
            continue

        entry = entry_from_note(note, path, vault_root)

        previous = old.get(note.session_id)
        if previous is not None:
            entry.transcript_path = previous.transcript_path
            entry.tool_counts = dict(previous.tool_counts)

        index.add(entry)
        count += 1

    logger.info("Rebuilt index from %d notes in %s", count, sessions_dir)
    return index, count


def entry_from_note(note: Note, path: Path, vault_root: Path) -> SessionEntry:
    """Map a parsed note onto an index record."""
    try:
        note_path = path.relative_to(vault_root).as_posix()
    except ValueError:
        note_path = path.as_posix()

    return SessionEntry(
        session_id=note.session_id,
        note_path=note_path,
        project=note.project or path.parent.name,
        domain=note.domain,
        date=note.date,
        iteration=note.iteration,
        title=note.title or note.summary,
        model=note.model,
        duration_minutes=note.int_field("duration_minutes"),
        created_at=_date_to_datetime(note.date),
        summary=note.summary,
        decisions=note.decisions,
        open_threads=note.open_threads,
        tag=note.tag,
        files_changed=note.files_changed,
        commits=note.commits,
        branch=note.branch,
        checkpoint=note.status == CHECKPOINT_STATUS,
        tool_uses=note.int_field("tool_uses"),
        tokens_in=note.int_field("tokens_in"),
        tokens_out=note.int_field("tokens_out"),
        messages=note.int_field("messages"),
        corrections=note.int_field("corrections"),
        friction_score=note.int_field("friction_score"),
    )


def _date_to_datetime(date: str) -> Optional[datetime]:
    """Midnight UTC of a YYYY-MM-DD date; notes do not record the time."""
    try:
        return datetime.strptime(date, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        return None
