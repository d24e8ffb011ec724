"""Persistent session index: one JSON object keyed by session id."""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

import orjson

from session_journal.errors import IndexLoadError, IndexWriteError
from session_journal.types.sessions import SessionEntry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "session-index.json"
# Permissions of the saved index file
INDEX_FILE_MODE = 0o644


class SessionIndex:
    """In-memory view of the index file.

    One process loads, mutates and saves; the save replaces the whole file
    atomically, so the last writer wins.
    """

    def __init__(self, path: str | Path, entries: Optional[dict[str, SessionEntry]] = None):
        self._path = Path(path)
        self._entries: dict[str, SessionEntry] = dict(entries or {})

    @classmethod
    def load(cls, state_dir: str | Path) -> "SessionIndex":
        """Read the index from state_dir; a missing file gives an empty index.

        Malformed records are skipped with a warning. A file that cannot be
        read or is not a JSON object raises IndexLoadError.
        """
        path = Path(state_dir).expanduser() / INDEX_FILENAME
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return cls(path)
        except OSError as e:
            raise IndexLoadError("read index", path, str(e)) from e

        try:
            raw = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise IndexLoadError("parse index", path, str(e)) from e

        if not isinstance(raw, dict):
            raise IndexLoadError("parse index", path, "top level is not an object")

        entries = {}
        for key, record in raw.items():
            if isinstance(record, dict) and not record.get("session_id"):
                record = {**record, "session_id": key}
            try:
                entry = SessionEntry.from_dict(record)
            except (ValueError, TypeError) as e:
                logger.warning("Skipping malformed index record %s in %s: %s", key, path, e)
                continue
            entries[entry.session_id] = entry

        logger.debug("Loaded %d index entries from %s", len(entries), path)
        return cls(path, entries)

    def save(self) -> None:
        """Write the index atomically (temp file in the same directory, then replace)."""
        state_dir = self._path.parent
        try:
            state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IndexWriteError("create state dir", state_dir, str(e)) from e

        payload = {sid: e.to_dict() for sid, e in self._entries.items()}
        data = orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)

        tmp_name = ""
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".session-index-", suffix=".tmp", dir=state_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, INDEX_FILE_MODE)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise IndexWriteError("write index", self._path, str(e)) from e

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: SessionEntry) -> None:
        """Insert or replace the entry for its session id."""
        self._entries[entry.session_id] = entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        return self._entries.get(session_id)

    def has(self, session_id: str) -> bool:
        return session_id in self._entries

    def entries(self) -> list[SessionEntry]:
        return list(self._entries.values())

    def entries_for_project(self, project: str) -> list[SessionEntry]:
        """Entries of one project, oldest date and iteration first."""
        found = [e for e in self._entries.values() if e.project == project]
        found.sort(key=lambda e: (e.date, e.iteration))
        return found

    def next_iteration(self, project: str, date: str) -> int:
        """One more than the highest iteration used for (project, date)."""
        highest = 0
        for e in self._entries.values():
            if e.project == project and e.date == date and e.iteration > highest:
                highest = e.iteration
        return highest + 1

    def previous_session(self, project: str, before: datetime) -> Optional[SessionEntry]:
        """Latest entry of the project created strictly before `before`."""
        best = None
        for e in self._entries.values():
            if e.project != project or e.created_at is None:
                continue
            if e.created_at < before and (best is None or e.created_at > best.created_at):
                best = e
        return best
