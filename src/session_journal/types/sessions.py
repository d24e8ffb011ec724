"""Session index record types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

# Fields written even when empty; every other field is omitted when unset
_ALWAYS_WRITTEN = ("session_id", "note_path", "project", "domain", "date", "iteration", "title")

_STR_FIELDS = (
    "note_path", "project", "domain", "date", "title", "model",
    "summary", "tag", "branch", "transcript_path",
)
_INT_FIELDS = (
    "iteration", "duration_minutes", "tool_uses", "tokens_in", "tokens_out",
    "messages", "corrections", "friction_score",
)
_LIST_FIELDS = ("decisions", "open_threads", "files_changed", "commits")


@dataclass
class SessionEntry:
    session_id: str
    note_path: str = ""  # relative to vault root
    project: str = ""
    domain: str = ""
    date: str = ""  # YYYY-MM-DD
    iteration: int = 0  # per project and day
    title: str = ""
    model: str = ""
    duration_minutes: int = 0
    created_at: Optional[datetime] = None
    summary: str = ""
    decisions: list[str] = field(default_factory=list)
    open_threads: list[str] = field(default_factory=list)
    tag: str = ""
    files_changed: list[str] = field(default_factory=list)
    commits: list[str] = field(default_factory=list)
    branch: str = ""
    transcript_path: str = ""
    checkpoint: bool = False
    tool_counts: dict[str, int] = field(default_factory=dict)
    tool_uses: int = 0
    tokens_in: int = 0
    tokens_out: int = 0
    messages: int = 0
    corrections: int = 0
    friction_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise, omitting unset optional fields."""
        data: dict[str, Any] = {}
        for name in _ALWAYS_WRITTEN:
            data[name] = getattr(self, name)
        for name in _STR_FIELDS + _INT_FIELDS + _LIST_FIELDS:
            if name in data:
                continue
            value = getattr(self, name)
            if value:
                data[name] = list(value) if isinstance(value, list) else value
        if self.created_at is not None:
            data["created_at"] = self.created_at.isoformat()
        if self.checkpoint:
            data["checkpoint"] = True
        if self.tool_counts:
            data["tool_counts"] = dict(self.tool_counts)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionEntry":
        """Build an entry from a decoded index record.

        Unknown keys are ignored and so are not written back on save.
        Raises ValueError or TypeError when a field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise TypeError("index record is not an object")
        session_id = data.get("session_id", "")
        if not isinstance(session_id, str) or not session_id:
            raise ValueError("index record has no session_id")

        kwargs: dict[str, Any] = {"session_id": session_id}
        for name in _STR_FIELDS:
            value = data.get(name, "")
            if not isinstance(value, str):
                raise TypeError(f"{name} must be a string")
            kwargs[name] = value
        for name in _INT_FIELDS:
            value = data.get(name, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer")
            kwargs[name] = value
        for name in _LIST_FIELDS:
            value = data.get(name) or []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise TypeError(f"{name} must be a list of strings")
            kwargs[name] = list(value)

        counts = data.get("tool_counts") or {}
        if not isinstance(counts, dict):
            raise TypeError("tool_counts must be an object")
        kwargs["tool_counts"] = {str(k): int(v) for k, v in counts.items()}
        kwargs["checkpoint"] = bool(data.get("checkpoint", False))
        kwargs["created_at"] = parse_created_at(data.get("created_at"))
        return cls(**kwargs)


@dataclass
class RelatedSession:
    entry: SessionEntry
    score: int


def parse_created_at(value: Any) -> Optional[datetime]:
    """Parse a stored created_at value; naive times are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
