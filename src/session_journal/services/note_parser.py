"""Parse rendered session notes back into index fields.

A note is YAML frontmatter between `---` lines followed by a markdown body.
The body sections read here are "## Key Decisions" (plain bullets),
"## Open Threads" (checkboxes) and "## What Changed" / "## Commits"
(bullets whose first item is wrapped in backticks).
"""

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from session_journal.errors import NoteParseError

FRONTMATTER_DELIM = "---"

# Tag every session note carries; the activity tag is the first other one
BASE_SESSION_TAG = "claude-session"


@dataclass
class Note:
    frontmatter: dict[str, Any] = field(default_factory=dict)
    session_id: str = ""
    date: str = ""
    project: str = ""
    domain: str = ""
    branch: str = ""
    model: str = ""
    iteration: int = 0
    title: str = ""
    summary: str = ""
    previous: str = ""
    status: str = ""
    tags: list[str] = field(default_factory=list)
    tag: str = ""
    decisions: list[str] = field(default_factory=list)
    open_threads: list[str] = field(default_factory=list)
    files_changed: list[str] = field(default_factory=list)
    commits: list[str] = field(default_factory=list)

    def int_field(self, key: str) -> int:
        """Integer frontmatter value, 0 when absent or not a number."""
        return _as_int(self.frontmatter.get(key))


def parse_note_file(path: str | Path) -> Note:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise NoteParseError("read note", path, str(e)) from e
    return parse_note(text, source=str(path))


def parse_note(text: str, source: str = "") -> Note:
    """Parse note text. Raises NoteParseError for unreadable frontmatter."""
    frontmatter_text, body_lines = _split_frontmatter(text.splitlines())

    frontmatter: dict[str, Any] = {}
    if frontmatter_text is not None:
        try:
            loaded = yaml.safe_load(frontmatter_text)
        except yaml.YAMLError as e:
            raise NoteParseError("parse frontmatter", source, str(e)) from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise NoteParseError("parse frontmatter", source, "frontmatter is not a mapping")
        frontmatter = {str(k): v for k, v in loaded.items()}

    tags = _as_list(frontmatter.get("tags"))
    note = Note(
        frontmatter=frontmatter,
        session_id=_as_str(frontmatter.get("session_id")),
        date=_as_str(frontmatter.get("date")),
        project=_as_str(frontmatter.get("project")),
        domain=_as_str(frontmatter.get("domain")),
        branch=_as_str(frontmatter.get("branch")),
        model=_as_str(frontmatter.get("model")),
        iteration=_as_int(frontmatter.get("iteration")),
        title=_as_str(frontmatter.get("title")),
        summary=_as_str(frontmatter.get("summary")),
        previous=_as_str(frontmatter.get("previous")),
        status=_as_str(frontmatter.get("status")),
        tags=tags,
        tag=next((t for t in tags if t != BASE_SESSION_TAG), ""),
    )

    note.decisions = _section_items(body_lines, "## Key Decisions", _bullet_item)
    note.open_threads = _section_items(body_lines, "## Open Threads", _checkbox_item)
    note.files_changed = _section_items(body_lines, "## What Changed", _code_item)
    note.commits = _section_items(body_lines, "## Commits", _code_item)
    return note


def _split_frontmatter(lines: list[str]) -> tuple[Optional[str], list[str]]:
    if not lines or lines[0].strip() != FRONTMATTER_DELIM:
        return None, lines
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONTMATTER_DELIM:
            return "\n".join(lines[1:i]), lines[i + 1:]
    # Unterminated frontmatter: everything after the opener is frontmatter
    return "\n".join(lines[1:]), []


def _section_items(
    lines: list[str],
    heading: str,
    parse: Callable[[str], Optional[str]],
) -> list[str]:
    """Items under `heading` until the next "## " heading or a `---` rule."""
    items = []
    in_section = False
    for line in lines:
        trimmed = line.strip()
        if trimmed == heading:
            in_section = True
            continue
        if not in_section:
            continue
        if trimmed.startswith("## ") or trimmed == FRONTMATTER_DELIM:
            break
        item = parse(trimmed)
        if item is not None:
            items.append(item)
    return items


def _bullet_item(trimmed: str) -> Optional[str]:
    if trimmed.startswith("- "):
        return trimmed[2:].strip()
    return None


def _checkbox_item(trimmed: str) -> Optional[str]:
    if trimmed.startswith(("- [ ] ", "- [x] ")):
        return trimmed[6:].strip()
    return None


def _code_item(trimmed: str) -> Optional[str]:
    if not trimmed.startswith("- `"):
        return None
    end = trimmed.find("`", 3)
    if end < 0:
        return None
    return trimmed[3:end]


def _as_str(value: Any) -> str:
    # YAML turns bare dates into date objects
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if value is None:
        return ""
    return str(value).strip()


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [_as_str(v) for v in value if _as_str(v)]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []
