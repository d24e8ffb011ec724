"""Shared test fixtures for session-journal."""

from pathlib import Path

import pytest

from helpers import assistant, compact_boundary, to_jsonl, tool_result, tool_use, user

from session_journal.services.config_manager import ConfigManager
from session_journal.types.sessions import SessionEntry


@pytest.fixture
def write_transcript(tmp_path):
    """Factory writing records as a JSONL transcript under tmp_path."""
    def _write(records, name="session.jsonl") -> Path:
        path = tmp_path / "transcripts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(to_jsonl(records))
        return path
    return _write


@pytest.fixture
def simple_records():
    """Two user turns, two assistant turns, no tools."""
    return [
        user("Add a login page to the app", second=0),
        assistant("Sure. I will start by looking at the routes.", second=5,
                  usage={"input_tokens": 100, "output_tokens": 50,
                         "cache_read_input_tokens": 1000, "cache_creation_input_tokens": 200}),
        user("Use the existing form component", second=10),
        assistant("Done, the login page now uses the shared form component.", second=20,
                  usage={"input_tokens": 80, "output_tokens": 40}),
    ]


@pytest.fixture
def tools_records():
    """A feature session: two files created, one edited, tests pass, one commit."""
    return [
        user("Implement the auth handler", second=0),
        assistant([
            {"type": "text", "text": "Creating files."},
            tool_use("t1", "Write", file_path="/home/wiz/app/auth/handler.py", content="x"),
        ], second=1),
        tool_result("t1", "File created", second=2),
        assistant([tool_use("t2", "Write", file_path="/home/wiz/app/auth/tokens.py", content="y")], second=3),
        tool_result("t2", "File created", second=4),
        assistant([tool_use("t3", "Edit", file_path="/home/wiz/app/app.py",
                            old_string="a", new_string="b")], second=5),
        tool_result("t3", "Edited", second=6),
        assistant([tool_use("t4", "Bash", command="pytest tests/", description="run tests")], second=7),
        tool_result("t4", "5 passed in 0.12s", second=8),
        assistant([tool_use("t5", "Bash", command='git commit -m "feat(auth): add auth handler"')], second=9),
        tool_result("t5", "[feature/auth abc1234] feat(auth): add auth handler\n 3 files changed", second=10),
        user("Looks good, thanks for the help with that", second=11),
        assistant("Glad to help.", second=12),
    ]


@pytest.fixture
def compaction_records():
    """Two segments split by a compaction boundary."""
    return [
        user("Explore the parser module", second=0),
        assistant([tool_use("r1", "Read", file_path="/home/wiz/app/parser.py")], second=1),
        tool_result("r1", "contents", second=2),
        compact_boundary(second=3),
        user("Now fix the tokenizer bug", second=4),
        assistant([tool_use("e1", "Edit", file_path="/home/wiz/app/tokenizer.py")], second=5),
        tool_result("e1", "ok", second=6),
    ]


@pytest.fixture
def config(tmp_path):
    """ConfigManager rooted in a temporary vault."""
    return ConfigManager({
        "vault/path": str(tmp_path / "vault"),
        "domains/work": str(tmp_path / "work"),
        "domains/personal": str(tmp_path / "personal"),
        "domains/opensource": str(tmp_path / "oss"),
    })


@pytest.fixture
def make_entry():
    """Factory for SessionEntry with sensible defaults."""
    def _make(session_id, **fields):
        fields.setdefault("project", "myapp")
        fields.setdefault("date", "2026-02-13")
        fields.setdefault("iteration", 1)
        fields.setdefault("note_path", f"Sessions/myapp/{session_id}.md")
        return SessionEntry(session_id=session_id, **fields)
    return _make
