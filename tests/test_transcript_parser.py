"""Tests for session_journal.services.transcript_parser."""

from datetime import datetime, timezone

import pytest

from helpers import assistant, to_jsonl, tool_result, tool_use, user

from session_journal.errors import TranscriptReadError
from session_journal.services import transcript_parser
from session_journal.services.transcript_parser import (
    first_user_message,
    parse_entry,
    parse_transcript_file,
    parse_transcript_lines,
    stream_entries,
)
from session_journal.types.messages import BlockType
from session_journal.utils.tool_inputs import FileEditInput, ShellInput, UnknownToolInput


# ---------------------------------------------------------------------------
# 1. Parse simple transcript
# ---------------------------------------------------------------------------

def test_parse_simple_transcript(write_transcript, simple_records):
    """Four records become four entries with roles and metadata."""
    transcript = parse_transcript_file(write_transcript(simple_records))

    assert [e.role for e in transcript.entries] == ["user", "assistant", "user", "assistant"]
    first = transcript.entries[0]
    assert first.session_id == "sess-1"
    assert first.cwd == "/home/wiz/app"
    assert first.git_branch == "feature/auth"
    assert first.message.content == "Add a login page to the app"
    assert transcript.entries[1].message.model == "claude-sonnet-4"


# ---------------------------------------------------------------------------
# 2. Malformed lines are skipped
# ---------------------------------------------------------------------------

def test_malformed_lines_skipped(tmp_path):
    path = tmp_path / "bad.jsonl"
    path.write_text(
        to_jsonl([user("first")])
        + "{not json at all\n"
        + "\n"
        + "[1, 2, 3]\n"
        + to_jsonl([assistant("second")])
    )
    transcript = parse_transcript_file(path)
    assert len(transcript.entries) == 2


# ---------------------------------------------------------------------------
# 3. Oversized lines are skipped
# ---------------------------------------------------------------------------

def test_oversized_line_skipped(monkeypatch):
    monkeypatch.setattr(transcript_parser, "MAX_LINE_SIZE", 300)
    lines = to_jsonl([user("short"), user("x" * 500), user("also short")]).splitlines()
    transcript = parse_transcript_lines(lines)
    assert [e.message.content for e in transcript.entries] == ["short", "also short"]


# ---------------------------------------------------------------------------
# 4. Noise records dropped at parse time
# ---------------------------------------------------------------------------

def test_progress_and_snapshots_dropped():
    lines = to_jsonl([
        {"type": "progress", "data": {}},
        {"type": "file-history-snapshot", "snapshot": {}},
        user("real"),
    ]).splitlines()
    transcript = parse_transcript_lines(lines)
    assert len(transcript.entries) == 1


# ---------------------------------------------------------------------------
# 5. Timestamps
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value,expected", [
    ("2026-02-13T10:00:05.000Z", datetime(2026, 2, 13, 10, 0, 5, tzinfo=timezone.utc)),
    ("2026-02-13T10:00:05", datetime(2026, 2, 13, 10, 0, 5, tzinfo=timezone.utc)),
    (1770976805000, datetime(2026, 2, 13, 10, 0, 5, tzinfo=timezone.utc)),
    (1770976805, datetime(2026, 2, 13, 10, 0, 5, tzinfo=timezone.utc)),
])
def test_timestamp_formats(value, expected):
    entry = parse_entry({"type": "user", "timestamp": value})
    assert entry.timestamp == expected


@pytest.mark.parametrize("value", [None, "", "yesterday", True, {}])
def test_invalid_timestamp_is_none(value):
    assert parse_entry({"type": "user", "timestamp": value}).timestamp is None


# ---------------------------------------------------------------------------
# 6. Content blocks and tool payloads
# ---------------------------------------------------------------------------

def test_tool_use_payloads():
    entry = parse_entry(assistant([
        {"type": "thinking", "thinking": "hmm"},
        tool_use("t1", "Edit", file_path="/a.py", old_string="x", new_string="y"),
        tool_use("t2", "Bash", command="ls", description="list"),
        tool_use("t3", "FancyNewTool", knob=1),
    ]))
    blocks = entry.message.blocks
    assert blocks[0].type == BlockType.THINKING
    assert blocks[1].tool_input == FileEditInput(file_path="/a.py")
    assert blocks[2].tool_input == ShellInput(command="ls", description="list")
    assert isinstance(blocks[3].tool_input, UnknownToolInput)
    assert blocks[3].tool_input.raw == {"knob": 1}
    assert entry.message.text_content() == ""


def test_tool_result_wrapper():
    entry = parse_entry(tool_result("t1", "done", is_error=True))
    assert entry.message.is_tool_result_wrapper is True
    result = entry.message.tool_results[0]
    assert result.tool_use_id == "t1"
    assert result.output == "done"
    assert result.is_error is True


def test_usage_parsed():
    entry = parse_entry(assistant("hi", usage={"input_tokens": 5, "output_tokens": "bad"}))
    assert entry.message.usage.input_tokens == 5
    assert entry.message.usage.output_tokens == 0


def test_plan_content_parsed():
    entry = parse_entry(user("Implement the following plan:", planContent="# OAuth login\n\nAdd the callback route"))
    assert entry.plan_content == "# OAuth login\n\nAdd the callback route"
    assert parse_entry(user("plain request")).plan_content == ""


# ---------------------------------------------------------------------------
# 7. Read errors
# ---------------------------------------------------------------------------

def test_missing_file_raises(tmp_path):
    with pytest.raises(TranscriptReadError) as exc:
        parse_transcript_file(tmp_path / "nope.jsonl")
    assert exc.value.operation == "open transcript"


def test_stream_is_lazy(write_transcript, simple_records):
    stream = stream_entries(write_transcript(simple_records))
    assert next(stream).role == "user"
    stream.close()


# ---------------------------------------------------------------------------
# 8. Text helpers
# ---------------------------------------------------------------------------

def test_first_user_message_skips_confirmations():
    transcript = parse_transcript_lines(to_jsonl([
        user("<command-name>/resume</command-name>"),
        user("ok"),
        user("Refactor the parser"),
    ]).splitlines())
    assert first_user_message(transcript) == "Refactor the parser"


def test_first_user_message_falls_back_to_first():
    transcript = parse_transcript_lines(to_jsonl([user("yes"), user("thanks")]).splitlines())
    assert first_user_message(transcript) == "yes"
