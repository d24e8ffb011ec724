"""Streaming JSONL parser for Claude Code session transcripts."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

import orjson

from session_journal.errors import TranscriptReadError
from session_journal.services.transcript_stats import compute_stats
from session_journal.types.messages import (
    BlockType,
    ContentBlock,
    Entry,
    Message,
    TokenUsage,
    Transcript,
)
from session_journal.utils.content_sanitizer import strip_tags
from session_journal.utils.message_classifier import (
    is_confirmation,
    is_hard_noise,
    is_resume_message,
)
from session_journal.utils.tool_inputs import parse_tool_input

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024


def parse_transcript_file(file_path: str | Path) -> Transcript:
    """Parse a transcript file into entries plus aggregate stats.

    Raises TranscriptReadError if the file cannot be opened or read.
    """
    return _build(stream_entries(file_path))


def parse_transcript_lines(lines: Iterable[str | bytes], source: str = "<lines>") -> Transcript:
    """Parse already-read JSONL lines; used for in-memory transcripts and tests."""
    return _build(_parse_lines(lines, source))


def stream_entries(file_path: str | Path) -> Iterator[Entry]:
    """Stream-parse a transcript file, yielding Entry objects.

    Malformed lines are logged and skipped.
    Lines exceeding MAX_LINE_SIZE are skipped with a warning.
    """
    path = Path(file_path)
    try:
        f = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        raise TranscriptReadError("open transcript", path, str(e)) from e

    with f:
        try:
            yield from _parse_lines(f, path.name)
        except OSError as e:
            raise TranscriptReadError("read transcript", path, str(e)) from e


def parse_entry(raw: dict) -> Optional[Entry]:
    """Parse one decoded JSON record; returns None for records that carry no narrative."""
    entry_type = raw.get("type", "")
    if not isinstance(entry_type, str):
        entry_type = ""
    if is_hard_noise(entry_type):
        return None

    message = None
    raw_message = raw.get("message")
    if isinstance(raw_message, dict):
        message = _parse_message(raw_message)

    parent = raw.get("parentUuid")
    return Entry(
        type=entry_type,
        timestamp=_parse_timestamp(raw.get("timestamp")),
        uuid=_str(raw.get("uuid")),
        parent_uuid=parent if isinstance(parent, str) else None,
        session_id=_str(raw.get("sessionId")),
        cwd=_str(raw.get("cwd")),
        git_branch=_str(raw.get("gitBranch")),
        version=_str(raw.get("version")),
        message=message,
        subtype=_str(raw.get("subtype")),
        is_meta=bool(raw.get("isMeta", False)),
        plan_content=_str(raw.get("planContent")),
    )


def _build(entries: Iterable[Entry]) -> Transcript:
    parsed = tuple(entries)
    return Transcript(entries=parsed, stats=compute_stats(parsed))


def _parse_lines(lines: Iterable[str | bytes], source: str) -> Iterator[Entry]:
    line_num = 0
    for line in lines:
        line_num += 1
        line = line.strip()
        if not line:
            continue

        if len(line) > MAX_LINE_SIZE:
            logger.warning(
                "Line %d in %s exceeds %dMB, skipping",
                line_num, source, MAX_LINE_SIZE // (1024 * 1024),
            )
            continue

        try:
            raw = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            logger.debug("Malformed JSON at line %d in %s: %s", line_num, source, e)
            continue

        if not isinstance(raw, dict):
            continue

        entry = parse_entry(raw)
        if entry is not None:
            yield entry


def _parse_message(raw: dict) -> Message:
    content = raw.get("content", "")
    if isinstance(content, list):
        parsed_content: str | tuple[ContentBlock, ...] = tuple(
            _parse_block(block) for block in content if isinstance(block, dict)
        )
    elif isinstance(content, str):
        parsed_content = content
    else:
        parsed_content = ""

    usage = None
    raw_usage = raw.get("usage")
    if isinstance(raw_usage, dict):
        usage = TokenUsage(
            input_tokens=_int(raw_usage.get("input_tokens")),
            output_tokens=_int(raw_usage.get("output_tokens")),
            cache_read_input_tokens=_int(raw_usage.get("cache_read_input_tokens")),
            cache_creation_input_tokens=_int(raw_usage.get("cache_creation_input_tokens")),
        )

    return Message(
        role=_str(raw.get("role")),
        content=parsed_content,
        model=_str(raw.get("model")),
        id=_str(raw.get("id")),
        usage=usage,
    )


def _parse_block(block: dict) -> ContentBlock:
    block_type = block.get("type", "")
    if block_type == BlockType.TEXT.value:
        return ContentBlock(type=BlockType.TEXT, text=_str(block.get("text")))
    if block_type == BlockType.THINKING.value:
        return ContentBlock(type=BlockType.THINKING, text=_str(block.get("thinking")))
    if block_type == BlockType.TOOL_USE.value:
        name = _str(block.get("name"))
        return ContentBlock(
            type=BlockType.TOOL_USE,
            id=_str(block.get("id")),
            name=name,
            tool_input=parse_tool_input(name, block.get("input")),
        )
    if block_type == BlockType.TOOL_RESULT.value:
        return ContentBlock(
            type=BlockType.TOOL_RESULT,
            tool_use_id=_str(block.get("tool_use_id")),
            output=_result_text(block.get("content")),
            is_error=bool(block.get("is_error", False)),
        )
    return ContentBlock(type=BlockType.OTHER)


def _result_text(content) -> str:
    """Tool result content is a string or a list of text blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "\n".join(parts)
    return ""


def _parse_timestamp(ts_value) -> Optional[datetime]:
    """Parse a timestamp from various formats; naive values are taken as UTC."""
    if isinstance(ts_value, bool):
        return None
    if isinstance(ts_value, (int, float)):
        try:
            return datetime.fromtimestamp(
                ts_value / 1000 if ts_value > 1e12 else ts_value, tz=timezone.utc
            )
        except (ValueError, OSError, OverflowError):
            return None
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            dt = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return None


def _str(value) -> str:
    return value if isinstance(value, str) else ""


def _int(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


# --- Text helpers ---

def first_user_message(transcript: Transcript) -> str:
    """Return the first meaningful user message.

    Skips resume/context-loading instructions and short confirmations,
    falling back to the very first user text when nothing else qualifies.
    """
    first = ""
    for e in transcript.entries:
        if e.message is None or e.message.role != "user":
            continue

        text = ""
        if isinstance(e.message.content, str):
            text = e.message.content
        else:
            for block in e.message.blocks:
                if block.type == BlockType.TEXT and block.text:
                    text = block.text
                    break
        if not text:
            continue

        text = strip_tags(text)
        if not text:
            continue

        if not first:
            first = text

        lower = text.lower()
        if is_resume_message(lower) or is_confirmation(lower):
            continue
        return text
    return first
