"""Entry-level types for parsed JSONL transcripts."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

from session_journal.utils.tool_inputs import ToolInput, UnknownToolInput


class EntryType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    SUMMARY = "summary"
    PROGRESS = "progress"
    FILE_HISTORY = "file-history-snapshot"
    QUEUE_OP = "queue-operation"


class BlockType(str, Enum):
    TEXT = "text"
    THINKING = "thinking"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    OTHER = "other"


# System subtype marking a context compaction
COMPACT_BOUNDARY = "compact_boundary"


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0


@dataclass(frozen=True)
class ContentBlock:
    type: BlockType
    text: str = ""
    # tool_use
    id: str = ""
    name: str = ""
    tool_input: ToolInput = field(default_factory=UnknownToolInput)
    # tool_result
    tool_use_id: str = ""
    output: str = ""
    is_error: bool = False


@dataclass(frozen=True)
class Message:
    role: str
    content: Union[str, tuple[ContentBlock, ...]] = ""
    model: str = ""
    id: str = ""
    usage: Optional[TokenUsage] = None

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        """Content as blocks; plain string content becomes one text block."""
        if isinstance(self.content, str):
            if not self.content:
                return ()
            return (ContentBlock(type=BlockType.TEXT, text=self.content),)
        return self.content

    @property
    def tool_uses(self) -> list[ContentBlock]:
        return [b for b in self.blocks if b.type == BlockType.TOOL_USE]

    @property
    def tool_results(self) -> list[ContentBlock]:
        return [b for b in self.blocks if b.type == BlockType.TOOL_RESULT]

    @property
    def is_tool_result_wrapper(self) -> bool:
        """True for user messages that only feed tool output back to the model."""
        return any(b.type == BlockType.TOOL_RESULT for b in self.blocks)

    def text_content(self) -> str:
        """All text blocks joined by newlines; thinking blocks are ignored."""
        return "\n".join(
            b.text for b in self.blocks if b.type == BlockType.TEXT and b.text
        )


@dataclass(frozen=True)
class Entry:
    type: str
    timestamp: Optional[datetime] = None
    uuid: str = ""
    parent_uuid: Optional[str] = None
    session_id: str = ""
    cwd: str = ""
    git_branch: str = ""
    version: str = ""
    message: Optional[Message] = None
    subtype: str = ""
    is_meta: bool = False
    # Plan text attached when a session starts from an approved plan
    plan_content: str = ""

    @property
    def role(self) -> str:
        return self.message.role if self.message else ""

    @property
    def is_compact_boundary(self) -> bool:
        return self.type == EntryType.SYSTEM.value and self.subtype == COMPACT_BOUNDARY


@dataclass(frozen=True)
class Stats:
    """Aggregate counters for one transcript."""
    session_id: str = ""
    model: str = ""
    git_branch: str = ""
    cwd: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: timedelta = timedelta(0)
    user_messages: int = 0
    assistant_messages: int = 0
    tool_uses: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_reads: int = 0
    cache_writes: int = 0
    files_read: frozenset[str] = frozenset()
    files_written: frozenset[str] = frozenset()
    tool_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_input_tokens(self) -> int:
        return self.input_tokens + self.cache_reads + self.cache_writes

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.output_tokens

    @property
    def messages(self) -> int:
        return self.user_messages + self.assistant_messages

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)


@dataclass(frozen=True)
class Transcript:
    entries: tuple[Entry, ...] = ()
    stats: Stats = field(default_factory=Stats)


@dataclass(frozen=True)
class ToolResult:
    """The outcome of one tool_use, keyed by its id in a result map."""
    tool_use_id: str
    output: str = ""
    is_error: bool = False
