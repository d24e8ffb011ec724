"""Type definitions for session-journal."""

from session_journal.types.messages import (
    BlockType,
    ContentBlock,
    Entry,
    EntryType,
    Message,
    Stats,
    TokenUsage,
    ToolResult,
    Transcript,
)
from session_journal.types.narrative import (
    Activity,
    ActivityKind,
    Commit,
    Narrative,
    Segment,
)
from session_journal.types.dialogue import Dialogue, DialogueSection, Turn
from session_journal.types.friction import (
    Correction,
    FrictionResult,
    ProjectFriction,
    Signals,
)
from session_journal.types.sessions import RelatedSession, SessionEntry
from session_journal.types.trends import MetricTrend, TrendPoint, TrendReport, WeekBucket
from session_journal.types.summary import IndexSummary
from session_journal.types.processes import BatchReport, Enrichment, ProcessResult, SessionInfo

__all__ = [
    "BlockType",
    "ContentBlock",
    "Entry",
    "EntryType",
    "Message",
    "Stats",
    "TokenUsage",
    "ToolResult",
    "Transcript",
    "Activity",
    "ActivityKind",
    "Commit",
    "Narrative",
    "Segment",
    "Dialogue",
    "DialogueSection",
    "Turn",
    "Correction",
    "FrictionResult",
    "ProjectFriction",
    "Signals",
    "RelatedSession",
    "SessionEntry",
    "MetricTrend",
    "TrendPoint",
    "TrendReport",
    "WeekBucket",
    "IndexSummary",
    "BatchReport",
    "Enrichment",
    "ProcessResult",
    "SessionInfo",
]
