"""Aggregate index statistics types."""

from dataclasses import dataclass, field


@dataclass
class ProjectStats:
    name: str
    sessions: int = 0
    tokens_in: int = 0
    duration: int = 0  # minutes


@dataclass
class ModelStats:
    name: str
    sessions: int = 0
    tokens_in: int = 0
    messages: int = 0
    tokens_per_message: float = 0.0


@dataclass
class TagStats:
    name: str
    count: int = 0
    percent: float = 0.0


@dataclass
class FileStats:
    path: str
    sessions: int = 0


@dataclass
class MonthStats:
    month: str  # YYYY-MM
    sessions: int = 0
    tokens_in: int = 0
    tokens_out: int = 0


@dataclass
class IndexSummary:
    total_sessions: int = 0
    total_tokens_in: int = 0
    total_tokens_out: int = 0
    total_messages: int = 0
    total_tool_uses: int = 0
    total_duration: int = 0  # minutes
    active_projects: int = 0

    avg_tokens_in_per_message: float = 0.0
    avg_tokens_out_per_message: float = 0.0
    avg_tools_per_session: float = 0.0
    avg_duration: float = 0.0

    projects: list[ProjectStats] = field(default_factory=list)
    models: list[ModelStats] = field(default_factory=list)
    tags: list[TagStats] = field(default_factory=list)
    top_files: list[FileStats] = field(default_factory=list)
    monthly: list[MonthStats] = field(default_factory=list)
