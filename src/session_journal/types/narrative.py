"""Activity, segment and narrative types derived from a transcript."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ActivityKind(str, Enum):
    FILE_CREATE = "file-create"
    FILE_MODIFY = "file-modify"
    TEST_RUN = "test-run"
    GIT_COMMIT = "git-commit"
    GIT_PUSH = "git-push"
    BUILD = "build"
    COMMAND = "command"
    DECISION = "decision"
    PLAN_MODE = "plan-mode"
    DELEGATION = "delegation"
    EXPLORE = "explore"
    ERROR = "error"


WRITE_KINDS = frozenset({ActivityKind.FILE_CREATE, ActivityKind.FILE_MODIFY})


@dataclass
class Activity:
    kind: ActivityKind
    description: str
    tool: str = ""
    is_error: bool = False
    # Set by detect_recoveries after classification
    recovered: bool = False
    detail: str = ""
    timestamp: Optional[datetime] = None


@dataclass
class Segment:
    index: int = 0
    activities: list[Activity] = field(default_factory=list)
    user_request: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


@dataclass(frozen=True)
class Commit:
    sha: str
    message: str = ""


@dataclass
class Narrative:
    segments: list[Segment] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    title: str = ""
    summary: str = ""
    tag: str = ""
    decisions: list[str] = field(default_factory=list)
    open_threads: list[str] = field(default_factory=list)
    work_performed: str = ""

    def activities(self) -> list[Activity]:
        return [a for seg in self.segments for a in seg.activities]
