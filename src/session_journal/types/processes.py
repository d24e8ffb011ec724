"""Transcript processing types: detected metadata, results and batch reports."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from session_journal.types.friction import FrictionResult
    from session_journal.types.narrative import Narrative
    from session_journal.types.sessions import SessionEntry


@dataclass
class SessionInfo:
    """Metadata detected from the working directory and transcript."""
    project: str
    domain: str
    branch: str = ""
    model: str = ""
    session_id: str = ""
    cwd: str = ""


@dataclass
class Enrichment:
    """Already-validated summary fields supplied from outside the pipeline.

    Empty fields leave the heuristic values in place.
    """
    summary: str = ""
    tag: str = ""
    decisions: list[str] = field(default_factory=list)
    open_threads: list[str] = field(default_factory=list)


@dataclass
class RelatedNote:
    name: str  # note filename without extension
    reason: str
    score: int = 0


@dataclass
class ProcessResult:
    transcript_path: str
    skipped: bool = False
    reason: str = ""
    entry: "SessionEntry | None" = None
    narrative: "Narrative | None" = None
    friction: "FrictionResult | None" = None
    related: list[RelatedNote] = field(default_factory=list)
    previous_note: str = ""

    @property
    def note_path(self) -> str:
        return self.entry.note_path if self.entry is not None else ""


@dataclass
class BatchFailure:
    transcript_path: str
    error: str


@dataclass
class BatchReport:
    processed: list[ProcessResult] = field(default_factory=list)
    skipped: list[ProcessResult] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)
    saved: bool = False
    save_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed and self.save_error is None
