"""Services for session-journal."""

from session_journal.services.transcript_parser import parse_transcript_file, parse_transcript_lines
from session_journal.services.narrative_builder import build_narrative
from session_journal.services.dialogue_extractor import extract_dialogue
from session_journal.services.friction_scorer import analyze_friction, compute_project_friction
from session_journal.services.session_index import SessionIndex
from session_journal.services.index_rebuild import rebuild_index
from session_journal.services.relevance import related_sessions
from session_journal.services.trend_analyzer import compute_trends
from session_journal.services.summary_stats import compute_summary
from session_journal.services.config_manager import ConfigManager
from session_journal.services.session_processor import process_batch, process_transcript

__all__ = [
    "parse_transcript_file",
    "parse_transcript_lines",
    "build_narrative",
    "extract_dialogue",
    "analyze_friction",
    "compute_project_friction",
    "SessionIndex",
    "rebuild_index",
    "related_sessions",
    "compute_trends",
    "compute_summary",
    "ConfigManager",
    "process_batch",
    "process_transcript",
]
