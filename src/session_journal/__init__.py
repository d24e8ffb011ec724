"""Derive narratives, friction scores, a session index and weekly trends from Claude Code transcripts."""

__version__ = "0.1.0"
