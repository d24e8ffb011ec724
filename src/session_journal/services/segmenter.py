"""Split transcript entries at context-compaction boundaries."""

from typing import Sequence

from session_journal.types.messages import Entry


def segment_entries(entries: Sequence[Entry]) -> list[list[Entry]]:
    """Split entries at system compact_boundary markers.

    Boundary entries belong to neither neighbouring segment. Empty runs
    between boundaries are dropped, but the result always holds at least
    one (possibly empty) segment.
    """
    segments: list[list[Entry]] = []
    current: list[Entry] = []

    for e in entries:
        if e.is_compact_boundary:
            if current:
                segments.append(current)
            current = []
            continue
        current.append(e)

    if current:
        segments.append(current)

    if not segments:
        segments.append([])

    return segments
