"""Link tool_use calls with their corresponding tool_result responses."""

import logging
from typing import Iterable

from session_journal.types.messages import Entry, ToolResult

logger = logging.getLogger(__name__)


def link_tool_results(entries: Iterable[Entry]) -> dict[str, ToolResult]:
    """Map tool_use ids to their results across a sequence of entries.

    Each tool_use id is paired with at most one result: if a transcript
    repeats a result for the same id, the first one wins.
    Tool calls without results (pending/interrupted) simply have no key.
    """
    results: dict[str, ToolResult] = {}
    for e in entries:
        if e.message is None:
            continue
        for block in e.message.tool_results:
            if not block.tool_use_id:
                continue
            if block.tool_use_id in results:
                logger.debug("Duplicate tool_result for %s ignored", block.tool_use_id)
                continue
            results[block.tool_use_id] = ToolResult(
                tool_use_id=block.tool_use_id,
                output=block.output,
                is_error=block.is_error,
            )
    return results
