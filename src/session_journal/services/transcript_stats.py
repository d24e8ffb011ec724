"""Aggregate counters computed once per transcript."""

from datetime import timedelta
from typing import Iterable

from session_journal.types.messages import ContentBlock, Entry, Stats
from session_journal.utils.tool_inputs import LookupInput, ShellInput, written_path

# Synthetic tool_counts key bumped by shell commands that commit
GIT_COMMIT_COUNTER = "git-commit"


def compute_stats(entries: Iterable[Entry]) -> Stats:
    """Compute Stats in one linear pass over the entries."""
    session_id = model = git_branch = cwd = ""
    start = end = None
    user_messages = assistant_messages = tool_uses = 0
    input_tokens = output_tokens = cache_reads = cache_writes = 0
    files_read: set[str] = set()
    files_written: set[str] = set()
    tool_counts: dict[str, int] = {}

    for e in entries:
        if e.timestamp is not None:
            if start is None or e.timestamp < start:
                start = e.timestamp
            if end is None or e.timestamp > end:
                end = e.timestamp

        # Session metadata from the first entry that has it
        session_id = session_id or e.session_id
        cwd = cwd or e.cwd
        git_branch = git_branch or e.git_branch

        msg = e.message
        if msg is None:
            continue

        if msg.role == "user":
            # Tool results come back as user messages; they are not user turns
            if not msg.is_tool_result_wrapper:
                user_messages += 1

        elif msg.role == "assistant":
            assistant_messages += 1

            if not model and msg.model and not msg.model.startswith("<"):
                model = msg.model

            if msg.usage is not None:
                input_tokens += msg.usage.input_tokens
                output_tokens += msg.usage.output_tokens
                cache_reads += msg.usage.cache_read_input_tokens
                cache_writes += msg.usage.cache_creation_input_tokens

            for tu in msg.tool_uses:
                tool_uses += 1
                tool_counts[tu.name] = tool_counts.get(tu.name, 0) + 1
                _track_files(tu, files_read, files_written, tool_counts)

    duration = timedelta(0)
    if start is not None and end is not None:
        duration = end - start

    return Stats(
        session_id=session_id,
        model=model,
        git_branch=git_branch,
        cwd=cwd,
        start_time=start,
        end_time=end,
        duration=duration,
        user_messages=user_messages,
        assistant_messages=assistant_messages,
        tool_uses=tool_uses,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_reads=cache_reads,
        cache_writes=cache_writes,
        files_read=frozenset(files_read),
        files_written=frozenset(files_written),
        tool_counts=tool_counts,
    )


def _track_files(
    tu: ContentBlock,
    files_read: set[str],
    files_written: set[str],
    tool_counts: dict[str, int],
) -> None:
    payload = tu.tool_input

    if tu.name == "Read":
        if isinstance(payload, LookupInput) and payload.target:
            files_read.add(payload.target)
        return

    path = written_path(payload)
    if path:
        files_written.add(path)
        return

    if isinstance(payload, ShellInput) and "git commit" in payload.command:
        tool_counts[GIT_COMMIT_COUNTER] = tool_counts.get(GIT_COMMIT_COUNTER, 0) + 1
