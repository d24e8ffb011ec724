"""Classify tool calls into Activities and post-process activity runs."""

import logging
from datetime import datetime
from typing import Optional, Sequence

from session_journal.services.tool_linker import link_tool_results
from session_journal.types.messages import ContentBlock, Entry, ToolResult
from session_journal.types.narrative import Activity, ActivityKind, Commit
from session_journal.utils.path_codec import shorten_path
from session_journal.utils.text import first_line, truncate
from session_journal.utils.tool_inputs import (
    FileEditInput,
    FileWriteInput,
    LookupInput,
    NotebookEditInput,
    PlanModeInput,
    QuestionInput,
    ShellInput,
    TaskInput,
)

logger = logging.getLogger(__name__)

# Substrings that mark a shell command as a test run
TEST_PATTERNS = (
    "go test", "npm test", "npm run test", "npx jest", "npx vitest",
    "pytest", "python -m pytest", "cargo test",
    "make test", "make integration", "make check",
    "jest", "mocha", "vitest", "bun test",
)

# Substrings that mark a shell command as a build
BUILD_PATTERNS = (
    "make build", "make all", "go build", "npm run build",
    "cargo build", "make install", "python -m build",
)

# Activities within this many positions after an error can mark it recovered
RECOVERY_WINDOW = 3

DETAIL_MAX_CHARS = 120


def extract_activities(entries: Sequence[Entry], cwd: str = "") -> list[Activity]:
    """Classify every tool call made by the assistant in one segment."""
    results = link_tool_results(entries)
    activities: list[Activity] = []

    for e in entries:
        if e.message is None or e.message.role != "assistant":
            continue
        for tu in e.message.tool_uses:
            activities.append(classify_tool_use(tu, results.get(tu.id), e.timestamp, cwd))

    return activities


def classify_tool_use(
    tu: ContentBlock,
    result: Optional[ToolResult],
    timestamp: Optional[datetime] = None,
    cwd: str = "",
) -> Activity:
    """Map one tool call, plus its result if any, to exactly one Activity."""
    is_err = result is not None and result.is_error
    payload = tu.tool_input

    if isinstance(payload, FileWriteInput):
        return Activity(
            kind=ActivityKind.FILE_CREATE,
            description=f"Created `{shorten_path(payload.file_path, cwd)}`",
            tool=tu.name,
            is_error=is_err,
            timestamp=timestamp,
        )

    if isinstance(payload, (FileEditInput, NotebookEditInput)):
        path = payload.file_path if isinstance(payload, FileEditInput) else payload.notebook_path
        return Activity(
            kind=ActivityKind.FILE_MODIFY,
            description=f"Modified `{shorten_path(path, cwd)}`",
            tool=tu.name,
            is_error=is_err,
            timestamp=timestamp,
        )

    if isinstance(payload, ShellInput):
        return classify_shell_command(payload.command, result, timestamp)

    if isinstance(payload, PlanModeInput):
        description = "Plan approved" if tu.name == "ExitPlanMode" else "Entered plan mode"
        return Activity(
            kind=ActivityKind.PLAN_MODE,
            description=description,
            tool=tu.name,
            timestamp=timestamp,
        )

    if isinstance(payload, QuestionInput):
        description = "Decision point"
        if payload.question:
            description = f"Decision: {truncate(payload.question, 80)}"
        return Activity(
            kind=ActivityKind.DECISION,
            description=description,
            tool=tu.name,
            detail=payload.question,
            timestamp=timestamp,
        )

    if isinstance(payload, TaskInput):
        description = "Delegated task"
        if payload.description:
            description = f"Delegated: {truncate(payload.description, 80)}"
        return Activity(
            kind=ActivityKind.DELEGATION,
            description=description,
            tool=tu.name,
            timestamp=timestamp,
        )

    if isinstance(payload, LookupInput):
        return Activity(
            kind=ActivityKind.EXPLORE,
            description=f"Read/searched codebase ({tu.name})",
            tool=tu.name,
            timestamp=timestamp,
        )

    return Activity(
        kind=ActivityKind.COMMAND,
        description=f"Used {tu.name}",
        tool=tu.name,
        is_error=is_err,
        timestamp=timestamp,
    )


def classify_shell_command(
    command: str,
    result: Optional[ToolResult],
    timestamp: Optional[datetime] = None,
) -> Activity:
    """Sub-classify a shell command: test run, commit, push, build or generic."""
    is_err = result is not None and result.is_error
    lower = command.lower()

    if is_test_command(lower):
        status = "failed" if is_err else "success"
        if result is not None and not is_err:
            status = extract_test_status(result.output)
        return Activity(
            kind=ActivityKind.TEST_RUN,
            description=f"Ran tests ({status})",
            tool="Bash",
            is_error=is_err,
            detail=truncate(command, DETAIL_MAX_CHARS),
            timestamp=timestamp,
        )

    if "git commit" in lower:
        message = extract_commit_message(command)
        description = "Committed changes"
        if message:
            description = f'Committed: "{truncate(message, 60)}"'
        return Activity(
            kind=ActivityKind.GIT_COMMIT,
            description=description,
            tool="Bash",
            is_error=is_err,
            timestamp=timestamp,
        )

    if "git push" in lower:
        return Activity(
            kind=ActivityKind.GIT_PUSH,
            description="Pushed to remote",
            tool="Bash",
            is_error=is_err,
            timestamp=timestamp,
        )

    status = "failed" if is_err else "success"

    if is_build_command(lower):
        return Activity(
            kind=ActivityKind.BUILD,
            description=f"Built project ({status})",
            tool="Bash",
            is_error=is_err,
            detail=truncate(command, DETAIL_MAX_CHARS),
            timestamp=timestamp,
        )

    return Activity(
        kind=ActivityKind.COMMAND,
        description=f"Ran `{truncate(first_line(command), 60)}` ({status})",
        tool="Bash",
        is_error=is_err,
        detail=truncate(command, DETAIL_MAX_CHARS),
        timestamp=timestamp,
    )


def is_test_command(lower: str) -> bool:
    return any(p in lower for p in TEST_PATTERNS)


def is_build_command(lower: str) -> bool:
    return any(p in lower for p in BUILD_PATTERNS)


def extract_test_status(output: str) -> str:
    """Read pass/fail from test output when the tool itself did not error."""
    if "fail" in output.lower():
        return "failed"
    return "success"


def extract_commit_message(command: str) -> str:
    """Pull the message out of `git commit -m ...`.

    Quoted messages run to the matching quote (backslash escapes honoured
    inside double quotes); unquoted ones stop at the next flag.
    """
    idx = command.find("-m ")
    if idx < 0:
        idx = command.find('-m"')
        if idx < 0:
            idx = command.find("-m'")
            if idx < 0:
                return ""

    rest = command[idx + 2:].lstrip(" ")
    if not rest:
        return ""

    quote = rest[0]
    if quote in ('"', "'"):
        chars = []
        i = 1
        while i < len(rest):
            ch = rest[i]
            if ch == "\\" and quote == '"' and i + 1 < len(rest):
                chars.append(rest[i + 1])
                i += 2
                continue
            if ch == quote:
                break
            chars.append(ch)
            i += 1
        return "".join(chars)

    sp = rest.find(" -")
    if sp > 0:
        return rest[:sp]
    return rest


def aggregate_exploration(activities: list[Activity]) -> list[Activity]:
    """Collapse each run of consecutive explore activities into one."""
    result: list[Activity] = []
    run: list[Activity] = []

    def flush() -> None:
        if run:
            result.append(Activity(
                kind=ActivityKind.EXPLORE,
                description=f"Explored codebase ({len(run)} lookups)",
                tool="explore",
                timestamp=run[0].timestamp,
            ))
            run.clear()

    for a in activities:
        if a.kind == ActivityKind.EXPLORE:
            run.append(a)
        else:
            flush()
            result.append(a)
    flush()

    return result


def detect_recoveries(activities: list[Activity]) -> None:
    """Back-fill the recovered flag in place.

    An erroring activity counts as recovered when one of the next
    RECOVERY_WINDOW activities has the same kind and no error. This is the
    only mutation applied to activities after classification.
    """
    for i, activity in enumerate(activities):
        if not activity.is_error:
            continue
        for later in activities[i + 1:i + 1 + RECOVERY_WINDOW]:
            if later.kind == activity.kind and not later.is_error:
                activity.recovered = True
                break


def extract_commits(entries: Sequence[Entry]) -> list[Commit]:
    """Collect SHA and message of every successful git commit call."""
    results = link_tool_results(entries)
    commits: list[Commit] = []

    for e in entries:
        if e.message is None or e.message.role != "assistant":
            continue
        for tu in e.message.tool_uses:
            payload = tu.tool_input
            if not isinstance(payload, ShellInput):
                continue
            if "git commit" not in payload.command.lower():
                continue
            result = results.get(tu.id)
            if result is None or result.is_error:
                continue
            commit = parse_commit_result(result.output)
            if commit is not None:
                commits.append(commit)

    return commits


def parse_commit_result(output: str) -> Optional[Commit]:
    """Parse `[branch sha] message` from git commit output."""
    line = first_line(output)
    open_idx = line.find("[")
    close_idx = line.find("]")
    if open_idx < 0 or close_idx <= open_idx:
        return None

    parts = line[open_idx + 1:close_idx].split()
    if len(parts) < 2:
        return None
    sha = parts[-1]
    if len(sha) < 7 or not all(c in "0123456789abcdefABCDEF" for c in sha):
        return None

    return Commit(sha=sha, message=line[close_idx + 1:].strip())
