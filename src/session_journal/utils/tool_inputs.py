"""Typed payloads for tool_use inputs, keyed by tool name.

Tool inputs arrive as free-form JSON objects. Known tools get a small typed
payload; anything else is kept as an UnknownToolInput with the raw mapping so
future tools still flow through classification.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class FileWriteInput:
    file_path: str = ""


@dataclass(frozen=True)
class FileEditInput:
    file_path: str = ""


@dataclass(frozen=True)
class NotebookEditInput:
    notebook_path: str = ""


@dataclass(frozen=True)
class ShellInput:
    command: str = ""
    description: str = ""


@dataclass(frozen=True)
class QuestionInput:
    question: str = ""


@dataclass(frozen=True)
class TaskInput:
    description: str = ""
    subagent_type: str = ""


@dataclass(frozen=True)
class LookupInput:
    target: str = ""


@dataclass(frozen=True)
class PlanModeInput:
    plan: str = ""


@dataclass(frozen=True)
class UnknownToolInput:
    raw: dict[str, Any] = field(default_factory=dict)


ToolInput = Union[
    FileWriteInput,
    FileEditInput,
    NotebookEditInput,
    ShellInput,
    QuestionInput,
    TaskInput,
    LookupInput,
    PlanModeInput,
    UnknownToolInput,
]

# Tools that only read or search
LOOKUP_TOOLS = frozenset({"Read", "Grep", "Glob", "LS", "WebFetch", "WebSearch"})

PLAN_MODE_TOOLS = frozenset({"EnterPlanMode", "ExitPlanMode"})

# Keys that name the lookup target, in preference order
_LOOKUP_KEYS = ("file_path", "path", "pattern", "url", "query")


def parse_tool_input(name: str, raw: Any) -> ToolInput:
    """Build the typed payload for a tool call from its raw input."""
    if not isinstance(raw, dict):
        raw = {}

    if name == "Write":
        return FileWriteInput(file_path=_str(raw, "file_path"))
    if name in ("Edit", "MultiEdit"):
        return FileEditInput(file_path=_str(raw, "file_path"))
    if name == "NotebookEdit":
        return NotebookEditInput(notebook_path=_str(raw, "notebook_path"))
    if name == "Bash":
        return ShellInput(command=_str(raw, "command"), description=_str(raw, "description"))
    if name == "AskUserQuestion":
        return QuestionInput(question=_first_question(raw))
    if name == "Task":
        return TaskInput(
            description=_str(raw, "description"),
            subagent_type=_str(raw, "subagent_type"),
        )
    if name in LOOKUP_TOOLS:
        for key in _LOOKUP_KEYS:
            value = _str(raw, key)
            if value:
                return LookupInput(target=value)
        return LookupInput()
    if name in PLAN_MODE_TOOLS:
        return PlanModeInput(plan=_str(raw, "plan"))
    return UnknownToolInput(raw=dict(raw))


def written_path(payload: ToolInput) -> str:
    """Return the file a payload writes to, or "" if it writes nothing."""
    if isinstance(payload, (FileWriteInput, FileEditInput)):
        return payload.file_path
    if isinstance(payload, NotebookEditInput):
        return payload.notebook_path
    return ""


def _str(raw: dict, key: str) -> str:
    value = raw.get(key, "")
    return value if isinstance(value, str) else ""


def _first_question(raw: dict) -> str:
    questions = raw.get("questions")
    if not isinstance(questions, list) or not questions:
        return _str(raw, "question")
    first = questions[0]
    if not isinstance(first, dict):
        return ""
    return _str(first, "question")
