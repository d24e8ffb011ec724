"""Shared test helpers: builders for raw transcript records."""

import orjson

BASE_TIME = "2026-02-13T10:00:{:02d}.000Z"


def ts(second: int) -> str:
    return BASE_TIME.format(second)


def user(text, second=0, session_id="sess-1", cwd="/home/wiz/app", **extra):
    record = {
        "type": "user",
        "uuid": f"u-{second}",
        "sessionId": session_id,
        "cwd": cwd,
        "gitBranch": "feature/auth",
        "timestamp": ts(second),
        "message": {"role": "user", "content": text},
    }
    record.update(extra)
    return record


def assistant(blocks, second=0, model="claude-sonnet-4", usage=None, session_id="sess-1"):
    if isinstance(blocks, str):
        blocks = [{"type": "text", "text": blocks}]
    message = {"role": "assistant", "model": model, "content": blocks}
    if usage is not None:
        message["usage"] = usage
    return {
        "type": "assistant",
        "uuid": f"a-{second}",
        "sessionId": session_id,
        "timestamp": ts(second),
        "message": message,
    }


def tool_use(tool_id, name, **tool_input):
    return {"type": "tool_use", "id": tool_id, "name": name, "input": tool_input}


def tool_result(tool_id, output="ok", is_error=False, second=0):
    return {
        "type": "user",
        "uuid": f"r-{tool_id}",
        "timestamp": ts(second),
        "message": {
            "role": "user",
            "content": [{
                "type": "tool_result",
                "tool_use_id": tool_id,
                "content": output,
                "is_error": is_error,
            }],
        },
    }


def compact_boundary(second=0):
    return {
        "type": "system",
        "subtype": "compact_boundary",
        "uuid": f"b-{second}",
        "timestamp": ts(second),
    }


def to_jsonl(records) -> str:
    return "\n".join(orjson.dumps(r).decode() for r in records) + "\n"
