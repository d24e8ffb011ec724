"""Render the work-performed bullet list for a session note."""

from typing import Sequence

from session_journal.types.narrative import Activity, ActivityKind, Segment

# Above this many activities, generic commands are capped
LONG_SESSION_ACTIVITIES = 50
MAX_GENERIC_COMMANDS = 5


def render_work_performed(segments: Sequence[Segment]) -> str:
    """Bullet list of activity descriptions.

    Segments get a "### Segment N" header (quoting the segment's request) only
    when more than one of them has activities. Returns "" when nothing ran.
    """
    total = sum(len(seg.activities) for seg in segments)
    if total == 0:
        return ""

    filtered = total > LONG_SESSION_ACTIVITIES
    non_empty = [seg for seg in segments if seg.activities]
    lines: list[str] = []

    if len(non_empty) == 1:
        lines.extend(_activity_lines(non_empty[0].activities, filtered))
    else:
        for num, seg in enumerate(non_empty, start=1):
            lines.append(f"### Segment {num}")
            if seg.user_request:
                lines.append(f'> "{seg.user_request}"')
            lines.append("")
            lines.extend(_activity_lines(seg.activities, filtered))
            lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def _activity_lines(activities: Sequence[Activity], filtered: bool) -> list[str]:
    if not filtered:
        return [f"- {a.description}" for a in activities]

    lines = []
    commands = 0
    for a in activities:
        # Failed commands stay visible, successful ones are capped
        if a.kind == ActivityKind.COMMAND and not a.is_error:
            commands += 1
            if commands > MAX_GENERIC_COMMANDS:
                continue
        lines.append(f"- {a.description}")

    omitted = commands - MAX_GENERIC_COMMANDS
    if omitted > 0:
        lines.append(f"- ... and {omitted} more commands")
    return lines
