"""Strip Claude Code wrapper markup from message text."""

import re

from session_journal.types.messages import BlockType, Message

# Wrapper tags injected by Claude Code around commands, reminders and tool output.
# Only the tags are removed; their inner text is kept.
_WRAPPER_TAG_RE = re.compile(
    r'</?(?:local-command-(?:stdout|stderr|caveat)|command-(?:output|name|args|message)|'
    r'system-reminder|task-(?:id|notification)|persisted-output|thinking|tool-use-id|'
    r'tool|skill-name|plugin-id|vault)[^>]*>'
)


def strip_tags(text: str) -> str:
    """Remove wrapper tags from text and trim it."""
    if not text:
        return ""
    return _WRAPPER_TAG_RE.sub("", text).strip()


def extract_user_text(message: Message | None) -> str:
    """Return the first text the user typed in a message, trimmed.

    Plain string content wins; otherwise the first non-empty text block.
    """
    if message is None:
        return ""
    if isinstance(message.content, str):
        return message.content.strip()
    for block in message.blocks:
        if block.type == BlockType.TEXT and block.text:
            return block.text.strip()
    return ""
