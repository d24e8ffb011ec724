"""Extract the prose dialogue (user and assistant turns) from a transcript."""

from typing import Optional, Sequence

from session_journal.services.segmenter import segment_entries
from session_journal.types.dialogue import Dialogue, DialogueSection, Turn
from session_journal.types.messages import BlockType, Entry, EntryType, Message, Transcript
from session_journal.utils.content_sanitizer import extract_user_text, strip_tags
from session_journal.utils.message_classifier import is_noise_message
from session_journal.utils.text import first_line, truncate

USER_MAX_CHARS = 500
# Assistant text shorter than this that accompanies a tool call is filler
FILLER_MAX_CHARS = 120
REQUEST_MAX_CHARS = 120


def extract_dialogue(transcript: Transcript) -> Optional[Dialogue]:
    """Group prose turns per compaction segment; None when there is no prose."""
    if not transcript.entries:
        return None

    sections = []
    for raw in segment_entries(transcript.entries):
        section = _extract_section(raw)
        if section is not None:
            sections.append(section)

    if not sections:
        return None
    return Dialogue(sections=sections)


def _extract_section(entries: Sequence[Entry]) -> Optional[DialogueSection]:
    section = DialogueSection()

    for e in entries:
        if e.type == EntryType.SYSTEM.value or e.is_meta or e.message is None:
            continue

        if e.message.role == "user":
            turn = _user_turn(e)
            if turn is not None:
                if not section.user_request:
                    section.user_request = truncate(first_line(turn.text), REQUEST_MAX_CHARS)
                section.turns.append(turn)

        elif e.message.role == "assistant":
            turn = _assistant_turn(e.message)
            if turn is not None:
                section.turns.append(turn)

    if not section.turns:
        return None
    return section


def _user_turn(entry: Entry) -> Optional[Turn]:
    message = entry.message
    if message is None or message.is_tool_result_wrapper:
        return None

    # An approved plan stands in for the typed request and is kept whole
    if entry.plan_content:
        return Turn(role="user", text=entry.plan_content)

    text = strip_tags(extract_user_text(message))
    if not text or is_noise_message(text):
        return None

    if len(text) > USER_MAX_CHARS:
        text = text[:USER_MAX_CHARS] + " [...]"
    return Turn(role="user", text=text)


def _assistant_turn(message: Message) -> Optional[Turn]:
    parts = [
        b.text.strip() for b in message.blocks
        if b.type == BlockType.TEXT and b.text.strip()
    ]
    text = "\n\n".join(parts)
    if not text:
        return None
    if message.tool_uses and len(text) < FILLER_MAX_CHARS:
        return None
    return Turn(role="assistant", text=text)
