"""Tests for session_journal.services.dialogue_extractor."""

from helpers import assistant, compact_boundary, to_jsonl, tool_result, tool_use, user

from session_journal.services.dialogue_extractor import extract_dialogue
from session_journal.services.transcript_parser import parse_transcript_lines
from session_journal.types.messages import Transcript


def _dialogue(records):
    return extract_dialogue(parse_transcript_lines(to_jsonl(records).splitlines()))


# ---------------------------------------------------------------------------
# 1. Basic turns
# ---------------------------------------------------------------------------

def test_simple_dialogue(simple_records):
    dialogue = _dialogue(simple_records)

    assert len(dialogue.sections) == 1
    section = dialogue.sections[0]
    assert section.user_request == "Add a login page to the app"
    assert [t.role for t in section.turns] == ["user", "assistant", "user", "assistant"]


def test_empty_transcript():
    assert extract_dialogue(Transcript()) is None


def test_no_prose_is_none():
    assert _dialogue([user("ok"), assistant([tool_use("t1", "Read", file_path="/a")])]) is None


# ---------------------------------------------------------------------------
# 2. Filtering
# ---------------------------------------------------------------------------

def test_tool_results_meta_and_noise_skipped():
    dialogue = _dialogue([
        user("Fix the flaky test"),
        user("injected context", isMeta=True),
        user("/compact"),
        assistant([tool_use("t1", "Bash", command="pytest")]),
        tool_result("t1", "1 failed"),
        {"type": "system", "subtype": "informational", "content": "note"},
    ])
    turns = dialogue.turns()
    assert [t.text for t in turns] == ["Fix the flaky test"]


def test_wrapper_tags_stripped():
    dialogue = _dialogue([user("<command-message>deploy it</command-message> to staging")])
    assert dialogue.turns()[0].text == "deploy it to staging"


def test_long_user_turn_truncated():
    dialogue = _dialogue([user("a" * 600)])
    text = dialogue.turns()[0].text
    assert text == "a" * 500 + " [...]"
    assert len(dialogue.sections[0].user_request) == 120


# ---------------------------------------------------------------------------
# 3. Assistant turns
# ---------------------------------------------------------------------------

def test_short_text_with_tool_call_is_filler():
    dialogue = _dialogue([
        user("Refactor it"),
        assistant([{"type": "text", "text": "Let me look."}, tool_use("t1", "Read", file_path="/a")]),
    ])
    assert [t.role for t in dialogue.turns()] == ["user"]


def test_long_text_with_tool_call_kept():
    explanation = "I found the cause: " + "the cache key ignores the locale. " * 5
    dialogue = _dialogue([
        user("Why is it broken?"),
        assistant([{"type": "text", "text": explanation}, tool_use("t1", "Edit", file_path="/a")]),
    ])
    assert dialogue.turns()[1].text == explanation.strip()


def test_text_blocks_joined():
    dialogue = _dialogue([
        user("Explain"),
        assistant([
            {"type": "text", "text": "First part."},
            {"type": "thinking", "thinking": "private"},
            {"type": "text", "text": "Second part."},
        ]),
    ])
    assert dialogue.turns()[1].text == "First part.\n\nSecond part."


# ---------------------------------------------------------------------------
# 4. Sections per segment
# ---------------------------------------------------------------------------

def test_one_section_per_segment():
    dialogue = _dialogue([
        user("First task", second=0),
        assistant("Working on the first task now.", second=1),
        compact_boundary(second=2),
        user("Second task", second=3),
        assistant("Working on the second task now.", second=4),
    ])
    assert [s.user_request for s in dialogue.sections] == ["First task", "Second task"]


# ---------------------------------------------------------------------------
# 5. Approved plans
# ---------------------------------------------------------------------------

PLAN = "Build the OAuth login flow\n\n1. Add the callback route\n2. Store the token\n" + "Detail. " * 80


def test_plan_content_is_the_user_turn():
    dialogue = _dialogue([
        user("Implement the following plan:", planContent=PLAN),
        assistant("Starting with the callback route as the plan describes."),
    ])
    section = dialogue.sections[0]
    assert section.user_request == "Build the OAuth login flow"
    assert [t.role for t in section.turns] == ["user", "assistant"]
    # Plans are kept whole, unlike typed turns
    assert section.turns[0].text == PLAN


def test_plan_without_typed_text():
    dialogue = _dialogue([user("", planContent="Migrate the settings store")])
    assert dialogue.turns()[0].text == "Migrate the settings store"
    assert dialogue.sections[0].user_request == "Migrate the settings store"
