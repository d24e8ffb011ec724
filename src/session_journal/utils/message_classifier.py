"""Classify transcript records and user messages.

Every rule that decides whether a record or a user message is "noise" lives in
the tables below, so title and request extraction stay auditable in one place.
"""

from session_journal.types.messages import EntryType


# Record types dropped at parse time: they carry no narrative value
HARD_NOISE_TYPES = frozenset({
    EntryType.PROGRESS.value,
    EntryType.FILE_HISTORY.value,
})

# Prefixes of boilerplate that never describe the session's task
NOISE_PREFIXES = (
    "/",  # slash commands
    "caveat:",  # system-injected caveats
    "implement the following plan:",
    "execute the plan",
)

# Substrings of resume/context-loading instructions
RESUME_MARKERS = ("@resume", "resume.md")

# Messages that are noise when they are the whole message (optionally with ! or .)
TRIVIAL_MESSAGES = frozenset({
    "yes", "yeah", "yep", "yup", "ok", "okay", "sure",
    "go ahead", "do it", "proceed", "correct", "right",
    "hi", "hello", "hey", "restart", "continue",
    "thanks", "thank you", "bye", "goodbye",
    "got it", "understood", "noted", "perfect", "great",
    "nice", "awesome", "cool", "good", "fine", "alright",
})

# Short acknowledgements, greetings and farewells skipped when picking the first message
CONFIRMATIONS = (
    "yes", "yeah", "yep", "yup", "ok", "okay", "sure",
    "go ahead", "do it", "proceed", "correct", "right",
    "that's right", "sounds good", "looks good", "lgtm",
    "fix them", "yes,", "no,",
    "hi", "hello", "hey", "good morning", "good afternoon",
    "bye", "goodbye", "see ya", "see you", "thanks", "thank you",
    "cheers", "later", "ttyl", "good night",
    "got it", "understood", "noted", "perfect", "great", "nice",
    "awesome", "cool", "good", "fine", "alright",
)

CONFIRMATION_MAX_CHARS = 80

CODE_FENCE = "```"


def is_hard_noise(record_type: str) -> bool:
    return record_type in HARD_NOISE_TYPES


def is_noise_message(text: str) -> bool:
    """Detect user messages that should not be used as a session request."""
    lower = text.strip().lower()

    if lower.startswith(NOISE_PREFIXES):
        return True
    if any(marker in lower for marker in RESUME_MARKERS):
        return True
    if _bare(lower) in TRIVIAL_MESSAGES:
        return True
    if text.lstrip().startswith(CODE_FENCE):
        return True
    return False


def is_resume_message(lower: str) -> bool:
    """Slash commands, caveats and resume instructions."""
    if lower.startswith(("/", "caveat:")):
        return True
    return any(marker in lower for marker in RESUME_MARKERS)


def is_confirmation(lower: str) -> bool:
    """Short confirmations, greetings and farewells."""
    if len(lower) > CONFIRMATION_MAX_CHARS:
        return False
    for phrase in CONFIRMATIONS:
        if lower == phrase or lower == phrase + "!" or lower == phrase + ".":
            return True
        if lower.startswith((phrase + ",", phrase + " ")):
            return True
    return False


def _bare(lower: str) -> str:
    if lower.endswith(("!", ".")):
        return lower[:-1]
    return lower
