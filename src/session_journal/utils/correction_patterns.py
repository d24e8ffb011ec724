"""Pattern table for spotting user corrections in dialogue turns.

Each rule is (label, match mode, phrases). Rules are tried in order and the
first hit labels the turn. All matching is done on lowercased text.
"""

CONTAINS = "contains"
STARTS_WITH = "startswith"

CORRECTION_RULES = (
    ("negation", CONTAINS, (
        "no, ", "no that's", "not what i", "i said ", "i meant ",
        "that's not", "no i ",
    )),
    ("redirect", STARTS_WITH, (
        "actually,", "actually ", "wait,", "wait ", "stop",
        "instead,", "instead ", "rather,", "rather ",
    )),
    ("undo", CONTAINS, (
        "revert", "undo", "roll back", "go back",
    )),
    ("quality", CONTAINS, (
        "that's wrong", "doesn't work", "still broken", "still failing",
        "that's broken", "doesn't compile", "still not",
    )),
    ("repetition", CONTAINS, (
        "i already", "as i said", "like i said",
    )),
)

SHORT_NEGATION = "short-negation"
# Openers of a terse pushback right after a long assistant answer
SHORT_NEGATION_STARTERS = ("no", "wrong", "nope", "that's wrong", "not right")
SHORT_NEGATION_MAX_CHARS = 100
LONG_ASSISTANT_MIN_CHARS = 200


def match_correction(lower: str) -> str:
    """Return the label of the first matching rule, or ""."""
    for label, mode, phrases in CORRECTION_RULES:
        if mode == STARTS_WITH:
            if lower.startswith(phrases):
                return label
        elif any(p in lower for p in phrases):
            return label
    return ""


def is_short_negation(lower: str) -> bool:
    return len(lower) < SHORT_NEGATION_MAX_CHARS and lower.startswith(SHORT_NEGATION_STARTERS)
