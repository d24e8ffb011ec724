"""Small text helpers shared by the narrative, friction and index stages."""

# Words too common to signal that two pieces of text are about the same thing
STOP_WORDS = frozenset({
    "that", "this", "with", "from", "have", "been", "were", "will",
    "would", "could", "should", "what", "when", "where", "which", "their",
    "there", "these", "those", "them", "then", "than", "some", "also",
    "into", "each", "make", "like", "just", "over", "such", "only",
    "very", "more", "most", "other", "about", "after", "before", "being",
    "between", "does", "doing", "done",
})

MIN_SIGNIFICANT_LENGTH = 4

_EDGE_PUNCTUATION = ".,;:!?\"'`()[]{}—-"


def truncate(text: str, max_len: int) -> str:
    """Cut text to max_len characters, ending with "..." when shortened."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def first_line(text: str) -> str:
    text = text.strip()
    idx = text.find("\n")
    if idx > 0:
        return text[:idx]
    return text


def significant_words(text: str) -> set[str]:
    """Lowercased words of at least four characters that are not stop words."""
    words = set()
    for word in text.lower().split():
        word = word.strip(_EDGE_PUNCTUATION)
        if len(word) >= MIN_SIGNIFICANT_LENGTH and word not in STOP_WORDS:
            words.add(word)
    return words
