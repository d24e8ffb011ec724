"""Error types raised for structural failures (unreadable inputs, unwritable state)."""


class SessionJournalError(Exception):
    """Base error carrying the path and operation that failed."""

    def __init__(self, operation: str, path: str = "", detail: str = ""):
        self.operation = operation
        self.path = str(path)
        self.detail = detail
        message = operation
        if self.path:
            message = f"{operation}: {self.path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class TranscriptReadError(SessionJournalError):
    """The transcript file could not be opened or read."""


class IndexLoadError(SessionJournalError):
    """The session index exists but could not be read or decoded."""


class IndexWriteError(SessionJournalError):
    """The state directory or index file could not be written."""


class NoteParseError(SessionJournalError):
    """A session note could not be read or its frontmatter is not valid YAML."""


class ConfigError(SessionJournalError):
    """The configuration file exists but could not be read or parsed."""
