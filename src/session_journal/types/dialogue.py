"""Prose dialogue types: the user and assistant turns of a session."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Turn:
    role: str  # "user" or "assistant"
    text: str


@dataclass
class DialogueSection:
    user_request: str = ""
    turns: list[Turn] = field(default_factory=list)


@dataclass
class Dialogue:
    sections: list[DialogueSection] = field(default_factory=list)

    def turns(self) -> list[Turn]:
        return [t for sec in self.sections for t in sec.turns]
