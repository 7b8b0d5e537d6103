from dataclasses import dataclass
from typing import Literal, Optional

EventType = Literal["answer", "done", "error"]


@dataclass(frozen=True)
class AnswerData:
    """Cumulative answer text plus the identifiers seen so far."""

    text: str
    message_id: str = ""
    conversation_id: str = ""


@dataclass(frozen=True)
class AnswerEvent:
    """Caller-visible event produced by a provider's answer stream"""

    type: EventType
    data: Optional[AnswerData] = None
    error: Optional[Exception] = None

    @classmethod
    def answer(cls, text: str, message_id: str = "", conversation_id: str = "") -> "AnswerEvent":
        return cls(
            type="answer",
            data=AnswerData(text=text, message_id=message_id, conversation_id=conversation_id),
        )

    @classmethod
    def done(cls) -> "AnswerEvent":
        return cls(type="done")

    @classmethod
    def failure(cls, error: Exception) -> "AnswerEvent":
        return cls(type="error", error=error)

    @property
    def is_terminal(self) -> bool:
        return self.type != "answer"


@dataclass
class StreamState:
    """Mutable state owned by one in-flight generate_answer call."""

    text: str = ""
    message_id: str = ""
    closed: bool = False

    def record_message_id(self, message_id: Optional[str]) -> None:
        """Store the first identifier observed; later ones are ignored."""
        if not self.message_id and message_id:
            self.message_id = str(message_id)

    def append(self, delta: str) -> str:
        self.text += delta
        return self.text
