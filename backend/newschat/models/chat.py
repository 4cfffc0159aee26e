"""Chat-related models.

Internal dataclasses carry conversation state through the service layer;
pydantic models define the API contracts.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Role of a turn in the conversation."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatState(str, Enum):
    """Stages a chat request moves through."""

    VALIDATING = "validating"
    LOADING_HISTORY = "loading_history"
    EMBEDDING = "embedding"
    RETRIEVING = "retrieving"
    PROMPTING = "prompting"
    STREAMING = "streaming"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class SessionStatus(str, Enum):
    """Outcome of a session store lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


# Internal dataclasses for service layer


@dataclass(frozen=True)
class ConversationTurn:
    """A single turn in a conversation. Immutable once created."""

    role: ChatRole
    text: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationTurn":
        """Create ConversationTurn from dictionary (for deserialization)."""
        return cls(role=ChatRole(data["role"]), text=data["text"])


@dataclass
class SessionLookup:
    """Tagged result of reading a session's history.

    ``UNAVAILABLE`` means the store could not answer, which is not the
    same thing as a session with no history.
    """

    status: SessionStatus
    turns: list[ConversationTurn] = field(default_factory=list)

    @classmethod
    def found(cls, turns: list[ConversationTurn]) -> "SessionLookup":
        return cls(status=SessionStatus.FOUND, turns=turns)

    @classmethod
    def not_found(cls) -> "SessionLookup":
        return cls(status=SessionStatus.NOT_FOUND)

    @classmethod
    def unavailable(cls) -> "SessionLookup":
        return cls(status=SessionStatus.UNAVAILABLE)


@dataclass(frozen=True)
class AnswerFragment:
    """One incremental piece of the generated answer."""

    text: str


@dataclass(frozen=True)
class Citations:
    """Terminal event listing the distinct sources behind an answer."""

    sources: list[str]


ChatEvent = AnswerFragment | Citations


# API request/response models


class ChatRequest(BaseModel):
    """Request to send a chat message.

    Both fields are optional at the schema level so that a missing field
    is reported by the chat pipeline as a client error.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(None, description="The user's question")
    session_id: str | None = Field(
        None,
        alias="sessionId",
        description="Opaque identifier of the conversation",
    )


class ConversationTurnResponse(BaseModel):
    """A stored conversation turn."""

    role: ChatRole
    text: str

    @classmethod
    def from_dataclass(cls, turn: ConversationTurn) -> "ConversationTurnResponse":
        return cls(role=turn.role, text=turn.text)


class SessionHistoryResponse(BaseModel):
    """Stored transcript for a session."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    turns: list[ConversationTurnResponse]
