from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from ..attachments.codec import Attachment


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    role: Role = Role.USER
    content: str
    timestamp: str | None = None
    metadata: dict[str, Any] = {}
    actions: list[str] | None = None

    def to_output(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class ConversationContext:
    """Everything reconstructed from one request body; nothing outlives the request."""

    session_id: str
    thread_id: str
    user_message: str
    messages: list[Message] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
