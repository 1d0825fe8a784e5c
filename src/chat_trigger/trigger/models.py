from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class WebhookRole(StrEnum):
    SETUP = "setup"
    DEFAULT = "default"


@dataclass
class WebhookRequest:
    """Host-agnostic view of an inbound webhook call."""

    method: str
    role: WebhookRole = WebhookRole.DEFAULT
    test: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    chat_url: str = ""

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


@dataclass
class WebhookResponse:
    status: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    media_type: str = "text/plain"
