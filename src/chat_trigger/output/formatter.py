import re
from dataclasses import dataclass, field

from ..attachments.codec import BinaryEntry, strip_file_data, to_binary
from ..config import DEFAULT_MAX_HEIGHT_PX
from ..conversation.models import ConversationContext, now_iso
from ..trigger.models import WebhookRequest
from ..trigger.settings import AccessMode, ChatConfiguration, OutputFormat
from .escaping import escape_braces

REDACTED = "[redacted]"
_REDACTED_HEADERS = {"authorization", "cookie"}


@dataclass
class WorkflowItem:
    """What the trigger hands to the downstream step: JSON plus binary side-channel."""

    json: dict
    binary: dict[str, BinaryEntry] = field(default_factory=dict)

    def to_transport(self) -> dict:
        payload: dict = {"json": self.json}
        if self.binary:
            payload["binary"] = {key: entry.to_transport() for key, entry in self.binary.items()}
        return payload


def _max_height_px(value: str) -> int:
    digits = re.sub(r"\D", "", value)
    return int(digits) if digits else DEFAULT_MAX_HEIGHT_PX


def _client_ip(request: WebhookRequest) -> str | None:
    return request.header("x-forwarded-for") or request.header("x-real-ip")


def _redact(headers: dict[str, str]) -> dict[str, str]:
    return {k: (REDACTED if k.lower() in _REDACTED_HEADERS else v) for k, v in headers.items()}


def _agent_envelope(
    context: ConversationContext,
    request: WebhookRequest,
    config: ChatConfiguration,
    timestamp: str,
) -> dict:
    output = {
        "chatInput": context.user_message,
        "sessionId": context.session_id,
        "threadId": context.thread_id,
        "messages": [m.to_output() for m in context.messages],
        "messageCount": len(context.messages),
        "timestamp": timestamp,
    }
    if context.attachments:
        output["hasFiles"] = True
        output["fileCount"] = len(context.attachments)
        output["fileNames"] = [a.name for a in context.attachments]
    if config.mode == AccessMode.HOSTED_CHAT and request.chat_url:
        output["chatUrl"] = request.chat_url
        output["_chatAccess"] = f"Open chat: {request.chat_url}"
    return output


def _detailed_envelope(
    context: ConversationContext,
    request: WebhookRequest,
    config: ChatConfiguration,
    timestamp: str,
) -> dict:
    output = _agent_envelope(context, request, config, timestamp)
    output.update(
        {
            "userMessage": context.user_message,
            "chatMode": config.mode.value,
            "publicAvailable": config.public_available,
            "authentication": config.authentication.value,
            "allowedOrigins": config.allowed_origins,
            "initialMessage": config.initial_message,
            "displayMode": config.display_mode.value,
            "features": [f.value for f in config.features],
            "theme": config.style.theme.value,
            "compactMode": config.style.compact_mode,
            "maxHeight": _max_height_px(config.style.max_height),
            "style": config.style.model_dump(mode="json"),
            "context": {
                "conversation_length": len(context.messages),
                "last_interaction": timestamp,
                "user_agent": request.header("user-agent"),
                "ip_address": _client_ip(request),
            },
            "raw": {
                "headers": _redact(request.headers),
                "query": request.query,
                "body": strip_file_data(request.body),
            },
        }
    )
    return output


def build_item(
    context: ConversationContext,
    request: WebhookRequest,
    config: ChatConfiguration,
) -> WorkflowItem:
    """Shape the conversation into the configured envelope and attach binaries.

    The envelope is brace-escaped as a whole so a downstream template engine
    sees literal text; attachment bytes never enter it.
    """
    timestamp = now_iso()
    if config.output_format == OutputFormat.DETAILED:
        envelope = _detailed_envelope(context, request, config, timestamp)
    else:
        envelope = _agent_envelope(context, request, config, timestamp)

    envelope = escape_braces(envelope)

    binary, keys = to_binary(context.attachments)
    if keys:
        envelope["binaryPropertyNames"] = keys
    return WorkflowItem(json=envelope, binary=binary)
