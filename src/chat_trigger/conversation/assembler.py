import json
import logging
from typing import Any, Iterable

from ..trigger.settings import ChatConfiguration, Feature
from .annotator import annotate
from .identity import generate_session_id, generate_thread_id, resolve_identifier
from .models import ConversationContext, Message, Role, now_iso
from .sanitize import sanitize_message

logger = logging.getLogger(__name__)

# Order is part of the request contract: the first truthy alias wins.
MESSAGE_ALIASES = ("message", "text", "content", "chatInput")
SESSION_KEYS = ("session_id", "sessionId")
THREAD_KEYS = ("thread_id", "threadId")


def coerce_body(body: Any) -> tuple[dict, str | None]:
    """Split a request body into its mapping part and, for plain-text bodies, the text."""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            parsed = json.loads(body)
        except ValueError:
            return {}, body
        if isinstance(parsed, dict):
            return parsed, None
        if isinstance(parsed, str):
            return {}, parsed
        if isinstance(parsed, (int, float)):
            return {}, body
        return {}, None
    if isinstance(body, dict):
        return body, None
    return {}, None


def extract_user_message(body: Any) -> str:
    fields, text = coerce_body(body)
    if text is not None:
        return sanitize_message(text)
    for alias in MESSAGE_ALIASES:
        value = fields.get(alias)
        if value:
            return sanitize_message(value)
    return ""


def _role(value: Any) -> Role:
    try:
        return Role(value)
    except (TypeError, ValueError):
        return Role.USER


def extract_messages(body: Any) -> list[Message]:
    """Normalize the caller-supplied history; entries that are not objects are dropped."""
    fields, _ = coerce_body(body)
    raw = fields.get("messages")
    if not isinstance(raw, list):
        return []

    messages = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.debug("Dropping history entry %d: not an object", index)
            continue
        timestamp = item.get("timestamp")
        metadata = item.get("metadata")
        messages.append(
            Message(
                role=_role(item.get("role") or Role.USER),
                content=sanitize_message(item.get("content") or item.get("message") or ""),
                timestamp=timestamp if isinstance(timestamp, str) and timestamp else now_iso(),
                metadata=metadata if isinstance(metadata, dict) else {},
            )
        )
    return messages


def apply_thread_options(messages: list[Message], config: ChatConfiguration) -> list[Message]:
    """Prepend the configured system prompt and trim history to ``max_messages``."""
    if config.system_prompt and messages and not any(m.role == Role.SYSTEM for m in messages):
        messages = [
            Message(role=Role.SYSTEM, content=config.system_prompt, timestamp=now_iso()),
            *messages,
        ]

    limit = config.max_messages
    if limit and len(messages) > limit:
        system = [m for m in messages if m.role == Role.SYSTEM]
        rest = [m for m in messages if m.role != Role.SYSTEM]
        keep = max(limit - len(system), 0)
        messages = system + (rest[-keep:] if keep else [])
    return messages


def assemble(
    body: Any,
    config: ChatConfiguration,
    features: Iterable[Feature] | None = None,
) -> ConversationContext:
    """Rebuild the conversation for one request.

    Never raises on malformed input: missing or garbage fields fall back to
    empty values or freshly generated identifiers.
    """
    fields, _ = coerce_body(body)
    if features is None:
        features = config.active_features(fields.get("features"))

    user_message = extract_user_message(body)
    session_id = resolve_identifier(fields, *SESSION_KEYS) or generate_session_id()
    thread_id = resolve_identifier(fields, *THREAD_KEYS) or generate_thread_id()

    messages = extract_messages(body)
    if user_message:
        messages.append(
            Message(
                role=Role.USER,
                content=user_message,
                metadata={
                    "session_id": session_id,
                    "thread_id": thread_id,
                    "source": config.message_source,
                },
            )
        )

    messages = apply_thread_options(messages, config)
    messages = annotate(messages, features)
    logger.debug(
        "Assembled %d messages for session %s thread %s", len(messages), session_id, thread_id
    )
    return ConversationContext(
        session_id=session_id,
        thread_id=thread_id,
        user_message=user_message,
        messages=messages,
    )
