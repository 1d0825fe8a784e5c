from typing import Iterable

from ..trigger.settings import Feature
from .models import Message, Role, now_iso


def _add_action(actions: list[str], action: str) -> None:
    if action not in actions:
        actions.append(action)


def annotate(messages: Iterable[Message], features: Iterable[Feature]) -> list[Message]:
    """Apply feature-driven render hints and actions to copies of ``messages``."""
    features = set(features)
    annotated = []
    for message in messages:
        metadata = dict(message.metadata)
        actions = list(message.actions or [])
        timestamp = message.timestamp

        if Feature.TIMESTAMPS in features and not timestamp:
            timestamp = now_iso()
        if Feature.MARKDOWN in features:
            metadata["renderMarkdown"] = True
        if Feature.CODE_HIGHLIGHT in features:
            metadata["highlightCode"] = True
        if Feature.COPY in features:
            _add_action(actions, "copy")
        if Feature.PIN_MESSAGES in features:
            _add_action(actions, "pin")
        if Feature.REGENERATE in features and message.role == Role.ASSISTANT:
            _add_action(actions, "regenerate")

        annotated.append(
            message.model_copy(
                update={"metadata": metadata, "actions": actions or None, "timestamp": timestamp}
            )
        )
    return annotated
