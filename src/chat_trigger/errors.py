class ChatTriggerError(Exception):
    """Base class for errors raised by the chat trigger."""


class AccessDenied(ChatTriggerError):
    status = 403

    def __init__(self, message: str, headers: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers or {}


class AuthRequired(AccessDenied):
    """No usable Authorization header was sent."""

    status = 401


class AuthRejected(AccessDenied):
    """Credentials were sent but do not match."""

    status = 403


class OriginRejected(AccessDenied):
    """The request Origin is not on the allow-list."""

    status = 403


class UnsupportedMethod(ChatTriggerError):
    status = 405

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not allowed: {method}")
        self.method = method


class AttachmentInvalid(ChatTriggerError):
    def __init__(self, index: int, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.index = index
        self.name = name
        self.reason = reason


class AttachmentDecodeError(AttachmentInvalid):
    """Payload missing, malformed, or not valid base64."""


class AttachmentValidationError(AttachmentInvalid):
    """Payload decoded but violates the type or size policy."""
