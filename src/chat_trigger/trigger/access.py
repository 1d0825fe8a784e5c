"""Authentication and CORS checks for inbound webhook calls.

Both checks are pure functions of the configuration, the request headers and
the credential pair looked up by the caller.
"""

import base64
import binascii
import hmac
import logging
from dataclasses import dataclass, field

from ..config import AUTH_REALM
from ..errors import AccessDenied, AuthRejected, AuthRequired, OriginRejected
from .credentials import BasicCredentials
from .models import WebhookRequest, WebhookResponse
from .settings import Authentication, ChatConfiguration

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


@dataclass
class AccessDecision:
    cors_headers: dict[str, str] = field(default_factory=dict)
    error: AccessDenied | None = None

    @property
    def allowed(self) -> bool:
        return self.error is None

    def to_response(self) -> WebhookResponse:
        if self.error is None:
            raise ValueError("Access was allowed; there is no error response")
        return WebhookResponse(
            status=self.error.status,
            body=self.error.message,
            headers={**self.cors_headers, **self.error.headers},
        )


def parse_origins(allowed_origins: str) -> list[str]:
    return [o.strip() for o in allowed_origins.split(",") if o.strip()]


def cors_headers(config: ChatConfiguration, origin: str | None) -> dict[str, str]:
    """Response CORS headers; the allow-origin header is omitted for unlisted origins."""
    headers = {}
    allowed = config.allowed_origins.strip()
    if not allowed or allowed == "*":
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in parse_origins(allowed):
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
    return headers


def check_origin(config: ChatConfiguration, origin: str | None) -> None:
    allowed = config.allowed_origins.strip()
    if not allowed or allowed == "*" or not origin:
        return
    if origin not in parse_origins(allowed):
        raise OriginRejected(f"Origin {origin} is not allowed")


def parse_basic_auth(header: str | None) -> tuple[str, str]:
    """Return ``(username, password)`` from a Basic Authorization header."""
    challenge = {"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'}
    if not header:
        raise AuthRequired("Authorization required", challenge)

    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "basic" or not token.strip():
        raise AuthRequired("Authorization required", challenge)

    try:
        decoded = base64.b64decode(token.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise AuthRequired("Malformed authorization header", challenge) from None

    username, sep, password = decoded.partition(":")
    if not sep:
        raise AuthRequired("Malformed authorization header", challenge)
    return username, password


def check_credentials(header: str | None, expected: BasicCredentials | None) -> None:
    username, password = parse_basic_auth(header)
    if expected is None:
        logger.error("Basic auth is enabled but no credentials are configured")
        raise AuthRejected("Authorization data is wrong!")

    user_ok = hmac.compare_digest(username.encode(), expected.username.encode())
    password_ok = hmac.compare_digest(password.encode(), expected.password.encode())
    if not (user_ok & password_ok):
        raise AuthRejected("Authorization data is wrong!")


def check_access(
    config: ChatConfiguration,
    request: WebhookRequest,
    credentials: BasicCredentials | None = None,
) -> AccessDecision:
    origin = request.header("origin")
    decision = AccessDecision(cors_headers=cors_headers(config, origin))
    try:
        if config.authentication == Authentication.BASIC_AUTH:
            check_credentials(request.header("authorization"), credentials)
        check_origin(config, origin)
    except AccessDenied as e:
        logger.info("Rejected %s request: %s (%d)", request.method, e.message, e.status)
        decision.error = e
    return decision
