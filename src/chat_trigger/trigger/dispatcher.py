import logging
from dataclasses import dataclass, field

from ..attachments.codec import decode_attachments, extract_files, successful
from ..conversation.assembler import assemble, coerce_body
from ..errors import AttachmentValidationError, UnsupportedMethod
from ..interface.page import render_chat_page
from ..output.formatter import WorkflowItem, build_item
from .access import check_access, cors_headers
from .credentials import CredentialProvider, StaticCredentialProvider
from .models import WebhookRequest, WebhookResponse, WebhookRole
from .settings import AccessMode, AttachmentPolicy, Authentication, ChatConfiguration

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Either a direct HTTP response or a workflow item for the downstream step."""

    response: WebhookResponse | None = None
    item: WorkflowItem | None = None
    headers: dict[str, str] = field(default_factory=dict)


class RequestDispatcher:
    """Routes one webhook call to the page renderer or the message pipeline."""

    def __init__(self, credentials: CredentialProvider | None = None) -> None:
        self._credentials = credentials or StaticCredentialProvider()

    async def dispatch(self, request: WebhookRequest, config: ChatConfiguration) -> DispatchResult:
        method = request.method.upper()
        try:
            if method == "OPTIONS":
                return self._preflight(request, config)
            if method == "GET" and self._serves_page(request, config):
                return self._render_page(request, config)
            if method == "POST":
                return await self._process_message(request, config)
            raise UnsupportedMethod(method)
        except UnsupportedMethod as e:
            logger.info("Unsupported %s on %s webhook", e.method, request.role.value)
            return DispatchResult(response=WebhookResponse(status=e.status, body="Method not allowed"))
        except AttachmentValidationError as e:
            return DispatchResult(
                response=WebhookResponse(
                    status=400,
                    body=f"Invalid attachment {e.name}: {e.reason}",
                    headers=cors_headers(config, request.header("origin")),
                )
            )

    def _serves_page(self, request: WebhookRequest, config: ChatConfiguration) -> bool:
        return request.role == WebhookRole.SETUP and config.mode == AccessMode.HOSTED_CHAT

    def _preflight(self, request: WebhookRequest, config: ChatConfiguration) -> DispatchResult:
        return DispatchResult(
            response=WebhookResponse(
                status=200, headers=cors_headers(config, request.header("origin"))
            )
        )

    def _render_page(self, request: WebhookRequest, config: ChatConfiguration) -> DispatchResult:
        logger.debug("Serving chat page on %s URL", "test" if request.test else "production")
        return DispatchResult(
            response=WebhookResponse(
                status=200,
                body=render_chat_page(config),
                headers=cors_headers(config, request.header("origin")),
                media_type="text/html",
            )
        )

    async def _process_message(
        self, request: WebhookRequest, config: ChatConfiguration
    ) -> DispatchResult:
        credentials = None
        if config.authentication == Authentication.BASIC_AUTH:
            credentials = await self._credentials.get_credentials()

        decision = check_access(config, request, credentials)
        if not decision.allowed:
            return DispatchResult(response=decision.to_response())

        fields, _ = coerce_body(request.body)
        context = assemble(request.body, config)

        outcomes = decode_attachments(
            extract_files(fields), config.allowed_file_types, config.max_file_size_mb
        )
        if config.attachment_policy == AttachmentPolicy.STRICT:
            for outcome in outcomes:
                if isinstance(outcome.error, AttachmentValidationError):
                    raise outcome.error
        context.attachments = successful(outcomes)

        logger.info(
            "Message received for session %s (%d messages, %d/%d attachments)",
            context.session_id,
            len(context.messages),
            len(context.attachments),
            len(outcomes),
        )
        item = build_item(context, request, config)
        return DispatchResult(item=item, headers=decision.cors_headers)
