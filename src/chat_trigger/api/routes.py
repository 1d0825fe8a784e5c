import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from ..config import PUBLIC_PREFIX, SETUP_SUFFIX, TEST_PREFIX
from ..trigger.dispatcher import DispatchResult
from ..trigger.models import WebhookRequest, WebhookRole
from ..trigger.settings import resolve_configuration

logger = logging.getLogger(__name__)
router = APIRouter()

# Every method reaches the dispatcher so it can answer 405 itself
WEBHOOK_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"]


@router.get("/health")
async def health():
    return {"status": "ok"}


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def _to_response(result: DispatchResult) -> Response:
    if result.item is not None:
        return JSONResponse(result.item.to_transport(), headers=result.headers)
    response = result.response
    return Response(
        content=response.body,
        status_code=response.status,
        headers=response.headers,
        media_type=response.media_type,
    )


async def _handle(request: Request, prefix: str, webhook_path: str, role: WebhookRole) -> Response:
    if prefix not in (PUBLIC_PREFIX, TEST_PREFIX):
        raise HTTPException(status_code=404, detail="Webhook not found")

    config = resolve_configuration(request.app.state.parameters)
    if webhook_path != config.webhook_path:
        raise HTTPException(status_code=404, detail="Webhook not found")

    webhook_request = WebhookRequest(
        method=request.method,
        role=role,
        test=prefix == TEST_PREFIX,
        headers=dict(request.headers),
        query=dict(request.query_params),
        body=await _read_body(request),
        chat_url=str(request.url_for("setup_webhook", prefix=prefix, webhook_path=webhook_path)),
    )
    try:
        result = await request.app.state.dispatcher.dispatch(webhook_request, config)
    except Exception:
        logger.exception("Error handling %s %s", request.method, request.url.path)
        raise
    return _to_response(result)


@router.api_route(f"/{{prefix}}/{{webhook_path}}/{SETUP_SUFFIX}", methods=WEBHOOK_METHODS)
async def setup_webhook(prefix: str, webhook_path: str, request: Request):
    return await _handle(request, prefix, webhook_path, WebhookRole.SETUP)


@router.api_route("/{prefix}/{webhook_path}", methods=WEBHOOK_METHODS)
async def message_webhook(prefix: str, webhook_path: str, request: Request):
    return await _handle(request, prefix, webhook_path, WebhookRole.DEFAULT)
