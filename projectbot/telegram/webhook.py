"""FastAPI application receiving Telegram webhook updates.

Telegram echoes the secret registered with setWebhook in the
X-Telegram-Bot-Api-Secret-Token header; requests without a matching
value are rejected. Handling runs in the threadpool under a lock, which
keeps event processing strictly sequential.
"""

import hmac
import logging
import threading

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from projectbot.bot.events import CallbackEvent, TextMessageEvent
from projectbot.telegram.polling import EventHandler
from projectbot.telegram.updates import parse_update

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def secret_matches(expected: str | None, provided: str | None) -> bool:
    """Constant-time secret comparison; no expected secret means no check."""
    if not expected:
        return True
    if provided is None:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())


def create_webhook_app(
    handle_event: EventHandler,
    path: str = "/telegram/webhook",
    secret_token: str | None = None,
) -> FastAPI:
    """Build the webhook application.

    Args:
        handle_event: Called for every parsed event.
        path: Route Telegram posts updates to.
        secret_token: Expected secret header value, or None to skip.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(title="Project Bot Webhook", version="0.1.0")
    lock = threading.Lock()

    if not secret_token:
        logger.warning("Webhook secret token not configured; requests are not verified.")

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "healthy"}

    @app.post(path)
    async def receive_update(request: Request) -> JSONResponse:
        if not secret_matches(secret_token, request.headers.get(SECRET_HEADER)):
            logger.warning("Rejected webhook request with bad secret token")
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})

        try:
            update = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"detail": "Invalid JSON"})

        if not isinstance(update, dict):
            return JSONResponse(status_code=400, content={"detail": "Invalid update"})

        event = parse_update(update)
        if event is not None:
            await run_in_threadpool(_handle_locked, event)

        return JSONResponse(content={"ok": True})

    def _handle_locked(event: TextMessageEvent | CallbackEvent) -> None:
        with lock:
            try:
                handle_event(event)
            except Exception:
                logger.exception("Unhandled error processing webhook update")

    return app
