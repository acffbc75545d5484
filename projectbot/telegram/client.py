"""Telegram Bot API client.

Thin synchronous wrapper around httpx covering the handful of Bot API
methods the bot uses. Every call posts JSON to
``<api_base_url>/bot<token>/<method>`` and unwraps the ``{"ok": ...,
"result": ...}`` envelope. Failures raise TelegramApiError, never
httpx exceptions, so callers handle one error type.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.telegram.org"


class TelegramApiError(Exception):
    """Bot API call failed at the network, HTTP, or envelope level.

    Attributes:
        method: Bot API method name.
        message: Description from the API or the underlying error.
        status_code: HTTP status when a response was received.
    """

    def __init__(self, method: str, message: str, status_code: int | None = None):
        self.method = method
        self.message = message
        self.status_code = status_code
        super().__init__(f"Telegram API error ({method}): {message}")


class TelegramClient:
    """Bot API client bound to one bot token.

    Usage:
        with TelegramClient(token) as client:
            me = client.get_me()
            client.send_message(chat_id, "hello")
    """

    def __init__(
        self,
        token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Bot token issued by BotFather.
            api_base_url: Bot API server root.
            timeout: Default request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        if not token:
            raise ValueError("Telegram bot token is required")
        self._client = httpx.Client(
            base_url=f"{api_base_url.rstrip('/')}/bot{token}/",
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "TelegramClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def call(self, method: str, payload: dict[str, Any] | None = None,
             timeout: float | None = None) -> Any:
        """Invoke a Bot API method and return its ``result``.

        Args:
            method: Bot API method name, e.g. "sendMessage".
            payload: JSON body.
            timeout: Per-request timeout override in seconds.

        Returns:
            The decoded ``result`` field.

        Raises:
            TelegramApiError: On transport failure, non-JSON body, or
                ``ok: false``.
        """
        kwargs: dict[str, Any] = {"json": payload or {}}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            resp = self._client.post(method, **kwargs)
        except httpx.HTTPError as e:
            raise TelegramApiError(method, str(e)) from e

        try:
            data = resp.json()
        except ValueError:
            raise TelegramApiError(
                method, f"invalid JSON response: {resp.text[:300]}", resp.status_code
            ) from None

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise TelegramApiError(
                method, str(description or data), resp.status_code
            )

        return data.get("result")

    # =========================================================================
    # Bot API methods
    # =========================================================================

    def get_me(self) -> dict[str, Any]:
        return self.call("getMe")

    def get_updates(
        self,
        offset: int | None = None,
        timeout: int = 30,
        allowed_updates: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Long-poll for updates.

        Args:
            offset: First update id to return; earlier ones are confirmed.
            timeout: Server-side long-poll timeout in seconds.
            allowed_updates: Update types to receive.

        Returns:
            Update objects, possibly empty.
        """
        payload: dict[str, Any] = {
            "timeout": timeout,
            "allowed_updates": allowed_updates or ["message", "callback_query"],
        }
        if offset is not None:
            payload["offset"] = offset

        # HTTP timeout must outlast the server-side long poll.
        result = self.call("getUpdates", payload, timeout=timeout + 10)
        if not isinstance(result, list):
            return []
        return [u for u in result if isinstance(u, dict)]

    def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self.call("sendMessage", payload)

    def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> bool:
        payload: dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return bool(self.call("answerCallbackQuery", payload))

    def set_webhook(self, url: str, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": ["message", "callback_query"],
        }
        if secret_token:
            payload["secret_token"] = secret_token
        logger.info("Registering webhook: %s", url)
        return bool(self.call("setWebhook", payload))

    def delete_webhook(self) -> bool:
        logger.info("Removing webhook")
        return bool(self.call("deleteWebhook"))
