"""Long-polling update loop.

Updates are fetched with getUpdates and handed to the dispatcher one at
a time, in order. The offset advances past each update before it is
dispatched, so an update that crashes its handler is not redelivered.
"""

import logging
import threading
from collections.abc import Callable

from projectbot.bot.events import CallbackEvent, TextMessageEvent
from projectbot.telegram.client import TelegramApiError, TelegramClient
from projectbot.telegram.updates import parse_update

logger = logging.getLogger(__name__)

INITIAL_BACKOFF_SECONDS = 1.0
MAX_BACKOFF_SECONDS = 30.0

EventHandler = Callable[[TextMessageEvent | CallbackEvent], None]


def run_polling(
    client: TelegramClient,
    handle_event: EventHandler,
    stop_event: threading.Event | None = None,
    poll_timeout: int = 30,
) -> int:
    """Poll for updates until stop_event is set.

    Args:
        client: Bot API client.
        handle_event: Called for every parsed event, usually
            UpdateDispatcher.dispatch.
        stop_event: Set from another thread (or a signal handler) to stop.
        poll_timeout: Server-side long-poll timeout in seconds.

    Returns:
        Number of updates processed.
    """
    stop = stop_event or threading.Event()
    offset: int | None = None
    backoff = INITIAL_BACKOFF_SECONDS
    processed = 0

    logger.info("Polling for updates (timeout=%ss)", poll_timeout)

    while not stop.is_set():
        try:
            updates = client.get_updates(offset=offset, timeout=poll_timeout)
        except TelegramApiError as e:
            logger.warning("getUpdates failed, retrying in %.0fs: %s", backoff, e)
            stop.wait(backoff)
            backoff = min(backoff * 2, MAX_BACKOFF_SECONDS)
            continue

        backoff = INITIAL_BACKOFF_SECONDS

        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                offset = max(offset or 0, update_id + 1)

            event = parse_update(update)
            if event is None:
                continue

            try:
                handle_event(event)
            except Exception:
                logger.exception("Unhandled error processing update %s", update_id)
            processed += 1

            if stop.is_set():
                break

    logger.info("Polling stopped after %d update(s)", processed)
    return processed
