"""Event loop plumbing for synchronous Lambda entry points."""

import asyncio
from typing import Any, Awaitable, Callable

from formrelay.services.notification_dispatcher import NotificationDispatcher


def run_request(
    main: Callable[[], Awaitable[dict[str, Any]]],
    dispatcher: NotificationDispatcher | None = None,
) -> dict[str, Any]:
    """Run one request on a fresh event loop.

    The response is computed first; background notifications started by the
    request are drained afterwards, so their outcome cannot change it.
    """
    loop = asyncio.new_event_loop()
    try:
        response = loop.run_until_complete(main())
        if dispatcher is not None:
            loop.run_until_complete(dispatcher.drain())
    finally:
        loop.run_until_complete(loop.shutdown_default_executor())
        loop.close()
    return response
