"""
Notification Channel.

In-process publish/subscribe for operation notifications. The state manager
publishes; UI code subscribes with a plain function or a coroutine function.

Subscriber errors are logged and swallowed; publishing never raises.

Usage:
    from notekeeper.events.channel import NotificationChannel

    channel = NotificationChannel()
    channel.subscribe(lambda event: print(event.title))
    await channel.publish(Notification.success("create", note_id="abc"))
"""

import inspect
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Union

from notekeeper.core.logging import get_logger
from notekeeper.events.schemas import Notification

logger = get_logger(__name__)

Subscriber = Callable[[Notification], Union[None, Awaitable[None]]]


class NotificationChannel:
    """Fan-out of notifications to subscribers, with a bounded history."""

    def __init__(self, history_size: int = 100) -> None:
        self._subscribers: list[Subscriber] = []
        self._history: deque[Notification] = deque(maxlen=history_size)

    @property
    def history(self) -> list[Notification]:
        """Most recent notifications, oldest first."""
        return list(self._history)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a subscriber.

        Returns:
            A function that removes the subscription when called
        """
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def publish(self, notification: Notification) -> None:
        """Record the notification and deliver it to every subscriber."""
        self._history.append(notification)
        logger.debug(
            "Notification published",
            extra={
                "operation": notification.operation,
                "status": notification.status,
                "note_id": notification.note_id,
            },
        )

        for callback in list(self._subscribers):
            try:
                result = callback(notification)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Notification subscriber failed",
                    extra={"event_id": notification.event_id, "error": str(e)},
                )
