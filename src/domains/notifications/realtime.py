"""Real-time notification delivery.

Connected users subscribe through Server-Sent Events; the dispatcher
publishes each persisted notification to the recipient's queues. Delivery is
best-effort: a user with no open stream simply sees the notification the next
time they list them.
"""
import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator


class NotificationEvent:
    """A notification pushed to a live subscriber."""

    def __init__(self, user_id: uuid.UUID, data: dict[str, Any]):
        self.user_id = user_id
        self.data = data
        self.timestamp = datetime.now(timezone.utc)

    def to_sse(self) -> str:
        """Convert to Server-Sent Event format."""
        payload = {
            **self.data,
            "timestamp": self.timestamp.isoformat(),
        }
        return f"event: notification\ndata: {json.dumps(payload, default=str)}\n\n"


class NotificationBroker:
    """Keeps the live subscriber queues per user."""

    def __init__(self, max_queue_size: int = 100):
        self._subscribers: dict[uuid.UUID, list[asyncio.Queue]] = {}
        self._max_queue_size = max_queue_size

    async def subscribe(self, user_id: uuid.UUID) -> asyncio.Queue:
        """Subscribe to a user's notifications."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.setdefault(user_id, []).append(queue)
        return queue

    async def unsubscribe(self, user_id: uuid.UUID, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue."""
        queues = self._subscribers.get(user_id)
        if not queues:
            return
        if queue in queues:
            queues.remove(queue)
        if not queues:
            del self._subscribers[user_id]

    def subscriber_count(self, user_id: uuid.UUID) -> int:
        return len(self._subscribers.get(user_id, []))

    async def publish(self, event: NotificationEvent) -> int:
        """Push an event to every open stream of the recipient.

        Returns:
            Number of queues the event was delivered to
        """
        delivered = 0
        for queue in list(self._subscribers.get(event.user_id, [])):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                continue  # slow consumer; it will catch up from the list endpoint
        return delivered


# Global broker instance
notification_broker = NotificationBroker()


async def stream_notifications(
    user_id: uuid.UUID,
    broker: NotificationBroker | None = None,
    heartbeat_seconds: float = 30.0,
) -> AsyncGenerator[str, None]:
    """Stream a user's notifications as Server-Sent Events.

    Yields:
        SSE formatted strings
    """
    broker = broker or notification_broker
    queue = await broker.subscribe(user_id)

    try:
        yield ": connected\n\n"
        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
                yield event.to_sse()
            except asyncio.TimeoutError:
                # Keep the connection alive through proxies
                yield ": heartbeat\n\n"
    finally:
        await broker.unsubscribe(user_id, queue)
