"""Tests for notification dispatch and the real-time broker."""
import asyncio
import json
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DispatchError
from src.domains.notifications.dispatcher import NotificationDispatcher
from src.domains.notifications.models import Notification, NotificationType
from src.domains.notifications.realtime import (
    NotificationBroker,
    NotificationEvent,
    stream_notifications,
)
from src.domains.notifications.schemas import NotificationAlert
from src.domains.users.models import User


def _alert(**overrides) -> NotificationAlert:
    data = {
        "notification_type": NotificationType.MISSED_WORKOUT,
        "title": "Client missed a workout",
        "body": "Carla did not complete the workout",
        "link": "/trainer/clients",
    }
    data.update(overrides)
    return NotificationAlert(**data)


def _failing_session() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
    db.rollback = AsyncMock()
    return db


class TestDispatch:
    """Tests for NotificationDispatcher.dispatch."""

    @pytest.mark.asyncio
    async def test_persists_and_pushes(self, db_session: AsyncSession, trainer: User):
        broker = NotificationBroker()
        queue = await broker.subscribe(trainer.id)
        dispatcher = NotificationDispatcher(db_session, broker=broker)

        notification = await dispatcher.dispatch(trainer.id, _alert())

        stored = await db_session.get(Notification, notification.id)
        assert stored is not None
        assert stored.is_read is False

        event = queue.get_nowait()
        assert event.user_id == trainer.id
        assert event.data["notification_id"] == str(notification.id)
        assert event.data["type"] == "missed_workout"

    @pytest.mark.asyncio
    async def test_store_failure_raises_dispatch_error(self):
        db = _failing_session()
        dispatcher = NotificationDispatcher(db, broker=NotificationBroker())

        with pytest.raises(DispatchError):
            await dispatcher.dispatch(uuid.uuid4(), _alert())

        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_push_failure_is_swallowed(self, db_session: AsyncSession, trainer: User):
        broker = NotificationBroker()
        broker.publish = AsyncMock(side_effect=RuntimeError("broker gone"))
        dispatcher = NotificationDispatcher(db_session, broker=broker)

        notification = await dispatcher.dispatch(trainer.id, _alert())

        assert notification.id is not None

    @pytest.mark.asyncio
    async def test_notify_never_raises(self):
        dispatcher = NotificationDispatcher(_failing_session(), broker=NotificationBroker())

        assert await dispatcher.notify(uuid.uuid4(), _alert()) is None


class TestNotificationBroker:
    """Tests for the in-process broker."""

    @pytest.mark.asyncio
    async def test_publish_reaches_every_stream_of_user(self):
        broker = NotificationBroker()
        user_id = uuid.uuid4()
        first = await broker.subscribe(user_id)
        second = await broker.subscribe(user_id)
        stranger = await broker.subscribe(uuid.uuid4())

        delivered = await broker.publish(NotificationEvent(user_id, {"title": "hi"}))

        assert delivered == 2
        assert first.qsize() == 1
        assert second.qsize() == 1
        assert stranger.empty()

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self):
        broker = NotificationBroker()

        assert await broker.publish(NotificationEvent(uuid.uuid4(), {})) == 0

    @pytest.mark.asyncio
    async def test_full_queue_is_skipped(self):
        broker = NotificationBroker(max_queue_size=1)
        user_id = uuid.uuid4()
        await broker.subscribe(user_id)

        assert await broker.publish(NotificationEvent(user_id, {"n": 1})) == 1
        assert await broker.publish(NotificationEvent(user_id, {"n": 2})) == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_cleans_up(self):
        broker = NotificationBroker()
        user_id = uuid.uuid4()
        queue = await broker.subscribe(user_id)

        await broker.unsubscribe(user_id, queue)

        assert broker.subscriber_count(user_id) == 0

    def test_event_sse_format(self):
        event = NotificationEvent(uuid.uuid4(), {"title": "Workout summary"})

        sse = event.to_sse()

        assert sse.startswith("event: notification\ndata: ")
        assert sse.endswith("\n\n")
        payload = json.loads(sse.split("data: ", 1)[1])
        assert payload["title"] == "Workout summary"
        assert "timestamp" in payload


class TestStreamNotifications:

    @pytest.mark.asyncio
    async def test_stream_yields_published_events(self):
        broker = NotificationBroker()
        user_id = uuid.uuid4()
        stream = stream_notifications(user_id, broker=broker, heartbeat_seconds=5)

        assert await stream.__anext__() == ": connected\n\n"
        assert broker.subscriber_count(user_id) == 1

        await broker.publish(NotificationEvent(user_id, {"title": "New plan"}))
        chunk = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert "New plan" in chunk

        await stream.aclose()
        assert broker.subscriber_count(user_id) == 0

    @pytest.mark.asyncio
    async def test_stream_heartbeat(self):
        broker = NotificationBroker()
        stream = stream_notifications(uuid.uuid4(), broker=broker, heartbeat_seconds=0.01)

        await stream.__anext__()
        assert await stream.__anext__() == ": heartbeat\n\n"

        await stream.aclose()
