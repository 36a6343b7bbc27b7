"""Notification dispatch: persist a notification, then push it live.

Persistence failures raise DispatchError so batch callers (the compliance
sweep) can log and move on per recipient. Live delivery is fire-and-forget:
its failures are logged and never reach the caller.
"""
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DispatchError
from src.domains.notifications.models import Notification
from src.domains.notifications.realtime import (
    NotificationBroker,
    NotificationEvent,
    notification_broker,
)
from src.domains.notifications.schemas import NotificationAlert

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Deliver structured alerts to users."""

    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.broker = broker or notification_broker

    async def dispatch(self, recipient_id: uuid.UUID, alert: NotificationAlert) -> Notification:
        """Persist the notification and attempt real-time delivery.

        Args:
            recipient_id: User receiving the notification
            alert: Type, title, body, link and optional sender

        Returns:
            The persisted Notification

        Raises:
            DispatchError: If the notification could not be stored
        """
        notification = Notification(
            user_id=recipient_id,
            sender_id=alert.sender_id,
            notification_type=alert.notification_type,
            title=alert.title,
            body=alert.body,
            link=alert.link,
        )

        try:
            self.db.add(notification)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DispatchError(f"Could not store notification for {recipient_id}: {e}") from e

        await self._push(notification)
        return notification

    async def notify(self, recipient_id: uuid.UUID, alert: NotificationAlert) -> Notification | None:
        """Dispatch without raising; used where the caller's work is already done."""
        try:
            return await self.dispatch(recipient_id, alert)
        except DispatchError as e:
            logger.warning("Notification dispatch failed for %s: %s", recipient_id, e)
            return None

    async def _push(self, notification: Notification) -> None:
        try:
            delivered = await self.broker.publish(
                NotificationEvent(
                    user_id=notification.user_id,
                    data={
                        "notification_id": str(notification.id),
                        "type": notification.notification_type.value,
                        "title": notification.title,
                        "message": notification.body,
                        "link": notification.link,
                    },
                )
            )
            if delivered:
                logger.debug("Pushed notification %s to %d stream(s)", notification.id, delivered)
        except Exception as e:
            logger.warning("Real-time delivery failed for notification %s: %s", notification.id, e)
