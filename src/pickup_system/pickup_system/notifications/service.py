from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from datetime import datetime
from typing import Optional, Sequence

from ..children.model import Child, Guardian
from ..core.constants import DEFAULT_FEED_LIMIT
from ..core.enums import ActionKind
from ..core.exceptions import ValidationError
from .hub import NotificationHub
from .model import FeedSummary, Notification
from .repository import NotificationRepository
from .sms import SmsSender

logger = logging.getLogger(__name__)

_TEMPLATES = {
    ActionKind.CHECK_IN: "{name} has been checked in at {time}.",
    ActionKind.PICK_UP: "{name} has been picked up at {time}.",
}


class NotificationService:
    """Fan-out of committed transitions: stored notice, live push, guardian SMS.

    Nothing here can undo a transition. Storage, push and SMS failures are
    logged and swallowed.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        hub: NotificationHub,
        sms: SmsSender,
        *,
        sms_executor: Optional[Executor] = None,
        feed_limit: int = DEFAULT_FEED_LIMIT,
    ):
        self._notifications = notifications
        self._hub = hub
        self._sms = sms
        self._sms_executor = sms_executor
        self._feed_limit = int(feed_limit)

    @property
    def hub(self) -> NotificationHub:
        return self._hub

    @staticmethod
    def build_message(action: ActionKind, child_name: str, formatted_time: str) -> str:
        return _TEMPLATES[action].format(name=child_name, time=formatted_time)

    def dispatch(
        self,
        *,
        action: ActionKind,
        child: Child,
        guardian: Guardian,
        at: datetime,
        formatted_time: str,
    ) -> str:
        """Fan out one committed transition. Returns the message text."""

        message = self.build_message(action, child.name, formatted_time)

        try:
            self._notifications.create(
                type=action,
                message=message,
                child_id=child.child_id,
                guardian_id=guardian.guardian_id,
                created_at=at,
            )
        except Exception:
            logger.exception("Could not store %s notification for child %s", action.value, child.child_id)
        else:
            self.publish_snapshot()

        if guardian.phone:
            self._send_sms(guardian.phone, message)
        return message

    def _send_sms(self, to: str, message: str) -> None:
        if self._sms_executor is None:
            self._deliver_sms(to, message)
            return
        try:
            future = self._sms_executor.submit(self._deliver_sms, to, message)
        except RuntimeError:
            logger.warning("SMS executor is shut down; dropping message to %s", to)
            return
        future.add_done_callback(self._log_sms_cancelled)

    def _deliver_sms(self, to: str, message: str) -> bool:
        try:
            ok = bool(self._sms.send(to, message))
        except Exception:
            logger.exception("SMS delivery to %s raised", to)
            return False
        if not ok:
            logger.warning("SMS delivery to %s failed", to)
        return ok

    @staticmethod
    def _log_sms_cancelled(future: Future) -> None:
        if future.cancelled():
            logger.warning("SMS delivery cancelled")

    # ----- feed -----

    def list_feed(self, *, type: Optional[ActionKind] = None, limit: Optional[int] = None) -> Sequence[Notification]:
        return self._notifications.list_recent(type=type, limit=int(limit or self._feed_limit))

    def summary(self) -> FeedSummary:
        return FeedSummary(
            total=self._notifications.count(),
            unread=self._notifications.count(unread_only=True),
            check_ins=self._notifications.count(type=ActionKind.CHECK_IN),
            pick_ups=self._notifications.count(type=ActionKind.PICK_UP),
        )

    def snapshot(self) -> list[dict]:
        return [n.to_dict() for n in self._notifications.list_recent(limit=self._feed_limit)]

    def publish_snapshot(self) -> None:
        try:
            payload = self.snapshot()
            self._hub.publish(payload)
        except Exception:
            logger.exception("Could not publish notifications to live streams")

    # ----- read state -----

    def mark_read(self, notification_id: int) -> None:
        if not self._notifications.mark_read(int(notification_id)):
            raise ValidationError("Notification not found")
        self.publish_snapshot()

    def mark_all_read(self) -> int:
        changed = self._notifications.mark_all_read()
        self.publish_snapshot()
        return changed

    def clear_all(self) -> int:
        removed = self._notifications.delete_all()
        logger.info("Cleared %d notifications", removed)
        self.publish_snapshot()
        return removed
