from __future__ import annotations

from services.logging import setup_logging
from services.alarms import config
from services.alarms.models import (
    AlarmRequest,
    Intent,
    Notification,
    NotificationDefaults,
    NotificationPriority,
)
from services.alarms.platform import AlarmContext

TAG = __name__
logger = setup_logging()


def build_notification(request: AlarmRequest) -> Notification:
    return Notification(
        channel_id=config.CHANNEL_ID,
        content_title=request.title,
        content_text=request.body,
        small_icon=config.SMALL_ICON,
        priority=NotificationPriority.HIGH,
        auto_cancel=True,
        vibrate=config.VIBRATION_PATTERN,
        defaults=NotificationDefaults.ALL,
    )


class AlarmReceiver:
    """Invoked by the alarm service when a registration fires."""

    def on_receive(self, context: AlarmContext, intent: Intent) -> None:
        if intent.action != config.NOTIFICATION_ACTION:
            logger.bind(tag=TAG).debug(f"Ignoring broadcast {intent.action!r}")
            return
        request = AlarmRequest.from_intent(intent)
        logger.bind(tag=TAG).info(
            f"Alarm received: ID={request.id}, title={request.title}"
        )
        self.show_notification(context, request)

    def show_notification(self, context: AlarmContext, request: AlarmRequest) -> None:
        try:
            notification = build_notification(request)
            context.notification_manager.notify(request.id, notification)
            logger.bind(tag=TAG).info(f"Notification shown: ID={request.id}")
        except Exception as exc:
            logger.bind(tag=TAG).error(
                f"Failed to show notification {request.id}: {exc!r}"
            )
