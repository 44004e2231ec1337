from __future__ import annotations

from services.logging import setup_logging
from services.alarms import config
from services.alarms.models import Importance, NotificationChannel
from services.alarms.platform import AlarmContext

TAG = __name__
logger = setup_logging()

REMINDER_CHANNEL = NotificationChannel(
    id=config.CHANNEL_ID,
    name=config.CHANNEL_NAME,
    importance=Importance.HIGH,
    description=config.CHANNEL_DESCRIPTION,
    vibration_enabled=True,
    lights_enabled=True,
)


def create_notification_channel(context: AlarmContext) -> None:
    if not context.build.has_notification_channels():
        logger.bind(tag=TAG).debug(
            f"sdk_int={context.build.sdk_int} has no notification channels; skipping"
        )
        return
    try:
        context.notification_manager.create_notification_channel(REMINDER_CHANNEL)
    except Exception as exc:
        logger.bind(tag=TAG).error(f"Failed to create notification channel: {exc!r}")
        return
    logger.bind(tag=TAG).debug("Notification channel created")
