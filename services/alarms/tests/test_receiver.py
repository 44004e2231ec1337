from __future__ import annotations

from services.alarms import config
from services.alarms.models import (
    Intent,
    NotificationDefaults,
    NotificationPriority,
)
from services.alarms.platform import AlarmContext
from services.alarms.receiver import AlarmReceiver


def _context(notifications, build):
    return AlarmContext(
        alarm_service=object(),
        notification_manager=notifications,
        build=build,
    )


def test_on_receive_posts_notification(notifications, build):
    intent = Intent(
        config.NOTIFICATION_ACTION,
        AlarmReceiver,
        {"id": 7, "title": "Pay meter", "body": "5 min left"},
    )

    AlarmReceiver().on_receive(_context(notifications, build), intent)

    assert list(notifications.active) == [7]
    notification = notifications.active[7]
    assert notification.channel_id == config.CHANNEL_ID
    assert notification.content_title == "Pay meter"
    assert notification.content_text == "5 min left"
    assert notification.small_icon == config.SMALL_ICON
    assert notification.priority is NotificationPriority.HIGH
    assert notification.auto_cancel is True
    assert notification.vibrate == (0, 500, 200, 500)
    assert notification.defaults == NotificationDefaults.ALL


def test_on_receive_uses_defaults_for_missing_fields(notifications, build):
    intent = Intent(config.NOTIFICATION_ACTION, AlarmReceiver, {"id": 3})

    AlarmReceiver().on_receive(_context(notifications, build), intent)

    notification = notifications.active[3]
    assert notification.content_title == "Reminder"
    assert notification.content_text == "Time's up!"


def test_on_receive_keeps_empty_title_and_body(notifications, build):
    intent = Intent(
        config.NOTIFICATION_ACTION, AlarmReceiver, {"id": 3, "title": "", "body": ""}
    )

    AlarmReceiver().on_receive(_context(notifications, build), intent)

    notification = notifications.active[3]
    assert (notification.content_title, notification.content_text) == ("", "")


def test_on_receive_replaces_notification_with_same_id(notifications, build):
    context = _context(notifications, build)
    receiver = AlarmReceiver()

    receiver.on_receive(
        context, Intent(config.NOTIFICATION_ACTION, AlarmReceiver, {"id": 1, "title": "a"})
    )
    receiver.on_receive(
        context, Intent(config.NOTIFICATION_ACTION, AlarmReceiver, {"id": 1, "title": "b"})
    )

    assert len(notifications.active) == 1
    assert notifications.active[1].content_title == "b"


def test_on_receive_ignores_other_actions(notifications, build):
    intent = Intent("some.other.ACTION", AlarmReceiver, {"id": 1})

    AlarmReceiver().on_receive(_context(notifications, build), intent)

    assert notifications.posted == []


def test_on_receive_swallows_notification_failure(notifications, build):
    notifications.fail_notify = True
    intent = Intent(config.NOTIFICATION_ACTION, AlarmReceiver, {"id": 1})

    AlarmReceiver().on_receive(_context(notifications, build), intent)

    assert notifications.posted == []
