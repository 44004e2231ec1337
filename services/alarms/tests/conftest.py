from __future__ import annotations

from typing import Dict, List, Tuple

import pytest

from services.alarms.models import Build, Notification, NotificationChannel


class FakeNotificationManager:
    def __init__(self, fail_notify: bool = False):
        self.channels: Dict[str, NotificationChannel] = {}
        self.channel_calls = 0
        self.active: Dict[int, Notification] = {}
        self.posted: List[Tuple[int, Notification]] = []
        self.fail_notify = fail_notify

    def create_notification_channel(self, channel: NotificationChannel) -> None:
        self.channel_calls += 1
        self.channels[channel.id] = channel

    def notify(self, notification_id: int, notification: Notification) -> None:
        if self.fail_notify:
            raise RuntimeError("notification service unavailable")
        self.active[notification_id] = notification
        self.posted.append((notification_id, notification))

    def cancel(self, notification_id: int) -> None:
        self.active.pop(notification_id, None)


@pytest.fixture
def notifications():
    return FakeNotificationManager()


@pytest.fixture
def build():
    return Build(sdk_int=34)
