"""Capability handles the bridge talks to.

The alarm service and the notification manager are passed in through an
`AlarmContext` instead of being looked up globally, so every operation can be
exercised against fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from services.alarms.models import (
    AlarmType,
    Build,
    Notification,
    NotificationChannel,
    PendingIntent,
)


class AlarmService(Protocol):
    def set_exact_and_allow_while_idle(
        self, alarm_type: AlarmType, trigger_at_ms: int, operation: PendingIntent
    ) -> None: ...

    def set(
        self, alarm_type: AlarmType, trigger_at_ms: int, operation: PendingIntent
    ) -> None: ...

    def cancel(self, operation: PendingIntent) -> None: ...

    def can_schedule_exact_alarms(self) -> bool: ...


class NotificationManager(Protocol):
    def create_notification_channel(self, channel: NotificationChannel) -> None: ...

    def notify(self, notification_id: int, notification: Notification) -> None: ...

    def cancel(self, notification_id: int) -> None: ...


@dataclass
class AlarmContext:
    alarm_service: AlarmService
    notification_manager: NotificationManager
    build: Build = field(default_factory=Build)
