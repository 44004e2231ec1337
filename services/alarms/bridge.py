from __future__ import annotations

import time
from typing import Any, Callable, Optional

from core.method_channel import MethodCall, MethodCallError, MethodChannel, MethodNotImplemented
from services.logging import setup_logging
from services.alarms import config
from services.alarms.channels import create_notification_channel
from services.alarms.models import AlarmRequest, alarm_id_from_arguments
from services.alarms.permissions import can_schedule_exact_alarms
from services.alarms.platform import AlarmContext
from services.alarms.scheduler import cancel_alarm, schedule_alarm

TAG = __name__
logger = setup_logging()


def _now_ms() -> int:
    return int(time.time() * 1000)


class NativeAlarmService:
    """Serves scheduleAlarm / cancelAlarm / canScheduleExact for the host."""

    def __init__(self, context: AlarmContext, clock: Optional[Callable[[], int]] = None):
        self.context = context
        self._clock = clock or _now_ms
        self._methods = {
            "scheduleAlarm": self._schedule_alarm,
            "cancelAlarm": self._cancel_alarm,
            "canScheduleExact": self._can_schedule_exact,
        }

    @classmethod
    def setup(cls, channel: MethodChannel, context: AlarmContext) -> "NativeAlarmService":
        create_notification_channel(context)
        service = cls(context)
        channel.set_method_call_handler(service.handle)
        return service

    def handle(self, call: MethodCall) -> Any:
        method = self._methods.get(call.method)
        if method is None:
            raise MethodNotImplemented(call.method)
        return method(call)

    def _schedule_alarm(self, call: MethodCall) -> bool:
        try:
            request = AlarmRequest.from_arguments(call.arguments)
            now = self._clock()
            logger.bind(tag=TAG).debug(
                f"Scheduling alarm: ID={request.id}, timestamp={request.fire_at}"
            )
            logger.bind(tag=TAG).debug(f"Current time: {now}")
            logger.bind(tag=TAG).debug(f"Delay: {request.fire_at - now}ms")
            return schedule_alarm(self.context, request)
        except Exception as exc:
            logger.bind(tag=TAG).error(f"Failed to schedule alarm: {exc!r}")
            raise MethodCallError(config.ALARM_ERROR, str(exc)) from exc

    def _cancel_alarm(self, call: MethodCall) -> bool:
        try:
            cancel_alarm(self.context, alarm_id_from_arguments(call.arguments))
            return True
        except Exception as exc:
            logger.bind(tag=TAG).error(f"Failed to cancel alarm: {exc!r}")
            raise MethodCallError(config.CANCEL_ERROR, str(exc)) from exc

    def _can_schedule_exact(self, call: MethodCall) -> bool:
        try:
            can_schedule = can_schedule_exact_alarms(self.context)
            logger.bind(tag=TAG).debug(f"Can schedule exact alarms: {can_schedule}")
            return can_schedule
        except Exception as exc:
            logger.bind(tag=TAG).error(
                f"Failed to check exact alarm permission: {exc!r}"
            )
            return False
