from __future__ import annotations

from services.logging import setup_logging
from services.alarms import config
from services.alarms.models import AlarmRequest, AlarmType, Intent, PendingIntent
from services.alarms.permissions import can_schedule_exact_alarms
from services.alarms.platform import AlarmContext
from services.alarms.receiver import AlarmReceiver

TAG = __name__
logger = setup_logging()


def _pending_intent(context: AlarmContext, alarm_id: int, intent: Intent) -> PendingIntent:
    return PendingIntent.get_broadcast(context, alarm_id, intent)


def build_delivery_intent(request: AlarmRequest) -> Intent:
    return Intent(
        action=config.NOTIFICATION_ACTION,
        component=AlarmReceiver,
        extras=request.to_extras(),
    )


def schedule_alarm(context: AlarmContext, request: AlarmRequest) -> bool:
    """Arm a one-shot alarm for `request`; False when registration fails.

    Scheduling an id that is still pending replaces the earlier registration.
    """
    try:
        pending_intent = _pending_intent(
            context, request.id, build_delivery_intent(request)
        )

        can_schedule_exact = can_schedule_exact_alarms(context)
        logger.bind(tag=TAG).debug(f"Can schedule exact alarms: {can_schedule_exact}")

        if can_schedule_exact:
            context.alarm_service.set_exact_and_allow_while_idle(
                AlarmType.RTC_WAKEUP, request.fire_at, pending_intent
            )
            logger.bind(tag=TAG).info(
                f"Scheduled EXACT alarm {request.id} for {request.fire_at}"
            )
        else:
            context.alarm_service.set(
                AlarmType.RTC_WAKEUP, request.fire_at, pending_intent
            )
            logger.bind(tag=TAG).info(
                f"Scheduled INEXACT alarm {request.id} for {request.fire_at}"
            )
        return True
    except Exception as exc:
        logger.bind(tag=TAG).error(f"Failed to schedule alarm {request.id}: {exc!r}")
        return False


def cancel_alarm(context: AlarmContext, alarm_id: int) -> None:
    """Drop any pending registration for `alarm_id`. Never raises."""
    try:
        intent = Intent(action=config.NOTIFICATION_ACTION, component=AlarmReceiver)
        context.alarm_service.cancel(_pending_intent(context, alarm_id, intent))
        logger.bind(tag=TAG).info(f"Cancelled alarm {alarm_id}")
    except Exception as exc:
        logger.bind(tag=TAG).error(f"Failed to cancel alarm {alarm_id}: {exc!r}")
