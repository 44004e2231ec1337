from __future__ import annotations

from services.alarms.platform import AlarmContext


def can_schedule_exact_alarms(context: AlarmContext) -> bool:
    """Whether exact alarms are currently allowed.

    The grant can be revoked at any time, so callers must ask again for every
    scheduling decision.
    """
    if not context.build.restricts_exact_alarms():
        return True
    return bool(context.alarm_service.can_schedule_exact_alarms())
