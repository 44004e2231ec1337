from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Set

from services.logging import setup_logging
from services.alarms import config
from services.alarms.models import AlarmType, PendingIntent

TAG = __name__
logger = setup_logging()


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Registration:
    operation: PendingIntent
    alarm_type: AlarmType
    requested_at_ms: int
    trigger_at_ms: int
    exact: bool
    allow_while_idle: bool
    deferred: bool = False
    handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> Hashable:
        return self.operation.key

    @property
    def alarm_id(self) -> int:
        return self.operation.request_code

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.alarm_id,
            "type": self.alarm_type.value,
            "requestedAt": self.requested_at_ms,
            "triggerAt": self.trigger_at_ms,
            "exact": self.exact,
            "allowWhileIdle": self.allow_while_idle,
            "deferred": self.deferred,
        }


class LocalAlarmService:
    """In-process alarm manager driven by an asyncio event loop.

    Registrations are keyed by pending-intent identity, so setting an alarm
    for a key that is already pending replaces it. A registration is removed
    before its pending intent is sent; every alarm fires at most once.
    """

    def __init__(
        self,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        exact_alarms_granted: bool = True,
        inexact_window_ms: int = config.DEFAULT_INEXACT_WINDOW_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._loop = loop
        self._exact_alarms_granted = exact_alarms_granted
        self.inexact_window_ms = inexact_window_ms
        self._clock = clock or _now_ms
        self._registrations: Dict[Hashable, Registration] = {}
        self._deliveries: Set[asyncio.Task] = set()
        self._idle = False

    def set_exact_and_allow_while_idle(
        self, alarm_type: AlarmType, trigger_at_ms: int, operation: PendingIntent
    ) -> None:
        self._register(
            operation,
            alarm_type,
            trigger_at_ms,
            trigger_at_ms,
            exact=True,
            allow_while_idle=True,
        )

    def set(
        self, alarm_type: AlarmType, trigger_at_ms: int, operation: PendingIntent
    ) -> None:
        self._register(
            operation,
            alarm_type,
            trigger_at_ms,
            self._batch(trigger_at_ms),
            exact=False,
            allow_while_idle=False,
        )

    def cancel(self, operation: PendingIntent) -> None:
        registration = self._registrations.pop(operation.key, None)
        if registration is None:
            logger.bind(tag=TAG).debug(
                f"No pending alarm for request code {operation.request_code}"
            )
            return
        if registration.handle is not None:
            registration.handle.cancel()

    def can_schedule_exact_alarms(self) -> bool:
        return self._exact_alarms_granted

    def grant_exact_alarms(self) -> None:
        self._exact_alarms_granted = True

    def revoke_exact_alarms(self) -> None:
        self._exact_alarms_granted = False

    @property
    def idle(self) -> bool:
        return self._idle

    def enter_idle(self) -> None:
        self._idle = True
        logger.bind(tag=TAG).info("Alarm service entered idle mode")

    def exit_idle(self) -> None:
        self._idle = False
        deferred = [r for r in self._registrations.values() if r.deferred]
        logger.bind(tag=TAG).info(
            f"Alarm service left idle mode; releasing {len(deferred)} deferred alarms"
        )
        for registration in deferred:
            registration.deferred = False
            registration.handle = self._get_loop().call_soon(self._fire, registration.key)

    def pending(self) -> List[Registration]:
        return sorted(self._registrations.values(), key=lambda r: r.trigger_at_ms)

    def close(self) -> None:
        """Drop pending registrations. Deliveries already under way finish."""
        for registration in self._registrations.values():
            if registration.handle is not None:
                registration.handle.cancel()
        self._registrations.clear()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _batch(self, trigger_at_ms: int) -> int:
        window = self.inexact_window_ms
        if window <= 0:
            return trigger_at_ms
        return -(-trigger_at_ms // window) * window

    def _register(
        self,
        operation: PendingIntent,
        alarm_type: AlarmType,
        requested_at_ms: int,
        trigger_at_ms: int,
        *,
        exact: bool,
        allow_while_idle: bool,
    ) -> None:
        loop = self._get_loop()
        previous = self._registrations.pop(operation.key, None)
        if previous is not None and previous.handle is not None:
            previous.handle.cancel()
            logger.bind(tag=TAG).debug(
                f"Replacing pending alarm {previous.alarm_id}"
            )

        registration = Registration(
            operation=operation,
            alarm_type=alarm_type,
            requested_at_ms=requested_at_ms,
            trigger_at_ms=trigger_at_ms,
            exact=exact,
            allow_while_idle=allow_while_idle,
        )
        delay = max(0, trigger_at_ms - self._clock()) / 1000
        registration.handle = loop.call_later(delay, self._fire, registration.key)
        self._registrations[registration.key] = registration

    def _fire(self, key: Hashable) -> None:
        registration = self._registrations.get(key)
        if registration is None:
            return
        if self._idle and not registration.allow_while_idle:
            registration.deferred = True
            registration.handle = None
            logger.bind(tag=TAG).debug(
                f"Deferring alarm {registration.alarm_id} until idle mode ends"
            )
            return

        del self._registrations[key]
        task = self._get_loop().create_task(self._deliver(registration))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, registration: Registration) -> None:
        # Receivers may block on network I/O; keep them off the timer loop.
        try:
            await asyncio.to_thread(registration.operation.send)
        except Exception as exc:
            logger.bind(tag=TAG).error(
                f"Delivery of alarm {registration.alarm_id} failed: {exc!r}"
            )
