from __future__ import annotations

from typing import Tuple

METHOD_CHANNEL = "native_alarm"

CHANNEL_ID = "native_reminders"
CHANNEL_NAME = "Native Parking Reminders"
CHANNEL_DESCRIPTION = "Native parking reminder notifications"

# Broadcast action carried by every alarm delivery descriptor.
NOTIFICATION_ACTION = "anchor.native_alarm.NOTIFICATION_ACTION"

DEFAULT_ALARM_ID = 0
DEFAULT_TITLE = "Reminder"
DEFAULT_BODY = "Time's up!"
DEFAULT_TIMESTAMP = 0

# Alarm ids double as request codes, which are signed 32-bit.
ALARM_ID_RANGE: Tuple[int, int] = (-(2**31), 2**31 - 1)

SMALL_ICON = "ic_dialog_info"
# off/on durations in milliseconds, starting with the initial delay
VIBRATION_PATTERN: Tuple[int, ...] = (0, 500, 200, 500)

DEFAULT_INEXACT_WINDOW_MS = 15_000

ALARM_ERROR = "ALARM_ERROR"
CANCEL_ERROR = "CANCEL_ERROR"
