"""
Native alarm bridge.

Arms one-shot reminder alarms on an alarm service and renders a notification
when they fire. The alarm service and notification manager are injected via
`platform.AlarmContext`.
"""

from . import models  # noqa: F401
from . import scheduler  # noqa: F401
from . import receiver  # noqa: F401
from . import bridge  # noqa: F401

__all__ = [
    "models",
    "scheduler",
    "receiver",
    "bridge",
]
