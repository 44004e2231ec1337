from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import Any, Dict, Mapping, Optional, Tuple

from services.alarms import config


class ArgumentError(ValueError):
    """Raised when a method-call argument has the wrong type."""


class VersionCodes:
    O = 26
    S = 31


@dataclass(frozen=True)
class Build:
    sdk_int: int = VersionCodes.S

    def has_notification_channels(self) -> bool:
        return self.sdk_int >= VersionCodes.O

    def restricts_exact_alarms(self) -> bool:
        return self.sdk_int >= VersionCodes.S


class AlarmType(str, Enum):
    RTC_WAKEUP = "rtc_wakeup"
    RTC = "rtc"


class Importance(IntEnum):
    NONE = 0
    MIN = 1
    LOW = 2
    DEFAULT = 3
    HIGH = 4


class NotificationPriority(IntEnum):
    MIN = -2
    LOW = -1
    DEFAULT = 0
    HIGH = 1
    MAX = 2


class NotificationDefaults(IntFlag):
    SOUND = 1
    VIBRATE = 2
    LIGHTS = 4
    ALL = SOUND | VIBRATE | LIGHTS


def _component_name(component: Any) -> Optional[str]:
    if component is None:
        return None
    return f"{component.__module__}.{component.__qualname__}"


@dataclass
class Intent:
    action: str
    component: Any = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def put_extra(self, name: str, value: Any) -> "Intent":
        self.extras[name] = value
        return self

    def get_int_extra(self, name: str, default: int) -> int:
        value = self.extras.get(name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    def get_string_extra(self, name: str) -> Optional[str]:
        value = self.extras.get(name)
        return value if isinstance(value, str) else None

    def filter_key(self) -> Tuple[str, Optional[str]]:
        """Identity used for matching; extras never participate."""
        return (self.action, _component_name(self.component))


@dataclass
class PendingIntent:
    context: Any
    request_code: int
    intent: Intent

    @classmethod
    def get_broadcast(cls, context, request_code: int, intent: Intent) -> "PendingIntent":
        return cls(context=context, request_code=request_code, intent=intent)

    @property
    def key(self) -> Tuple[int, str, Optional[str]]:
        return (self.request_code,) + self.intent.filter_key()

    def send(self) -> None:
        if self.intent.component is None:
            raise RuntimeError(
                f"Pending intent {self.request_code} has no receiver component"
            )
        receiver = self.intent.component()
        receiver.on_receive(
            self.context,
            Intent(
                action=self.intent.action,
                component=self.intent.component,
                extras=dict(self.intent.extras),
            ),
        )


def _int_argument(
    arguments: Mapping[str, Any],
    name: str,
    default: int,
    bounds: Optional[Tuple[int, int]] = None,
) -> int:
    value = arguments.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ArgumentError(f"Argument '{name}' must be an integer, got bool")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ArgumentError(
            f"Argument '{name}' must be an integer, got {type(value).__name__}"
        )
    if bounds is not None and not bounds[0] <= value <= bounds[1]:
        raise ArgumentError(
            f"Argument '{name}' must be between {bounds[0]} and {bounds[1]}, got {value}"
        )
    return value


def _str_argument(arguments: Mapping[str, Any], name: str, default: str) -> str:
    value = arguments.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ArgumentError(
            f"Argument '{name}' must be a string, got {type(value).__name__}"
        )
    return value


def _as_mapping(arguments: Any) -> Mapping[str, Any]:
    if arguments is None:
        return {}
    if not isinstance(arguments, Mapping):
        raise ArgumentError("Method arguments must be an object")
    return arguments


def alarm_id_from_arguments(arguments: Any) -> int:
    return _int_argument(
        _as_mapping(arguments), "id", config.DEFAULT_ALARM_ID, config.ALARM_ID_RANGE
    )


@dataclass(frozen=True)
class AlarmRequest:
    """A reminder to arm: `fire_at` is epoch milliseconds."""

    id: int = config.DEFAULT_ALARM_ID
    title: str = config.DEFAULT_TITLE
    body: str = config.DEFAULT_BODY
    fire_at: int = config.DEFAULT_TIMESTAMP

    @classmethod
    def from_arguments(cls, arguments: Any) -> "AlarmRequest":
        arguments = _as_mapping(arguments)
        return cls(
            id=_int_argument(
                arguments, "id", config.DEFAULT_ALARM_ID, config.ALARM_ID_RANGE
            ),
            title=_str_argument(arguments, "title", config.DEFAULT_TITLE),
            body=_str_argument(arguments, "body", config.DEFAULT_BODY),
            fire_at=_int_argument(arguments, "timestamp", config.DEFAULT_TIMESTAMP),
        )

    @classmethod
    def from_intent(cls, intent: Intent) -> "AlarmRequest":
        title = intent.get_string_extra("title")
        body = intent.get_string_extra("body")
        return cls(
            id=intent.get_int_extra("id", config.DEFAULT_ALARM_ID),
            title=config.DEFAULT_TITLE if title is None else title,
            body=config.DEFAULT_BODY if body is None else body,
        )

    def to_extras(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "body": self.body}


@dataclass(frozen=True)
class NotificationChannel:
    id: str
    name: str
    importance: Importance
    description: str = ""
    vibration_enabled: bool = False
    lights_enabled: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "importance": self.importance.name.lower(),
            "description": self.description,
            "vibration": self.vibration_enabled,
            "lights": self.lights_enabled,
        }


@dataclass(frozen=True)
class Notification:
    channel_id: str
    content_title: str
    content_text: str
    small_icon: str = config.SMALL_ICON
    priority: NotificationPriority = NotificationPriority.DEFAULT
    auto_cancel: bool = False
    vibrate: Tuple[int, ...] = ()
    defaults: NotificationDefaults = NotificationDefaults(0)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "channelId": self.channel_id,
            "title": self.content_title,
            "text": self.content_text,
            "smallIcon": self.small_icon,
            "priority": self.priority.name.lower(),
            "autoCancel": self.auto_cancel,
            "vibrate": list(self.vibrate),
            "defaults": {
                "sound": bool(self.defaults & NotificationDefaults.SOUND),
                "vibrate": bool(self.defaults & NotificationDefaults.VIBRATE),
                "lights": bool(self.defaults & NotificationDefaults.LIGHTS),
            },
        }
