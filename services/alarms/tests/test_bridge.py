from __future__ import annotations

import pytest

from core.method_channel import MethodCall, MethodCallError, MethodChannel, MethodNotImplemented
from services.alarms import bridge, config
from services.alarms.models import Build
from services.alarms.platform import AlarmContext


class _RecordingAlarmService:
    def __init__(self, granted: bool = True):
        self.granted = granted
        self.registered = {}
        self.cancelled = []

    def set_exact_and_allow_while_idle(self, alarm_type, trigger_at_ms, operation):
        self.registered[operation.request_code] = ("exact", trigger_at_ms, operation)

    def set(self, alarm_type, trigger_at_ms, operation):
        self.registered[operation.request_code] = ("inexact", trigger_at_ms, operation)

    def cancel(self, operation):
        self.cancelled.append(operation.request_code)
        self.registered.pop(operation.request_code, None)

    def can_schedule_exact_alarms(self):
        return self.granted


@pytest.fixture
def alarm_service():
    return _RecordingAlarmService()


@pytest.fixture
def channel(alarm_service, notifications):
    context = AlarmContext(alarm_service, notifications, Build(sdk_int=34))
    channel = MethodChannel(config.METHOD_CHANNEL)
    bridge.NativeAlarmService.setup(channel, context)
    return channel


def test_setup_creates_channel_and_registers_handler(channel, notifications):
    assert config.CHANNEL_ID in notifications.channels
    assert channel.name == "native_alarm"


def test_schedule_alarm_returns_true(channel, alarm_service):
    result = channel.invoke(
        MethodCall(
            "scheduleAlarm",
            {"id": 7, "title": "Pay meter", "body": "5 min left", "timestamp": 1234},
        )
    )

    assert result is True
    mode, trigger_at, operation = alarm_service.registered[7]
    assert mode == "exact"
    assert trigger_at == 1234
    assert operation.intent.extras["title"] == "Pay meter"


def test_schedule_alarm_reports_false_when_not_armed(channel, alarm_service, monkeypatch):
    def boom(*args):
        raise RuntimeError("rejected")

    monkeypatch.setattr(alarm_service, "set_exact_and_allow_while_idle", boom)

    assert channel.invoke(MethodCall("scheduleAlarm", {"id": 1, "timestamp": 1})) is False


def test_schedule_alarm_bad_argument_is_alarm_error(channel):
    with pytest.raises(MethodCallError) as excinfo:
        channel.invoke(MethodCall("scheduleAlarm", {"id": "seven"}))

    assert excinfo.value.code == "ALARM_ERROR"
    assert "id" in excinfo.value.message


def test_cancel_alarm_always_true(channel, alarm_service):
    channel.invoke(MethodCall("scheduleAlarm", {"id": 3, "timestamp": 1}))

    assert channel.invoke(MethodCall("cancelAlarm", {"id": 3})) is True
    assert channel.invoke(MethodCall("cancelAlarm", {"id": 999})) is True
    assert alarm_service.registered == {}
    assert alarm_service.cancelled == [3, 999]


def test_cancel_alarm_swallows_platform_failure(channel, alarm_service, monkeypatch):
    def boom(operation):
        raise RuntimeError("rejected")

    monkeypatch.setattr(alarm_service, "cancel", boom)

    assert channel.invoke(MethodCall("cancelAlarm", {"id": 3})) is True


def test_cancel_alarm_bad_argument_is_cancel_error(channel):
    with pytest.raises(MethodCallError) as excinfo:
        channel.invoke(MethodCall("cancelAlarm", {"id": 1.5}))

    assert excinfo.value.code == "CANCEL_ERROR"


def test_can_schedule_exact_reflects_grant(channel, alarm_service):
    assert channel.invoke(MethodCall("canScheduleExact")) is True
    alarm_service.granted = False
    assert channel.invoke(MethodCall("canScheduleExact")) is False


def test_can_schedule_exact_degrades_to_false(channel, alarm_service, monkeypatch):
    def boom():
        raise RuntimeError("service gone")

    monkeypatch.setattr(alarm_service, "can_schedule_exact_alarms", boom)

    assert channel.invoke(MethodCall("canScheduleExact")) is False


def test_unknown_method_is_not_implemented(channel):
    with pytest.raises(MethodNotImplemented):
        channel.invoke(MethodCall("snoozeAlarm", {"id": 1}))


def test_channel_without_handler_is_not_implemented():
    with pytest.raises(MethodNotImplemented):
        MethodChannel("empty").invoke(MethodCall("scheduleAlarm"))
