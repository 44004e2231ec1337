import asyncio
import signal

from config.config_loader import load_config
from config.settings import get_inexact_window_ms, get_mqtt_url, get_platform_build
from core.http_server import SimpleHttpServer
from core.method_channel import MethodChannel
from services.alarms import config as alarm_config
from services.alarms.bridge import NativeAlarmService
from services.alarms.local_alarm_service import LocalAlarmService
from services.alarms.platform import AlarmContext
from services.logging import setup_logging
from services.messaging.mqtt import MqttNotificationManager

TAG = __name__
logger = setup_logging()


def build_context(config: dict) -> AlarmContext:
    platform = config.get("platform", {})
    mqtt = config.get("mqtt", {})
    alarm_service = LocalAlarmService(
        loop=asyncio.get_running_loop(),
        exact_alarms_granted=bool(platform.get("exact_alarms_granted", True)),
        inexact_window_ms=get_inexact_window_ms(config),
    )
    notification_manager = MqttNotificationManager(
        get_mqtt_url(config),
        device_id=mqtt.get("device_id", "anchor-phone"),
        topic_prefix=mqtt.get("topic_prefix", "anchor"),
    )
    return AlarmContext(
        alarm_service=alarm_service,
        notification_manager=notification_manager,
        build=get_platform_build(config),
    )


async def main():
    config = load_config()
    context = build_context(config)

    channel = MethodChannel(alarm_config.METHOD_CHANNEL)
    # Declaring the channel publishes to the broker.
    await asyncio.to_thread(NativeAlarmService.setup, channel, context)
    server = SimpleHttpServer(config, channel, alarm_service=context.alarm_service)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    await server.start()
    try:
        await stop_event.wait()
    finally:
        logger.bind(tag=TAG).info("Shutting down native alarm bridge")
        await server.stop()
        context.alarm_service.close()


if __name__ == "__main__":
    asyncio.run(main())
