from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, Tuple

from paho.mqtt import client as mqtt_client

from services.logging import setup_logging
from services.alarms.models import Notification, NotificationChannel

TAG = __name__
logger = setup_logging()


class NotificationPublishError(Exception):
    pass


def _parse_broker(broker_url: Optional[str]) -> Tuple[str, int]:
    url = broker_url or os.environ.get("MQTT_URL", "mqtt://localhost:1883")
    if url.startswith("mqtt://"):
        url = url.replace("mqtt://", "tcp://", 1)
    if not url.startswith(("tcp://", "ws://", "wss://", "ssl://")):
        url = "tcp://" + url
    try:
        _, rest = url.split("://", 1)
        if ":" in rest:
            host, port_str = rest.split(":", 1)
            port = int(port_str)
        else:
            host = rest
            port = 1883
        return host, port
    except Exception:
        return "localhost", 1883


def publish_json(
    broker_url: Optional[str],
    topic: str,
    payload: Dict[str, Any],
    *,
    qos: int = 1,
    retain: bool = False,
    timeout: float = 5.0,
) -> bool:
    """
    Publish one JSON message and disconnect.

    Args:
        broker_url: MQTT broker URL (e.g., "mqtt://host:1883"). Falls back to env MQTT_URL.
        topic: Full topic to publish on
        payload: JSON-serialisable message body
        qos: MQTT quality of service
        retain: Ask the broker to keep the message for late subscribers
        timeout: Seconds to wait for the broker to confirm

    Returns:
        True if publish succeeded, False otherwise
    """
    host, port = _parse_broker(broker_url)
    client = mqtt_client.Client(mqtt_client.CallbackAPIVersion.VERSION2)
    try:
        logger.bind(tag=TAG).debug(f"Connecting to MQTT broker {host}:{port}")
        client.connect(host, port, keepalive=30)
        client.loop_start()

        logger.bind(tag=TAG).debug(f"Publishing {payload.get('type')} to topic {topic}")
        result = client.publish(topic, json.dumps(payload), qos=qos, retain=retain)

        if result.wait_for_publish(timeout):
            ok = result.is_published()
            if not ok:
                logger.bind(tag=TAG).warning(
                    f"Publish completed but not confirmed on {topic}"
                )
            return ok
        logger.bind(tag=TAG).error(f"MQTT publish timeout ({timeout}s) on topic {topic}")
        return False
    except Exception as e:
        logger.bind(tag=TAG).error(
            f"MQTT publish to {topic} failed: {type(e).__name__}: {e}"
        )
        return False
    finally:
        try:
            client.loop_stop()
            client.disconnect()
        except Exception:
            pass


class MqttNotificationManager:
    """Renders notifications by publishing them to a device downlink topic.

    Topic convention: <prefix>/<device_id>/notify for notifications and
    dismissals, <prefix>/<device_id>/channels/<channel_id> (retained) for
    channel declarations.
    """

    def __init__(
        self,
        broker_url: Optional[str],
        device_id: str,
        topic_prefix: str = "anchor",
    ):
        self.broker_url = broker_url
        self.device_id = device_id
        self.topic_prefix = topic_prefix.rstrip("/")
        self._channels: Dict[str, NotificationChannel] = {}

    @property
    def notify_topic(self) -> str:
        return f"{self.topic_prefix}/{self.device_id}/notify"

    def channel_topic(self, channel_id: str) -> str:
        return f"{self.topic_prefix}/{self.device_id}/channels/{channel_id}"

    def create_notification_channel(self, channel: NotificationChannel) -> None:
        if self._channels.get(channel.id) == channel:
            return
        payload = {"type": "channel", "channel": channel.to_payload()}
        if not publish_json(
            self.broker_url, self.channel_topic(channel.id), payload, retain=True
        ):
            raise NotificationPublishError(
                f"Broker did not accept channel {channel.id!r}"
            )
        self._channels[channel.id] = channel

    def notify(self, notification_id: int, notification: Notification) -> None:
        if notification.channel_id not in self._channels:
            logger.bind(tag=TAG).warning(
                f"Posting notification {notification_id} on undeclared channel "
                f"{notification.channel_id!r}"
            )
        payload = {
            "type": "notification",
            "id": notification_id,
            "notification": notification.to_payload(),
        }
        if not publish_json(self.broker_url, self.notify_topic, payload):
            raise NotificationPublishError(
                f"Broker did not accept notification {notification_id}"
            )

    def cancel(self, notification_id: int) -> None:
        payload = {"type": "dismiss", "id": notification_id}
        if not publish_json(self.broker_url, self.notify_topic, payload):
            raise NotificationPublishError(
                f"Broker did not accept dismissal of {notification_id}"
            )
