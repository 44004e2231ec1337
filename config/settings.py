import os
from typing import Optional

from config.config_loader import load_config


def get_mqtt_url(config: Optional[dict] = None) -> str:
    """Return the broker URL for notification delivery.

    Precedence:
      1) MQTT_URL env var
      2) mqtt.url in config
      3) mqtt://localhost:1883
    """
    env_url = os.environ.get("MQTT_URL")
    if env_url:
        return env_url
    config = config if config is not None else load_config()
    return config.get("mqtt", {}).get("url") or "mqtt://localhost:1883"


def get_platform_build(config: Optional[dict] = None):
    """Build descriptor for the platform the bridge pretends to run on."""
    from services.alarms.models import Build, VersionCodes

    config = config if config is not None else load_config()
    platform = config.get("platform", {})
    return Build(sdk_int=int(platform.get("sdk_int", VersionCodes.S)))


def get_inexact_window_ms(config: Optional[dict] = None) -> int:
    config = config if config is not None else load_config()
    return int(config.get("alarm", {}).get("inexact_window_ms", 15000))
