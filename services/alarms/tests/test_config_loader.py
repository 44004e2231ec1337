from __future__ import annotations

from config import config_loader, settings
from services.alarms.models import Build


def test_merge_configs_is_recursive():
    default = {"server": {"ip": "0.0.0.0", "http_port": 8003}, "log": {"log_level": "INFO"}}
    custom = {"server": {"http_port": 9000}, "mqtt": {"url": "mqtt://x"}}

    merged = config_loader.merge_configs(default, custom)

    assert merged == {
        "server": {"ip": "0.0.0.0", "http_port": 9000},
        "log": {"log_level": "INFO"},
        "mqtt": {"url": "mqtt://x"},
    }


def test_default_config_file_has_bridge_sections():
    config = config_loader.read_config(config_loader.get_project_dir() + "config.yaml")

    assert config["server"]["http_port"] == 8003
    assert config["platform"]["sdk_int"] >= 31
    assert config["alarm"]["inexact_window_ms"] > 0
    assert config["mqtt"]["topic_prefix"] == "anchor"


def test_mqtt_url_env_overrides_config(monkeypatch):
    monkeypatch.setenv("MQTT_URL", "mqtt://env:1883")

    assert settings.get_mqtt_url({"mqtt": {"url": "mqtt://cfg:1883"}}) == "mqtt://env:1883"


def test_mqtt_url_from_config(monkeypatch):
    monkeypatch.delenv("MQTT_URL", raising=False)

    assert settings.get_mqtt_url({"mqtt": {"url": "mqtt://cfg:1883"}}) == "mqtt://cfg:1883"
    assert settings.get_mqtt_url({}) == "mqtt://localhost:1883"


def test_platform_build_and_window():
    assert settings.get_platform_build({"platform": {"sdk_int": 28}}) == Build(sdk_int=28)
    assert settings.get_platform_build({}) == Build(sdk_int=31)
    assert settings.get_inexact_window_ms({"alarm": {"inexact_window_ms": 500}}) == 500
    assert settings.get_inexact_window_ms({}) == 15000
