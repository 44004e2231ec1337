import os
from collections.abc import Mapping

import yaml

_config_cache = None


def get_project_dir():
    """Return the project root directory, with a trailing slash."""
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__))) + "/"


def read_config(config_path):
    with open(config_path, "r", encoding="utf-8") as file:
        config = yaml.safe_load(file)
    return config or {}


def load_config():
    """Load config.yaml, overlaid with data/.config.yaml when present."""
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    default_config_path = get_project_dir() + "config.yaml"
    custom_config_path = get_project_dir() + "data/.config.yaml"

    default_config = read_config(default_config_path)
    if os.path.exists(custom_config_path):
        custom_config = read_config(custom_config_path)
        config = merge_configs(default_config, custom_config)
    else:
        config = default_config
    ensure_directories(config)

    _config_cache = config
    return config


def reset_config_cache():
    global _config_cache
    _config_cache = None


def ensure_directories(config):
    """Make sure the log directory exists."""
    log_dir = config.get("log", {}).get("log_dir", "tmp")
    dir_path = os.path.join(get_project_dir(), log_dir)
    try:
        os.makedirs(dir_path, exist_ok=True)
    except PermissionError:
        print(f"Warning: cannot create directory {dir_path}, check write permissions")


def merge_configs(default_config, custom_config):
    """
    Recursively merge two configs, custom_config wins.

    Args:
        default_config: defaults
        custom_config: user overrides

    Returns:
        The merged config
    """
    if not isinstance(default_config, Mapping) or not isinstance(
        custom_config, Mapping
    ):
        return custom_config

    merged = dict(default_config)

    for key, value in custom_config.items():
        if (
            key in merged
            and isinstance(merged[key], Mapping)
            and isinstance(value, Mapping)
        ):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged
