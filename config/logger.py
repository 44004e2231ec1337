import os
import sys

from loguru import logger

from config.config_loader import get_project_dir, load_config

_logger_configured = False

DEFAULT_FORMAT = (
    "<green>{time:YYMMDD HH:mm:ss}</green>"
    "[<light-blue>{extra[tag]}</light-blue>]"
    " - <level>{level}</level> - <light-green>{message}</light-green>"
)
DEFAULT_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} - {extra[tag]} - {level} - {message}"


def setup_logging():
    """Configure loguru sinks from the `log` section of the loaded config."""
    global _logger_configured
    if _logger_configured:
        return logger

    config = load_config()
    log_config = config.get("log", {})
    log_level = os.environ.get("LOG_LEVEL") or log_config.get("log_level", "INFO")
    log_format = log_config.get("log_format", DEFAULT_FORMAT)
    log_format_file = log_config.get("log_format_file", DEFAULT_FILE_FORMAT)
    log_dir = os.path.join(get_project_dir(), log_config.get("log_dir", "tmp"))
    log_file = log_config.get("log_file", "native_alarm.log")

    os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    logger.configure(extra={"tag": "native_alarm"})
    logger.add(sys.stdout, format=log_format, level=log_level)
    logger.add(
        os.path.join(log_dir, log_file),
        format=log_format_file,
        level=log_level,
        rotation="10 MB",
        retention="7 days",
        encoding="utf-8",
    )
    _logger_configured = True
    return logger
