"""
Central logging configuration for recurrence_lite.

Keeps the engine's own loggers at INFO (DEBUG on request) and stamps every
record with the id of the edit session that produced it.
"""

import logging
import os
from typing import Optional


class SessionIdFilter(logging.Filter):
    """Add the current edit session id to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add session ID to log record.

        Args:
            record: Log record to enhance

        Returns:
            True to allow record to be logged
        """
        # Import here to avoid circular dependency
        from .edit_session import get_session_id

        record.session_id = get_session_id()
        return True


LITE_MODULES = [
    "recurrence_lite",
    "recurrence_lite.lite_models",
    "recurrence_lite.lite_rule_builder",
    "recurrence_lite.lite_rrule_expander",
    "recurrence_lite.lite_rrule_format",
    "recurrence_lite.lite_pattern_inference",
    "recurrence_lite.lite_scoped_edit",
    "recurrence_lite.edit_session",
    "recurrence_lite.event_store",
    "recurrence_lite.config_loader",
]


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for recurrence_lite.

    Args:
        debug_mode: Whether to enable debug logging for recurrence_lite modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        RECURRENCE_LITE_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        RECURRENCE_LITE_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("RECURRENCE_LITE_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("RECURRENCE_LITE_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    session_filter = SessionIdFilter()

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        formatter = logging.Formatter(
            "[%(asctime)s] [%(session_id)s] %(levelname)s - %(name)s - %(message)s"
        )
        handler.setFormatter(formatter)
        handler.addFilter(session_filter)
        root_logger.addHandler(handler)
    else:
        for existing_handler in root_logger.handlers:
            if not any(isinstance(f, SessionIdFilter) for f in existing_handler.filters):
                existing_handler.addFilter(session_filter)

    lite_level = logging.DEBUG if final_debug else logging.INFO
    for module in LITE_MODULES:
        logging.getLogger(module).setLevel(lite_level)

    if final_debug:
        root_logger.info("Debug logging enabled for recurrence_lite modules.")
    else:
        root_logger.info("Production logging configuration applied.")


def reset_logging_to_debug() -> None:
    """
    Reset all recurrence_lite loggers to DEBUG level for troubleshooting.

    Useful when a generated series does not look right and the expansion
    bounds and inference decisions need to be traced.
    """
    logging.getLogger().setLevel(logging.DEBUG)
    for module in LITE_MODULES:
        logging.getLogger(module).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in LITE_MODULES:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
