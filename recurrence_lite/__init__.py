"""recurrence_lite - recurrence engine for the calendar front end.

Expands recurrence rules into concrete occurrences, infers rules back from
existing series, applies this / this-and-following / all edits, and owns the
edit session that drafts a series until it is committed to the calendar.
"""

__version__ = "0.1.0"

from typing import Optional

from .config_loader import Config, load_config, load_full_config
from .edit_session import RecurrenceEditSession, SessionState
from .event_store import CalendarEventStore
from .lite_exceptions import (
    EditSessionClosedError,
    GenerationEmptyError,
    OccurrenceNotFoundError,
    RecurrenceError,
    RecurrenceValidationError,
    RRuleParseError,
)
from .lite_models import (
    CalendarEvent,
    EditScope,
    EndAfterCount,
    EndNever,
    EndOnDate,
    EventEdits,
    Frequency,
    Member,
    MemberStatus,
    Occurrence,
    RecurrenceRule,
    RuleResolution,
    RuleSource,
    Weekday,
)
from .lite_pattern_inference import infer_rule, resolve_rule
from .lite_rrule_expander import LiteRecurrenceExpander, generate
from .lite_rrule_format import format_rrule, parse_rrule_string
from .lite_rule_builder import build_rule
from .lite_scoped_edit import apply_scoped_edit, delete_scoped


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorlog formatter on a stderr handler when the root logger has
    no handlers yet. The RECURRENCE_LITE_DEBUG environment variable (truthy
    values: "1", "true", "yes", "on") forces DEBUG verbosity.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("RECURRENCE_LITE_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


__all__ = [
    "CalendarEvent",
    "CalendarEventStore",
    "Config",
    "EditScope",
    "EditSessionClosedError",
    "EndAfterCount",
    "EndNever",
    "EndOnDate",
    "EventEdits",
    "Frequency",
    "GenerationEmptyError",
    "LiteRecurrenceExpander",
    "Member",
    "MemberStatus",
    "Occurrence",
    "OccurrenceNotFoundError",
    "RRuleParseError",
    "RecurrenceEditSession",
    "RecurrenceError",
    "RecurrenceRule",
    "RecurrenceValidationError",
    "RuleResolution",
    "RuleSource",
    "SessionState",
    "Weekday",
    "apply_scoped_edit",
    "build_rule",
    "delete_scoped",
    "format_rrule",
    "generate",
    "infer_rule",
    "load_config",
    "load_full_config",
    "parse_rrule_string",
    "resolve_rule",
]
