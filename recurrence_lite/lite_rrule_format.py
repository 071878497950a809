"""RRULE notation for recurrence rules.

Only the subset the engine supports is read or written:
FREQ, INTERVAL, BYDAY, UNTIL and COUNT. UNTIL is written as a floating local
end-of-day timestamp since the engine works in a single local time zone.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from pydantic import ValidationError

from .lite_exceptions import RecurrenceValidationError, RRuleParseError
from .lite_models import (
    CalendarEvent,
    EndAfterCount,
    EndNever,
    EndOnDate,
    Frequency,
    RecurrenceRule,
)
from .lite_rule_builder import effective_weekdays, parse_weekdays

logger = logging.getLogger(__name__)

SUPPORTED_KEYS = ("FREQ", "INTERVAL", "BYDAY", "UNTIL", "COUNT")


def format_rrule(rule: RecurrenceRule, base: Optional[CalendarEvent] = None) -> str:
    """Render a rule as an RRULE value (without the ``RRULE:`` prefix).

    Args:
        rule: Rule to render
        base: Optional base event; when given, an empty weekday set of a
              WEEKLY rule is written as the base start weekday

    Returns:
        RRULE string such as ``FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;COUNT=4``
    """
    parts = [f"FREQ={rule.frequency.value}", f"INTERVAL={rule.interval}"]

    if rule.frequency == Frequency.WEEKLY:
        days = effective_weekdays(rule, base) if base is not None else rule.by_weekday
        if days:
            parts.append("BYDAY=" + ",".join(day.value for day in days))

    if isinstance(rule.end, EndOnDate):
        parts.append(f"UNTIL={rule.end.on_date.strftime('%Y%m%d')}T235959")
    elif isinstance(rule.end, EndAfterCount):
        parts.append(f"COUNT={rule.end.count}")

    return ";".join(parts)


def _parse_until(value: str) -> date:
    raw = value.strip().rstrip("Z")
    for fmt in ("%Y%m%dT%H%M%S", "%Y%m%d"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    raise RRuleParseError(f"Invalid UNTIL value {value!r}", field="on_date")


def parse_rrule_string(rrule_string: str) -> RecurrenceRule:
    """Parse an RRULE string into a RecurrenceRule.

    Args:
        rrule_string: RRULE string (e.g. "FREQ=WEEKLY;INTERVAL=1;BYDAY=MO"),
                      optionally prefixed with ``RRULE:``

    Returns:
        Parsed RecurrenceRule

    Raises:
        RRuleParseError: If the RRULE string is invalid or uses both UNTIL and COUNT
    """
    if not rrule_string or not rrule_string.strip():
        raise RRuleParseError("Empty RRULE string")

    text = rrule_string.strip()
    if text.upper().startswith("RRULE:"):
        text = text[len("RRULE:"):]

    values: dict[str, str] = {}
    for part in text.split(";"):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip().upper()
        if key not in SUPPORTED_KEYS:
            logger.debug("Ignoring unsupported RRULE part %s=%s", key, value)
            continue
        values[key] = value.strip()

    if not values.get("FREQ"):
        raise RRuleParseError("RRULE missing required FREQ parameter", field="frequency")
    if "UNTIL" in values and "COUNT" in values:
        raise RRuleParseError("RRULE must not contain both UNTIL and COUNT", field="end_type")

    fields: dict[str, Any] = {}
    try:
        fields["frequency"] = Frequency(values["FREQ"].upper())
        if "INTERVAL" in values:
            fields["interval"] = int(values["INTERVAL"])
        if "BYDAY" in values:
            fields["by_weekday"] = parse_weekdays(
                day for day in values["BYDAY"].split(",") if day.strip()
            )
    except (ValueError, RecurrenceValidationError) as exc:
        raise RRuleParseError(f"Invalid RRULE format: {rrule_string}") from exc

    if "UNTIL" in values:
        fields["end"] = EndOnDate(on_date=_parse_until(values["UNTIL"]))
    elif "COUNT" in values:
        try:
            count = int(values["COUNT"])
        except ValueError as exc:
            raise RRuleParseError(
                f"Invalid COUNT value {values['COUNT']!r}", field="occurrence_count"
            ) from exc
        if count < 1:
            raise RRuleParseError(
                f"COUNT must be at least 1, got {count}", field="occurrence_count"
            )
        fields["end"] = EndAfterCount(count=count)
    else:
        fields["end"] = EndNever()

    try:
        return RecurrenceRule(**fields)
    except ValidationError as exc:
        raise RRuleParseError(f"Invalid RRULE format: {rrule_string}") from exc
