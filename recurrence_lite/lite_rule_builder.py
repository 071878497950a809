"""Build and validate recurrence rules from partial, form-style input."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from .lite_exceptions import RecurrenceValidationError
from .lite_models import (
    CalendarEvent,
    EndAfterCount,
    EndNever,
    EndOnDate,
    Frequency,
    RecurrenceRule,
    Weekday,
)

logger = logging.getLogger(__name__)

# Period names used by the calendar form alongside the RRULE names
FREQUENCY_ALIASES: dict[str, Frequency] = {
    "DAY": Frequency.DAILY,
    "WEEK": Frequency.WEEKLY,
    "MONTH": Frequency.MONTHLY,
    "YEAR": Frequency.YEARLY,
}

END_TYPES = ("never", "on", "after")


def parse_frequency(value: Union[str, Frequency]) -> Frequency:
    """Return the Frequency for an RRULE name or a form period alias."""
    if isinstance(value, Frequency):
        return value
    token = str(value).strip().upper()
    if token in FREQUENCY_ALIASES:
        return FREQUENCY_ALIASES[token]
    try:
        return Frequency(token)
    except ValueError as exc:
        raise RecurrenceValidationError(
            f"Unknown recurrence frequency {value!r}", field="frequency"
        ) from exc


def parse_weekdays(values: Iterable[Union[str, Weekday]]) -> list[Weekday]:
    """Convert weekday tokens (case-insensitive) into Weekday members."""
    days: list[Weekday] = []
    for value in values:
        token = value if isinstance(value, Weekday) else str(value).strip().upper()
        try:
            days.append(Weekday(token))
        except ValueError as exc:
            raise RecurrenceValidationError(
                f"Unknown weekday token {value!r}", field="by_weekday"
            ) from exc
    return days


def _as_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError as exc:
        raise RecurrenceValidationError(
            f"Invalid end date {value!r}", field="on_date"
        ) from exc


def build_rule(
    frequency: Union[str, Frequency, None] = None,
    interval: Any = None,
    by_weekday: Optional[Iterable[Union[str, Weekday]]] = None,
    end_type: Optional[str] = None,
    on_date: Union[date, datetime, str, None] = None,
    occurrence_count: Optional[int] = None,
) -> RecurrenceRule:
    """Construct a valid RecurrenceRule from possibly partial user input.

    Args:
        frequency: RRULE frequency or form period alias (default WEEKLY)
        interval: Step multiplier; missing -> 1, non-positive -> clamped to 1
        by_weekday: Weekday tokens; empty means "weekday of the event start"
        end_type: 'never' (default), 'on' or 'after'
        on_date: Inclusive end date, required when end_type == 'on'
        occurrence_count: Occurrence count, required when end_type == 'after'

    Returns:
        A validated RecurrenceRule

    Raises:
        RecurrenceValidationError: If any field cannot be made valid
    """
    freq = parse_frequency(frequency) if frequency is not None else Frequency.WEEKLY
    days = parse_weekdays(by_weekday or [])

    kind = (end_type or "never").strip().lower()
    if kind not in END_TYPES:
        raise RecurrenceValidationError(f"Unknown end type {end_type!r}", field="end_type")

    end: Union[EndNever, EndOnDate, EndAfterCount]
    if kind == "on":
        if on_date is None:
            raise RecurrenceValidationError(
                "An end date is required when the series ends on a date", field="on_date"
            )
        end = EndOnDate(on_date=_as_date(on_date))
    elif kind == "after":
        end = _end_after(occurrence_count)
    else:
        end = EndNever()

    try:
        return RecurrenceRule(frequency=freq, interval=interval, by_weekday=days, end=end)
    except ValidationError as exc:
        raise RecurrenceValidationError(f"Invalid recurrence rule: {exc}") from exc


def _end_after(occurrence_count: Any) -> EndAfterCount:
    try:
        count = int(occurrence_count)
    except (TypeError, ValueError) as exc:
        raise RecurrenceValidationError(
            f"Occurrence count must be a whole number, got {occurrence_count!r}",
            field="occurrence_count",
        ) from exc
    if count < 1:
        raise RecurrenceValidationError(
            f"Occurrence count must be at least 1, got {count}", field="occurrence_count"
        )
    return EndAfterCount(count=count)


def validate_rule_for_event(rule: RecurrenceRule, base: CalendarEvent) -> None:
    """Check the parts of a rule that depend on the base event.

    Raises:
        RecurrenceValidationError: If an end date precedes the event start
    """
    if isinstance(rule.end, EndOnDate) and rule.end.on_date < base.start.date():
        raise RecurrenceValidationError(
            f"End date {rule.end.on_date.isoformat()} is before the event start "
            f"{base.start.date().isoformat()}",
            field="on_date",
        )


def effective_weekdays(rule: RecurrenceRule, base: CalendarEvent) -> list[Weekday]:
    """Weekdays a WEEKLY rule expands on; defaults to the base start weekday."""
    if rule.by_weekday:
        return list(rule.by_weekday)
    return [Weekday.from_date(base.start)]


def default_rule_for(base: CalendarEvent, frequency: Frequency = Frequency.WEEKLY) -> RecurrenceRule:
    """Rule offered for an event that has never recurred."""
    return RecurrenceRule(
        frequency=frequency,
        by_weekday=[Weekday.from_date(base.start)],
        end=EndNever(),
    )
