"""Exception hierarchy for recurrence_lite.

Every failure in the engine is local and synchronous: it is raised to the
immediate caller (usually the edit session or the form controller) and never
retried. Callers show the message inline and keep their previous state.
"""

from __future__ import annotations

from typing import Any


class RecurrenceError(Exception):
    """Base exception for all recurrence engine errors."""


class RecurrenceValidationError(RecurrenceError):
    """Rule or event input failed validation.

    Raised when:
    - COUNT is zero or negative
    - An UNTIL date falls before the base event start
    - A frequency or weekday token is unknown

    Attributes:
        field: Name of the offending form field, if known
        previous_value: Last valid value of that field, so the caller can revert
    """

    def __init__(
        self, message: str, field: str | None = None, previous_value: Any = None
    ) -> None:
        super().__init__(message)
        self.field = field
        self.previous_value = previous_value


class RRuleParseError(RecurrenceValidationError):
    """Error parsing an RRULE string."""


class OccurrenceNotFoundError(RecurrenceError):
    """A scoped edit or delete targeted an id absent from the series."""

    def __init__(self, target_id: str) -> None:
        super().__init__(f"Occurrence {target_id!r} not found in series")
        self.target_id = target_id


class GenerationEmptyError(RecurrenceError):
    """Occurrence generation produced no dates for a bounded rule."""


class EditSessionClosedError(RecurrenceError):
    """The edit session was already committed or discarded."""
