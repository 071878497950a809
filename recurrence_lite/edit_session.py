"""Edit-session controller for recurring events.

One session owns the draft base event, the draft rule and the draft
occurrence list for the whole time a user edits an event's recurrence. Sub
dialogs receive the session itself instead of exchanging drafts through a
shared scratch store. Nothing reaches the calendar until ``commit()``;
``discard()`` (or leaving a ``with`` block without committing) drops the
draft and leaves the committed series untouched.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import Iterator, Sequence
from contextvars import ContextVar
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from .config_loader import Config
from .lite_exceptions import EditSessionClosedError, RecurrenceValidationError
from .lite_models import (
    CalendarEvent,
    EndAfterCount,
    EndOnDate,
    EventEdits,
    Occurrence,
    RecurrenceRule,
    RuleResolution,
    RuleSource,
)
from .lite_pattern_inference import resolve_rule
from .lite_rrule_expander import LiteRecurrenceExpander
from .lite_rule_builder import build_rule, default_rule_for, validate_rule_for_event

logger = logging.getLogger(__name__)

# Id of the session whose method is currently running, for log records
session_id_var: ContextVar[str] = ContextVar("session_id", default="")


def get_session_id() -> str:
    """Get the current edit session id, or "no-session" outside of a session call."""
    return session_id_var.get() or "no-session"


class SessionState(str, Enum):
    """Lifecycle of an edit session."""

    NEW = "new"
    OPEN = "open"
    COMMITTED = "committed"
    DISCARDED = "discarded"


def _rule_form_values(rule: RecurrenceRule) -> dict[str, Any]:
    """Flatten a rule into the keyword arguments accepted by build_rule()."""
    values: dict[str, Any] = {
        "frequency": rule.frequency,
        "interval": rule.interval,
        "by_weekday": list(rule.by_weekday),
        "end_type": rule.end.kind,
        "on_date": None,
        "occurrence_count": None,
    }
    if isinstance(rule.end, EndOnDate):
        values["on_date"] = rule.end.on_date
    elif isinstance(rule.end, EndAfterCount):
        values["occurrence_count"] = rule.end.count
    return values


class RecurrenceEditSession:
    """Holds the draft state of one recurrence edit from begin to commit/discard."""

    def __init__(
        self,
        base: CalendarEvent,
        existing_series: Optional[Sequence[CalendarEvent]] = None,
        config: Optional[Config] = None,
        expander: Optional[LiteRecurrenceExpander] = None,
    ):
        """Create a session.

        Args:
            base: Event being edited (a plain event or one occurrence of a series)
            existing_series: Committed occurrences of the series, if the event
                             already recurs
            config: Engine configuration
            expander: Expander to use; built from ``config`` when omitted
        """
        self.session_id = uuid.uuid4().hex[:8]
        self._expander = expander or LiteRecurrenceExpander(config)
        self._committed_base = base
        self._existing = list(existing_series or [])

        self._state = SessionState.NEW
        self._base: Optional[CalendarEvent] = None
        self._rule: Optional[RecurrenceRule] = None
        self._draft: list[Occurrence] = []
        self._last_count: Optional[int] = None
        self.rule_source: Optional[RuleSource] = None

    @contextlib.contextmanager
    def _log_context(self) -> Iterator[None]:
        token = session_id_var.set(self.session_id)
        try:
            yield
        finally:
            session_id_var.reset(token)

    def _require_open(self) -> None:
        if self._state != SessionState.OPEN:
            raise EditSessionClosedError(
                f"Edit session {self.session_id} is {self._state.value}, not open"
            )

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #

    def begin_edit(self) -> list[Occurrence]:
        """Open the session, resolve the starting rule and render the draft series.

        The starting rule is, in order: a rule stored on the existing series
        or on the base event, a rule inferred from the existing occurrence
        dates, or the default weekly rule on the base start weekday.

        Returns:
            The initial draft occurrences
        """
        with self._log_context():
            if self._state == SessionState.OPEN:
                return self.draft
            if self._state != SessionState.NEW:
                raise EditSessionClosedError(
                    f"Edit session {self.session_id} is {self._state.value}"
                )

            self._base = self._committed_base.model_copy(deep=True)
            resolution = self._resolve_starting_rule(self._base)
            self.rule_source = resolution.source
            self._draft = self._expander.expand(resolution.rule, self._base)
            self._rule = resolution.rule
            if isinstance(resolution.rule.end, EndAfterCount):
                self._last_count = resolution.rule.end.count
            elif resolution.rule.occurrence_count_hint:
                self._last_count = resolution.rule.occurrence_count_hint
            self._state = SessionState.OPEN

            logger.info(
                "Edit session opened for event %s: rule source=%s, %d draft occurrences",
                self._base.id,
                self.rule_source.value,
                len(self._draft),
            )
            return self.draft

    def _resolve_starting_rule(self, base: CalendarEvent) -> RuleResolution:
        resolution = resolve_rule(self._existing) if self._existing else None
        if resolution is not None:
            return resolution
        if base.recurrence_pattern is not None:
            return RuleResolution(rule=base.recurrence_pattern, source=RuleSource.STORED)
        default = default_rule_for(base, self._expander.config.default_frequency)
        return RuleResolution(rule=default, source=RuleSource.DEFAULT)

    def commit(self) -> list[Occurrence]:
        """Close the session and hand back the draft series.

        Raises:
            EditSessionClosedError: If the session is not open
        """
        with self._log_context():
            self._require_open()
            committed = self.draft
            self._state = SessionState.COMMITTED
            logger.info(
                "Edit session committed %d occurrences for series %s",
                len(committed),
                committed[0].series_id if committed else None,
            )
            return committed

    def discard(self) -> bool:
        """Drop the draft without touching the committed series.

        Returns:
            True if a draft was dropped, False if the session was already closed
        """
        with self._log_context():
            if self._state in (SessionState.COMMITTED, SessionState.DISCARDED):
                return False
            self._state = SessionState.DISCARDED
            self._draft = []
            self._base = None
            self._rule = None
            logger.debug("Edit session discarded")
            return True

    def __enter__(self) -> RecurrenceEditSession:
        self.begin_edit()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.discard()

    # ------------------------------------------------------------------ #
    #  Draft state
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def base(self) -> CalendarEvent:
        self._require_open()
        if self._base is None:
            raise EditSessionClosedError(f"Edit session {self.session_id} has no draft event")
        return self._base

    @property
    def rule(self) -> RecurrenceRule:
        self._require_open()
        if self._rule is None:
            raise EditSessionClosedError(f"Edit session {self.session_id} has no draft rule")
        return self._rule

    @property
    def draft(self) -> list[Occurrence]:
        """Copy of the current draft occurrences."""
        return [occurrence.model_copy() for occurrence in self._draft]

    @property
    def original_series(self) -> list[CalendarEvent]:
        """The committed series this session started from (never modified)."""
        return list(self._existing)

    # ------------------------------------------------------------------ #
    #  Mutators - each one regenerates the whole draft
    # ------------------------------------------------------------------ #

    def set_rule(self, rule: RecurrenceRule) -> list[Occurrence]:
        """Replace the draft rule and regenerate the draft series.

        On failure the previous rule and draft stay in place.
        """
        with self._log_context():
            self._require_open()
            validate_rule_for_event(rule, self.base)
            draft = self._expander.expand(rule, self.base)
            self._rule = rule
            self._draft = draft
            if isinstance(rule.end, EndAfterCount):
                self._last_count = rule.end.count
            logger.debug("Draft rule updated: %s", rule)
            return self.draft

    def update_rule(self, **form_fields: Any) -> list[Occurrence]:
        """Change individual rule fields the way the recurrence form does.

        Accepts the keyword arguments of build_rule(); unspecified fields keep
        their current value.

        Raises:
            RecurrenceValidationError: With ``previous_value`` set to the last
                valid value when the occurrence count is rejected
        """
        with self._log_context():
            self._require_open()
            values = _rule_form_values(self.rule)
            values.update(form_fields)
            if values["end_type"] == "after" and values["occurrence_count"] is None:
                values["occurrence_count"] = self._last_count
            try:
                rule = build_rule(**values)
            except RecurrenceValidationError as exc:
                if exc.field == "occurrence_count":
                    exc.previous_value = self._last_count
                    logger.info(
                        "Rejected occurrence count %r; keeping %r",
                        form_fields.get("occurrence_count"),
                        self._last_count,
                    )
                raise
            return self.set_rule(rule)

    def set_occurrence_count(self, count: int) -> list[Occurrence]:
        """End the series after ``count`` occurrences.

        A non-positive count is rejected and the previous valid count is kept.
        """
        return self.update_rule(end_type="after", occurrence_count=count)

    def set_end_date(self, on_date: date) -> list[Occurrence]:
        """End the series on ``on_date`` (inclusive)."""
        return self.update_rule(end_type="on", on_date=on_date)

    def update_base(
        self,
        edits: Optional[EventEdits] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Occurrence]:
        """Edit the draft base event and regenerate the draft series.

        Raises:
            RecurrenceValidationError: If the new start/end span is invalid
        """
        with self._log_context():
            self._require_open()
            data = {name: getattr(self.base, name) for name in CalendarEvent.model_fields}
            if edits is not None:
                data.update(edits.as_update())
            if start is not None:
                data["start"] = start
            if end is not None:
                data["end"] = end
            try:
                base = CalendarEvent(**data)
            except ValidationError as exc:
                raise RecurrenceValidationError(
                    f"Invalid event times: {exc}", field="end"
                ) from exc

            validate_rule_for_event(self.rule, base)
            draft = self._expander.expand(self.rule, base)
            self._base = base
            self._draft = draft
            logger.debug("Draft base event %s updated", base.id)
            return self.draft
