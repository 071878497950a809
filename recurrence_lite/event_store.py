"""In-memory calendar event collection that committed series are merged into."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Union

from .edit_session import RecurrenceEditSession
from .lite_exceptions import OccurrenceNotFoundError
from .lite_models import CalendarEvent, EditScope, EventEdits, MemberStatus
from .lite_scoped_edit import apply_scoped_edit, delete_scoped

logger = logging.getLogger(__name__)


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


class CalendarEventStore:
    """Holds the calendar's events and routes recurring edits through scoped edit.

    A series is identified by ``series_id``; events without one are treated
    as standalone even when flagged recurring.
    """

    def __init__(self, events: Optional[list[CalendarEvent]] = None):
        self._events: list[CalendarEvent] = list(events or [])
        # Snapshot taken before the most recent delete, for undo
        self._before_delete: Optional[list[CalendarEvent]] = None

    @property
    def events(self) -> list[CalendarEvent]:
        """Copy of all events."""
        return list(self._events)

    def get(self, event_id: str) -> CalendarEvent:
        """Return the event with ``event_id``.

        Raises:
            OccurrenceNotFoundError: If no such event exists
        """
        for event in self._events:
            if event.id == event_id:
                return event
        raise OccurrenceNotFoundError(event_id)

    def series(self, series_id: str) -> list[CalendarEvent]:
        """Events of one series, ascending by start."""
        members = [event for event in self._events if event.series_id == series_id]
        return sorted(members, key=lambda event: event.start)

    # ------------------------------------------------------------------ #
    #  Adding
    # ------------------------------------------------------------------ #

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        self._events.append(event)
        logger.debug("Added event %s (%s)", event.id, event.title)
        return event

    def add_series(self, occurrences: list[CalendarEvent]) -> int:
        self._events.extend(occurrences)
        logger.debug("Added %d occurrences", len(occurrences))
        return len(occurrences)

    def replace_series(self, series_id: str, occurrences: list[CalendarEvent]) -> int:
        """Drop every event of ``series_id`` and add ``occurrences`` instead."""
        kept = [event for event in self._events if event.series_id != series_id]
        removed = len(self._events) - len(kept)
        self._events = kept + list(occurrences)
        logger.info(
            "Replaced series %s: removed %d, added %d", series_id, removed, len(occurrences)
        )
        return len(occurrences)

    def commit_session(self, session: RecurrenceEditSession) -> int:
        """Commit an edit session and merge its series into the calendar.

        Any previous events of the same series are replaced, and so is the
        standalone base event the series was created from.
        """
        occurrences = session.commit()
        if not occurrences:
            return 0
        series_id = occurrences[0].series_id
        self._events = [event for event in self._events if event.id != series_id]
        return self.replace_series(series_id, list(occurrences))

    # ------------------------------------------------------------------ #
    #  Scoped update / delete
    # ------------------------------------------------------------------ #

    def _is_series_member(self, event: CalendarEvent) -> bool:
        return event.recurring and event.series_id is not None

    def update_event(
        self,
        event_id: str,
        edits: EventEdits,
        scope: Optional[EditScope] = None,
    ) -> list[CalendarEvent]:
        """Update an event, or part of its series for recurring events.

        Returns:
            The events that were rewritten

        Raises:
            OccurrenceNotFoundError: If ``event_id`` is unknown
        """
        target = self.get(event_id)
        if not self._is_series_member(target):
            updated = target.model_copy(update=edits.as_update(), deep=True)
            self._events = [updated if event.id == event_id else event for event in self._events]
            return [updated]

        scope = EditScope(scope) if scope is not None else EditScope.THIS
        series = self.series(target.series_id)  # type: ignore[arg-type]
        rewritten = apply_scoped_edit(series, event_id, edits, scope)
        by_id = {event.id: event for event in rewritten}
        self._events = [by_id.get(event.id, event) for event in self._events]
        return rewritten

    def delete_event(self, event_id: str, scope: Optional[EditScope] = None) -> int:
        """Delete an event, or part of its series for recurring events.

        Returns:
            Number of events removed

        Raises:
            OccurrenceNotFoundError: If ``event_id`` is unknown
        """
        target = self.get(event_id)
        self._before_delete = [event.model_copy(deep=True) for event in self._events]

        if not self._is_series_member(target):
            self._events = [event for event in self._events if event.id != event_id]
            return 1

        scope = EditScope(scope) if scope is not None else EditScope.THIS
        series = self.series(target.series_id)  # type: ignore[arg-type]
        remaining_ids = {event.id for event in delete_scoped(series, event_id, scope)}
        removed_ids = {event.id for event in series} - remaining_ids
        self._events = [event for event in self._events if event.id not in removed_ids]
        logger.info(
            "Deleted %d events (%s) from series %s",
            len(removed_ids),
            scope.value,
            target.series_id,
        )
        return len(removed_ids)

    def restore_last_deleted(self) -> bool:
        """Undo the most recent delete.

        Returns:
            True if events were restored, False if there was nothing to undo
        """
        if not self._before_delete:
            return False
        self._events = self._before_delete
        self._before_delete = None
        logger.info("Restored %d events from before the last delete", len(self._events))
        return True

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def search(self, query: str) -> list[CalendarEvent]:
        """Events whose title contains ``query`` (case-insensitive)."""
        needle = query.lower()
        return [event for event in self._events if needle in event.title.lower()]

    def filter_events(
        self,
        date_from: Union[date, datetime, None] = None,
        date_to: Union[date, datetime, None] = None,
        color: Optional[str] = None,
    ) -> list[CalendarEvent]:
        """Events starting within [date_from, date_to] (inclusive) and matching ``color``.

        The date range applies only when both ends are given.
        """
        results = []
        for event in self._events:
            if color and event.color != color:
                continue
            if date_from is not None and date_to is not None:
                start_day = event.start.date()
                if not _as_date(date_from) <= start_day <= _as_date(date_to):
                    continue
            results.append(event)
        return results

    def respond(self, event_id: str, member_id: str, status: MemberStatus) -> CalendarEvent:
        """Record ``member_id``'s response to an event invitation."""
        target = self.get(event_id)
        status = MemberStatus(status)
        members = [
            member.model_copy(update={"status": status.value})
            if member.id == member_id
            else member
            for member in target.members
        ]
        updated = target.model_copy(
            update={
                "members": members,
                "invitation_accepted": status == MemberStatus.ACCEPTED,
            }
        )
        self._events = [updated if event.id == event_id else event for event in self._events]
        return updated
