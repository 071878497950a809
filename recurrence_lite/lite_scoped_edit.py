"""Scoped update and delete of a recurring series.

Both operations split the series the same way:

- ``this``: only the targeted occurrence
- ``this_and_following``: the target and every occurrence starting at or after it
- ``all``: the whole series

Dates never change here; only payload fields are edited. Inputs are never
mutated: a new list of (copied) occurrences is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from .lite_exceptions import OccurrenceNotFoundError
from .lite_models import CalendarEvent, EditScope, EventEdits

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=CalendarEvent)


def _find_target(series: Sequence[EventT], target_id: str) -> EventT:
    for event in series:
        if event.id == target_id:
            return event
    raise OccurrenceNotFoundError(target_id)


def _in_scope(event: CalendarEvent, target: CalendarEvent, scope: EditScope) -> bool:
    if scope == EditScope.ALL:
        return True
    if scope == EditScope.THIS_AND_FOLLOWING:
        return event.start >= target.start
    return event.id == target.id


def apply_scoped_edit(
    series: Sequence[EventT],
    target_id: str,
    edits: EventEdits,
    scope: EditScope,
) -> list[EventT]:
    """Apply payload edits to the part of ``series`` selected by ``scope``.

    Args:
        series: Occurrences of one series
        target_id: Occurrence the user acted on
        edits: Payload fields to change
        scope: Which occurrences are affected

    Returns:
        New list of occurrences, same order and dates as ``series``

    Raises:
        OccurrenceNotFoundError: If ``target_id`` is not in ``series``
    """
    scope = EditScope(scope)
    target = _find_target(series, target_id)
    update = edits.as_update()

    result = []
    touched = 0
    for event in series:
        if not _in_scope(event, target, scope):
            result.append(event.model_copy())
            continue
        changes = dict(update)
        if "members" in changes:
            changes["members"] = [member.model_copy() for member in changes["members"]]
        if scope == EditScope.THIS:
            changes["pattern_changed"] = True
        result.append(event.model_copy(update=changes, deep=True))
        touched += 1

    logger.debug(
        "Scoped edit %s on %s updated %d of %d occurrences (fields=%s)",
        scope.value,
        target_id,
        touched,
        len(series),
        sorted(update),
    )
    return result


def delete_scoped(
    series: Sequence[EventT],
    target_id: str,
    scope: EditScope,
) -> list[EventT]:
    """Remove the part of ``series`` selected by ``scope``.

    Returns:
        The remaining occurrences

    Raises:
        OccurrenceNotFoundError: If ``target_id`` is not in ``series``
    """
    scope = EditScope(scope)
    target = _find_target(series, target_id)
    remaining = [event.model_copy() for event in series if not _in_scope(event, target, scope)]
    logger.debug(
        "Scoped delete %s on %s removed %d of %d occurrences",
        scope.value,
        target_id,
        len(series) - len(remaining),
        len(series),
    )
    return remaining
