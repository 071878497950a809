"""Best-effort reconstruction of a recurrence rule from occurrence dates.

Used when an already-recurring event is reopened for editing and its series
carries no stored rule. The mapping is a heuristic and not an exact inverse
of generation: expanding a rule and inferring it back can yield a different
rule (e.g. a 28-day gap reads as every 4 weeks, never as monthly).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from .lite_models import (
    CalendarEvent,
    EndOnDate,
    Frequency,
    RecurrenceRule,
    RuleResolution,
    RuleSource,
    Weekday,
)

logger = logging.getLogger(__name__)


def _frequency_for_gap(gap_days: int) -> tuple[Frequency, int]:
    """Map the day gap between the first two occurrences to (frequency, interval)."""
    if gap_days == 1:
        return Frequency.DAILY, 1
    if 1 < gap_days < 7:
        return Frequency.DAILY, gap_days
    if gap_days > 0 and gap_days % 7 == 0:
        return Frequency.WEEKLY, gap_days // 7
    if 28 <= gap_days <= 31:
        return Frequency.MONTHLY, 1
    if 365 <= gap_days <= 366:
        return Frequency.YEARLY, 1
    return Frequency.WEEKLY, 1


def infer_rule(occurrences: Sequence[CalendarEvent]) -> Optional[RecurrenceRule]:
    """Infer a recurrence rule from existing occurrences.

    Args:
        occurrences: Events of one series, in any order

    Returns:
        The inferred rule, or None when fewer than two occurrences are given
        (callers fall back to single-occurrence editing)
    """
    if len(occurrences) < 2:
        return None

    ordered = sorted(occurrences, key=lambda event: event.start)
    first, second, last = ordered[0], ordered[1], ordered[-1]

    gap_days = (second.start.date() - first.start.date()).days
    frequency, interval = _frequency_for_gap(gap_days)

    seen = {Weekday.from_date(event.start) for event in ordered}
    rule = RecurrenceRule(
        frequency=frequency,
        interval=interval,
        by_weekday=list(seen),
        end=EndOnDate(on_date=last.start.date()),
        occurrence_count_hint=len(ordered),
    )
    logger.debug(
        "Inferred %s/%d from %d occurrences (gap=%d days)",
        frequency.value,
        interval,
        len(ordered),
        gap_days,
    )
    return rule


def resolve_rule(occurrences: Sequence[CalendarEvent]) -> Optional[RuleResolution]:
    """Find the rule for an existing series and report where it came from.

    A rule stored on any occurrence wins; otherwise the heuristic is used.
    Returns None when neither is available.
    """
    for event in occurrences:
        if event.recurrence_pattern is not None:
            return RuleResolution(rule=event.recurrence_pattern, source=RuleSource.STORED)

    inferred = infer_rule(occurrences)
    if inferred is None:
        return None
    logger.info("No stored recurrence rule; using inferred rule %s", inferred.frequency.value)
    return RuleResolution(rule=inferred, source=RuleSource.INFERRED)
