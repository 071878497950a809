"""Occurrence generation for recurrence_lite.

Expands a RecurrenceRule plus a base CalendarEvent into concrete Occurrence
instances. Dates come from dateutil's rrule evaluated over calendar days;
the base event's wall-clock time of day and duration are then laid onto each
date. Local wall-clock arithmetic is intentional: a 09:00-10:00 event stays
09:00-10:00 on both sides of a daylight-saving change.
"""

import logging
import time
from datetime import date, datetime, timedelta
from datetime import time as dt_time
from typing import Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, YEARLY, rrule

from .config_loader import Config
from .lite_exceptions import GenerationEmptyError
from .lite_models import (
    CalendarEvent,
    EndAfterCount,
    EndOnDate,
    Frequency,
    Occurrence,
    RecurrenceRule,
    new_event_id,
)
from .lite_rule_builder import effective_weekdays, validate_rule_for_event

logger = logging.getLogger(__name__)

_RRULE_FREQUENCIES = {
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
    Frequency.YEARLY: YEARLY,
}

# Indexed by Python weekday number (Monday == 0)
_RRULE_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


class LiteRecurrenceExpander:
    """Expands recurrence rules into occurrence lists.

    The expander is stateless apart from its configuration, so one instance
    can serve any number of edit sessions.
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize expander with configuration.

        Args:
            config: Configuration; defaults to Config() when omitted
        """
        self.config = config or Config()
        self.never_horizon_years = self.config.never_horizon_years

        logger.debug(
            "LiteRecurrenceExpander initialized: never_horizon_years=%d",
            self.never_horizon_years,
        )

    def occurrence_dates(self, rule: RecurrenceRule, base: CalendarEvent) -> list[date]:
        """Return the bounded, ascending list of calendar dates for a rule.

        Args:
            rule: Recurrence rule
            base: Base event; its start date anchors the sequence

        Returns:
            Calendar dates holding an occurrence

        Raises:
            RecurrenceValidationError: If the rule's end date precedes the base start
        """
        validate_rule_for_event(rule, base)

        dtstart = datetime.combine(base.start.date(), dt_time.min)
        byweekday = None
        if rule.frequency == Frequency.WEEKLY:
            byweekday = [
                _RRULE_WEEKDAYS[day.python_weekday] for day in effective_weekdays(rule, base)
            ]

        if isinstance(rule.end, EndAfterCount):
            bound = {"count": rule.end.count}
        elif isinstance(rule.end, EndOnDate):
            bound = {"until": datetime.combine(rule.end.on_date, dt_time.min)}
        else:
            horizon = dtstart + relativedelta(years=self.never_horizon_years)
            logger.debug(
                "Never-ending rule capped at %s (%d years)",
                horizon.date().isoformat(),
                self.never_horizon_years,
            )
            bound = {"until": horizon}

        rule_set = rrule(
            _RRULE_FREQUENCIES[rule.frequency],
            dtstart=dtstart,
            interval=rule.interval,
            byweekday=byweekday,
            **bound,
        )
        return [occurrence.date() for occurrence in rule_set]

    def generate_occurrences(
        self,
        base: CalendarEvent,
        rule: RecurrenceRule,
        dates: list[date],
    ) -> list[Occurrence]:
        """Build an Occurrence for each date.

        Args:
            base: Base event template
            rule: Rule attached to every occurrence as its recurrence pattern
            dates: Calendar dates, ascending

        Returns:
            List of Occurrence instances
        """
        series_id = base.series_id or base.id
        payload = base.payload()
        occurrences = []

        for day in dates:
            start, end = self._occurrence_span(base, day)
            payload["members"] = [member.model_copy() for member in base.members]
            occurrence = Occurrence(
                **payload,
                id=new_event_id(),
                start=start,
                end=end,
                recurring=True,
                pattern_changed=False,
                recurrence_pattern=rule,
                series_id=series_id,
            )
            occurrences.append(occurrence)

        return occurrences

    def expand(self, rule: RecurrenceRule, base: CalendarEvent) -> list[Occurrence]:
        """Expand a rule and base event into a full, freshly generated series.

        Raises:
            RecurrenceValidationError: If the rule is invalid for this event
            GenerationEmptyError: If no occurrence could be produced
        """
        start_time = time.time()
        dates = self.occurrence_dates(rule, base)
        if not dates:
            logger.error(
                "Recurrence expansion produced no dates for event %s (rule=%r)",
                base.id,
                rule,
            )
            raise GenerationEmptyError(
                f"Rule {rule.frequency.value} produced no occurrences for event {base.id}"
            )

        occurrences = self.generate_occurrences(base, rule, dates)
        logger.debug(
            "Recurrence expansion completed: event=%s, occurrences=%d, elapsed=%.1fms",
            base.id,
            len(occurrences),
            (time.time() - start_time) * 1000,
        )
        return occurrences

    @staticmethod
    def _occurrence_span(base: CalendarEvent, day: date) -> tuple[datetime, datetime]:
        if base.all_day:
            start = datetime.combine(day, dt_time.min, tzinfo=base.start.tzinfo)
            span_days = max((base.end.date() - base.start.date()).days, 1)
            return start, start + timedelta(days=span_days)

        start = datetime.combine(day, base.start.timetz())
        return start, start + base.duration


def generate(
    rule: RecurrenceRule, base: CalendarEvent, config: Optional[Config] = None
) -> list[Occurrence]:
    """Expand ``rule`` for ``base`` into an ascending list of occurrences."""
    return LiteRecurrenceExpander(config).expand(rule, base)
