"""Validation tests for recurrence_lite.lite_models."""

import logging
from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from recurrence_lite.lite_models import (
    PAYLOAD_FIELDS,
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

pytestmark = pytest.mark.unit


class TestRecurrenceRule:
    """Tests for RecurrenceRule field normalization."""

    def test_defaults_are_weekly_every_week_never_ending(self) -> None:
        rule = RecurrenceRule()

        assert rule.frequency == Frequency.WEEKLY
        assert rule.interval == 1
        assert rule.by_weekday == []
        assert rule.end == EndNever()
        assert rule.occurrence_count_hint is None

    @pytest.mark.parametrize("raw", [0, -1, -30, None])
    def test_non_positive_or_missing_interval_is_clamped_to_one(self, raw: object) -> None:
        assert RecurrenceRule(interval=raw).interval == 1

    def test_clamping_interval_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="recurrence_lite.lite_models"):
            RecurrenceRule(interval=0)

        assert "clamping to 1" in caplog.text

    def test_non_numeric_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecurrenceRule(interval="often")

    def test_fractional_interval_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must be an integer"):
            RecurrenceRule(interval=2.7)

    def test_integral_float_interval_accepted(self) -> None:
        assert RecurrenceRule(interval=3.0).interval == 3

    def test_weekdays_sorted_and_deduplicated(self) -> None:
        rule = RecurrenceRule(by_weekday=["FR", "MO", "WE", "MO"])

        assert rule.by_weekday == [Weekday.MO, Weekday.WE, Weekday.FR]

    def test_end_is_discriminated_by_kind(self) -> None:
        rule = RecurrenceRule.model_validate({"end": {"kind": "after", "count": 3}})
        assert rule.end == EndAfterCount(count=3)

        rule = RecurrenceRule.model_validate({"end": {"kind": "on", "on_date": "2025-04-30"}})
        assert rule.end == EndOnDate(on_date=date(2025, 4, 30))

    def test_after_count_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            EndAfterCount(count=0)

    def test_rule_is_immutable(self) -> None:
        rule = RecurrenceRule()

        with pytest.raises(ValidationError):
            rule.interval = 3  # type: ignore[misc]

    def test_json_dump_uses_tokens(self) -> None:
        rule = RecurrenceRule(by_weekday=[Weekday.MO], end=EndAfterCount(count=2))

        dumped = rule.model_dump(mode="json")

        assert dumped["frequency"] == "WEEKLY"
        assert dumped["by_weekday"] == ["MO"]
        assert dumped["end"] == {"kind": "after", "count": 2}


class TestWeekday:
    def test_from_date(self) -> None:
        assert Weekday.from_date(date(2025, 4, 7)) == Weekday.MO
        assert Weekday.from_date(date(2025, 4, 13)) == Weekday.SU

    def test_python_weekday_number(self) -> None:
        assert Weekday.MO.python_weekday == 0
        assert Weekday.WE.python_weekday == 2
        assert Weekday.SU.python_weekday == 6


class TestCalendarEvent:
    """Tests for CalendarEvent span validation and helpers."""

    def test_end_must_be_after_start(self) -> None:
        start = datetime(2025, 4, 7, 9, 0)

        with pytest.raises(ValidationError, match="must be after start"):
            CalendarEvent(title="Bad", start=start, end=start)

    def test_mixed_naive_and_aware_rejected(self) -> None:
        with pytest.raises(ValidationError, match="naive"):
            CalendarEvent(
                title="Bad",
                start=datetime(2025, 4, 7, 9, 0),
                end=datetime(2025, 4, 7, 10, 0, tzinfo=timezone.utc),
            )

    def test_ids_are_generated_and_unique(self) -> None:
        start = datetime(2025, 4, 7, 9, 0)
        first = CalendarEvent(title="A", start=start, end=start + timedelta(hours=1))
        second = CalendarEvent(title="A", start=start, end=start + timedelta(hours=1))

        assert first.id
        assert first.id != second.id

    def test_duration_and_payload(self, monday_base: CalendarEvent) -> None:
        assert monday_base.duration == timedelta(hours=1)

        payload = monday_base.payload()

        assert set(payload) == set(PAYLOAD_FIELDS)
        assert payload["title"] == "Team Standup"
        assert payload["color"] == "blue"

    def test_member_status_defaults_to_no_response(self) -> None:
        member = Member(id="m1", name="Alex")

        assert member.status == MemberStatus.NO_RESPONSE
        assert member.status == "no response"


class TestOccurrence:
    def test_occurrence_requires_rule_and_series(self) -> None:
        start = datetime(2025, 4, 7, 9, 0)

        with pytest.raises(ValidationError):
            Occurrence(title="A", start=start, end=start + timedelta(hours=1))

    def test_occurrence_is_recurring(self) -> None:
        start = datetime(2025, 4, 7, 9, 0)
        occurrence = Occurrence(
            title="A",
            start=start,
            end=start + timedelta(hours=1),
            recurrence_pattern=RecurrenceRule(),
            series_id="s1",
        )

        assert occurrence.recurring is True
        assert occurrence.pattern_changed is False


class TestEventEdits:
    def test_only_explicitly_set_fields_are_applied(self) -> None:
        edits = EventEdits(title="Retro", description=None)

        assert edits.as_update() == {"title": "Retro"}

    def test_empty_edits(self) -> None:
        assert EventEdits().as_update() == {}

    def test_explicit_none_clears_color(self) -> None:
        assert EventEdits(color=None).as_update() == {"color": None}

    def test_explicit_none_ignored_for_required_fields(self) -> None:
        edits = EventEdits(title=None, all_day=None, members=None, color="red")

        assert edits.as_update() == {"color": "red"}


class TestEnums:
    def test_edit_scope_accepts_front_end_spelling(self) -> None:
        assert EditScope("thisAndFollowing") == EditScope.THIS_AND_FOLLOWING
        assert EditScope("this_and_following") == EditScope.THIS_AND_FOLLOWING

    def test_edit_scope_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            EditScope("everything")

    def test_rule_resolution_heuristic_flag(self) -> None:
        inferred = RuleResolution(rule=RecurrenceRule(), source=RuleSource.INFERRED)
        stored = RuleResolution(rule=RecurrenceRule(), source=RuleSource.STORED)

        assert inferred.is_heuristic is True
        assert stored.is_heuristic is False
