"""Tests for scoped edit/delete of recurring series."""

import pytest

from recurrence_lite.lite_exceptions import OccurrenceNotFoundError
from recurrence_lite.lite_models import (
    CalendarEvent,
    EditScope,
    EndAfterCount,
    EventEdits,
    Member,
    Occurrence,
    RecurrenceRule,
    Weekday,
)
from recurrence_lite.lite_rrule_expander import generate
from recurrence_lite.lite_scoped_edit import apply_scoped_edit, delete_scoped

pytestmark = pytest.mark.unit


@pytest.fixture
def four_mondays(monday_base: CalendarEvent) -> list[Occurrence]:
    """Four weekly Monday occurrences generated from monday_base."""
    rule = RecurrenceRule(by_weekday=[Weekday.MO], end=EndAfterCount(count=4))
    return generate(rule, monday_base)


def test_edit_this_changes_only_target(four_mondays: list[Occurrence]) -> None:
    target = four_mondays[1]

    result = apply_scoped_edit(four_mondays, target.id, EventEdits(title="Moved"), EditScope.THIS)

    assert [o.title for o in result] == ["Team Standup", "Moved", "Team Standup", "Team Standup"]
    assert [o.pattern_changed for o in result] == [False, True, False, False]


@pytest.mark.critical_path
def test_edit_this_and_following(four_mondays: list[Occurrence]) -> None:
    target = four_mondays[2]

    result = apply_scoped_edit(
        four_mondays, target.id, EventEdits(color="red"), EditScope.THIS_AND_FOLLOWING
    )

    assert [o.color for o in result] == ["blue", "blue", "red", "red"]
    assert not any(o.pattern_changed for o in result)


def test_edit_all(four_mondays: list[Occurrence]) -> None:
    result = apply_scoped_edit(
        four_mondays, four_mondays[3].id, EventEdits(description="New agenda"), "all"
    )

    assert {o.description for o in result} == {"New agenda"}


def test_edit_all_can_clear_color(four_mondays: list[Occurrence]) -> None:
    result = apply_scoped_edit(
        four_mondays, four_mondays[0].id, EventEdits(color=None), EditScope.ALL
    )

    assert [o.color for o in result] == [None, None, None, None]
    assert all(o.title == "Team Standup" for o in result)


def test_edit_keeps_dates_order_and_ids(four_mondays: list[Occurrence]) -> None:
    result = apply_scoped_edit(four_mondays, four_mondays[0].id, EventEdits(title="X"), "all")

    assert [(o.id, o.start, o.end) for o in result] == [
        (o.id, o.start, o.end) for o in four_mondays
    ]


def test_edit_does_not_mutate_input(four_mondays: list[Occurrence]) -> None:
    target = four_mondays[1]

    result = apply_scoped_edit(four_mondays, target.id, EventEdits(title="Moved"), EditScope.ALL)

    assert all(o.title == "Team Standup" for o in four_mondays)
    assert all(a is not b for a, b in zip(result, four_mondays))


def test_edited_members_are_not_shared(four_mondays: list[Occurrence]) -> None:
    members = [Member(id="m2", name="Sam Roe")]

    result = apply_scoped_edit(
        four_mondays, four_mondays[0].id, EventEdits(members=members), EditScope.ALL
    )

    assert all(o.members == members for o in result)
    assert result[0].members[0] is not result[1].members[0]
    assert result[0].members[0] is not members[0]


def test_front_end_scope_spelling_accepted(four_mondays: list[Occurrence]) -> None:
    result = apply_scoped_edit(
        four_mondays, four_mondays[2].id, EventEdits(title="Later"), "thisAndFollowing"
    )

    assert [o.title for o in result][2:] == ["Later", "Later"]


def test_edit_unknown_target_raises(four_mondays: list[Occurrence]) -> None:
    before = [o.model_copy() for o in four_mondays]

    with pytest.raises(OccurrenceNotFoundError) as exc_info:
        apply_scoped_edit(four_mondays, "missing", EventEdits(title="X"), EditScope.ALL)

    assert exc_info.value.target_id == "missing"
    assert four_mondays == before


@pytest.mark.critical_path
def test_delete_this_and_following_from_second(four_mondays: list[Occurrence]) -> None:
    remaining = delete_scoped(four_mondays, four_mondays[1].id, EditScope.THIS_AND_FOLLOWING)

    assert [o.id for o in remaining] == [four_mondays[0].id]
    assert len(four_mondays) == 4


def test_delete_this(four_mondays: list[Occurrence]) -> None:
    remaining = delete_scoped(four_mondays, four_mondays[2].id, EditScope.THIS)

    assert [o.id for o in remaining] == [four_mondays[i].id for i in (0, 1, 3)]


def test_delete_all(four_mondays: list[Occurrence]) -> None:
    assert delete_scoped(four_mondays, four_mondays[2].id, EditScope.ALL) == []


def test_delete_unknown_target_raises(four_mondays: list[Occurrence]) -> None:
    with pytest.raises(OccurrenceNotFoundError):
        delete_scoped(four_mondays, "missing", EditScope.THIS)

    assert len(four_mondays) == 4
