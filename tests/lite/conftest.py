from collections.abc import Generator
from datetime import date, datetime, timedelta
from typing import Any, Callable

import pytest

from recurrence_lite.config_loader import Config
from recurrence_lite.lite_models import CalendarEvent, Member

RECURRENCE_ENV_VARS = (
    "RECURRENCE_LITE_DEBUG",
    "RECURRENCE_LITE_LOG_LEVEL",
    "RECURRENCE_LITE_NEVER_HORIZON_YEARS",
    "RECURRENCE_LITE_DEFAULT_FREQUENCY",
)


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure recurrence_lite environment variables do not leak into tests.

    Config loading and logging setup both read RECURRENCE_LITE_* variables,
    so a value exported in the developer's shell would change results.
    """
    for name in RECURRENCE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def lite_config() -> Config:
    """Default engine configuration (two-year horizon for never-ending rules)."""
    return Config()


@pytest.fixture
def monday_base() -> CalendarEvent:
    """Base event on Monday 2025-04-07, 09:00-10:00 local wall clock.

    Fields:
      - id: "base-1" (also the series id of anything generated from it)
      - color: "blue"
      - one invited member, "m1"
    """
    return CalendarEvent(
        id="base-1",
        title="Team Standup",
        start=datetime(2025, 4, 7, 9, 0),
        end=datetime(2025, 4, 7, 10, 0),
        color="blue",
        description="Daily sync",
        meeting_link="https://meet.example.com/standup",
        members=[Member(id="m1", name="Alex Doe")],
    )


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """Factory for simple one-hour events on a given date.

    Usage: make_event(date(2025, 4, 7), title="X", series_id="s1")
    """

    def _make(day: date, **overrides: Any) -> CalendarEvent:
        start = datetime.combine(day, datetime.min.time()).replace(hour=9)
        fields: dict[str, Any] = {
            "title": "Team Standup",
            "start": start,
            "end": start + timedelta(hours=1),
        }
        fields.update(overrides)
        return CalendarEvent(**fields)

    return _make
