"""Data models for recurring calendar events - recurrence_lite version."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


def new_event_id() -> str:
    """Return a fresh random event id."""
    return str(uuid.uuid4())


class Frequency(str, Enum):
    """Supported recurrence frequencies (RRULE FREQ subset)."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(str, Enum):
    """Two-letter weekday tokens as used by RRULE BYDAY."""

    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"

    @property
    def python_weekday(self) -> int:
        """Python weekday number (Monday == 0)."""
        return WEEKDAY_ORDER.index(self)

    @classmethod
    def from_date(cls, value: date) -> Weekday:
        """Return the token for the weekday of ``value``."""
        return WEEKDAY_ORDER[value.weekday()]


WEEKDAY_ORDER: list[Weekday] = [
    Weekday.MO,
    Weekday.TU,
    Weekday.WE,
    Weekday.TH,
    Weekday.FR,
    Weekday.SA,
    Weekday.SU,
]


class EndNever(BaseModel):
    """Series never ends (generation is still capped by a horizon)."""

    kind: Literal["never"] = "never"

    model_config = ConfigDict(frozen=True)


class EndOnDate(BaseModel):
    """Series ends on a date, inclusive."""

    kind: Literal["on"] = "on"
    on_date: date = Field(..., description="Last calendar date that may hold an occurrence")

    model_config = ConfigDict(frozen=True)


class EndAfterCount(BaseModel):
    """Series ends after a fixed number of occurrences."""

    kind: Literal["after"] = "after"
    count: int = Field(..., ge=1, description="Number of occurrences to generate")

    model_config = ConfigDict(frozen=True)


RecurrenceEnd = Annotated[
    Union[EndNever, EndOnDate, EndAfterCount], Field(discriminator="kind")
]


class RecurrenceRule(BaseModel):
    """Recurrence rule attached to every occurrence of a series."""

    frequency: Frequency = Field(default=Frequency.WEEKLY, description="FREQ")
    interval: int = Field(default=1, description="INTERVAL, clamped to >= 1")
    by_weekday: list[Weekday] = Field(
        default_factory=list, description="BYDAY tokens, only used for WEEKLY"
    )
    end: RecurrenceEnd = Field(default_factory=EndNever)

    # Display-only hint recorded by pattern inference
    occurrence_count_hint: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("interval", mode="before")
    @classmethod
    def _clamp_interval(cls, value: Any) -> int:
        if value is None:
            return 1
        try:
            interval = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"interval must be an integer, got {value!r}") from exc
        if isinstance(value, float) and interval != value:
            raise ValueError(f"interval must be an integer, got {value!r}")
        if interval < 1:
            logger.warning("Recurrence interval %d is not positive; clamping to 1", interval)
            return 1
        return interval

    @field_validator("by_weekday", mode="after")
    @classmethod
    def _normalize_weekdays(cls, value: list[Weekday]) -> list[Weekday]:
        selected = set(value)
        return [day for day in WEEKDAY_ORDER if day in selected]


class MemberStatus(str, Enum):
    """Invitation response of an event participant."""

    ACCEPTED = "accepted"
    DECLINED = "declined"
    NO_RESPONSE = "no response"


class Member(BaseModel):
    """Event participant."""

    id: str = Field(..., description="Member id")
    name: str = Field(..., description="Display name")
    image: str = Field(default="", description="Avatar URL")
    status: MemberStatus = Field(default=MemberStatus.NO_RESPONSE)

    model_config = ConfigDict(use_enum_values=True)


# Fields carried unchanged from the base event onto every occurrence
PAYLOAD_FIELDS: tuple[str, ...] = (
    "title",
    "all_day",
    "color",
    "description",
    "meeting_link",
    "members",
    "invitation_accepted",
)


class CalendarEvent(BaseModel):
    """A calendar event; also the base event a recurring series is expanded from."""

    # Core properties
    id: str = Field(default_factory=new_event_id, description="Event ID")
    title: str = Field(..., description="Event title")
    start: datetime = Field(..., description="Event start (local wall clock)")
    end: datetime = Field(..., description="Event end (local wall clock)")
    all_day: bool = Field(default=False, description="All-day event flag")

    # Payload
    color: Optional[str] = Field(default=None, description="Display color token")
    description: str = Field(default="", description="Free-text description")
    meeting_link: str = Field(default="", description="Online meeting URL")
    members: list[Member] = Field(default_factory=list, description="Participants")
    invitation_accepted: Optional[bool] = Field(default=None)

    # Recurrence
    recurring: bool = Field(default=False, description="Part of a recurring series")
    pattern_changed: bool = Field(
        default=False, description="Payload diverges from the rest of the series"
    )
    recurrence_pattern: Optional[RecurrenceRule] = Field(default=None)
    series_id: Optional[str] = Field(
        default=None, description="ID of the base event that produced this occurrence"
    )

    @model_validator(mode="after")
    def _check_span(self) -> CalendarEvent:
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise ValueError("start and end must both be naive or both be timezone-aware")
        if self.end <= self.start:
            raise ValueError(f"event end {self.end} must be after start {self.start}")
        return self

    @property
    def duration(self) -> timedelta:
        """Wall-clock span of the event."""
        return self.end - self.start

    def payload(self) -> dict[str, Any]:
        """Return the payload fields copied onto generated occurrences."""
        return {name: getattr(self, name) for name in PAYLOAD_FIELDS}


class Occurrence(CalendarEvent):
    """One concrete, generated instance of a recurring series."""

    recurring: bool = True
    recurrence_pattern: RecurrenceRule
    series_id: str


# EventEdits fields that an explicit None clears instead of ignoring
NULLABLE_EDIT_FIELDS: frozenset[str] = frozenset({"color"})


class EventEdits(BaseModel):
    """Partial payload update; only explicitly provided fields are applied."""

    title: Optional[str] = None
    all_day: Optional[bool] = None
    color: Optional[str] = None
    description: Optional[str] = None
    meeting_link: Optional[str] = None
    members: Optional[list[Member]] = None

    def as_update(self) -> dict[str, Any]:
        """Return the fields to apply, suitable for ``model_copy(update=...)``.

        An explicit ``None`` clears a nullable field (``color``); on fields the
        event requires it is ignored.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name in NULLABLE_EDIT_FIELDS
        }


class EditScope(str, Enum):
    """Which part of a series an update or delete applies to."""

    THIS = "this"
    THIS_AND_FOLLOWING = "this_and_following"
    ALL = "all"

    @classmethod
    def _missing_(cls, value: object) -> Optional[EditScope]:
        # The calendar front end sends camelCase scope names
        if isinstance(value, str) and value == "thisAndFollowing":
            return cls.THIS_AND_FOLLOWING
        return None


class RuleSource(str, Enum):
    """Where the rule for an existing series came from."""

    STORED = "stored"
    INFERRED = "inferred"
    DEFAULT = "default"


class RuleResolution(BaseModel):
    """A rule together with how it was obtained."""

    rule: RecurrenceRule
    source: RuleSource

    @property
    def is_heuristic(self) -> bool:
        """True when the rule was reconstructed from occurrence dates."""
        return self.source == RuleSource.INFERRED
