from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from uuid import NAMESPACE_URL, uuid4, uuid5

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_EVENT_NAME = "Reminder"
EVENT_NAMESPACE = uuid5(NAMESPACE_URL, "textevents/event")


class Event(BaseModel):
    """A calendar event extracted from text or entered by hand."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(default=DEFAULT_EVENT_NAME, description="Human readable label")
    date: datetime = Field(..., description="Primary (reminder) date of the event")
    deadline: Optional[datetime] = Field(
        default=None,
        description="Due date when the event marks a deadline; the primary date is one day earlier",
    )
    notes: Optional[str] = Field(default=None, description="Free text found around the date")
    is_completed: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    image_data: Optional[bytes] = Field(
        default=None,
        description="Source image the text was recognized from, if any",
        repr=False,
    )

    @field_validator("name")
    @classmethod
    def ensure_name(cls, value: str) -> str:
        cleaned = value.strip()
        return cleaned or DEFAULT_EVENT_NAME

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @model_validator(mode="after")
    def check_deadline_order(self) -> "Event":
        if self.deadline is not None and self.deadline < self.date:
            raise ValueError("deadline must not precede the event date")
        return self

    @classmethod
    def build(
        cls,
        name: str,
        moment: datetime,
        *,
        is_deadline: bool,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "Event":
        """Create an extracted event with a stable identifier.

        A deadline moment becomes the ``deadline`` and the primary date is set
        one day earlier; otherwise the moment is the primary date.
        """
        from .deadline import split_event_and_deadline

        primary, deadline = split_event_and_deadline(moment, is_deadline)
        label = name.strip() or DEFAULT_EVENT_NAME
        key = f"{label}|{primary.isoformat()}|{deadline.isoformat() if deadline else ''}"
        return cls(
            id=str(uuid5(EVENT_NAMESPACE, key)),
            name=label,
            date=primary,
            deadline=deadline,
            notes=notes,
            created_at=created_at or datetime.now(),
        )

    @property
    def has_deadline(self) -> bool:
        return self.deadline is not None

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.deadline is None or self.is_completed:
            return False
        return self.deadline < (now or datetime.now())


@dataclass
class DateCandidate:
    moment: datetime
    is_deadline: bool
    text: str
    span: Tuple[int, int] = (0, 0)

    @property
    def day(self):
        return self.moment.date()


@dataclass
class TimeCandidate:
    hour: int
    minute: int
    text: str
    span: Tuple[int, int] = (0, 0)


@dataclass
class NaturalDateCandidate(DateCandidate):
    context: str = ""
    priority: int = 0
    time_only: bool = False
