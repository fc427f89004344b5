from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date
from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecurrenceRule(BaseModel):
    """Repeating pattern of a chore. Serialized with camelCase keys (jsonb column)."""

    frequency: Frequency
    interval: int = Field(1, ge=1)
    days_of_week: Optional[List[int]] = Field(None, alias="daysOfWeek")
    day_of_month: Optional[int] = Field(None, alias="dayOfMonth", ge=1, le=31)
    end_date: Optional[date] = Field(None, alias="endDate")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("days_of_week")
    @classmethod
    def normalize_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return None
        for day in value:
            if day < 0 or day > 6:
                raise ValueError("days of week must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def require_weekday_for_weekly(self):
        if self.frequency == Frequency.WEEKLY and not self.days_of_week:
            raise ValueError("Weekly recurrence needs at least one day of the week")
        return self

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChoreCreate(BaseModel):
    title: str
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    start_date: date
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class ChoreUpdate(BaseModel):
    """Partial update. Only fields explicitly given are applied, so an explicit
    null unassigns a chore or turns it into a one-time chore."""

    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    start_date: Optional[date] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    def changes(self) -> dict:
        """Explicitly set fields, as model values (recurrence stays a RecurrenceRule)"""
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "title" in changes and changes["title"] is None:
            del changes["title"]
        if "start_date" in changes and changes["start_date"] is None:
            del changes["start_date"]
        return changes


class Chore(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    start_date: date
    recurrence: Optional[RecurrenceRule] = None

    class Config:
        from_attributes = True
        frozen = True
