from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from enum import Enum

from office_chores.modules.members.schemas import TeamMember


class CalendarView(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class ChoreCalendarEvent(BaseModel):
    """One dated occurrence of a chore. Derived on every range query, never stored."""

    id: str  # "<chore_id>::<YYYY-MM-DD>"
    chore_id: str
    occurrence_date: date
    title: str
    start: datetime
    end: datetime
    assignee: Optional[TeamMember] = None
    is_completed: bool = False
    completed_by_id: Optional[str] = None

    class Config:
        frozen = True
