from datetime import date, datetime, timedelta
from typing import Tuple, Union
import calendar

from office_chores.modules.calendar.schemas import CalendarView


def _start_of_week(day: date) -> date:
    """Sunday on or before day"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _end_of_week(day: date) -> date:
    return _start_of_week(day) + timedelta(days=6)


def range_for_view(anchor: Union[date, datetime], view: CalendarView) -> Tuple[date, date]:
    """Inclusive date range a calendar view displays around anchor (weeks start on Sunday)."""
    if isinstance(anchor, datetime):
        anchor = anchor.date()
    view = CalendarView(view)
    if view == CalendarView.MONTH:
        first = anchor.replace(day=1)
        last = anchor.replace(day=calendar.monthrange(anchor.year, anchor.month)[1])
        # full grid, including the spill-over days of neighbouring months
        return _start_of_week(first), _end_of_week(last)
    if view == CalendarView.WEEK:
        return _start_of_week(anchor), _end_of_week(anchor)
    return anchor, anchor
