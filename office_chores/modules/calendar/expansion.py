"""
Occurrence expansion: turns chores, members and completions into the dated
calendar events that fall inside an inclusive date range.

Expansion is a pure function of its arguments. Recurring chores go through
dateutil's rrule with one option builder per frequency:

- daily: every `interval` days from start_date
- weekly: every `interval` weeks on each selected weekday; the (Monday-start)
  week containing start_date is iteration 0
- monthly: every `interval` months on day_of_month. Months that are too short
  for that day are skipped, not clamped to their last day (a rule on the 31st
  has no occurrence in April or February).

Dates before start_date are never produced and recurrence.end_date is
inclusive. A reversed range simply yields no events.
"""

from datetime import date, datetime, time
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from dateutil.rrule import rrule, DAILY, WEEKLY, MONTHLY, MO, TU, WE, TH, FR, SA, SU

from office_chores.modules.calendar.schemas import ChoreCalendarEvent
from office_chores.modules.chores.schemas import Chore, Frequency, RecurrenceRule
from office_chores.modules.completions.schemas import CompletionRecord
from office_chores.modules.members.schemas import TeamMember

DateLike = Union[date, datetime]

# index 0 is Sunday, as stored in RecurrenceRule.days_of_week
RRULE_WEEKDAYS = [SU, MO, TU, WE, TH, FR, SA]


def occurrence_key(chore_id: str, occurrence_date: date) -> str:
    return f"{chore_id}::{occurrence_date.isoformat()}"


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _daily_options(rule: RecurrenceRule, start_date: date) -> dict:
    return {}


def _weekly_options(rule: RecurrenceRule, start_date: date) -> dict:
    days = rule.days_of_week or [(start_date.weekday() + 1) % 7]
    return {"byweekday": [RRULE_WEEKDAYS[d] for d in days], "wkst": MO}


def _monthly_options(rule: RecurrenceRule, start_date: date) -> dict:
    return {"bymonthday": rule.day_of_month or start_date.day}


FREQUENCY_STRATEGIES: Dict[Frequency, Tuple[int, Callable[[RecurrenceRule, date], dict]]] = {
    Frequency.DAILY: (DAILY, _daily_options),
    Frequency.WEEKLY: (WEEKLY, _weekly_options),
    Frequency.MONTHLY: (MONTHLY, _monthly_options),
}


def occurrence_dates(chore: Chore, range_start: DateLike, range_end: DateLike) -> List[date]:
    """Ascending dates on which chore occurs within [range_start, range_end]"""
    range_start = as_date(range_start)
    range_end = as_date(range_end)
    rule = chore.recurrence

    if rule is None:
        if range_start <= chore.start_date <= range_end:
            return [chore.start_date]
        return []

    freq, build_options = FREQUENCY_STRATEGIES[rule.frequency]
    options = build_options(rule, chore.start_date)
    recurrence = rrule(
        freq,
        dtstart=_midnight(chore.start_date),
        interval=rule.interval,
        until=_midnight(rule.end_date) if rule.end_date else None,
        **options,
    )
    return [
        occurrence.date()
        for occurrence in recurrence.between(_midnight(range_start), _midnight(range_end), inc=True)
    ]


def expand_chores(
    chores: Iterable[Chore],
    members: Iterable[TeamMember],
    completions: Iterable[CompletionRecord],
    range_start: DateLike,
    range_end: DateLike,
) -> List[ChoreCalendarEvent]:
    """
    Expand chores into calendar events for an inclusive date range.

    Events are grouped by chore in input order, ascending by date within a
    chore. A completion matches an occurrence on exact (chore_id,
    occurrence_date); an assignee id with no matching member resolves to None.
    """
    completion_by_key: Dict[Tuple[str, date], CompletionRecord] = {
        (c.chore_id, c.occurrence_date): c for c in completions
    }
    member_by_id: Dict[str, TeamMember] = {m.id: m for m in members}

    events: List[ChoreCalendarEvent] = []
    for chore in chores:
        assignee: Optional[TeamMember] = (
            member_by_id.get(chore.assignee_id) if chore.assignee_id else None
        )
        for day in occurrence_dates(chore, range_start, range_end):
            completion = completion_by_key.get((chore.id, day))
            start = _midnight(day)
            events.append(ChoreCalendarEvent(
                id=occurrence_key(chore.id, day),
                chore_id=chore.id,
                occurrence_date=day,
                title=chore.title,
                start=start,
                end=start,
                assignee=assignee,
                is_completed=completion is not None,
                completed_by_id=completion.completed_by_id if completion else None,
            ))
    return events
