"""
Editing helpers for recurrence rules.

Rules are immutable; every helper returns a new rule. Clamping follows the
chore form: interval never drops below 1 and day of month stays in 1..31.
"""

from datetime import date
from typing import Optional

from office_chores.core.exceptions import RecurrenceRuleError
from office_chores.modules.chores.schemas import Frequency, RecurrenceRule

DEFAULT_WEEKDAY = 1  # Monday


def default_rule() -> RecurrenceRule:
    return RecurrenceRule(frequency=Frequency.WEEKLY, interval=1, days_of_week=[DEFAULT_WEEKDAY])


def with_frequency(rule: RecurrenceRule, frequency: Frequency) -> RecurrenceRule:
    """Switch frequency, keeping interval and end date and resetting per-frequency fields"""
    frequency = Frequency(frequency)
    days_of_week = [DEFAULT_WEEKDAY] if frequency == Frequency.WEEKLY else None
    day_of_month = 1 if frequency == Frequency.MONTHLY else None
    return RecurrenceRule(
        frequency=frequency,
        interval=rule.interval,
        days_of_week=days_of_week,
        day_of_month=day_of_month,
        end_date=rule.end_date,
    )


def toggle_weekday(rule: RecurrenceRule, day: int) -> RecurrenceRule:
    if rule.frequency != Frequency.WEEKLY:
        raise RecurrenceRuleError("Days of week only apply to weekly recurrence")
    if day < 0 or day > 6:
        raise RecurrenceRuleError(f"Invalid day of week: {day}")
    current = list(rule.days_of_week or [])
    if day in current:
        if len(current) == 1:
            raise RecurrenceRuleError("At least one day of the week must stay selected")
        current.remove(day)
    else:
        current.append(day)
    return rule.model_copy(update={"days_of_week": sorted(current)})


def with_interval(rule: RecurrenceRule, interval: int) -> RecurrenceRule:
    return rule.model_copy(update={"interval": max(1, int(interval))})


def with_day_of_month(rule: RecurrenceRule, day_of_month: int) -> RecurrenceRule:
    if rule.frequency != Frequency.MONTHLY:
        raise RecurrenceRuleError("Day of month only applies to monthly recurrence")
    return rule.model_copy(update={"day_of_month": min(31, max(1, int(day_of_month)))})


def with_end_date(rule: RecurrenceRule, end_date: Optional[date]) -> RecurrenceRule:
    return rule.model_copy(update={"end_date": end_date})
