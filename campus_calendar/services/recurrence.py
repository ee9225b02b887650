"""Recurrence expansion: seed occurrence + rule + end bound -> concrete instances.

Pure computation on wall-clock datetimes. Persisting the instances is the caller's job.

Rules:
- daily: every weekday. Step one day; a step landing on Saturday/Sunday keeps stepping
  until a weekday. The seed itself is never re-checked.
- weekly: exact 7-day steps.
- monthly: seed + k calendar months (dateutil relativedelta). The seed's day-of-month is
  kept where the month has it and clamped to the month's last day otherwise, so
  Jan 31 -> Feb 28 -> Mar 31. Steps are always taken from the seed, not chained from the
  previous instance, so a clamped month does not pull later instances earlier.

The bound is exclusive and compared by date: the first candidate whose date is on or after
the bound's date ends the series and is not emitted. The seed is always emitted.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterator, Optional, Union

from dateutil.relativedelta import relativedelta

from campus_calendar.models.event import RecurrenceRule

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTANCES = 1000
SATURDAY = 5


class RecurrenceLimitExceeded(ValueError):
    """The series would produce more instances than allowed."""

    def __init__(self, limit: int):
        super().__init__(f"Recurrence would produce more than {limit} occurrences")
        self.limit = limit


def coerce_rule(rule: Union[RecurrenceRule, str, None]) -> RecurrenceRule:
    """Unknown rule values behave like 'none'."""
    if isinstance(rule, RecurrenceRule):
        return rule
    try:
        return RecurrenceRule(rule)
    except ValueError:
        logger.warning("Unknown recurrence rule %r treated as 'none'", rule)
        return RecurrenceRule.none


def _next_weekday(current: datetime) -> datetime:
    candidate = current + timedelta(days=1)
    while candidate.weekday() >= SATURDAY:
        candidate += timedelta(days=1)
    return candidate


def _candidates(seed_start: datetime, rule: RecurrenceRule) -> Iterator[datetime]:
    """Successive occurrence starts after the seed, in increasing order."""
    step = 1
    current = seed_start
    while True:
        if rule == RecurrenceRule.daily:
            current = _next_weekday(current)
        elif rule == RecurrenceRule.weekly:
            current = seed_start + timedelta(weeks=step)
        else:
            current = seed_start + relativedelta(months=step)
        step += 1
        yield current


def expand(
    seed_start: datetime,
    seed_end: datetime,
    rule: Union[RecurrenceRule, str, None],
    until: Optional[datetime] = None,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> list[tuple[datetime, datetime]]:
    """Return the ordered (start, end) pairs of a series, seed first.

    Every instance keeps the seed's duration. Raises RecurrenceLimitExceeded when more
    than ``max_instances`` instances would be produced.
    """
    instances = [(seed_start, seed_end)]
    rule = coerce_rule(rule)
    if rule == RecurrenceRule.none:
        return instances
    if until is None:
        raise ValueError("A recurrence end date is required for recurring events")

    duration = seed_end - seed_start
    bound = until.date()
    for start in _candidates(seed_start, rule):
        if start.date() >= bound:
            break
        if len(instances) >= max_instances:
            raise RecurrenceLimitExceeded(max_instances)
        instances.append((start, start + duration))
    return instances
