"""
Pure recurrence evaluation.

Contract:
    ``is_due(recurrence, anchor_date, target_date)`` decides whether a job
    ought to exist on ``target_date``.  It is PURE and TOTAL: no I/O, no
    clock reads, and it never raises.  A malformed selector degrades to the
    anchor-relative cadence instead of failing.

Architecture: sbm_recurrence/domain.  ZERO I/O.

Two cadences, deliberately kept apart:
    - Anchor-relative (no selector): repeats counted from the customer's
      creation day, e.g. "every 14 days since the anchor".
    - Fixed slot (selector): repeats on a given weekday / day-of-month
      whatever day the contract was created on.  The bi-weekly and
      bi-monthly variants still count weeks/months from the anchor to pick
      every other slot; the anchor's own week/month is number 0.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from sbm_kernel.exceptions import InvalidRecurrenceSelectorError

from sbm_recurrence.domain.calendar import (
    day_of_month,
    days_between,
    iso_weekday,
    months_between,
)
from sbm_recurrence.domain.types import (
    Recurrence,
    RecurrenceRule,
    ServiceContract,
)


def _as_day(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_due(recurrence: Recurrence, anchor_date: date, target_date: date) -> bool:
    """Decide whether ``recurrence`` fires on ``target_date``.

    Never true before the anchor: jobs are not generated for days before
    the customer existed.
    """
    anchor = _as_day(anchor_date)
    target = _as_day(target_date)

    if target < anchor:
        return False

    rule = recurrence.rule
    selector = recurrence.effective_selector
    days = days_between(anchor, target)

    if rule is RecurrenceRule.NONE:
        return False

    if rule is RecurrenceRule.DAILY:
        return True

    if rule is RecurrenceRule.EVERY_OTHER_DAY:
        return days % 2 == 0

    if rule is RecurrenceRule.EVERY_3_DAYS:
        return days % 3 == 0

    if rule is RecurrenceRule.WEEKLY:
        if selector is not None:
            return iso_weekday(target) == selector
        return days % 7 == 0

    if rule is RecurrenceRule.BI_WEEKLY:
        if selector is not None:
            if iso_weekday(target) != selector:
                return False
            return (days // 7) % 2 == 0
        return days % 14 == 0

    if rule is RecurrenceRule.MONTHLY:
        if selector is not None:
            return day_of_month(target) == selector
        return day_of_month(target) == day_of_month(anchor)

    if rule is RecurrenceRule.BI_MONTHLY:
        wanted = selector if selector is not None else day_of_month(anchor)
        if day_of_month(target) != wanted:
            return False
        return months_between(anchor, target) % 2 == 0

    return False


def is_due_for(contract: ServiceContract, target_date: date) -> bool:
    """``is_due`` for a customer's contract."""
    return is_due(contract.recurrence, contract.anchor_date, target_date)


def validate_recurrence(recurrence: Recurrence) -> Recurrence:
    """Boundary check for recurrences accepted from callers.

    The evaluator itself never clamps, so out-of-range selectors are
    rejected here.  A selector on a rule that takes none is dropped.

    Raises:
        InvalidRecurrenceSelectorError: weekday outside 1-7 or day-of-month
            outside 1-28.
    """
    kind = recurrence.rule.selector_kind
    if recurrence.selector is None:
        return recurrence
    if kind is None:
        return Recurrence(recurrence.rule)

    low, high = kind.bounds
    selector = recurrence.selector
    if (
        isinstance(selector, bool)
        or not isinstance(selector, int)
        or not low <= selector <= high
    ):
        raise InvalidRecurrenceSelectorError(
            recurrence.rule.value, selector, low, high,
        )
    return recurrence


def upcoming_due_dates(
    recurrence: Recurrence,
    anchor_date: date,
    start: date,
    days: int,
) -> tuple[date, ...]:
    """Days in ``[start, start + days)`` on which ``recurrence`` is due."""
    first = _as_day(start)
    return tuple(
        day
        for day in (first + timedelta(days=offset) for offset in range(max(days, 0)))
        if is_due(recurrence, anchor_date, day)
    )
