"""
Tests for sbm_recurrence.domain.types.

Validates enum values and labels, stored-label parsing, DTO immutability,
and selector normalization on Recurrence.
"""

from dataclasses import FrozenInstanceError
from datetime import date
from uuid import uuid4

import pytest

from sbm_recurrence.domain.types import (
    ONE_TIME,
    JobOrigin,
    JobStatus,
    MaterializationResult,
    Recurrence,
    RecurrenceRule,
    ScheduledJob,
    SelectorKind,
    ServiceContract,
)


class TestRecurrenceRule:
    def test_stored_labels(self):
        assert [r.value for r in RecurrenceRule] == [
            "One-time",
            "Daily",
            "Every Other Day",
            "Every 3 Days",
            "Weekly",
            "Every Other Week",
            "Monthly",
            "Every Other Month",
        ]

    def test_short_labels(self):
        assert RecurrenceRule.NONE.short_label == "Once"
        assert RecurrenceRule.EVERY_OTHER_DAY.short_label == "2 Days"
        assert RecurrenceRule.BI_WEEKLY.short_label == "2 Weeks"
        assert RecurrenceRule.BI_MONTHLY.short_label == "2 Months"

    def test_every_rule_has_short_label(self):
        for rule in RecurrenceRule:
            assert rule.short_label

    @pytest.mark.parametrize(
        "rule,kind",
        [
            (RecurrenceRule.NONE, None),
            (RecurrenceRule.DAILY, None),
            (RecurrenceRule.EVERY_OTHER_DAY, None),
            (RecurrenceRule.EVERY_3_DAYS, None),
            (RecurrenceRule.WEEKLY, SelectorKind.WEEKDAY),
            (RecurrenceRule.BI_WEEKLY, SelectorKind.WEEKDAY),
            (RecurrenceRule.MONTHLY, SelectorKind.DAY_OF_MONTH),
            (RecurrenceRule.BI_MONTHLY, SelectorKind.DAY_OF_MONTH),
        ],
    )
    def test_selector_kind(self, rule, kind):
        assert rule.selector_kind is kind

    def test_from_stored_known(self):
        assert RecurrenceRule.from_stored("Every Other Week") is RecurrenceRule.BI_WEEKLY

    @pytest.mark.parametrize("raw", ["Fortnightly", "", None, "weekly"])
    def test_from_stored_unknown_reads_as_none(self, raw):
        assert RecurrenceRule.from_stored(raw) is RecurrenceRule.NONE

    def test_str_enum(self):
        assert RecurrenceRule.WEEKLY == "Weekly"


class TestSelectorKind:
    def test_bounds(self):
        assert SelectorKind.WEEKDAY.bounds == (1, 7)
        assert SelectorKind.DAY_OF_MONTH.bounds == (1, 28)


class TestStatusAndOrigin:
    def test_job_status_values(self):
        assert {s.value for s in JobStatus} == {
            "scheduled", "completed", "cancelled", "rescheduled",
        }

    def test_job_origin_values(self):
        assert JobOrigin.RECURRENCE.value == "recurrence"
        assert JobOrigin.MANUAL.value == "manual"


class TestRecurrence:
    def test_one_time_constant(self):
        assert ONE_TIME == Recurrence(RecurrenceRule.NONE)
        assert not ONE_TIME.is_recurring

    def test_is_recurring(self):
        assert Recurrence(RecurrenceRule.DAILY).is_recurring

    def test_effective_selector_in_range(self):
        assert Recurrence(RecurrenceRule.WEEKLY, 3).effective_selector == 3
        assert Recurrence(RecurrenceRule.MONTHLY, 28).effective_selector == 28

    @pytest.mark.parametrize(
        "recurrence",
        [
            Recurrence(RecurrenceRule.WEEKLY),
            Recurrence(RecurrenceRule.WEEKLY, 0),
            Recurrence(RecurrenceRule.WEEKLY, 8),
            Recurrence(RecurrenceRule.MONTHLY, 29),
            Recurrence(RecurrenceRule.MONTHLY, -3),
            Recurrence(RecurrenceRule.DAILY, 3),
            Recurrence(RecurrenceRule.NONE, 1),
        ],
    )
    def test_effective_selector_none(self, recurrence):
        assert recurrence.effective_selector is None

    def test_boolean_selector_ignored(self):
        assert Recurrence(RecurrenceRule.WEEKLY, True).effective_selector is None

    def test_frozen(self):
        recurrence = Recurrence(RecurrenceRule.WEEKLY, 3)
        with pytest.raises(FrozenInstanceError):
            recurrence.selector = 4  # type: ignore[misc]


class TestDTOs:
    def test_contract_defaults_to_one_time(self):
        contract = ServiceContract(customer_id=uuid4(), anchor_date=date(2024, 1, 1))
        assert contract.recurrence is ONE_TIME

    def test_scheduled_job_defaults(self):
        job = ScheduledJob(job_id=uuid4(), customer_id=uuid4(), job_date=date(2024, 1, 3))
        assert job.status is JobStatus.SCHEDULED
        assert job.origin is JobOrigin.RECURRENCE
        assert job.completed_at is None

    def test_scheduled_job_frozen(self):
        job = ScheduledJob(job_id=uuid4(), customer_id=uuid4(), job_date=date(2024, 1, 3))
        with pytest.raises(FrozenInstanceError):
            job.status = JobStatus.COMPLETED  # type: ignore[misc]

    def test_materialization_result_defaults(self):
        result = MaterializationResult(target_date=date(2024, 1, 3))
        assert result.created == 0
        assert result.job_ids == ()
