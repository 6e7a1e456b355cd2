"""Row builders shared by the test suite.

They insert ORM rows directly and commit, bypassing service-level
validation, so tests can set up states (e.g. out-of-range selectors or
terminal jobs) that the services would refuse to create.
"""

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sbm_recurrence.domain.types import JobOrigin, JobStatus, RecurrenceRule
from sbm_recurrence.models.schedule import CustomerModel, ScheduledJobModel

TEST_ACTOR_ID = UUID("00000000-0000-4000-8000-000000000001")


def add_customer(
    session: Session,
    rule: RecurrenceRule = RecurrenceRule.WEEKLY,
    selector: int | None = None,
    anchor_date: date = date(2024, 1, 1),
    name: str = "Test Customer",
) -> CustomerModel:
    model = CustomerModel(
        id=uuid4(),
        name=name,
        service_name="Lawn care",
        recurrence_rule=rule.value,
        recurrence_selector=selector,
        anchor_date=anchor_date,
        created_by_id=TEST_ACTOR_ID,
        updated_by_id=None,
    )
    session.add(model)
    session.commit()
    return model


def add_job(
    session: Session,
    customer_id: UUID,
    job_date: date,
    status: JobStatus = JobStatus.SCHEDULED,
    origin: JobOrigin = JobOrigin.MANUAL,
) -> ScheduledJobModel:
    model = ScheduledJobModel(
        id=uuid4(),
        customer_id=customer_id,
        job_date=job_date,
        status=status.value,
        origin=origin.value,
        created_by_id=TEST_ACTOR_ID,
        updated_by_id=None,
    )
    session.add(model)
    session.commit()
    return model


def count_jobs(
    session: Session,
    customer_id: UUID | None = None,
    job_date: date | None = None,
) -> int:
    query = select(func.count()).select_from(ScheduledJobModel)
    if customer_id is not None:
        query = query.where(ScheduledJobModel.customer_id == customer_id)
    if job_date is not None:
        query = query.where(ScheduledJobModel.job_date == job_date)
    count = session.execute(query).scalar_one()
    # End the read transaction so other sessions can write.
    session.commit()
    return count
