"""
CustomerService -- registration and maintenance of service contracts.

Contract:
    The boundary where recurrence selectors are accepted.  Every
    recurrence passes ``validate_recurrence`` before it is stored, so the
    evaluator only ever sees weekdays 1-7 and days-of-month 1-28 from this
    path.

Invariants enforced:
    - ``anchor_date`` is set once at registration and never changed.
    - Deleting a customer cascades to all of its jobs.

Non-goals:
    - Does NOT call ``session.commit()`` -- caller controls boundaries.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from sbm_kernel.domain.clock import Clock, SystemClock
from sbm_kernel.exceptions import CustomerNotFoundError
from sbm_kernel.logging_config import get_logger

from sbm_recurrence.domain.recurrence import validate_recurrence
from sbm_recurrence.domain.types import ONE_TIME, Recurrence, ServiceContract
from sbm_recurrence.models.schedule import CustomerModel

logger = get_logger("recurrence.customers")


class CustomerService:
    """Create, update and delete customers and their recurrence contracts."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or uuid4()

    def register_customer(
        self,
        name: str,
        recurrence: Recurrence = ONE_TIME,
        phone: str | None = None,
        address: str | None = None,
        service_name: str = "",
        service_price: Decimal | int | str = Decimal("0"),
        anchor_date: date | None = None,
    ) -> ServiceContract:
        """Create a customer; the anchor defaults to the clock's today.

        Raises:
            ValueError: If ``name`` is blank.
            InvalidRecurrenceSelectorError: If the selector is out of range.
        """
        name = name.strip()
        if not name:
            raise ValueError("Customer name must not be blank")

        recurrence = validate_recurrence(recurrence)
        now = self._clock.now()

        model = CustomerModel(
            id=uuid4(),
            name=name,
            phone=phone or None,
            address=address or None,
            service_name=service_name,
            service_price=Decimal(str(service_price)),
            recurrence_rule=recurrence.rule.value,
            recurrence_selector=recurrence.selector,
            anchor_date=anchor_date or self._clock.today(),
            created_by_id=self._actor_id,
            updated_by_id=None,
        )
        model.created_at = now
        self._session.add(model)
        self._session.flush()

        logger.info(
            "customer_registered",
            extra={
                "customer_id": str(model.id),
                "rule": recurrence.rule.value,
                "selector": recurrence.selector,
                "anchor_date": model.anchor_date.isoformat(),
            },
        )
        return model.to_contract()

    def update_recurrence(
        self, customer_id: UUID, recurrence: Recurrence,
    ) -> ServiceContract:
        """Change the rule/selector.  The anchor date is kept.

        Raises:
            CustomerNotFoundError: If ``customer_id`` does not exist.
            InvalidRecurrenceSelectorError: If the selector is out of range.
        """
        recurrence = validate_recurrence(recurrence)
        model = self._load(customer_id)
        model.recurrence_rule = recurrence.rule.value
        model.recurrence_selector = recurrence.selector
        model.updated_by_id = self._actor_id
        self._session.flush()

        logger.info(
            "customer_recurrence_updated",
            extra={
                "customer_id": str(customer_id),
                "rule": recurrence.rule.value,
                "selector": recurrence.selector,
            },
        )
        return model.to_contract()

    def delete_customer(self, customer_id: UUID) -> None:
        """Delete a customer and, by cascade, all of its jobs."""
        model = self._load(customer_id)
        self._session.delete(model)
        self._session.flush()
        logger.info("customer_deleted", extra={"customer_id": str(customer_id)})

    def get_contract(self, customer_id: UUID) -> ServiceContract:
        return self._load(customer_id).to_contract()

    def _load(self, customer_id: UUID) -> CustomerModel:
        model = self._session.get(CustomerModel, customer_id)
        if model is None:
            raise CustomerNotFoundError(str(customer_id))
        return model
