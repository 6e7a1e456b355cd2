"""
sbm_recurrence.models -- ORM models for customers and scheduled jobs.

Architecture: sbm_recurrence/models. Imports from sbm_kernel.db.base only.
"""

from sbm_recurrence.models.schedule import CustomerModel, ScheduledJobModel

__all__ = [
    "CustomerModel",
    "ScheduledJobModel",
]
