"""
sbm_recurrence.services -- Stateful services around the pure domain.

Every service receives its Session, Clock and actor id from the caller.
"""

from sbm_recurrence.services.customers import CustomerService
from sbm_recurrence.services.hook import ForegroundHook
from sbm_recurrence.services.lifecycle import JobLifecycleService
from sbm_recurrence.services.materializer import JobMaterializer
from sbm_recurrence.services.stores import (
    ContractSource,
    JobStore,
    SqlContractSource,
    SqlJobStore,
)

__all__ = [
    "ContractSource",
    "CustomerService",
    "ForegroundHook",
    "JobLifecycleService",
    "JobMaterializer",
    "JobStore",
    "SqlContractSource",
    "SqlJobStore",
]
