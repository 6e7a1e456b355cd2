"""
sbm_recurrence -- Recurrence evaluation and idempotent job materialization.

Decides, per customer and calendar day, whether a recurring service job
is due, and creates at most one such job per (customer, day) however many
times the pass runs.

Architecture:
    domain/    pure types, calendar arithmetic, rule evaluation (ZERO I/O)
    models/    SQLAlchemy ORM for customers and scheduled jobs
    services/  store adapters, materializer, customer/lifecycle services,
               app-launch hook
    orchestrator.py  DI container and bootstrap

Invariants:
    - Rule evaluation is pure and never raises.
    - No job is generated before a customer's anchor date.
    - Any existing job on a day, whatever its status or origin, blocks
      generation for that customer and day.
    - At most one recurrence job per (customer, day), enforced by the
      existence check, a single-writer lock, and a partial unique index.
    - A pass commits all of its jobs or none.
    - All timestamps and "today" come from an injected Clock.
"""
