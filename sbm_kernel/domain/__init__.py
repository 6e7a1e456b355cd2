"""
Pure kernel domain layer.

Only the time abstraction lives here; it is the one sanctioned source of
"now" and "today" for every service in the scheduling core.
"""

from sbm_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
