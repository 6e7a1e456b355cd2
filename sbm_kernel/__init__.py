"""
SBM Kernel - shared infrastructure for the service scheduling core.

Provides:
- Typed, coded exceptions
- Structured JSON logging with request-scoped context
- Injectable clocks (no direct wall-clock reads in services)
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
