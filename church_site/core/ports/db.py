"""
Data store error boundary.

Repositories translate driver errors (sqlite3.Error today, a hosted
Postgres client later) into StoreError so components can report a
generic failure without knowing which backend is in use.
"""

from __future__ import annotations


class StoreError(Exception):
    """A read or write against the data store failed."""

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Data store operation '{operation}' failed{detail}")
