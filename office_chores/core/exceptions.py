"""
Error types shared by the gateway, the sync store and the HTTP layer.

Gateway calls raise freely; the store converts every failure at its boundary
into FetchFailure or MutationFailure and never re-raises to its callers.
"""

from typing import Optional


class ChoreSyncError(Exception):
    """Base class for office-chores errors"""


class GatewayError(ChoreSyncError):
    """A remote call returned no row or was rejected by the backend"""


class FetchFailure(ChoreSyncError):
    """One or more of the initial collection loads failed"""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__("Failed to load data")


class MutationFailure(ChoreSyncError):
    """An optimistic mutation was rejected remotely and rolled back"""

    def __init__(self, kind, cause: Optional[BaseException] = None):
        self.kind = kind
        self.cause = cause
        super().__init__(f"Failed to {kind.label}")

    @property
    def message(self) -> str:
        return str(self)


class RecurrenceRuleError(ValueError):
    """An edit would leave a recurrence rule in an invalid state"""
