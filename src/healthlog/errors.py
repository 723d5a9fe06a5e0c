"""Error taxonomy shared by the stores, the merge engine and the routes."""


class HealthLogError(Exception):
    """Base class for all healthlog errors."""


class NotFoundError(HealthLogError):
    """No health log exists for the given identifier."""

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Health log {record_id} not found")
        self.record_id = record_id


class StoreError(HealthLogError):
    """The primary store failed. Propagated to the caller, never retried."""


class SourceUnavailableError(HealthLogError):
    """The device store is not connected or a query against it failed."""
