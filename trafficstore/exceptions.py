"""Exceptions raised by the traffic store core."""


class TrafficStoreError(Exception):
    """Base exception for all traffic store operations."""


class InterfaceNotFoundError(TrafficStoreError):
    """No interface is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Interface '{name}' not found")
        self.name = name


class PersistenceError(TrafficStoreError):
    """The storage backend rejected a statement or a transaction failed."""


class InvariantViolationError(TrafficStoreError):
    """A read returned an unexpected number of rows or columns."""
