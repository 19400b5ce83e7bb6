"""Lazy future exception hierarchy."""


class LazyError(Exception):
    """Base exception for all lazy future operations."""

    def __init__(self, message: str, name: str | None = None):
        self.message = message
        self.name = name
        super().__init__(message)


class InvalidStateError(LazyError):
    """Operation not allowed in the future's current state (caller bug)."""
    pass


class LazyFailedError(LazyError):
    """A future needed for its value moved to the failed state."""
    pass


class CoroutineError(LazyError):
    """Coroutine adapter used outside its control-transfer contract."""
    pass
