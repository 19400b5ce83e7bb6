"""
Lazy Future Cell

Single-assignment future with callback-based readiness propagation.
"""

import asyncio
import logging
import threading
from collections import deque
from enum import Enum
from typing import TypeVar, Generic, Callable, List, Any, Optional, Sequence

from .exceptions import InvalidStateError, LazyFailedError

T = TypeVar('T')
U = TypeVar('U')

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class _Dispatch(threading.local):
    """Per-thread queue of pending observer calls."""

    def __init__(self):
        self.queue: deque = deque()
        self.draining = False


_dispatch = _Dispatch()


def _notify(observers: Sequence[Callable[..., Any]], args: tuple) -> None:
    """
    Deliver observer calls in FIFO order.

    The outermost resolve()/fail() on a thread drains the queue; settling
    another future from inside an observer only enqueues its observers, so
    long derived chains do not grow the stack. Everything queued is
    delivered before the outermost call returns. The first observer error
    is re-raised once the queue is empty; later ones are logged.
    """
    _dispatch.queue.extend((callback, args) for callback in observers)
    if _dispatch.draining:
        return

    _dispatch.draining = True
    error: Optional[Exception] = None
    try:
        while _dispatch.queue:
            callback, call_args = _dispatch.queue.popleft()
            try:
                callback(*call_args)
            except Exception as exc:
                if error is None:
                    error = exc
                else:
                    logger.error(f"Observer {callback!r} raised {exc!r}", exc_info=exc)
    finally:
        _dispatch.draining = False
        _dispatch.queue.clear()

    if error is not None:
        raise error


def _resolve_with(result: 'Lazy', func: Callable[..., Any], *args: Any) -> None:
    """Resolve result with func(*args); a raising func fails it instead."""
    try:
        value = func(*args)
    except Exception as e:
        logger.error(f"Continuation {func!r} for {result._describe()} raised {e!r}", exc_info=e)
        result.fail()
        return
    result.resolve(value)


class LazyState(Enum):
    """Lifecycle of a lazy future. Transitions only leave PENDING."""
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class Lazy(Generic[T]):
    """
    Single-assignment future.

    Starts pending and moves exactly once to ready (with a value) or failed
    (without one). Observers registered with on_ready()/on_fail() run
    synchronously, in registration order, once the transition is committed.
    Registering on an already-settled future invokes the observer before
    registration returns.

    Examples:
        a = Lazy(name="a")
        c = a + 1
        c.on_ready(lambda v: print("c =", v))
        a.resolve(10)          # prints "c = 11"

        # Inside a coroutine body driven by Coroutine
        value = await a
    """

    def __init__(self, value: Any = _MISSING, name: Optional[str] = None):
        """
        Create a future.

        Args:
            value: Immediate value for an already-resolved future
            name: Diagnostic label used in logs and repr
        """
        self.name = name
        self._state = LazyState.PENDING
        self._value: Any = _MISSING
        self._ready_observers: List[Callable[[T], Any]] = []
        self._fail_observers: List[Callable[[], Any]] = []

        if value is not _MISSING:
            self.resolve(value)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        if self._state is LazyState.READY:
            return f"<Lazy{label} ready value={self._value!r}>"
        return f"<Lazy{label} {self._state.value}>"

    @property
    def state(self) -> LazyState:
        return self._state

    def is_ready(self) -> bool:
        """Check if future is resolved with a value."""
        return self._state is LazyState.READY

    def failed(self) -> bool:
        """Check if future has failed."""
        return self._state is LazyState.FAILED

    def is_pending(self) -> bool:
        return self._state is LazyState.PENDING

    def get(self) -> T:
        """
        Get the resolved value.

        Returns:
            The future's value

        Raises:
            InvalidStateError if the future is not ready
        """
        if self._state is not LazyState.READY:
            raise InvalidStateError(
                f"Cannot read {self._describe()}: state is {self._state.value}",
                name=self.name,
            )
        return self._value

    def resolve(self, value: T) -> 'Lazy[T]':
        """
        Assign the value and notify ready observers.

        The state and value are committed before the first observer runs, so
        observers registered while firing see a ready future and are invoked
        immediately. Called from inside another observer, the notifications
        are queued behind the ones already pending and delivered before the
        outermost resolve()/fail() returns.

        Args:
            value: The resolved value

        Returns:
            This future (allows chaining)

        Raises:
            InvalidStateError if the future was already settled
        """
        self._check_pending("resolve")
        self._value = value
        self._state = LazyState.READY
        logger.debug(f"{self._describe()} ready")

        observers = self._ready_observers
        self._ready_observers = []
        self._fail_observers = []
        _notify(observers, (value,))
        return self

    def fail(self) -> 'Lazy[T]':
        """
        Move to the failed state and notify fail observers.

        Raises:
            InvalidStateError if the future was already settled
        """
        self._check_pending("fail")
        self._state = LazyState.FAILED
        logger.debug(f"{self._describe()} failed")

        observers = self._fail_observers
        self._ready_observers = []
        self._fail_observers = []
        _notify(observers, ())
        return self

    def on_ready(self, callback: Callable[[T], Any]) -> 'Lazy[T]':
        """
        Register a readiness observer.

        Args:
            callback: Called once with the value when the future resolves,
                immediately if it already has

        Returns:
            This future
        """
        if self._state is LazyState.READY:
            callback(self._value)
        elif self._state is LazyState.PENDING:
            self._ready_observers.append(callback)
        return self

    def on_fail(self, callback: Callable[[], Any]) -> 'Lazy[T]':
        """
        Register a failure observer.

        Args:
            callback: Called once without arguments when the future fails,
                immediately if it already has

        Returns:
            This future
        """
        if self._state is LazyState.FAILED:
            callback()
        elif self._state is LazyState.PENDING:
            self._fail_observers.append(callback)
        return self

    def then(self, func: Callable[[T], U]) -> 'Lazy[U]':
        """
        Derive a future holding func(value).

        Failure of this future, or func raising, fails the derived one.

        Example:
            doubled = lazy.then(lambda x: x * 2)
        """
        result: Lazy[U] = Lazy()
        self.on_ready(lambda value: _resolve_with(result, func, value))
        self.on_fail(result.fail)
        return result

    def __add__(self, other: Any) -> 'Lazy':
        from .combinators import plus
        return plus(self, other)

    def __radd__(self, other: Any) -> 'Lazy':
        from .combinators import plus
        return plus(other, self)

    def __await__(self):
        """
        Make the future awaitable inside a coroutine body.

        Ready futures return immediately. Otherwise the future itself is
        handed to the driving Coroutine, which resumes the body once it
        settles.
        """
        if self._state is LazyState.PENDING:
            yield self
        if self._state is LazyState.FAILED:
            raise LazyFailedError(f"{self._describe()} failed", name=self.name)
        return self.get()

    def to_asyncio(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Future:
        """
        Bridge into an asyncio future.

        Args:
            loop: Event loop owning the asyncio future (default: running loop)

        Returns:
            asyncio.Future resolved with the value, or failed with
            LazyFailedError
        """
        loop = loop or asyncio.get_running_loop()
        py_future = loop.create_future()

        def on_ready(value):
            if not py_future.done():
                py_future.set_result(value)

        def on_fail():
            if not py_future.done():
                py_future.set_exception(
                    LazyFailedError(f"{self._describe()} failed", name=self.name)
                )

        self.on_ready(on_ready)
        self.on_fail(on_fail)
        return py_future

    @staticmethod
    def make_ready(value: T, name: Optional[str] = None) -> 'Lazy[T]':
        """Create a future that's already resolved."""
        return Lazy(value, name=name)

    @staticmethod
    def make_failed(name: Optional[str] = None) -> 'Lazy[Any]':
        """Create a future that's already failed."""
        return Lazy(name=name).fail()

    def _check_pending(self, operation: str) -> None:
        if self._state is not LazyState.PENDING:
            raise InvalidStateError(
                f"Cannot {operation} {self._describe()}: already {self._state.value}",
                name=self.name,
            )

    def _describe(self) -> str:
        return f"lazy {self.name!r}" if self.name else "lazy value"
