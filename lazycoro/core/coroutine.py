"""
Coroutine Adapter

Runs a native `async def` body cooperatively on top of lazy futures.

The body awaits Lazy values as if they were blocking reads. Whenever a
value is not ready yet, the body hands the future back to its Coroutine
handle, which registers itself as an observer and returns control to the
driver. Resolving the future resumes the body synchronously, from inside
resolve(), at the exact await it suspended on.
"""

import logging
from enum import Enum
from typing import Any, Callable, Coroutine as NativeCoroutine, Optional

from ..config import LazyConfig, get_config
from .exceptions import CoroutineError
from .future import Lazy

logger = logging.getLogger(__name__)


class CoroutineState(Enum):
    CREATED = "created"
    RUNNING = "running"
    SUSPENDED = "suspended"
    FINISHED = "finished"
    FAILED = "failed"


class _NamedWait:
    """Awaitable produced by wait(): a Lazy plus the name it is awaited as."""

    def __init__(self, lazy: Lazy, name: Optional[str]):
        self.lazy = lazy
        self.name = name

    def __await__(self):
        if not self.lazy.is_pending():
            return (yield from self.lazy.__await__())
        yield self
        return (yield from self.lazy.__await__())


def wait(lazy: Lazy, name: Optional[str] = None) -> _NamedWait:
    """
    Await a future under a diagnostic name.

    Equivalent to `await lazy`; with tracing enabled the name shows up in
    the "[async wait ...]" and "[async ready ...]" lines.

    Example:
        async def body():
            total = await wait(a, "a") + await wait(b, "b")
    """
    return _NamedWait(lazy, name)


class Coroutine:
    """
    Handle for one cooperatively driven async function.

    Each handle owns its own body; independent handles can be suspended on
    different futures at the same time.

    Examples:
        async def body():
            print(await wait(a, "a"), await wait(b, "b"))

        co = start_and_run_once(body)   # runs until the first await
        a.resolve(10)                   # body resumes inside resolve()
        b.resolve(5)                    # prints "10 5", co.finished()
    """

    def __init__(
        self,
        coro: NativeCoroutine,
        name: Optional[str] = None,
        config: Optional[LazyConfig] = None,
    ):
        """
        Wrap a coroutine object.

        Args:
            coro: Coroutine object created by calling an async function
            name: Diagnostic label (default: the coroutine's qualname)
            config: Tracing settings (default: get_config())
        """
        self._coro = coro
        self.name = name or getattr(coro, "__qualname__", "coroutine")
        self._config = config
        self._state = CoroutineState.CREATED
        self._waiting_on: Optional[Lazy] = None
        self._waiting_name: Optional[str] = None
        self.exception: Optional[BaseException] = None
        self.result: Lazy = Lazy(name=f"{self.name}.result")

    def __repr__(self) -> str:
        return f"<Coroutine {self.name!r} {self._state.value}>"

    @property
    def state(self) -> CoroutineState:
        return self._state

    @property
    def config(self) -> LazyConfig:
        return self._config or get_config()

    @property
    def waiting_on(self) -> Optional[Lazy]:
        """Future the suspended body waits for, if any."""
        return self._waiting_on

    def suspended(self) -> bool:
        return self._state is CoroutineState.SUSPENDED

    def finished(self) -> bool:
        return self._state is CoroutineState.FINISHED

    def failed(self) -> bool:
        return self._state is CoroutineState.FAILED

    def get(self) -> Any:
        """
        Return the body's return value.

        Raises:
            The body's exception if it failed
            CoroutineError if the body has not finished
        """
        if self._state is CoroutineState.FAILED:
            raise self.exception
        if self._state is not CoroutineState.FINISHED:
            raise CoroutineError(f"Coroutine {self.name!r} is {self._state.value}", name=self.name)
        return self.result.get()

    def start(self) -> 'Coroutine':
        """
        Transfer control to the body once.

        Returns when the body completes or suspends on a pending future.

        Raises:
            CoroutineError if already started
        """
        if self._state is not CoroutineState.CREATED:
            raise CoroutineError(f"Coroutine {self.name!r} already started", name=self.name)
        self._trace(f"[async start {self.name}]")
        self._step()
        return self

    def _step(self, error: Optional[BaseException] = None) -> None:
        self._state = CoroutineState.RUNNING
        try:
            if error is None:
                awaited = self._coro.send(None)
            else:
                awaited = self._coro.throw(error)
        except StopIteration as stop:
            self._finish(stop.value)
            return
        except Exception as exc:
            self._crash(exc)
            return

        self._suspend(awaited)

    def _suspend(self, awaited: Any) -> None:
        name = None
        if isinstance(awaited, _NamedWait):
            name = awaited.name
            awaited = awaited.lazy

        if not isinstance(awaited, Lazy):
            self._step(CoroutineError(
                f"Coroutine {self.name!r} awaited {awaited!r}; only Lazy futures can be awaited",
                name=self.name,
            ))
            return

        self._waiting_on = awaited
        self._waiting_name = name or awaited.name or "?"
        self._state = CoroutineState.SUSPENDED
        self._trace(f"[async wait {self._waiting_name}]")

        awaited.on_ready(lambda _value: self._resume(awaited))
        awaited.on_fail(lambda: self._resume(awaited))

    def _resume(self, lazy: Lazy) -> None:
        if self._state is not CoroutineState.SUSPENDED or self._waiting_on is not lazy:
            raise CoroutineError(
                f"Coroutine {self.name!r} resumed by {lazy!r} while {self._state.value}",
                name=self.name,
            )
        self._trace("[async continue]")
        name = self._waiting_name
        self._waiting_on = None
        self._waiting_name = None

        # The await expression itself raises LazyFailedError for a failed future.
        if lazy.failed():
            self._trace(f"[async failed {name}]")
        else:
            self._trace(f"[async ready {name}={lazy.get()!r}]")
        self._step()

    def _finish(self, value: Any) -> None:
        self._state = CoroutineState.FINISHED
        self._trace(f"[async done {self.name}]")
        self.result.resolve(value)

    def _crash(self, exc: Exception) -> None:
        self._state = CoroutineState.FAILED
        self.exception = exc
        logger.error(f"Coroutine {self.name!r} raised {exc!r}", exc_info=exc)
        self.result.fail()

    def _trace(self, message: str) -> None:
        if self.config.trace:
            logger.debug(message)


def start_and_run_once(
    body: Callable[..., NativeCoroutine],
    *args: Any,
    name: Optional[str] = None,
    config: Optional[LazyConfig] = None,
    **kwargs: Any,
) -> Coroutine:
    """
    Create a coroutine handle for body(*args, **kwargs) and run it once.

    Args:
        body: async function to run
        name: Diagnostic label (default: body's qualname)
        config: Tracing settings

    Returns:
        The handle, after the body has completed or suspended
    """
    coro = body(*args, **kwargs)
    handle = Coroutine(coro, name=name or getattr(body, "__qualname__", None), config=config)
    return handle.start()
