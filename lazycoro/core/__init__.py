"""
lazycoro Core

Single-assignment lazy futures, combinators, a fan-in barrier and a
coroutine adapter for awaiting futures without blocking the thread.
"""

from .future import Lazy, LazyState
from .barrier import Wait
from .combinators import combine, plus, fold, when_all
from .coroutine import Coroutine, CoroutineState, wait, start_and_run_once
from .exceptions import LazyError, InvalidStateError, LazyFailedError, CoroutineError

__all__ = [
    'Lazy',
    'LazyState',
    'Wait',
    'combine',
    'plus',
    'fold',
    'when_all',
    'Coroutine',
    'CoroutineState',
    'wait',
    'start_and_run_once',
    'LazyError',
    'InvalidStateError',
    'LazyFailedError',
    'CoroutineError',
]
