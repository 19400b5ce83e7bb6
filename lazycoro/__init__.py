"""
lazycoro - Lazy Futures and Cooperative Coroutines

Minimal single-threaded concurrency primitives:
- Lazy: single-assignment future with ready/fail observers
- combine / plus / fold: derive futures arithmetically (a + b)
- Wait: run continuations once a set of futures has resolved
- Coroutine: write sequential `async def` code that awaits Lazy values
"""

from .config import LazyConfig, get_config, set_config, configure_logging
from .core import (
    Lazy, LazyState, Wait,
    combine, plus, fold, when_all,
    Coroutine, CoroutineState, wait, start_and_run_once,
    LazyError, InvalidStateError, LazyFailedError, CoroutineError,
)

__version__ = "0.1.0"

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
    'LazyConfig',
    'get_config',
    'set_config',
    'configure_logging',
]
