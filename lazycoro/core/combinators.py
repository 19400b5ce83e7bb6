"""
Lazy Combinators

Derive new futures from existing ones without blocking.
"""

import logging
import operator
from typing import TypeVar, List, Callable, Any, Iterable

from .future import Lazy, _resolve_with
from .barrier import Wait

T = TypeVar('T')

logger = logging.getLogger(__name__)


def _as_lazy(value: Any) -> Lazy:
    if isinstance(value, Lazy):
        return value
    return Lazy.make_ready(value)


def _fail_once(result: Lazy) -> Callable[[], None]:
    def fail():
        if result.is_pending():
            result.fail()
    return fail


def combine(a: Any, b: Any, op: Callable[[T, T], T]) -> Lazy[T]:
    """
    Merge two futures with a binary operation.

    Two-stage continuation chain: once `a` resolves, its value seeds the
    result and a second observer is attached to `b`; once `b` resolves, the
    result resolves with op(va, vb). Plain values are treated as ready
    futures. If either operand fails, or op raises, the result fails.

    Args:
        a: Left operand (Lazy or plain value)
        b: Right operand (Lazy or plain value)
        op: Merge function, applied as op(va, vb)

    Returns:
        New pending future

    Example:
        total = combine(price, tax, operator.add)
    """
    left = _as_lazy(a)
    right = _as_lazy(b)
    result: Lazy[T] = Lazy()

    def step2(vb: T, va: T) -> None:
        _resolve_with(result, op, va, vb)

    def step1(va: T) -> None:
        right.on_ready(lambda vb: step2(vb, va))

    fail = _fail_once(result)
    left.on_fail(fail)
    right.on_fail(fail)
    left.on_ready(step1)
    return result


def plus(a: Any, b: Any) -> Lazy:
    """Future of a + b. Backs Lazy.__add__."""
    return combine(a, b, operator.add)


def fold(futures: Iterable[Any], op: Callable[[T, T], T] = operator.add) -> Lazy[T]:
    """
    Fold futures left to right.

    fold([a, b, c, c]) is ((a + b) + c) + c, one intermediate future per step.

    Raises:
        ValueError if no futures are given
    """
    items = list(futures)
    if not items:
        raise ValueError("fold() requires at least one future")

    acc = _as_lazy(items[0])
    for item in items[1:]:
        acc = combine(acc, item, op)
    return acc


def when_all(futures: Iterable[Any]) -> Lazy[List[Any]]:
    """
    Future of all values, in input order.

    Resolves once every input resolves (immediately for an empty input).
    Fails as soon as any input fails.

    Example:
        both = when_all([a, b])
        both.on_ready(lambda values: print(sum(values)))
    """
    items = [_as_lazy(f) for f in futures]
    result: Lazy[List[Any]] = Lazy()

    barrier = Wait(*items)
    barrier.on_fail(_fail_once(result))
    barrier.run(lambda: result.resolve([item.get() for item in items]))
    logger.debug(f"when_all watching {len(items)} futures")
    return result
