"""
Unit Tests for Lazy Futures

Covers the future cell state machine, observer protocol and asyncio bridge.
"""

import asyncio
import random

import pytest

from lazycoro import Lazy, LazyState, InvalidStateError, LazyFailedError


def random_int(min_val: int = -1000, max_val: int = 1000) -> int:
    """Generate a random integer."""
    return random.randint(min_val, max_val)


class TestBasicFutures:
    """Test basic future operations."""

    def test_pending(self):
        """Test a new future starts pending."""
        f = Lazy()
        assert f.state is LazyState.PENDING
        assert f.is_pending()
        assert not f.is_ready()
        assert not f.failed()

    def test_make_ready(self):
        """Test creating a ready future."""
        f = Lazy.make_ready(42)
        assert f.is_ready()
        assert not f.failed()
        assert f.get() == 42

    def test_literal_constructor(self):
        """Test Lazy(value) is pre-resolved."""
        assert Lazy(7).get() == 7

    def test_none_is_a_value(self):
        """Test None can be a resolved value."""
        f = Lazy(None)
        assert f.is_ready()
        assert f.get() is None

    def test_make_failed(self):
        """Test creating a failed future."""
        f = Lazy.make_failed()
        assert f.failed()
        assert not f.is_ready()

    def test_resolve_then_get(self):
        """Test resolve followed by get returns the value."""
        value = random_int()
        f = Lazy()
        f.resolve(value)
        assert f.get() == value

    def test_resolve_twice_rejected(self):
        """Test resolving a second time is a usage error."""
        f = Lazy(name="a")
        f.resolve(1)
        with pytest.raises(InvalidStateError) as exc_info:
            f.resolve(2)
        assert exc_info.value.name == "a"
        assert f.get() == 1

    def test_fail_after_resolve_rejected(self):
        """Test failing a resolved future is a usage error."""
        f = Lazy(1)
        with pytest.raises(InvalidStateError):
            f.fail()

    def test_resolve_after_fail_rejected(self):
        """Test resolving a failed future is a usage error."""
        f = Lazy.make_failed()
        with pytest.raises(InvalidStateError):
            f.resolve(1)

    def test_get_pending_rejected(self):
        """Test reading an unresolved future is a usage error."""
        with pytest.raises(InvalidStateError):
            Lazy().get()

    def test_get_failed_rejected(self):
        """Test reading a failed future is a usage error."""
        with pytest.raises(InvalidStateError):
            Lazy.make_failed().get()

    def test_repr(self):
        """Test repr shows name and state."""
        assert repr(Lazy(name="a")) == "<Lazy 'a' pending>"
        assert repr(Lazy(3, name="a")) == "<Lazy 'a' ready value=3>"


class TestObservers:
    """Test observer registration and firing."""

    def test_on_ready_fires_on_resolve(self):
        """Test observers receive the value once resolved."""
        seen = []
        f = Lazy()
        f.on_ready(seen.append)
        assert seen == []
        f.resolve(5)
        assert seen == [5]

    def test_registration_order(self):
        """Test observers fire in registration order."""
        order = []
        f = Lazy()
        for i in range(5):
            f.on_ready(lambda v, i=i: order.append(i))
        f.resolve(0)
        assert order == [0, 1, 2, 3, 4]

    def test_on_ready_after_resolve_is_synchronous(self):
        """Test late registration fires before on_ready returns, exactly once."""
        seen = []
        f = Lazy.make_ready(9)
        f.on_ready(seen.append)
        assert seen == [9]

    def test_observers_fire_once(self):
        """Test an observer is not re-invoked by later registrations."""
        seen = []
        f = Lazy()
        f.on_ready(seen.append)
        f.resolve(1)
        f.on_ready(lambda v: None)
        assert seen == [1]

    def test_state_committed_before_firing(self):
        """Test observers see the ready state and value."""
        f = Lazy()
        snapshot = []
        f.on_ready(lambda v: snapshot.append((f.state, f.get())))
        f.resolve(3)
        assert snapshot == [(LazyState.READY, 3)]

    def test_reentrant_registration(self):
        """Test an observer registering another observer during firing."""
        order = []
        f = Lazy()

        def first(v):
            order.append(("first", v))
            f.on_ready(lambda v2: order.append(("nested", v2)))

        f.on_ready(first)
        f.on_ready(lambda v: order.append(("second", v)))
        f.resolve(4)

        assert order == [("first", 4), ("nested", 4), ("second", 4)]

    def test_on_fail(self):
        """Test fail observers fire without a payload."""
        calls = []
        f = Lazy()
        f.on_fail(lambda: calls.append("failed"))
        f.on_ready(lambda v: calls.append("ready"))
        f.fail()
        assert calls == ["failed"]

    def test_on_fail_after_fail_is_synchronous(self):
        """Test late fail registration fires immediately."""
        calls = []
        Lazy.make_failed().on_fail(lambda: calls.append(1))
        assert calls == [1]

    def test_fail_observer_not_fired_on_ready(self):
        """Test fail observers are dropped once ready."""
        calls = []
        f = Lazy()
        f.on_fail(lambda: calls.append(1))
        f.resolve(0)
        Lazy(1).on_fail(lambda: calls.append(2))
        assert calls == []

    def test_observer_exception_propagates(self):
        """Test an observer error reaches the resolve() caller."""
        f = Lazy()

        def boom(v):
            raise RuntimeError("observer")

        f.on_ready(boom)
        with pytest.raises(RuntimeError):
            f.resolve(1)
        assert f.is_ready()

    def test_observer_exception_does_not_skip_others(self):
        """Test observers after a raising one are still notified."""
        seen = []
        f = Lazy()

        def boom(v):
            raise RuntimeError("observer")

        f.on_ready(boom)
        f.on_ready(seen.append)
        with pytest.raises(RuntimeError):
            f.resolve(1)
        assert seen == [1]

    def test_nested_resolve_delivered_before_return(self):
        """Test a future settled inside an observer notifies before the outer resolve returns."""
        order = []
        a, b = Lazy(), Lazy()
        b.on_ready(lambda v: order.append(("b", v)))

        def first(v):
            b.resolve(v + 1)
            order.append(("first", v))

        a.on_ready(first)
        a.on_ready(lambda v: order.append(("second", v)))
        a.resolve(1)

        assert order == [("first", 1), ("second", 1), ("b", 2)]

    def test_long_then_chain(self):
        """Test a deep chain of derived futures resolves without recursion errors."""
        root = Lazy()
        tail = root
        for _ in range(5000):
            tail = tail.then(lambda x: x + 1)
        root.resolve(0)
        assert tail.get() == 5000


class TestChaining:
    """Test then() chaining."""

    def test_simple_chain(self):
        """Test simple .then() chain."""
        f = Lazy.make_ready(10)
        assert f.then(lambda x: x * 2).get() == 20

    def test_multi_step_chain(self):
        """Test multi-step chain on a pending future."""
        f = Lazy()
        result = (f
                  .then(lambda x: x * 2)      # 10
                  .then(lambda x: x + 5)      # 15
                  .then(lambda x: x * 3))     # 45
        assert result.is_pending()
        f.resolve(5)
        assert result.get() == 45

    def test_chain_with_types(self):
        """Test chain that changes types."""
        result = (Lazy.make_ready(42)
                  .then(lambda x: str(x))
                  .then(lambda x: x + " is the answer")
                  .get())
        assert result == "42 is the answer"

    def test_chain_with_failure(self):
        """Test failure propagation through chain."""
        f = Lazy()
        result = f.then(lambda x: x * 2)
        f.fail()
        assert result.failed()

    def test_chain_with_raising_func(self):
        """Test a raising continuation fails the derived future only."""
        seen = []
        f = Lazy()
        result = f.then(lambda x: 1 / x)
        f.on_ready(seen.append)

        f.resolve(0)

        assert result.failed()
        assert seen == [0]

    def test_raising_func_fails_downstream(self):
        """Test the failure continues through later links."""
        f = Lazy()
        result = f.then(lambda x: 1 / x).then(lambda x: x * 2)
        f.resolve(0)
        assert result.failed()


class TestAsyncioBridge:
    """Test to_asyncio()."""

    @pytest.mark.asyncio
    async def test_ready_future(self):
        """Test bridging an already-ready future."""
        assert await Lazy.make_ready(123).to_asyncio() == 123

    @pytest.mark.asyncio
    async def test_resolved_later(self):
        """Test bridging a future resolved by another task."""
        f = Lazy()
        loop = asyncio.get_running_loop()
        loop.call_soon(f.resolve, 8)
        assert await f.to_asyncio() == 8

    @pytest.mark.asyncio
    async def test_failed(self):
        """Test a failed future raises LazyFailedError."""
        f = Lazy(name="x")
        py_future = f.to_asyncio()
        f.fail()
        with pytest.raises(LazyFailedError) as exc_info:
            await py_future
        assert exc_info.value.name == "x"

    @pytest.mark.asyncio
    async def test_gather(self):
        """Test gathering several bridged futures."""
        futures = [Lazy() for _ in range(3)]
        gathered = asyncio.gather(*(f.to_asyncio() for f in futures))
        for i, f in enumerate(reversed(futures)):
            f.resolve(i)
        assert await gathered == [2, 1, 0]
