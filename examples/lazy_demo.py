"""
Lazy Future Coroutine Demo

Derives futures with `+`, then runs a coroutine that awaits them while the
driver assigns the inputs. Set LAZYCORO_TRACE=1 to see the coroutine trace.
"""

from lazycoro import (
    Lazy, Wait, wait, start_and_run_once, configure_logging,
)


def print_value(name, value):
    print(f"{name}: {value}")


def main():
    configure_logging()

    a = Lazy(name="a")
    b = Lazy(name="b")

    c = a + 1
    d = a + b + c + c

    async def test_coroutine():
        print("inside coroutine")
        first = await wait(a, "a")
        second = await wait(b, "b")
        print(f"{first},{second}")
        print(await wait(c, "c"))
        return await wait(d, "d")

    Wait(a, b).run(lambda: print_value("a + b", a.get() + b.get()))

    co = start_and_run_once(test_coroutine)

    # Driver block: runs while the coroutine is parked on `a`
    a.resolve(10)
    b.resolve(5)

    print_value("d", co.get())


if __name__ == "__main__":
    main()
