"""
Basic pushable: timers push values, one consumer iterates them.

Run: python examples/basic_pushable.py
"""
import asyncio
import time

from pushable import pushable


async def main():
    source = pushable(on_end=lambda err: print("on_end, error =", err))
    loop = asyncio.get_running_loop()

    loop.call_later(0.1, source.push, "hello")
    loop.call_later(0.2, source.push, "world")
    loop.call_later(0.3, source.end)

    start = time.monotonic()
    async for value in source:
        print(f'got "{value}" after {int((time.monotonic() - start) * 1000)}ms')
    print(f"done after {int((time.monotonic() - start) * 1000)}ms")


if __name__ == "__main__":
    asyncio.run(main())
