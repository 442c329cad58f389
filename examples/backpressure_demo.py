"""
Backpressure: a fast producer is held back by a high water mark while a slow
consumer drains, and a push that waits too long is abandoned with a code.

Run: python examples/backpressure_demo.py
"""
import asyncio

from pushable import AbortError, ConsoleLogger, pushable


async def main():
    log = ConsoleLogger("demo", level="DEBUG")
    source = pushable(high_water_mark=3, logger=log)

    async def producer():
        for i in range(8):
            await source.push(i)
            print(f"pushed {i} (buffered={source.readable_length})")
        # give up on the last value if nobody makes room within 50ms
        timeout = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, timeout.set)
        try:
            await source.push(99, signal=timeout, error_code="ERR_PUSH_TIMEOUT")
        except AbortError as e:
            print("push abandoned:", e.code)
        await source.end()

    task = asyncio.create_task(producer())
    async for value in source:
        print("consumed", value)
        await asyncio.sleep(0.02 if value < 7 else 0.1)
    await task


if __name__ == "__main__":
    asyncio.run(main())
