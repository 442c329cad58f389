"""
Pushable under AnyIO: a task group runs the producer, anyio.Event cancels a
waiting end().

Run: python examples/anyio_consumer.py
"""
import anyio

from pushable import AbortError, pushable


async def main():
    source = pushable()

    async def producer():
        for i in range(3):
            await source.push(i)
        await source.end()

    async with anyio.create_task_group() as tg:
        tg.start_soon(producer)
        async for value in source:
            print("got", value)

    late = pushable()
    late.push("never read")
    cancel = anyio.Event()
    cancel.set()
    try:
        await late.end(signal=cancel, error_code="ERR_NO_READER")
    except AbortError as e:
        print("end abandoned:", e.code)


if __name__ == "__main__":
    anyio.run(main)
