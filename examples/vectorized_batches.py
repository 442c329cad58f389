"""
Vectorized reads: every read returns all values buffered since the last one.

Run: python examples/vectorized_batches.py
"""
import asyncio

from pushable import pushable_v


async def main():
    source = pushable_v()
    source.push(1)
    source.push(2)
    source.push(3)
    source.end()
    print([batch async for batch in source])  # [[1, 2, 3]]

    source = pushable_v()

    async def producer():
        for burst in ([1, 2], [3], [4, 5, 6]):
            source.push_v(burst)
            await asyncio.sleep(0.01)
        await source.end()

    task = asyncio.create_task(producer())
    async for batch in source:
        print("batch", batch)
    await task


if __name__ == "__main__":
    asyncio.run(main())
