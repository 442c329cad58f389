import asyncio
import unittest

import anyio

from pushable import AbortError, pushable, race_signal


async def _wait(aw):
    return await aw


class TestAnyIOSignals(unittest.IsolatedAsyncioTestCase):
    async def test_anyio_event_aborts_push(self):
        p = pushable(high_water_mark=1)
        p.push(0)
        signal = anyio.Event()
        t = asyncio.create_task(_wait(p.push(1, signal=signal, error_code="ERR_TIMEOUT")))
        await asyncio.sleep(0)
        signal.set()
        with self.assertRaises(AbortError) as cm:
            await t
        self.assertEqual(cm.exception.code, "ERR_TIMEOUT")
        self.assertEqual(p.readable_length, 1)

    async def test_race_signal(self):
        self.assertEqual(await race_signal(asyncio.sleep(0, result=7)), 7)
        signal = anyio.Event()
        self.assertEqual(await race_signal(asyncio.sleep(0, result=8), signal), 8)
        signal.set()
        with self.assertRaises(AbortError):
            await race_signal(asyncio.sleep(10), signal)

    async def test_race_signal_propagates_errors(self):
        async def boom():
            raise KeyError("x")
        with self.assertRaises(KeyError):
            await race_signal(boom(), asyncio.Event())


class TestAnyIORun(unittest.TestCase):
    def test_consume_under_anyio_run(self):
        async def main():
            p = pushable()

            async def produce():
                for v in (1, 2, 3):
                    await p.push(v)
                await p.end()

            async with anyio.create_task_group() as tg:
                tg.start_soon(produce)
                out = [v async for v in p]
            return out

        self.assertEqual(anyio.run(main), [1, 2, 3])
