import asyncio
import unittest

from pushable import pushable_v


class TestPushableV(unittest.IsolatedAsyncioTestCase):
    async def test_reads_all_available_values(self):
        p = pushable_v()
        for v in [1, 2, 3]:
            p.push(v)
        p.end()
        self.assertEqual([b async for b in p], [[1, 2, 3]])

    async def test_push_v(self):
        p = pushable_v()
        p.push_v([1, 2, 3])
        p.push_v(x for x in (4, 5))
        p.end()
        self.assertEqual([b async for b in p], [[1, 2, 3, 4, 5]])

    async def test_always_yields_lists(self):
        p = pushable_v()
        loop = asyncio.get_running_loop()

        def produce():
            for v in [1, 2, 3]:
                p.push(v)
            loop.call_soon(p.end)

        loop.call_soon(produce)
        out = [b async for b in p]
        self.assertTrue(all(isinstance(b, list) for b in out))
        self.assertEqual([v for b in out for v in b], [1, 2, 3])

    async def test_end_seen_on_following_read(self):
        calls = []
        p = pushable_v(on_end=calls.append)
        p.push(1)
        p.push(2)
        ending = asyncio.create_task(_wait(p.end()))
        r = await p.next()
        self.assertEqual(r.value, [1, 2])
        self.assertFalse(r.done)
        await asyncio.wait_for(ending, 1)
        self.assertEqual(calls, [])
        self.assertTrue((await p.next()).done)
        self.assertEqual(calls, [None])
        self.assertTrue((await p.next()).done)

    async def test_end_with_error(self):
        p = pushable_v()
        for v in [1, 2, 3]:
            p.push(v)
        p.end(ValueError("boom"))
        with self.assertRaisesRegex(ValueError, "boom"):
            await p.next()

    async def test_empty_push_v_is_not_yielded(self):
        p = pushable_v()
        p.push_v([])
        t = asyncio.create_task(p.next())
        await asyncio.sleep(0)
        self.assertFalse(t.done())
        p.push(7)
        r = await asyncio.wait_for(t, 1)
        self.assertEqual(r.value, [7])

    async def test_readable_length_sums_values(self):
        p = pushable_v()
        p.push_v([1, 2])
        self.assertEqual(p.readable_length, 2)
        p.push(b"abc")
        self.assertEqual(p.readable_length, 5)
        await p.next()
        self.assertEqual(p.readable_length, 0)

    async def test_high_water_mark(self):
        p = pushable_v(high_water_mark=2)
        p.push_v([1, 2])
        blocked = asyncio.create_task(_wait(p.push(3)))
        await asyncio.sleep(0)
        self.assertFalse(blocked.done())
        self.assertEqual((await p.next()).value, [1, 2])
        await asyncio.wait_for(blocked, 1)
        self.assertEqual((await p.next()).value, [3])


async def _wait(aw):
    return await aw
