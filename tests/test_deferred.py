import asyncio
import unittest

from pushable import Deferred


class TestDeferred(unittest.IsolatedAsyncioTestCase):
    async def test_deferred_succeed(self):
        d: Deferred[int] = Deferred()
        async def waiter():
            return await d
        task = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        self.assertFalse(task.done())
        d.succeed(5)
        v = await task
        self.assertEqual(v, 5)

    async def test_settled_before_first_await(self):
        d = Deferred.resolved("x")
        self.assertTrue(d.done())
        self.assertEqual(d.result(), "x")
        self.assertEqual(await d, "x")
        self.assertEqual(await d.await_(), "x")

    async def test_succeed_twice(self):
        d: Deferred[int] = Deferred()
        d.succeed(1)
        self.assertFalse(d.try_succeed(2))
        with self.assertRaises(RuntimeError):
            d.succeed(3)
        self.assertEqual(await d, 1)

    async def test_result_before_completion(self):
        with self.assertRaises(RuntimeError):
            Deferred().result()

    async def test_cancelled_waiter_leaves_others(self):
        d: Deferred[int] = Deferred()
        async def waiter():
            return await d
        a = asyncio.create_task(waiter())
        b = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        a.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await a
        d.succeed(9)
        self.assertEqual(await b, 9)


class TestDeferredWithoutLoop(unittest.TestCase):
    def test_settle_outside_event_loop(self):
        d: Deferred[str] = Deferred()
        d.succeed("ok")

        async def main():
            return await d

        self.assertEqual(asyncio.run(main()), "ok")
