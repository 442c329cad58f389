import unittest

from pushable.pfifo import PFIFO


class TestPFIFO(unittest.IsolatedAsyncioTestCase):
    async def test_waiting_consumer_is_paired_directly(self):
        q: PFIFO[str] = PFIFO()
        consumer = q.shift()
        self.assertFalse(consumer.done())
        delivered = q.push("a")
        self.assertTrue(consumer.done())
        self.assertTrue(delivered.done())
        self.assertEqual(await consumer, "a")
        self.assertTrue(q.is_empty())

    async def test_push_completes_only_when_shifted(self):
        q: PFIFO[int] = PFIFO()
        delivered = q.push(1)
        self.assertFalse(delivered.done())
        self.assertEqual(len(q), 1)
        self.assertEqual(q.size, 1)
        self.assertEqual(await q.shift(), 1)
        self.assertTrue(delivered.done())
        self.assertEqual(q.size, 0)

    async def test_nth_shift_gets_nth_push(self):
        q: PFIFO[int] = PFIFO()
        c1, c2 = q.shift(), q.shift()
        q.push(1)
        q.push(2)
        q.push(3)
        c3 = q.shift()
        self.assertEqual([await c1, await c2, await c3], [1, 2, 3])

    async def test_size_function(self):
        q: PFIFO[bytes] = PFIFO(size_of=len)
        q.push(b"ab")
        q.push(b"cde")
        self.assertEqual(q.size, 5)
        await q.shift()
        self.assertEqual(q.size, 3)

    async def test_clear_releases_producers(self):
        q: PFIFO[int] = PFIFO()
        pending = [q.push(i) for i in range(3)]
        self.assertEqual(q.clear(), 3)
        self.assertTrue(q.is_empty())
        self.assertTrue(all(d.done() for d in pending))
        for d in pending:
            await d

    async def test_interrupt_resolves_waiting_consumers(self):
        q: PFIFO[str] = PFIFO()
        c1, c2 = q.shift(), q.shift()
        self.assertEqual(q.interrupt("stop"), 2)
        self.assertEqual(await c1, "stop")
        self.assertEqual(await c2, "stop")

    async def test_abandoned_consumer_is_skipped(self):
        q: PFIFO[int] = PFIFO()
        gone = q.shift()
        self.assertTrue(q.abandon(gone))
        q.push(1)
        self.assertEqual(len(q), 1)
        self.assertEqual(await q.shift(), 1)
