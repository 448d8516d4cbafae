import asyncio
import unittest

from bitstamp_client.streaming.connection import ReconnectingSocket


class FakeWebSocket:
    """Yields queued frames; ``None`` ends the connection like a server close."""

    def __init__(self, *frames) -> None:
        self.frames: asyncio.Queue = asyncio.Queue()
        for frame in frames:
            self.frames.put_nowait(frame)
        self.sent = []
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.frames.get()
        if frame is None:
            raise StopAsyncIteration
        return frame

    async def send(self, frame: str) -> None:
        self.sent.append(frame)

    async def close(self) -> None:
        self.closed = True
        self.frames.put_nowait(None)


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class ReconnectingSocketTest(unittest.IsolatedAsyncioTestCase):
    async def test_queued_frames_flush_on_open_and_messages_are_delivered(self) -> None:
        ws = FakeWebSocket('{"event": "trade"}')

        async def connect(url):
            return ws

        sock = ReconnectingSocket("wss://example", connect=connect)
        opened, messages = [], []
        sock.on_open = lambda: opened.append(True)
        sock.on_message = messages.append
        sock.send('{"event": "bts:subscribe"}')

        sock.start()
        await settle()

        self.assertEqual([True], opened)
        self.assertEqual(['{"event": "bts:subscribe"}'], ws.sent)
        self.assertEqual(['{"event": "trade"}'], messages)
        self.assertTrue(sock.connected)

        await sock.close()
        self.assertTrue(ws.closed)
        self.assertFalse(sock.connected)

    async def test_reconnects_after_server_drop(self) -> None:
        connections = [FakeWebSocket(None), FakeWebSocket()]
        attempts = []

        async def connect(url):
            attempts.append(url)
            return connections[len(attempts) - 1]

        sock = ReconnectingSocket("wss://example", retry_delay=0, connect=connect)
        events = []
        sock.on_open = lambda: events.append("open")
        sock.on_close = lambda: events.append("close")

        sock.start()
        await settle()
        sock.send("after-reconnect")
        await settle()

        self.assertEqual(2, len(attempts))
        self.assertEqual(["open", "close", "open"], events)
        self.assertEqual(["after-reconnect"], connections[1].sent)
        await sock.close()

    async def test_gives_up_after_max_retries(self) -> None:
        attempts = []

        async def connect(url):
            attempts.append(url)
            raise OSError("refused")

        sock = ReconnectingSocket("wss://example", max_retries=2, retry_delay=0, connect=connect)

        with self.assertLogs("bitstamp_client.streaming.connection", level="WARNING"):
            sock.start()
            await asyncio.sleep(0.05)

        self.assertEqual(3, len(attempts))
        self.assertFalse(sock.connected)
        await sock.close()

    async def test_connections_dropped_before_first_frame_count_as_failures(self) -> None:
        attempts = []

        async def connect(url):
            attempts.append(url)
            return FakeWebSocket(None)

        sock = ReconnectingSocket("wss://example", max_retries=3, retry_delay=0.01, connect=connect)

        with self.assertLogs("bitstamp_client.streaming.connection", level="ERROR") as logs:
            sock.start()
            await asyncio.sleep(0.2)

        self.assertEqual(4, len(attempts))
        self.assertIn("Giving up", logs.output[-1])
        self.assertFalse(sock.connected)
        await sock.close()

    async def test_reconnect_waits_retry_delay(self) -> None:
        attempts = []

        async def connect(url):
            attempts.append(url)
            return FakeWebSocket("frame", None)

        sock = ReconnectingSocket("wss://example", retry_delay=10, connect=connect)
        sock.start()
        await settle()

        self.assertEqual(1, len(attempts))
        await sock.close()

    async def test_failing_callback_is_logged_not_raised(self) -> None:
        ws = FakeWebSocket("frame")

        async def connect(url):
            return ws

        def explode(frame):
            raise RuntimeError("boom")

        sock = ReconnectingSocket("wss://example", connect=connect)
        sock.on_message = explode

        with self.assertLogs("bitstamp_client.streaming.connection", level="ERROR"):
            sock.start()
            await settle()

        self.assertTrue(sock.connected)
        await sock.close()


if __name__ == "__main__":
    unittest.main()
