import asyncio
from typing import Awaitable, Callable

class RequestThrottle:
    """
    Fixed-spacing limiter for sequential lookups.
    Waits `delay_s` between the end of one request and the start of the next;
    the first request goes out immediately. One instance per pipeline run.
    """
    def __init__(self, delay_s: float, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.delay_s = max(0.0, delay_s)
        self._sleep = sleep
        self.completed = 0

    async def acquire(self) -> None:
        if self.completed == 0 or self.delay_s <= 0:
            return
        await self._sleep(self.delay_s)

    def release(self) -> None:
        self.completed += 1

    async def __aenter__(self) -> "RequestThrottle":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
