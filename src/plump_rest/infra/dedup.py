# src/plump_rest/infra/dedup.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict

import httpx

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[httpx.Response]]


def _retrieve(task: "asyncio.Task[httpx.Response]") -> None:
    # every caller may have gone away; mark the outcome as seen so asyncio does not log it
    if not task.cancelled():
        task.exception()


class RequestDeduplicator:
    """
    Collapses concurrent GETs of the same URL into one network call.

    The entry for a URL is removed inside the fetch task itself, so it is gone
    before any waiter sees the result; a read issued after settlement always
    starts a new call.
    """

    def __init__(self, fetch: Fetch) -> None:
        self._fetch = fetch
        self._in_flight: Dict[str, "asyncio.Task[httpx.Response]"] = {}

    def __contains__(self, url: str) -> bool:
        return url in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    async def _run(self, url: str) -> httpx.Response:
        try:
            return await self._fetch(url)
        finally:
            del self._in_flight[url]

    async def acquire(self, url: str) -> httpx.Response:
        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._run(url))
            task.add_done_callback(_retrieve)
            self._in_flight[url] = task
        else:
            logger.debug("joining in-flight GET %s", url)
        # a cancelled caller must not cancel the read other callers share
        return await asyncio.shield(task)
