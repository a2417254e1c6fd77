"""Ordered, delayed delivery of outbound activities."""

import asyncio
from collections import OrderedDict
from typing import Awaitable, Callable, Protocol

import httpx

from ..logging_config import get_logger
from ..models import Activity

logger = get_logger(__name__)

Sender = Callable[[str, Activity], Awaitable[None]]


class IDispatcher(Protocol):
    """Drains per-turn activity queues to the transport."""

    def deliver(self, address: str, activities: list[Activity]) -> asyncio.Task:
        """Schedule activities after everything already queued for address."""
        ...

    async def drain(self) -> None:
        """Wait until every scheduled delivery finished."""
        ...


class Dispatcher:
    """Chains deliveries per conversation so delays never reorder sends."""

    def __init__(self, sender: Sender, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._sender = sender
        self._sleep = sleep
        self._tails: dict[str, asyncio.Task] = {}

    def deliver(self, address: str, activities: list[Activity]) -> asyncio.Task:
        previous = self._tails.get(address)
        task = asyncio.create_task(self._deliver(address, list(activities), previous))
        self._tails[address] = task
        task.add_done_callback(lambda t: self._forget(address, t))
        return task

    async def drain(self) -> None:
        tasks = list(self._tails.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Cancel pending deliveries."""
        for task in self._tails.values():
            task.cancel()
        await self.drain()

    async def _deliver(
        self,
        address: str,
        activities: list[Activity],
        previous: asyncio.Task | None,
    ) -> None:
        if previous is not None:
            # Earlier turn's failures are already logged there
            await asyncio.gather(previous, return_exceptions=True)

        for activity in activities:
            if activity.delay > 0:
                await self._sleep(activity.delay)
            try:
                await self._sender(address, activity)
            except Exception as e:
                logger.error("Failed to deliver %s to %s: %s", activity.type, address, e)

    def _forget(self, address: str, task: asyncio.Task) -> None:
        if self._tails.get(address) is task:
            del self._tails[address]


class WebhookSender:
    """Posts activities to the reply URL announced by the channel."""

    def __init__(self, client: httpx.AsyncClient | None = None, max_addresses: int = 10_000):
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._max_addresses = max_addresses
        # Least recently registered first
        self._reply_urls: OrderedDict[str, str] = OrderedDict()

    def register(self, address: str, reply_url: str) -> None:
        self._reply_urls[address] = reply_url
        self._reply_urls.move_to_end(address)
        while len(self._reply_urls) > self._max_addresses:
            self._reply_urls.popitem(last=False)

    async def __call__(self, address: str, activity: Activity) -> None:
        url = self._reply_urls.get(address)
        if url is None:
            logger.debug("No reply URL for %s, dropping %s", address, activity.type)
            return
        response = await self._client.post(
            url, json={"address": address, **activity.to_dict()}
        )
        response.raise_for_status()

    async def close(self) -> None:
        await self._client.aclose()
