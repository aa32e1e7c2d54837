"""In-flight fetch deduplication keyed by user id."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class FetchCoalescer:
    """Shares one running fetch per user between concurrent callers.

    A single instance may be shared by several facades so that all of them
    reuse the same request for a given user.
    """

    def __init__(self) -> None:
        self._in_flight: dict[int, asyncio.Task] = {}

    async def run(
        self,
        user_id: int,
        fetch: Callable[[], Awaitable[T]],
        force: bool = False,
    ) -> T:
        """Await the running fetch for user_id, starting one if none is running.

        force=True always starts a new fetch; the previous one keeps running
        for whoever already awaits it.
        """
        task = self._in_flight.get(user_id)
        if task is None or force:
            task = asyncio.ensure_future(fetch())
            self._in_flight[user_id] = task
            task.add_done_callback(lambda t, uid=user_id: self._forget(uid, t))
        # Cancelling one waiter must not cancel the fetch for the others.
        return await asyncio.shield(task)

    def in_flight(self, user_id: int) -> bool:
        return user_id in self._in_flight

    def discard(self, user_id: int | None = None) -> None:
        """Stop sharing running fetches; they still complete for current waiters."""
        if user_id is None:
            self._in_flight.clear()
        else:
            self._in_flight.pop(user_id, None)

    def _forget(self, user_id: int, task: asyncio.Task) -> None:
        if self._in_flight.get(user_id) is task:
            del self._in_flight[user_id]
