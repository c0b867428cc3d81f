from __future__ import annotations

import asyncio
import itertools
from contextlib import contextmanager
from typing import Iterator, List, Set


class SettleBarrier:
    """Tracks repaints the host has requested but not yet applied.

    A host that repaints surfaces asynchronously takes a ticket with
    `request()` (or `hold()`) and completes it once the repaint is on screen.
    `wait()` returns when no ticket is outstanding, after one extra loop
    iteration so callbacks already queued on the loop (input dispatch,
    repaints) run first.
    """

    def __init__(self) -> None:
        self._tickets = itertools.count(1)
        self._pending: Set[int] = set()
        self._waiters: List[asyncio.Future] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self) -> int:
        ticket = next(self._tickets)
        self._pending.add(ticket)
        return ticket

    def complete(self, ticket: int) -> None:
        self._pending.discard(ticket)
        if not self._pending:
            self._wake()

    @contextmanager
    def hold(self) -> Iterator[int]:
        ticket = self.request()
        try:
            yield ticket
        finally:
            self.complete(ticket)

    def reset(self) -> None:
        self._pending.clear()
        self._wake()

    def _wake(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        while self._pending:
            waiter = loop.create_future()
            self._waiters.append(waiter)
            await waiter
        await asyncio.sleep(0)
