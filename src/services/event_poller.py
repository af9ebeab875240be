"""Event stream poller — delivers new on-chain events in sequence order."""
from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from ..exceptions import NetworkError, OracleClientError
from ..interfaces.chain import ChainClient
from ..models import Event, EventHandle

logger = logging.getLogger(__name__)

EventCallback = Callable[[Event], Union[Awaitable[Any], Any]]


class PollerState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    PRIMED = "primed"
    POLLING = "polling"


class EventPoller:
    """Watch one event handle and feed each new event to ``callback``.

    The cursor advances to an event before its callback runs, so a callback
    that raises is logged and the event is not redelivered. A failed fetch
    leaves the cursor untouched and the next tick retries from the same place.
    """

    def __init__(
        self,
        client: ChainClient,
        handle: EventHandle,
        callback: EventCallback,
        poll_interval: float = 1.0,
    ) -> None:
        self._client = client
        self.handle = handle
        self._callback = callback
        self.poll_interval = poll_interval
        self.state = PollerState.UNINITIALIZED
        self.last_sequence_number: int | None = None
        self._cycle_lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    async def _fetch(self, start: int | None = None, limit: int | None = None) -> list[Event]:
        raw = await self._client.get_events_by_event_handle(
            self.handle.owner,
            self.handle.struct,
            self.handle.field,
            start=start,
            limit=limit,
        )
        if not isinstance(raw, list):
            raise NetworkError(
                f"Expected an event list for {self.handle.struct}::{self.handle.field}, "
                f"got {type(raw).__name__}"
            )
        try:
            events = [Event.from_json(e) for e in raw]
        except (AttributeError, TypeError, ValueError) as e:
            raise NetworkError(
                f"Malformed event page for {self.handle.struct}::{self.handle.field}: {e}"
            ) from e
        return sorted(events, key=lambda e: e.sequence_number)

    async def prime(self) -> int | None:
        """Set the cursor to the latest existing event; the backlog is skipped."""
        latest = await self._fetch(limit=1)
        self.last_sequence_number = latest[-1].sequence_number if latest else None
        self.state = PollerState.PRIMED
        logger.info(
            "Primed %s::%s at sequence %s",
            self.handle.struct,
            self.handle.field,
            self.last_sequence_number,
        )
        return self.last_sequence_number

    async def poll_once(self) -> int:
        """Fetch and deliver events after the cursor. Returns the number delivered."""
        if self._cycle_lock.locked():
            logger.debug("Previous poll cycle still running, skipping")
            return 0

        async with self._cycle_lock:
            if self.state is PollerState.UNINITIALIZED:
                await self.prime()
            start = 0 if self.last_sequence_number is None else self.last_sequence_number + 1
            events = await self._fetch(start=start)
            delivered = 0
            for event in events:
                if (
                    self.last_sequence_number is not None
                    and event.sequence_number <= self.last_sequence_number
                ):
                    continue
                self.last_sequence_number = event.sequence_number
                await self._deliver(event)
                delivered += 1
            self.state = PollerState.POLLING
            return delivered

    async def _deliver(self, event: Event) -> None:
        try:
            result = self._callback(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Event callback failed for sequence %d", event.sequence_number)

    async def run(self) -> None:
        """Poll on a fixed interval until ``stop`` is called."""
        if self.state is PollerState.UNINITIALIZED:
            await self.prime()
        self.state = PollerState.POLLING
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except OracleClientError as e:
                logger.warning(
                    "Poll of %s::%s failed, retrying next tick: %s",
                    self.handle.struct,
                    self.handle.field,
                    e,
                )
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass

    async def start(self) -> asyncio.Task:
        """Prime, then run the polling loop in a background task."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event.clear()
        if self.state is PollerState.UNINITIALIZED:
            await self.prime()
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Stop the timer; a cycle already in progress runs to completion."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
