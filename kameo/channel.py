"""Signals carried by actor mailboxes and the receiving half of a mailbox."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Deque, List, Optional, Union

from kameo.errors import ActorStopReason

__all__ = [
    "Signal",
    "StartupFinishedSignal",
    "MessageSignal",
    "LinkDiedSignal",
    "StopSignal",
    "MailboxClosedError",
    "MailboxFullError",
    "MailboxTimeoutError",
    "MailboxEmptyError",
    "MailboxDisconnectedError",
    "MailboxReceiver",
]


class Signal:
    """Base of everything that can be placed in an actor's mailbox."""


@dataclass(frozen=True)
class StartupFinishedSignal(Signal):
    """The actor has finished starting up."""


@dataclass
class MessageSignal(Signal):
    """A message for the actor, with the means to reply to it."""

    message: Any
    actor_ref: Any = None
    reply: Any = None
    sent_within_actor: bool = False
    message_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.message_name is None:
            self.message_name = type(self.message).__qualname__


@dataclass(frozen=True)
class LinkDiedSignal(Signal):
    """A linked actor has died."""

    id: Any
    reason: ActorStopReason


@dataclass(frozen=True)
class StopSignal(Signal):
    """Tells the actor to stop."""


class MailboxClosedError(Exception):
    """The receiving half is closed; carries the signal that was not delivered."""

    def __init__(self, signal: Signal) -> None:
        super().__init__(signal)
        self.signal = signal

    def __str__(self) -> str:
        return "channel closed"


class MailboxFullError(Exception):
    """The mailbox has no free capacity; carries the signal that was not delivered."""

    def __init__(self, signal: Signal) -> None:
        super().__init__(signal)
        self.signal = signal

    def __str__(self) -> str:
        return "channel full"


class MailboxTimeoutError(Exception):
    """No capacity became free in time; carries the signal that was not delivered."""

    def __init__(self, signal: Signal) -> None:
        super().__init__(signal)
        self.signal = signal

    def __str__(self) -> str:
        return "timed out waiting on send operation"


class MailboxEmptyError(Exception):
    """Nothing is waiting in the mailbox, but senders are still alive."""

    def __str__(self) -> str:
        return "receiving on an empty channel"


class MailboxDisconnectedError(Exception):
    """The mailbox is empty and can never receive anything more."""

    def __str__(self) -> str:
        return "receiving on a closed channel"


def _seconds(timeout: Union[float, int, timedelta]) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


class _Channel:
    """Shared state of one mailbox.

    A new channel already counts one strong sender handle, the one handed
    out together with the receiver.
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        if capacity is not None:
            if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
                raise ValueError("mailbox capacity must be greater than zero")
        self.bound = capacity
        self.queue: Deque[Signal] = deque()
        self.rx_closed = False
        self.strong = 1
        self.weak = 0
        self._recv_waiters: List[asyncio.Future] = []
        self._send_waiters: List[asyncio.Future] = []
        self._closed_waiters: List[asyncio.Future] = []

    @property
    def bounded(self) -> bool:
        return self.bound is not None

    def available(self) -> Optional[int]:
        """Free slots in a bounded channel, ``None`` when unbounded."""
        if self.bound is None:
            return None
        return max(self.bound - len(self.queue), 0)

    def _full(self) -> bool:
        return self.bound is not None and len(self.queue) >= self.bound

    @staticmethod
    def _wake(waiters: List[asyncio.Future]) -> None:
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)
        waiters.clear()

    @staticmethod
    async def _wait(waiters: List[asyncio.Future]) -> None:
        fut = asyncio.get_running_loop().create_future()
        waiters.append(fut)
        try:
            await fut
        finally:
            if fut in waiters:
                waiters.remove(fut)

    # sender handle bookkeeping

    def add_sender(self) -> None:
        self.strong += 1

    def remove_sender(self) -> None:
        if self.strong <= 0:
            raise RuntimeError("no sender handle left to release")
        self.strong -= 1
        if self.strong == 0:
            self._wake(self._recv_waiters)

    def add_weak(self) -> None:
        self.weak += 1

    def remove_weak(self) -> None:
        if self.weak <= 0:
            raise RuntimeError("no weak sender handle left to release")
        self.weak -= 1

    def upgrade(self) -> bool:
        """Count a new strong handle if any strong handle is still alive."""
        if self.strong == 0:
            return False
        self.strong += 1
        return True

    # sending

    def _push(self, signal: Signal) -> None:
        self.queue.append(signal)
        self._wake(self._recv_waiters)

    def send_nowait(self, signal: Signal) -> None:
        if self.rx_closed:
            raise MailboxClosedError(signal)
        if self._full():
            raise MailboxFullError(signal)
        self._push(signal)

    async def send(self, signal: Signal) -> None:
        while True:
            if self.rx_closed:
                raise MailboxClosedError(signal)
            if not self._full():
                self._push(signal)
                return
            await self._wait(self._send_waiters)

    async def send_timeout(
        self, signal: Signal, timeout: Union[float, int, timedelta]
    ) -> None:
        try:
            await asyncio.wait_for(self.send(signal), _seconds(timeout))
        except asyncio.TimeoutError:
            raise MailboxTimeoutError(signal) from None

    async def wait_closed(self) -> None:
        while not self.rx_closed:
            await self._wait(self._closed_waiters)

    # receiving

    def finished(self) -> bool:
        return self.rx_closed or self.strong == 0

    def pop(self) -> Signal:
        signal = self.queue.popleft()
        self._wake(self._send_waiters)
        return signal

    async def wait_ready(self) -> bool:
        """Wait until a signal is queued; ``False`` if none can ever arrive."""
        while not self.queue:
            if self.finished():
                return False
            await self._wait(self._recv_waiters)
        return True

    def close(self) -> None:
        self.rx_closed = True
        self._wake(self._send_waiters)
        self._wake(self._closed_waiters)
        self._wake(self._recv_waiters)


class MailboxReceiver:
    """Receives the signals sent to one actor's mailbox, in order."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    async def recv(self) -> Optional[Signal]:
        """Wait for the next signal; ``None`` once nothing more can arrive."""
        if not await self._channel.wait_ready():
            return None
        return self._channel.pop()

    async def recv_many(self, limit: int) -> List[Signal]:
        """Wait for at least one signal and return up to ``limit`` of them.

        An empty list means the mailbox is finished, or ``limit`` was zero.
        """
        if limit < 0:
            raise ValueError("limit must not be negative")
        if limit == 0:
            return []
        if not await self._channel.wait_ready():
            return []
        signals = []
        while self._channel.queue and len(signals) < limit:
            signals.append(self._channel.pop())
        return signals

    def try_recv(self) -> Signal:
        """Return the next signal without waiting."""
        if self._channel.queue:
            return self._channel.pop()
        if self._channel.finished():
            raise MailboxDisconnectedError()
        raise MailboxEmptyError()

    def close(self) -> None:
        """Refuse further signals while keeping those already queued."""
        self._channel.close()

    def is_closed(self) -> bool:
        """True once closed or once every strong sender is gone."""
        return self._channel.finished()

    def is_empty(self) -> bool:
        return not self._channel.queue

    def __len__(self) -> int:
        return len(self._channel.queue)

    def sender_strong_count(self) -> int:
        return self._channel.strong

    def sender_weak_count(self) -> int:
        return self._channel.weak

    def __aiter__(self) -> "MailboxReceiver":
        return self

    async def __anext__(self) -> Signal:
        signal = await self.recv()
        if signal is None:
            raise StopAsyncIteration
        return signal

    def __repr__(self) -> str:
        kind = "Bounded" if self._channel.bounded else "Unbounded"
        return f"{kind}(len={len(self._channel.queue)}, closed={self.is_closed()})"