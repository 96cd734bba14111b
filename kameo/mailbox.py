"""Sending halves of actor mailboxes, bounded or unbounded."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional, Tuple, Union

from kameo.channel import (
    LinkDiedSignal,
    MailboxClosedError,
    MailboxFullError,
    MailboxReceiver,
    Signal,
    StartupFinishedSignal,
    StopSignal,
    _Channel,
)
from kameo.errors import ActorNotRunning, ActorStopReason, MailboxFull

__all__ = [
    "bounded",
    "unbounded",
    "MailboxSender",
    "WeakMailboxSender",
]


def bounded(buffer: int) -> Tuple["MailboxSender", MailboxReceiver]:
    """Create a mailbox holding at most ``buffer`` pending signals."""
    channel = _Channel(buffer)
    return MailboxSender(channel), MailboxReceiver(channel)


def unbounded() -> Tuple["MailboxSender", MailboxReceiver]:
    """Create a mailbox without a limit on pending signals."""
    channel = _Channel(None)
    return MailboxSender(channel), MailboxReceiver(channel)


class _Handle:
    """Common state of strong and weak sender handles."""

    _what = "mailbox sender"

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel
        self._released = False

    def _live(self) -> _Channel:
        if self._released:
            raise RuntimeError(f"{self._what} has been dropped")
        return self._channel

    def _release(self) -> None:
        raise NotImplementedError

    def _drop(self) -> None:
        if self._released:
            return
        self._released = True
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._drop()

    def __repr__(self) -> str:
        kind = "Bounded" if self._channel.bounded else "Unbounded"
        state = "dropped" if self._released else f"strong={self._channel.strong}"
        return f"{type(self).__name__}.{kind}({state})"


class MailboxSender(_Handle):
    """Sends signals to the associated :class:`MailboxReceiver`."""

    def _release(self) -> None:
        self._channel.remove_sender()

    def drop(self) -> None:
        """Release this handle; later calls on it raise ``RuntimeError``."""
        self._drop()

    def strong_count(self) -> int:
        """Number of live strong sender handles."""
        return self._live().strong

    def weak_count(self) -> int:
        """Number of live weak sender handles."""
        return self._live().weak

    async def send(self, signal: Signal) -> None:
        """Send ``signal``, waiting for capacity in a bounded mailbox."""
        await self._live().send(signal)

    def try_send(self, signal: Signal) -> None:
        """Send ``signal`` immediately or raise ``MailboxFullError``/``MailboxClosedError``."""
        self._live().send_nowait(signal)

    async def send_timeout(
        self, signal: Signal, timeout: Union[float, int, timedelta]
    ) -> None:
        """Send ``signal``, waiting for capacity no longer than ``timeout``."""
        channel = self._live()
        if channel.bounded:
            await channel.send_timeout(signal, timeout)
        else:
            channel.send_nowait(signal)

    async def closed(self) -> None:
        """Wait until the receiving half has been closed."""
        await self._live().wait_closed()

    def is_closed(self) -> bool:
        """True once the receiving half has been closed."""
        return self._live().rx_closed

    def same_channel(self, other: "MailboxSender") -> bool:
        """True if both senders feed the same mailbox."""
        return self._channel is other._channel

    def capacity(self) -> Optional[int]:
        """Free slots of a bounded mailbox, ``None`` when unbounded."""
        return self._live().available()

    def downgrade(self) -> "WeakMailboxSender":
        """Return a weak handle that does not keep the mailbox open."""
        channel = self._live()
        channel.add_weak()
        return WeakMailboxSender(channel)

    def clone(self) -> "MailboxSender":
        """Return another strong handle to the same mailbox."""
        channel = self._live()
        channel.add_sender()
        return MailboxSender(channel)

    def signal_startup_finished(self) -> None:
        """Tell the actor that startup has finished, without waiting."""
        try:
            self._live().send_nowait(StartupFinishedSignal())
        except MailboxFullError:
            raise MailboxFull(None) from None
        except MailboxClosedError:
            raise ActorNotRunning(None) from None

    async def signal_link_died(self, actor_id: Any, reason: ActorStopReason) -> None:
        """Tell the actor that the linked actor ``actor_id`` died."""
        try:
            await self._live().send(LinkDiedSignal(actor_id, reason))
        except MailboxClosedError:
            raise ActorNotRunning(None) from None

    async def signal_stop(self) -> None:
        """Tell the actor to stop."""
        try:
            await self._live().send(StopSignal())
        except MailboxClosedError:
            raise ActorNotRunning(None) from None


class WeakMailboxSender(_Handle):
    """A sender handle that does not keep the mailbox open."""

    _what = "weak mailbox sender"

    def _release(self) -> None:
        self._channel.remove_weak()

    def drop(self) -> None:
        """Release this handle; later calls on it raise ``RuntimeError``."""
        self._drop()

    def strong_count(self) -> int:
        """Number of live strong sender handles."""
        return self._live().strong

    def weak_count(self) -> int:
        """Number of live weak sender handles."""
        return self._live().weak

    def upgrade(self) -> Optional[MailboxSender]:
        """Return a strong handle, or ``None`` if every strong handle is gone."""
        channel = self._live()
        if not channel.upgrade():
            return None
        return MailboxSender(channel)

    def clone(self) -> "WeakMailboxSender":
        """Return another weak handle to the same mailbox."""
        channel = self._live()
        channel.add_weak()
        return WeakMailboxSender(channel)

    def _strong(self) -> MailboxSender:
        sender = self.upgrade()
        if sender is None:
            raise ActorNotRunning(None)
        return sender

    def signal_startup_finished(self) -> None:
        """Tell the actor that startup has finished, if it is still alive."""
        with self._strong() as sender:
            sender.signal_startup_finished()

    async def signal_link_died(self, actor_id: Any, reason: ActorStopReason) -> None:
        """Tell the actor that the linked actor died, if it is still alive."""
        with self._strong() as sender:
            await sender.signal_link_died(actor_id, reason)

    async def signal_stop(self) -> None:
        """Tell the actor to stop, if it is still alive."""
        with self._strong() as sender:
            await sender.signal_stop()