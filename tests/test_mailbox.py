import asyncio

import pytest

from kameo.channel import (
    LinkDiedSignal,
    MailboxClosedError,
    MailboxFullError,
    MailboxTimeoutError,
    MessageSignal,
    StartupFinishedSignal,
    StopSignal,
)
from kameo.errors import ActorNotRunning, Killed, MailboxFull
from kameo.mailbox import MailboxSender, WeakMailboxSender, bounded, unbounded


def test_bounded_capacity_decreases():
    tx, rx = bounded(3)
    assert tx.capacity() == 3
    tx.try_send(MessageSignal(1))
    assert tx.capacity() == 2
    rx.try_recv()
    assert tx.capacity() == 3


def test_unbounded_capacity_is_none():
    tx, _rx = unbounded()
    assert tx.capacity() is None
    for i in range(50):
        tx.try_send(MessageSignal(i))
    assert tx.capacity() is None


def test_bounded_zero_rejected():
    with pytest.raises(ValueError):
        bounded(0)


def test_try_send_full_carries_signal():
    tx, _rx = bounded(1)
    tx.try_send(MessageSignal("a"))
    sig = MessageSignal("b")
    with pytest.raises(MailboxFullError) as info:
        tx.try_send(sig)
    assert info.value.signal is sig


def test_try_send_closed():
    tx, rx = unbounded()
    rx.close()
    sig = MessageSignal("x")
    with pytest.raises(MailboxClosedError) as info:
        tx.try_send(sig)
    assert info.value.signal is sig
    assert tx.is_closed()


@pytest.mark.asyncio
async def test_send_waits_for_capacity():
    tx, rx = bounded(1)
    await tx.send(MessageSignal(1))
    task = asyncio.create_task(tx.send(MessageSignal(2)))
    await asyncio.sleep(0)
    assert not task.done()
    first = await rx.recv()
    await asyncio.wait_for(task, 1)
    second = await rx.recv()
    assert (first.message, second.message) == (1, 2)


@pytest.mark.asyncio
async def test_send_closed_raises():
    tx, rx = bounded(2)
    rx.close()
    with pytest.raises(MailboxClosedError):
        await tx.send(MessageSignal(1))


@pytest.mark.asyncio
async def test_send_timeout_on_full_mailbox():
    tx, _rx = bounded(1)
    tx.try_send(MessageSignal(1))
    sig = MessageSignal(2)
    with pytest.raises(MailboxTimeoutError) as info:
        await tx.send_timeout(sig, 0.01)
    assert info.value.signal is sig


@pytest.mark.asyncio
async def test_send_timeout_unbounded_never_waits():
    tx, rx = unbounded()
    await tx.send_timeout(MessageSignal(5), 0)
    assert len(rx) == 1
    rx.close()
    with pytest.raises(MailboxClosedError):
        await tx.send_timeout(MessageSignal(6), 0)


@pytest.mark.asyncio
async def test_closed_completes_after_receiver_close():
    tx, rx = unbounded()
    waiter = asyncio.create_task(tx.closed())
    await asyncio.sleep(0)
    assert not waiter.done()
    rx.close()
    await asyncio.wait_for(waiter, 1)
    assert tx.is_closed()


def test_same_channel():
    tx, _ = bounded(2)
    other, _ = bounded(2)
    loose, _ = unbounded()
    assert tx.same_channel(tx.clone())
    assert not tx.same_channel(other)
    assert not tx.same_channel(loose)


def test_counts_track_clone_downgrade_drop():
    tx, rx = unbounded()
    assert (tx.strong_count(), tx.weak_count()) == (1, 0)
    tx2 = tx.clone()
    weak = tx.downgrade()
    assert rx.sender_strong_count() == 2
    assert rx.sender_weak_count() == 1
    assert weak.strong_count() == 2
    weak2 = weak.clone()
    assert tx.weak_count() == 2
    tx2.drop()
    weak2.drop()
    assert (tx.strong_count(), tx.weak_count()) == (1, 1)


def test_drop_is_idempotent_and_disables_handle():
    tx, rx = unbounded()
    keep = tx.clone()
    tx.drop()
    tx.drop()
    assert rx.sender_strong_count() == 1
    with pytest.raises(RuntimeError):
        tx.try_send(MessageSignal(1))
    assert keep.strong_count() == 1


def test_context_manager_drops():
    tx, rx = unbounded()
    with tx.clone() as extra:
        assert rx.sender_strong_count() == 2
        assert isinstance(extra, MailboxSender)
    assert rx.sender_strong_count() == 1


def test_upgrade_after_all_strong_dropped():
    tx, rx = bounded(4)
    weak = tx.downgrade()
    up = weak.upgrade()
    assert up.same_channel(tx)
    assert rx.sender_strong_count() == 2
    up.drop()
    tx.drop()
    assert weak.upgrade() is None
    assert rx.is_closed()


@pytest.mark.asyncio
async def test_receiver_ends_when_senders_dropped():
    tx, rx = unbounded()
    tx.try_send(MessageSignal("last"))
    tx.drop()
    sig = await rx.recv()
    assert sig.message == "last"
    assert await rx.recv() is None


def test_signal_startup_finished():
    tx, rx = bounded(1)
    tx.signal_startup_finished()
    assert rx.try_recv() == StartupFinishedSignal()


def test_signal_startup_finished_full_and_closed():
    tx, rx = bounded(1)
    tx.try_send(MessageSignal(1))
    with pytest.raises(MailboxFull):
        tx.signal_startup_finished()
    rx.close()
    with pytest.raises(ActorNotRunning):
        tx.signal_startup_finished()


@pytest.mark.asyncio
async def test_signal_link_died_and_stop():
    tx, rx = unbounded()
    await tx.signal_link_died(7, Killed())
    await tx.signal_stop()
    assert await rx.recv() == LinkDiedSignal(7, Killed())
    assert await rx.recv() == StopSignal()


@pytest.mark.asyncio
async def test_signal_stop_closed_raises():
    tx, rx = bounded(2)
    rx.close()
    with pytest.raises(ActorNotRunning):
        await tx.signal_stop()
    with pytest.raises(ActorNotRunning):
        await tx.signal_link_died(1, Killed())


@pytest.mark.asyncio
async def test_weak_signals_deliver_without_leaking_handles():
    tx, rx = unbounded()
    weak = tx.downgrade()
    weak.signal_startup_finished()
    await weak.signal_link_died(3, Killed())
    await weak.signal_stop()
    assert rx.sender_strong_count() == 1
    received = [rx.try_recv() for _ in range(3)]
    assert received == [StartupFinishedSignal(), LinkDiedSignal(3, Killed()), StopSignal()]


@pytest.mark.asyncio
async def test_weak_signals_when_dead():
    tx, _rx = unbounded()
    weak = tx.downgrade()
    tx.drop()
    with pytest.raises(ActorNotRunning):
        weak.signal_startup_finished()
    with pytest.raises(ActorNotRunning):
        await weak.signal_stop()
    with pytest.raises(ActorNotRunning):
        await weak.signal_link_died(1, Killed())


def test_weak_drop_releases_count():
    tx, rx = unbounded()
    weak = tx.downgrade()
    assert isinstance(weak, WeakMailboxSender)
    weak.drop()
    assert rx.sender_weak_count() == 0
    with pytest.raises(RuntimeError):
        weak.upgrade()