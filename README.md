# kameo

Building blocks for fault-tolerant actors on top of `asyncio`: mailboxes, the
signals they carry, the errors actors and senders raise, and a local registry of
actor refs by name.

## What is in the package

- **`kameo.mailbox`**: `bounded(buffer)` and `unbounded()` each return a
  `(MailboxSender, MailboxReceiver)` pair. A `MailboxSender` can `send`,
  `try_send`, `send_timeout`, wait until the receiver is `closed()`, report its
  free `capacity()` (`None` when unbounded), be `clone()`d, `downgrade()`d to a
  `WeakMailboxSender` and `drop()`ped. Both sender kinds deliver lifecycle signals
  with `signal_startup_finished()`, `signal_link_died(actor_id, reason)` and
  `signal_stop()`, raising `ActorNotRunning` (or `MailboxFull` for a full
  startup signal) on failure. `WeakMailboxSender.upgrade()` returns a strong
  sender, or `None` once every strong sender is gone. Sender handles are also
  context managers that drop themselves on exit.
- **`kameo.channel`**: the signals `StartupFinishedSignal`, `MessageSignal`,
  `LinkDiedSignal` and `StopSignal` (all subclasses of `Signal`), the
  `MailboxReceiver` (`recv`, `recv_many`, `try_recv`, `close`, `is_closed`,
  `is_empty`, `len()`, `async for`), and the channel errors
  `MailboxClosedError`, `MailboxFullError`, `MailboxTimeoutError` (each carrying
  the undelivered `signal`), `MailboxEmptyError` and `MailboxDisconnectedError`.
- **`kameo.errors`**: the `SendError` family (`ActorNotRunning`,
  `ActorStopped`, `MailboxFull`, `HandlerError`, `Timeout`) with `map_msg`,
  `map_err`, `msg`, `err`, `unwrap_msg`, `unwrap_err` and `flatten`;
  `PanicError` with its `PanicReason`; the stop reasons `Normal`, `Killed`,
  `Panicked`, `LinkDied` and `PeerDisconnected`; the hook errors `HookPanicked`
  and `HookFailed`; and a global error hook set with `set_actor_error_hook(hook)`
  and called with `invoke_actor_error_hook(err)`.
- **`kameo.remote_errors`**: `RegistryError` and its variants (`BadActorType`,
  `NameAlreadyRegistered`, `SwarmNotBootstrapped`, `QuorumFailed`,
  `RegistryTimeout`), `RemoteSendError` with its `RemoteSendErrorKind`, and
  `SwarmAlreadyBootstrappedError`.
- **`kameo.registry`**: `ActorRegistry` stores actor refs by name and is safe to
  share between threads; `ACTOR_REGISTRY` is a shared instance.

## Installing

```
pip install .
```

## Mailboxes

```python
import asyncio

from kameo.channel import MailboxFullError, StopSignal
from kameo.mailbox import bounded


async def main():
    tx, rx = bounded(1)
    await tx.send(StopSignal())
    try:
        tx.try_send(StopSignal())
    except MailboxFullError:
        print("mailbox full")
    print(await rx.recv())   # StopSignal()


asyncio.run(main())
```

## Error hooks

```python
from kameo.errors import (
    PanicError,
    PanicReason,
    invoke_actor_error_hook,
    set_actor_error_hook,
)

seen = []
set_actor_error_hook(seen.append)

err = PanicError.from_panic(RuntimeError("boom"), PanicReason.HANDLER_PANIC)
print(err.message())                       # "boom"
print(str(err))                            # "message handler panicked: boom"
print(err.reason.is_message_processing())  # True

invoke_actor_error_hook(err)
assert seen == [err]
```

`PanicError.to_dict()` and `PanicError.from_dict(data)` turn a panic error into
a mapping with `err` and `reason` fields and back.

## Registry

An actor ref stored in the registry needs an `id` attribute (a value, or a
method returning one). Its actor type is read from an `actor_type` attribute
when there is one, otherwise from the ref's own class.

```python
from kameo.registry import ActorRegistry

registry = ActorRegistry()
registry.insert("worker", actor_ref)   # False if the name is taken
registry.get("worker", WorkerActor)     # raises BadActorType on a type mismatch
registry.remove_by_id(actor_ref.id)     # or registry.remove("worker")
```

## What the package does not do

There is no actor runtime here: nothing spawns actors, runs their message loop,
builds actor refs, or hands a context to message handlers. `MessageSignal` only
carries whatever message, actor ref and reply object it is given. The remote
error types describe failures between peers, but the package opens no network
connections and has no swarm to bootstrap.

## Running the tests

```
pip install .[test]
pytest
```