"""Error types shared by actors, mailboxes and message handlers."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

__all__ = [
    "set_actor_error_hook",
    "invoke_actor_error_hook",
    "SendError",
    "ActorNotRunning",
    "ActorStopped",
    "MailboxFull",
    "HandlerError",
    "Timeout",
    "PanicReason",
    "PanicError",
    "ActorStopReason",
    "Normal",
    "Killed",
    "Panicked",
    "LinkDied",
    "PeerDisconnected",
    "HookError",
    "HookPanicked",
    "HookFailed",
]

_logger = logging.getLogger("kameo")

ErrorHook = Callable[["PanicError"], None]


def _default_panic_hook(err: "PanicError") -> None:
    _logger.error("actor panicked: %r", err)


_hook_lock = threading.Lock()
_panic_hook: ErrorHook = _default_panic_hook


def set_actor_error_hook(hook: ErrorHook) -> None:
    """Replace the global hook called whenever an actor panics or a hook fails."""
    global _panic_hook
    with _hook_lock:
        _panic_hook = hook


def invoke_actor_error_hook(err: "PanicError") -> None:
    """Call the currently installed error hook with ``err``."""
    with _hook_lock:
        hook = _panic_hook
    hook(err)


_NO_MESSAGE = object()


class SendError(Exception):
    """Base of the errors that can occur when sending a message to an actor."""

    _text = "send error"

    def _payload(self) -> Any:
        return _NO_MESSAGE

    def map_msg(self, f: Callable[[Any], Any]) -> "SendError":
        """Return a copy with the carried message passed through ``f``."""
        return self

    def map_err(self, op: Callable[[Any], Any]) -> "SendError":
        """Return a copy with the handler error passed through ``op``."""
        return self

    def msg(self) -> Any:
        """Return the carried message, or ``None`` if there is none."""
        return None

    def err(self) -> Any:
        """Return the handler error, or ``None`` if there is none."""
        return None

    def _has_msg(self) -> bool:
        return False

    def unwrap_msg(self) -> Any:
        """Return the carried message, raising ``ValueError`` if absent."""
        if not self._has_msg():
            raise ValueError("called unwrap_msg() on a non message error")
        return self.msg()

    def unwrap_err(self) -> Any:
        """Return the handler error, raising ``ValueError`` if absent."""
        raise ValueError("called unwrap_err() on a non error")

    def flatten(self) -> "SendError":
        """Collapse a handler error that itself wraps a send error."""
        return self

    def __str__(self) -> str:
        return self._text

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._payload() == other._payload()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(type(self))


class ActorNotRunning(SendError):
    """The actor isn't running; carries the undelivered message."""

    _text = "actor not running"

    def __init__(self, message: Any = None) -> None:
        super().__init__(message)
        self.message = message

    def _payload(self) -> Any:
        return self.message

    def map_msg(self, f):
        return ActorNotRunning(f(self.message))

    def msg(self):
        return self.message

    def _has_msg(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"ActorNotRunning({self.message!r})"


class ActorStopped(SendError):
    """The actor panicked or was stopped before a reply could be received."""

    _text = "actor stopped"

    def __init__(self) -> None:
        super().__init__()

    def _payload(self) -> Any:
        return None

    def __repr__(self) -> str:
        return "ActorStopped()"


class MailboxFull(SendError):
    """The actor's mailbox is full; carries the undelivered message."""

    _text = "mailbox full"

    def __init__(self, message: Any = None) -> None:
        super().__init__(message)
        self.message = message

    def _payload(self) -> Any:
        return self.message

    def map_msg(self, f):
        return MailboxFull(f(self.message))

    def msg(self):
        return self.message

    def _has_msg(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"MailboxFull({self.message!r})"


class HandlerError(SendError):
    """An error returned by the actor's message handler."""

    def __init__(self, error: Any) -> None:
        super().__init__(error)
        self.error = error

    def _payload(self) -> Any:
        return self.error

    def map_err(self, op):
        return HandlerError(op(self.error))

    def err(self):
        return self.error

    def unwrap_err(self):
        return self.error

    def flatten(self) -> SendError:
        if isinstance(self.error, SendError):
            return self.error
        return self

    def __str__(self) -> str:
        return str(self.error)

    def __repr__(self) -> str:
        return f"HandlerError({self.error!r})"


class Timeout(SendError):
    """Timed out; carries the message if it was never delivered."""

    _text = "timeout"

    def __init__(self, message: Any = None) -> None:
        super().__init__(message)
        self.message = message

    def _payload(self) -> Any:
        return self.message

    def map_msg(self, f):
        return Timeout(None if self.message is None else f(self.message))

    def msg(self):
        return self.message

    def _has_msg(self) -> bool:
        return self.message is not None

    def __repr__(self) -> str:
        return f"Timeout({self.message!r})"


class PanicReason(Enum):
    """Describes the cause of an actor panic or fatal error."""

    HANDLER_PANIC = "HandlerPanic"
    ON_MESSAGE = "OnMessage"
    ON_START = "OnStart"
    ON_PANIC = "OnPanic"
    ON_LINK_DIED = "OnLinkDied"
    ON_STOP = "OnStop"
    NEXT = "Next"

    def is_lifecycle_hook(self) -> bool:
        """True if the panic occurred in a lifecycle hook."""
        return self in (
            PanicReason.ON_START,
            PanicReason.ON_PANIC,
            PanicReason.ON_LINK_DIED,
            PanicReason.ON_STOP,
        )

    def is_message_processing(self) -> bool:
        """True if the panic occurred while processing a message."""
        return self in (PanicReason.HANDLER_PANIC, PanicReason.ON_MESSAGE)

    def __str__(self) -> str:
        return _REASON_TEXT[self]


_REASON_TEXT = {
    PanicReason.HANDLER_PANIC: "message handler panicked",
    PanicReason.ON_MESSAGE: "on_message returned error",
    PanicReason.ON_START: "on_start returned error",
    PanicReason.ON_PANIC: "on_panic returned error",
    PanicReason.ON_LINK_DIED: "on_link_died returned error",
    PanicReason.ON_STOP: "on_stop returned error",
    PanicReason.NEXT: "next returned error",
}


class PanicError(Exception):
    """A shared error raised when an actor panics or a lifecycle hook fails."""

    def __init__(self, error: Any, reason: PanicReason) -> None:
        super().__init__(error, reason)
        self.error = error
        self.reason = reason

    @classmethod
    def from_panic(cls, exc: Any, reason: PanicReason) -> "PanicError":
        """Build a panic error from whatever a failing handler raised."""
        return cls(exc, reason)

    def message(self) -> Optional[str]:
        """Return the inner error as text when it is a string or exception."""
        if isinstance(self.error, str):
            return self.error
        if isinstance(self.error, BaseException):
            return str(self.error)
        return None

    def downcast(self, kind: type) -> Any:
        """Return the inner error if it is an instance of ``kind``, else ``None``."""
        if isinstance(self.error, kind):
            return self.error
        return None

    def to_dict(self) -> dict:
        """Serialise to a mapping with ``err`` and ``reason`` fields."""
        return {"err": str(self), "reason": self.reason.value}

    @classmethod
    def from_dict(cls, data: dict) -> "PanicError":
        """Rebuild from a mapping produced by :meth:`to_dict`."""
        for key in data:
            if key not in ("err", "reason"):
                raise ValueError(f"unknown field `{key}`, expected `err` or `reason`")
        if "err" not in data:
            raise ValueError("missing field `err`")
        if "reason" not in data:
            raise ValueError("missing field `reason`")
        err = data["err"]
        if not isinstance(err, str):
            raise ValueError("field `err` must be a string")
        reason = data["reason"]
        if not isinstance(reason, PanicReason):
            try:
                reason = PanicReason(reason)
            except ValueError:
                raise ValueError(f"unknown panic reason {reason!r}") from None
        return cls(err, reason)

    def __str__(self) -> str:
        text = self.message()
        if text is None:
            return str(self.reason)
        return f"{self.reason}: {text}"

    def __repr__(self) -> str:
        return f"PanicError(err={self.error!r}, reason={self.reason.name})"


class ActorStopReason:
    """Base for the reasons an actor was stopped."""


@dataclass(frozen=True)
class Normal(ActorStopReason):
    """The actor stopped normally."""

    def __str__(self) -> str:
        return "actor stopped normally"


@dataclass(frozen=True)
class Killed(ActorStopReason):
    """The actor was killed."""

    def __str__(self) -> str:
        return "actor was killed"


@dataclass(frozen=True)
class Panicked(ActorStopReason):
    """The actor panicked."""

    error: PanicError

    def __str__(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class LinkDied(ActorStopReason):
    """A linked actor died."""

    id: Any
    reason: ActorStopReason

    def __str__(self) -> str:
        return f"link {self.id} died"


@dataclass(frozen=True)
class PeerDisconnected(ActorStopReason):
    """The remote peer was disconnected."""

    def __str__(self) -> str:
        return "peer disconnected"


class HookError(Exception):
    """Error returned from actor startup or shutdown results."""

    def __init__(self, error: Any) -> None:
        super().__init__(error)
        self.error = error

    def __str__(self) -> str:
        return str(self.error)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.error == other.error  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error!r})"


class HookPanicked(HookError):
    """The hook panicked."""

    error: PanicError


class HookFailed(HookError):
    """The hook returned an error."""