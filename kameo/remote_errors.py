"""Errors raised by the actor registry and by messaging between peers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from kameo.errors import (
    ActorNotRunning,
    ActorStopped,
    HandlerError,
    MailboxFull,
    SendError,
    Timeout,
)

__all__ = [
    "RegistryError",
    "BadActorType",
    "NameAlreadyRegistered",
    "SwarmNotBootstrapped",
    "QuorumFailed",
    "RegistryTimeout",
    "RemoteSendErrorKind",
    "RemoteSendError",
    "SwarmAlreadyBootstrappedError",
]


class RegistryError(Exception):
    """Base of the errors raised when registering or looking up actors by name."""

    _text = "registry error"

    def __str__(self) -> str:
        return self._text

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.args == other.args  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class BadActorType(RegistryError):
    """The actor was found under the name but is not of the requested type."""

    _text = "bad actor type"


class NameAlreadyRegistered(RegistryError):
    """An actor has already been registered under the name."""

    _text = "name already registered"


class SwarmNotBootstrapped(RegistryError):
    """The actor swarm has not been bootstrapped."""

    _text = "actor swarm not bootstrapped"


class QuorumFailed(RegistryError):
    """Not enough peers acknowledged a registration."""

    def __init__(self, quorum: int) -> None:
        if not isinstance(quorum, int) or isinstance(quorum, bool) or quorum < 1:
            raise ValueError("quorum must be a positive integer")
        super().__init__(quorum)
        self.quorum = quorum

    def __str__(self) -> str:
        return f"the quorum failed; needed {self.quorum} peers"

    def __repr__(self) -> str:
        return f"QuorumFailed(quorum={self.quorum})"


class RegistryTimeout(RegistryError):
    """A registry request timed out."""

    _text = "the request timed out"


class RemoteSendErrorKind(Enum):
    """The kinds of failure that can occur when messaging a remote actor."""

    ACTOR_NOT_RUNNING = "ActorNotRunning"
    ACTOR_STOPPED = "ActorStopped"
    UNKNOWN_ACTOR = "UnknownActor"
    UNKNOWN_MESSAGE = "UnknownMessage"
    BAD_ACTOR_TYPE = "BadActorType"
    MAILBOX_FULL = "MailboxFull"
    REPLY_TIMEOUT = "ReplyTimeout"
    HANDLER_ERROR = "HandlerError"
    SERIALIZE_MESSAGE = "SerializeMessage"
    DESERIALIZE_MESSAGE = "DeserializeMessage"
    SERIALIZE_REPLY = "SerializeReply"
    SERIALIZE_HANDLER_ERROR = "SerializeHandlerError"
    DESERIALIZE_HANDLER_ERROR = "DeserializeHandlerError"
    SWARM_NOT_BOOTSTRAPPED = "SwarmNotBootstrapped"
    DIAL_FAILURE = "DialFailure"
    NETWORK_TIMEOUT = "NetworkTimeout"
    CONNECTION_CLOSED = "ConnectionClosed"
    UNSUPPORTED_PROTOCOLS = "UnsupportedProtocols"
    IO = "Io"


_K = RemoteSendErrorKind

_FIXED_TEXT = {
    _K.ACTOR_NOT_RUNNING: "actor not running",
    _K.ACTOR_STOPPED: "actor stopped",
    _K.BAD_ACTOR_TYPE: "bad actor type",
    _K.MAILBOX_FULL: "mailbox full",
    _K.REPLY_TIMEOUT: "timeout",
    _K.SWARM_NOT_BOOTSTRAPPED: "swarm not bootstrapped",
    _K.DIAL_FAILURE: "dial failure",
    _K.NETWORK_TIMEOUT: "network timeout",
    _K.CONNECTION_CLOSED: "connection closed",
    _K.UNSUPPORTED_PROTOCOLS: "unsupported protocols",
}

_DETAIL_PREFIX = {
    _K.SERIALIZE_MESSAGE: "failed to serialize message",
    _K.DESERIALIZE_MESSAGE: "failed to deserialize message",
    _K.SERIALIZE_REPLY: "failed to serialize reply",
    _K.SERIALIZE_HANDLER_ERROR: "failed to serialize handler error",
    _K.DESERIALIZE_HANDLER_ERROR: "failed to deserialize handler error",
}


class RemoteSendError(Exception):
    """An error that occurred while sending a message to a remote actor."""

    def __init__(
        self,
        kind: RemoteSendErrorKind,
        *,
        error: Any = None,
        actor_remote_id: Optional[str] = None,
        message_remote_id: Optional[str] = None,
        detail: Any = None,
    ) -> None:
        kind = RemoteSendErrorKind(kind)
        if kind in (_K.UNKNOWN_ACTOR, _K.UNKNOWN_MESSAGE) and actor_remote_id is None:
            raise ValueError(f"{kind.value} requires actor_remote_id")
        if kind is _K.UNKNOWN_MESSAGE and message_remote_id is None:
            raise ValueError("UnknownMessage requires message_remote_id")
        if kind in _DETAIL_PREFIX and not isinstance(detail, str):
            raise ValueError(f"{kind.value} requires a string detail")
        super().__init__(kind, error, actor_remote_id, message_remote_id, detail)
        self.kind = kind
        self.error = error
        self.actor_remote_id = actor_remote_id
        self.message_remote_id = message_remote_id
        self.detail = detail

    def map_err(self, op: Callable[[Any], Any]) -> "RemoteSendError":
        """Return a copy with the handler error passed through ``op``."""
        if self.kind is not _K.HANDLER_ERROR:
            return self
        return RemoteSendError(_K.HANDLER_ERROR, error=op(self.error))

    def flatten(self) -> "RemoteSendError":
        """Collapse a handler error that itself wraps a remote send error."""
        if self.kind is _K.HANDLER_ERROR and isinstance(self.error, RemoteSendError):
            return self.error
        return self

    @classmethod
    def from_send_error(cls, err: SendError) -> "RemoteSendError":
        """Convert a local send error, dropping any carried message."""
        if isinstance(err, ActorNotRunning):
            return cls(_K.ACTOR_NOT_RUNNING)
        if isinstance(err, ActorStopped):
            return cls(_K.ACTOR_STOPPED)
        if isinstance(err, MailboxFull):
            return cls(_K.MAILBOX_FULL)
        if isinstance(err, HandlerError):
            return cls(_K.HANDLER_ERROR, error=err.error)
        if isinstance(err, Timeout):
            return cls(_K.REPLY_TIMEOUT)
        raise TypeError(f"cannot convert {type(err).__name__} to RemoteSendError")

    def _key(self) -> tuple:
        return (
            self.kind,
            self.error,
            self.actor_remote_id,
            self.message_remote_id,
            self.detail,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemoteSendError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash((self.kind, self.actor_remote_id, self.message_remote_id))

    def __str__(self) -> str:
        kind = self.kind
        if kind in _FIXED_TEXT:
            return _FIXED_TEXT[kind]
        if kind is _K.UNKNOWN_ACTOR:
            return f"unknown actor '{self.actor_remote_id}'"
        if kind is _K.UNKNOWN_MESSAGE:
            return (
                f"unknown message '{self.message_remote_id}' "
                f"for actor '{self.actor_remote_id}'"
            )
        if kind is _K.HANDLER_ERROR:
            return str(self.error)
        if kind in _DETAIL_PREFIX:
            return f"{_DETAIL_PREFIX[kind]}: {self.detail}"
        if self.detail is not None:
            return str(self.detail)
        return "io error"

    def __repr__(self) -> str:
        fields = [f"kind={self.kind.name}"]
        for name in ("error", "actor_remote_id", "message_remote_id", "detail"):
            value = getattr(self, name)
            if value is not None:
                fields.append(f"{name}={value!r}")
        return f"RemoteSendError({', '.join(fields)})"


class SwarmAlreadyBootstrappedError(Exception):
    """The remote system has already been bootstrapped."""

    def __str__(self) -> str:
        return "swarm already bootstrapped"