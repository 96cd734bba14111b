"""Local registry for looking up actor refs by name."""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, List, Optional

from kameo.remote_errors import BadActorType

__all__ = [
    "ACTOR_REGISTRY",
    "ActorRegistry",
    "RegisteredActorRef",
]


class RegisteredActorRef:
    """An actor ref stored in the registry together with its actor id.

    The ref should expose ``id`` (a value or a method returning it); its
    actor type is taken from an ``actor_type`` attribute when present,
    otherwise from the ref's own class.
    """

    def __init__(self, actor_ref: Any) -> None:
        actor_id = getattr(actor_ref, "id")
        self.id = actor_id() if callable(actor_id) else actor_id
        self._actor_ref = actor_ref

    def actor_ref(self, actor_type: Optional[type] = None) -> Optional[Any]:
        """Return the ref, or ``None`` if it is not for ``actor_type``."""
        if actor_type is None:
            return self._actor_ref
        kind = getattr(self._actor_ref, "actor_type", None)
        if isinstance(kind, type):
            return self._actor_ref if issubclass(kind, actor_type) else None
        return self._actor_ref if isinstance(self._actor_ref, actor_type) else None

    def __repr__(self) -> str:
        return f"RegisteredActorRef(id={self.id!r}, actor_ref={self._actor_ref!r})"


class ActorRegistry:
    """Actor refs stored by name; safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._refs: Dict[str, RegisteredActorRef] = {}

    def names(self) -> List[str]:
        """Names of all registered actor refs."""
        with self._lock:
            return list(self._refs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        with self._lock:
            return len(self._refs)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._refs

    def is_empty(self) -> bool:
        """True if nothing is registered."""
        return len(self) == 0

    def clear(self) -> None:
        """Remove every registered actor ref."""
        with self._lock:
            self._refs.clear()

    def get(self, name: str, actor_type: Optional[type] = None) -> Optional[Any]:
        """Return the ref registered under ``name``, or ``None``.

        Raises ``BadActorType`` if the ref is not for ``actor_type``.
        """
        with self._lock:
            entry = self._refs.get(name)
        if entry is None:
            return None
        actor_ref = entry.actor_ref(actor_type)
        if actor_ref is None:
            raise BadActorType()
        return actor_ref

    def contains_name(self, name: str) -> bool:
        """True if an actor is registered under ``name``."""
        return name in self

    def insert(self, name: str, actor_ref: Any) -> bool:
        """Register ``actor_ref`` under ``name``; ``False`` if the name is taken."""
        if not isinstance(name, str):
            raise TypeError("actor names must be strings")
        entry = RegisteredActorRef(actor_ref)
        with self._lock:
            if name in self._refs:
                return False
            self._refs[name] = entry
            return True

    def remove(self, name: str) -> bool:
        """Remove the ref registered under ``name``; ``True`` if one was removed."""
        with self._lock:
            return self._refs.pop(name, None) is not None

    def remove_by_id(self, actor_id: Any) -> bool:
        """Remove the first ref whose actor id is ``actor_id``."""
        with self._lock:
            for name, entry in self._refs.items():
                if entry.id == actor_id:
                    del self._refs[name]
                    return True
            return False

    def __repr__(self) -> str:
        return f"ActorRegistry(names={self.names()!r})"


ACTOR_REGISTRY = ActorRegistry()