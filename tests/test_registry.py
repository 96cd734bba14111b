from dataclasses import dataclass

import pytest

from kameo.registry import ACTOR_REGISTRY, ActorRegistry, RegisteredActorRef
from kameo.remote_errors import BadActorType


class Counter:
    pass


class Greeter:
    pass


@dataclass
class FakeRef:
    id: int
    actor_type: type


def test_new_registry_is_empty():
    registry = ActorRegistry()
    assert registry.is_empty()
    assert len(registry) == 0
    assert registry.names() == []


def test_insert_and_get():
    registry = ActorRegistry()
    ref = FakeRef(1, Counter)
    assert registry.insert("counter", ref) is True
    assert registry.get("counter", Counter) is ref
    assert registry.contains_name("counter")
    assert registry.names() == ["counter"]
    assert not registry.is_empty()


def test_insert_duplicate_name_is_refused():
    registry = ActorRegistry()
    first = FakeRef(1, Counter)
    assert registry.insert("a", first)
    assert registry.insert("a", FakeRef(2, Counter)) is False
    assert registry.get("a", Counter) is first
    assert len(registry) == 1


def test_get_missing_returns_none():
    registry = ActorRegistry()
    assert registry.get("nobody", Counter) is None


def test_get_wrong_type_raises():
    registry = ActorRegistry()
    registry.insert("counter", FakeRef(1, Counter))
    with pytest.raises(BadActorType):
        registry.get("counter", Greeter)


def test_remove():
    registry = ActorRegistry()
    registry.insert("counter", FakeRef(1, Counter))
    assert registry.remove("counter") is True
    assert registry.remove("counter") is False
    assert not registry.contains_name("counter")


def test_remove_by_id():
    registry = ActorRegistry()
    registry.insert("a", FakeRef(1, Counter))
    registry.insert("b", FakeRef(2, Greeter))
    assert registry.remove_by_id(2) is True
    assert registry.remove_by_id(2) is False
    assert registry.names() == ["a"]


def test_clear():
    registry = ActorRegistry()
    registry.insert("a", FakeRef(1, Counter))
    registry.insert("b", FakeRef(2, Counter))
    registry.clear()
    assert registry.is_empty()


def test_non_string_name_rejected():
    registry = ActorRegistry()
    with pytest.raises(TypeError):
        registry.insert(5, FakeRef(1, Counter))


def test_registered_ref_uses_class_when_no_actor_type():
    class RefWithMethod(Counter):
        def id(self):
            return 9

    ref = RefWithMethod()
    entry = RegisteredActorRef(ref)
    assert entry.id == 9
    assert entry.actor_ref(Counter) is ref
    assert entry.actor_ref(Greeter) is None


def test_registered_ref_subclass_matches():
    class SpecialCounter(Counter):
        pass

    ref = FakeRef(3, SpecialCounter)
    entry = RegisteredActorRef(ref)
    assert entry.actor_ref(Counter) is ref
    assert entry.actor_ref(SpecialCounter) is ref


def test_global_registry_round_trip():
    ref = FakeRef(77, Counter)
    assert ACTOR_REGISTRY.insert("global-test", ref)
    try:
        assert ACTOR_REGISTRY.get("global-test", Counter) is ref
    finally:
        assert ACTOR_REGISTRY.remove("global-test")
    assert "global-test" not in ACTOR_REGISTRY