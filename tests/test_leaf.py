import unittest
from dataclasses import dataclass, field

import pytest

from arbor import Leaf, LeafState, LifecycleHooks, Slot, SlotError


class NamedBySelf:
    def get_leaf_name(self) -> str:
        return "named_by_self"


class WithDep:
    a = Slot("a")


class Foo:
    bar = Slot("bar")
    pc_called = False

    def post_construct(self) -> None:
        self.pc_called = True


class Bar:
    def get_leaf_name(self) -> str:
        return "bar"


@dataclass
class Tagged:
    first: object = field(default=None, metadata={"arbor": "first"})
    second: object = field(default=None, metadata={"arbor": "second"})
    plain: int = 0


class TestNewLeaf(unittest.TestCase):
    def test_name_comes_from_self_reported_name(self):
        assert Leaf(NamedBySelf()).name == "named_by_self"

    def test_explicit_name_overrides_self_reported_name(self):
        assert Leaf(NamedBySelf(), "test").name == "test"

    def test_name_falls_back_to_type(self):
        assert Leaf(WithDep()).name == f"{WithDep.__module__}.WithDep"

    def test_name_is_the_first_alias(self):
        leaf = Leaf(NamedBySelf())
        assert leaf.aliases == {"named_by_self"}
        assert leaf.has_alias("named_by_self")

    def test_identity_is_the_instance_identity(self):
        instance = WithDep()
        leaf = Leaf(instance)
        assert leaf.identity == id(instance)
        assert leaf.instance is instance

    def test_sets_the_unresolved_dependencies(self):
        leaf = Leaf(WithDep())
        assert list(leaf.unresolved) == ["a"]
        assert leaf.resolved == {}
        assert not leaf.is_fully_resolved()
        assert leaf.state is LeafState.UNRESOLVED

    def test_reads_tagged_dataclass_fields(self):
        leaf = Leaf(Tagged())
        assert list(leaf.unresolved) == ["first", "second"]

    def test_leaf_without_slots_is_fully_resolved(self):
        assert Leaf(Bar()).is_fully_resolved()

    def test_missing_hooks_are_none(self):
        assert Leaf(Bar()).hooks == LifecycleHooks()


class TestAliases(unittest.TestCase):
    def test_add_alias_is_idempotent(self):
        leaf = Leaf(Bar())
        leaf.add_alias("other")
        leaf.add_alias("other")
        assert leaf.aliases == {"bar", "other"}

    def test_has_alias_for_unknown_name(self):
        assert not Leaf(Bar()).has_alias("other")


class TestResolveSlot(unittest.TestCase):
    foo: Foo
    bar: Bar
    foo_leaf: Leaf
    bar_leaf: Leaf

    def setUp(self):
        self.foo = Foo()
        self.bar = Bar()
        self.foo_leaf = Leaf(self.foo)
        self.bar_leaf = Leaf(self.bar)

    def test_binds_the_target_instance(self):
        self.foo_leaf.resolve_slot("bar", self.bar_leaf)

        assert self.foo.bar is self.bar
        assert list(self.foo_leaf.resolved) == ["bar"]
        assert self.foo_leaf.unresolved == {}
        assert self.foo_leaf.is_fully_resolved()
        assert self.foo_leaf.state is LeafState.RESOLVING

    def test_resolving_twice_raises(self):
        self.foo_leaf.resolve_slot("bar", self.bar_leaf)
        with pytest.raises(SlotError):
            self.foo_leaf.resolve_slot("bar", self.bar_leaf)

    def test_resolving_undeclared_name_raises(self):
        with pytest.raises(SlotError):
            self.foo_leaf.resolve_slot("baz", self.bar_leaf)

    def test_resolves_tagged_dataclass_field(self):
        tagged = Tagged()
        leaf = Leaf(tagged)
        leaf.resolve_slot("second", self.bar_leaf)

        assert tagged.second is self.bar
        assert tagged.first is None
        assert list(leaf.unresolved) == ["first"]


class TestLifecycle(unittest.TestCase):
    def test_construct_complete_calls_hook_once_resolved(self):
        foo = Foo()
        leaf = Leaf(foo)
        leaf.resolve_slot("bar", Leaf(Bar()))
        leaf.invoke_construct_complete()

        assert foo.pc_called
        assert leaf.constructed
        assert leaf.state is LeafState.RESOLVED

    def test_construct_complete_before_resolution_raises(self):
        foo = Foo()
        with pytest.raises(SlotError):
            Leaf(foo).invoke_construct_complete()
        assert not foo.pc_called

    def test_construct_complete_twice_raises(self):
        leaf = Leaf(Bar())
        leaf.invoke_construct_complete()
        with pytest.raises(SlotError):
            leaf.invoke_construct_complete()

    def test_construct_complete_without_hook_is_a_no_op(self):
        leaf = Leaf(Bar())
        leaf.invoke_construct_complete()
        assert leaf.state is LeafState.RESOLVED

    def test_teardown_calls_hook(self):
        calls = []

        class Closable:
            def pre_destroy(self) -> None:
                calls.append("closed")

        leaf = Leaf(Closable())
        leaf.invoke_teardown()

        assert calls == ["closed"]
        assert leaf.state is LeafState.TORN_DOWN

    def test_teardown_from_unresolved_state(self):
        leaf = Leaf(WithDep())
        leaf.invoke_teardown()
        assert leaf.state is LeafState.TORN_DOWN
