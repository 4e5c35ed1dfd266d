from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ._errors import SlotError
from ._extractor import DescriptorExtractor, LifecycleHooks, ReflectiveExtractor


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._slot import SettableRef


class LeafState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    TORN_DOWN = "torn_down"


class Leaf:
    """Wraps one registered component instance.

    Tracks the component's name and aliases, its dependency slots (split into
    unresolved and resolved) and its optional lifecycle hooks. The name is
    taken from `name` when given, else from the component's self-reported
    name, else from its type.
    """

    def __init__(
        self,
        instance: object,
        name: str | None = None,
        *,
        extractor: DescriptorExtractor | None = None,
    ) -> None:
        extractor = extractor or ReflectiveExtractor()

        self._instance = instance
        self._identity = id(instance)
        self._name = name if name is not None else self.derive_name(instance, extractor)
        self._aliases: set[str] = set()

        self._unresolved: dict[str, SettableRef] = dict(extractor.dependency_slots(instance))
        self._resolved: dict[str, SettableRef] = {}
        self._hooks: LifecycleHooks = extractor.lifecycle_hooks(instance)

        self._state = LeafState.UNRESOLVED
        self._constructed = False

        self.add_alias(self._name)

    @staticmethod
    def derive_name(instance: object, extractor: DescriptorExtractor) -> str:
        """Name used when no explicit name is supplied."""
        name = extractor.self_name(instance)
        if name is not None:
            return name
        cls = type(instance)
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def instance(self) -> object:
        return self._instance

    @property
    def identity(self) -> int:
        return self._identity

    @property
    def name(self) -> str:
        return self._name

    @property
    def aliases(self) -> frozenset[str]:
        return frozenset(self._aliases)

    @property
    def unresolved(self) -> Mapping[str, SettableRef]:
        return dict(self._unresolved)

    @property
    def resolved(self) -> Mapping[str, SettableRef]:
        return dict(self._resolved)

    @property
    def hooks(self) -> LifecycleHooks:
        return self._hooks

    @property
    def state(self) -> LeafState:
        return self._state

    @property
    def constructed(self) -> bool:
        return self._constructed

    def add_alias(self, name: str) -> None:
        self._aliases.add(name)

    def has_alias(self, name: str) -> bool:
        return name in self._aliases

    def resolve_slot(self, name: str, target: Leaf) -> None:
        """Point slot `name` at `target`'s instance and mark it resolved."""
        ref = self._unresolved.get(name)
        if ref is None:
            msg = f"Can't set dependency {name!r} in leaf {self._name!r}"
            raise SlotError(msg)

        ref.bind(target.instance)
        self._resolved[name] = self._unresolved.pop(name)
        self._state = LeafState.RESOLVING
        logger.debug("Wired %s.%s -> %s", self._name, name, target.name)

    def is_fully_resolved(self) -> bool:
        return not self._unresolved

    def invoke_construct_complete(self) -> None:
        if self._constructed:
            msg = f"Construct-complete already invoked for leaf {self._name!r}"
            raise SlotError(msg)
        if not self.is_fully_resolved():
            msg = f"Leaf {self._name!r} still has unresolved dependencies: {', '.join(self._unresolved)}"
            raise SlotError(msg)

        self._constructed = True
        self._state = LeafState.RESOLVED
        if self._hooks.on_construct_complete is not None:
            self._hooks.on_construct_complete()

    def invoke_teardown(self) -> None:
        self._state = LeafState.TORN_DOWN
        if self._hooks.on_teardown is not None:
            self._hooks.on_teardown()

    def __repr__(self) -> str:
        return f"Leaf(name={self._name!r}, state={self._state.value}, unresolved={list(self._unresolved)!r})"
