"""Name-based dependency injection for pre-built component instances.

Components are registered into a `Tree`, which wires their named dependency
slots to each other in a single pass (`grow`) and later tears them down in
reverse registration order (`chop`).

Exports:
- `Tree`: the container; registration, aliasing, wiring and teardown.
- `Leaf`, `LeafState`: per-component wrapper and its lifecycle state.
- `Slot`: write-once class attribute declaring a dependency by name.
- `Config`: tag key and lifecycle method names used by the default extractor.
- `DescriptorExtractor`, `ReflectiveExtractor`, `LifecycleHooks`: how the tree
  discovers a component's name, slots and hooks.
- `ArborError` and its subclasses.
"""

from ._config import Config
from ._errors import (
    ArborError,
    ConfigError,
    ContractError,
    DuplicateNameError,
    ResolutionError,
    SlotError,
    UnboundSlotError,
    UsageError,
)
from ._extractor import DescriptorExtractor, LifecycleHooks, ReflectiveExtractor
from ._leaf import Leaf, LeafState
from ._slot import AttributeRef, SettableRef, Slot
from ._tree import Tree


__all__ = [
    "ArborError",
    "AttributeRef",
    "Config",
    "ConfigError",
    "ContractError",
    "DescriptorExtractor",
    "DuplicateNameError",
    "Leaf",
    "LeafState",
    "LifecycleHooks",
    "ReflectiveExtractor",
    "ResolutionError",
    "SettableRef",
    "Slot",
    "SlotError",
    "Tree",
    "UnboundSlotError",
    "UsageError",
]
