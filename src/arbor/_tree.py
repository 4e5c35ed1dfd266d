from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from ._config import Config
from ._errors import DuplicateNameError, ResolutionError, UsageError
from ._extractor import DescriptorExtractor, ReflectiveExtractor
from ._leaf import Leaf


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator


class Tree:
    """Name-based DI container for pre-built component instances.

    - register instances with `add_leaf` / `add_named_leaf`, extra names with `add_alias`
    - `grow` wires every dependency slot in one pass and fires construct-complete hooks
    - `chop` fires teardown hooks in reverse registration order.

    Example:
      tree = Tree().add_leaf(Database()).add_named_leaf("repo", Repo()).grow()
      ...
      tree.chop()

    Wiring binds references, so forward, circular and self references all
    resolve in a single pass. A construct-complete hook may therefore observe
    a cyclic partner whose own slots have not been wired yet.

    Not thread-safe: callers sharing a tree must serialize access.
    """

    def __init__(self, config: Config | None = None, *, extractor: DescriptorExtractor | None = None) -> None:
        if config is not None and extractor is not None:
            msg = "Provide either `config` or `extractor`, not both."
            raise UsageError(msg)

        self._extractor: DescriptorExtractor = extractor or ReflectiveExtractor(config)
        self._registry: dict[int, Leaf] = {}
        self._names: dict[str, int] = {}
        self._order: list[int] = []
        self._grown = False
        self._chopped = False

    def configure(self, config: Config) -> Tree:
        """Replace the reflective extractor's configuration. Only allowed on an empty tree."""
        if self._registry:
            msg = "Configure the tree before adding leaves"
            raise UsageError(msg)
        self._extractor = ReflectiveExtractor(config)
        return self

    def add_leaf(self, instance: object) -> Tree:
        """Register `instance` under its self-reported or type-derived name."""
        self._check_open()
        self._check_type(instance)

        existing = self._registry.get(id(instance))
        if existing is not None:
            return self._alias_existing(existing, Leaf.derive_name(instance, self._extractor))

        return self._add(Leaf(instance, extractor=self._extractor))

    def add_named_leaf(self, name: str, instance: object) -> Tree:
        """Register `instance` under `name`, overriding any self-reported name."""
        self._check_open()
        self._check_type(instance)
        self._check_name_type(name)

        existing = self._registry.get(id(instance))
        if existing is not None:
            return self._alias_existing(existing, name)

        return self._add(Leaf(instance, name, extractor=self._extractor))

    def add_alias(self, name: str, *aliases: str) -> Tree:
        """Make the leaf registered as `name` reachable under each of `aliases` too."""
        leaf = self.get_leaf(name)
        if leaf is None:
            msg = f"Leaf {name!r} does not exist"
            raise UsageError(msg)

        if not aliases:
            msg = "Please supply one or more aliases"
            raise UsageError(msg)

        for alias in aliases:
            self._check_name_type(alias)
            self._check_name(alias)

        if len(set(aliases)) != len(aliases):
            msg = f"Aliases must not repeat: {aliases!r}"
            raise UsageError(msg)

        for alias in aliases:
            self._bind_name(leaf, alias)

        return self

    def grow(self) -> Tree:
        """Wire every dependency slot and fire construct-complete hooks.

        Leaves are visited in registration order. Each unresolved slot is
        looked up by name across the whole tree; a leaf whose slots are all
        wired has its construct-complete hook invoked straight away.

        Raises:
            ResolutionError: after the full pass, listing every leaf that still
                has missing dependencies.
            UsageError: if the tree has already been grown.
        """
        if self._grown:
            msg = "Tree.grow() may only be called once"
            raise UsageError(msg)
        self._grown = True

        unresolved: dict[str, list[str]] = {}

        for identity in self._order:
            leaf = self._registry[identity]

            for dependency in list(leaf.unresolved):
                target = self.get_leaf(dependency)
                if target is not None:
                    leaf.resolve_slot(dependency, target)

            if not leaf.is_fully_resolved():
                unresolved[leaf.name] = list(leaf.unresolved)
                continue

            if not leaf.constructed:
                leaf.invoke_construct_complete()

        if unresolved:
            err = ResolutionError(unresolved)
            logger.warning("%s", err)
            raise err

        logger.debug("Grew tree with %d leaves", len(self._order))
        return self

    def get_leaf(self, name: str) -> Leaf | None:
        identity = self._names.get(name)
        if identity is None:
            return None
        return self._registry[identity]

    def leaves(self) -> list[Leaf]:
        """Distinct leaves in registration order."""
        return [self._registry[identity] for identity in self._order]

    def chop(self) -> Tree:
        """Fire each distinct leaf's teardown hook once, in reverse registration order.

        Does not require a successful `grow`.
        """
        if self._chopped:
            msg = "Tree.chop() may only be called once"
            raise UsageError(msg)
        self._chopped = True

        for identity in reversed(self._order):
            leaf = self._registry[identity]
            logger.debug("Tearing down %s", leaf.name)
            leaf.invoke_teardown()

        return self

    def __getitem__(self, name: str) -> object:
        leaf = self.get_leaf(name)
        if leaf is None:
            raise KeyError(name)
        return leaf.instance

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._registry)

    def __iter__(self) -> Iterator[Leaf]:
        return iter(self.leaves())

    def _add(self, leaf: Leaf) -> Tree:
        self._check_name(leaf.name)

        self._registry[leaf.identity] = leaf
        self._order.append(leaf.identity)
        for alias in leaf.aliases:
            self._names[alias] = leaf.identity

        logger.debug("Added leaf %s (%d dependencies)", leaf.name, len(leaf.unresolved))
        return self

    def _alias_existing(self, leaf: Leaf, name: str) -> Tree:
        self._check_name(name)
        self._bind_name(leaf, name)
        return self

    def _bind_name(self, leaf: Leaf, name: str) -> None:
        leaf.add_alias(name)
        self._names[name] = leaf.identity
        logger.debug("Aliased %s as %s", leaf.name, name)

    def _check_name(self, name: str) -> None:
        if name in self._names:
            raise DuplicateNameError(name)

    def _check_open(self) -> None:
        if self._grown or self._chopped:
            msg = "Leaves cannot be added after the tree has been grown or chopped"
            raise UsageError(msg)

    @staticmethod
    def _check_name_type(name: object) -> None:
        if not isinstance(name, str) or not name:
            msg = f"Leaf names must be non-empty strings, got {name!r}"
            raise UsageError(msg)

    @staticmethod
    def _check_type(value: object) -> None:
        if value is None or inspect.isclass(value) or type(value).__module__ == "builtins":
            msg = "Please only supply component instances to add_leaf/add_named_leaf"
            raise UsageError(msg)
