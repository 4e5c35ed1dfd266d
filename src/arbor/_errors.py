from __future__ import annotations


class ArborError(Exception):
    """Base class for every error raised by arbor."""


class UsageError(ArborError, TypeError):
    """The tree was called with arguments or at a time it does not accept."""


class ConfigError(ArborError, ValueError):
    pass


class DuplicateNameError(ArborError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A leaf with name {name!r} already exists")


class ContractError(ArborError, TypeError):
    """A component declares a self-name, slot or lifecycle method with the wrong shape."""


class SlotError(ArborError, RuntimeError):
    pass


class UnboundSlotError(ArborError, AttributeError):
    pass


class ResolutionError(ArborError, RuntimeError):
    """Raised by ``Tree.grow`` when one or more leaves could not be fully wired.

    ``unresolved`` maps each failing leaf name to the dependency names that
    were not found in the tree.
    """

    def __init__(self, unresolved: dict[str, list[str]]) -> None:
        self.unresolved = unresolved
        lines = ["Failed to wire the following dependencies:"]
        for leaf, deps in unresolved.items():
            lines.append(f"- {leaf}")
            lines.extend(f"    - {dep}" for dep in deps)
        super().__init__("\n".join(lines))
