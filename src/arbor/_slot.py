from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, overload

from ._errors import SlotError, UnboundSlotError


T = TypeVar("T")


class SettableRef(Protocol):
    """A reference field on a component that can be pointed at another component."""

    def bind(self, target: object) -> None: ...


class Slot(Generic[T]):
    """Write-once attribute declaring a named dependency.

    Example:
      class Repo:
          db: Slot[Database] = Slot("database")
          cache = Slot()  # depends on the leaf named "cache"

    Reading the attribute before the tree has wired it raises
    `UnboundSlotError`; wiring it twice raises `SlotError`.
    """

    __slots__ = ("_dependency", "_attribute")

    def __init__(self, dependency: str | None = None) -> None:
        if dependency is not None and (not isinstance(dependency, str) or not dependency):
            msg = "Slot dependency name must be a non-empty string"
            raise SlotError(msg)
        self._dependency = dependency
        self._attribute: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self._attribute = name
        if self._dependency is None:
            self._dependency = name

    @property
    def dependency(self) -> str:
        if self._dependency is None:
            msg = "Slot was never assigned to a class attribute"
            raise SlotError(msg)
        return self._dependency

    @property
    def attribute(self) -> str:
        if self._attribute is None:
            msg = "Slot was never assigned to a class attribute"
            raise SlotError(msg)
        return self._attribute

    @overload
    def __get__(self, obj: None, owner: type) -> Slot[T]: ...

    @overload
    def __get__(self, obj: object, owner: type) -> T: ...

    def __get__(self, obj: object | None, owner: type) -> Any:
        if obj is None:
            return self

        try:
            return obj.__dict__[self.attribute]
        except KeyError:
            msg = f"{type(obj).__name__}.{self.attribute} (dependency {self.dependency!r}) has not been wired"
            raise UnboundSlotError(msg) from None

    def __set__(self, obj: object, value: T) -> None:
        if value is self:
            # dataclass __init__ assigning the descriptor as its own default
            return
        if self.attribute in obj.__dict__:
            msg = f"{type(obj).__name__}.{self.attribute} has already been wired"
            raise SlotError(msg)
        obj.__dict__[self.attribute] = value

    def __repr__(self) -> str:
        return f"Slot({self._dependency!r})"


@dataclass(frozen=True)
class AttributeRef:
    """`SettableRef` writing through ``setattr`` on the owning component."""

    instance: object
    attribute: str

    def bind(self, target: object) -> None:
        setattr(self.instance, self.attribute, target)
