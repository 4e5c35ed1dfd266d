from __future__ import annotations

import dataclasses
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ._config import Config
from ._errors import ContractError
from ._slot import AttributeRef, SettableRef, Slot


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

_MISSING = object()


@dataclass(frozen=True)
class LifecycleHooks:
    on_construct_complete: Callable[[], object] | None = None
    on_teardown: Callable[[], object] | None = None


class DescriptorExtractor(Protocol):
    """Discovers what a component declares about itself.

    The tree only ever talks to components through this contract, so any
    implementation works: reflection, a static table, generated code.
    """

    def self_name(self, instance: object) -> str | None: ...

    def dependency_slots(self, instance: object) -> Mapping[str, SettableRef]: ...

    def lifecycle_hooks(self, instance: object) -> LifecycleHooks: ...


class ReflectiveExtractor:
    """Default extractor reading `Slot` descriptors, dataclass field tags and named methods.

    - self name: method `config.leaf_name_method`, must take no arguments and return a `str`.
    - slots: `Slot` attributes along the MRO, plus dataclass fields whose
      metadata carries `config.tag_name`.
    - hooks: methods `config.post_construct_method` and `config.pre_destroy_method`,
      must take no arguments and return nothing.
    """

    def __init__(self, config: Config | None = None) -> None:
        self._config = config or Config()

    @property
    def config(self) -> Config:
        return self._config

    def self_name(self, instance: object) -> str | None:
        method_name = self._config.leaf_name_method
        method = self._get_method(instance, method_name)
        if method is None:
            return None

        ret = _return_annotation(method)
        if ret not in (inspect.Signature.empty, str, "str", Any):
            msg = f"{_type_name(instance)} - {method_name} must return a string"
            raise ContractError(msg)

        name = method()
        if not isinstance(name, str):
            msg = f"{_type_name(instance)} - {method_name} must return a string, got {type(name).__name__}"
            raise ContractError(msg)
        if not name:
            msg = f"{_type_name(instance)} - {method_name} must not return an empty string"
            raise ContractError(msg)

        return name

    def dependency_slots(self, instance: object) -> Mapping[str, SettableRef]:
        slots: dict[str, SettableRef] = {}

        declared = _declared_slots(type(instance))
        if declared and not hasattr(instance, "__dict__"):
            msg = f"{_type_name(instance)} - Slot attributes need an instance __dict__ (remove __slots__ or add \"__dict__\" to it)"
            raise ContractError(msg)

        for slot in declared:
            self._add_slot(slots, instance, slot.dependency, AttributeRef(instance, slot.attribute))

        if dataclasses.is_dataclass(instance):
            tag_name = self._config.tag_name
            tagged = [f for f in dataclasses.fields(instance) if tag_name in f.metadata]

            if tagged and type(instance).__dataclass_params__.frozen:  # type: ignore[attr-defined]
                msg = f"{_type_name(instance)} - frozen dataclasses cannot declare {tag_name!r} dependencies"
                raise ContractError(msg)

            for f in tagged:
                dependency = f.metadata[tag_name]
                if not isinstance(dependency, str) or not dependency:
                    msg = f"{_type_name(instance)} - field {f.name!r} must tag a non-empty dependency name"
                    raise ContractError(msg)
                self._add_slot(slots, instance, dependency, AttributeRef(instance, f.name))

        return slots

    def lifecycle_hooks(self, instance: object) -> LifecycleHooks:
        return LifecycleHooks(
            on_construct_complete=self._get_hook(instance, self._config.post_construct_method),
            on_teardown=self._get_hook(instance, self._config.pre_destroy_method),
        )

    def _add_slot(self, slots: dict[str, SettableRef], instance: object, dependency: str, ref: SettableRef) -> None:
        if dependency in slots:
            msg = f"{_type_name(instance)} - dependency {dependency!r} is declared more than once"
            raise ContractError(msg)
        slots[dependency] = ref

    def _get_hook(self, instance: object, method_name: str) -> Callable[[], object] | None:
        method = self._get_method(instance, method_name)
        if method is None:
            return None

        ret = _return_annotation(method)
        if ret not in (inspect.Signature.empty, None, type(None), "None", Any):
            msg = f"{_type_name(instance)} - {method_name} must not return any value"
            raise ContractError(msg)

        return method

    def _get_method(self, instance: object, method_name: str) -> Callable[[], object] | None:
        method = getattr(instance, method_name, _MISSING)
        if method is _MISSING:
            return None

        if not callable(method):
            msg = f"{_type_name(instance)} - {method_name} must be a method"
            raise ContractError(msg)

        try:
            sig = inspect.signature(method)
        except (TypeError, ValueError):
            # builtins without introspectable signatures; trust them
            return method

        required = [
            p.name
            for p in sig.parameters.values()
            if p.default is inspect.Parameter.empty
            and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if required:
            msg = f"{_type_name(instance)} - {method_name} must not take any parameters (got {', '.join(required)})"
            raise ContractError(msg)

        return method


def _declared_slots(cls: type) -> list[Slot[Any]]:
    declared: dict[str, Slot[Any]] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if isinstance(value, Slot):
                declared[attr] = value
            elif attr in declared:
                # shadowed by a plain attribute in a subclass
                del declared[attr]
    return list(declared.values())


def _return_annotation(method: Callable[..., object]) -> object:
    try:
        return inspect.signature(method, eval_str=True).return_annotation
    except NameError as exc:
        logger.warning("'%s' name error evaluating return annotation of %r", exc.name, method)
    except (TypeError, ValueError):
        return inspect.Signature.empty

    try:
        return inspect.signature(method).return_annotation
    except (TypeError, ValueError):
        return inspect.Signature.empty


def _type_name(instance: object) -> str:
    cls = type(instance)
    return f"{cls.__module__}.{cls.__qualname__}"
