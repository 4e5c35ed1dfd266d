from __future__ import annotations

from dataclasses import dataclass, replace

from ._errors import ConfigError


@dataclass(frozen=True)
class Config:
    """Names the reflective extractor looks for on components.

    - `tag_name`: dataclass field metadata key declaring a dependency slot,
      e.g. ``field(default=None, metadata={"arbor": "db"})``.
    - `leaf_name_method`: zero-argument method returning the component's name.
    - `post_construct_method`: zero-argument method called once all slots are wired.
    - `pre_destroy_method`: zero-argument method called by ``Tree.chop``.
    """

    tag_name: str = "arbor"
    leaf_name_method: str = "get_leaf_name"
    post_construct_method: str = "post_construct"
    pre_destroy_method: str = "pre_destroy"

    def __post_init__(self) -> None:
        if not isinstance(self.tag_name, str) or not self.tag_name:
            msg = "The tag name cannot be empty"
            raise ConfigError(msg)

        _ensure_public_method(self.leaf_name_method)
        _ensure_public_method(self.post_construct_method)
        _ensure_public_method(self.pre_destroy_method)

    def with_tag_name(self, tag: str) -> Config:
        return replace(self, tag_name=tag)

    def with_leaf_name_method(self, method: str) -> Config:
        return replace(self, leaf_name_method=method)

    def with_post_construct_method(self, method: str) -> Config:
        return replace(self, post_construct_method=method)

    def with_pre_destroy_method(self, method: str) -> Config:
        return replace(self, pre_destroy_method=method)


def _ensure_public_method(method: object) -> None:
    if not isinstance(method, str) or not method:
        msg = "The method name cannot be empty"
        raise ConfigError(msg)

    if not method.isidentifier():
        msg = f"The method name {method!r} is not a valid identifier"
        raise ConfigError(msg)

    if method.startswith("_"):
        msg = f"The method name {method!r} must be public (must not start with an underscore)"
        raise ConfigError(msg)
