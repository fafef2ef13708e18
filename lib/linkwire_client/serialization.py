from __future__ import annotations

import dataclasses
import json
import types
import typing
from enum import Enum
from typing import Any, Mapping

EXCLUDE = "linkwire.exclude"


class SerializationError(ValueError):
    """Payload could not be turned into the requested model."""


def excluded(**kwargs: Any) -> Any:
    """Declare a dataclass field that is never encoded or decoded."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[EXCLUDE] = True
    return dataclasses.field(metadata=metadata, **kwargs)


class AnnotationExclusionStrategy:
    def should_skip_field(self, f: dataclasses.Field) -> bool:
        return bool(f.metadata.get(EXCLUDE))

    def should_skip_class(self, cls: type) -> bool:
        return False


DEFAULT_STRATEGY = AnnotationExclusionStrategy()


def _encode(value: Any, strategy: AnnotationExclusionStrategy) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_dict(value, strategy=strategy)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _encode(v, strategy) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_encode(v, strategy) for v in value]
    return value


def to_dict(obj: Any, *, strategy: AnnotationExclusionStrategy = DEFAULT_STRATEGY) -> dict[str, Any]:
    """
    Encode a dataclass instance into a JSON-ready dict.

    Fields the strategy skips are left out, as are fields holding ``None``.
    """
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"expected a dataclass instance, got {type(obj).__name__}")
    out: dict[str, Any] = {}
    for f in dataclasses.fields(obj):
        if strategy.should_skip_field(f):
            continue
        value = getattr(obj, f.name)
        if value is None:
            continue
        if strategy.should_skip_class(type(value)):
            continue
        out[f.name] = _encode(value, strategy)
    return out


def _decode(tp: Any, value: Any, strategy: AnnotationExclusionStrategy) -> Any:
    if value is None:
        return None
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is typing.Union or origin is types.UnionType:
        inner = [a for a in args if a is not type(None)]
        return _decode(inner[0], value, strategy) if len(inner) == 1 else value
    if origin in (list, tuple, set, frozenset) and args:
        items = [_decode(args[0], v, strategy) for v in value]
        return items if origin is list else origin(items)
    if origin is dict and len(args) == 2:
        return {k: _decode(args[1], v, strategy) for k, v in value.items()}
    if isinstance(tp, type):
        if dataclasses.is_dataclass(tp) and isinstance(value, Mapping):
            return from_dict(tp, value, strategy=strategy)
        if issubclass(tp, Enum):
            return tp(value)
    return value


def from_dict(cls: type, data: Any, *, strategy: AnnotationExclusionStrategy = DEFAULT_STRATEGY) -> Any:
    """
    Build ``cls`` from a mapping.

    Skipped fields are never read from ``data`` and keep their declared
    defaults. Keys that are not fields of ``cls`` are ignored.
    """
    if not isinstance(data, Mapping):
        raise SerializationError(f"{cls.__name__}: expected an object, got {type(data).__name__}")
    hints = typing.get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init or strategy.should_skip_field(f):
            continue
        if f.name not in data:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise SerializationError(f"{cls.__name__}: missing required field '{f.name}'")
            continue
        try:
            kwargs[f.name] = _decode(hints.get(f.name, Any), data[f.name], strategy)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"{cls.__name__}.{f.name}: {e}") from e
    return cls(**kwargs)


def dumps(obj: Any, *, strategy: AnnotationExclusionStrategy = DEFAULT_STRATEGY) -> str:
    return json.dumps(to_dict(obj, strategy=strategy), ensure_ascii=False)


def loads(cls: type, text: str, *, strategy: AnnotationExclusionStrategy = DEFAULT_STRATEGY) -> Any:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise SerializationError(f"invalid JSON: {e}") from e
    return from_dict(cls, data, strategy=strategy)
