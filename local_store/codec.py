"""JSON codec with an ordered list of decode profiles."""

from __future__ import annotations

import collections.abc
import json
import types
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Callable, Iterable, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError

M = TypeVar("M", bound=BaseModel)

# Numeric dates count seconds from this instant.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)

_SEQUENCE_ORIGINS = (list, set, frozenset, collections.abc.Sequence, collections.abc.Set)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


@dataclass(frozen=True)
class DecodeProfile:
    """How date fields are interpreted while decoding."""

    name: str
    parse_date: Callable[[Any], Any]

    def apply(self, value: Any, annotation: Any) -> Any:
        """Run ``parse_date`` over every value *annotation* types as ``datetime``.

        Walks optional/union types, lists, sets, tuples, dict values and
        nested models; anything else is returned untouched for pydantic.
        """
        if value is None:
            return None
        if annotation is datetime:
            return self.parse_date(value)
        origin = get_origin(annotation)
        args = get_args(annotation)
        if origin is Annotated:
            return self.apply(value, args[0])
        if origin in (Union, types.UnionType):
            if datetime in args:
                return self.parse_date(value)
            candidates = [arg for arg in args if arg is not type(None)]
            if len(candidates) == 1:
                return self.apply(value, candidates[0])
            return value
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return self._apply_model(value, annotation)
        if origin in _SEQUENCE_ORIGINS and isinstance(value, list) and args:
            return [self.apply(item, args[0]) for item in value]
        if origin is tuple and isinstance(value, list) and args:
            if len(args) == 2 and args[1] is Ellipsis:
                return [self.apply(item, args[0]) for item in value]
            return [self.apply(item, arg) for item, arg in zip(value, args)] + value[len(args):]
        if origin in _MAPPING_ORIGINS and isinstance(value, dict) and len(args) == 2:
            return {key: self.apply(item, args[1]) for key, item in value.items()}
        return value

    def _apply_model(self, value: Any, model: type[BaseModel]) -> Any:
        if not isinstance(value, dict):
            return value
        converted = dict(value)
        for name, field in model.model_fields.items():
            key = field.alias if field.alias in converted else name
            if key in converted:
                converted[key] = self.apply(converted[key], field.annotation)
        return converted


def _parse_reference_seconds(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(
            f"expected seconds since {REFERENCE_DATE.isoformat()}, got {type(value).__name__}"
        )
    try:
        return REFERENCE_DATE + timedelta(seconds=value)
    except OverflowError as e:
        raise ValueError(f"date offset {value} out of range") from e


def _parse_iso8601(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO-8601 date string, got {type(value).__name__}")
    return datetime.fromisoformat(value)


DEFAULT_PROFILE = DecodeProfile("default", _parse_reference_seconds)
ISO8601_PROFILE = DecodeProfile("iso8601", _parse_iso8601)

DEFAULT_PROFILES = (DEFAULT_PROFILE, ISO8601_PROFILE)


class JsonCodec:
    """Encode models to UTF-8 JSON and decode them back.

    Encoding always renders dates as ISO-8601.  Decoding walks ``profiles``
    in order and returns the first successful result; when every profile
    fails a ``DecodeError`` carrying each failure is raised.
    """

    def __init__(self, profiles: Iterable[DecodeProfile] | None = None, indent: int = 2, logger=None) -> None:
        self.profiles: list[DecodeProfile] = list(profiles) if profiles is not None else list(DEFAULT_PROFILES)
        if not self.profiles:
            raise ValueError("JsonCodec needs at least one decode profile")
        self.indent = indent
        self.logger = logger
        self._adapters: dict[Any, TypeAdapter] = {}

    # -- Encoding --

    def encode(self, instance: BaseModel) -> bytes:
        try:
            return instance.model_dump_json(indent=self.indent).encode("utf-8")
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise EncodeError(f"Could not encode {type(instance).__name__}: {e}") from e

    def encode_many(self, items: Iterable[M], model: type[M]) -> bytes:
        try:
            return self._adapter(list[model]).dump_json(list(items), indent=self.indent)
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise EncodeError(f"Could not encode collection of {model.__name__}: {e}") from e

    # -- Decoding --

    def decode(self, data: bytes, model: type[M]) -> M:
        return self._decode(data, model, model.__name__)

    def decode_many(self, data: bytes, model: type[M]) -> list[M]:
        return self._decode(data, list[model], f"list[{model.__name__}]")

    def _decode(self, data: bytes, target: Any, label: str):
        adapter = self._adapter(target)
        failures: dict[str, Exception] = {}
        for profile in self.profiles:
            try:
                raw = json.loads(data)
                return adapter.validate_python(profile.apply(raw, target))
            except ValueError as e:
                failures[profile.name] = e
                if self.logger is not None:
                    self.logger.debug(f"Decoding {label} with profile {profile.name!r} failed, trying next")
        tried = ", ".join(failures)
        raise DecodeError(f"Could not decode {label} with any profile ({tried})", failures)

    def _adapter(self, target) -> TypeAdapter:
        adapter = self._adapters.get(target)
        if adapter is None:
            adapter = TypeAdapter(target)
            self._adapters[target] = adapter
        return adapter
