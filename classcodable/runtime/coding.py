"""Keyed encoding and decoding for classcodable generated types."""

import base64
import json
import types
from collections.abc import Mapping
from enum import Enum
from typing import Any, Self, TypeVar, Union, get_args, get_origin


class CodingError(RuntimeError):
    """Raised when encoding or decoding fails."""


class KeyNotFoundError(CodingError):
    """Raised when a required key is missing from a keyed container."""

    def __init__(self, key: str):
        super().__init__(f"No value associated with key '{key}'")
        self.key = key


class TypeMismatchError(CodingError):
    """Raised when a value cannot be converted to the requested type."""


class Encodable:
    """Base class for generated types that can encode themselves.

    Generated subclasses write each field through a keyed container:

    Example:
        class Point(Encodable):
            class CodingKeys(Enum):
                x = "x"

            def encode(self, encoder: Encoder) -> None:
                container = encoder.container(self.CodingKeys)
                container.encode(self.x, self.CodingKeys.x)
    """

    def encode(self, encoder: "Encoder") -> None:
        """Encode this value. Generated code overrides this."""
        raise NotImplementedError("encode() must be implemented by generated code")


class Decodable:
    """Base class for generated types that can decode themselves."""

    @classmethod
    def decode(cls, decoder: "Decoder") -> Self:
        """Decode a value. Generated code overrides this."""
        raise NotImplementedError("decode() must be implemented by generated code")


class Codable(Encodable, Decodable):
    """Base class for generated types that can both encode and decode."""


def _box(value: Any) -> Any:
    """Convert a value to a JSON compatible tree."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Encodable):
        encoder = Encoder()
        value.encode(encoder)
        return encoder.storage
    if isinstance(value, Enum):
        return _box(value.value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Mapping):
        return {_box_key(k): _box(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_box(v) for v in value]
    raise CodingError(f"Cannot encode value of type {type(value).__name__}")


def _box_key(key: Any) -> str:
    """Convert a dict key to the string used as the object key."""
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _unbox_key(type_: Any, raw: str, key: str) -> Any:
    """Convert an object key back to the declared key type."""
    if type_ is Any or type_ is object or type_ is str:
        return raw
    if isinstance(type_, type) and issubclass(type_, Enum):
        for member in type_:
            if _box_key(member) == raw:
                return member
        raise TypeMismatchError(f"{raw!r} is not a valid {type_.__name__} key for '{key}'")
    if type_ is bool and raw in ("true", "false"):
        return raw == "true"
    try:
        if type_ is int:
            return int(raw)
        if type_ is float:
            return float(raw)
    except ValueError as e:
        raise TypeMismatchError(f"Expected {type_.__name__} key for '{key}', got {raw!r}") from e
    raise TypeMismatchError(f"Unsupported key type {type_} for '{key}'")


def _mismatch(type_: Any, raw: Any, key: str) -> TypeMismatchError:
    name = getattr(type_, "__name__", str(type_))
    return TypeMismatchError(f"Expected {name} for key '{key}', got {type(raw).__name__}")


def _unbox(type_: Any, raw: Any, key: str) -> Any:
    """Convert a JSON compatible tree to an instance of `type_`."""
    if type_ is Any or type_ is object:
        return raw

    origin = get_origin(type_)
    if origin in (Union, types.UnionType):
        args = get_args(type_)
        if raw is None and type(None) in args:
            return None
        candidates = [a for a in args if a is not type(None)]
        if len(candidates) != 1:
            raise CodingError(f"Unsupported union {type_} for key '{key}'")
        return _unbox(candidates[0], raw, key)

    if origin in (list, set, frozenset):
        if not isinstance(raw, list):
            raise _mismatch(type_, raw, key)
        (item_type,) = get_args(type_) or (Any,)
        return origin(_unbox(item_type, item, key) for item in raw)

    if origin is dict:
        if not isinstance(raw, Mapping):
            raise _mismatch(type_, raw, key)
        key_type, value_type = get_args(type_) or (str, Any)
        return {_unbox_key(key_type, k, key): _unbox(value_type, v, key) for k, v in raw.items()}

    if not isinstance(type_, type):
        raise CodingError(f"Unsupported type {type_} for key '{key}'")

    if issubclass(type_, Decodable):
        return type_.decode(Decoder(raw))

    if issubclass(type_, Enum):
        try:
            return type_(raw)
        except ValueError as e:
            raise TypeMismatchError(f"{raw!r} is not a valid {type_.__name__} for key '{key}'") from e

    if type_ is bool:
        if not isinstance(raw, bool):
            raise _mismatch(type_, raw, key)
        return raw

    if type_ is int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise _mismatch(type_, raw, key)
        return raw

    if type_ is float:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise _mismatch(type_, raw, key)
        return float(raw)

    if type_ is bytes:
        if not isinstance(raw, str):
            raise _mismatch(type_, raw, key)
        return base64.b64decode(raw)

    if not isinstance(raw, type_):
        raise _mismatch(type_, raw, key)
    return raw


class KeyedEncodingContainer:
    """Writes values into a keyed storage dict."""

    def __init__(self, storage: dict[str, Any]):
        self._storage = storage

    def encode(self, value: Any, key: Enum) -> None:
        self._storage[key.value] = _box(value)

    def encode_if_present(self, value: Any, key: Enum) -> None:
        """Encode `value` unless it is None."""
        if value is not None:
            self.encode(value, key)


class KeyedDecodingContainer:
    """Reads values from a keyed storage mapping."""

    def __init__(self, storage: Mapping[str, Any]):
        self._storage = storage

    def contains(self, key: Enum) -> bool:
        return key.value in self._storage

    def decode(self, type_: Any, key: Enum) -> Any:
        """Decode the value for `key`.

        Raises:
            KeyNotFoundError: The key is missing.
            TypeMismatchError: The value does not convert to `type_`.
        """
        if key.value not in self._storage:
            raise KeyNotFoundError(key.value)
        return _unbox(type_, self._storage[key.value], key.value)

    def decode_if_present(self, type_: Any, key: Enum) -> Any:
        """Decode the value for `key`, or return None when it is missing or null."""
        raw = self._storage.get(key.value)
        if raw is None:
            return None
        return _unbox(type_, raw, key.value)


class Encoder:
    """Encodes values into plain dict / list / scalar trees."""

    def __init__(self) -> None:
        self.storage: dict[str, Any] = {}

    def container(self, keys: type[Enum]) -> KeyedEncodingContainer:
        return KeyedEncodingContainer(self.storage)


class Decoder:
    """Decodes values from plain dict / list / scalar trees."""

    def __init__(self, storage: Any):
        self.storage = storage

    def container(self, keys: type[Enum]) -> KeyedDecodingContainer:
        if not isinstance(self.storage, Mapping):
            raise TypeMismatchError(
                f"Expected a keyed container, got {type(self.storage).__name__}"
            )
        return KeyedDecodingContainer(self.storage)


T = TypeVar("T", bound=Decodable)


def to_dict(value: Encodable) -> dict[str, Any]:
    """Encode a value to a dict."""
    encoder = Encoder()
    value.encode(encoder)
    return encoder.storage


def from_dict(type_: type[T], data: Mapping[str, Any]) -> T:
    """Decode a value of `type_` from a dict."""
    return type_.decode(Decoder(data))


def dumps(value: Encodable, **kwargs: Any) -> str:
    """Encode a value to a JSON string."""
    return json.dumps(to_dict(value), **kwargs)


def loads(type_: type[T], text: str | bytes) -> T:
    """Decode a value of `type_` from a JSON string."""
    return from_dict(type_, json.loads(text))
