"""Codec for cardano-wallet transaction metadata.

The wallet API exchanges metadata as a restricted, tagged JSON schema. Every
value is a single-key object naming its type::

    {"int": 42}
    {"string": "hello"}
    {"bytes": "ff00"}
    {"list": [{"int": 1}, {"string": "a"}]}
    {"map": [{"k": {"int": 1}, "v": {"string": "x"}}]}

Top-level keys are unsigned integers between ``0`` and ``2**64 - 1``. The
helpers below convert between that schema and the :class:`MetadataValue`
tree. Metadata written to a transaction is stored on the ledger forever, so
callers must never put sensitive data in it.
"""

from __future__ import annotations

import binascii
import json
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, Mapping, Tuple, Union

TAG_INT = "int"
TAG_STRING = "string"
TAG_BYTES = "bytes"
TAG_LIST = "list"
TAG_MAP = "map"
METADATA_TAGS = frozenset({TAG_INT, TAG_STRING, TAG_BYTES, TAG_LIST, TAG_MAP})

MAP_KEY = "k"
MAP_VALUE = "v"

MAX_METADATA_INT = 2**64 - 1
MIN_METADATA_INT = -(2**64 - 1)
MAX_METADATA_KEY = 2**64 - 1

_ERROR_VALUE_LIMIT = 25


class MetadataError(ValueError):
    """Raised when metadata cannot be decoded or encoded."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class MetadataTypeMismatchError(MetadataError):
    """A node or payload has the wrong JSON type."""


class MetadataShapeError(MetadataError):
    """A tagged object or map pair has the wrong set of keys."""


class MetadataUnknownTagError(MetadataError):
    """A tagged object uses a tag outside the five metadata types."""


class MetadataEncodingError(MetadataError):
    """A bytes payload is not valid hex."""


class MetadataDuplicateKeyError(MetadataError):
    """A map contains two structurally equal keys."""


class MetadataUnsupportedTypeError(MetadataError):
    """A native value has no metadata representation."""


def _describe(value: Any) -> str:
    text = f"{type(value).__name__}: {value!r}"
    return text[:_ERROR_VALUE_LIMIT]


class MetadataValue:
    """Base class of the five metadata node types."""

    __slots__ = ()

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class MetaInt(MetadataValue):
    value: int

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class MetaText(MetadataValue):
    value: str

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class MetaBytes(MetadataValue):
    value: bytes

    def to_python(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class MetaList(MetadataValue):
    items: Tuple[MetadataValue, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class MetaMap(MetadataValue):
    """Ordered key/value pairs; keys may be composite values."""

    pairs: Tuple[Tuple[MetadataValue, MetadataValue], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "pairs", tuple((k, v) for k, v in self.pairs))

    def get(self, key: MetadataValue, default: Any = None) -> Any:
        for pair_key, pair_value in self.pairs:
            if pair_key == key:
                return pair_value
        return default

    def to_python(self) -> Any:
        """Return a dict when every key is hashable, otherwise a list of pairs."""

        converted = [(k.to_python(), v.to_python()) for k, v in self.pairs]
        try:
            return dict(converted)
        except TypeError:
            return [list(pair) for pair in converted]


Metadata = Dict[int, MetadataValue]
NativeValue = Union[int, bool, str, bytes, bytearray, list, tuple, dict, MetadataValue]


# Decoding -----------------------------------------------------------------


def parse_metadata(raw: Mapping[Any, Any] | None) -> Metadata:
    """Decode wire-format metadata into a :data:`Metadata` mapping.

    ``raw`` maps top-level keys to the untyped values produced by
    :func:`json.loads`. Keys may be ints or decimal strings, since JSON object
    keys always arrive as strings. The first invalid node aborts the decode.
    """

    result: Metadata = {}
    if not raw:
        return result
    if not isinstance(raw, Mapping):
        raise MetadataTypeMismatchError("/", f"expected metadata object, got {_describe(raw)}")
    for raw_key, raw_value in raw.items():
        key = _parse_top_level_key(raw_key)
        result[key] = parse_value(raw_value, path=f"/{key}")
    return result


def _parse_top_level_key(raw_key: Any) -> int:
    if isinstance(raw_key, bool):
        raise MetadataTypeMismatchError(f"/{raw_key}", "metadata keys must be unsigned integers")
    if isinstance(raw_key, int):
        key = raw_key
    elif isinstance(raw_key, str) and raw_key.isascii() and raw_key.isdigit():
        key = int(raw_key)
    else:
        raise MetadataTypeMismatchError(f"/{raw_key}", "metadata keys must be unsigned integers")
    if key < 0:
        raise MetadataTypeMismatchError(f"/{raw_key}", "metadata keys must be unsigned integers")
    if key > MAX_METADATA_KEY:
        raise MetadataTypeMismatchError(f"/{raw_key}", "metadata key exceeds 2^64-1")
    return key


def parse_value(raw: Any, *, path: str = "") -> MetadataValue:
    """Decode a single tagged JSON node located at ``path``."""

    if not isinstance(raw, dict):
        raise MetadataTypeMismatchError(path, f"expected tagged object, got {_describe(raw)}")
    if len(raw) != 1:
        raise MetadataShapeError(
            path, f"expected exactly one type tag, got {len(raw)}: {_describe(raw)}"
        )
    ((tag, payload),) = raw.items()
    if tag == TAG_INT:
        return MetaInt(_parse_int(path, payload))
    if tag == TAG_STRING:
        if not isinstance(payload, str):
            raise MetadataTypeMismatchError(path, f"expected string, got {_describe(payload)}")
        return MetaText(payload)
    if tag == TAG_BYTES:
        return MetaBytes(_parse_byte_string(path, payload))
    if tag == TAG_LIST:
        if not isinstance(payload, list):
            raise MetadataTypeMismatchError(path, f"expected array for list, got {_describe(payload)}")
        return MetaList(
            tuple(parse_value(item, path=f"{path}/{index}") for index, item in enumerate(payload))
        )
    if tag == TAG_MAP:
        if not isinstance(payload, list):
            raise MetadataTypeMismatchError(path, f"expected array for map, got {_describe(payload)}")
        return _parse_map(path, payload)
    raise MetadataUnknownTagError(path, f"unknown metadata type {tag!r}")


def _parse_int(path: str, payload: Any) -> int:
    if isinstance(payload, bool):
        raise MetadataTypeMismatchError(path, f"expected integer, got {_describe(payload)}")
    if isinstance(payload, float):
        if not payload.is_integer():
            raise MetadataTypeMismatchError(path, f"expected integer, got {_describe(payload)}")
        payload = int(payload)
    if not isinstance(payload, int):
        raise MetadataTypeMismatchError(path, f"expected integer, got {_describe(payload)}")
    if not MIN_METADATA_INT <= payload <= MAX_METADATA_INT:
        raise MetadataTypeMismatchError(path, f"integer out of range: {payload}")
    return payload


def _parse_byte_string(path: str, payload: Any) -> bytes:
    if not isinstance(payload, str):
        raise MetadataTypeMismatchError(path, f"expected hex string, got {_describe(payload)}")
    try:
        return binascii.unhexlify(payload)
    except (binascii.Error, ValueError) as exc:
        raise MetadataEncodingError(
            path, f"failed to decode hex bytestring ({exc}): {payload[:_ERROR_VALUE_LIMIT]}"
        ) from exc


def _parse_map(path: str, raw_pairs: list) -> MetaMap:
    pairs: list[Tuple[MetadataValue, MetadataValue]] = []
    for index, raw_pair in enumerate(raw_pairs):
        item_path = f"{path}/{index}"
        if not isinstance(raw_pair, dict):
            raise MetadataTypeMismatchError(
                item_path, f"expected map pair object, got {_describe(raw_pair)}"
            )
        for required in (MAP_KEY, MAP_VALUE):
            if required not in raw_pair:
                raise MetadataShapeError(item_path, f"missing key {required!r} in map pair")
        if len(raw_pair) != 2:
            raise MetadataShapeError(
                item_path, f"expected exactly keys 'k' and 'v', got {sorted(raw_pair)}"
            )
        key = parse_value(raw_pair[MAP_KEY], path=f"{item_path}/[{MAP_KEY}]")
        value = parse_value(raw_pair[MAP_VALUE], path=f"{item_path}/[{MAP_VALUE}]")
        pairs.append((key, value))

    seen: set[MetadataValue] = set()
    for index, (key, _value) in enumerate(pairs):
        if key in seen:
            raise MetadataDuplicateKeyError(
                f"{path}/{index}", f"duplicate map key {_describe(key.to_python())}"
            )
        seen.add(key)
    return MetaMap(tuple(pairs))


# Encoding -----------------------------------------------------------------


def encode_metadata(values: Mapping[int, Any]) -> dict[str, Any]:
    """Encode native values into the wire format, keyed by decimal strings."""

    result: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key <= MAX_METADATA_KEY:
            raise MetadataUnsupportedTypeError(f"/{key}", "metadata keys must be integers in [0, 2^64-1]")
        result[str(key)] = encode_value(value, path=f"/{key}")
    return result


def encode_value(value: Any, *, path: str = "") -> dict[str, Any]:
    """Encode one native value or :class:`MetadataValue` node.

    Booleans become ``{"int": 1}``/``{"int": 0}`` and will decode as integers.
    Floating point and complex numbers are rejected rather than rounded.
    """

    if isinstance(value, MetadataValue):
        return _encode_node(value, path)
    if isinstance(value, bool):
        return {TAG_INT: 1 if value else 0}
    if isinstance(value, int):
        return {TAG_INT: _check_int_range(path, value)}
    if isinstance(value, str):
        return {TAG_STRING: value}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {TAG_BYTES: bytes(value).hex()}
    if isinstance(value, (float, complex, Decimal, Fraction)):
        raise MetadataUnsupportedTypeError(
            path, f"encoding floating point and complex values unsupported (value: {value!r})"
        )
    if isinstance(value, (list, tuple)):
        return {TAG_LIST: [encode_value(item, path=f"{path}/{index}") for index, item in enumerate(value)]}
    if isinstance(value, dict):
        return {TAG_MAP: _encode_pairs(path, list(value.items()))}
    raise MetadataUnsupportedTypeError(path, f"cannot encode value of unexpected type: {_describe(value)}")


def _encode_node(node: MetadataValue, path: str) -> dict[str, Any]:
    if isinstance(node, MetaInt):
        return {TAG_INT: _check_int_range(path, node.value)}
    if isinstance(node, MetaText):
        return {TAG_STRING: node.value}
    if isinstance(node, MetaBytes):
        return {TAG_BYTES: node.value.hex()}
    if isinstance(node, MetaList):
        return {
            TAG_LIST: [encode_value(item, path=f"{path}/{index}") for index, item in enumerate(node.items)]
        }
    if isinstance(node, MetaMap):
        return {TAG_MAP: _encode_pairs(path, list(node.pairs))}
    raise MetadataUnsupportedTypeError(path, f"unknown metadata node: {_describe(node)}")


def _encode_pairs(path: str, pairs: list) -> list[dict[str, Any]]:
    encoded = []
    for index, (key, value) in enumerate(pairs):
        item_path = f"{path}/{index}"
        encoded.append(
            {
                MAP_KEY: encode_value(key, path=f"{item_path}/[{MAP_KEY}]"),
                MAP_VALUE: encode_value(value, path=f"{item_path}/[{MAP_VALUE}]"),
            }
        )
    return encoded


def _check_int_range(path: str, value: int) -> int:
    if not MIN_METADATA_INT <= value <= MAX_METADATA_INT:
        raise MetadataUnsupportedTypeError(path, f"integer out of metadata range: {value}")
    return value


# JSON text helpers ---------------------------------------------------------


def metadata_from_json(text: str) -> Metadata:
    """Parse JSON text holding a wire-format metadata object."""

    try:
        raw = json.loads(text)
    except ValueError as exc:
        raise MetadataTypeMismatchError("/", f"invalid JSON: {exc}") from exc
    return parse_metadata(raw)


def metadata_to_json(values: Mapping[int, Any], *, indent: int | None = None) -> str:
    return json.dumps(encode_metadata(values), indent=indent)
