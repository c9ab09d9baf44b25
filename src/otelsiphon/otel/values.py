"""
OTLP AnyValue decoding.

OTLP/JSON carries values as objects where exactly one of ``stringValue``,
``boolValue``, ``intValue``, ``doubleValue``, ``bytesValue``, ``arrayValue``
or ``kvlistValue`` is set. Raw mappings are first parsed into a closed sum
type (one frozen dataclass per variant plus ``ABSENT``) and then folded into
plain Python data.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, assert_never

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

OtelValue = (
    str
    | int
    | float
    | bool
    | None
    | list["OtelValue"]
    | dict[str, "OtelValue"]
)


@dataclass(frozen=True)
class AbsentValue:
    """No union member populated (or no value at all)."""


ABSENT = AbsentValue()


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class IntValue:
    """64-bit integer, kept in its decimal-string wire form."""

    value: str | int


@dataclass(frozen=True)
class DoubleValue:
    value: float | int | str


@dataclass(frozen=True)
class BytesValue:
    """Raw bytes, kept base64-encoded."""

    value: str


@dataclass(frozen=True)
class ArrayValue:
    values: tuple[AnyValue, ...]


@dataclass(frozen=True)
class KeyValueListValue:
    values: tuple[tuple[str, AnyValue], ...]


AnyValue = (
    AbsentValue
    | StringValue
    | BoolValue
    | IntValue
    | DoubleValue
    | BytesValue
    | ArrayValue
    | KeyValueListValue
)


def _values_of(container: Any) -> list[Any]:
    # ``arrayValue: {}`` and ``kvlistValue: {}`` are valid empty containers.
    if not isinstance(container, Mapping):
        return []
    values = container.get("values")
    if not isinstance(values, list):
        return []
    return values


def parse_key_values(
    raw: Any,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> tuple[tuple[str, AnyValue], ...]:
    """Parse an OTLP KeyValue sequence, skipping entries without a string key."""
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return ()

    pairs: list[tuple[str, AnyValue]] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        key = entry.get("key")
        if not isinstance(key, str):
            continue
        pairs.append(
            (key, parse_any_value(entry.get("value"), max_depth=max_depth, _depth=_depth))
        )
    return tuple(pairs)


def parse_any_value(
    raw: Any,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> AnyValue:
    """
    Parse an OTLP/JSON AnyValue mapping into its sum-type variant.

    Members are checked in precedence order string, bool, int, double,
    bytes, array, kvlist. A member explicitly set to ``null`` is treated as
    unset. Containers nested ``max_depth`` levels deep are cut off and
    become ``ABSENT``.

    Args:
        raw: Decoded JSON object, or None
        max_depth: Maximum number of nested array/kvlist levels

    Returns:
        The populated variant, or ``ABSENT`` for missing/empty/malformed input
    """
    if not isinstance(raw, Mapping):
        return ABSENT

    if raw.get("stringValue") is not None:
        return StringValue(raw["stringValue"])
    if raw.get("boolValue") is not None:
        return BoolValue(raw["boolValue"])
    if raw.get("intValue") is not None:
        return IntValue(raw["intValue"])
    if raw.get("doubleValue") is not None:
        return DoubleValue(raw["doubleValue"])
    if raw.get("bytesValue") is not None:
        return BytesValue(raw["bytesValue"])

    if raw.get("arrayValue") is not None:
        if _depth >= max_depth:
            logger.debug("Dropping arrayValue nested deeper than %d levels", max_depth)
            return ABSENT
        return ArrayValue(
            tuple(
                parse_any_value(item, max_depth=max_depth, _depth=_depth + 1)
                for item in _values_of(raw["arrayValue"])
            )
        )

    if raw.get("kvlistValue") is not None:
        if _depth >= max_depth:
            logger.debug("Dropping kvlistValue nested deeper than %d levels", max_depth)
            return ABSENT
        return KeyValueListValue(
            parse_key_values(
                _values_of(raw["kvlistValue"]), max_depth=max_depth, _depth=_depth + 1
            )
        )

    # Empty union: permissive, not an error.
    return ABSENT


def to_plain(value: AnyValue) -> OtelValue:
    """Fold a parsed AnyValue into plain Python data."""
    if isinstance(value, AbsentValue):
        return None
    if isinstance(value, (StringValue, BoolValue, IntValue, DoubleValue, BytesValue)):
        return value.value
    if isinstance(value, ArrayValue):
        return [to_plain(item) for item in value.values]
    if isinstance(value, KeyValueListValue):
        # Repeated keys: last occurrence wins.
        return {key: to_plain(item) for key, item in value.values}
    assert_never(value)


def decode_value(raw: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> OtelValue:
    """Decode an OTLP/JSON AnyValue into plain Python data (None if absent)."""
    return to_plain(parse_any_value(raw, max_depth=max_depth))


def decode_key_value_list(
    raw: Any, *, max_depth: int = DEFAULT_MAX_DEPTH
) -> dict[str, OtelValue]:
    """
    Decode an OTLP KeyValue sequence into a mapping.

    Absent input yields an empty mapping. Keys keep their first-seen
    position; a repeated key takes the value of its last occurrence.
    """
    return {
        key: to_plain(value)
        for key, value in parse_key_values(raw, max_depth=max_depth)
    }
