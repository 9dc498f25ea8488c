"""
Literal encoding for CQL collection values and collection mutations.

Collection columns are never bound as placeholders: their values are rendered
inline as CQL literals, `{...}` for sets and maps and `[...]` for lists.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable, Mapping, Set as AbstractSet
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from dateutil.relativedelta import relativedelta

from ..errors import InvalidArgumentError


class CollectionKind(Enum):
    SET = "set"
    LIST = "list"
    MAP = "map"


class CollectionVerb(Enum):
    REPLACE = "replace"
    ADD = "add"
    REMOVE = "remove"
    APPEND = "append"
    PREPEND = "prepend"
    PUT = "put"


class CollectionErrorKind:
    NOT_A_SEQUENCE = "Collection values should be a list, tuple or set"
    NOT_A_MAPPING = "Map values should be a mapping"
    INVALID_MAP_VALUE = "Map values should be numeric or string"
    INVALID_KIND = "Invalid collection type"
    INVALID_VERB = "Invalid collection operation"
    NESTED_COLLECTION = "Collection elements should be scalar values"


# Verbs each collection kind accepts in an update statement.
ALLOWED_VERBS: dict[CollectionKind, frozenset[CollectionVerb]] = {
    CollectionKind.SET: frozenset({CollectionVerb.REPLACE, CollectionVerb.ADD, CollectionVerb.REMOVE}),
    CollectionKind.LIST: frozenset(
        {CollectionVerb.REPLACE, CollectionVerb.APPEND, CollectionVerb.PREPEND, CollectionVerb.REMOVE}
    ),
    CollectionKind.MAP: frozenset({CollectionVerb.REPLACE, CollectionVerb.PUT, CollectionVerb.REMOVE}),
}


def mk_collection_err(kind: str, detail: Any = None) -> InvalidArgumentError:
    if detail is None:
        return InvalidArgumentError(kind)
    return InvalidArgumentError(f"{kind}: {detail}")


def collection_kind(kind: CollectionKind | str) -> CollectionKind:
    if isinstance(kind, CollectionKind):
        return kind
    try:
        return CollectionKind(str(kind).lower())
    except ValueError:
        raise mk_collection_err(CollectionErrorKind.INVALID_KIND, repr(kind)) from None


def collection_verb(verb: CollectionVerb | str | None) -> CollectionVerb:
    if verb is None:
        return CollectionVerb.REPLACE
    if isinstance(verb, CollectionVerb):
        return verb
    try:
        return CollectionVerb(str(verb).lower())
    except ValueError:
        raise mk_collection_err(CollectionErrorKind.INVALID_VERB, repr(verb)) from None


def quote_string(value: str | Iterable[str]) -> str:
    """Quote a string literal, doubling embedded single quotes"""
    if not isinstance(value, str):
        return ", ".join(quote_string(v) for v in value)

    return "'" + value.replace("'", "''") + "'"


def duration_literal(value: relativedelta) -> str:
    """Render a relativedelta as a CQL duration literal, e.g. 1y2mo3d4h"""
    value = value.normalized()
    units = [
        (value.years, "y"),
        (value.months, "mo"),
        (value.days, "d"),
        (value.hours, "h"),
        (value.minutes, "m"),
        (int(value.seconds), "s"),
        (value.microseconds, "us"),
    ]

    if all(amount >= 0 for amount, _ in units):
        sign = ""
    elif all(amount <= 0 for amount, _ in units):
        sign = "-"
    else:
        raise InvalidArgumentError(f"Duration components must share one sign: {value!r}")

    rendered = "".join(f"{abs(amount)}{unit}" for amount, unit in units if amount)
    return sign + (rendered or "0s")


def scalar_literal(value: Any) -> str:
    """Render one non-collection value as a CQL literal"""
    if value is None:
        return "null"
    if isinstance(value, str):
        return quote_string(value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return quote_string(value.isoformat(timespec="milliseconds"))
    if isinstance(value, (date, time)):
        return quote_string(value.isoformat())
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return quote_string(str(value))
    if isinstance(value, relativedelta):
        return duration_literal(value)
    if isinstance(value, Enum):
        return scalar_literal(value.value)

    raise mk_collection_err(CollectionErrorKind.NESTED_COLLECTION, type(value).__name__)


def _elements(value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        raise mk_collection_err(CollectionErrorKind.NOT_A_SEQUENCE, type(value).__name__)
    if isinstance(value, (list, tuple, AbstractSet)):
        return list(value)
    raise mk_collection_err(CollectionErrorKind.NOT_A_SEQUENCE, type(value).__name__)


def _map_value(item: Any) -> str:
    if isinstance(item, bool) or not isinstance(item, (str, int, float, Decimal)):
        raise mk_collection_err(CollectionErrorKind.INVALID_MAP_VALUE, type(item).__name__)
    return scalar_literal(item)


def build_collection_string(kind: CollectionKind | str, value: Any) -> str:
    """Render the comma separated body of a collection literal, without brackets"""
    kind = collection_kind(kind)

    if kind is CollectionKind.MAP:
        if not isinstance(value, Mapping):
            raise mk_collection_err(CollectionErrorKind.NOT_A_MAPPING, type(value).__name__)
        return ", ".join(f"{scalar_literal(k)}:{_map_value(v)}" for k, v in value.items())

    return ", ".join(scalar_literal(element) for element in _elements(value))


def compile_collection_values(kind: CollectionKind | str, value: Any) -> str:
    kind = collection_kind(kind)
    body = build_collection_string(kind, value)

    if kind is CollectionKind.LIST:
        return f"[{body}]"
    return f"{{{body}}}"


def compile_collection_assignment(
    column: str,
    kind: CollectionKind | str,
    value: Any,
    verb: CollectionVerb | str | None = None,
) -> str:
    """
    Render the SET fragment of an update for one collection column.

    `column` must already be wrapped. Without a verb the whole value is
    replaced; with one, the column is combined with the literal using the
    CQL collection operators.
    """
    kind = collection_kind(kind)
    verb = collection_verb(verb)

    if verb not in ALLOWED_VERBS[kind]:
        raise mk_collection_err(CollectionErrorKind.INVALID_VERB, f"{verb.value} on {kind.value}")

    if verb is CollectionVerb.REPLACE:
        return f"{column} = {compile_collection_values(kind, value)}"

    if kind is CollectionKind.MAP and verb is CollectionVerb.REMOVE:
        # Map entries are removed by key: the operand is a set of keys
        keys = list(value.keys()) if isinstance(value, Mapping) else _elements(value)
        return f"{column} = {column} - {compile_collection_values(CollectionKind.SET, keys)}"

    literal = compile_collection_values(kind, value)
    if verb is CollectionVerb.PREPEND:
        return f"{column} = {literal} + {column}"
    if verb is CollectionVerb.REMOVE:
        return f"{column} = {column} - {literal}"
    return f"{column} = {column} + {literal}"


__all__ = [
    "CollectionKind",
    "CollectionVerb",
    "CollectionErrorKind",
    "ALLOWED_VERBS",
    "collection_kind",
    "collection_verb",
    "quote_string",
    "duration_literal",
    "scalar_literal",
    "build_collection_string",
    "compile_collection_values",
    "compile_collection_assignment",
]
