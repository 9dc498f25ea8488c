from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from typing_extensions import override

from ..errors import InvalidArgumentError


class NativeType(Enum):
    ASCII = "ascii"
    BIGINT = "bigint"
    BLOB = "blob"
    BOOLEAN = "boolean"
    COUNTER = "counter"
    DATE = "date"
    DECIMAL = "decimal"
    DOUBLE = "double"
    DURATION = "duration"
    FLOAT = "float"
    INET = "inet"
    INT = "int"
    SMALLINT = "smallint"
    TEXT = "text"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMEUUID = "timeuuid"
    TINYINT = "tinyint"
    UUID = "uuid"
    VARCHAR = "varchar"
    VARINT = "varint"


# Abstract (relational-looking) type names and the catalog keyword they map to.
TYPE_ALIASES: dict[str, str] = {
    "string": "varchar",
    "char": "varchar",
    "long_text": "varchar",
    "medium_text": "varchar",
    "tiny_text": "varchar",
    "integer": "int",
    "big_integer": "bigint",
    "small_integer": "smallint",
    "tiny_integer": "tinyint",
    "date_time": "timestamp",
    "date_time_tz": "timestamp",
    "timestamp_tz": "timestamp",
    "time_tz": "time",
    "year": "date",
    "ip_address": "inet",
    "binary": "blob",
}

COLLECTION_TYPES = ("list", "set", "map")


class ColumnType(ABC):
    @abstractmethod
    def cql(self) -> str:
        """Render the type the way it appears in a column definition"""

    def __str__(self) -> str:
        return self.cql()


@dataclass(frozen=True)
class Native(ColumnType):
    type: NativeType

    @override
    def cql(self) -> str:
        return self.type.value


@dataclass(frozen=True)
class Collection(ColumnType):
    pass


@dataclass(frozen=True)
class List(Collection):
    element_type: Native

    @override
    def cql(self) -> str:
        return f"list<{self.element_type.cql()}>"


@dataclass(frozen=True)
class Set(Collection):
    element_type: Native

    @override
    def cql(self) -> str:
        return f"set<{self.element_type.cql()}>"


@dataclass(frozen=True)
class Map(Collection):
    key_type: Native
    value_type: Native

    @override
    def cql(self) -> str:
        return f"map<{self.key_type.cql()}, {self.value_type.cql()}>"


@dataclass(frozen=True)
class Tuple(ColumnType):
    element_types: tuple[Native, ...]

    @override
    def cql(self) -> str:
        return f"tuple<{', '.join(t.cql() for t in self.element_types)}>"


@dataclass(frozen=True)
class Frozen(ColumnType):
    inner: Collection | Tuple

    @override
    def cql(self) -> str:
        return f"frozen<{self.inner.cql()}>"


def native(name: str | NativeType | Native) -> Native:
    """Resolve a scalar catalog type, accepting the abstract aliases"""
    if isinstance(name, Native):
        return name
    if isinstance(name, NativeType):
        return Native(name)
    if not isinstance(name, str):
        raise InvalidArgumentError(f"Column type must be a string, got {type(name).__name__}")

    key = name.strip().lower()
    if key in COLLECTION_TYPES or key in ("tuple", "frozen"):
        raise InvalidArgumentError(f"Collection element type must be a scalar type, got {name!r}")

    key = TYPE_ALIASES.get(key, key)
    try:
        return Native(NativeType(key))
    except ValueError:
        raise InvalidArgumentError(f"Unknown column type: {name!r}") from None


def collection(kind: str, *element_types: str | NativeType | Native) -> Collection:
    elements = [native(t) for t in element_types]
    if any(e.type is NativeType.COUNTER for e in elements):
        raise InvalidArgumentError("Counter columns cannot be used as collection elements")

    if kind == "list" and len(elements) == 1:
        return List(elements[0])
    if kind == "set" and len(elements) == 1:
        return Set(elements[0])
    if kind == "map" and len(elements) == 2:
        return Map(elements[0], elements[1])

    if kind not in COLLECTION_TYPES:
        raise InvalidArgumentError(f"Invalid collection type: {kind!r}")
    raise InvalidArgumentError(
        f"Collection type {kind} takes {2 if kind == 'map' else 1} element type(s), got {len(elements)}"
    )


def parse_type(text: str) -> ColumnType:
    """
    Parse CQL type text, as stored in system_schema.columns, back into a
    ColumnType. Handles scalars, collections, tuples and frozen<...>.
    """
    match = re.fullmatch(r"\s*(\w+)\s*(?:<(.*)>)?\s*", text)
    if match is None:
        raise InvalidArgumentError(f"Cannot parse column type: {text!r}")

    name, args = match.group(1).lower(), match.group(2)
    if args is None:
        return native(name)

    parts = _split_type_args(args)
    if name == "frozen":
        if len(parts) != 1:
            raise InvalidArgumentError(f"Cannot parse column type: {text!r}")
        inner = parse_type(parts[0])
        if not isinstance(inner, (Collection, Tuple)):
            raise InvalidArgumentError(f"Only collections and tuples can be frozen, got {text!r}")
        return Frozen(inner)
    if name == "tuple":
        return Tuple(tuple(native(p) for p in parts))
    return collection(name, *parts)


def _split_type_args(args: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current = ""
    for char in args:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    parts.append(current.strip())
    return parts


__all__ = [
    "NativeType",
    "ColumnType",
    "Native",
    "Collection",
    "List",
    "Set",
    "Map",
    "Tuple",
    "Frozen",
    "TYPE_ALIASES",
    "native",
    "collection",
    "parse_type",
]
