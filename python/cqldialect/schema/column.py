from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NoReturn

from ..errors import InvalidArgumentError, UnsupportedOperationError, unsupported
from ..serialize.column_type import ColumnType, Native, NativeType


class ColumnKind(Enum):
    """Column roles, spelled the way system_schema.columns spells them"""

    REGULAR = "regular"
    PARTITION_KEY = "partition_key"
    CLUSTERING = "clustering"
    STATIC = "static"


class ClusteringOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_value(cls, value: ClusteringOrder | str | None) -> ClusteringOrder:
        if value is None:
            return cls.ASC
        if isinstance(value, ClusteringOrder):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized in ("ASC", "DESC"):
                return cls(normalized)
        raise UnsupportedOperationError(
            "clustering order", f'The order by clause must be either "ASC" or "DESC", got {value!r}.'
        )


class MarkerKind(Enum):
    """Fluent role markers, in the order they are resolved on a column"""

    PARTITION = "partition"
    CLUSTERING = "clustering"
    PRIMARY = "primary"
    UNIQUE = "unique"
    INDEX = "index"
    FULLTEXT = "fulltext"
    SPATIAL = "spatial"


MARKER_ORDER: tuple[MarkerKind, ...] = tuple(MarkerKind)


@dataclass(frozen=True)
class KeyDeclaration:
    """
    Partition or clustering key columns declared on a table.

    Column order is significant: it defines partition routing for partition
    keys and intra-partition sort order for clustering keys.
    """

    kind: str
    columns: tuple[str, ...]
    name: str | None = None
    order: ClusteringOrder | None = None

    def __post_init__(self) -> None:
        if self.kind not in ("partition", "clustering"):
            raise InvalidArgumentError(f"Key kind must be partition or clustering, got {self.kind!r}")
        if not self.columns:
            raise InvalidArgumentError("A key declaration needs at least one column")
        if self.kind == "clustering" and self.order is None:
            object.__setattr__(self, "order", ClusteringOrder.ASC)
        if self.kind == "partition" and self.order is not None:
            raise InvalidArgumentError("Partition keys have no sort order")


class ColumnDefinition:
    """
    One column of a table blueprint: its catalog type plus the role markers
    attached to it while the blueprint is being defined.
    """

    def __init__(self, type: ColumnType, name: str, **parameters: Any):
        if not isinstance(type, ColumnType):
            raise InvalidArgumentError(f"Column type must be a ColumnType, got {type!r}")
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("Column name must be a non-empty string")

        self.type: ColumnType = type
        self.name: str = name
        self.is_static: bool = bool(parameters.pop("static", False))
        self.is_change: bool = bool(parameters.pop("change", False))
        self.markers: tuple[tuple[MarkerKind, bool | str], ...] = ()

        for kind in MARKER_ORDER:
            if kind.value in parameters:
                self._mark(kind, parameters.pop(kind.value))

        self.parameters: dict[str, Any] = parameters

    def __repr__(self) -> str:
        return f"ColumnDefinition({self.name!r}, {self.type.cql()!r})"

    @property
    def is_counter(self) -> bool:
        return isinstance(self.type, Native) and self.type.type is NativeType.COUNTER

    def marker(self, kind: MarkerKind) -> bool | str | None:
        for marked, value in self.markers:
            if marked is kind:
                return value
        return None

    def _mark(self, kind: MarkerKind, value: bool | str) -> ColumnDefinition:
        if not isinstance(value, (bool, str)):
            raise InvalidArgumentError(f"{kind.value} marker must be a bool or a name, got {value!r}")
        self.markers = tuple((k, v) for k, v in self.markers if k is not kind) + ((kind, value),)
        return self

    def partition(self, name: bool | str = True) -> ColumnDefinition:
        """Make this column (part of) the partition key"""
        return self._mark(MarkerKind.PARTITION, name)

    def primary(self, name: bool | str = True) -> ColumnDefinition:
        return self._mark(MarkerKind.PRIMARY, name)

    def clustering(self, order: str | ClusteringOrder | None = None) -> ColumnDefinition:
        """Make this column a clustering column, ASC unless told otherwise"""
        if order is None:
            return self._mark(MarkerKind.CLUSTERING, True)
        return self._mark(MarkerKind.CLUSTERING, ClusteringOrder.from_value(order).value)

    def index(self, name: bool | str = True) -> ColumnDefinition:
        """Request a secondary index; False on a changed column drops it"""
        return self._mark(MarkerKind.INDEX, name)

    def static(self, value: bool = True) -> ColumnDefinition:
        self.is_static = value
        return self

    def change(self) -> ColumnDefinition:
        self.is_change = True
        return self

    def unique(self, name: bool | str = True) -> NoReturn:
        raise unsupported("unique indexes")

    def fulltext(self, name: bool | str = True) -> NoReturn:
        raise unsupported("fulltext indexes")

    def spatial_index(self, name: bool | str = True) -> NoReturn:
        raise unsupported("spatial indexes")

    def auto_increment(self) -> NoReturn:
        raise unsupported("auto-increment columns")

    def unsigned(self) -> NoReturn:
        raise unsupported("unsigned columns")

    def nullable(self, value: bool = True) -> NoReturn:
        raise unsupported("nullability constraints", "Every regular column is nullable.")

    def default(self, value: Any) -> NoReturn:
        raise unsupported("column defaults")

    def comment(self, comment: str) -> NoReturn:
        raise unsupported("comments")

    def charset(self, charset: str) -> NoReturn:
        raise unsupported("setting the charset")

    def collation(self, collation: str) -> NoReturn:
        raise unsupported("setting the collation")

    def after(self, column: str) -> NoReturn:
        raise unsupported("column positioning")

    def first(self) -> NoReturn:
        raise unsupported("column positioning")

    def virtual_as(self, expression: str) -> NoReturn:
        raise unsupported("computed columns")

    def stored_as(self, expression: str) -> NoReturn:
        raise unsupported("computed columns")


__all__ = [
    "ColumnKind",
    "ClusteringOrder",
    "MarkerKind",
    "MARKER_ORDER",
    "KeyDeclaration",
    "ColumnDefinition",
]
