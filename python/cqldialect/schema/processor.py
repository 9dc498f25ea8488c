"""
Turns raw system_schema rows into typed results.

Rows are plain dicts keyed by system_schema column names, the shape the
driver's RowFactory produces.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidArgumentError
from ..serialize.column_type import ColumnType, parse_type
from .column import ClusteringOrder, ColumnKind, KeyDeclaration

Row = Mapping[str, Any]


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    type: ColumnType
    kind: ColumnKind
    position: int
    clustering_order: ClusteringOrder | None = None

    @property
    def type_name(self) -> str:
        return self.type.cql()


@dataclass(frozen=True)
class IndexInfo:
    name: str
    columns: tuple[str, ...]
    kind: str


@dataclass(frozen=True)
class TableInfo:
    name: str
    keyspace: str
    comment: str = ""


@dataclass(frozen=True)
class ViewInfo:
    name: str
    keyspace: str
    base_table: str
    where_clause: str = ""


_KIND_RANK = {
    ColumnKind.PARTITION_KEY: 0,
    ColumnKind.CLUSTERING: 1,
    ColumnKind.STATIC: 2,
    ColumnKind.REGULAR: 2,
}


def _require(row: Row, key: str) -> Any:
    try:
        return row[key]
    except KeyError:
        raise InvalidArgumentError(f"Catalog row is missing {key!r}: {dict(row)!r}") from None


def process_columns(rows: Iterable[Row]) -> list[ColumnInfo]:
    """
    Partition keys first, then clustering columns, each by key position;
    static and regular columns follow in name order.
    """
    columns: list[ColumnInfo] = []
    for row in rows:
        kind = ColumnKind(_require(row, "kind"))
        order = str(row.get("clustering_order") or "none").upper()
        columns.append(
            ColumnInfo(
                name=_require(row, "column_name"),
                type=parse_type(_require(row, "type")),
                kind=kind,
                position=int(row.get("position", -1)),
                clustering_order=ClusteringOrder(order) if kind is ColumnKind.CLUSTERING and order != "NONE" else None,
            )
        )

    def sort_key(column: ColumnInfo) -> tuple[int, int, str]:
        rank = _KIND_RANK[column.kind]
        position = column.position if rank < 2 else 0
        return rank, position, column.name

    return sorted(columns, key=sort_key)


def process_keys(columns: Iterable[ColumnInfo]) -> list[KeyDeclaration]:
    """
    One partition declaration holding every partition column, then one
    clustering declaration per clustering column carrying its own order.
    """
    columns = list(columns)
    partition = tuple(c.name for c in columns if c.kind is ColumnKind.PARTITION_KEY)
    keys = [KeyDeclaration("partition", partition)] if partition else []
    keys.extend(
        KeyDeclaration("clustering", (c.name,), order=c.clustering_order or ClusteringOrder.ASC)
        for c in columns
        if c.kind is ColumnKind.CLUSTERING
    )
    return keys


def process_indexes(rows: Iterable[Row]) -> list[IndexInfo]:
    indexes: list[IndexInfo] = []
    for row in rows:
        options = row.get("options") or {}
        target = options.get("target", "")
        indexes.append(
            IndexInfo(
                name=_require(row, "index_name"),
                columns=tuple(t.strip() for t in target.split(",") if t.strip()),
                kind=str(row.get("kind", "")).lower(),
            )
        )
    return sorted(indexes, key=lambda index: index.name)


def process_tables(rows: Iterable[Row]) -> list[TableInfo]:
    tables = [
        TableInfo(
            name=_require(row, "table_name"),
            keyspace=_require(row, "keyspace_name"),
            comment=row.get("comment") or "",
        )
        for row in rows
    ]
    return sorted(tables, key=lambda table: table.name)


def process_views(rows: Iterable[Row]) -> list[ViewInfo]:
    views = [
        ViewInfo(
            name=_require(row, "view_name"),
            keyspace=_require(row, "keyspace_name"),
            base_table=_require(row, "base_table_name"),
            where_clause=row.get("where_clause") or "",
        )
        for row in rows
    ]
    return sorted(views, key=lambda view: view.name)


__all__ = [
    "ColumnInfo",
    "IndexInfo",
    "TableInfo",
    "ViewInfo",
    "process_columns",
    "process_keys",
    "process_indexes",
    "process_tables",
    "process_views",
]
