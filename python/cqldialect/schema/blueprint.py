"""
In-memory description of one create or alter table operation.

A Blueprint collects column definitions and key/index commands while the
caller's definition callback runs, then compiles them into CQL statements
exactly once. Relational DDL that has no CQL counterpart is exposed as
methods that always raise UnsupportedOperationError, so a blueprint that
cannot be realised fails while it is being defined.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

from ..errors import InvalidArgumentError, InvalidStateError, UnsupportedOperationError, unsupported
from ..serialize.column_type import (
    COLLECTION_TYPES,
    Collection,
    ColumnType,
    Frozen,
    Tuple,
    collection,
    native,
)
from .column import MARKER_ORDER, ClusteringOrder, ColumnDefinition, KeyDeclaration, MarkerKind

if TYPE_CHECKING:
    from .grammar import SchemaGrammar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    name: str
    columns: tuple[str, ...] = ()
    index: str | None = None
    order: ClusteringOrder | None = None
    to: str | None = None


def _column_list(columns: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(columns, str):
        return (columns,)
    return tuple(columns)


def _type_parameter(kind: str, parameters: dict[str, Any], key: str) -> Any:
    if key not in parameters:
        raise InvalidArgumentError(f"{kind} columns need a {key}")
    return parameters.pop(key)


class Blueprint:
    def __init__(self, table: str, callback: Callable[[Blueprint], Any] | None = None, prefix: str = ""):
        if not isinstance(table, str) or not table:
            raise InvalidArgumentError("Table name must be a non-empty string")

        self.table: str = table
        self.prefix: str = prefix
        self.columns: list[ColumnDefinition] = []
        self.commands: list[Command] = []
        self._compiled: bool = False

        if callback is not None:
            callback(self)

    def __repr__(self) -> str:
        return f"Blueprint({self.table!r}, columns={[c.name for c in self.columns]})"

    # -- statements -----------------------------------------------------

    def to_cql(self, grammar: SchemaGrammar) -> list[str]:
        """Compile the blueprint into statements. A blueprint compiles once."""
        if self._compiled:
            raise InvalidStateError(f"Blueprint for table {self.table!r} has already been compiled")
        self._compiled = True

        self._resolve_markers()
        self._add_implied_commands()

        statements: list[str] = []
        for command in self.commands:
            statements.extend(grammar.compile_command(self, command))

        logger.debug(f"Blueprint for {self.table} compiled into {len(statements)} statement(s)")
        return statements

    def creating(self) -> bool:
        return any(c.name in ("create", "create_if_not_exists") for c in self.commands)

    def added_columns(self) -> list[ColumnDefinition]:
        return [c for c in self.columns if not c.is_change]

    def partition_keys(self) -> list[KeyDeclaration]:
        return [
            KeyDeclaration("partition", c.columns, c.index)
            for c in self.commands
            if c.name == "partition"
        ]

    def clustering_keys(self) -> list[KeyDeclaration]:
        return [
            KeyDeclaration("clustering", c.columns, c.index, c.order)
            for c in self.commands
            if c.name == "clustering"
        ]

    def requested_roles(self) -> tuple[tuple[ColumnDefinition, MarkerKind, bool | str], ...]:
        """Every (column, marker, value) requested fluently, in resolution order"""
        return tuple(
            (column, kind, value)
            for column in self.columns
            for kind in MARKER_ORDER
            if (value := column.marker(kind)) is not None
        )

    def _resolve_markers(self) -> None:
        # Each pass emits at most one command per column; a column's later
        # markers are picked up by the following passes.
        pending: dict[int, list[tuple[MarkerKind, bool | str]]] = {}
        for column, kind, value in self.requested_roles():
            pending.setdefault(id(column), []).append((kind, value))

        while any(pending.values()):
            for column in self.columns:
                queue = pending.get(id(column))
                if queue:
                    kind, value = queue.pop(0)
                    self._apply_marker(column, kind, value)

    def _apply_marker(self, column: ColumnDefinition, kind: MarkerKind, value: bool | str) -> None:
        create, drop = _MARKER_COMMANDS[kind]

        if value is True:
            getattr(self, create)(column.name)
        elif value is False:
            if column.is_change:
                getattr(self, drop)([column.name])
        else:
            getattr(self, create)(column.name, value)

    def _add_implied_commands(self) -> None:
        if not self.creating() and self.added_columns():
            self.commands.insert(0, Command("add"))

    def _add_command(self, command: Command) -> Command:
        self.commands.append(command)
        return command

    # -- table commands -------------------------------------------------

    def create(self) -> Command:
        return self._add_command(Command("create"))

    def create_if_not_exists(self) -> Command:
        return self._add_command(Command("create_if_not_exists"))

    def drop(self) -> Command:
        return self._add_command(Command("drop"))

    def drop_if_exists(self) -> Command:
        return self._add_command(Command("drop_if_exists"))

    def truncate(self) -> Command:
        return self._add_command(Command("truncate"))

    def drop_column(self, *columns: str | Sequence[str]) -> Command:
        names: list[str] = []
        for column in columns:
            names.extend(_column_list(column))
        return self._add_command(Command("drop_column", tuple(names)))

    def rename_column(self, from_: str, to: str) -> Command:
        """Only clustering columns can be renamed; the store rejects the rest"""
        return self._add_command(Command("rename_column", (from_,), to=to))

    # -- keys and indexes -----------------------------------------------

    def partition(self, columns: str | Sequence[str], name: str | None = None) -> Command:
        """Specify the partition key column(s) for the table"""
        return self._add_command(Command("partition", _column_list(columns), name or None))

    def primary(self, columns: str | Sequence[str], name: str | None = None) -> Command:
        return self.partition(columns, name)

    def clustering(
        self,
        columns: str | Sequence[str],
        order: str | ClusteringOrder | None = None,
        name: str | None = None,
    ) -> Command:
        """Specify the clustering column(s) for the table, ASC by default"""
        resolved = ClusteringOrder.from_value(order)
        if not self._declares_partition_key():
            raise UnsupportedOperationError(
                "clustering keys without a partition key",
                "A partition key must be declared before any clustering key.",
            )
        return self._add_command(Command("clustering", _column_list(columns), name or None, resolved))

    def _declares_partition_key(self) -> bool:
        if any(c.name == "partition" for c in self.commands):
            return True
        return any(c.marker(MarkerKind.PARTITION) or c.marker(MarkerKind.PRIMARY) for c in self.columns)

    def index(self, columns: str | Sequence[str], name: str | None = None) -> Command:
        cols = _column_list(columns)
        if len(cols) != 1:
            raise UnsupportedOperationError(
                "composite secondary indexes", "Secondary indexes cover exactly one column."
            )
        return self._add_command(Command("index", cols, name or self.create_index_name("index", cols)))

    def drop_index(self, index: str | Sequence[str]) -> Command:
        if isinstance(index, str):
            return self._add_command(Command("drop_index", index=index))
        cols = _column_list(index)
        return self._add_command(Command("drop_index", cols, self.create_index_name("index", cols)))

    def create_index_name(self, type: str, columns: Iterable[str]) -> str:
        name = f"{self.prefix}{self.table}_{'_'.join(columns)}_{type}".lower()
        return name.replace("-", "_").replace(".", "_")

    # -- columns --------------------------------------------------------

    def add_column(self, type: str | ColumnType, name: str, **parameters: Any) -> ColumnDefinition:
        if any(c.name == name for c in self.columns):
            raise InvalidArgumentError(f"Column {name!r} is already defined on table {self.table!r}")

        column = ColumnDefinition(self._column_type(type, parameters), name, **parameters)
        self.columns.append(column)
        return column

    def _column_type(self, type: str | ColumnType, parameters: dict[str, Any]) -> ColumnType:
        if isinstance(type, ColumnType):
            return type

        kind = type.lower()
        if kind in ("list", "set"):
            return collection(kind, _type_parameter(kind, parameters, "collection_type"))
        if kind == "map":
            return collection(
                kind,
                _type_parameter(kind, parameters, "collection_type1"),
                _type_parameter(kind, parameters, "collection_type2"),
            )
        if kind == "tuple":
            return Tuple(tuple(native(t) for t in _type_parameter(kind, parameters, "tuple_types")))
        if kind == "frozen":
            inner = self._column_type(_type_parameter(kind, parameters, "frozen_type"), parameters)
            if not isinstance(inner, (Collection, Tuple)):
                raise InvalidArgumentError(f"Only collections and tuples can be frozen, got {inner.cql()}")
            return Frozen(inner)
        return native(kind)

    def static(self, column: str) -> ColumnDefinition:
        for definition in self.columns:
            if definition.name == column:
                return definition.static()
        raise InvalidArgumentError(f"Column {column!r} is not defined on table {self.table!r}")

    def ascii(self, column: str) -> ColumnDefinition:
        return self.add_column("ascii", column)

    def bigint(self, column: str) -> ColumnDefinition:
        return self.add_column("bigint", column)

    def big_integer(self, column: str, auto_increment: bool = False, unsigned: bool = False) -> ColumnDefinition:
        if auto_increment:
            raise unsupported("auto-increment columns")
        return self.add_column("bigint", column)

    def binary(self, column: str, length: int | None = None, fixed: bool = False) -> ColumnDefinition:
        return self.add_column("blob", column)

    def blob(self, column: str) -> ColumnDefinition:
        return self.add_column("blob", column)

    def boolean(self, column: str) -> ColumnDefinition:
        return self.add_column("boolean", column)

    def char(self, column: str, length: int | None = None) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def counter(self, column: str) -> ColumnDefinition:
        return self.add_column("counter", column)

    def date(self, column: str) -> ColumnDefinition:
        return self.add_column("date", column)

    def date_time(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("timestamp", column)

    def date_time_tz(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("timestamp", column)

    def decimal(self, column: str, total: int = 8, places: int = 2) -> ColumnDefinition:
        return self.add_column("decimal", column)

    def double(self, column: str) -> ColumnDefinition:
        return self.add_column("double", column)

    def duration(self, column: str) -> ColumnDefinition:
        return self.add_column("duration", column)

    def float(self, column: str, precision: int = 53) -> ColumnDefinition:
        return self.add_column("float", column)

    def frozen(self, column: str, kind: str, *element_types: str) -> ColumnDefinition:
        """Frozen collection or tuple, e.g. frozen("tags", "set", "text")"""
        if kind == "tuple":
            inner: ColumnType = Tuple(tuple(native(t) for t in element_types))
        elif kind in COLLECTION_TYPES:
            inner = collection(kind, *element_types)
        else:
            raise InvalidArgumentError(f"Only collections and tuples can be frozen, got {kind!r}")
        return self.add_column("frozen", column, frozen_type=inner)

    def inet(self, column: str) -> ColumnDefinition:
        return self.add_column("inet", column)

    def int(self, column: str) -> ColumnDefinition:
        return self.add_column("int", column)

    def integer(self, column: str, auto_increment: bool = False, unsigned: bool = False) -> ColumnDefinition:
        if auto_increment:
            raise unsupported("auto-increment columns")
        return self.add_column("int", column)

    def ip_address(self, column: str = "ip_address") -> ColumnDefinition:
        return self.add_column("inet", column)

    def list_collection(self, column: str, collection_type: str) -> ColumnDefinition:
        return self.add_column("list", column, collection_type=collection_type)

    def long_text(self, column: str) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def mac_address(self, column: str = "mac_address") -> ColumnDefinition:
        return self.text(column)

    def map_collection(self, column: str, collection_type1: str, collection_type2: str) -> ColumnDefinition:
        return self.add_column("map", column, collection_type1=collection_type1, collection_type2=collection_type2)

    def medium_text(self, column: str) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def set_collection(self, column: str, collection_type: str) -> ColumnDefinition:
        return self.add_column("set", column, collection_type=collection_type)

    def small_integer(self, column: str, auto_increment: bool = False, unsigned: bool = False) -> ColumnDefinition:
        if auto_increment:
            raise unsupported("auto-increment columns")
        return self.add_column("smallint", column)

    def smallint(self, column: str) -> ColumnDefinition:
        return self.add_column("smallint", column)

    def string(self, column: str, length: int | None = None) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def text(self, column: str) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def time(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("time", column)

    def time_tz(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("time", column)

    def timestamp(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("timestamp", column)

    def timestamp_tz(self, column: str, precision: int | None = None) -> ColumnDefinition:
        return self.add_column("timestamp", column)

    def timeuuid(self, column: str) -> ColumnDefinition:
        return self.add_column("timeuuid", column)

    def tiny_integer(self, column: str, auto_increment: bool = False, unsigned: bool = False) -> ColumnDefinition:
        if auto_increment:
            raise unsupported("auto-increment columns")
        return self.add_column("tinyint", column)

    def tinyint(self, column: str) -> ColumnDefinition:
        return self.add_column("tinyint", column)

    def tiny_text(self, column: str) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def tuple(self, column: str, *element_types: str) -> ColumnDefinition:
        return self.add_column("tuple", column, tuple_types=element_types)

    def ulid(self, column: str = "ulid", length: int = 26) -> ColumnDefinition:
        return self.char(column, length)

    def uuid(self, column: str = "uuid") -> ColumnDefinition:
        return self.add_column("uuid", column)

    def varchar(self, column: str) -> ColumnDefinition:
        return self.add_column("varchar", column)

    def varint(self, column: str) -> ColumnDefinition:
        return self.add_column("varint", column)

    def year(self, column: str) -> ColumnDefinition:
        return self.add_column("date", column)

    # -- relational DDL without a CQL counterpart ----------------------

    def id(self, column: str = "id") -> NoReturn:
        raise unsupported("auto-increment columns")

    def increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def big_increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def integer_increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def medium_increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def small_increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def tiny_increments(self, column: str) -> NoReturn:
        raise unsupported("auto-increment columns")

    def medium_integer(self, column: str, auto_increment: bool = False, unsigned: bool = False) -> NoReturn:
        raise unsupported("medium integer (3-byte) columns")

    def unsigned_big_integer(self, column: str, auto_increment: bool = False) -> NoReturn:
        raise unsupported("unsigned integer columns")

    def unsigned_integer(self, column: str, auto_increment: bool = False) -> NoReturn:
        raise unsupported("unsigned integer columns")

    def unsigned_medium_integer(self, column: str, auto_increment: bool = False) -> NoReturn:
        raise unsupported("unsigned integer columns")

    def unsigned_small_integer(self, column: str, auto_increment: bool = False) -> NoReturn:
        raise unsupported("unsigned integer columns")

    def unsigned_tiny_integer(self, column: str, auto_increment: bool = False) -> NoReturn:
        raise unsupported("unsigned integer columns")

    def foreign(self, columns: str | Sequence[str], name: str | None = None) -> NoReturn:
        raise unsupported("foreign keys")

    def foreign_id(self, column: str) -> NoReturn:
        raise unsupported("foreign ids")

    def foreign_id_for(self, model: Any, column: str | None = None) -> NoReturn:
        raise unsupported("foreign ids")

    def foreign_uuid(self, column: str) -> NoReturn:
        raise unsupported("foreign keys")

    def foreign_ulid(self, column: str, length: int = 26) -> NoReturn:
        raise unsupported("foreign keys")

    def drop_foreign(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("foreign keys")

    def drop_constrained_foreign_id(self, column: str) -> NoReturn:
        raise unsupported("foreign keys")

    def drop_foreign_id_for(self, model: Any, column: str | None = None) -> NoReturn:
        raise unsupported("foreign keys")

    def json(self, column: str) -> NoReturn:
        raise unsupported("json columns")

    def jsonb(self, column: str) -> NoReturn:
        raise unsupported("jsonb columns")

    def enum(self, column: str, allowed: Sequence[str]) -> NoReturn:
        raise unsupported("enum columns")

    def set(self, column: str, allowed: Sequence[str]) -> NoReturn:
        raise unsupported("set columns", "You can use set_collection instead.")

    def geometry(self, column: str, subtype: str | None = None, srid: int = 0) -> NoReturn:
        raise unsupported("geometry columns")

    def geography(self, column: str, subtype: str | None = None, srid: int = 4326) -> NoReturn:
        raise unsupported("geography columns")

    def vector(self, column: str, dimensions: int | None = None) -> NoReturn:
        raise unsupported("vector columns", "You can use list_collection instead.")

    def computed(self, column: str, expression: str) -> NoReturn:
        raise unsupported("computed columns")

    def unique(self, columns: str | Sequence[str], name: str | None = None) -> NoReturn:
        raise unsupported("unique indexes")

    def fulltext(self, columns: str | Sequence[str], name: str | None = None) -> NoReturn:
        raise unsupported("fulltext indexes")

    def spatial_index(self, columns: str | Sequence[str], name: str | None = None) -> NoReturn:
        raise unsupported("spatial indexes")

    def drop_unique(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("unique indexes")

    def drop_fulltext(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("fulltext indexes")

    def drop_spatial_index(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("spatial indexes")

    def drop_primary(self, index: str | Sequence[str] | None = None) -> NoReturn:
        raise unsupported("dropping a primary index")

    def drop_partition(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("dropping partition indexes")

    def drop_clustering(self, index: str | Sequence[str]) -> NoReturn:
        raise unsupported("dropping clustering indexes")

    def rename(self, to: str) -> NoReturn:
        raise unsupported("renaming tables")

    def rename_index(self, from_: str, to: str) -> NoReturn:
        raise unsupported("renaming indexes")

    def engine(self, engine: str) -> NoReturn:
        raise unsupported("setting the storage engine")

    def innodb(self) -> NoReturn:
        raise unsupported("setting the storage engine")

    def charset(self, charset: str) -> NoReturn:
        raise unsupported("setting the charset")

    def collation(self, collation: str) -> NoReturn:
        raise unsupported("setting the collation")

    def comment(self, comment: str) -> NoReturn:
        raise unsupported("comments")

    def temporary(self) -> NoReturn:
        raise unsupported("temporary tables")


# Marker kind -> (command method, drop method) on Blueprint.
_MARKER_COMMANDS: dict[MarkerKind, tuple[str, str]] = {
    MarkerKind.PARTITION: ("partition", "drop_partition"),
    MarkerKind.CLUSTERING: ("clustering", "drop_clustering"),
    MarkerKind.PRIMARY: ("primary", "drop_primary"),
    MarkerKind.UNIQUE: ("unique", "drop_unique"),
    MarkerKind.INDEX: ("index", "drop_index"),
    MarkerKind.FULLTEXT: ("fulltext", "drop_fulltext"),
    MarkerKind.SPATIAL: ("spatial_index", "drop_spatial_index"),
}


__all__ = ["Blueprint", "Command"]
