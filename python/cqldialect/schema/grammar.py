from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import InvalidArgumentError, InvalidStateError, UnsupportedOperationError
from ..grammar import Grammar
from ..serialize.collection import scalar_literal
from ..serialize.column_type import Collection
from .blueprint import Blueprint, Command
from .column import ColumnDefinition


class SchemaGrammar(Grammar):
    """Compiles blueprints, keyspace DDL and system_schema lookups into CQL"""

    def compile_command(self, blueprint: Blueprint, command: Command) -> list[str]:
        method = getattr(self, f"compile_{command.name}", None)
        if method is None:
            raise InvalidStateError(f"No schema compiler for command {command.name!r}")

        statements = method(blueprint, command)
        if statements is None:
            return []
        if isinstance(statements, str):
            return [statements]
        return list(statements)

    # -- tables ---------------------------------------------------------

    def compile_create(self, blueprint: Blueprint, command: Command) -> str:
        return self._compile_create_table(blueprint, if_not_exists=False)

    def compile_create_if_not_exists(self, blueprint: Blueprint, command: Command) -> str:
        return self._compile_create_table(blueprint, if_not_exists=True)

    def _compile_create_table(self, blueprint: Blueprint, if_not_exists: bool) -> str:
        partition = [c for key in blueprint.partition_keys() for c in key.columns]
        clustering = [(c, key.order) for key in blueprint.clustering_keys() for c in key.columns]

        self._validate_keys(blueprint, partition, [c for c, _ in clustering])

        definitions = [self._column_definition(c) for c in blueprint.columns]

        partition_cql = self.columnize(partition)
        if len(partition) > 1:
            partition_cql = f"({partition_cql})"
        key_parts = [partition_cql] + [self.wrap(c) for c, _ in clustering]
        definitions.append(f"primary key ({', '.join(key_parts)})")

        cql = "create table {}{} ({})".format(
            "if not exists " if if_not_exists else "",
            self.wrap_table(blueprint.table),
            ", ".join(definitions),
        )

        if clustering:
            orders = ", ".join(f"{self.wrap(c)} {order.value.lower()}" for c, order in clustering)
            cql += f" with clustering order by ({orders})"

        return cql

    def _validate_keys(self, blueprint: Blueprint, partition: list[str], clustering: list[str]) -> None:
        if not partition:
            raise InvalidArgumentError(f"Table {blueprint.table!r} needs at least one partition key column")

        columns = {c.name: c for c in blueprint.columns}
        keys = partition + clustering
        if len(set(keys)) != len(keys):
            raise InvalidArgumentError(f"A column can appear only once in the primary key of {blueprint.table!r}")

        for name in keys:
            column = columns.get(name)
            if column is None:
                raise InvalidArgumentError(f"Key column {name!r} is not defined on table {blueprint.table!r}")
            if isinstance(column.type, Collection):
                raise InvalidArgumentError(f"Key column {name!r} cannot be a non-frozen collection")
            if column.is_static:
                raise InvalidArgumentError(f"Key column {name!r} cannot be static")
            if column.is_counter:
                raise InvalidArgumentError(f"Key column {name!r} cannot be a counter")

        regular = [c for c in blueprint.columns if c.name not in keys]
        for column in regular:
            if column.is_static and column.is_counter:
                raise InvalidArgumentError(f"Counter column {column.name!r} cannot be static")
        if any(c.is_static for c in regular) and not clustering:
            raise InvalidArgumentError(f"Static columns need a clustering key on table {blueprint.table!r}")
        counters = [c for c in regular if c.is_counter]
        if counters and len(counters) != len(regular):
            raise InvalidArgumentError(
                f"Counter tables can hold only counter columns besides the primary key ({blueprint.table!r})"
            )

    def _column_definition(self, column: ColumnDefinition) -> str:
        sql = f"{self.wrap(column.name)} {column.type.cql()}"
        if column.is_static:
            sql += " static"
        return sql

    def compile_add(self, blueprint: Blueprint, command: Command) -> list[str]:
        table = self.wrap_table(blueprint.table)
        return [f"alter table {table} add {self._column_definition(c)}" for c in blueprint.added_columns()]

    def compile_drop_column(self, blueprint: Blueprint, command: Command) -> str:
        columns = self.columnize(command.columns)
        if len(command.columns) > 1:
            columns = f"({columns})"
        return f"alter table {self.wrap_table(blueprint.table)} drop {columns}"

    def compile_rename_column(self, blueprint: Blueprint, command: Command) -> str:
        return "alter table {} rename {} to {}".format(
            self.wrap_table(blueprint.table), self.wrap(command.columns[0]), self.wrap(command.to or "")
        )

    def compile_partition(self, blueprint: Blueprint, command: Command) -> None:
        self._guard_key_change(blueprint, "partition")

    def compile_clustering(self, blueprint: Blueprint, command: Command) -> None:
        self._guard_key_change(blueprint, "clustering")

    def _guard_key_change(self, blueprint: Blueprint, kind: str) -> None:
        # Key commands are folded into the create statement.
        if not blueprint.creating():
            raise UnsupportedOperationError(
                f"changing the {kind} key", "The primary key of an existing table cannot be altered."
            )

    def compile_index(self, blueprint: Blueprint, command: Command) -> str:
        if_not_exists = any(c.name == "create_if_not_exists" for c in blueprint.commands)
        return "create index {}{} on {} ({})".format(
            "if not exists " if if_not_exists else "",
            self.wrap_value(command.index or ""),
            self.wrap_table(blueprint.table),
            self.columnize(command.columns),
        )

    def compile_drop_index(self, blueprint: Blueprint, command: Command) -> str:
        index = self.wrap_value(command.index or "")
        if self.keyspace:
            index = f"{self.wrap_value(self.keyspace)}.{index}"
        return f"drop index {index}"

    def compile_drop(self, blueprint: Blueprint, command: Command) -> str:
        return f"drop table {self.wrap_table(blueprint.table)}"

    def compile_drop_if_exists(self, blueprint: Blueprint, command: Command) -> str:
        return f"drop table if exists {self.wrap_table(blueprint.table)}"

    def compile_truncate(self, blueprint: Blueprint, command: Command) -> str:
        return f"truncate table {self.wrap_table(blueprint.table)}"

    def compile_drop_table_if_exists(self, keyspace: str, table: str) -> str:
        """Drop a table by its catalog name, without applying the table prefix"""
        return f"drop table if exists {self.wrap_value(keyspace)}.{self.wrap_value(table)}"

    # -- keyspaces ------------------------------------------------------

    def compile_create_keyspace(
        self,
        name: str,
        replication: Mapping[str, Any] | None = None,
        if_not_exists: bool = False,
        durable_writes: bool | None = None,
    ) -> str:
        replication = replication if replication is not None else self.config.keyspace_replication
        if "class" not in replication:
            raise InvalidArgumentError("replication must name a replication strategy class")

        options = ", ".join(f"{scalar_literal(str(k))}: {scalar_literal(v)}" for k, v in replication.items())
        cql = "create keyspace {}{} with replication = {{{}}}".format(
            "if not exists " if if_not_exists else "", self.wrap_value(name), options
        )
        if durable_writes is not None:
            cql += f" and durable_writes = {scalar_literal(durable_writes)}"
        return cql

    def compile_drop_keyspace(self, name: str) -> str:
        return f"drop keyspace {self.wrap_value(name)}"

    def compile_drop_keyspace_if_exists(self, name: str) -> str:
        return f"drop keyspace if exists {self.wrap_value(name)}"

    # -- system_schema lookups ------------------------------------------

    def compile_tables(self, keyspace: str) -> str:
        return f"select * from system_schema.tables where keyspace_name = {self.quote_string(keyspace)}"

    def compile_views(self, keyspace: str) -> str:
        return f"select * from system_schema.views where keyspace_name = {self.quote_string(keyspace)}"

    def compile_columns(self, keyspace: str, table: str) -> str:
        return "select * from system_schema.columns where keyspace_name = {} and table_name = {}".format(
            self.quote_string(keyspace), self.quote_string(table)
        )

    def compile_indexes(self, keyspace: str, table: str) -> str:
        return "select * from system_schema.indexes where keyspace_name = {} and table_name = {}".format(
            self.quote_string(keyspace), self.quote_string(table)
        )


__all__ = ["SchemaGrammar"]
