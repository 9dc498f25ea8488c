from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, NoReturn

from ..config import DialectConfig
from ..enums import Consistency
from ..errors import InvalidArgumentError, InvalidStateError, unsupported
from ..session import Executor, RequestResult
from .blueprint import Blueprint
from .column import KeyDeclaration
from .grammar import SchemaGrammar
from .processor import (
    ColumnInfo,
    IndexInfo,
    TableInfo,
    ViewInfo,
    process_columns,
    process_indexes,
    process_keys,
    process_tables,
    process_views,
)

logger = logging.getLogger(__name__)

BlueprintCallback = Callable[[Blueprint], Any]


class SchemaBuilder:
    """
    Runs blueprints and keyspace DDL through an executor, and answers
    questions about the schema from the system_schema tables.

    The configured consistency level and warning preference are pushed to
    the executor right before every statement. One builder is meant for one
    unit of work: sharing it between tasks that use different levels needs
    external serialisation.
    """

    def __init__(
        self,
        executor: Executor,
        config: DialectConfig | None = None,
        grammar: SchemaGrammar | None = None,
    ):
        if not isinstance(executor, Executor):
            raise InvalidStateError("Invalid connection selected.")

        self.executor: Executor = executor
        self.config: DialectConfig = config if config is not None else DialectConfig()
        self.grammar: SchemaGrammar = grammar if grammar is not None else SchemaGrammar(self.config)
        if not isinstance(self.grammar, SchemaGrammar):
            raise InvalidStateError("Invalid grammar selected.")

        self._consistency: Consistency | None = None
        self._ignore_warnings: bool = self.config.ignore_warnings

    def set_consistency(self, consistency: Consistency | str) -> SchemaBuilder:
        self._consistency = Consistency.from_value(consistency)
        return self

    def ignore_warnings(self, ignore_warnings: bool = True) -> SchemaBuilder:
        self._ignore_warnings = ignore_warnings
        return self

    def _apply_consistency(self) -> None:
        consistency = self._consistency or self.config.default_consistency
        logger.debug(f"Applying consistency {consistency.value}")
        self.executor.set_consistency(consistency)

    def _apply_ignore_warnings(self) -> None:
        self.executor.set_ignore_warnings(self._ignore_warnings)

    async def _dispatch(self, statement: str) -> RequestResult:
        self._apply_consistency()
        self._apply_ignore_warnings()
        logger.debug(f"Executing: {statement}")
        return await self.executor.execute(statement, ())

    async def _select(self, statement: str) -> list[dict[str, Any]]:
        result = await self._dispatch(statement)
        return list(result.iter_rows())

    # -- blueprints -----------------------------------------------------

    def create_blueprint(self, table: str, callback: BlueprintCallback | None = None) -> Blueprint:
        return Blueprint(table, callback, prefix=self.config.table_prefix)

    async def build(self, blueprint: Blueprint) -> None:
        for statement in blueprint.to_cql(self.grammar):
            await self._dispatch(statement)

    async def create(self, table: str, callback: BlueprintCallback) -> None:
        blueprint = self.create_blueprint(table)
        blueprint.create()
        callback(blueprint)
        await self.build(blueprint)

    async def create_if_not_exists(self, table: str, callback: BlueprintCallback) -> None:
        blueprint = self.create_blueprint(table)
        blueprint.create_if_not_exists()
        callback(blueprint)
        await self.build(blueprint)

    async def table(self, table: str, callback: BlueprintCallback) -> None:
        """Alter an existing table"""
        await self.build(self.create_blueprint(table, callback))

    async def drop(self, table: str) -> None:
        blueprint = self.create_blueprint(table)
        blueprint.drop()
        await self.build(blueprint)

    async def drop_if_exists(self, table: str) -> None:
        blueprint = self.create_blueprint(table)
        blueprint.drop_if_exists()
        await self.build(blueprint)

    async def drop_all_tables(self) -> None:
        tables = await self.get_tables()
        for table in tables:
            await self._dispatch(self.grammar.compile_drop_table_if_exists(table.keyspace, table.name))

    # -- keyspaces ------------------------------------------------------

    async def create_keyspace(
        self, name: str, replication: Mapping[str, Any] | None = None, durable_writes: bool | None = None
    ) -> RequestResult:
        return await self._dispatch(self.grammar.compile_create_keyspace(name, replication, False, durable_writes))

    async def create_keyspace_if_not_exists(
        self, name: str, replication: Mapping[str, Any] | None = None, durable_writes: bool | None = None
    ) -> RequestResult:
        return await self._dispatch(self.grammar.compile_create_keyspace(name, replication, True, durable_writes))

    async def drop_keyspace(self, name: str) -> RequestResult:
        return await self._dispatch(self.grammar.compile_drop_keyspace(name))

    async def drop_keyspace_if_exists(self, name: str) -> RequestResult:
        return await self._dispatch(self.grammar.compile_drop_keyspace_if_exists(name))

    async def create_database(self, name: str) -> RequestResult:
        return await self.create_keyspace(name)

    async def drop_database_if_exists(self, name: str) -> RequestResult:
        return await self.drop_keyspace_if_exists(name)

    # -- introspection --------------------------------------------------

    def get_current_schema_name(self) -> str | None:
        return self.config.keyspace or self.executor.current_keyspace()

    def parse_schema_and_table(self, reference: str) -> tuple[str, str]:
        segments = reference.split(".")
        if len(segments) > 2:
            raise InvalidArgumentError(
                f"Using three-part references is not supported, you may use a builder configured "
                f"for keyspace {segments[0]!r} instead."
            )

        if len(segments) == 2:
            return segments[0], segments[1]

        schema = self.get_current_schema_name()
        if schema is None:
            raise InvalidStateError("Schema name is required.")
        return schema, segments[0]

    def _resolve_keyspace(self, keyspace: str | None) -> str:
        keyspace = keyspace or self.get_current_schema_name()
        if not keyspace:
            raise InvalidStateError("Invalid schema name.")
        return keyspace

    async def get_tables(self, keyspace: str | None = None) -> list[TableInfo]:
        rows = await self._select(self.grammar.compile_tables(self._resolve_keyspace(keyspace)))
        return process_tables(rows)

    async def get_views(self, keyspace: str | None = None) -> list[ViewInfo]:
        rows = await self._select(self.grammar.compile_views(self._resolve_keyspace(keyspace)))
        return process_views(rows)

    async def get_columns(self, table: str) -> list[ColumnInfo]:
        schema, name = self.parse_schema_and_table(table)
        rows = await self._select(self.grammar.compile_columns(schema, self.config.table_prefix + name))
        return process_columns(rows)

    async def get_indexes(self, table: str) -> list[IndexInfo]:
        schema, name = self.parse_schema_and_table(table)
        rows = await self._select(self.grammar.compile_indexes(schema, self.config.table_prefix + name))
        return process_indexes(rows)

    async def get_keys(self, table: str) -> list[KeyDeclaration]:
        return process_keys(await self.get_columns(table))

    async def get_column_listing(self, table: str) -> list[str]:
        return [column.name for column in await self.get_columns(table)]

    async def has_table(self, table: str) -> bool:
        schema, name = self.parse_schema_and_table(table)
        name = self.config.table_prefix + name
        return any(t.name == name for t in await self.get_tables(schema))

    async def has_column(self, table: str, column: str) -> bool:
        return column in await self.get_column_listing(table)

    # -- relational features the store lacks ----------------------------

    def rename(self, from_: str, to: str) -> NoReturn:
        raise unsupported("renaming tables")

    def get_foreign_keys(self, table: str) -> NoReturn:
        raise unsupported("foreign keys")

    def enable_foreign_key_constraints(self) -> NoReturn:
        raise unsupported("foreign keys")

    def disable_foreign_key_constraints(self) -> NoReturn:
        raise unsupported("foreign keys")


__all__ = ["SchemaBuilder"]
