from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidArgumentError, InvalidStateError, unsupported
from ..grammar import Grammar, escape
from ..serialize.collection import CollectionKind, compile_collection_assignment, compile_collection_values
from .intent import PredicateClause, QueryIntent

Bindings = tuple[Any, ...]


@dataclass(frozen=True)
class CompiledStatement:
    """A CQL statement with `?` placeholders and the values bound to them"""

    cql: str
    bindings: Bindings = ()

    def to_raw_cql(self) -> str:
        """
        Inline the bindings as literals. Placeholders inside quoted strings
        and quoted identifiers are left alone.
        """
        out: list[str] = []
        values = iter(self.bindings)
        quote: str | None = None
        used = 0

        for char in self.cql:
            if quote is not None:
                if char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char == "?":
                try:
                    char = escape(next(values))
                except StopIteration:
                    raise InvalidStateError(f"Statement has more placeholders than bindings: {self.cql}") from None
                used += 1
            out.append(char)

        if used != len(self.bindings):
            raise InvalidStateError(
                f"Statement has {used} placeholder(s) but {len(self.bindings)} binding(s): {self.cql}"
            )
        return "".join(out)

    def __str__(self) -> str:
        return self.cql


class QueryGrammar(Grammar):
    """Compiles query intents into DML"""

    # Components of a select statement, in emission order.
    select_components = ("aggregate", "columns", "from", "wheres", "orders", "limit", "allow_filtering")

    def compile_collection_values(self, kind: CollectionKind | str, value: Any) -> str:
        return compile_collection_values(kind, value)

    # -- select ---------------------------------------------------------

    def compile_select(self, intent: QueryIntent) -> CompiledStatement:
        bindings: list[Any] = []
        parts = []
        for component in self.select_components:
            compiler: Callable[[QueryIntent, list[Any]], str] = getattr(self, f"_compile_{component}")
            part = compiler(intent, bindings)
            if part:
                parts.append(part)
        return CompiledStatement(" ".join(parts), tuple(bindings))

    def _compile_aggregate(self, intent: QueryIntent, bindings: list[Any]) -> str:
        aggregate = intent.aggregation
        if aggregate is None:
            return ""
        return f"select {aggregate.function}({self.columnize(aggregate.columns)}) as aggregate"

    def _compile_columns(self, intent: QueryIntent, bindings: list[Any]) -> str:
        if intent.aggregation is not None:
            return ""
        return f"select {self.columnize(intent.columns or ('*',))}"

    def _compile_from(self, intent: QueryIntent, bindings: list[Any]) -> str:
        return f"from {self.wrap_table(intent.table)}"

    def _compile_wheres(self, intent: QueryIntent, bindings: list[Any]) -> str:
        if not intent.wheres:
            return ""
        return "where " + " and ".join(self.compile_predicate(where, bindings) for where in intent.wheres)

    def _compile_orders(self, intent: QueryIntent, bindings: list[Any]) -> str:
        if not intent.orders:
            return ""
        return "order by " + ", ".join(f"{self.wrap(o.column)} {o.direction}" for o in intent.orders)

    def _compile_limit(self, intent: QueryIntent, bindings: list[Any]) -> str:
        if intent.row_limit is None:
            return ""
        return f"limit {int(intent.row_limit)}"

    def _compile_allow_filtering(self, intent: QueryIntent, bindings: list[Any]) -> str:
        return "allow filtering" if intent.filtering else ""

    # -- predicates -----------------------------------------------------

    def compile_predicate(self, where: PredicateClause, bindings: list[Any]) -> str:
        method = getattr(self, "_where_" + where.operator.replace(" ", "_"), None)
        if method is None:
            return self._where_basic(where, bindings)
        return method(where, bindings)

    def _where_basic(self, where: PredicateClause, bindings: list[Any]) -> str:
        bindings.append(where.value)
        return f"{self.wrap(where.column)} {where.operator} ?"

    def _where_in(self, where: PredicateClause, bindings: list[Any]) -> str:
        values = where.value
        if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
            raise InvalidArgumentError(f"The in operator needs a sequence of values for {where.column!r}")
        values = list(values)
        if not values:
            raise InvalidArgumentError(f"The in operator needs at least one value for {where.column!r}")
        bindings.extend(values)
        return f"{self.wrap(where.column)} in ({self.parameterize(values)})"

    def _where_contains(self, where: PredicateClause, bindings: list[Any]) -> str:
        return self._where_basic(PredicateClause(where.column, "contains", where.value), bindings)

    def _where_contains_key(self, where: PredicateClause, bindings: list[Any]) -> str:
        return self._where_basic(PredicateClause(where.column, "contains key", where.value), bindings)

    def _where_between(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("between predicates", "Use two range comparisons on a clustering column instead.")

    def _where_not_in(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("not in predicates")

    def _where_not_in_raw(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("raw not in predicates")

    def _where_null(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("null predicates")

    def _where_not_null(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("not null predicates")

    def _where_like(self, where: PredicateClause, bindings: list[Any]) -> str:
        raise unsupported("like predicates")

    def _require_wheres(self, intent: QueryIntent, verb: str) -> None:
        if not intent.wheres:
            raise InvalidArgumentError(f"{verb} statements on {intent.table!r} need a where clause")

    # -- insert ---------------------------------------------------------

    def compile_insert(
        self, intent: QueryIntent, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> CompiledStatement:
        """
        Every insert is handled as a batch of rows sharing the first row's
        columns. A single row compiles to one insert, several rows to a
        logged batch.
        """
        if isinstance(values, Mapping):
            rows = [values]
        elif isinstance(values, Sequence) and not isinstance(values, (str, bytes)):
            rows = list(values)
        else:
            raise InvalidArgumentError(
                f"Insert values should be a mapping or a sequence of mappings, got {type(values).__name__}"
            )

        if not rows:
            raise InvalidArgumentError("Insert values should not be empty")

        for row in rows:
            if not isinstance(row, Mapping):
                raise InvalidArgumentError(f"Record value should be a mapping, got {type(row).__name__}")

        columns = list(rows[0].keys())
        for row in rows[1:]:
            if set(row.keys()) != set(columns):
                raise InvalidArgumentError(
                    f"Every inserted row should have the columns {columns!r}, got {list(row.keys())!r}"
                )

        collections = [
            (op.column, compile_collection_values(op.kind, op.values)) for op in intent.insert_collections
        ]
        all_columns = columns + [column for column, _ in collections]
        if not all_columns:
            raise InvalidArgumentError("Insert values should name at least one column")

        table = self.wrap_table(intent.table)
        column_list = self.columnize(all_columns)
        literals = [literal for _, literal in collections]

        statements = []
        bindings: list[Any] = []
        for row in rows:
            params = ["?"] * len(columns) + literals
            statements.append(f"insert into {table} ({column_list}) values ({', '.join(params)})")
            bindings.extend(row[column] for column in columns)

        if len(statements) == 1:
            return CompiledStatement(statements[0], tuple(bindings))

        batch = " ".join(f"{statement};" for statement in statements)
        return CompiledStatement(f"begin batch {batch} apply batch", tuple(bindings))

    # -- update ---------------------------------------------------------

    def compile_update(self, intent: QueryIntent, values: Mapping[str, Any] | None = None) -> CompiledStatement:
        values = values or {}
        if not isinstance(values, Mapping):
            raise InvalidArgumentError(f"Update values should be a mapping, got {type(values).__name__}")

        bindings: list[Any] = []
        assignments = []
        for column, value in values.items():
            assignments.append(f"{self.wrap(column)} = ?")
            bindings.append(value)

        for op in intent.update_collections:
            assignments.append(compile_collection_assignment(self.wrap(op.column), op.kind, op.values, op.verb))

        if not assignments:
            raise InvalidArgumentError(f"Nothing to update on {intent.table!r}")

        self._require_wheres(intent, "Update")
        where = self._compile_wheres(intent, bindings)
        return CompiledStatement(
            f"update {self.wrap_table(intent.table)} set {', '.join(assignments)} {where}", tuple(bindings)
        )

    # -- delete ---------------------------------------------------------

    def compile_delete(self, intent: QueryIntent) -> CompiledStatement:
        self._require_wheres(intent, "Delete")
        bindings: list[Any] = []
        where = self._compile_wheres(intent, bindings)
        return CompiledStatement(f"delete from {self.wrap_table(intent.table)} {where}", tuple(bindings))

    def compile_truncate(self, intent: QueryIntent) -> CompiledStatement:
        return CompiledStatement(f"truncate table {self.wrap_table(intent.table)}")


__all__ = ["CompiledStatement", "QueryGrammar"]
