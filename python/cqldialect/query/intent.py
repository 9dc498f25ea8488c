"""
Immutable description of a DML statement.

Every builder method returns a new `QueryIntent`; an intent can be compiled
any number of times and always produces the same statement.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from ..enums import Consistency
from ..errors import InvalidArgumentError, unsupported
from ..serialize.collection import (
    ALLOWED_VERBS,
    CollectionErrorKind,
    CollectionKind,
    CollectionVerb,
    collection_kind,
    collection_verb,
    mk_collection_err,
)

# Operators the compiler renders.
SUPPORTED_OPERATORS = frozenset({"=", ">", ">=", "<", "<=", "in", "contains", "contains key"})

# Predicates that can be recorded on an intent but have no CQL rendering.
REJECTED_OPERATORS = frozenset({"between", "not in", "not in raw", "null", "not null", "like"})

AGGREGATE_FUNCTIONS = frozenset({"count", "min", "max", "sum", "avg"})

_MISSING: Any = object()


@dataclass(frozen=True)
class PredicateClause:
    column: str
    operator: str
    value: Any = None

    def __post_init__(self):
        operator = " ".join(self.operator.lower().split()) if isinstance(self.operator, str) else None
        if operator not in SUPPORTED_OPERATORS and operator not in REJECTED_OPERATORS:
            raise unsupported(
                f"the {self.operator!r} operator",
                "Only =, >, >=, <, <=, in, contains and contains key are supported.",
            )
        object.__setattr__(self, "operator", operator)

    @property
    def is_supported(self) -> bool:
        return self.operator in SUPPORTED_OPERATORS


@dataclass(frozen=True)
class Ordering:
    column: str
    direction: str = "asc"

    def __post_init__(self):
        direction = self.direction.lower()
        if direction not in ("asc", "desc"):
            raise InvalidArgumentError('Order direction must be "asc" or "desc".')
        object.__setattr__(self, "direction", direction)


@dataclass(frozen=True)
class Aggregate:
    function: str
    columns: tuple[str, ...] = ("*",)

    def __post_init__(self):
        function = self.function.lower()
        if function not in AGGREGATE_FUNCTIONS:
            raise InvalidArgumentError(f"Unknown aggregate function {self.function!r}")
        if not self.columns:
            raise InvalidArgumentError("Aggregate needs at least one column")
        object.__setattr__(self, "function", function)


@dataclass(frozen=True)
class CollectionOperation:
    kind: CollectionKind
    column: str
    verb: CollectionVerb
    values: Any

    def __post_init__(self):
        kind = collection_kind(self.kind)
        verb = collection_verb(self.verb)
        if verb not in ALLOWED_VERBS[kind]:
            raise mk_collection_err(CollectionErrorKind.INVALID_VERB, f"{verb.value} on {kind.value}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "verb", verb)


@dataclass(frozen=True)
class QueryIntent:
    table: str
    columns: tuple[str, ...] | None = None
    wheres: tuple[PredicateClause, ...] = ()
    orders: tuple[Ordering, ...] = ()
    row_limit: int | None = None
    filtering: bool = False
    aggregation: Aggregate | None = None
    insert_collections: tuple[CollectionOperation, ...] = ()
    update_collections: tuple[CollectionOperation, ...] = ()
    consistency: Consistency | None = None

    def __post_init__(self):
        if not isinstance(self.table, str) or not self.table:
            raise InvalidArgumentError("Query intent needs a table name")

    def select(self, *columns: str) -> QueryIntent:
        if len(columns) == 1 and not isinstance(columns[0], str):
            columns = tuple(columns[0])
        return replace(self, columns=tuple(columns) or None)

    def _with_where(self, clause: PredicateClause) -> QueryIntent:
        return replace(self, wheres=(*self.wheres, clause))

    def where(self, column: str, operator: Any, value: Any = _MISSING) -> QueryIntent:
        """
        `where("age", ">", 20)`, or `where("id", 5)` for equality.
        Comparing with None records a null check.
        """
        if value is _MISSING:
            operator, value = "=", operator
        if value is None and operator == "=":
            return self.where_null(column)
        return self._with_where(PredicateClause(column, operator, value))

    def where_in(self, column: str, values: Iterable[Any]) -> QueryIntent:
        values = tuple(values)
        if not values:
            raise InvalidArgumentError(f"The in operator needs at least one value for {column!r}")
        return self._with_where(PredicateClause(column, "in", values))

    def where_contains(self, column: str, value: Any) -> QueryIntent:
        return self._with_where(PredicateClause(column, "contains", value))

    def where_contains_key(self, column: str, key: Any) -> QueryIntent:
        return self._with_where(PredicateClause(column, "contains key", key))

    def where_between(self, column: str, values: Iterable[Any]) -> QueryIntent:
        return self._with_where(PredicateClause(column, "between", tuple(values)))

    def where_not_in(self, column: str, values: Iterable[Any], raw: bool = False) -> QueryIntent:
        return self._with_where(PredicateClause(column, "not in raw" if raw else "not in", tuple(values)))

    def where_null(self, column: str) -> QueryIntent:
        return self._with_where(PredicateClause(column, "null"))

    def where_not_null(self, column: str) -> QueryIntent:
        return self._with_where(PredicateClause(column, "not null"))

    def where_like(self, column: str, pattern: str) -> QueryIntent:
        return self._with_where(PredicateClause(column, "like", pattern))

    def order_by(self, column: str, direction: str = "asc") -> QueryIntent:
        return replace(self, orders=(*self.orders, Ordering(column, direction)))

    def limit(self, limit: int | None) -> QueryIntent:
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
            raise InvalidArgumentError(f"Limit must be a positive integer, got {limit!r}")
        return replace(self, row_limit=limit)

    def allow_filtering(self, allow: bool = True) -> QueryIntent:
        return replace(self, filtering=allow)

    def aggregate(self, function: str, columns: Iterable[str] = ("*",)) -> QueryIntent:
        return replace(self, aggregation=Aggregate(function, tuple(columns)))

    def insert_collection(self, kind: CollectionKind | str, column: str, values: Any) -> QueryIntent:
        operation = CollectionOperation(kind, column, CollectionVerb.REPLACE, values)
        return replace(self, insert_collections=(*self.insert_collections, operation))

    def update_collection(
        self,
        kind: CollectionKind | str,
        column: str,
        verb: CollectionVerb | str | None,
        values: Any,
    ) -> QueryIntent:
        operation = CollectionOperation(kind, column, verb, values)
        return replace(self, update_collections=(*self.update_collections, operation))

    def with_consistency(self, consistency: Consistency | str | None) -> QueryIntent:
        if consistency is not None:
            consistency = Consistency.from_value(consistency)
        return replace(self, consistency=consistency)


def table(name: str) -> QueryIntent:
    return QueryIntent(name)


__all__ = [
    "SUPPORTED_OPERATORS",
    "REJECTED_OPERATORS",
    "AGGREGATE_FUNCTIONS",
    "PredicateClause",
    "Ordering",
    "Aggregate",
    "CollectionOperation",
    "QueryIntent",
    "table",
]
