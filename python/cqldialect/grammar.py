from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence, Set as AbstractSet
from typing import Any

from .config import DialectConfig
from .errors import InvalidArgumentError
from .serialize.collection import compile_collection_values, quote_string, scalar_literal

_BARE_IDENTIFIER = re.compile(r"[a-z_][a-z0-9_]*")

# Reserved words that must be double-quoted when used as identifiers.
RESERVED_KEYWORDS = frozenset(
    {
        "add", "allow", "alter", "and", "apply", "asc", "authorize", "batch", "begin", "by",
        "columnfamily", "create", "delete", "desc", "describe", "drop", "entries", "execute",
        "from", "full", "grant", "if", "in", "index", "infinity", "insert", "into", "keyspace",
        "limit", "modify", "nan", "norecursive", "not", "null", "of", "on", "or", "order",
        "primary", "rename", "replace", "revoke", "schema", "select", "set", "table", "to",
        "token", "truncate", "unlogged", "update", "use", "using", "view", "where", "with",
    }
)


def escape(value: Any) -> str:
    """Render a bound value as an inline literal"""
    if isinstance(value, Mapping):
        return compile_collection_values("map", value)
    if isinstance(value, list):
        return compile_collection_values("list", value)
    if isinstance(value, AbstractSet):
        return compile_collection_values("set", value)
    if isinstance(value, tuple):
        return "(" + ", ".join(scalar_literal(v) for v in value) + ")"
    return scalar_literal(value)


class Grammar:
    """Identifier wrapping and literal quoting shared by the query and schema grammars"""

    def __init__(self, config: DialectConfig | None = None):
        self.config: DialectConfig = config if config is not None else DialectConfig()

    @property
    def keyspace(self) -> str | None:
        return self.config.keyspace

    def wrap_value(self, value: str) -> str:
        if value == "*":
            return value
        if _BARE_IDENTIFIER.fullmatch(value) and value not in RESERVED_KEYWORDS:
            return value
        return '"' + value.replace('"', '""') + '"'

    def wrap(self, value: str) -> str:
        """Wrap a column reference, honouring "col as alias" and dotted segments"""
        if not isinstance(value, str):
            raise InvalidArgumentError(f"Identifier must be a string, got {type(value).__name__}")

        alias = re.split(r"\s+as\s+", value, maxsplit=1, flags=re.IGNORECASE)
        if len(alias) == 2:
            return f"{self.wrap(alias[0])} as {self.wrap_value(alias[1])}"

        return ".".join(self.wrap_value(segment) for segment in value.split("."))

    def wrap_table(self, table: str) -> str:
        """
        Qualify a table with the configured keyspace. A table given as
        "keyspace.table" keeps its own keyspace.
        """
        if "." in table:
            if table.count(".") > 1:
                raise InvalidArgumentError(
                    f"Table {table!r} uses more than two parts, three-part references are not supported."
                )
            keyspace, name = table.split(".", 1)
            return f"{self.wrap_value(keyspace)}.{self.wrap_value(self.config.table_prefix + name)}"

        wrapped = self.wrap_value(self.config.table_prefix + table)
        if self.keyspace:
            return f"{self.wrap_value(self.keyspace)}.{wrapped}"
        return wrapped

    def columnize(self, columns: Iterable[str]) -> str:
        return ", ".join(self.wrap(column) for column in columns)

    def parameterize(self, values: Sequence[Any]) -> str:
        return ", ".join("?" for _ in values)

    def quote_string(self, value: str | Iterable[str]) -> str:
        return quote_string(value)

    def escape(self, value: Any) -> str:
        return escape(value)


__all__ = ["Grammar", "RESERVED_KEYWORDS", "escape"]
