from .config import DialectConfig
from .enums import Consistency
from .errors import DialectError, InvalidArgumentError, InvalidStateError, UnsupportedOperationError
from .query import CompiledStatement, QueryGrammar, QueryIntent, QueryRunner, table
from .schema import Blueprint, SchemaBuilder, SchemaGrammar
from .session import Executor, RequestResult

__all__ = [
    "Blueprint",
    "CompiledStatement",
    "Consistency",
    "DialectConfig",
    "DialectError",
    "Executor",
    "InvalidArgumentError",
    "InvalidStateError",
    "QueryGrammar",
    "QueryIntent",
    "QueryRunner",
    "RequestResult",
    "SchemaBuilder",
    "SchemaGrammar",
    "UnsupportedOperationError",
    "table",
]
