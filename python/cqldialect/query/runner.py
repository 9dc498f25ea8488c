from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..config import DialectConfig
from ..enums import Consistency
from ..errors import InvalidStateError
from ..session import Executor, RequestResult
from .grammar import CompiledStatement, QueryGrammar
from .intent import QueryIntent

logger = logging.getLogger(__name__)


class QueryRunner:
    """
    Compiles query intents and sends them through an executor.

    The consistency level is picked per statement: the intent's own level,
    then the one set on the runner, then the configured default. Executor
    errors propagate unchanged; nothing is retried.
    """

    def __init__(
        self,
        executor: Executor,
        config: DialectConfig | None = None,
        grammar: QueryGrammar | None = None,
    ):
        if not isinstance(executor, Executor):
            raise InvalidStateError("Invalid connection selected.")

        self.executor: Executor = executor
        self.config: DialectConfig = config if config is not None else DialectConfig()
        self.grammar: QueryGrammar = grammar if grammar is not None else QueryGrammar(self.config)
        if not isinstance(self.grammar, QueryGrammar):
            raise InvalidStateError("Invalid grammar selected.")

        self._consistency: Consistency | None = None
        self._ignore_warnings: bool = self.config.ignore_warnings

    def set_consistency(self, consistency: Consistency | str) -> QueryRunner:
        self._consistency = Consistency.from_value(consistency)
        return self

    def ignore_warnings(self, ignore_warnings: bool = True) -> QueryRunner:
        self._ignore_warnings = ignore_warnings
        return self

    async def _dispatch(self, intent: QueryIntent, statement: CompiledStatement) -> RequestResult:
        consistency = intent.consistency or self._consistency or self.config.default_consistency
        logger.debug(f"Applying consistency {consistency.value}")
        self.executor.set_consistency(consistency)
        self.executor.set_ignore_warnings(self._ignore_warnings)

        logger.debug(f"Executing: {statement.cql}")
        return await self.executor.execute(statement.cql, statement.bindings)

    async def select(self, intent: QueryIntent) -> list[dict[str, Any]]:
        result = await self._dispatch(intent, self.grammar.compile_select(intent))
        return list(result.iter_rows())

    async def aggregate(self, intent: QueryIntent, function: str, column: str = "*") -> Any:
        rows = await self.select(intent.aggregate(function, (column,)))
        if not rows:
            return None
        return rows[0].get("aggregate")

    async def count(self, intent: QueryIntent) -> int:
        return int(await self.aggregate(intent, "count") or 0)

    async def insert(
        self, intent: QueryIntent, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> RequestResult:
        return await self._dispatch(intent, self.grammar.compile_insert(intent, values))

    async def update(self, intent: QueryIntent, values: Mapping[str, Any] | None = None) -> RequestResult:
        return await self._dispatch(intent, self.grammar.compile_update(intent, values))

    async def delete(self, intent: QueryIntent) -> RequestResult:
        return await self._dispatch(intent, self.grammar.compile_delete(intent))

    async def truncate(self, intent: QueryIntent) -> RequestResult:
        return await self._dispatch(intent, self.grammar.compile_truncate(intent))


__all__ = ["QueryRunner"]
