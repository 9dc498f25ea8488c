from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import pytest
from cqldialect import Consistency, DialectConfig


class FakeResult:
    def __init__(self, rows: Sequence[Mapping[str, Any]] = ()):
        self.rows = [dict(row) for row in rows]

    def iter_rows(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)


class FakeExecutor:
    """
    Records every dispatched statement together with the consistency and
    warning state in effect at that moment. Statements starting with a key
    of `responses` get the matching rows back.
    """

    def __init__(
        self,
        keyspace: str | None = None,
        responses: Mapping[str, Sequence[Mapping[str, Any]]] | None = None,
        error: Exception | None = None,
    ):
        self.keyspace = keyspace
        self.responses = dict(responses or {})
        self.error = error
        self.consistency: Consistency | None = None
        self.ignore_warnings = False
        self.calls: list[tuple[str, tuple[Any, ...], Consistency | None, bool]] = []

    async def execute(self, statement: str, bindings: Sequence[Any] = ()) -> FakeResult:
        self.calls.append((statement, tuple(bindings), self.consistency, self.ignore_warnings))
        if self.error is not None:
            raise self.error
        for prefix, rows in self.responses.items():
            if statement.startswith(prefix):
                return FakeResult(rows)
        return FakeResult()

    def current_keyspace(self) -> str | None:
        return self.keyspace

    def set_consistency(self, consistency: Consistency) -> None:
        self.consistency = consistency

    def set_ignore_warnings(self, ignore_warnings: bool) -> None:
        self.ignore_warnings = ignore_warnings

    @property
    def statements(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def config() -> DialectConfig:
    return DialectConfig(keyspace="ks")
