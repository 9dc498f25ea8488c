from collections.abc import Iterator, Sequence
from typing import Any, Protocol, runtime_checkable

from .enums import Consistency


@runtime_checkable
class RequestResult(Protocol):
    def iter_rows(self) -> Iterator[dict[str, Any]]: ...


@runtime_checkable
class Executor(Protocol):
    """
    The connection statements are sent through. Consistency and warning
    handling are connection-level switches, set right before each dispatch.
    """

    async def execute(self, statement: str, bindings: Sequence[Any] = ()) -> RequestResult: ...

    def current_keyspace(self) -> str | None: ...

    def set_consistency(self, consistency: Consistency) -> None: ...

    def set_ignore_warnings(self, ignore_warnings: bool) -> None: ...


__all__ = ["Executor", "RequestResult"]
