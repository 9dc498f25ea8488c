from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any

from .enums import Consistency
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_REPLICATION: Mapping[str, Any] = MappingProxyType({"class": "SimpleStrategy", "replication_factor": 1})

_KEYSPACE_NAME = re.compile(r"\w{1,48}")
_KNOWN_KEYS = {"keyspace", "database", "consistency", "ignore_warnings", "prefix", "table_prefix", "replication"}


@dataclass(frozen=True)
class DialectConfig:
    """
    Settings shared by the grammars, the schema builder and the query runner.

    Attributes:
        keyspace: keyspace every table reference is qualified with. None
            leaves table references unqualified.
        default_consistency: level applied to statements that do not carry
            one of their own.
        ignore_warnings: whether the executor should drop server warnings
            instead of logging them.
        table_prefix: prepended to every table name.
        replication: replication map used by keyspace creation when the
            caller does not pass one.
    """

    keyspace: str | None = None
    default_consistency: Consistency = Consistency.LocalOne
    ignore_warnings: bool = False
    table_prefix: str = ""
    replication: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.keyspace is not None and (
            not isinstance(self.keyspace, str) or not _KEYSPACE_NAME.fullmatch(self.keyspace)
        ):
            raise InvalidArgumentError(
                f"keyspace must be 1-48 alphanumeric or underscore characters, got {self.keyspace!r}"
            )
        if not isinstance(self.default_consistency, Consistency):
            raise InvalidArgumentError(
                f"default_consistency must be a Consistency, got {type(self.default_consistency).__name__}"
            )
        if self.default_consistency.is_serial:
            raise InvalidArgumentError("default_consistency cannot be a serial consistency level")
        if not isinstance(self.table_prefix, str):
            raise InvalidArgumentError("table_prefix must be a string")
        if self.replication is not None and "class" not in self.replication:
            raise InvalidArgumentError("replication must name a replication strategy class")

    @property
    def keyspace_replication(self) -> Mapping[str, Any]:
        return self.replication if self.replication is not None else DEFAULT_REPLICATION

    def with_keyspace(self, keyspace: str | None) -> DialectConfig:
        return replace(self, keyspace=keyspace)

    def with_consistency(self, consistency: Consistency | str) -> DialectConfig:
        return replace(self, default_consistency=Consistency.from_value(consistency))

    def with_ignore_warnings(self, ignore_warnings: bool = True) -> DialectConfig:
        return replace(self, ignore_warnings=ignore_warnings)

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> DialectConfig:
        """Build a config from a plain connection-settings mapping"""
        unknown = sorted(set(settings) - _KNOWN_KEYS)
        if unknown:
            logger.debug(f"Ignoring connection settings not used by the dialect: {', '.join(unknown)}")

        consistency = settings.get("consistency")
        return cls(
            keyspace=settings.get("keyspace", settings.get("database")),
            default_consistency=Consistency.LocalOne if consistency is None else Consistency.from_value(consistency),
            ignore_warnings=bool(settings.get("ignore_warnings", False)),
            table_prefix=settings.get("table_prefix", settings.get("prefix", "")) or "",
            replication=settings.get("replication"),
        )


__all__ = ["DialectConfig", "DEFAULT_REPLICATION"]
