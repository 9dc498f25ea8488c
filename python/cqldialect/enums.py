from __future__ import annotations

from enum import Enum

from .errors import InvalidArgumentError


class Consistency(Enum):
    """Per-statement consistency levels understood by the store"""

    All = "ALL"
    Any = "ANY"
    EachQuorum = "EACH_QUORUM"
    LocalOne = "LOCAL_ONE"
    LocalQuorum = "LOCAL_QUORUM"
    LocalSerial = "LOCAL_SERIAL"
    One = "ONE"
    Quorum = "QUORUM"
    Serial = "SERIAL"
    Three = "THREE"
    Two = "TWO"

    @property
    def is_serial(self) -> bool:
        return self in (Consistency.Serial, Consistency.LocalSerial)

    @classmethod
    def from_value(cls, value: Consistency | str) -> Consistency:
        """
        Accepts a member, its CQL spelling ("LOCAL_QUORUM", "local_quorum")
        or its member name ("LocalQuorum").
        """
        if isinstance(value, Consistency):
            return value
        if not isinstance(value, str):
            raise InvalidArgumentError(f"Consistency level must be a string, got {type(value).__name__}")

        normalized = value.strip().upper()
        for member in cls:
            if member.value == normalized or member.name.upper() == normalized:
                return member

        raise InvalidArgumentError(f"Unknown consistency level: {value!r}")


__all__ = ["Consistency"]
