class DialectError(Exception):
    """Base class for every error raised by the dialect compiler"""


class UnsupportedOperationError(DialectError):
    """The requested relational capability has no CQL equivalent"""

    def __init__(self, feature: str, message: str | None = None):
        self.feature: str = feature
        super().__init__(message or f"This database driver does not support {feature}.")


class InvalidArgumentError(DialectError, ValueError):
    """Malformed input handed to the compiler or serializer"""


class InvalidStateError(DialectError, RuntimeError):
    """The compiler was driven through an incompatible pairing or state"""


def unsupported(feature: str, hint: str | None = None) -> UnsupportedOperationError:
    message = f"This database driver does not support {feature}."
    if hint:
        message = f"{message} {hint}"
    return UnsupportedOperationError(feature, message)


__all__ = [
    "DialectError",
    "UnsupportedOperationError",
    "InvalidArgumentError",
    "InvalidStateError",
    "unsupported",
]
