"""
Serialization module
"""

from .collection import (
    CollectionKind,
    CollectionVerb,
    compile_collection_assignment,
    compile_collection_values,
    quote_string,
    scalar_literal,
)
from .column_type import ColumnType, NativeType, parse_type

__all__ = [
    "CollectionKind",
    "CollectionVerb",
    "ColumnType",
    "NativeType",
    "compile_collection_assignment",
    "compile_collection_values",
    "parse_type",
    "quote_string",
    "scalar_literal",
]
