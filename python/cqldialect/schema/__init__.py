"""
Schema definition: blueprints, DDL compilation and catalog introspection
"""

from .blueprint import Blueprint, Command
from .builder import SchemaBuilder
from .column import ClusteringOrder, ColumnDefinition, ColumnKind, KeyDeclaration, MarkerKind
from .grammar import SchemaGrammar
from .processor import ColumnInfo, IndexInfo, TableInfo, ViewInfo

__all__ = [
    "Blueprint",
    "Command",
    "SchemaBuilder",
    "SchemaGrammar",
    "ClusteringOrder",
    "ColumnDefinition",
    "ColumnKind",
    "KeyDeclaration",
    "MarkerKind",
    "ColumnInfo",
    "IndexInfo",
    "TableInfo",
    "ViewInfo",
]
