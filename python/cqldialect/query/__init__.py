"""
Query intents, their compilation into DML, and dispatch
"""

from .grammar import CompiledStatement, QueryGrammar
from .intent import QueryIntent, table
from .runner import QueryRunner

__all__ = ["CompiledStatement", "QueryGrammar", "QueryIntent", "QueryRunner", "table"]
