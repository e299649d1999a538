"""Employee queries."""

from kgb_assistant.queries.executor import QueryExecutor

__all__ = ["QueryExecutor"]
