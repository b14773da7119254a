"""Database layer for the fiscal tax core."""

from fiscal.db.aggregator import IncomeAggregator
from fiscal.db.repository import IncomeRepository
from fiscal.db.schema import create_schema

__all__ = ["IncomeAggregator", "IncomeRepository", "create_schema"]
