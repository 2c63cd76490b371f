"""
Core abstractions for Mongo-Table
"""

from .models import TableSchema, TtlIndex
from .identifiers import resolve_id, require_id, with_primary_id
from .table import Table

__all__ = [
    "TableSchema",
    "TtlIndex",
    "Table",
    "resolve_id",
    "require_id",
    "with_primary_id",
]
