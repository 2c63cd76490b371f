"""
Entry points for Mongo-Table.
"""

from .table import create_table, open_table

__all__ = [
    "create_table",
    "open_table",
]
