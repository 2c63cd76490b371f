"""
Mongo-Table: schema-driven table interface over MongoDB collections.
"""

from .core import Table, TableSchema, TtlIndex
from .storage import DocumentStream, SchemaProvisioner, streamify
from .storage.connection import connect
from .api import create_table, open_table

__version__ = "0.1.0"

__all__ = [
    "Table",
    "TableSchema",
    "TtlIndex",
    "DocumentStream",
    "SchemaProvisioner",
    "streamify",
    "connect",
    "create_table",
    "open_table",
]
