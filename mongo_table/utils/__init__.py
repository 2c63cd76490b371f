"""
Utility functions for Mongo-Table.
"""

from .query_utils import (
    ascending_keys,
    text_keys,
    id_filter,
    ids_filter,
    range_filter,
    pattern_filter,
)

__all__ = [
    "ascending_keys",
    "text_keys",
    "id_filter",
    "ids_filter",
    "range_filter",
    "pattern_filter",
]
