"""
Builders for index key specifications and query filters.
"""

import re
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING, TEXT


IndexKeys = List[Tuple[str, Any]]


def ascending_keys(*fields: str) -> IndexKeys:
    """
    Build an ascending index key specification.

    A single field yields a single-field index; several fields yield one
    compound index covering all of them in the given order.

    Args:
        fields: Field names

    Returns:
        List of (field, direction) pairs
    """
    if not fields:
        raise ValueError("requires at least one index field")
    return [(name, ASCENDING) for name in fields]


def text_keys(field: str) -> IndexKeys:
    """Build a text index key specification for a field."""
    return [(field, TEXT)]


def id_filter(id: Any) -> Dict[str, Any]:
    """Filter matching one document by primary identifier."""
    return {"_id": id}


def ids_filter(ids: Iterable[Any]) -> Dict[str, Any]:
    """Filter matching every document whose identifier is in ``ids``."""
    return {"_id": {"$in": list(ids)}}


def field_filter(field: str, value: Any) -> Dict[str, Any]:
    """Equality filter on a computed field name."""
    return {field: value}


def pattern_filter(
    field: str,
    term: str,
    case_insensitive: bool = True,
    literal: bool = False
) -> Dict[str, Any]:
    """
    Regular-expression filter on a field.

    Args:
        field: Field to match
        term: Pattern to search for anywhere in the value
        case_insensitive: Whether to ignore case
        literal: Escape ``term`` so it matches as a plain substring

    Returns:
        Filter dictionary
    """
    criteria = {"$regex": re.escape(term) if literal else term}
    if case_insensitive:
        criteria["$options"] = "i"
    return {field: criteria}


def range_filter(
    base: Optional[Dict[str, Any]],
    field: str,
    min_value: Any,
    max_value: Any
) -> Dict[str, Any]:
    """
    Combine a filter with a closed range ``[min_value, max_value]`` on a field.

    The range replaces any criteria ``base`` already holds for ``field``.

    Args:
        base: Filter to extend, left untouched
        field: Range field
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound

    Returns:
        New filter dictionary
    """
    result = dict(base or {})
    result[field] = {"$gte": min_value, "$lte": max_value}
    return result


def descending_sort(field: str) -> IndexKeys:
    """Sort specification ordering by ``field`` descending."""
    return [(field, DESCENDING)]


def now_millis() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)
