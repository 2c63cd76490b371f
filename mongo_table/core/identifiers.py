"""
Identifier normalization.

Documents carry their identity in the primary field ``_id``; callers
usually supply it as ``id``. Every identity-based table operation goes
through the helpers here exactly once, at its boundary.
"""

from typing import Any, Dict, Mapping, Optional


PRIMARY_KEY = "_id"
EXTERNAL_KEY = "id"


def is_missing(value: Any) -> bool:
    """Return True for values that cannot identify a document."""
    return value is None or (isinstance(value, str) and value == "")


def require_id(id: Any) -> Any:
    """
    Ensure an explicit identifier was given.

    Args:
        id: Identifier argument

    Returns:
        The identifier unchanged

    Raises:
        ValueError: If the identifier is missing
    """
    if is_missing(id):
        raise ValueError("requires id")
    return id


def resolve_id(id: Any, doc: Optional[Mapping[str, Any]] = None) -> Any:
    """
    Resolve the identifier for an operation.

    The explicit argument wins; otherwise the document's ``id`` field is used.

    Args:
        id: Explicit identifier, may be None
        doc: Document that may carry an ``id`` field

    Returns:
        The resolved identifier

    Raises:
        ValueError: If neither source yields an identifier
    """
    if not is_missing(id):
        return id
    if doc is not None and not is_missing(doc.get(EXTERNAL_KEY)):
        return doc[EXTERNAL_KEY]
    raise ValueError("requires id")


def with_primary_id(doc: Mapping[str, Any], force: bool = False) -> Dict[str, Any]:
    """
    Copy the external ``id`` into ``_id``.

    Args:
        doc: Source document, left untouched
        force: Overwrite an existing ``_id`` (and require ``id`` to be present)

    Returns:
        A new dictionary with ``_id`` populated where possible
    """
    result = dict(doc)
    external = result.get(EXTERNAL_KEY)
    if force:
        result[PRIMARY_KEY] = resolve_id(None, result)
    elif is_missing(result.get(PRIMARY_KEY)) and not is_missing(external):
        result[PRIMARY_KEY] = external
    return result
