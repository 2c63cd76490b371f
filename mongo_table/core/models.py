"""
Data models for Mongo-Table.
"""

from typing import Dict, List, Optional, Any, Sequence
from dataclasses import dataclass, field


SCHEMA_KEYS = ("name", "table", "indices", "compound", "text", "ttl")


@dataclass
class TtlIndex:
    """
    Time-to-live index declaration.

    Attributes:
        field: Timestamp field the expiry is computed from
        options: Index options, must contain ``expireAfterSeconds``
    """
    field: str
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.field:
            raise ValueError("requires ttl field")
        if not isinstance(self.options, dict):
            raise ValueError("requires ttl options")
        expire = self.options.get("expireAfterSeconds")
        if expire is None or isinstance(expire, bool) or not isinstance(expire, (int, float)):
            raise ValueError("requires ttl option: expireAfterSeconds")
        if expire < 0:
            raise ValueError("expireAfterSeconds must be >= 0")

    @property
    def expire_after_seconds(self) -> float:
        return self.options["expireAfterSeconds"]

    def to_list(self) -> List[Any]:
        """Convert to the declarative ``[field, options]`` pair."""
        return [self.field, dict(self.options)]

    @classmethod
    def from_value(cls, value: Any) -> "TtlIndex":
        """
        Create from a declarative TTL entry.

        Args:
            value: A ``TtlIndex``, a ``(field, options)`` pair, or a bare field name

        Returns:
            TtlIndex instance
        """
        if isinstance(value, TtlIndex):
            return value
        if isinstance(value, str):
            return cls(field=value, options={})
        if isinstance(value, (list, tuple)) and 1 <= len(value) <= 2:
            options = value[1] if len(value) == 2 else {}
            return cls(field=value[0], options=dict(options or {}))
        raise ValueError(f"Invalid ttl entry: {value!r}")


@dataclass
class TableSchema:
    """
    Declarative description of a table: its collection name, the indexes
    to provision and the options passed through to collection creation.

    Attributes:
        name: Collection name
        indices: Fields receiving one ascending single-field index each
        compound: Ordered field groups, one compound ascending index per group
        text: Fields receiving one text index each
        ttl: Time-to-live index declarations
        options: Collection options passed verbatim to ``create_collection``
    """
    name: str
    indices: List[str] = field(default_factory=list)
    compound: List[List[str]] = field(default_factory=list)
    text: List[str] = field(default_factory=list)
    ttl: List[TtlIndex] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("requires name")

        self.indices = _field_list(self.indices, "indices")
        self.text = _field_list(self.text, "text")

        if not isinstance(self.compound, (list, tuple)):
            raise ValueError("compound must be a list of field lists")
        compound = []
        for entry in self.compound:
            fields = _field_list(entry, "compound entry")
            if not fields:
                raise ValueError("compound entry requires at least one field")
            compound.append(fields)
        self.compound = compound

        if not isinstance(self.ttl, (list, tuple)):
            raise ValueError("ttl must be a list")
        self.ttl = [TtlIndex.from_value(entry) for entry in self.ttl]

        self.options = dict(self.options or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the declarative dictionary form."""
        result = {
            "name": self.name,
            "indices": list(self.indices),
            "compound": [list(fields) for fields in self.compound],
            "text": list(self.text),
            "ttl": [entry.to_list() for entry in self.ttl],
        }
        result.update(self.options)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableSchema":
        """
        Create from the declarative dictionary form.

        ``table`` is accepted as an alias for ``name``. Keys that are not
        part of the schema are collected into ``options``.

        Args:
            data: Declarative schema dictionary

        Returns:
            TableSchema instance
        """
        if isinstance(data, TableSchema):
            return data
        if not isinstance(data, dict):
            raise ValueError("schema must be a dict")

        options = {k: v for k, v in data.items() if k not in SCHEMA_KEYS}
        return cls(
            name=data.get("name") or data.get("table"),
            indices=data.get("indices") or [],
            compound=data.get("compound") or [],
            text=data.get("text") or [],
            ttl=data.get("ttl") or [],
            options=options,
        )


def _field_list(value: Optional[Sequence[str]], label: str) -> List[str]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"{label} must be a list of field names")
    for name in value:
        if not name or not isinstance(name, str):
            raise ValueError(f"{label} contains an invalid field name: {name!r}")
    return list(value)
