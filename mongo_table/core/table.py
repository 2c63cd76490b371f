"""
Table abstraction over a provisioned MongoDB collection.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

from pymongo import ReplaceOne, ReturnDocument

from mongo_table.core.identifiers import (
    PRIMARY_KEY,
    EXTERNAL_KEY,
    require_id,
    resolve_id,
    with_primary_id,
)
from mongo_table.core.models import TableSchema
from mongo_table.storage import connection
from mongo_table.storage.provisioner import SchemaProvisioner
from mongo_table.storage.stream import DocumentStream, streamify
from mongo_table.utils.query_utils import (
    descending_sort,
    field_filter,
    id_filter,
    ids_filter,
    now_millis,
    pattern_filter,
    range_filter,
)


Document = Dict[str, Any]


class Table:
    """
    Identifier-keyed document table bound to one provisioned collection.

    All operations are coroutines and may be awaited concurrently. Single
    document writes rely on the server's per-document atomicity; bulk
    operations are not atomic across the batch and surface whatever the
    server's bulk-write contract reports.

    Use ``Table.provision`` (or ``mongo_table.create_table``) to provision the
    schema and obtain a table.
    """

    def __init__(self, db, collection, schema: TableSchema):
        """
        Bind a table to an already provisioned collection.

        Args:
            db: Database handle owning the collection
            collection: Provisioned collection handle
            schema: Schema the collection was provisioned from
        """
        self._db = db
        self._collection = collection
        self.schema = schema

    @classmethod
    async def provision(cls, db, schema: Union[TableSchema, Dict[str, Any]]) -> "Table":
        """
        Provision ``schema`` against ``db`` and return the table.

        Args:
            db: Database handle
            schema: Table schema or its declarative dictionary form

        Returns:
            Table bound to the provisioned collection
        """
        provisioner = SchemaProvisioner(db, schema)
        collection = await provisioner.provision()
        return cls(db, collection, provisioner.schema)

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def db(self):
        """Raw database handle."""
        return self._db

    @property
    def collection(self):
        """Raw collection handle."""
        return self._collection

    def query(self):
        """Return the raw collection handle for custom queries."""
        return self._collection

    # Document store

    async def get(self, id: Any) -> Optional[Document]:
        """
        Get a document by identifier.

        Returns:
            The document, or None if it does not exist
        """
        require_id(id)
        return await self._collection.find_one(id_filter(id))

    async def has(self, id: Any) -> bool:
        """Check whether a document with the identifier exists."""
        require_id(id)
        found = await self._collection.find_one(id_filter(id), projection={PRIMARY_KEY: 1})
        return found is not None

    async def set(self, id: Any, doc: Document, upsert: bool = True) -> Document:
        """
        Replace the document with the given identifier.

        Args:
            id: Identifier; when None, ``doc["id"]`` is used
            doc: Full replacement document
            upsert: Create the document if it does not exist

        Returns:
            The replacement merged with its identifier
        """
        id = resolve_id(id, doc)
        await self._collection.replace_one(id_filter(id), dict(doc), upsert=upsert)
        return {PRIMARY_KEY: id, **doc}

    async def upsert(self, doc: Document, upsert: bool = True) -> Document:
        """Replace or create a document identified by its ``id`` field."""
        return await self.set(None, doc, upsert=upsert)

    async def update(self, id: Any, changes: Document, upsert: bool = True) -> Optional[Document]:
        """
        Merge ``changes`` into the document with the given identifier.

        Args:
            id: Identifier
            changes: Fields to set; other fields are left as they are
            upsert: Create the document if it does not exist

        Returns:
            The updated document, or None if no document matched and
            ``upsert`` is False
        """
        require_id(id)
        return await self._collection.find_one_and_update(
            id_filter(id),
            {"$set": dict(changes)},
            upsert=upsert,
            return_document=ReturnDocument.AFTER,
        )

    async def insert(self, doc: Document) -> Document:
        """
        Insert a new document as given.

        Raises:
            DuplicateKeyError: If the identifier already exists
        """
        doc = dict(doc)
        await self._collection.insert_one(doc)
        return doc

    async def create(self, doc: Document) -> Document:
        """
        Insert a new document, using its ``id`` field as primary identifier.

        Raises:
            ValueError: If the document has no ``id``
            DuplicateKeyError: If the identifier already exists
        """
        return await self.insert(with_primary_id(doc, force=True))

    async def delete(self, id: Any) -> Document:
        """
        Delete the document with the given identifier.

        Returns:
            ``{"_id": id, "id": id}`` whether or not a document existed
        """
        require_id(id)
        await self._collection.delete_one(id_filter(id))
        return {PRIMARY_KEY: id, EXTERNAL_KEY: id}

    async def delete_all(self, ids: Iterable[Any]):
        """
        Delete every document whose identifier is in ``ids``.

        Returns:
            The driver's ``DeleteResult``
        """
        return await self._collection.delete_many(ids_filter(_as_list(ids, "ids")))

    async def insert_many(self, docs: Sequence[Document]) -> List[Document]:
        """
        Insert documents in one bulk request.

        Documents without ``_id`` but with ``id`` get ``id`` copied into
        ``_id``. Whether documents before or after a failing one are
        written is up to the server's bulk insert semantics.

        Raises:
            BulkWriteError: If any document could not be inserted
        """
        docs = [with_primary_id(doc) for doc in _as_list(docs, "docs")]
        if not docs:
            return docs
        await self._collection.insert_many(docs)
        return docs

    async def upsert_many(self, docs: Sequence[Document]) -> List[Document]:
        """
        Replace or create each document by identifier in one bulk write.

        The batch is not atomic; a failure surfaces as the driver's
        ``BulkWriteError`` with whatever the server already applied.

        Returns:
            The documents, each with its identifier in ``_id``
        """
        docs = [{**doc, PRIMARY_KEY: _document_id(doc)} for doc in _as_list(docs, "docs")]
        requests = [
            ReplaceOne(id_filter(doc[PRIMARY_KEY]), dict(doc), upsert=True)
            for doc in docs
        ]
        if requests:
            await self._collection.bulk_write(requests)
        return docs

    async def drop(self, filter: Optional[Document] = None):
        """
        Delete every document matching ``filter`` (all documents by default).

        The collection and its indexes are kept.
        """
        return await self._collection.delete_many(filter or {})

    async def close(self) -> None:
        """Close the connection shared by every table on this database."""
        await connection.close(self._db)

    # Query engine

    async def get_all(self, ids: Iterable[Any]) -> List[Document]:
        """Get every document whose identifier is in ``ids``, in no particular order."""
        return await self._collection.find(ids_filter(_as_list(ids, "ids"))).to_list(None)

    async def get_by(self, field: str, value: Any, **find_options: Any) -> List[Document]:
        """
        Get every document whose ``field`` equals ``value``.

        Args:
            field: Field to match, ideally one listed in the schema's indices
            value: Value to match
            find_options: Passed through to ``find`` (projection, sort, skip, limit)
        """
        _require_field(field)
        return await self._collection.find(field_filter(field, value), **find_options).to_list(None)

    async def list(self) -> List[Document]:
        """Get every document in the table."""
        return await self._collection.find({}).to_list(None)

    async def count(self, filter: Optional[Document] = None) -> int:
        """Count the documents matching ``filter``."""
        return await self._collection.count_documents(filter or {})

    async def distinct(self, field: str) -> List[Any]:
        """Get the distinct values of ``field`` across the table."""
        _require_field(field)
        return await self._collection.distinct(field)

    async def search(
        self,
        field: str,
        term: str,
        skip: int = 0,
        limit: int = 100,
        literal: bool = False
    ) -> List[Document]:
        """
        Case-insensitive pattern search on a field.

        ``term`` is a regular expression unless ``literal`` is set, so
        user input such as ``"c++"`` must be searched with ``literal=True``
        or the server rejects the pattern.

        Args:
            field: Field to search
            term: Regular expression matched anywhere in the value
            skip: Number of matches to skip
            limit: Maximum number of matches to return
            literal: Match ``term`` as a plain substring
        """
        _require_field(field)
        _check_page(skip, limit)
        cursor = self._collection.find(
            pattern_filter(field, term, literal=literal), skip=skip, limit=limit
        )
        return await cursor.to_list(None)

    search_fuzzy = search

    async def get_by_sorted_between(
        self,
        filter: Optional[Document] = None,
        max_value: Optional[Union[int, float]] = None,
        min_value: Union[int, float] = 0,
        skip: int = 0,
        limit: int = 100,
        sort_key: str = "created"
    ) -> List[Document]:
        """
        Get documents matching ``filter`` whose ``sort_key`` lies in
        ``[min_value, max_value]``, newest first.

        Args:
            filter: Additional criteria
            max_value: Inclusive upper bound, defaults to now in epoch milliseconds
            min_value: Inclusive lower bound
            skip: Number of matches to skip
            limit: Maximum number of matches to return
            sort_key: Range and sort field

        Raises:
            ValueError: If a bound or pagination argument is out of range
        """
        if filter is None:
            filter = {}
        if not isinstance(filter, dict):
            raise ValueError("requires filter")
        if max_value is None:
            max_value = now_millis()
        if not max_value > 0:
            raise ValueError("requires max > 0")
        if not min_value >= 0:
            raise ValueError("requires min >= 0")
        _check_page(skip, limit)
        _require_field(sort_key)

        cursor = self._collection.find(
            range_filter(filter, sort_key, min_value, max_value),
            sort=descending_sort(sort_key),
            skip=skip,
            limit=limit,
        )
        return await cursor.to_list(None)

    async def push(self, id: Any, key: str, items: List[Any]):
        """
        Add each of ``items`` to the array field ``key`` unless already present.

        Returns:
            The driver's ``UpdateResult``
        """
        _check_array_args(id, key, items)
        return await self._collection.update_one(
            id_filter(id),
            {"$addToSet": {key: {"$each": list(items)}}},
        )

    async def pull(self, id: Any, key: str, items: List[Any]):
        """
        Remove every element of ``items`` from the array field ``key``.

        Returns:
            The driver's ``UpdateResult``
        """
        _check_array_args(id, key, items)
        return await self._collection.update_one(
            id_filter(id),
            {"$pull": {key: {"$in": list(items)}}},
        )

    # Streams

    def read_stream(self, filter: Optional[Document] = None, **find_options: Any) -> DocumentStream:
        """
        Stream the documents matching ``filter`` without loading them all.

        Args:
            filter: Query criteria
            find_options: Passed through to ``find``

        Returns:
            Single-pass DocumentStream; close it to release the cursor early
        """
        return streamify(self._collection.find(filter or {}, **find_options))

    def streamify(self, cursor) -> DocumentStream:
        """Wrap a cursor from a custom query in a DocumentStream."""
        return streamify(cursor)

    def __repr__(self) -> str:
        return f"Table(name={self.name!r})"


def _document_id(doc: Document) -> Any:
    try:
        return resolve_id(None, doc)
    except ValueError:
        if PRIMARY_KEY in doc:
            return require_id(doc[PRIMARY_KEY])
        raise


def _as_list(values: Iterable[Any], label: str) -> List[Any]:
    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
        raise ValueError(f"{label} must be a list")
    return list(values)


def _require_field(field: str) -> None:
    if not field or not isinstance(field, str):
        raise ValueError("requires field key")


def _check_page(skip: int, limit: int) -> None:
    if not skip >= 0:
        raise ValueError("requires skip >= 0")
    if not limit >= 1:
        raise ValueError("requires limit >= 1")


def _check_array_args(id: Any, key: str, items: List[Any]) -> None:
    require_id(id)
    _require_field(key)
    if not isinstance(items, list):
        raise ValueError("requires items to be a list")
