"""
In-memory stand-ins for the async database, collection and cursor handles.

Only the subset of query and update operators the table uses is supported.
"""

import copy
import re
from typing import Any, Dict, List, Optional

from pymongo.errors import BulkWriteError, CollectionInvalid, DuplicateKeyError


class FakeCursor:
    """Cursor over a precomputed result list that records when it is closed."""

    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs
        self._position = 0
        self.closed = False
        self.fetched = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed or self._position >= len(self._docs):
            raise StopAsyncIteration
        doc = self._docs[self._position]
        self._position += 1
        self.fetched += 1
        return copy.deepcopy(doc)

    async def to_list(self, length: Optional[int] = None):
        result = []
        async for doc in self:
            result.append(doc)
            if length is not None and len(result) >= length:
                break
        return result

    async def close(self):
        self.closed = True


class FakeCollection:

    def __init__(self, name: str):
        self.name = name
        self.docs: Dict[Any, Dict[str, Any]] = {}
        self.indexes: List[Any] = []
        self.cursors: List[FakeCursor] = []
        self._next_id = 0

    async def create_index(self, keys, **options):
        self.indexes.append((list(keys), options))
        return "_".join(f"{name}_{direction}" for name, direction in keys)

    async def find_one(self, filter=None, projection=None):
        for doc in self._matching(filter or {}):
            if projection:
                return {k: v for k, v in doc.items() if k in projection}
            return copy.deepcopy(doc)
        return None

    def find(self, filter=None, projection=None, skip=0, limit=0, sort=None):
        docs = self._matching(filter or {})
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        if projection:
            docs = [{k: v for k, v in d.items() if k in projection} for d in docs]
        cursor = FakeCursor(docs)
        self.cursors.append(cursor)
        return cursor

    async def insert_one(self, doc):
        self._insert(doc)

    async def insert_many(self, docs):
        for index, doc in enumerate(docs):
            try:
                self._insert(doc)
            except DuplicateKeyError as e:
                raise BulkWriteError({
                    "writeErrors": [{"index": index, "code": 11000, "errmsg": str(e)}],
                    "nInserted": index,
                })

    async def replace_one(self, filter, replacement, upsert=False):
        matches = self._matching(filter)
        if matches:
            new_doc = copy.deepcopy(replacement)
            new_doc["_id"] = matches[0]["_id"]
            self.docs[new_doc["_id"]] = new_doc
        elif upsert:
            new_doc = copy.deepcopy(replacement)
            new_doc.setdefault("_id", filter["_id"])
            self.docs[new_doc["_id"]] = new_doc

    async def bulk_write(self, requests):
        for request in requests:
            await self.replace_one(request._filter, request._doc, upsert=request._upsert)

    async def find_one_and_update(self, filter, update, upsert=False, return_document=None):
        matches = self._matching(filter)
        if matches:
            doc = matches[0]
        elif upsert:
            doc = {"_id": filter["_id"]}
            self.docs[doc["_id"]] = doc
        else:
            return None
        self._apply(doc, update)
        return copy.deepcopy(doc)

    async def update_one(self, filter, update):
        matches = self._matching(filter)
        if matches:
            self._apply(matches[0], update)
        return len(matches[:1])

    async def delete_one(self, filter):
        for doc in self._matching(filter)[:1]:
            del self.docs[doc["_id"]]

    async def delete_many(self, filter):
        matches = self._matching(filter)
        for doc in matches:
            del self.docs[doc["_id"]]
        return len(matches)

    async def count_documents(self, filter):
        return len(self._matching(filter))

    async def distinct(self, field):
        values = []
        for doc in self.docs.values():
            if field in doc and doc[field] not in values:
                values.append(doc[field])
        return values

    def _insert(self, doc):
        if "_id" not in doc:
            self._next_id += 1
            doc["_id"] = f"generated-{self._next_id}"
        if doc["_id"] in self.docs:
            raise DuplicateKeyError(f"duplicate key: {doc['_id']!r}", 11000)
        self.docs[doc["_id"]] = copy.deepcopy(doc)

    def _matching(self, filter):
        return [doc for doc in self.docs.values() if _matches(doc, filter)]

    def _apply(self, doc, update):
        for op, changes in update.items():
            for key, value in changes.items():
                if op == "$set":
                    doc[key] = copy.deepcopy(value)
                elif op == "$addToSet":
                    current = doc.setdefault(key, [])
                    for item in value["$each"]:
                        if item not in current:
                            current.append(item)
                elif op == "$pull":
                    doc[key] = [item for item in doc.get(key, []) if item not in value["$in"]]
                else:
                    raise NotImplementedError(op)


def _matches(doc, filter):
    for field, criteria in filter.items():
        value = doc.get(field)
        if isinstance(criteria, dict) and any(k.startswith("$") for k in criteria):
            for op, arg in criteria.items():
                if op == "$in" and value not in arg:
                    return False
                if op == "$gte" and (value is None or value < arg):
                    return False
                if op == "$lte" and (value is None or value > arg):
                    return False
                if op == "$regex":
                    flags = re.IGNORECASE if "i" in criteria.get("$options", "") else 0
                    if not isinstance(value, str) or not re.search(arg, value, flags):
                        return False
        elif value != criteria:
            return False
    return True


class FakeClient:

    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeDatabase:

    def __init__(self, name: str = "test"):
        self.name = name
        self.client = FakeClient()
        self.collections: Dict[str, FakeCollection] = {}

    async def create_collection(self, name, **options):
        if name in self.collections:
            raise CollectionInvalid(f"collection {name} already exists")
        self.collections[name] = FakeCollection(name)
        self.collections[name].options = options
        return self.collections[name]

    def get_collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]
