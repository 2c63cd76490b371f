"""
Pull-based document streams over store cursors.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import pandas as pd


logger = logging.getLogger(__name__)


class DocumentStream:
    """
    Lazy, single-pass sequence of documents backed by a cursor.

    Nothing reads ahead of the consumer: each ``__anext__`` pulls from the
    cursor, which fetches from the server one batch at a time. The cursor
    is closed when the stream is exhausted, when ``aclose`` is called, or
    when an ``async with`` block exits. A closed stream yields nothing.

    Example:
        async with table.read_stream({"kind": "user"}) as stream:
            async for doc in stream:
                ...
    """

    def __init__(self, cursor):
        self._cursor = cursor
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cursor(self):
        return self._cursor

    def __aiter__(self) -> "DocumentStream":
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._cursor.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise

    async def __aenter__(self) -> "DocumentStream":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._cursor.close()
        logger.debug("Document stream closed")

    async def to_list(self) -> List[Dict[str, Any]]:
        """
        Consume the rest of the stream.

        Returns:
            List of the remaining documents
        """
        return [doc async for doc in self]

    async def take(self, count: int) -> AsyncIterator[Dict[str, Any]]:
        """
        Yield at most ``count`` documents, then close the stream.

        Args:
            count: Maximum number of documents to yield
        """
        if count < 0:
            raise ValueError("count must be >= 0")
        try:
            taken = 0
            while taken < count:
                try:
                    doc = await self.__anext__()
                except StopAsyncIteration:
                    return
                taken += 1
                yield doc
        finally:
            await self.aclose()

    async def batch(self, size: int) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Yield the remaining documents in lists of ``size``.

        The last list may be shorter.

        Args:
            size: Number of documents per list
        """
        if size < 1:
            raise ValueError("size must be >= 1")
        chunk = []
        async for doc in self:
            chunk.append(doc)
            if len(chunk) >= size:
                yield chunk
                chunk = []
        if chunk:
            yield chunk

    async def to_dataframe(self, columns: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Consume the rest of the stream into a pandas DataFrame.

        Args:
            columns: Optional column selection and order

        Returns:
            DataFrame with one row per document
        """
        docs = await self.to_list()
        return pd.DataFrame.from_records(docs, columns=columns)


def streamify(cursor) -> DocumentStream:
    """
    Wrap an existing cursor in a ``DocumentStream``.

    Args:
        cursor: Cursor from a custom query on the raw collection

    Returns:
        DocumentStream over the cursor
    """
    return DocumentStream(cursor)
