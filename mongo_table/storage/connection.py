"""
Connection provider for Mongo-Table.
"""

import logging
from typing import Any, Optional

from pymongo import AsyncMongoClient


logger = logging.getLogger(__name__)


async def connect(uri: Optional[str] = None, database: Optional[str] = None, **client_options: Any):
    """
    Open a client and return a ready database handle.

    Args:
        uri: MongoDB connection string
        database: Database name; defaults to the database named in the URI
        client_options: Options passed verbatim to ``AsyncMongoClient``

    Returns:
        ``AsyncDatabase`` whose ``client`` owns the connection

    Raises:
        ValueError: If no URI is given
    """
    if not uri:
        raise ValueError("requires uri")

    client = AsyncMongoClient(uri, **client_options)
    try:
        db = client[database] if database else client.get_default_database()
        await db.command("ping")
    except BaseException:
        await client.close()
        raise

    logger.info(f"Connected to database {db.name}")
    return db


async def close(db) -> None:
    """
    Close the client owning a database handle.

    Every table bound to the same client becomes unusable.

    Args:
        db: Database handle returned by ``connect``
    """
    await db.client.close()
    logger.info(f"Closed connection to database {db.name}")
