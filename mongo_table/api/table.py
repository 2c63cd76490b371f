"""
Main API functions for Mongo-Table.
"""

from typing import Any, Dict, Optional, Union

from mongo_table.core import Table, TableSchema
from mongo_table.storage.connection import connect


async def create_table(db, schema: Union[TableSchema, Dict[str, Any]]) -> Table:
    """
    Provision a schema and return its table.

    Safe to call again for an existing collection; indexes that already
    exist are left as they are and missing ones are created.

    Args:
        db: Database handle from ``connect`` or any ``AsyncDatabase``
        schema: Table schema or its declarative dictionary form

    Returns:
        Table bound to the provisioned collection
    """
    return await Table.provision(db, schema)


async def open_table(
    uri: str,
    schema: Union[TableSchema, Dict[str, Any]],
    database: Optional[str] = None,
    **client_options: Any
) -> Table:
    """
    Connect to a server and provision a schema in one step.

    The schema is validated before connecting.

    Args:
        uri: MongoDB connection string
        schema: Table schema or its declarative dictionary form
        database: Database name; defaults to the database named in the URI
        client_options: Options passed verbatim to ``AsyncMongoClient``

    Returns:
        Table bound to the provisioned collection; ``Table.close`` closes
        the connection
    """
    schema = TableSchema.from_dict(schema)
    db = await connect(uri, database=database, **client_options)
    try:
        return await create_table(db, schema)
    except BaseException:
        await db.client.close()
        raise
