"""
Schema provisioning for Mongo-Table.

Turns a declarative ``TableSchema`` into a collection and its indexes.
Steps run one after another, each awaited before the next, so the index
build order is the declaration order and the server never receives
concurrent index builds from one table.
"""

import logging
from typing import Any, Dict, List, Union

from pymongo.errors import CollectionInvalid, OperationFailure

from mongo_table.core.models import TableSchema
from mongo_table.utils.query_utils import ascending_keys, text_keys


logger = logging.getLogger(__name__)

NAMESPACE_EXISTS = 48


class SchemaProvisioner:
    """
    Creates the backing collection and every declared index for a schema.
    """

    def __init__(self, db, schema: Union[TableSchema, Dict[str, Any]]):
        """
        Initialize the provisioner.

        Args:
            db: Database handle (``AsyncDatabase`` or compatible)
            schema: Table schema, or its declarative dictionary form

        Raises:
            ValueError: If the schema is invalid
        """
        self.db = db
        self.schema = TableSchema.from_dict(schema)

    async def provision(self):
        """
        Run the full provisioning sequence.

        Returns:
            The provisioned collection handle
        """
        await self.create_collection()
        collection = self.db.get_collection(self.schema.name)

        created = []
        created += await self.create_indexes(collection)
        created += await self.create_compound_indexes(collection)
        created += await self.create_text_indexes(collection)
        created += await self.create_ttl_indexes(collection)

        logger.debug(f"Provisioned {self.schema.name} with indexes {created}")
        return collection

    async def create_collection(self) -> bool:
        """
        Create the collection with the schema's passthrough options.

        An already existing collection is not an error, whether the driver
        detects it up front or the server reports it (NamespaceExists).

        Returns:
            True if the collection was created, False if it already existed
        """
        try:
            await self.db.create_collection(self.schema.name, **self.schema.options)
        except CollectionInvalid as e:
            logger.info(f"Collection {self.schema.name} not created: {str(e)}")
            return False
        except OperationFailure as e:
            if e.code != NAMESPACE_EXISTS:
                raise
            logger.info(f"Collection {self.schema.name} already exists: {str(e)}")
            return False
        return True

    async def create_indexes(self, collection) -> List[str]:
        """Create one ascending single-field index per ``indices`` entry."""
        names = []
        for field in self.schema.indices:
            names.append(await self._create_index(collection, ascending_keys(field)))
        return names

    async def create_compound_indexes(self, collection) -> List[str]:
        """Create one compound ascending index per ``compound`` entry."""
        names = []
        for fields in self.schema.compound:
            names.append(await self._create_index(collection, ascending_keys(*fields)))
        return names

    async def create_text_indexes(self, collection) -> List[str]:
        """Create one text index per ``text`` entry."""
        names = []
        for field in self.schema.text:
            names.append(await self._create_index(collection, text_keys(field)))
        return names

    async def create_ttl_indexes(self, collection) -> List[str]:
        """Create one time-to-live index per ``ttl`` entry."""
        names = []
        for entry in self.schema.ttl:
            names.append(
                await self._create_index(collection, ascending_keys(entry.field), **entry.options)
            )
        return names

    async def _create_index(self, collection, keys, **options) -> str:
        name = await collection.create_index(keys, **options)
        logger.debug(f"Index {name} ready on {self.schema.name}")
        return name


async def provision(db, schema: Union[TableSchema, Dict[str, Any]]):
    """
    Provision a schema against a database handle.

    Args:
        db: Database handle
        schema: Table schema or its declarative dictionary form

    Returns:
        The provisioned collection handle
    """
    return await SchemaProvisioner(db, schema).provision()
