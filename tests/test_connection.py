"""
Tests for the connection provider and entry points.
"""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from pymongo.errors import ServerSelectionTimeoutError

from mongo_table.api import open_table
from mongo_table.storage import connection
from tests.fakes import FakeDatabase


def mock_client(db):
    client = MagicMock()
    client.close = AsyncMock()
    client.get_default_database.return_value = db
    client.__getitem__.return_value = db
    return client


class TestConnect(unittest.IsolatedAsyncioTestCase):
    """Tests for connect and close."""

    async def test_requires_uri(self):
        with self.assertRaises(ValueError):
            await connection.connect(None)
        with self.assertRaises(ValueError):
            await connection.connect("")

    async def test_connect_default_database(self):
        db = MagicMock()
        db.command = AsyncMock(return_value={"ok": 1})
        client = mock_client(db)
        with patch.object(connection, "AsyncMongoClient", return_value=client) as factory:
            result = await connection.connect("mongodb://localhost/app", tz_aware=True)

        self.assertIs(result, db)
        factory.assert_called_once_with("mongodb://localhost/app", tz_aware=True)
        client.get_default_database.assert_called_once_with()
        db.command.assert_awaited_once_with("ping")

    async def test_connect_named_database(self):
        db = MagicMock()
        db.command = AsyncMock()
        client = mock_client(db)
        with patch.object(connection, "AsyncMongoClient", return_value=client):
            result = await connection.connect("mongodb://localhost", database="other")

        self.assertIs(result, db)
        client.__getitem__.assert_called_once_with("other")

    async def test_failed_ping_closes_client(self):
        db = MagicMock()
        db.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        client = mock_client(db)
        with patch.object(connection, "AsyncMongoClient", return_value=client):
            with self.assertRaises(ServerSelectionTimeoutError):
                await connection.connect("mongodb://localhost/app")

        client.close.assert_awaited_once()

    async def test_close(self):
        db = FakeDatabase()
        await connection.close(db)
        self.assertTrue(db.client.closed)


class TestOpenTable(unittest.IsolatedAsyncioTestCase):
    """Tests for open_table."""

    async def test_open_table(self):
        db = FakeDatabase("app")
        with patch("mongo_table.api.table.connect", AsyncMock(return_value=db)) as connect:
            table = await open_table("mongodb://localhost/app", {"name": "users", "indices": ["email"]})

        connect.assert_awaited_once_with("mongodb://localhost/app", database=None)
        self.assertEqual(table.name, "users")
        self.assertEqual(len(db.collections["users"].indexes), 1)

    async def test_invalid_schema_does_not_connect(self):
        with patch("mongo_table.api.table.connect", AsyncMock()) as connect:
            with self.assertRaises(ValueError):
                await open_table("mongodb://localhost/app", {"name": "x", "ttl": [["at", {}]]})
        connect.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
