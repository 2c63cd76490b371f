#!/usr/bin/env python
"""
Basic usage example for Mongo-Table.

This script demonstrates how to:
1. Open a table from a declarative schema
2. Write documents
3. Read them back by identifier, index and range
4. Stream query results

Requires a running MongoDB server; set MONGO_URI to point at it.
"""

import asyncio
import logging
import os
import time

from mongo_table import open_table


SCHEMA = {
    "name": "example_posts",
    "indices": ["owner"],
    "compound": [["owner", "created"]],
    "text": ["title"],
    "ttl": [["expires", {"expireAfterSeconds": 3600}]],
}


def create_sample_data():
    """Create sample documents for demonstration."""
    now = int(time.time() * 1000)
    return [
        {"id": "post-1", "owner": "ann", "title": "Hello World", "created": now - 3000},
        {"id": "post-2", "owner": "ann", "title": "Second post", "created": now - 2000},
        {"id": "post-3", "owner": "bob", "title": "hello again", "created": now - 1000},
    ]


async def main():
    """Main function demonstrating Mongo-Table usage."""
    uri = os.environ.get("MONGO_URI", "mongodb://localhost:27017/mongo_table_example")
    print(f"Using database: {uri}")

    table = await open_table(uri, SCHEMA)
    try:
        print("\nWriting documents...")
        await table.upsert_many(create_sample_data())
        print(f"Table holds {await table.count()} documents")

        print("\nGet by identifier:")
        print(await table.get("post-1"))

        print("\nMerge a field into post-1:")
        print(await table.update("post-1", {"title": "Hello again, World"}))

        print("\nPosts by ann:")
        for doc in await table.get_by("owner", "ann"):
            print(f"  {doc['_id']}: {doc['title']}")

        print("\nSearching titles for 'hello':")
        for doc in await table.search("title", "hello"):
            print(f"  {doc['_id']}: {doc['title']}")

        print("\nNewest first:")
        for doc in await table.get_by_sorted_between(limit=2):
            print(f"  {doc['_id']} created {doc['created']}")

        print("\nTagging post-2:")
        await table.push("post-2", "tags", ["intro", "news"])
        await table.pull("post-2", "tags", ["news"])
        print((await table.get("post-2"))["tags"])

        print("\nStreaming every post:")
        async with table.read_stream() as stream:
            async for doc in stream:
                print(f"  {doc['_id']}")

        print("\nAs a DataFrame:")
        print(await table.read_stream({"owner": "ann"}).to_dataframe(columns=["_id", "title"]))

        print("\nBasic usage demo completed successfully!")

    finally:
        print("\nCleaning up example documents")
        await table.drop()
        await table.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
