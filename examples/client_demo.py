#!/usr/bin/env python3
"""
Demonstration of the document database client.

Runs against the bundled emulator. Start it first with:

    docdb-emulator serve --log-format console

Then run this demo:

    python examples/client_demo.py
"""

import asyncio
import logging
import sys

import httpx

from docdb import (
    ClientConfig,
    CommonRequestOptions,
    CreateCollectionRequest,
    CreateDocumentRequest,
    DocumentDBClient,
    LoggingConfig,
    PartitionKeyDefinition,
    PreconditionFailedError,
    Query,
    ReplaceDocumentRequest,
    ResourceNotFoundError,
    RetryConfig,
)
from emulator.config import DEFAULT_ACCOUNT_KEY

EMULATOR = "http://127.0.0.1:8081"
CONNECTION_STRING = f"AccountEndpoint={EMULATOR}/;AccountKey={DEFAULT_ACCOUNT_KEY};"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)


async def demo_resources(client: DocumentDBClient) -> None:
    """Create a database, a partitioned collection and a few documents."""
    print("\n=== Creating Resources ===")

    db, meta = await client.create_database("demo")
    print(f"✅ Database {db.id} (rid={db.rid}, charge={meta.request_charge})")

    people = client.with_database("demo")
    coll, _ = await people.create_collection(
        CreateCollectionRequest(
            id="people",
            partition_key=PartitionKeyDefinition(paths=["/city"]),
            offer_throughput=1000,
        )
    )
    print(f"✅ Collection {coll.id} partitioned on {coll.partition_key.paths}")

    collection = people.with_collection("people")
    for i, city in enumerate(["Oslo", "Lima", "Oslo", "Pune", "Oslo"]):
        await collection.create_document(
            CreateDocumentRequest(
                document={"id": f"p{i}", "city": city, "visits": i},
                partition_key=[city],
            )
        )
    print("✅ Created 5 documents")


async def demo_pagination(client: DocumentDBClient) -> None:
    """Walk the document feed two items at a time."""
    print("\n=== Pagination ===")

    collection = client.with_database("demo").with_collection("people")
    pages = collection.iter_documents(options=CommonRequestOptions(max_item_count=2))
    async for page in pages:
        ids = [doc["id"] for doc in page.items]
        print(f"Page of {len(ids)}: {ids} continuation={page.metadata.continuation!r}")

    query = Query(
        "SELECT * FROM c WHERE c.city = @city", enable_cross_partition=True
    ).add_parameter("@city", "Oslo")
    print(f"Query: {query}")
    async for page in collection.iter_documents(query):
        print(f"✅ Query page: {[doc['id'] for doc in page.items]}")


async def demo_concurrency(client: DocumentDBClient) -> None:
    """Optimistic concurrency with ETags."""
    print("\n=== Optimistic Concurrency ===")

    doc = client.with_database("demo").with_collection("people").with_document("p0", ["Oslo"])
    current, meta = await doc.get()
    updated = current.model_dump(by_alias=True) | {"visits": 42}

    await doc.replace(ReplaceDocumentRequest(document=updated, etag=meta.etag))
    print("✅ First replace with a fresh ETag succeeded")

    try:
        await doc.replace(ReplaceDocumentRequest(document=updated, etag=meta.etag))
    except PreconditionFailedError:
        print("✅ Second replace with a stale ETag was rejected (412)")


async def demo_throttling() -> None:
    """The default transport waits out 429 responses."""
    print("\n=== Throttling ===")

    async with httpx.AsyncClient() as control:
        await control.post(f"{EMULATOR}/_emulator/throttle/count/2?retry_after_ms=200")

    config = ClientConfig.from_connection_string(
        CONNECTION_STRING,
        retry=RetryConfig(max_attempts=4),
        logging=LoggingConfig(level="DEBUG"),
    )
    async with DocumentDBClient(config) as client:
        db, _ = await client.with_database("demo").get()
        print(f"✅ Read {db.id} after two throttled attempts")


async def cleanup(client: DocumentDBClient) -> None:
    print("\n=== Cleanup ===")
    try:
        await client.with_database("demo").delete()
        print("✅ Deleted database demo")
    except ResourceNotFoundError:
        print("Database demo did not exist")


async def main() -> None:
    config = ClientConfig.from_connection_string(CONNECTION_STRING)
    async with DocumentDBClient(config) as client:
        await cleanup(client)
        await demo_resources(client)
        await demo_pagination(client)
        await demo_concurrency(client)
        await demo_throttling()
        await cleanup(client)


if __name__ == "__main__":
    asyncio.run(main())
