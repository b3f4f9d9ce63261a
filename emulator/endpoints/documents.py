"""Document endpoints: ``/dbs/{db}/colls/{coll}/docs``."""

import structlog
from fastapi import APIRouter, Depends, Request

from docdb.resources.collection import DOCUMENTS_KEY

from ..exceptions import BadRequest
from ..query import parse_query
from ..responses import (
    cross_partition,
    empty_response,
    feed_response,
    if_match,
    if_none_match,
    is_query,
    is_upsert,
    partition_key,
    read_json,
    resource_response,
)
from ..state import EmulatorState, get_state

logger = structlog.get_logger("emulator.documents")
router = APIRouter(prefix="/dbs/{db_id}/colls/{coll_id}/docs", tags=["documents"])


@router.post("")
async def create_or_query_documents(
    db_id: str, coll_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    """
    Create (or upsert) a document, or run a query.

    A query against a partitioned collection must either name a partition
    key or enable cross-partition execution.
    """
    store = state.store
    coll = store.get_collection(db_id, coll_id)
    body = await read_json(request)
    pk = partition_key(request)

    if is_query(request):
        query = parse_query(body)
        if coll.partition_paths and pk is None and not cross_partition(request):
            raise BadRequest(
                "cross partition query is required but disabled; "
                "set x-ms-documentdb-query-enablecrosspartition to true"
            )
        items = query.filter(store.list_documents(db_id, coll_id, pk))
        return feed_response(
            request,
            DOCUMENTS_KEY,
            items,
            coll.resource["_rid"],
            state.config.default_max_item_count,
            session_token=coll.session_token,
        )

    document, created = store.create_document(db_id, coll_id, body, pk, upsert=is_upsert(request))
    logger.debug("Document stored", collection=coll_id, id=document["id"], created=created)
    return resource_response(document, 201 if created else 200, coll.session_token)


@router.get("")
async def list_documents(
    db_id: str, coll_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    """
    Read the document feed.

    The feed's ETag is the collection's log sequence number; sending it back
    in If-None-Match yields 304 until the collection is written again.
    """
    coll = state.store.get_collection(db_id, coll_id)
    etag = f'"{coll.lsn}"'
    if if_none_match(request) == etag:
        return empty_response(304, coll.session_token, etag)
    return feed_response(
        request,
        DOCUMENTS_KEY,
        state.store.list_documents(db_id, coll_id, partition_key(request)),
        coll.resource["_rid"],
        state.config.default_max_item_count,
        session_token=coll.session_token,
        etag=etag,
    )


@router.get("/{doc_id}")
async def get_document(
    db_id: str, coll_id: str, doc_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    coll = state.store.get_collection(db_id, coll_id)
    document = state.store.get_document(db_id, coll_id, doc_id, partition_key(request))
    if if_none_match(request) == document["_etag"]:
        return empty_response(304, coll.session_token, document["_etag"])
    return resource_response(document, session_token=coll.session_token)


@router.put("/{doc_id}")
async def replace_document(
    db_id: str, coll_id: str, doc_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    coll = state.store.get_collection(db_id, coll_id)
    document = state.store.replace_document(
        db_id, coll_id, doc_id, await read_json(request), partition_key(request), if_match(request)
    )
    return resource_response(document, session_token=coll.session_token)


@router.delete("/{doc_id}")
async def delete_document(
    db_id: str, coll_id: str, doc_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    coll = state.store.get_collection(db_id, coll_id)
    state.store.delete_document(db_id, coll_id, doc_id, partition_key(request), if_match(request))
    return empty_response(session_token=coll.session_token)
