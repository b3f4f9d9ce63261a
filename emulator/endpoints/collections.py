"""Collection endpoints: ``/dbs/{db}/colls``."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request

from docdb.headers import HEADER_OFFER_THROUGHPUT, HEADER_OFFER_TYPE
from docdb.resources.database import COLLECTIONS_KEY

from ..exceptions import BadRequest
from ..query import parse_query
from ..responses import (
    empty_response,
    feed_response,
    if_match,
    is_query,
    read_json,
    resource_response,
)
from ..state import EmulatorState, get_state

logger = structlog.get_logger("emulator.collections")
router = APIRouter(prefix="/dbs/{db_id}/colls", tags=["collections"])


def _offer_throughput(request: Request) -> Optional[int]:
    header = request.headers.get(HEADER_OFFER_THROUGHPUT)
    if header is None:
        return None
    try:
        return int(header)
    except ValueError:
        raise BadRequest(f"invalid {HEADER_OFFER_THROUGHPUT}: {header}") from None


@router.post("")
async def create_or_query_collections(
    db_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    """
    Create a collection together with its offer, or run a query.

    ``x-ms-offer-throughput`` creates a V2 offer with that throughput and
    ``x-ms-offer-type`` a V1 offer of that performance level. Without
    either, a V2 offer with the configured default throughput is created.
    """
    body = await read_json(request)
    if is_query(request):
        db = state.store.get_database(db_id)
        items = parse_query(body).filter(state.store.list_collections(db_id))
        return feed_response(
            request, COLLECTIONS_KEY, items, db.resource["_rid"], state.config.default_max_item_count
        )
    collection = state.store.create_collection(
        db_id,
        body,
        throughput=_offer_throughput(request),
        offer_type=request.headers.get(HEADER_OFFER_TYPE),
    )
    logger.info("Collection created", database=db_id, id=collection["id"])
    return resource_response(collection, 201)


@router.get("")
async def list_collections(db_id: str, request: Request, state: EmulatorState = Depends(get_state)):
    db = state.store.get_database(db_id)
    return feed_response(
        request,
        COLLECTIONS_KEY,
        state.store.list_collections(db_id),
        db.resource["_rid"],
        state.config.default_max_item_count,
    )


@router.get("/{coll_id}")
async def get_collection(db_id: str, coll_id: str, state: EmulatorState = Depends(get_state)):
    coll = state.store.get_collection(db_id, coll_id)
    return resource_response(coll.resource, session_token=coll.session_token)


@router.delete("/{coll_id}")
async def delete_collection(
    db_id: str, coll_id: str, request: Request, state: EmulatorState = Depends(get_state)
):
    state.store.delete_collection(db_id, coll_id, if_match(request))
    logger.info("Collection deleted", database=db_id, id=coll_id)
    return empty_response()
