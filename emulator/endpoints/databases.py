"""Database endpoints: ``/dbs``."""

import structlog
from fastapi import APIRouter, Depends, Request

from docdb.client import DATABASES_KEY

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

logger = structlog.get_logger("emulator.databases")
router = APIRouter(prefix="/dbs", tags=["databases"])


@router.post("")
async def create_or_query_databases(request: Request, state: EmulatorState = Depends(get_state)):
    """Create a database, or run a query when the request is marked as one."""
    body = await read_json(request)
    if is_query(request):
        items = parse_query(body).filter(state.store.list_databases())
        return feed_response(
            request, DATABASES_KEY, items, state.store.rid, state.config.default_max_item_count
        )
    database = state.store.create_database(body)
    logger.info("Database created", id=database["id"])
    return resource_response(database, 201)


@router.get("")
async def list_databases(request: Request, state: EmulatorState = Depends(get_state)):
    return feed_response(
        request,
        DATABASES_KEY,
        state.store.list_databases(),
        state.store.rid,
        state.config.default_max_item_count,
    )


@router.get("/{db_id}")
async def get_database(db_id: str, state: EmulatorState = Depends(get_state)):
    return resource_response(state.store.get_database(db_id).resource)


@router.delete("/{db_id}")
async def delete_database(db_id: str, request: Request, state: EmulatorState = Depends(get_state)):
    state.store.delete_database(db_id, if_match(request))
    logger.info("Database deleted", id=db_id)
    return empty_response()
