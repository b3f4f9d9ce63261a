"""Stored procedure and user-defined function endpoints."""

import structlog
from fastapi import APIRouter, Depends, Request

from docdb.resources.collection import STORED_PROCEDURES_KEY, USER_DEFINED_FUNCTIONS_KEY

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

logger = structlog.get_logger("emulator.scripts")


def make_router(kind: str, key: str, executable: bool = False) -> APIRouter:
    """Routes for one script feed (``sprocs`` or ``udfs``) of a collection."""
    router = APIRouter(prefix=f"/dbs/{{db_id}}/colls/{{coll_id}}/{kind}", tags=[kind])

    @router.post("")
    async def create_or_query_scripts(
        db_id: str, coll_id: str, request: Request, state: EmulatorState = Depends(get_state)
    ):
        coll = state.store.get_collection(db_id, coll_id)
        body = await read_json(request)
        if is_query(request):
            items = parse_query(body).filter(state.store.list_scripts(db_id, coll_id, kind))
            return feed_response(
                request, key, items, coll.resource["_rid"], state.config.default_max_item_count
            )
        script = state.store.create_script(db_id, coll_id, kind, body)
        logger.info("Script created", kind=kind, collection=coll_id, id=script["id"])
        return resource_response(script, 201, coll.session_token)

    @router.get("")
    async def list_scripts(
        db_id: str, coll_id: str, request: Request, state: EmulatorState = Depends(get_state)
    ):
        coll = state.store.get_collection(db_id, coll_id)
        return feed_response(
            request,
            key,
            state.store.list_scripts(db_id, coll_id, kind),
            coll.resource["_rid"],
            state.config.default_max_item_count,
        )

    @router.get("/{script_id}")
    async def get_script(
        db_id: str, coll_id: str, script_id: str, state: EmulatorState = Depends(get_state)
    ):
        return resource_response(state.store.get_script(db_id, coll_id, kind, script_id))

    @router.put("/{script_id}")
    async def replace_script(
        db_id: str,
        coll_id: str,
        script_id: str,
        request: Request,
        state: EmulatorState = Depends(get_state),
    ):
        script = state.store.replace_script(
            db_id, coll_id, kind, script_id, await read_json(request), if_match(request)
        )
        coll = state.store.get_collection(db_id, coll_id)
        return resource_response(script, session_token=coll.session_token)

    @router.delete("/{script_id}")
    async def delete_script(
        db_id: str,
        coll_id: str,
        script_id: str,
        request: Request,
        state: EmulatorState = Depends(get_state),
    ):
        state.store.delete_script(db_id, coll_id, kind, script_id, if_match(request))
        return empty_response()

    if executable:

        @router.post("/{script_id}")
        async def execute_script(
            db_id: str, coll_id: str, script_id: str, state: EmulatorState = Depends(get_state)
        ):
            state.store.get_script(db_id, coll_id, kind, script_id)
            raise BadRequest("script execution is not supported by the emulator")

    return router


sprocs_router = make_router("sprocs", STORED_PROCEDURES_KEY, executable=True)
udfs_router = make_router("udfs", USER_DEFINED_FUNCTIONS_KEY)
