"""Offer endpoints: ``/offers``."""

import structlog
from fastapi import APIRouter, Depends, Request

from docdb.client import OFFERS_KEY

from ..query import parse_query
from ..responses import feed_response, if_match, read_json, resource_response
from ..state import EmulatorState, get_state

logger = structlog.get_logger("emulator.offers")
router = APIRouter(prefix="/offers", tags=["offers"])


@router.get("")
async def list_offers(request: Request, state: EmulatorState = Depends(get_state)):
    return feed_response(
        request,
        OFFERS_KEY,
        state.store.list_offers(),
        state.store.rid,
        state.config.default_max_item_count,
    )


@router.post("")
async def query_offers(request: Request, state: EmulatorState = Depends(get_state)):
    """Offers are created with their collection; POST on the feed is a query only."""
    query = parse_query(await read_json(request))
    return feed_response(
        request,
        OFFERS_KEY,
        query.filter(state.store.list_offers()),
        state.store.rid,
        state.config.default_max_item_count,
    )


@router.get("/{offer_id}")
async def get_offer(offer_id: str, state: EmulatorState = Depends(get_state)):
    return resource_response(state.store.get_offer(offer_id))


@router.put("/{offer_id}")
async def replace_offer(offer_id: str, request: Request, state: EmulatorState = Depends(get_state)):
    """Change the throughput (V2) or performance level (V1) of an offer."""
    offer = state.store.replace_offer(offer_id, await read_json(request), if_match(request))
    logger.info("Offer replaced", id=offer_id, version=offer["offerVersion"])
    return resource_response(offer)
