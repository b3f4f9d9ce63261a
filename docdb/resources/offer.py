"""Offer (throughput) lookups."""

from typing import Optional

from ..headers import ResourceType
from ..metadata import ResponseMetadata
from ..models import OfferResource, decode_resource
from ..options import RequestOptions
from ..request import ClientRequest, TimeoutTypes, resource_path
from .base import ResourceClient


class OfferClient(ResourceClient):
    """
    Client scoped to a single offer.

    Offers are addressed by id; their resource link is the lower-cased id.
    """

    def __init__(self, client, offer_id: str):
        super().__init__(client)
        self.offer_id = offer_id

    @property
    def resource_link(self) -> str:
        return self.offer_id.lower()

    async def get_raw(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        return await self.client.get_resource(
            ClientRequest(
                path=resource_path("offers", self.offer_id),
                resource_type=ResourceType.OFFERS,
                resource_link=self.resource_link,
                options=options,
            ),
            timeout,
        )

    async def get(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[OfferResource, ResponseMetadata]:
        body, metadata = await self.get_raw(options, timeout)
        return decode_resource(OfferResource, body), metadata
