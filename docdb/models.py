"""
Resource schemas.

System properties use their wire names as aliases (``_rid``, ``_ts``,
``_self``, ``_etag``); models accept either name on input and should be
dumped with ``by_alias=True``.
"""

from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ResponseFormatError
from .headers import OfferType

ModelT = TypeVar("ModelT", bound=BaseModel)


class Resource(BaseModel):
    """System properties shared by every resource."""

    id: str
    rid: Optional[str] = Field(default=None, alias="_rid")
    ts: Optional[int] = Field(default=None, alias="_ts")
    self_link: Optional[str] = Field(default=None, alias="_self")
    etag: Optional[str] = Field(default=None, alias="_etag")

    model_config = ConfigDict(populate_by_name=True)

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DatabaseResource(Resource):
    colls: Optional[str] = Field(default=None, alias="_colls")
    users: Optional[str] = Field(default=None, alias="_users")


class IndexingMode(str, Enum):
    NONE = "None"
    CONSISTENT = "Consistent"
    LAZY = "Lazy"


class DataType(str, Enum):
    STRING = "String"
    NUMBER = "Number"
    POINT = "Point"
    POLYGON = "Polygon"
    LINE_STRING = "LineString"


class PartitionKind(str, Enum):
    HASH = "Hash"
    RANGE = "Range"
    SPATIAL = "Spatial"


class CollectionIndex(BaseModel):
    data_type: DataType = Field(alias="dataType")
    precision: Optional[int] = None
    kind: PartitionKind

    model_config = ConfigDict(populate_by_name=True)


class IncludedPath(BaseModel):
    path: str
    indexes: list[CollectionIndex] = Field(default_factory=list)


class ExcludedPath(BaseModel):
    path: str


class IndexingPolicy(BaseModel):
    automatic: Optional[bool] = None
    indexing_mode: Optional[IndexingMode] = Field(default=None, alias="indexingMode")
    included_paths: Optional[list[IncludedPath]] = Field(default=None, alias="includedPaths")
    excluded_paths: Optional[list[ExcludedPath]] = Field(default=None, alias="excludedPaths")

    model_config = ConfigDict(populate_by_name=True)


class PartitionKeyDefinition(BaseModel):
    """Partitioning of a collection. Only hash partitioning is supported by the service."""

    paths: list[str]
    kind: PartitionKind = PartitionKind.HASH


class CollectionResource(Resource):
    docs: Optional[str] = Field(default=None, alias="_docs")
    sprocs: Optional[str] = Field(default=None, alias="_sprocs")
    triggers: Optional[str] = Field(default=None, alias="_triggers")
    udfs: Optional[str] = Field(default=None, alias="_udfs")
    conflicts: Optional[str] = Field(default=None, alias="_conflicts")
    indexing_policy: Optional[IndexingPolicy] = Field(default=None, alias="indexingPolicy")
    partition_key: Optional[PartitionKeyDefinition] = Field(default=None, alias="partitionKey")


class DocumentProperties(Resource):
    """A document; user properties are kept as extra fields."""

    attachments: Optional[str] = Field(default=None, alias="_attachments")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class StoredProcedureResource(Resource):
    body: str = ""


class UserDefinedFunctionResource(Resource):
    body: str = ""


class OfferVersion(str, Enum):
    V1 = "V1"
    V2 = "V2"


class OfferContentV2(BaseModel):
    """User-defined throughput settings."""

    offer_throughput: int = Field(alias="offerThroughput")
    rupm_enabled: Optional[bool] = Field(
        default=None, alias="offerIsRUPerMinuteThroughputEnabled"
    )

    model_config = ConfigDict(populate_by_name=True)


class OfferResource(Resource):
    """
    The performance level of a collection.

    V1 offers use a pre-defined ``offer_type``. V2 offers carry their
    throughput in ``content`` and always report the ``Invalid`` offer type.
    """

    offer_version: Optional[OfferVersion] = Field(default=None, alias="offerVersion")
    offer_type: Optional[OfferType] = Field(default=None, alias="offerType")
    content: Optional[OfferContentV2] = None
    resource: str = ""
    offer_resource_id: str = Field(default="", alias="offerResourceId")

    @model_validator(mode="after")
    def _content_only_for_v2(self) -> "OfferResource":
        if self.offer_version != OfferVersion.V2:
            self.content = None
        return self

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.offer_version == OfferVersion.V2:
            body["offerType"] = OfferType.INVALID.value
        return body


def decode_resource(model: type[ModelT], data: Any) -> ModelT:
    """Validate JSON bytes or an already decoded value into ``model``."""
    try:
        if isinstance(data, (bytes, bytearray, str)):
            return model.model_validate_json(data)
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseFormatError(
            f"could not decode response into {model.__name__}: {e}"
        ) from e
