"""
In-memory resource store.

Holds databases, collections, documents, stored procedures, user-defined
functions and offers. Every resource gets the system properties ``_rid``,
``_self``, ``_etag`` and ``_ts``. Each collection keeps a log sequence
number that advances on every write inside it; its session token is
``0:<lsn>``.

All methods are synchronous and never await, so each call is atomic with
respect to the event loop.
"""

import base64
import json
import secrets
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from docdb.headers import OfferType

from .exceptions import BadRequest, Conflict, NotFound, PreconditionFailed

_INVALID_ID_CHARACTERS = set("/\\?#")

DEFAULT_INDEXING_POLICY: dict[str, Any] = {
    "indexingMode": "Consistent",
    "automatic": True,
    "includedPaths": [
        {
            "path": "/*",
            "indexes": [
                {"dataType": "String", "precision": -1, "kind": "Range"},
                {"dataType": "Number", "precision": -1, "kind": "Range"},
            ],
        }
    ],
    "excludedPaths": [],
}


def new_rid() -> str:
    return base64.urlsafe_b64encode(secrets.token_bytes(6)).decode("ascii")


def new_etag() -> str:
    return f'"{uuid.uuid4()}"'


def _stamp(resource: dict[str, Any], rid: str, self_link: str) -> dict[str, Any]:
    resource["_rid"] = rid
    resource["_self"] = self_link
    resource["_etag"] = new_etag()
    resource["_ts"] = int(time.time())
    return resource


def _touch(resource: dict[str, Any]) -> dict[str, Any]:
    resource["_etag"] = new_etag()
    resource["_ts"] = int(time.time())
    return resource


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise BadRequest("request body must be a JSON object")
    return body


def _require_id(body: dict[str, Any]) -> str:
    id = body.get("id")
    if not isinstance(id, str) or not id:
        raise BadRequest("the 'id' property is required")
    if _INVALID_ID_CHARACTERS & set(id) or id != id.rstrip():
        raise BadRequest(f"the id '{id}' contains invalid characters")
    return id


def check_if_match(resource: dict[str, Any], if_match: Optional[str]) -> None:
    """Raise PreconditionFailed unless ``if_match`` is absent, ``*`` or the current ETag."""
    if if_match and if_match != "*" and if_match != resource["_etag"]:
        raise PreconditionFailed("the operation specified an ETag that differs from the server")


def _partition_key(values: list[Any]) -> str:
    return json.dumps(values, separators=(",", ":"))


def _value_at(document: dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.strip("/").split("/"):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


@dataclass
class CollectionEntry:
    resource: dict[str, Any]
    offer_id: str
    documents: dict[tuple[str, str], dict[str, Any]] = field(default_factory=dict)
    sprocs: dict[str, dict[str, Any]] = field(default_factory=dict)
    udfs: dict[str, dict[str, Any]] = field(default_factory=dict)
    lsn: int = 0

    @property
    def partition_paths(self) -> list[str]:
        return (self.resource.get("partitionKey") or {}).get("paths", [])

    @property
    def session_token(self) -> str:
        return f"0:{self.lsn}"

    def advance(self) -> None:
        self.lsn += 1

    def scripts(self, kind: str) -> dict[str, dict[str, Any]]:
        return self.sprocs if kind == "sprocs" else self.udfs

    def document_key(self, document: dict[str, Any], partition_key: Optional[list[Any]]) -> str:
        """Partition key of a document being written; must agree with the header if one was sent."""
        if not self.partition_paths:
            return ""
        values = [_value_at(document, path) for path in self.partition_paths]
        if partition_key is not None and partition_key != values:
            raise BadRequest(
                "partition key provided either doesn't correspond to definition "
                "in the collection or doesn't match partition key field values "
                "specified in the document"
            )
        return _partition_key(values)

    def lookup_key(self, partition_key: Optional[list[Any]]) -> str:
        """Partition key of a point operation, taken from the request header."""
        if not self.partition_paths:
            return ""
        if partition_key is None:
            raise BadRequest("partition key must be supplied for this operation")
        return _partition_key(partition_key)


@dataclass
class DatabaseEntry:
    resource: dict[str, Any]
    collections: dict[str, CollectionEntry] = field(default_factory=dict)


class ResourceStore:
    """Resource tree keyed by the user-visible ids."""

    def __init__(self, default_offer_throughput: int = 400):
        self.default_offer_throughput = default_offer_throughput
        self.rid = new_rid()
        self.databases: dict[str, DatabaseEntry] = {}
        self.offers: dict[str, dict[str, Any]] = {}

    def clear(self) -> None:
        self.databases.clear()
        self.offers.clear()

    # Databases

    def list_databases(self) -> list[dict[str, Any]]:
        return [db.resource for db in self.databases.values()]

    def create_database(self, body: Any) -> dict[str, Any]:
        id = _require_id(_require_object(body))
        if id in self.databases:
            raise Conflict(f"database '{id}' already exists")
        rid = new_rid()
        resource = _stamp(
            {"id": id, "_colls": "colls/", "_users": "users/"}, rid, f"dbs/{rid}/"
        )
        self.databases[id] = DatabaseEntry(resource)
        return resource

    def get_database(self, db_id: str) -> DatabaseEntry:
        try:
            return self.databases[db_id]
        except KeyError:
            raise NotFound(f"database '{db_id}' was not found") from None

    def delete_database(self, db_id: str, if_match: Optional[str] = None) -> None:
        db = self.get_database(db_id)
        check_if_match(db.resource, if_match)
        for coll in db.collections.values():
            self.offers.pop(coll.offer_id, None)
        del self.databases[db_id]

    # Collections

    def create_collection(
        self,
        db_id: str,
        body: Any,
        throughput: Optional[int] = None,
        offer_type: Optional[str] = None,
    ) -> dict[str, Any]:
        db = self.get_database(db_id)
        id = _require_id(_require_object(body))
        if id in db.collections:
            raise Conflict(f"collection '{id}' already exists")
        if throughput is not None and offer_type is not None:
            raise BadRequest("offer throughput and offer type are mutually exclusive")

        resource: dict[str, Any] = {
            "id": id,
            "indexingPolicy": body.get("indexingPolicy") or DEFAULT_INDEXING_POLICY,
        }
        partition_key = body.get("partitionKey")
        if partition_key is not None:
            paths = partition_key.get("paths") if isinstance(partition_key, dict) else None
            if (
                not isinstance(paths, list)
                or not paths
                or not all(isinstance(p, str) and p.startswith("/") for p in paths)
            ):
                raise BadRequest("partitionKey.paths must be a non-empty list of '/' paths")
            resource["partitionKey"] = {"paths": paths, "kind": partition_key.get("kind", "Hash")}

        rid = new_rid()
        _stamp(resource, rid, f"{db.resource['_self']}colls/{rid}/")
        resource.update(
            {
                "_docs": "docs/",
                "_sprocs": "sprocs/",
                "_triggers": "triggers/",
                "_udfs": "udfs/",
                "_conflicts": "conflicts/",
            }
        )
        offer = self._create_offer(resource, throughput, offer_type)
        db.collections[id] = CollectionEntry(resource, offer_id=offer["id"])
        return resource

    def list_collections(self, db_id: str) -> list[dict[str, Any]]:
        return [c.resource for c in self.get_database(db_id).collections.values()]

    def get_collection(self, db_id: str, coll_id: str) -> CollectionEntry:
        db = self.get_database(db_id)
        try:
            return db.collections[coll_id]
        except KeyError:
            raise NotFound(f"collection '{coll_id}' was not found") from None

    def delete_collection(self, db_id: str, coll_id: str, if_match: Optional[str] = None) -> None:
        coll = self.get_collection(db_id, coll_id)
        check_if_match(coll.resource, if_match)
        self.offers.pop(coll.offer_id, None)
        del self.databases[db_id].collections[coll_id]

    # Documents

    def create_document(
        self,
        db_id: str,
        coll_id: str,
        body: Any,
        partition_key: Optional[list[Any]] = None,
        upsert: bool = False,
    ) -> tuple[dict[str, Any], bool]:
        """Store a document; returns it and whether it was newly created."""
        coll = self.get_collection(db_id, coll_id)
        document = dict(_require_object(body))
        id = _require_id(document)
        key = (coll.document_key(document, partition_key), id)

        existing = coll.documents.get(key)
        if existing is not None and not upsert:
            raise Conflict(f"document '{id}' already exists")
        rid = existing["_rid"] if existing else new_rid()
        _stamp(document, rid, f"{coll.resource['_self']}docs/{rid}/")
        document["_attachments"] = "attachments/"
        coll.documents[key] = document
        coll.advance()
        return document, existing is None

    def list_documents(
        self, db_id: str, coll_id: str, partition_key: Optional[list[Any]] = None
    ) -> list[dict[str, Any]]:
        coll = self.get_collection(db_id, coll_id)
        if partition_key is None or not coll.partition_paths:
            return list(coll.documents.values())
        key = _partition_key(partition_key)
        return [doc for (pk, _), doc in coll.documents.items() if pk == key]

    def get_document(
        self, db_id: str, coll_id: str, doc_id: str, partition_key: Optional[list[Any]] = None
    ) -> dict[str, Any]:
        coll = self.get_collection(db_id, coll_id)
        try:
            return coll.documents[(coll.lookup_key(partition_key), doc_id)]
        except KeyError:
            raise NotFound(f"document '{doc_id}' was not found") from None

    def replace_document(
        self,
        db_id: str,
        coll_id: str,
        doc_id: str,
        body: Any,
        partition_key: Optional[list[Any]] = None,
        if_match: Optional[str] = None,
    ) -> dict[str, Any]:
        coll = self.get_collection(db_id, coll_id)
        existing = self.get_document(db_id, coll_id, doc_id, partition_key)
        check_if_match(existing, if_match)

        document = dict(_require_object(body))
        if _require_id(document) != doc_id:
            raise BadRequest("the document id cannot be changed by a replace")
        key = (coll.lookup_key(partition_key), doc_id)
        if coll.document_key(document, None) != key[0]:
            raise BadRequest("the partition key of a document cannot be changed")

        _stamp(document, existing["_rid"], existing["_self"])
        document["_attachments"] = "attachments/"
        coll.documents[key] = document
        coll.advance()
        return document

    def delete_document(
        self,
        db_id: str,
        coll_id: str,
        doc_id: str,
        partition_key: Optional[list[Any]] = None,
        if_match: Optional[str] = None,
    ) -> None:
        coll = self.get_collection(db_id, coll_id)
        existing = self.get_document(db_id, coll_id, doc_id, partition_key)
        check_if_match(existing, if_match)
        del coll.documents[(coll.lookup_key(partition_key), doc_id)]
        coll.advance()

    # Stored procedures and user-defined functions

    def create_script(self, db_id: str, coll_id: str, kind: str, body: Any) -> dict[str, Any]:
        coll = self.get_collection(db_id, coll_id)
        scripts = coll.scripts(kind)
        body = _require_object(body)
        id = _require_id(body)
        if id in scripts:
            raise Conflict(f"script '{id}' already exists")
        if not isinstance(body.get("body"), str):
            raise BadRequest("the 'body' property must be a string")
        rid = new_rid()
        resource = _stamp(
            {"id": id, "body": body["body"]}, rid, f"{coll.resource['_self']}{kind}/{rid}/"
        )
        scripts[id] = resource
        coll.advance()
        return resource

    def list_scripts(self, db_id: str, coll_id: str, kind: str) -> list[dict[str, Any]]:
        return list(self.get_collection(db_id, coll_id).scripts(kind).values())

    def get_script(self, db_id: str, coll_id: str, kind: str, script_id: str) -> dict[str, Any]:
        try:
            return self.get_collection(db_id, coll_id).scripts(kind)[script_id]
        except KeyError:
            raise NotFound(f"script '{script_id}' was not found") from None

    def replace_script(
        self,
        db_id: str,
        coll_id: str,
        kind: str,
        script_id: str,
        body: Any,
        if_match: Optional[str] = None,
    ) -> dict[str, Any]:
        resource = self.get_script(db_id, coll_id, kind, script_id)
        check_if_match(resource, if_match)
        body = _require_object(body)
        if _require_id(body) != script_id:
            raise BadRequest("the script id cannot be changed by a replace")
        if not isinstance(body.get("body"), str):
            raise BadRequest("the 'body' property must be a string")
        resource["body"] = body["body"]
        self.get_collection(db_id, coll_id).advance()
        return _touch(resource)

    def delete_script(
        self,
        db_id: str,
        coll_id: str,
        kind: str,
        script_id: str,
        if_match: Optional[str] = None,
    ) -> None:
        check_if_match(self.get_script(db_id, coll_id, kind, script_id), if_match)
        coll = self.get_collection(db_id, coll_id)
        del coll.scripts(kind)[script_id]
        coll.advance()

    # Offers

    def _create_offer(
        self,
        collection: dict[str, Any],
        throughput: Optional[int],
        offer_type: Optional[str],
    ) -> dict[str, Any]:
        rid = new_rid()
        offer: dict[str, Any] = {
            "id": rid,
            "resource": collection["_self"],
            "offerResourceId": collection["_rid"],
        }
        if offer_type is not None:
            offer.update(offerVersion="V1", offerType=_offer_type(offer_type))
        else:
            offer.update(
                offerVersion="V2",
                offerType=OfferType.INVALID.value,
                content={
                    "offerThroughput": throughput or self.default_offer_throughput,
                    "offerIsRUPerMinuteThroughputEnabled": False,
                },
            )
        _stamp(offer, rid, f"offers/{rid}/")
        self.offers[rid] = offer
        return offer

    def list_offers(self) -> list[dict[str, Any]]:
        return list(self.offers.values())

    def get_offer(self, offer_id: str) -> dict[str, Any]:
        try:
            return self.offers[offer_id]
        except KeyError:
            raise NotFound(f"offer '{offer_id}' was not found") from None

    def replace_offer(
        self, offer_id: str, body: Any, if_match: Optional[str] = None
    ) -> dict[str, Any]:
        offer = self.get_offer(offer_id)
        check_if_match(offer, if_match)
        body = _require_object(body)
        if body.get("id", offer_id) != offer_id or body.get("_rid", offer_id) != offer_id:
            raise BadRequest("the offer id cannot be changed by a replace")

        version = body.get("offerVersion", offer["offerVersion"])
        if version == "V2":
            content = body.get("content")
            throughput = content.get("offerThroughput") if isinstance(content, dict) else None
            if not isinstance(throughput, int) or isinstance(throughput, bool) or throughput < 400:
                raise BadRequest("content.offerThroughput must be an integer of at least 400")
            offer.update(
                offerVersion="V2",
                offerType=OfferType.INVALID.value,
                content={
                    "offerThroughput": throughput,
                    "offerIsRUPerMinuteThroughputEnabled": bool(
                        content.get("offerIsRUPerMinuteThroughputEnabled", False)
                    ),
                },
            )
        elif version == "V1":
            offer.update(offerVersion="V1", offerType=_offer_type(body.get("offerType")))
            offer.pop("content", None)
        else:
            raise BadRequest(f"unsupported offer version: {version}")
        return _touch(offer)


def _offer_type(value: Any) -> str:
    if value not in (OfferType.S1.value, OfferType.S2.value, OfferType.S3.value):
        raise BadRequest(f"unsupported offer type: {value}")
    return value
