"""Tests for the in-memory emulator service."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from docdb.auth import authorization_token, format_http_date, sign
from emulator.config import EmulatorConfig
from emulator.exceptions import Forbidden, Unauthorized
from emulator.main import create_app
from emulator.middleware import AuthorizationMiddleware, parse_resource_path

from .conftest import FIXED_DATE, TEST_KEY, TEST_KEY_B64

GOLDEN_TOKEN = "type%3Dmaster%26ver%3D1.0%26sig%3DOMgaSSxbRARSEQKrDLRP%2BxcOpfSy2iubLmWByF44lvg%3D"
QUERY_HEADERS = {"x-ms-documentdb-isquery": "true", "Content-Type": "application/query+json"}


@pytest.fixture
def app():
    return create_app(EmulatorConfig(require_auth=False, log_level="WARNING"))


@pytest.fixture
def http(app):
    return TestClient(app)


@pytest.fixture
def people(http):
    """A database with a collection partitioned on /city."""
    assert http.post("/dbs", json={"id": "db1"}).status_code == 201
    response = http.post(
        "/dbs/db1/colls",
        json={"id": "people", "partitionKey": {"paths": ["/city"], "kind": "Hash"}},
    )
    assert response.status_code == 201
    return "/dbs/db1/colls/people"


def add_people(http, people, cities=("Oslo", "Lima", "Oslo", "Pune", "Oslo")):
    for i, city in enumerate(cities):
        response = http.post(f"{people}/docs", json={"id": f"p{i}", "city": city, "n": i})
        assert response.status_code == 201


def pk(value):
    return {"x-ms-documentdb-partitionkey": f'["{value}"]'}


class TestParseResourcePath:
    """Test deriving the signed type and link from a request path."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/dbs", ("dbs", "")),
            ("/dbs/db1", ("dbs", "dbs/db1")),
            ("/dbs/db1/colls", ("colls", "dbs/db1")),
            ("/dbs/db1/colls/col1", ("colls", "dbs/db1/colls/col1")),
            ("/dbs/db1/colls/col1/docs", ("docs", "dbs/db1/colls/col1")),
            ("/dbs/db1/colls/col1/docs/d1", ("docs", "dbs/db1/colls/col1/docs/d1")),
            ("/dbs/db1/colls/col1/sprocs/sp", ("sprocs", "dbs/db1/colls/col1/sprocs/sp")),
            ("/offers", ("offers", "")),
            ("/offers/AbCd", ("offers", "abcd")),
        ],
    )
    def test_paths(self, path, expected):
        assert parse_resource_path(path) == expected


class TestHealthAndControl:
    """Test the health and control endpoints."""

    def test_health(self, http, people):
        response = http.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["databases"] == 1
        assert data["uptime_seconds"] >= 0

    def test_throttle_count(self, http):
        response = http.post("/_emulator/throttle/count/2", params={"retry_after_ms": 150})
        assert response.json() == {"remaining": 2, "retry_after_ms": 150}

        first = http.get("/dbs")
        second = http.get("/dbs")
        third = http.get("/dbs")

        assert [first.status_code, second.status_code, third.status_code] == [429, 429, 200]
        assert first.headers["x-ms-retry-after-ms"] == "150"
        assert first.json()["code"] == "TooManyRequests"
        assert http.get("/_emulator/throttle").json() == {"remaining": 0, "retry_after_ms": 150}

    def test_exempt_paths_not_throttled(self, http):
        http.post("/_emulator/throttle/count/1")

        assert http.get("/health").status_code == 200
        assert http.get("/_emulator/throttle").json()["remaining"] == 1

    def test_throttle_reset(self, http):
        http.post("/_emulator/throttle/count/5")
        http.post("/_emulator/throttle/reset")
        assert http.get("/dbs").status_code == 200

    def test_count_validation(self, http):
        assert http.post("/_emulator/throttle/count/-1").status_code == 422

    def test_reset(self, http, people):
        assert http.post("/_emulator/reset").status_code == 200
        assert http.get("/dbs").json()["Databases"] == []
        assert http.get("/offers").json()["Offers"] == []

    def test_activity_id(self, http):
        assert http.get("/dbs", headers={"x-ms-activity-id": "abc"}).headers["x-ms-activity-id"] == "abc"
        assert http.get("/dbs").headers["x-ms-activity-id"]

    def test_unexpected_errors(self, app):
        async def boom():
            raise RuntimeError("boom")

        app.add_api_route("/boom", boom)
        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json()["code"] == "InternalServerError"


class TestDatabases:
    """Test database endpoints."""

    def test_create(self, http):
        response = http.post("/dbs", json={"id": "db1"})

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "db1"
        assert data["_self"] == f"dbs/{data['_rid']}/"
        assert response.headers["etag"] == data["_etag"]
        assert response.headers["x-ms-request-charge"] == "1"

    def test_duplicate(self, http):
        http.post("/dbs", json={"id": "db1"})
        response = http.post("/dbs", json={"id": "db1"})

        assert response.status_code == 409
        assert response.json()["code"] == "Conflict"

    @pytest.mark.parametrize("body", [{}, {"id": ""}, {"id": "a/b"}, ["db1"], {"id": 7}])
    def test_invalid_ids(self, http, body):
        assert http.post("/dbs", json=body).status_code == 400

    def test_invalid_json(self, http):
        response = http.post("/dbs", content=b"{not json")
        assert response.status_code == 400
        assert response.json()["code"] == "BadRequest"

    def test_get_list_delete(self, http):
        http.post("/dbs", json={"id": "a"})
        http.post("/dbs", json={"id": "b"})

        assert http.get("/dbs/a").json()["id"] == "a"
        listed = http.get("/dbs").json()
        assert [db["id"] for db in listed["Databases"]] == ["a", "b"]
        assert listed["_count"] == 2

        assert http.delete("/dbs/a").status_code == 204
        response = http.get("/dbs/a")
        assert response.status_code == 404
        assert response.json()["code"] == "NotFound"

    def test_query(self, http):
        http.post("/dbs", json={"id": "a"})
        http.post("/dbs", json={"id": "b"})

        response = http.post(
            "/dbs",
            json={"query": "SELECT * FROM root r WHERE r.id = @id", "parameters": [{"name": "@id", "value": "b"}]},
            headers=QUERY_HEADERS,
        )

        assert [db["id"] for db in response.json()["Databases"]] == ["b"]
        assert response.headers["x-ms-item-count"] == "1"


class TestCollections:
    """Test collection endpoints and their offers."""

    def test_default_offer(self, http, people):
        coll = http.get(people).json()
        offers = http.get("/offers").json()["Offers"]

        assert coll["indexingPolicy"]["indexingMode"] == "Consistent"
        assert len(offers) == 1
        assert offers[0]["offerResourceId"] == coll["_rid"]
        assert offers[0]["resource"] == coll["_self"]
        assert offers[0]["offerVersion"] == "V2"
        assert offers[0]["content"]["offerThroughput"] == 400

    def test_throughput_header(self, http):
        http.post("/dbs", json={"id": "db1"})
        http.post("/dbs/db1/colls", json={"id": "c"}, headers={"x-ms-offer-throughput": "2500"})
        assert http.get("/offers").json()["Offers"][0]["content"]["offerThroughput"] == 2500

    def test_offer_type_header(self, http):
        http.post("/dbs", json={"id": "db1"})
        http.post("/dbs/db1/colls", json={"id": "c"}, headers={"x-ms-offer-type": "S2"})

        offer = http.get("/offers").json()["Offers"][0]
        assert offer["offerVersion"] == "V1"
        assert offer["offerType"] == "S2"
        assert "content" not in offer

    @pytest.mark.parametrize(
        "headers",
        [
            {"x-ms-offer-type": "S1", "x-ms-offer-throughput": "400"},
            {"x-ms-offer-type": "S9"},
            {"x-ms-offer-throughput": "lots"},
        ],
    )
    def test_bad_offer_headers(self, http, headers):
        http.post("/dbs", json={"id": "db1"})
        assert http.post("/dbs/db1/colls", json={"id": "c"}, headers=headers).status_code == 400

    @pytest.mark.parametrize(
        "partition_key", [{"paths": []}, {"paths": ["city"]}, {"paths": "/city"}, "city"]
    )
    def test_bad_partition_key(self, http, partition_key):
        http.post("/dbs", json={"id": "db1"})
        response = http.post("/dbs/db1/colls", json={"id": "c", "partitionKey": partition_key})
        assert response.status_code == 400

    def test_missing_database(self, http):
        assert http.post("/dbs/nope/colls", json={"id": "c"}).status_code == 404

    def test_delete_removes_offer(self, http, people):
        assert http.delete(people).status_code == 204
        assert http.get("/offers").json()["Offers"] == []
        assert http.get(people).status_code == 404

    def test_delete_database_removes_offers(self, http, people):
        http.delete("/dbs/db1")
        assert http.get("/offers").json()["Offers"] == []


class TestDocuments:
    """Test document endpoints."""

    def test_create_advances_session(self, http, people):
        first = http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"})
        second = http.post(f"{people}/docs", json={"id": "p2", "city": "Oslo"})

        assert first.status_code == 201
        assert first.headers["x-ms-session-token"] == "0:1"
        assert second.headers["x-ms-session-token"] == "0:2"
        assert first.json()["_attachments"] == "attachments/"

    def test_partition_key_header_must_match(self, http, people):
        response = http.post(
            f"{people}/docs", json={"id": "p1", "city": "Oslo"}, headers=pk("Lima")
        )
        assert response.status_code == 400

    def test_same_id_in_different_partitions(self, http, people):
        assert http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"}).status_code == 201
        assert http.post(f"{people}/docs", json={"id": "p1", "city": "Lima"}).status_code == 201
        assert http.post(f"{people}/docs", json={"id": "p1", "city": "Lima"}).status_code == 409

    def test_upsert(self, http, people):
        created = http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo", "n": 1}).json()
        response = http.post(
            f"{people}/docs",
            json={"id": "p1", "city": "Oslo", "n": 2},
            headers={"x-ms-documentdb-is-upsert": "true"},
        )

        assert response.status_code == 200
        assert response.json()["_rid"] == created["_rid"]
        assert response.json()["_etag"] != created["_etag"]
        assert http.get(f"{people}/docs/p1", headers=pk("Oslo")).json()["n"] == 2

    def test_point_read_needs_partition_key(self, http, people):
        http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"})

        assert http.get(f"{people}/docs/p1").status_code == 400
        assert http.get(f"{people}/docs/p1", headers=pk("Lima")).status_code == 404
        assert http.get(f"{people}/docs/p1", headers=pk("Oslo")).json()["city"] == "Oslo"

    def test_bad_partition_key_header(self, http, people):
        headers = {"x-ms-documentdb-partitionkey": "Oslo"}
        assert http.get(f"{people}/docs/p1", headers=headers).status_code == 400

    def test_unpartitioned_collection(self, http):
        http.post("/dbs", json={"id": "db1"})
        http.post("/dbs/db1/colls", json={"id": "plain"})
        http.post("/dbs/db1/colls/plain/docs", json={"id": "d1"})

        assert http.get("/dbs/db1/colls/plain/docs/d1").status_code == 200

    def test_conditional_read(self, http, people):
        etag = http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"}).json()["_etag"]

        response = http.get(f"{people}/docs/p1", headers={**pk("Oslo"), "If-None-Match": etag})

        assert response.status_code == 304
        assert response.headers["etag"] == etag

    def test_replace_with_etag(self, http, people):
        etag = http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"}).json()["_etag"]
        body = {"id": "p1", "city": "Oslo", "n": 5}

        ok = http.put(f"{people}/docs/p1", json=body, headers={**pk("Oslo"), "If-Match": etag})
        stale = http.put(f"{people}/docs/p1", json=body, headers={**pk("Oslo"), "If-Match": etag})

        assert ok.status_code == 200
        assert ok.json()["n"] == 5
        assert stale.status_code == 412
        assert stale.json()["code"] == "PreconditionFailed"

    @pytest.mark.parametrize(
        "body", [{"id": "other", "city": "Oslo"}, {"id": "p1", "city": "Lima"}]
    )
    def test_replace_cannot_move_document(self, http, people, body):
        http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"})
        assert http.put(f"{people}/docs/p1", json=body, headers=pk("Oslo")).status_code == 400

    def test_delete(self, http, people):
        http.post(f"{people}/docs", json={"id": "p1", "city": "Oslo"})

        assert http.delete(f"{people}/docs/p1", headers={**pk("Oslo"), "If-Match": '"x"'}).status_code == 412
        response = http.delete(f"{people}/docs/p1", headers=pk("Oslo"))
        assert response.status_code == 204
        assert response.headers["x-ms-session-token"] == "0:2"
        assert http.get(f"{people}/docs/p1", headers=pk("Oslo")).status_code == 404

    def test_feed_pages(self, http, people):
        add_people(http, people)
        headers = {"x-ms-max-item-count": "2"}
        ids = []
        continuations = []

        while True:
            response = http.get(f"{people}/docs", headers=headers)
            assert response.status_code == 200
            body = response.json()
            ids.extend(d["id"] for d in body["Documents"])
            assert body["_count"] == len(body["Documents"])
            continuation = response.headers.get("x-ms-continuation")
            if not continuation:
                break
            continuations.append(continuation)
            headers = {"x-ms-max-item-count": "2", "x-ms-continuation": continuation}

        assert ids == ["p0", "p1", "p2", "p3", "p4"]
        assert continuations == ["2", "4"]

    def test_exact_last_page_has_no_continuation(self, http, people):
        add_people(http, people, ("Oslo", "Lima"))
        response = http.get(f"{people}/docs", headers={"x-ms-max-item-count": "2"})
        assert "x-ms-continuation" not in response.headers

    def test_bad_continuation(self, http, people):
        assert http.get(f"{people}/docs", headers={"x-ms-continuation": "abc"}).status_code == 400

    def test_feed_by_partition(self, http, people):
        add_people(http, people)
        docs = http.get(f"{people}/docs", headers=pk("Oslo")).json()["Documents"]
        assert [d["id"] for d in docs] == ["p0", "p2", "p4"]

    def test_feed_etag(self, http, people):
        add_people(http, people, ("Oslo",))
        etag = http.get(f"{people}/docs").headers["etag"]

        assert http.get(f"{people}/docs", headers={"If-None-Match": etag}).status_code == 304

        http.post(f"{people}/docs", json={"id": "new", "city": "Oslo"})
        assert http.get(f"{people}/docs", headers={"If-None-Match": etag}).status_code == 200


class TestDocumentQueries:
    """Test document queries."""

    def query(self, http, people, text, parameters=(), headers=None):
        body = {"query": text, "parameters": [{"name": n, "value": v} for n, v in parameters]}
        return http.post(f"{people}/docs", json=body, headers={**QUERY_HEADERS, **(headers or {})})

    def test_cross_partition_required(self, http, people):
        add_people(http, people)
        response = self.query(http, people, "SELECT * FROM c")
        assert response.status_code == 400

    def test_cross_partition(self, http, people):
        add_people(http, people)
        response = self.query(
            http,
            people,
            "SELECT * FROM c WHERE c.city = @city",
            [("@city", "Oslo")],
            {"x-ms-documentdb-query-enablecrosspartition": "true"},
        )
        assert [d["id"] for d in response.json()["Documents"]] == ["p0", "p2", "p4"]

    def test_single_partition(self, http, people):
        add_people(http, people)
        response = self.query(http, people, "SELECT * FROM c WHERE c.n = 2", headers=pk("Oslo"))
        assert [d["id"] for d in response.json()["Documents"]] == ["p2"]

    def test_and_with_literals(self, http, people):
        add_people(http, people)
        response = self.query(
            http,
            people,
            "select * from c where c.city = 'Oslo' and c.n = 4",
            headers={"x-ms-documentdb-query-enablecrosspartition": "true"},
        )
        assert [d["id"] for d in response.json()["Documents"]] == ["p4"]

    def test_query_pages(self, http, people):
        add_people(http, people)
        response = self.query(
            http,
            people,
            "SELECT * FROM c WHERE c.city = 'Oslo'",
            headers={"x-ms-documentdb-query-enablecrosspartition": "true", "x-ms-max-item-count": "2"},
        )
        assert len(response.json()["Documents"]) == 2
        assert response.headers["x-ms-continuation"] == "2"

    @pytest.mark.parametrize(
        "text,parameters",
        [
            ("SELECT c.id FROM c", ()),
            ("SELECT * FROM c WHERE c.n > 2", ()),
            ("SELECT * FROM c WHERE d.n = 2", ()),
            ("SELECT * FROM c WHERE c.n = @missing", ()),
        ],
    )
    def test_unsupported(self, http, people, text, parameters):
        response = self.query(
            http,
            people,
            text,
            parameters,
            {"x-ms-documentdb-query-enablecrosspartition": "true"},
        )
        assert response.status_code == 400


class TestScripts:
    """Test stored procedure and user-defined function endpoints."""

    def test_sproc_lifecycle(self, http, people):
        created = http.post(f"{people}/sprocs", json={"id": "sp", "body": "function () {}"})
        assert created.status_code == 201

        replaced = http.put(f"{people}/sprocs/sp", json={"id": "sp", "body": "function (x) {}"})
        assert replaced.json()["body"] == "function (x) {}"
        assert replaced.json()["_etag"] != created.json()["_etag"]

        assert [s["id"] for s in http.get(f"{people}/sprocs").json()["StoredProcedures"]] == ["sp"]
        assert http.delete(f"{people}/sprocs/sp").status_code == 204
        assert http.get(f"{people}/sprocs/sp").status_code == 404

    def test_execute_is_unsupported(self, http, people):
        http.post(f"{people}/sprocs", json={"id": "sp", "body": "function () {}"})

        response = http.post(f"{people}/sprocs/sp", json=[1, 2])

        assert response.status_code == 400
        assert "not supported" in response.json()["message"]
        assert http.post(f"{people}/sprocs/missing", json=[]).status_code == 404

    def test_body_must_be_a_string(self, http, people):
        assert http.post(f"{people}/udfs", json={"id": "u", "body": 3}).status_code == 400

    def test_udfs(self, http, people):
        http.post(f"{people}/udfs", json={"id": "tax", "body": "function (x) { return x; }"})
        assert http.get(f"{people}/udfs").json()["UserDefinedFunctions"][0]["id"] == "tax"
        assert http.get(f"{people}/udfs/tax").status_code == 200


class TestOffers:
    """Test offer endpoints."""

    def offer(self, http):
        return http.get("/offers").json()["Offers"][0]

    def test_get(self, http, people):
        offer = self.offer(http)
        assert http.get(f"/offers/{offer['id']}").json() == offer
        assert http.get("/offers/missing").status_code == 404

    def test_replace_throughput(self, http, people):
        offer = self.offer(http)
        body = {**offer, "content": {"offerThroughput": 1000}}

        response = http.put(f"/offers/{offer['id']}", json=body)

        assert response.status_code == 200
        assert response.json()["content"]["offerThroughput"] == 1000
        assert response.json()["_etag"] != offer["_etag"]

    @pytest.mark.parametrize("throughput", [100, "1000", 1000.5, True])
    def test_invalid_throughput(self, http, people, throughput):
        offer = self.offer(http)
        body = {**offer, "content": {"offerThroughput": throughput}}
        assert http.put(f"/offers/{offer['id']}", json=body).status_code == 400

    def test_switch_to_offer_type(self, http, people):
        offer = self.offer(http)
        body = {"id": offer["id"], "_rid": offer["_rid"], "offerVersion": "V1", "offerType": "S3"}

        response = http.put(f"/offers/{offer['id']}", json=body)

        assert response.json()["offerType"] == "S3"
        assert "content" not in response.json()

    def test_stale_etag(self, http, people):
        offer = self.offer(http)
        http.put(f"/offers/{offer['id']}", json={**offer, "content": {"offerThroughput": 500}})
        response = http.put(
            f"/offers/{offer['id']}",
            json={**offer, "content": {"offerThroughput": 600}},
            headers={"If-Match": offer["_etag"]},
        )
        assert response.status_code == 412

    def test_query(self, http, people):
        coll = http.get(people).json()
        response = http.post(
            "/offers",
            json={
                "query": "SELECT * FROM root WHERE root.offerResourceId = @rid",
                "parameters": [{"name": "@rid", "value": coll["_rid"]}],
            },
            headers=QUERY_HEADERS,
        )
        assert len(response.json()["Offers"]) == 1


def signed(method, path, key=TEST_KEY, when=None):
    resource_type, link = parse_resource_path(path)
    date = format_http_date(when or datetime.now(timezone.utc))
    return {
        "Authorization": authorization_token(sign(method, resource_type, link, date, key)),
        "x-ms-date": date,
        "x-ms-version": "2017-02-22",
    }


class TestAuthorization:
    """Test master-key verification."""

    @pytest.fixture
    def secure(self):
        app = create_app(EmulatorConfig(account_key=TEST_KEY_B64, log_level="WARNING"))
        return TestClient(app)

    def test_signed_request(self, secure):
        response = secure.post("/dbs", json={"id": "db1"}, headers=signed("POST", "/dbs"))
        assert response.status_code == 201

        response = secure.get("/dbs/db1", headers=signed("GET", "/dbs/db1"))
        assert response.status_code == 200

    def test_missing_header(self, secure):
        response = secure.get("/dbs")
        assert response.status_code == 401
        assert response.json()["code"] == "Unauthorized"

    def test_missing_date(self, secure):
        headers = signed("GET", "/dbs")
        del headers["x-ms-date"]
        assert secure.get("/dbs", headers=headers).status_code == 401

    def test_wrong_key(self, secure):
        assert secure.get("/dbs", headers=signed("GET", "/dbs", key=b"other")).status_code == 401

    def test_wrong_resource(self, secure):
        assert secure.get("/dbs", headers=signed("GET", "/dbs/db1")).status_code == 401

    def test_wrong_method(self, secure):
        assert secure.delete("/dbs/db1", headers=signed("GET", "/dbs/db1")).status_code == 401

    def test_stale_date(self, secure):
        old = datetime.now(timezone.utc) - timedelta(hours=1)
        response = secure.get("/dbs", headers=signed("GET", "/dbs", when=old))
        assert response.status_code == 403

    def test_exempt_paths(self, secure):
        assert secure.get("/health").status_code == 200
        assert secure.get("/_emulator/throttle").status_code == 200

    def test_offer_link_is_lower_cased(self, secure):
        # the id is looked up case-sensitively after the signature check
        response = secure.get("/offers/AbCd", headers=signed("GET", "/offers/AbCd"))
        assert response.status_code == 404


class TestAuthorizationCheck:
    """Test the signature check against known values."""

    @pytest.fixture
    def middleware(self):
        return AuthorizationMiddleware(
            None, key=TEST_KEY, max_clock_skew=timedelta(minutes=15), clock=lambda: FIXED_DATE
        )

    def test_known_signature(self, middleware):
        headers = {"Authorization": GOLDEN_TOKEN, "x-ms-date": "Thu, 01 Jan 1970 00:00:00 GMT"}
        middleware.check("GET", "/dbs/db1/colls/col1/docs", headers)

    def test_standard_date_header(self, middleware):
        headers = {"Authorization": GOLDEN_TOKEN, "Date": "Thu, 01 Jan 1970 00:00:00 GMT"}
        middleware.check("GET", "/dbs/db1/colls/col1/docs", headers)

    def test_known_signature_other_method(self, middleware):
        headers = {"Authorization": GOLDEN_TOKEN, "x-ms-date": "Thu, 01 Jan 1970 00:00:00 GMT"}
        with pytest.raises(Unauthorized):
            middleware.check("POST", "/dbs/db1/colls/col1/docs", headers)

    def test_clock_skew(self, middleware):
        headers = {"Authorization": GOLDEN_TOKEN, "x-ms-date": "Thu, 01 Jan 1970 00:20:00 GMT"}
        with pytest.raises(Forbidden):
            middleware.check("GET", "/dbs/db1/colls/col1/docs", headers)

    def test_unparseable_date(self, middleware):
        headers = {"Authorization": GOLDEN_TOKEN, "x-ms-date": "yesterday"}
        with pytest.raises(Unauthorized):
            middleware.check("GET", "/dbs/db1/colls/col1/docs", headers)
