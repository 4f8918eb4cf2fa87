# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the Database and AsyncDatabase classes, against a mock server
"""

from __future__ import annotations

import json

import pytest
from pytest_httpserver import HTTPServer

from arangopy import AsyncCollection, AsyncDatabase, Collection, Database
from arangopy.api_options import APIOptions, TimeoutOptions
from arangopy.constants import CollectionType
from arangopy.cursors import QueryRequest
from arangopy.exceptions import (
    ArangoAPIException,
    ArangoHttpException,
    UnexpectedArangoResponseException,
)
from arangopy.info import CollectionDescriptor, DatabaseInfo

from ..conftest import (
    DATABASE_NAME,
    DATABASE_PATH,
    SYSTEM_PATH,
    error_body,
    ok_body,
    requests_to,
)

DB_INFO = {
    "name": DATABASE_NAME,
    "id": "1234",
    "path": "/var/lib/arangodb3/databases/database-1234",
    "isSystem": False,
    "sharding": "",
    "replicationFactor": 1,
    "writeConcern": 1,
}
COLL_DESC = {
    "id": "9876",
    "name": "my_events",
    "status": 3,
    "type": 2,
    "isSystem": False,
    "globallyUniqueId": "h1A2B3C4D5/9876",
}
SYS_COLL_DESC = {
    "id": "12",
    "name": "_graphs",
    "status": 3,
    "type": 2,
    "isSystem": True,
}


class TestDatabaseSync:
    @pytest.mark.describe("test of database info")
    def test_database_info(self, httpserver: HTTPServer, database: Database) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/database/current", method="GET"
        ).respond_with_json(ok_body(result=DB_INFO))
        info = database.info()
        assert isinstance(info, DatabaseInfo)
        assert info.name == DATABASE_NAME
        assert info.id == "1234"
        assert not info.is_system
        assert info.replication_factor == 1
        assert info.raw == DB_INFO

    @pytest.mark.describe("test of database management through _system")
    def test_database_management(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database", method="GET"
        ).respond_with_json(ok_body(result=["_system", DATABASE_NAME]))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/database/user", method="GET"
        ).respond_with_json(ok_body(result=[DATABASE_NAME]))
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database", method="POST"
        ).respond_with_json(ok_body(code=201, result=True), status=201)
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database/analytics", method="DELETE"
        ).respond_with_json(ok_body(result=True))

        assert database.list_databases() == ["_system", DATABASE_NAME]
        assert database.list_user_databases() == [DATABASE_NAME]

        new_db = database.create_database(
            "analytics", users=[{"username": "jim", "passwd": "x"}]
        )
        assert isinstance(new_db, Database)
        assert new_db.name == "analytics"
        assert new_db.api_endpoint == database.api_endpoint
        # same credentials, same connection
        assert new_db._authenticator is database._authenticator
        cd_request = requests_to(httpserver, f"{SYSTEM_PATH}/_api/database", "POST")[0]
        assert json.loads(cd_request.data) == {
            "name": "analytics",
            "users": [{"username": "jim", "passwd": "x"}],
        }

        database.drop_database("analytics")
        assert len(requests_to(httpserver, f"{SYSTEM_PATH}/_api/database/analytics")) == 1

    @pytest.mark.describe("test of database management errors")
    def test_database_management_errors(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database", method="POST"
        ).respond_with_json(
            error_body(409, 1207, "duplicate database name"), status=409
        )
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database/nope", method="DELETE"
        ).respond_with_json(error_body(404, 1228, "database not found"), status=404)

        with pytest.raises(ArangoHttpException) as exc_info:
            database.create_database("analytics")
        assert exc_info.value.error_num == 1207
        assert exc_info.value.http_code == 409
        with pytest.raises(ArangoAPIException) as exc_info_2:
            database.drop_database("nope")
        assert exc_info_2.value.error_num == 1228

    @pytest.mark.describe("test of collection management")
    def test_database_collections(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection", method="POST"
        ).respond_with_json(ok_body(**COLL_DESC))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection",
            method="GET",
            query_string="excludeSystem=true",
        ).respond_with_json(ok_body(result=[COLL_DESC]))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection",
            method="GET",
            query_string="excludeSystem=false",
        ).respond_with_json(ok_body(result=[SYS_COLL_DESC, COLL_DESC]))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection",
            method="GET",
            query_string="excludeSystem=true",
        ).respond_with_json(ok_body(result=[COLL_DESC]))
        httpserver.expect_request(
            f"{DATABASE_PATH}/_api/collection/my_events", method="DELETE"
        ).respond_with_json(ok_body(id="9876"))

        collection = database.create_collection(
            "my_events",
            collection_type=CollectionType.DOCUMENT,
            wait_for_sync=True,
            key_options={"type": "traditional", "allowUserKeys": True},
        )
        assert isinstance(collection, Collection)
        assert collection.name == "my_events"
        assert collection.database == database
        cc_request = requests_to(
            httpserver, f"{DATABASE_PATH}/_api/collection", "POST"
        )[0]
        assert json.loads(cc_request.data) == {
            "name": "my_events",
            "type": 2,
            "waitForSync": True,
            "keyOptions": {"type": "traditional", "allowUserKeys": True},
        }

        descriptors = database.list_collections()
        assert len(descriptors) == 1
        assert isinstance(descriptors[0], CollectionDescriptor)
        assert descriptors[0].name == "my_events"
        assert descriptors[0].collection_type == CollectionType.DOCUMENT
        assert not descriptors[0].is_system

        all_descriptors = database.list_collections(exclude_system=False)
        assert [desc.is_system for desc in all_descriptors] == [True, False]

        assert database.list_collection_names() == ["my_events"]

        database.drop_collection("my_events")
        database.drop_collection(collection)
        assert (
            len(
                requests_to(
                    httpserver, f"{DATABASE_PATH}/_api/collection/my_events", "DELETE"
                )
            )
            == 2
        )

    @pytest.mark.describe("test of malformed collection descriptors")
    def test_database_collections_malformed(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection", method="GET"
        ).respond_with_json(ok_body(result=[{"name": "no_id_here"}]))
        with pytest.raises(UnexpectedArangoResponseException):
            database.list_collections()

    @pytest.mark.describe("test of get_collection and item access")
    def test_database_get_collection(self, database: Database) -> None:
        collection = database.get_collection("my_events")
        assert collection == database["my_events"]
        assert collection.name == "my_events"
        assert collection.database == database
        assert collection.api_options == database.api_options

        short_options = APIOptions(
            timeout_options=TimeoutOptions(request_timeout_ms=123)
        )
        collection_2 = database.get_collection("my_events", api_options=short_options)
        assert collection_2 != collection
        assert collection_2.api_options.timeout_options.request_timeout_ms == 123
        assert collection_2.database.api_options.timeout_options.request_timeout_ms == 123
        assert collection_2.with_options(api_options=short_options) == collection_2

    @pytest.mark.describe("test of generic commands")
    def test_database_command(self, httpserver: HTTPServer, database: Database) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/view",
            method="POST",
            query_string="force=true",
        ).respond_with_json(ok_body(id="v1", name="my_view", type="arangosearch"))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/view/nope", method="GET"
        ).respond_with_json(error_body(404, 1203, "view not found"), status=404)
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/view/nope", method="GET"
        ).respond_with_json(error_body(404, 1203, "view not found"), status=404)

        result = database.command(
            "POST",
            "_api/view",
            payload={"name": "my_view", "type": "arangosearch"},
            request_params={"force": True},
        )
        assert result == {"id": "v1", "name": "my_view", "type": "arangosearch"}

        with pytest.raises(ArangoHttpException) as exc_info:
            database.command("GET", "_api/view/nope")
        assert exc_info.value.error_num == 1203

        raw_result = database.command("GET", "_api/view/nope", raise_api_errors=False)
        assert raw_result == error_body(404, 1203, "view not found")

    @pytest.mark.describe("test of query settings validation")
    def test_database_query_validation(self, database: Database) -> None:
        with pytest.raises(ValueError):
            database.query(QueryRequest(query="RETURN 1"), count=True)
        with pytest.raises(ValueError):
            database.query("RETURN 1", batch_size=-3)

    @pytest.mark.describe("test of with_options and equality")
    def test_database_with_options(self, database: Database) -> None:
        assert database == database.with_options()
        assert database.with_options()._authenticator is database._authenticator

        other_db = database.with_options(name="other_db")
        assert other_db.name == "other_db"
        assert other_db != database
        assert other_db._authenticator is database._authenticator

        other_token_db = database.with_options(token="another-token")
        assert other_token_db != database
        assert other_token_db._authenticator is not database._authenticator

        short_db = database.with_options(
            api_options=APIOptions(
                timeout_options=TimeoutOptions(database_admin_timeout_ms=10)
            )
        )
        assert short_db.api_options.timeout_options.database_admin_timeout_ms == 10
        assert short_db != database

        with database as db:
            assert db is database


class TestDatabaseAsync:
    @pytest.mark.describe("test of database info, async")
    async def test_database_info_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/database/current", method="GET"
        ).respond_with_json(ok_body(result=DB_INFO))
        info = await async_database.info()
        assert info.name == DATABASE_NAME
        assert info.path == DB_INFO["path"]

    @pytest.mark.describe("test of database management, async")
    async def test_database_management_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database", method="GET"
        ).respond_with_json(ok_body(result=["_system", DATABASE_NAME]))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/database/user", method="GET"
        ).respond_with_json(ok_body(result=[DATABASE_NAME]))
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database", method="POST"
        ).respond_with_json(ok_body(code=201, result=True), status=201)
        httpserver.expect_oneshot_request(
            f"{SYSTEM_PATH}/_api/database/analytics", method="DELETE"
        ).respond_with_json(ok_body(result=True))

        assert await async_database.list_databases() == ["_system", DATABASE_NAME]
        assert await async_database.list_user_databases() == [DATABASE_NAME]
        new_db = await async_database.create_database("analytics")
        assert isinstance(new_db, AsyncDatabase)
        assert new_db.name == "analytics"
        # the spawned database shares the HTTP client
        assert new_db._async_client is async_database._async_client
        await async_database.drop_database("analytics")

    @pytest.mark.describe("test of collection management, async")
    async def test_database_collections_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection", method="POST"
        ).respond_with_json(ok_body(**COLL_DESC))
        httpserver.expect_request(
            f"{DATABASE_PATH}/_api/collection", method="GET"
        ).respond_with_json(ok_body(result=[COLL_DESC]))
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/collection/my_events", method="DELETE"
        ).respond_with_json(ok_body(id="9876"))

        collection = await async_database.create_collection("my_events")
        assert isinstance(collection, AsyncCollection)
        assert collection == async_database["my_events"]
        assert json.loads(
            requests_to(httpserver, f"{DATABASE_PATH}/_api/collection", "POST")[0].data
        ) == {"name": "my_events"}

        assert [
            desc.name for desc in await async_database.list_collections()
        ] == ["my_events"]
        assert await async_database.list_collection_names() == ["my_events"]
        await async_database.drop_collection(collection)

    @pytest.mark.describe("test of generic commands, async")
    async def test_database_command_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/version", method="GET"
        ).respond_with_json({"server": "arango", "version": "3.12.0"})
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/view/nope", method="GET"
        ).respond_with_json(error_body(404, 1203, "view not found"), status=404)

        assert await async_database.command("GET", "_api/version") == {
            "server": "arango",
            "version": "3.12.0",
        }
        with pytest.raises(ArangoAPIException) as exc_info:
            await async_database.command("GET", "_api/view/nope")
        assert exc_info.value.http_code == 404

    @pytest.mark.describe("test of with_options and lifecycle, async")
    async def test_database_with_options_async(
        self, async_database: AsyncDatabase
    ) -> None:
        assert async_database == async_database.with_options()
        other_db = async_database.with_options(name="other_db")
        assert other_db != async_database
        assert other_db._authenticator is async_database._authenticator
        assert other_db._async_client is async_database._async_client
        other_token_db = async_database.with_options(token="another")
        assert other_token_db._authenticator is not async_database._authenticator
