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
Unit tests for the ArangoClient entry point
"""

from __future__ import annotations

import pytest
from pytest_httpserver import HTTPServer

from arangopy import ArangoClient, AsyncDatabase, Database
from arangopy.api_options import APIOptions, TimeoutOptions
from arangopy.authentication import (
    StaticTokenProvider,
    UsernamePasswordTokenProvider,
)

from ..conftest import DATABASE_NAME, DATABASE_PATH, ok_body, requests_to


class TestArangoClient:
    @pytest.mark.describe("test of client equality and cloning")
    def test_client_with_options(self) -> None:
        client = ArangoClient()
        assert client == ArangoClient()
        assert client != ArangoClient(callers=[("app", "1.0")])
        assert client.with_options(callers=[("app", "1.0")]) == ArangoClient(
            callers=[("app", "1.0")]
        )
        assert client.with_options(
            api_options=APIOptions(
                timeout_options=TimeoutOptions(request_timeout_ms=1)
            )
        ) != client
        assert client != "a client"

    @pytest.mark.describe("test of credential validation")
    def test_client_credentials_validation(self, httpserver: HTTPServer) -> None:
        client = ArangoClient()
        url = httpserver.url_for("/")
        with pytest.raises(ValueError):
            client.get_database(url, token="t", username="u", password="p")
        with pytest.raises(ValueError):
            client.get_database(url, username="u")
        with pytest.raises(ValueError):
            client.get_database(url, password="p")
        with pytest.raises(ValueError):
            client.get_async_database(url, token="t", password="p")

    @pytest.mark.describe("test of database spawning")
    def test_client_get_database(self, httpserver: HTTPServer) -> None:
        client = ArangoClient(
            api_options=APIOptions(
                timeout_options=TimeoutOptions(request_timeout_ms=1234)
            )
        )
        url = httpserver.url_for("/")

        system_db = client.get_database(url, token="t")
        assert isinstance(system_db, Database)
        assert system_db.name == "_system"
        assert isinstance(system_db.api_options.token, StaticTokenProvider)
        assert system_db.api_options.timeout_options.request_timeout_ms == 1234

        up_db = client.get_database(
            url,
            database=DATABASE_NAME,
            username="root",
            password="openSesame",
            api_options=APIOptions(
                timeout_options=TimeoutOptions(request_timeout_ms=99)
            ),
        )
        assert up_db.name == DATABASE_NAME
        assert isinstance(up_db.api_options.token, UsernamePasswordTokenProvider)
        assert up_db.api_options.timeout_options.request_timeout_ms == 99
        # the password never shows up in the representation
        assert "openSesame" not in repr(up_db)

        assert client.get_database(url, token="t") == system_db
        assert up_db != system_db

    @pytest.mark.describe("test of async database spawning")
    async def test_client_get_async_database(self, httpserver: HTTPServer) -> None:
        client = ArangoClient()
        adb = client.get_async_database(
            httpserver.url_for("/"), database=DATABASE_NAME, token="t"
        )
        assert isinstance(adb, AsyncDatabase)
        assert adb.name == DATABASE_NAME
        await adb.close()

    @pytest.mark.describe("test of caller identities in the user-agent")
    def test_client_callers_user_agent(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(
            f"{DATABASE_PATH}/_api/database/user", method="GET"
        ).respond_with_json(ok_body(result=[DATABASE_NAME]))

        client = ArangoClient(callers=[("my_app", "1.2"), ("my_framework", None)])
        database = client.get_database(
            httpserver.url_for("/"), database=DATABASE_NAME, token="t"
        )
        database.list_user_databases()
        user_agent = requests_to(
            httpserver, f"{DATABASE_PATH}/_api/database/user"
        )[0].headers["User-Agent"]
        assert user_agent.startswith("my_app/1.2 my_framework arangopy/")
