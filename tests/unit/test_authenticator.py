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

from __future__ import annotations

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
import werkzeug
from pytest_httpserver import HTTPServer

from arangopy import ArangoClient
from arangopy.authentication import (
    Credential,
    StaticTokenProvider,
    UsernamePasswordTokenProvider,
)
from arangopy.exceptions import (
    ArangoAuthException,
    AuthFailureReason,
    UnexpectedArangoResponseException,
)
from arangopy.utils.authenticator import Authenticator

from ..conftest import (
    AUTH_PATH,
    DATABASE_NAME,
    DATABASE_PATH,
    error_body,
    json_response,
    make_jwt,
    requests_to,
)

N_CONCURRENT = 6


def _slow_jwt_handler(request: werkzeug.Request) -> werkzeug.Response:
    # widens the window for overlapping renewals
    time.sleep(0.1)
    return json_response({"jwt": "fresh-jwt"})


class TestAuthenticator:
    @pytest.mark.describe("test of Authenticator basics")
    def test_authenticator_basics(self) -> None:
        up_auth = Authenticator(
            api_endpoint="http://host:8529/",
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        assert up_auth.auth_url == "http://host:8529/_open/auth"
        assert up_auth.is_renewable
        assert up_auth.current() == Credential(username="u", password="p")
        assert not up_auth.needs_renewal()
        expiring = up_auth.current().with_token(make_jwt(exp=1.0))
        assert up_auth.needs_renewal(expiring)
        assert not up_auth.needs_renewal(
            up_auth.current().with_token(make_jwt(exp=4102444800.0))
        )

        st_auth = Authenticator(
            api_endpoint="http://host:8529",
            token_provider=StaticTokenProvider("t"),
        )
        assert not st_auth.is_renewable
        assert st_auth.current().token == "t"

    @pytest.mark.describe("test of non-renewable credential left unchanged")
    def test_authenticator_renew_not_renewable(self) -> None:
        st_auth = Authenticator(
            api_endpoint="http://127.0.0.1:1",
            token_provider=StaticTokenProvider("t"),
        )
        stale = st_auth.current()
        assert st_auth.renew(stale, client=httpx.Client()) is stale

    @pytest.mark.describe("test of Authenticator coalescing renewals, threads")
    def test_authenticator_coalescing_sync(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_handler(
            _slow_jwt_handler
        )
        authenticator = Authenticator(
            api_endpoint=httpserver.url_for("/"),
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        stale = authenticator.current()
        with httpx.Client() as client:
            with ThreadPoolExecutor(max_workers=N_CONCURRENT) as executor:
                results = list(
                    executor.map(
                        lambda _: authenticator.renew(stale, client=client),
                        range(N_CONCURRENT),
                    )
                )

        assert len(requests_to(httpserver, AUTH_PATH)) == 1
        assert all(cred.token == "fresh-jwt" for cred in results)
        assert all(cred is results[0] for cred in results)
        assert authenticator.current() is results[0]

    @pytest.mark.describe("test of Authenticator coalescing renewals, async")
    async def test_authenticator_coalescing_async(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_handler(
            _slow_jwt_handler
        )
        authenticator = Authenticator(
            api_endpoint=httpserver.url_for("/"),
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        stale = authenticator.current()
        async with httpx.AsyncClient() as async_client:
            results = await asyncio.gather(
                *[
                    authenticator.async_renew(stale, async_client=async_client)
                    for _ in range(N_CONCURRENT)
                ]
            )

        assert len(requests_to(httpserver, AUTH_PATH)) == 1
        assert {cred.token for cred in results} == {"fresh-jwt"}

    @pytest.mark.describe("test of Authenticator coalescing on successive event loops")
    def test_authenticator_coalescing_two_loops(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_handler(
            _slow_jwt_handler
        )
        authenticator = Authenticator(
            api_endpoint=httpserver.url_for("/"),
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )

        async def _renew_burst() -> set[str | None]:
            stale = authenticator.current()
            async with httpx.AsyncClient() as async_client:
                results = await asyncio.gather(
                    *[
                        authenticator.async_renew(stale, async_client=async_client)
                        for _ in range(N_CONCURRENT)
                    ]
                )
            return {cred.token for cred in results}

        assert asyncio.run(_renew_burst()) == {"fresh-jwt"}
        assert asyncio.run(_renew_burst()) == {"fresh-jwt"}
        assert len(requests_to(httpserver, AUTH_PATH)) == 2

    @pytest.mark.describe("test of a renewal after a completed one")
    def test_authenticator_successive_renewals(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": "fresh-jwt"}
        )
        authenticator = Authenticator(
            api_endpoint=httpserver.url_for("/"),
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        with httpx.Client() as client:
            first = authenticator.renew(authenticator.current(), client=client)
            # a rejection of the fresh credential itself renews again
            second = authenticator.renew(first, client=client)
        assert second is not first
        assert len(requests_to(httpserver, AUTH_PATH)) == 2

    @pytest.mark.describe("test of Authenticator failures")
    async def test_authenticator_failures(self, httpserver: HTTPServer) -> None:
        authenticator = Authenticator(
            api_endpoint=httpserver.url_for("/"),
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        stale = authenticator.current()

        httpserver.expect_oneshot_request(AUTH_PATH).respond_with_json(
            error_body(401, 401, "Wrong credentials"), status=401
        )
        with httpx.Client() as client:
            with pytest.raises(ArangoAuthException) as exc_info:
                authenticator.renew(stale, client=client)
            assert exc_info.value.reason == AuthFailureReason.REJECTED
            assert exc_info.value.http_code == 401
            # a failed renewal leaves the credential cell untouched
            assert authenticator.current() is stale

            httpserver.expect_oneshot_request(AUTH_PATH).respond_with_json(
                {"nojwt": "here"}
            )
            with pytest.raises(UnexpectedArangoResponseException):
                authenticator.renew(stale, client=client)

        unreachable = Authenticator(
            api_endpoint="http://127.0.0.1:1",
            token_provider=UsernamePasswordTokenProvider("u", "p"),
        )
        async with httpx.AsyncClient() as async_client:
            with pytest.raises(ArangoAuthException) as a_exc_info:
                await unreachable.async_renew(
                    unreachable.current(), async_client=async_client
                )
        assert a_exc_info.value.reason == AuthFailureReason.UNREACHABLE


class TestConnectionAuthentication:
    @pytest.mark.describe("test of concurrent rejections coalescing, async database")
    async def test_concurrent_401_coalescing(self, httpserver: HTTPServer) -> None:
        def _guarded(request: werkzeug.Request) -> werkzeug.Response:
            if request.headers.get("Authorization") == "Bearer fresh-jwt":
                return json_response(
                    {"error": False, "code": 200, "result": {"name": DATABASE_NAME}}
                )
            return json_response(error_body(401, 11, "unauthorized"), status=401)

        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_handler(
            _slow_jwt_handler
        )
        httpserver.expect_request(
            f"{DATABASE_PATH}/_api/some/endpoint"
        ).respond_with_handler(_guarded)

        async with ArangoClient().get_async_database(
            httpserver.url_for("/"),
            database=DATABASE_NAME,
            username="u",
            password="p",
        ) as adb:
            results = await asyncio.gather(
                *[
                    adb.command("GET", "_api/some/endpoint")
                    for _ in range(N_CONCURRENT)
                ]
            )

        assert all(result == {"result": {"name": DATABASE_NAME}} for result in results)
        assert len(requests_to(httpserver, AUTH_PATH)) == 1

    @pytest.mark.describe("test of explicit authentication")
    def test_database_authenticate(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": "fresh-jwt"}
        )
        database = ArangoClient().get_database(
            httpserver.url_for("/"),
            database=DATABASE_NAME,
            username="u",
            password="p",
        )
        credential = database.authenticate()
        assert credential.token == "fresh-jwt"
        assert credential.username == "u"

        # copies with unchanged credentials share the connection
        other_db = database.with_options(name="other_db")
        assert other_db._authenticator is database._authenticator
        token_db = database.with_options(token="something-else")
        assert token_db._authenticator is not database._authenticator
