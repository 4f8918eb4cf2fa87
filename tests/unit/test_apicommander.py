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

import json

import httpx
import pytest
import werkzeug
from pytest_httpserver import HTTPServer

from arangopy.authentication import StaticTokenProvider, UsernamePasswordTokenProvider
from arangopy.exceptions import (
    ArangoAPIException,
    ArangoAuthException,
    ArangoHttpException,
    ArangoNetworkException,
    AuthFailureReason,
    UnexpectedArangoResponseException,
)
from arangopy.utils.api_commander import APICommander
from arangopy.utils.authenticator import Authenticator
from arangopy.utils.request_tools import HttpMethod

from ..conftest import AUTH_PATH, error_body, json_response, make_jwt, requests_to

BASE_PATH = "/base"


def _commander(
    api_endpoint: str,
    *,
    token: str | None = "tkn",
    username: str | None = None,
    password: str | None = None,
) -> APICommander:
    token_provider = (
        UsernamePasswordTokenProvider(username, password)
        if username is not None and password is not None
        else StaticTokenProvider(token)
    )
    return APICommander(
        api_endpoint=api_endpoint,
        path=BASE_PATH,
        authenticator=Authenticator(
            api_endpoint=api_endpoint,
            token_provider=token_provider,
        ),
        headers={"h": "v"},
        callers=[("cn0", "cv0"), ("cn1", "cv1")],
    )


class TestAPICommander:
    @pytest.mark.describe("test of APICommander request, sync")
    def test_apicommander_request_sync(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"))

        def hv_matcher(hk: str, hv: str | None, ev: str) -> bool:
            if hk.lower() == "user-agent":
                return hv is not None and hv.startswith(ev)
            return hv == ev

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.PUT,
            headers={
                "h": "v",
                "Authorization": "Bearer tkn",
                "User-Agent": "cn0/cv0 cn1/cv1",
            },
            header_value_matcher=hv_matcher,
            data='{"a":1}',
        ).respond_with_json({"error": False, "code": 200, "r": 1})
        resp_b = cmd.request(http_method=HttpMethod.PUT, payload={"a": 1})
        assert resp_b == {"r": 1}

        httpserver.expect_oneshot_request(
            f"{BASE_PATH}/extra/path",
            method=HttpMethod.GET,
            query_string="p=1",
        ).respond_with_json(["x", "y"])
        resp_e = cmd.request(
            http_method=HttpMethod.GET,
            additional_path="extra/path",
            request_params={"p": "1"},
        )
        assert resp_e == ["x", "y"]

    @pytest.mark.describe("test of APICommander request, async")
    async def test_apicommander_request_async(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"))

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
            headers={"h": "v", "Authorization": "Bearer tkn"},
        ).respond_with_json({"error": False, "code": 201, "r": 1})
        resp_b = await cmd.async_request(payload={})
        assert resp_b == {"r": 1}

        httpserver.expect_oneshot_request(
            f"{BASE_PATH}/extra",
            method=HttpMethod.DELETE,
        ).respond_with_data("", status=204)
        resp_e = await cmd.async_request(
            http_method=HttpMethod.DELETE,
            additional_path="extra",
        )
        assert resp_e == {}
        await cmd.async_client.aclose()

    @pytest.mark.describe("test of APICommander exceptions, sync")
    def test_apicommander_exceptions_sync(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"))

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_data("{unparseable")
        with pytest.raises(UnexpectedArangoResponseException):
            cmd.request()

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_json(
            error_body(409, 1210, "unique constraint violated")
        )
        with pytest.raises(ArangoAPIException) as exc_info:
            cmd.request()
        assert not isinstance(exc_info.value, ArangoHttpException)
        assert exc_info.value.error_num == 1210
        assert exc_info.value.http_code == 409
        assert exc_info.value.error_message == "unique constraint violated"

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_json(
            error_body(404, 1203, "collection or view not found"),
            status=404,
        )
        with pytest.raises(ArangoHttpException) as http_exc_info:
            cmd.request()
        assert isinstance(http_exc_info.value, httpx.HTTPStatusError)
        assert http_exc_info.value.error_num == 1203
        assert http_exc_info.value.http_code == 404

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_data(
            "Internal Server Error", status=500
        )
        with pytest.raises(ArangoHttpException) as http_exc_info_2:
            cmd.request()
        assert http_exc_info_2.value.error_num is None
        assert http_exc_info_2.value.http_code == 500

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_json("scalar")
        with pytest.raises(UnexpectedArangoResponseException):
            cmd.request()

    @pytest.mark.describe("test of APICommander raw request without raising")
    def test_apicommander_raw_request_noraise(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"))

        httpserver.expect_oneshot_request(BASE_PATH).respond_with_json(
            error_body(404, 1202, "document not found"),
            status=404,
        )
        raw_response = cmd.raw_request(raise_api_errors=False)
        assert raw_response.status_code == 404
        assert raw_response.json()["errorNum"] == 1202

    @pytest.mark.describe("test of APICommander network errors, sync and async")
    async def test_apicommander_network_errors(self) -> None:
        cmd = _commander("http://127.0.0.1:1")

        with pytest.raises(ArangoNetworkException) as exc_info:
            cmd.request()
        assert exc_info.value.endpoint is not None
        assert "127.0.0.1:1" in exc_info.value.endpoint

        with pytest.raises(ArangoNetworkException):
            await cmd.async_request()
        await cmd.async_client.aclose()

    @pytest.mark.describe("test of APICommander logging with redacted headers")
    def test_apicommander_redacted_logging(
        self,
        httpserver: HTTPServer,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        cmd = _commander(httpserver.url_for("/"), token="very-secret-token")
        httpserver.expect_oneshot_request(BASE_PATH).respond_with_json({"r": 1})
        with caplog.at_level("DEBUG", logger="arangopy"):
            cmd.request()
        assert "very-secret-token" not in caplog.text
        assert "Request URL: POST" in caplog.text


class TestAPICommanderAuthentication:
    @pytest.mark.describe("test of non-renewable credential rejected")
    async def test_apicommander_not_renewable(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"))
        httpserver.expect_request(BASE_PATH).respond_with_json(
            error_body(401, 11, "not authorized to execute this request"),
            status=401,
        )

        with pytest.raises(ArangoAuthException) as exc_info:
            cmd.request()
        assert exc_info.value.reason == AuthFailureReason.NOT_RENEWABLE
        with pytest.raises(ArangoAuthException) as a_exc_info:
            await cmd.async_request()
        assert a_exc_info.value.reason == AuthFailureReason.NOT_RENEWABLE

        # one attempt per call, no renewal
        assert len(requests_to(httpserver, BASE_PATH)) == 2
        assert requests_to(httpserver, AUTH_PATH) == []
        await cmd.async_client.aclose()

    @pytest.mark.describe("test of renew-and-retry on 401, sync")
    def test_apicommander_renew_and_retry_sync(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"), username="u", password="p")

        def _handler(request: werkzeug.Request) -> werkzeug.Response:
            if request.headers.get("Authorization") == "Bearer fresh":
                return json_response({"error": False, "code": 200, "r": "ok"})
            return json_response(error_body(401, 11, "unauthorized"), status=401)

        httpserver.expect_request(BASE_PATH).respond_with_handler(_handler)
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": "fresh"}
        )

        assert cmd.request() == {"r": "ok"}
        assert len(requests_to(httpserver, AUTH_PATH)) == 1
        auth_payload = json.loads(requests_to(httpserver, AUTH_PATH)[0].data)
        assert auth_payload == {"username": "u", "password": "p"}
        assert cmd.authenticator.current().token == "fresh"

        # the fresh token is reused with no further renewals
        assert cmd.request() == {"r": "ok"}
        assert len(requests_to(httpserver, AUTH_PATH)) == 1

    @pytest.mark.describe("test of renew-and-retry on 401, async")
    async def test_apicommander_renew_and_retry_async(
        self, httpserver: HTTPServer
    ) -> None:
        cmd = _commander(httpserver.url_for("/"), username="u", password="p")

        def _handler(request: werkzeug.Request) -> werkzeug.Response:
            if request.headers.get("Authorization") == "Bearer fresh":
                return json_response({"error": False, "code": 200, "r": "ok"})
            return json_response(error_body(401, 11, "unauthorized"), status=401)

        httpserver.expect_request(BASE_PATH).respond_with_handler(_handler)
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": "fresh"}
        )

        assert await cmd.async_request() == {"r": "ok"}
        assert len(requests_to(httpserver, AUTH_PATH)) == 1
        await cmd.async_client.aclose()

    @pytest.mark.describe("test of a second 401 after renewal")
    async def test_apicommander_rejected_twice(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"), username="u", password="p")
        httpserver.expect_request(BASE_PATH).respond_with_json(
            error_body(401, 11, "unauthorized"), status=401
        )
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": "fresh"}
        )

        with pytest.raises(ArangoAuthException) as exc_info:
            cmd.request()
        assert exc_info.value.reason == AuthFailureReason.REJECTED
        # original attempt plus exactly one retry
        assert len(requests_to(httpserver, BASE_PATH)) == 2
        assert len(requests_to(httpserver, AUTH_PATH)) == 1

        with pytest.raises(ArangoAuthException) as a_exc_info:
            await cmd.async_request()
        assert a_exc_info.value.reason == AuthFailureReason.REJECTED
        assert len(requests_to(httpserver, BASE_PATH)) == 4
        await cmd.async_client.aclose()

    @pytest.mark.describe("test of renewal rejected by the auth endpoint")
    def test_apicommander_renewal_rejected(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"), username="u", password="wrong")
        httpserver.expect_request(BASE_PATH).respond_with_json(
            error_body(401, 11, "unauthorized"), status=401
        )
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            error_body(401, 401, "Wrong credentials"), status=401
        )

        with pytest.raises(ArangoAuthException) as exc_info:
            cmd.request()
        assert exc_info.value.reason == AuthFailureReason.REJECTED
        assert len(requests_to(httpserver, BASE_PATH)) == 1

    @pytest.mark.describe("test of proactive renewal of an expiring token")
    def test_apicommander_proactive_renewal(self, httpserver: HTTPServer) -> None:
        cmd = _commander(httpserver.url_for("/"), username="u", password="p")
        # a token expiring within the safety margin
        cmd.authenticator._credential = cmd.authenticator.current().with_token(
            make_jwt(exp=1.0)
        )
        fresh_jwt = make_jwt(exp=4102444800.0)
        httpserver.expect_request(AUTH_PATH, method="POST").respond_with_json(
            {"jwt": fresh_jwt}
        )
        httpserver.expect_request(
            BASE_PATH,
            headers={"Authorization": f"Bearer {fresh_jwt}"},
        ).respond_with_json({"r": 1})

        assert cmd.request() == {"r": 1}
        assert len(requests_to(httpserver, AUTH_PATH)) == 1
        assert len(requests_to(httpserver, BASE_PATH)) == 1
