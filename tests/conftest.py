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
Main conftest for shared fixtures (if any).

All unit tests run against a mock server (pytest-httpserver) standing in for
ArangoDB: the helpers here build the databases pointed at it and a few
canned response bodies.
"""

from __future__ import annotations

import base64
import json
from collections.abc import AsyncIterator
from typing import Any

import pytest
import werkzeug
from pytest_httpserver import HTTPServer

from arangopy import ArangoClient, AsyncDatabase, Database

DATABASE_NAME = "unit_db"
DATABASE_PATH = f"/_db/{DATABASE_NAME}"
SYSTEM_PATH = "/_db/_system"
CURSOR_PATH = f"{DATABASE_PATH}/_api/cursor"
AUTH_PATH = "/_open/auth"
STATIC_TOKEN = "static-token"
USERNAME = "root"
PASSWORD = "openSesame"


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def make_jwt(exp: float | None) -> str:
    """Build an (unsigned) JWT-looking string with the given `exp` claim."""
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
    claims: dict[str, Any] = {"iss": "arangodb"}
    if exp is not None:
        claims["exp"] = exp
    payload = _b64url(json.dumps(claims).encode())
    return f"{header}.{payload}.c2lnbmF0dXJl"


def ok_body(**fields: Any) -> dict[str, Any]:
    return {"error": False, "code": 200, **fields}


def error_body(code: int, error_num: int, message: str) -> dict[str, Any]:
    return {
        "error": True,
        "code": code,
        "errorNum": error_num,
        "errorMessage": message,
    }


def json_response(
    body: Any, status: int = 200, headers: dict[str, str] | None = None
) -> werkzeug.Response:
    return werkzeug.Response(
        json.dumps(body),
        status=status,
        headers=headers,
        content_type="application/json",
    )


def requests_to(
    httpserver: HTTPServer, path: str, method: str | None = None
) -> list[werkzeug.Request]:
    """The requests received by the mock server for a path (and method)."""
    return [
        request
        for request, _ in httpserver.log
        if request.path == path and (method is None or request.method == method)
    ]


@pytest.fixture
def client() -> ArangoClient:
    return ArangoClient(callers=[("unit_test", "0.1")])


@pytest.fixture
def database(httpserver: HTTPServer, client: ArangoClient) -> Database:
    return client.get_database(
        httpserver.url_for("/"),
        database=DATABASE_NAME,
        token=STATIC_TOKEN,
    )


@pytest.fixture
def up_database(httpserver: HTTPServer, client: ArangoClient) -> Database:
    """A database authenticating with username/password."""
    return client.get_database(
        httpserver.url_for("/"),
        database=DATABASE_NAME,
        username=USERNAME,
        password=PASSWORD,
    )


@pytest.fixture
async def async_database(
    httpserver: HTTPServer, client: ArangoClient
) -> AsyncIterator[AsyncDatabase]:
    adb = client.get_async_database(
        httpserver.url_for("/"),
        database=DATABASE_NAME,
        token=STATIC_TOKEN,
    )
    yield adb
    await adb.close()


@pytest.fixture
async def async_up_database(
    httpserver: HTTPServer, client: ArangoClient
) -> AsyncIterator[AsyncDatabase]:
    adb = client.get_async_database(
        httpserver.url_for("/"),
        database=DATABASE_NAME,
        username=USERNAME,
        password=PASSWORD,
    )
    yield adb
    await adb.close()


__all__ = [
    "AUTH_PATH",
    "CURSOR_PATH",
    "DATABASE_NAME",
    "DATABASE_PATH",
    "PASSWORD",
    "STATIC_TOKEN",
    "SYSTEM_PATH",
    "USERNAME",
    "error_body",
    "json_response",
    "make_jwt",
    "ok_body",
    "requests_to",
]
