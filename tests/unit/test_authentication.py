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
Unit tests for the token providers and credentials
"""

from __future__ import annotations

import base64

import pytest

from arangopy.authentication import (
    Credential,
    StaticTokenProvider,
    UsernamePasswordTokenProvider,
    coerce_token_provider,
    jwt_expiry,
)

from ..conftest import make_jwt


@pytest.mark.describe("test of static token provider")
def test_static_token_provider() -> None:
    literal_t = "eyJhbGciOi.xyz.abc"
    static_tp = StaticTokenProvider(literal_t)

    assert static_tp.get_token() == literal_t
    credential = static_tp.get_credential()
    assert credential.token == literal_t
    assert not credential.renewable


@pytest.mark.describe("test of username-password token provider")
def test_username_password_token_provider() -> None:
    up_tp = UsernamePasswordTokenProvider("root", "openSesame")

    assert up_tp.get_token() == base64.b64encode(b"root:openSesame").decode()
    credential = up_tp.get_credential()
    assert credential == Credential(username="root", password="openSesame")
    assert credential.renewable
    assert "openSesame" not in repr(up_tp)


@pytest.mark.describe("test of null token provider")
def test_null_token_provider() -> None:
    null_tp = StaticTokenProvider(None)

    assert null_tp.get_token() is None
    assert not null_tp
    assert null_tp.get_credential() == Credential()
    assert null_tp.get_credential().authorization_header() == {}


@pytest.mark.describe("test of token providers coercion")
def test_coerce_token_provider() -> None:
    literal_t = "tkn"
    static_tp = StaticTokenProvider(literal_t)
    null_tp = StaticTokenProvider(None)
    up_tp = UsernamePasswordTokenProvider("root", "openSesame")

    assert coerce_token_provider(literal_t).get_token() == literal_t
    assert coerce_token_provider(static_tp) is static_tp
    assert coerce_token_provider(up_tp) is up_tp
    assert coerce_token_provider(null_tp).get_token() is None
    assert coerce_token_provider(None).get_token() is None


@pytest.mark.describe("test of token providers equality")
def test_token_provider_equality() -> None:
    static_tp_1 = StaticTokenProvider("tkn")
    null_tp_1 = StaticTokenProvider(None)
    up_tp_1 = UsernamePasswordTokenProvider("root", "openSesame")
    static_tp_2 = StaticTokenProvider("tkn")
    null_tp_2 = StaticTokenProvider(None)
    up_tp_2 = UsernamePasswordTokenProvider("root", "openSesame")

    assert static_tp_1 == static_tp_2
    assert null_tp_1 == null_tp_2
    assert up_tp_1 == up_tp_2

    assert static_tp_1 != null_tp_1
    assert static_tp_1 != up_tp_1
    assert up_tp_1 != UsernamePasswordTokenProvider("root", "other")

    assert static_tp_1
    assert not null_tp_1


@pytest.mark.describe("test of JWT expiry extraction")
def test_jwt_expiry() -> None:
    assert jwt_expiry(make_jwt(exp=1234567890)) == 1234567890.0
    assert jwt_expiry(make_jwt(exp=None)) is None
    assert jwt_expiry("not-a-jwt") is None
    assert jwt_expiry("a.%%%.c") is None
    assert jwt_expiry("a.bm90LWpzb24.c") is None


@pytest.mark.describe("test of credential expiry and headers")
def test_credential_expiry_and_headers() -> None:
    up_cred = Credential(username="root", password="openSesame")
    basic = base64.b64encode(b"root:openSesame").decode()
    assert up_cred.authorization_header() == {"Authorization": f"Basic {basic}"}
    assert not up_cred.is_expired()

    jwt = make_jwt(exp=1000.0)
    tok_cred = up_cred.with_token(jwt)
    assert tok_cred is not up_cred
    assert up_cred.token is None
    assert tok_cred.expires_at == 1000.0
    assert tok_cred.authorization_header() == {"Authorization": f"Bearer {jwt}"}
    assert tok_cred.renewable

    assert not tok_cred.is_expired(now=900.0, margin_s=30)
    assert tok_cred.is_expired(now=980.0, margin_s=30)
    assert tok_cred.is_expired(now=2000.0, margin_s=0)

    # unknown expiry: used until rejected
    opaque = Credential(token="opaque")
    assert not opaque.is_expired(now=1e12)


@pytest.mark.describe("test of credential immutability and redaction")
def test_credential_immutable_and_repr() -> None:
    credential = Credential(username="root", password="openSesame", token="t" * 40)
    with pytest.raises(AttributeError):
        credential.token = "other"  # type: ignore[misc]
    cred_repr = repr(credential)
    assert "openSesame" not in cred_repr
    assert "t" * 40 not in cred_repr
