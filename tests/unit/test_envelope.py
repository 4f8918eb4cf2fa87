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
Unit tests for the decoding of the response envelope
"""

from __future__ import annotations

import httpx
import pytest

from arangopy.exceptions import ArangoAPIException, UnexpectedArangoResponseException
from arangopy.utils.envelope import (
    ResponseEnvelope,
    _optional_field,
    _require_field,
    decode_envelope,
    ensure_dict_payload,
    parse_response_json,
)


class TestEnvelope:
    @pytest.mark.describe("test of envelope splitting")
    def test_envelope_from_dict(self) -> None:
        envelope = ResponseEnvelope._from_dict(
            {"error": False, "code": 201, "id": "c1", "result": [1]}
        )
        assert not envelope.is_error
        assert envelope.code == 201
        assert envelope.error_num is None
        assert envelope.payload == {"id": "c1", "result": [1]}

        bad_types = ResponseEnvelope._from_dict(
            {"error": "yes", "code": True, "errorNum": "1", "x": 1}
        )
        assert not bad_types.is_error
        assert bad_types.code is None
        assert bad_types.error_num is None
        assert bad_types.payload == {"x": 1}

    @pytest.mark.describe("test of envelope decoding, success")
    def test_decode_envelope_success(self) -> None:
        assert decode_envelope(
            {"error": False, "code": 200, "result": {"name": "db"}}, 200
        ) == {"result": {"name": "db"}}
        # no envelope fields at all
        assert decode_envelope({"jwt": "x"}, 200) == {"jwt": "x"}
        # arrays pass through
        assert decode_envelope(["a", "b"], 200) == ["a", "b"]
        assert decode_envelope({}, 204) == {}

    @pytest.mark.describe("test of envelope decoding, errors")
    def test_decode_envelope_errors(self) -> None:
        with pytest.raises(ArangoAPIException) as exc_info:
            decode_envelope(
                {
                    "error": True,
                    "code": 404,
                    "errorNum": 1600,
                    "errorMessage": "cursor not found",
                },
                200,
            )
        assert exc_info.value.error_num == 1600
        assert exc_info.value.http_code == 404
        assert exc_info.value.error_message == "cursor not found"
        assert "cursor not found" in str(exc_info.value)
        assert "1600" in str(exc_info.value)

        # an error code alone is enough
        with pytest.raises(ArangoAPIException) as exc_info_2:
            decode_envelope({"code": 409, "errorNum": 1210}, 200)
        assert exc_info_2.value.error_num == 1210

        # the error flag alone is enough, and the status is taken from HTTP
        with pytest.raises(ArangoAPIException) as exc_info_3:
            decode_envelope({"error": True}, 503)
        assert exc_info_3.value.http_code == 503
        assert exc_info_3.value.error_num is None

        for non_object in ("text", 12, None, True):
            with pytest.raises(UnexpectedArangoResponseException):
                decode_envelope(non_object, 200)

    @pytest.mark.describe("test of response JSON parsing")
    def test_parse_response_json(self) -> None:
        assert parse_response_json(httpx.Response(204)) == {}
        assert parse_response_json(httpx.Response(200, content=b"")) == {}
        assert parse_response_json(httpx.Response(200, json={"a": [1]})) == {
            "a": [1]
        }
        with pytest.raises(UnexpectedArangoResponseException):
            parse_response_json(httpx.Response(200, content=b"{not json"))

    @pytest.mark.describe("test of typed field extraction")
    def test_field_extraction(self) -> None:
        payload = {"count": 3, "flag": True, "name": "x", "nothing": None}
        assert _require_field(payload, "count", int) == 3
        assert _require_field(payload, "flag", bool) is True
        assert _optional_field(payload, "nothing", str) is None
        assert _optional_field(payload, "absent", str) is None
        assert _optional_field(payload, "name", str) == "x"
        with pytest.raises(UnexpectedArangoResponseException):
            _require_field(payload, "absent", int)
        with pytest.raises(UnexpectedArangoResponseException):
            _require_field(payload, "name", int)
        # booleans are not integers here
        with pytest.raises(UnexpectedArangoResponseException):
            _require_field(payload, "flag", int)

        assert ensure_dict_payload({"a": 1}) == {"a": 1}
        with pytest.raises(UnexpectedArangoResponseException):
            ensure_dict_payload([1, 2])
