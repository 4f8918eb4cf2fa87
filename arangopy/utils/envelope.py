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
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Type, TypeVar, Union, cast

import httpx

from arangopy.exceptions import (
    ArangoAPIException,
    UnexpectedArangoResponseException,
)
from arangopy.settings.defaults import ENVELOPE_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

DecodedPayload = Union[Dict[str, Any], List[Any]]


@dataclass
class ResponseEnvelope:
    """
    The generic wrapper the server puts around most response bodies.

    Attributes:
        error: whether the server reports the request as failed.
        code: the HTTP-like status code echoed in the body, if present.
        error_num: the server-specific error number, if present.
        error_message: the human-readable error description, if present.
        payload: all other fields of the response body.
    """

    error: bool
    code: int | None
    error_num: int | None
    error_message: str | None
    payload: dict[str, Any]

    @property
    def is_error(self) -> bool:
        return self.error or (self.code is not None and self.code >= 400)

    @classmethod
    def _from_dict(cls, raw_dict: dict[str, Any]) -> ResponseEnvelope:
        """
        Split a decoded JSON object into envelope fields and payload.
        Envelope fields of an unexpected type are treated as absent.
        """

        _error = raw_dict.get("error")
        _code = raw_dict.get("code")
        _error_num = raw_dict.get("errorNum")
        _error_message = raw_dict.get("errorMessage")
        return ResponseEnvelope(
            error=_error is True,
            code=_code if _is_int(_code) else None,
            error_num=_error_num if _is_int(_error_num) else None,
            error_message=_error_message if isinstance(_error_message, str) else None,
            payload={k: v for k, v in raw_dict.items() if k not in ENVELOPE_FIELDS},
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_response_json(response: httpx.Response) -> Any:
    """
    Decode the body of a response as JSON.

    An empty body (as in a "204 No Content") yields an empty object.

    Raises:
        UnexpectedArangoResponseException: if the body is not valid JSON.
    """

    if response.status_code == 204 or not response.content:
        return {}
    try:
        return json.loads(response.text)
    except ValueError:
        raise UnexpectedArangoResponseException(
            text=f"Unparseable response (HTTP {response.status_code}) from API.",
            raw_response={"raw_response": response.text},
        )


def decode_envelope(raw_json: Any, http_code: int) -> DecodedPayload:
    """
    Apply the envelope decoding to a response body already parsed as JSON.

    Args:
        raw_json: the parsed response body.
        http_code: the HTTP status code of the response, used whenever the
            body does not echo it.

    Returns:
        the payload, i.e. the response object with the envelope fields removed.
        JSON arrays (as returned by a few listing endpoints) are returned as-is.

    Raises:
        ArangoAPIException: if the envelope reports an error.
        UnexpectedArangoResponseException: if the body is neither a JSON
            object nor a JSON array.
    """

    if isinstance(raw_json, list):
        return raw_json
    if not isinstance(raw_json, dict):
        raise UnexpectedArangoResponseException(
            text=f"Unexpected response body of type {type(raw_json).__name__}.",
            raw_response=raw_json,
        )
    envelope = ResponseEnvelope._from_dict(raw_json)
    if envelope.is_error:
        logger.warning(
            f"API response about to raise: errorNum={envelope.error_num}, "
            f"errorMessage='{envelope.error_message}'"
        )
        raise ArangoAPIException.from_response(
            http_code=http_code,
            raw_response=raw_json,
        )
    return envelope.payload


def ensure_dict_payload(payload: DecodedPayload) -> dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    raise UnexpectedArangoResponseException(
        text="Expected a JSON object in the response, got an array.",
        raw_response=payload,
    )


def _require_field(
    raw_dict: dict[str, Any],
    field_name: str,
    field_type: Type[T] | tuple[type, ...],
) -> T:
    """
    Extract a mandatory field from a payload, checking its type.

    Raises:
        UnexpectedArangoResponseException: if the field is missing or mistyped.
    """

    if field_name not in raw_dict:
        raise UnexpectedArangoResponseException(
            text=f"Missing required field '{field_name}' in response.",
            raw_response=raw_dict,
        )
    value = raw_dict[field_name]
    if not isinstance(value, field_type) or (
        isinstance(value, bool) and field_type in (int, float)
    ):
        raise UnexpectedArangoResponseException(
            text=(
                f"Field '{field_name}' in response has unexpected type "
                f"{type(value).__name__}."
            ),
            raw_response=raw_dict,
        )
    return cast(T, value)


def _optional_field(
    raw_dict: dict[str, Any],
    field_name: str,
    field_type: Type[T] | tuple[type, ...],
) -> T | None:
    """Same as `_require_field`, but an absent or null field yields None."""

    if raw_dict.get(field_name) is None:
        return None
    return _require_field(raw_dict, field_name, field_type)
