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

from dataclasses import dataclass
from typing import Any

import httpx

from arangopy.utils.str_enum import StrEnum


class ArangoException(Exception):
    """
    Any exception occurred while issuing requests to the database HTTP API
    and specific to it, such as:
      - the server returns a response with an error envelope,
      - the server cannot be reached,
      - credentials are rejected,
    but not, for instance, a ValueError for an invalid method argument.
    """

    pass


@dataclass
class ArangoNetworkException(ArangoException):
    """
    A request could not be completed at the network level: the connection
    was refused, DNS resolution failed, the connection dropped and so on.
    These are never retried by the client.

    Attributes:
        text: a textual description of the error.
        endpoint: the full URL the request was addressed to, if available.
    """

    text: str
    endpoint: str | None

    def __init__(
        self,
        text: str,
        *,
        endpoint: str | None = None,
    ) -> None:
        ArangoException.__init__(self, text)
        self.text = text
        self.endpoint = endpoint

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.TransportError,
    ) -> ArangoNetworkException:
        """Wrap a httpx transport-level failure into this exception."""

        endpoint: str | None
        try:
            endpoint = str(httpx_error.request.url)
        except RuntimeError:
            # httpx raises RuntimeError when no request is attached
            endpoint = None
        text = str(httpx_error) or httpx_error.__class__.__name__
        return cls(text=text, endpoint=endpoint)


@dataclass
class ArangoTimeoutException(ArangoNetworkException):
    """
    An operation timed out. This can be a request timeout occurring
    during a specific HTTP request, or can happen over the course of a method
    involving several requests in a row, such as iterating a query cursor
    with an overall timeout.

    Attributes:
        text: a textual description of the error.
        timeout_type: this denotes the phase of the HTTP request when the event
            occurred ("connect", "read", "write", "pool") or "generic" if there is
            not a specific request associated to the exception.
        endpoint: if the timeout is tied to a specific request, this is the
            URL that the request was targeting.
        raw_payload: if the timeout is tied to a specific request, this is the
            associated payload (as a string).
    """

    timeout_type: str
    raw_payload: str | None

    def __init__(
        self,
        text: str,
        *,
        timeout_type: str,
        endpoint: str | None,
        raw_payload: str | None,
    ) -> None:
        ArangoNetworkException.__init__(self, text, endpoint=endpoint)
        self.timeout_type = timeout_type
        self.raw_payload = raw_payload


class AuthFailureReason(StrEnum):
    """
    Why an authentication attempt failed.

    Values:
        REJECTED: the server refused the credentials (also after a renewal).
        UNREACHABLE: the token-issuance endpoint could not be reached.
        NOT_RENEWABLE: the credential is a pre-issued token which the client
            cannot renew by itself; a fresh one must be supplied.
    """

    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    NOT_RENEWABLE = "not_renewable"


@dataclass
class ArangoAuthException(ArangoException):
    """
    Authentication failed or could not be attempted.

    Attributes:
        text: a textual description of the error.
        reason: an `AuthFailureReason` value.
        http_code: the HTTP status code which caused the failure, if any.
    """

    text: str
    reason: AuthFailureReason
    http_code: int | None

    def __init__(
        self,
        text: str,
        *,
        reason: AuthFailureReason,
        http_code: int | None = None,
    ) -> None:
        ArangoException.__init__(self, text)
        self.text = text
        self.reason = reason
        self.http_code = http_code

    def __str__(self) -> str:
        return f"{self.text} ({self.reason.value})"


def _summarize_api_error(
    http_code: int | None, error_num: int | None, error_message: str | None
) -> str:
    pieces = [
        pc
        for pc in (
            f"[HTTP {http_code}]" if http_code is not None else None,
            error_message or "(no error message)",
            f"(errorNum {error_num})" if error_num is not None else None,
        )
        if pc is not None
    ]
    return " ".join(pieces)


@dataclass
class ArangoAPIException(ArangoException):
    """
    The server explicitly reported a domain error in the response envelope,
    e.g. "document not found" or "unique constraint violated".

    The `error_num` attribute is the server's own error code and is the
    recommended discriminator for callers (see `arangopy.constants.ErrorNum`).

    Attributes:
        text: a text message about the exception.
        http_code: the status code, from the envelope `code` or the HTTP response.
        error_num: the server-specific error number (`errorNum`), if any.
        error_message: the server-provided message (`errorMessage`), if any.
        raw_response: the full decoded response body, if it was JSON.
    """

    text: str
    http_code: int | None
    error_num: int | None
    error_message: str | None
    raw_response: dict[str, Any] | None

    def __init__(
        self,
        text: str | None = None,
        *,
        http_code: int | None,
        error_num: int | None,
        error_message: str | None,
        raw_response: dict[str, Any] | None = None,
    ) -> None:
        _text = text or _summarize_api_error(http_code, error_num, error_message)
        ArangoException.__init__(self, _text)
        self.text = _text
        self.http_code = http_code
        self.error_num = error_num
        self.error_message = error_message
        self.raw_response = raw_response

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_response(
        cls,
        *,
        http_code: int | None,
        raw_response: dict[str, Any],
    ) -> ArangoAPIException:
        """Parse a raw error envelope from the API into this exception."""

        raw_code = raw_response.get("code")
        error_num = raw_response.get("errorNum")
        error_message = raw_response.get("errorMessage")
        return cls(
            http_code=raw_code if isinstance(raw_code, int) else http_code,
            error_num=error_num if isinstance(error_num, int) else None,
            error_message=error_message if isinstance(error_message, str) else None,
            raw_response=raw_response,
        )


@dataclass
class ArangoHttpException(ArangoAPIException, httpx.HTTPStatusError):
    """
    A request to the API resulted in an HTTP 4xx or 5xx response.

    The error envelope, when found in the response body, is parsed into
    the same structured attributes as for `ArangoAPIException`, while
    still raising (a subclass of) `httpx.HTTPStatusError`.
    """

    def __init__(
        self,
        text: str | None = None,
        *,
        httpx_error: httpx.HTTPStatusError,
        http_code: int | None,
        error_num: int | None,
        error_message: str | None,
        raw_response: dict[str, Any] | None = None,
    ) -> None:
        ArangoAPIException.__init__(
            self,
            text,
            http_code=http_code,
            error_num=error_num,
            error_message=error_message,
            raw_response=raw_response,
        )
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.httpx_error = httpx_error

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
        **kwargs: Any,
    ) -> ArangoHttpException:
        """Parse a httpx status error into this exception."""

        raw_response: dict[str, Any] | None
        # the attempt to extract a response structure cannot afford failure.
        try:
            _json = httpx_error.response.json()
            raw_response = _json if isinstance(_json, dict) else None
        except Exception:
            raw_response = None
        http_code: int | None
        try:
            http_code = httpx_error.response.status_code
        except Exception:
            http_code = None
        error_num: int | None = None
        error_message: str | None = None
        if raw_response is not None:
            _error_num = raw_response.get("errorNum")
            _error_message = raw_response.get("errorMessage")
            error_num = _error_num if isinstance(_error_num, int) else None
            error_message = (
                _error_message if isinstance(_error_message, str) else None
            )
        return cls(
            httpx_error=httpx_error,
            http_code=http_code,
            error_num=error_num,
            error_message=error_message or str(httpx_error),
            raw_response=raw_response,
            **kwargs,
        )


@dataclass
class CursorExpiredException(ArangoAPIException):
    """
    A fetch-next or delete targeted a cursor which the server no longer
    recognizes (typically because its time-to-live elapsed). This ends the
    iteration abnormally and is distinct from regular exhaustion.

    Attributes:
        cursor_id: the server-side ID of the cursor.
        (plus all attributes of `ArangoAPIException`)
    """

    cursor_id: str | None

    def __init__(
        self,
        text: str | None = None,
        *,
        cursor_id: str | None,
        http_code: int | None,
        error_num: int | None,
        error_message: str | None,
        raw_response: dict[str, Any] | None = None,
    ) -> None:
        ArangoAPIException.__init__(
            self,
            text,
            http_code=http_code,
            error_num=error_num,
            error_message=error_message,
            raw_response=raw_response,
        )
        self.cursor_id = cursor_id

    @classmethod
    def from_api_exception(
        cls,
        api_exception: ArangoAPIException,
        *,
        cursor_id: str | None,
    ) -> CursorExpiredException:
        return cls(
            f"Cursor '{cursor_id}' expired or not found: {api_exception.text}",
            cursor_id=cursor_id,
            http_code=api_exception.http_code,
            error_num=api_exception.error_num,
            error_message=api_exception.error_message,
            raw_response=api_exception.raw_response,
        )


@dataclass
class UnexpectedArangoResponseException(ArangoException):
    """
    The API response does not have the shape the client expects
    (e.g. a required field is missing). This signals a protocol or
    version mismatch and is never retried.

    Attributes:
        text: a text message about the exception.
        raw_response: the response returned by the API, as far as it
            could be decoded.
    """

    text: str
    raw_response: Any

    def __init__(
        self,
        text: str,
        raw_response: Any,
    ) -> None:
        ArangoException.__init__(self, text)
        self.text = text
        self.raw_response = raw_response


@dataclass
class CursorException(ArangoException):
    """
    The cursor was used improperly, for instance a fetch was attempted
    while another one is still in flight.

    Attributes:
        text: a text message about the exception.
        cursor_state: the state of the cursor when the error occurred.
    """

    text: str
    cursor_state: str

    def __init__(
        self,
        text: str,
        *,
        cursor_state: str,
    ) -> None:
        ArangoException.__init__(self, text)
        self.text = text
        self.cursor_state = cursor_state
