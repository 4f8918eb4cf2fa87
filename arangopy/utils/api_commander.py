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
from types import TracebackType
from typing import Any, Iterable, Mapping, Sequence

import httpx

from arangopy.authentication import Credential
from arangopy.constants import CallerType
from arangopy.exceptions import (
    ArangoAuthException,
    ArangoHttpException,
    ArangoNetworkException,
    AuthFailureReason,
    _TimeoutContext,
    to_arango_timeout_exception,
)
from arangopy.settings.defaults import DEFAULT_REDACTED_HEADER_NAMES
from arangopy.utils.authenticator import Authenticator
from arangopy.utils.envelope import (
    DecodedPayload,
    decode_envelope,
    parse_response_json,
)
from arangopy.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    redact_headers,
    to_httpx_timeout,
)
from arangopy.utils.user_agents import (
    compose_full_user_agent,
    detect_arangopy_user_agent,
)

user_agent_arangopy = detect_arangopy_user_agent()

logger = logging.getLogger(__name__)


class APICommander:
    """
    The transport for all requests to the database HTTP API.

    An APICommander targets a base path (e.g. "_db/my_db" or the server root)
    and takes care of attaching the current credential from its
    `Authenticator`, renewing it at most once per request when the server
    answers 401 (or proactively, when the token is known to be expiring),
    decoding the response envelope and mapping failures to the exceptions
    in `arangopy.exceptions`. No request is ever retried for other reasons.

    The synchronous httpx client is shared at class level; the asynchronous
    one is passed along to all copies of a commander, so that a database and
    everything spawned from it share a single connection pool.
    """

    client = httpx.Client()

    def __init__(
        self,
        *,
        api_endpoint: str,
        path: str,
        authenticator: Authenticator,
        headers: dict[str, str | None] = {},
        callers: Sequence[CallerType] = [],
        redacted_header_names: Iterable[str] | None = None,
        async_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.async_client = async_client or httpx.AsyncClient()
        self.api_endpoint = api_endpoint.rstrip("/")
        self.path = path.lstrip("/")
        self.authenticator = authenticator
        self.headers = headers
        self.callers = callers
        self.redacted_header_names = set(redacted_header_names or [])
        self.full_redacted_header_names = (
            self.redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
        )

        full_user_agent_string = compose_full_user_agent(
            list(self.callers) + [user_agent_arangopy]
        )
        self.caller_header: dict[str, str] = (
            {"User-Agent": full_user_agent_string} if full_user_agent_string else {}
        )
        self.full_headers: dict[str, str] = {
            k: v
            for k, v in {
                **{
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                **self.caller_header,
                **self.headers,
            }.items()
            if v is not None
        }
        self.full_path = ("/".join([self.api_endpoint, self.path])).rstrip("/")

    def __repr__(self) -> str:
        pieces = [
            f"api_endpoint={self.api_endpoint}",
            f"path={self.path}",
            f"callers={self.callers}",
        ]
        inner_desc = ", ".join(pieces)
        return f"{self.__class__.__name__}({inner_desc})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, APICommander):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.path == other.path,
                    self.authenticator is other.authenticator,
                    self.headers == other.headers,
                    self.callers == other.callers,
                    self.redacted_header_names == other.redacted_header_names,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> APICommander:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.async_client.aclose()

    def _copy(
        self,
        api_endpoint: str | None = None,
        path: str | None = None,
        headers: dict[str, str | None] | None = None,
        callers: Sequence[CallerType] | None = None,
        redacted_header_names: Iterable[str] | None = None,
    ) -> APICommander:
        # some care in allowing e.g. {} to override (but not None):
        return APICommander(
            api_endpoint=(
                api_endpoint if api_endpoint is not None else self.api_endpoint
            ),
            path=path if path is not None else self.path,
            authenticator=self.authenticator,
            headers=headers if headers is not None else self.headers,
            callers=callers if callers is not None else self.callers,
            redacted_header_names=(
                redacted_header_names
                if redacted_header_names is not None
                else self.redacted_header_names
            ),
            async_client=self.async_client,
        )

    def _compose_request_url(self, additional_path: str | None) -> str:
        if additional_path:
            return "/".join([self.full_path.rstrip("/"), additional_path.lstrip("/")])
        else:
            return self.full_path

    def _request_headers(
        self,
        credential: Credential,
        additional_headers: Mapping[str, str] | None,
    ) -> dict[str, str]:
        return {
            **self.full_headers,
            **(additional_headers or {}),
            **credential.authorization_header(),
        }

    @staticmethod
    def _encode_payload(payload: DecodedPayload | None) -> str | None:
        if payload is not None:
            return json.dumps(
                payload,
                allow_nan=False,
                separators=(",", ":"),
                ensure_ascii=False,
            )
        else:
            return None

    @staticmethod
    def _log_query_warnings(decoded: DecodedPayload) -> None:
        if not isinstance(decoded, dict):
            return
        extra = decoded.get("extra")
        if not isinstance(extra, dict):
            return
        for warning in extra.get("warnings") or []:
            if isinstance(warning, dict):
                logger.warning(
                    f"The API returned a warning: {warning.get('message')} "
                    f"(code {warning.get('code')})"
                )

    def _raw_response_to_json(self, raw_response: httpx.Response) -> DecodedPayload:
        raw_response_json = parse_response_json(raw_response)
        decoded = decode_envelope(raw_response_json, raw_response.status_code)
        self._log_query_warnings(decoded)
        return decoded

    def _check_response_status(
        self,
        raw_response: httpx.Response,
        raise_api_errors: bool,
    ) -> None:
        log_httpx_response(response=raw_response)
        if raise_api_errors:
            try:
                raw_response.raise_for_status()
            except httpx.HTTPStatusError as http_exc:
                raise ArangoHttpException.from_httpx_error(http_exc)

    @staticmethod
    def _not_renewable_exception() -> ArangoAuthException:
        return ArangoAuthException(
            "The server rejected the token, which cannot be renewed by the "
            "client: please supply a fresh one.",
            reason=AuthFailureReason.NOT_RENEWABLE,
            http_code=401,
        )

    @staticmethod
    def _rejected_exception() -> ArangoAuthException:
        return ArangoAuthException(
            "The server rejected the credentials, also after renewing them.",
            reason=AuthFailureReason.REJECTED,
            http_code=401,
        )

    def _send(
        self,
        *,
        http_method: str,
        request_url: str,
        encoded_payload: str | None,
        request_params: Mapping[str, Any],
        headers: dict[str, str],
        timeout_context: _TimeoutContext,
    ) -> httpx.Response:
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=redact_headers(
                headers, self.full_redacted_header_names
            ),
            encoded_payload=encoded_payload,
            timeout_context=timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(timeout_context)
        try:
            return self.client.request(
                method=http_method,
                url=request_url,
                content=encoded_payload.encode()
                if encoded_payload is not None
                else None,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_arango_timeout_exception(
                timeout_exc, timeout_context=timeout_context
            )
        except httpx.TransportError as transport_exc:
            raise ArangoNetworkException.from_httpx_error(transport_exc)

    async def _async_send(
        self,
        *,
        http_method: str,
        request_url: str,
        encoded_payload: str | None,
        request_params: Mapping[str, Any],
        headers: dict[str, str],
        timeout_context: _TimeoutContext,
    ) -> httpx.Response:
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=redact_headers(
                headers, self.full_redacted_header_names
            ),
            encoded_payload=encoded_payload,
            timeout_context=timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(timeout_context)
        try:
            return await self.async_client.request(
                method=http_method,
                url=request_url,
                content=encoded_payload.encode()
                if encoded_payload is not None
                else None,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_arango_timeout_exception(
                timeout_exc, timeout_context=timeout_context
            )
        except httpx.TransportError as transport_exc:
            raise ArangoNetworkException.from_httpx_error(transport_exc)

    def raw_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: DecodedPayload | None = None,
        additional_path: str | None = None,
        request_params: Mapping[str, Any] = {},
        additional_headers: Mapping[str, str] | None = None,
        raise_api_errors: bool = True,
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        encoded_payload = self._encode_payload(payload)

        credential = self.authenticator.current()
        if self.authenticator.needs_renewal(credential):
            logger.info("token about to expire, renewing before the request")
            credential = self.authenticator.renew(
                credential, client=self.client, timeout_context=_timeout_context
            )

        send_kwargs: dict[str, Any] = {
            "http_method": http_method,
            "request_url": request_url,
            "encoded_payload": encoded_payload,
            "request_params": request_params,
            "timeout_context": _timeout_context,
        }
        raw_response = self._send(
            headers=self._request_headers(credential, additional_headers),
            **send_kwargs,
        )
        if raw_response.status_code == 401:
            log_httpx_response(response=raw_response)
            if not credential.renewable:
                raise self._not_renewable_exception()
            logger.info("credential rejected, renewing and retrying once")
            fresh_credential = self.authenticator.renew(
                credential, client=self.client, timeout_context=_timeout_context
            )
            raw_response = self._send(
                headers=self._request_headers(fresh_credential, additional_headers),
                **send_kwargs,
            )
            if raw_response.status_code == 401:
                log_httpx_response(response=raw_response)
                raise self._rejected_exception()

        self._check_response_status(raw_response, raise_api_errors=raise_api_errors)
        return raw_response

    async def async_raw_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: DecodedPayload | None = None,
        additional_path: str | None = None,
        request_params: Mapping[str, Any] = {},
        additional_headers: Mapping[str, str] | None = None,
        raise_api_errors: bool = True,
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        encoded_payload = self._encode_payload(payload)

        credential = self.authenticator.current()
        if self.authenticator.needs_renewal(credential):
            logger.info("token about to expire, renewing before the request")
            credential = await self.authenticator.async_renew(
                credential,
                async_client=self.async_client,
                timeout_context=_timeout_context,
            )

        send_kwargs: dict[str, Any] = {
            "http_method": http_method,
            "request_url": request_url,
            "encoded_payload": encoded_payload,
            "request_params": request_params,
            "timeout_context": _timeout_context,
        }
        raw_response = await self._async_send(
            headers=self._request_headers(credential, additional_headers),
            **send_kwargs,
        )
        if raw_response.status_code == 401:
            log_httpx_response(response=raw_response)
            if not credential.renewable:
                raise self._not_renewable_exception()
            logger.info("credential rejected, renewing and retrying once")
            fresh_credential = await self.authenticator.async_renew(
                credential,
                async_client=self.async_client,
                timeout_context=_timeout_context,
            )
            raw_response = await self._async_send(
                headers=self._request_headers(fresh_credential, additional_headers),
                **send_kwargs,
            )
            if raw_response.status_code == 401:
                log_httpx_response(response=raw_response)
                raise self._rejected_exception()

        self._check_response_status(raw_response, raise_api_errors=raise_api_errors)
        return raw_response

    def request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: DecodedPayload | None = None,
        additional_path: str | None = None,
        request_params: Mapping[str, Any] = {},
        additional_headers: Mapping[str, str] | None = None,
        timeout_context: _TimeoutContext | None = None,
    ) -> DecodedPayload:
        raw_response = self.raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            additional_headers=additional_headers,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response)

    async def async_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: DecodedPayload | None = None,
        additional_path: str | None = None,
        request_params: Mapping[str, Any] = {},
        additional_headers: Mapping[str, str] | None = None,
        timeout_context: _TimeoutContext | None = None,
    ) -> DecodedPayload:
        raw_response = await self.async_raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            additional_headers=additional_headers,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response)
