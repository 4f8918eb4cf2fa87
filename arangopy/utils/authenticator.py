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
import json
import logging
import threading
import weakref
from typing import Any

import httpx

from arangopy.authentication import Credential, TokenProvider
from arangopy.exceptions import (
    ArangoAuthException,
    ArangoHttpException,
    AuthFailureReason,
    UnexpectedArangoResponseException,
    _TimeoutContext,
)
from arangopy.settings.defaults import AUTH_ENDPOINT_PATH
from arangopy.utils.envelope import ResponseEnvelope, parse_response_json
from arangopy.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    to_httpx_timeout,
)

logger = logging.getLogger(__name__)


class Authenticator:
    """
    The holder of the current credential for a connection, in charge of
    renewing it when needed.

    The credential cell is only ever replaced wholesale (never mutated), so
    readers need no locking. Renewals are serialized by a guard: a caller
    passes the credential it saw being rejected (the "stale" one) and, if
    by the time it acquires the guard another caller has already swapped in
    a fresh credential, that one is returned with no further request.
    This makes a burst of concurrent rejections result in one single
    call to the token-issuance endpoint.

    Coalescing happens among callers of the same kind: threads calling
    `renew` share a thread lock, while coroutines calling `async_renew` share
    an asyncio lock per event loop. A sync and an async renewal running at
    the same moment (or async renewals on two different event loops) may
    thus each reach the endpoint, though any later caller still finds the
    freshest credential.

    Args:
        api_endpoint: the base URL of the server, e.g. "http://localhost:8529".
        token_provider: the source of the initial credential.
        headers: extra headers (such as the User-Agent) for the token requests.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        token_provider: TokenProvider,
        headers: dict[str, str] = {},
    ) -> None:
        self.api_endpoint = api_endpoint.rstrip("/")
        self.token_provider = token_provider
        self.headers = headers
        self._credential = token_provider.get_credential()
        self._lock = threading.Lock()
        self._async_locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, asyncio.Lock
        ] = weakref.WeakKeyDictionary()
        self._async_lock_guard = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(api_endpoint={self.api_endpoint}, "
            f"credential={self._credential})"
        )

    @property
    def auth_url(self) -> str:
        return f"{self.api_endpoint}/{AUTH_ENDPOINT_PATH}"

    @property
    def is_renewable(self) -> bool:
        return self._credential.renewable

    def current(self) -> Credential:
        """Return the credential to attach to the next request."""
        return self._credential

    def needs_renewal(self, credential: Credential | None = None) -> bool:
        """
        Whether a credential (by default the current one) is renewable and
        known to be near expiry, hence worth renewing before it is sent.
        """
        _credential = credential if credential is not None else self._credential
        return _credential.renewable and _credential.is_expired()

    def _get_async_lock(self) -> asyncio.Lock:
        # one lock per event loop, as an asyncio.Lock binds to the first loop using it
        loop = asyncio.get_running_loop()
        with self._async_lock_guard:
            lock = self._async_locks.get(loop)
            if lock is None:
                lock = asyncio.Lock()
                self._async_locks[loop] = lock
            return lock

    def _auth_payload(self, credential: Credential) -> str:
        return json.dumps(
            {"username": credential.username, "password": credential.password},
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def _full_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **self.headers,
        }

    def _log_auth_request(self, timeout_context: _TimeoutContext) -> None:
        log_httpx_request(
            http_method=HttpMethod.POST,
            full_url=self.auth_url,
            request_params=None,
            redacted_request_headers=self._full_headers(),
            encoded_payload=None,
            timeout_context=timeout_context,
        )

    def _process_auth_response(
        self,
        response: httpx.Response,
        stale: Credential,
    ) -> Credential:
        log_httpx_response(response=response)
        if response.status_code in (401, 403):
            raise ArangoAuthException(
                "The server rejected the username/password credentials.",
                reason=AuthFailureReason.REJECTED,
                http_code=response.status_code,
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise ArangoHttpException.from_httpx_error(http_exc)
        raw_json: Any = parse_response_json(response)
        if not isinstance(raw_json, dict):
            raise UnexpectedArangoResponseException(
                text="Unexpected response from the token-issuance endpoint.",
                raw_response=raw_json,
            )
        envelope = ResponseEnvelope._from_dict(raw_json)
        if envelope.is_error:
            raise ArangoAuthException(
                f"Token issuance failed: {envelope.error_message}",
                reason=AuthFailureReason.REJECTED,
                http_code=envelope.code or response.status_code,
            )
        jwt = envelope.payload.get("jwt")
        if not isinstance(jwt, str):
            raise UnexpectedArangoResponseException(
                text="No 'jwt' in the response from the token-issuance endpoint.",
                raw_response=raw_json,
            )
        return stale.with_token(jwt)

    def _fetch_credential(
        self,
        stale: Credential,
        *,
        client: httpx.Client,
        timeout_context: _TimeoutContext,
    ) -> Credential:
        self._log_auth_request(timeout_context)
        try:
            response = client.request(
                method=HttpMethod.POST,
                url=self.auth_url,
                content=self._auth_payload(stale).encode(),
                headers=self._full_headers(),
                timeout=to_httpx_timeout(timeout_context),
            )
        except httpx.TransportError as transport_exc:
            raise ArangoAuthException(
                f"Could not reach the token-issuance endpoint: {transport_exc}",
                reason=AuthFailureReason.UNREACHABLE,
            )
        return self._process_auth_response(response, stale)

    async def _async_fetch_credential(
        self,
        stale: Credential,
        *,
        async_client: httpx.AsyncClient,
        timeout_context: _TimeoutContext,
    ) -> Credential:
        self._log_auth_request(timeout_context)
        try:
            response = await async_client.request(
                method=HttpMethod.POST,
                url=self.auth_url,
                content=self._auth_payload(stale).encode(),
                headers=self._full_headers(),
                timeout=to_httpx_timeout(timeout_context),
            )
        except httpx.TransportError as transport_exc:
            raise ArangoAuthException(
                f"Could not reach the token-issuance endpoint: {transport_exc}",
                reason=AuthFailureReason.UNREACHABLE,
            )
        return self._process_auth_response(response, stale)

    def renew(
        self,
        stale: Credential,
        *,
        client: httpx.Client,
        timeout_context: _TimeoutContext | None = None,
    ) -> Credential:
        """
        Obtain a fresh credential in place of `stale`, coalescing with any
        renewal that already happened since `stale` was read.

        A credential which is not renewable is returned unchanged.

        Args:
            stale: the credential observed as rejected (or expiring).
            client: the httpx client to issue the token request with.
            timeout_context: the timeout for the token request.

        Returns:
            the credential to use from now on.

        Raises:
            ArangoAuthException: if the server rejects the credentials or
                cannot be reached.
            UnexpectedArangoResponseException: if no token is found in a
                successful response.
        """

        if not stale.renewable:
            return stale
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        with self._lock:
            current = self._credential
            if current is not stale:
                logger.info("credential already renewed by a concurrent caller")
                return current
            logger.info(f"renewing credential at {self.auth_url}")
            fresh = self._fetch_credential(
                current, client=client, timeout_context=_timeout_context
            )
            self._credential = fresh
            logger.info("finished renewing credential")
            return fresh

    async def async_renew(
        self,
        stale: Credential,
        *,
        async_client: httpx.AsyncClient,
        timeout_context: _TimeoutContext | None = None,
    ) -> Credential:
        """
        Obtain a fresh credential in place of `stale`, coalescing with any
        renewal that already happened since `stale` was read.
        Async version of the `renew` method, see that one for details.
        """

        if not stale.renewable:
            return stale
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        async with self._get_async_lock():
            current = self._credential
            if current is not stale:
                logger.info("credential already renewed by a concurrent caller")
                return current
            logger.info(f"renewing credential at {self.auth_url}")
            fresh = await self._async_fetch_credential(
                current, async_client=async_client, timeout_context=_timeout_context
            )
            self._credential = fresh
            logger.info("finished renewing credential")
            return fresh
