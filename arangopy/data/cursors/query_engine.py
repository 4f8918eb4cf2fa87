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

from arangopy.constants import ErrorNum
from arangopy.data.cursors.cursor import logger
from arangopy.data.cursors.query_request import QueryRequest
from arangopy.exceptions import (
    ArangoAPIException,
    CursorExpiredException,
    _TimeoutContext,
)
from arangopy.info import CursorBatch
from arangopy.settings.defaults import CURSOR_ENDPOINT_PATH
from arangopy.utils.api_commander import APICommander
from arangopy.utils.envelope import DecodedPayload, ensure_dict_payload
from arangopy.utils.request_tools import HttpMethod


def _is_cursor_gone(api_exception: ArangoAPIException) -> bool:
    if api_exception.error_num == ErrorNum.CURSOR_NOT_FOUND:
        return True
    return api_exception.http_code == 404 and api_exception.error_num is None


def _to_cursor_batch(raw_response: DecodedPayload) -> CursorBatch:
    return CursorBatch._from_dict(ensure_dict_payload(raw_response))


class _AQLQueryEngine:
    """
    The three exchanges with the cursor endpoint (create, fetch-next, delete)
    for queries run against one database, in sync and async flavours.
    Responses are decoded into `CursorBatch` objects and a vanished server-side
    cursor is reported as `CursorExpiredException`.
    """

    api_commander: APICommander
    database_name: str

    def __init__(
        self,
        *,
        api_commander: APICommander,
        database_name: str,
    ) -> None:
        self.api_commander = api_commander
        self.database_name = database_name

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}("{self.database_name}")'

    def _create(
        self,
        *,
        query_request: QueryRequest,
        timeout_context: _TimeoutContext,
    ) -> CursorBatch:
        logger.info(f"creating cursor on {self.database_name}")
        raw_response = self.api_commander.request(
            http_method=HttpMethod.POST,
            payload=query_request.as_payload(),
            additional_path=CURSOR_ENDPOINT_PATH,
            timeout_context=timeout_context,
        )
        logger.info(f"finished creating cursor on {self.database_name}")
        return _to_cursor_batch(raw_response)

    async def _async_create(
        self,
        *,
        query_request: QueryRequest,
        timeout_context: _TimeoutContext,
    ) -> CursorBatch:
        logger.info(f"creating cursor on {self.database_name}, async")
        raw_response = await self.api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=query_request.as_payload(),
            additional_path=CURSOR_ENDPOINT_PATH,
            timeout_context=timeout_context,
        )
        logger.info(f"finished creating cursor on {self.database_name}, async")
        return _to_cursor_batch(raw_response)

    def _fetch_next(
        self,
        *,
        cursor_id: str,
        timeout_context: _TimeoutContext,
    ) -> CursorBatch:
        logger.info(f"cursor fetching a batch: {cursor_id} from {self.database_name}")
        try:
            raw_response = self.api_commander.request(
                http_method=HttpMethod.PUT,
                additional_path=f"{CURSOR_ENDPOINT_PATH}/{cursor_id}",
                timeout_context=timeout_context,
            )
        except ArangoAPIException as api_exc:
            if _is_cursor_gone(api_exc):
                raise CursorExpiredException.from_api_exception(
                    api_exc, cursor_id=cursor_id
                )
            raise
        logger.info(
            f"cursor finished fetching a batch: {cursor_id} from {self.database_name}"
        )
        return _to_cursor_batch(raw_response)

    async def _async_fetch_next(
        self,
        *,
        cursor_id: str,
        timeout_context: _TimeoutContext,
    ) -> CursorBatch:
        logger.info(
            f"cursor fetching a batch: {cursor_id} from {self.database_name}, async"
        )
        try:
            raw_response = await self.api_commander.async_request(
                http_method=HttpMethod.PUT,
                additional_path=f"{CURSOR_ENDPOINT_PATH}/{cursor_id}",
                timeout_context=timeout_context,
            )
        except ArangoAPIException as api_exc:
            if _is_cursor_gone(api_exc):
                raise CursorExpiredException.from_api_exception(
                    api_exc, cursor_id=cursor_id
                )
            raise
        logger.info(
            f"cursor finished fetching a batch: {cursor_id} "
            f"from {self.database_name}, async"
        )
        return _to_cursor_batch(raw_response)

    def _delete(
        self,
        *,
        cursor_id: str,
        timeout_context: _TimeoutContext,
    ) -> None:
        logger.info(f"deleting cursor {cursor_id} from {self.database_name}")
        try:
            self.api_commander.request(
                http_method=HttpMethod.DELETE,
                additional_path=f"{CURSOR_ENDPOINT_PATH}/{cursor_id}",
                timeout_context=timeout_context,
            )
        except ArangoAPIException as api_exc:
            if _is_cursor_gone(api_exc):
                raise CursorExpiredException.from_api_exception(
                    api_exc, cursor_id=cursor_id
                )
            raise
        logger.info(f"finished deleting cursor {cursor_id} from {self.database_name}")

    async def _async_delete(
        self,
        *,
        cursor_id: str,
        timeout_context: _TimeoutContext,
    ) -> None:
        logger.info(f"deleting cursor {cursor_id} from {self.database_name}, async")
        try:
            await self.api_commander.async_request(
                http_method=HttpMethod.DELETE,
                additional_path=f"{CURSOR_ENDPOINT_PATH}/{cursor_id}",
                timeout_context=timeout_context,
            )
        except ArangoAPIException as api_exc:
            if _is_cursor_gone(api_exc):
                raise CursorExpiredException.from_api_exception(
                    api_exc, cursor_id=cursor_id
                )
            raise
        logger.info(
            f"finished deleting cursor {cursor_id} from {self.database_name}, async"
        )
