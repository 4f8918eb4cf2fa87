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
import threading
from inspect import iscoroutinefunction
from types import TracebackType
from typing import Any, Awaitable, Callable, Generic

from arangopy.data.cursors.cursor import TRAW, AbstractCursor, CursorState, logger
from arangopy.data.cursors.query_engine import _AQLQueryEngine
from arangopy.exceptions import (
    CursorException,
    CursorExpiredException,
    MultiCallTimeoutManager,
    _first_valid_timeout,
    _TimeoutContext,
)
from arangopy.info import CursorBatch
from arangopy.settings.defaults import DEFAULT_CURSOR_CLOSE_TIMEOUT_MS


def _to_list_timeout_manager(
    general_method_timeout_ms: int | None,
    timeout_ms: int | None,
) -> MultiCallTimeoutManager:
    _overall_timeout_ms, _overall_label = _first_valid_timeout(
        (timeout_ms, "timeout_ms"),
        (general_method_timeout_ms, "general_method_timeout_ms"),
    )
    return MultiCallTimeoutManager(
        overall_timeout_ms=_overall_timeout_ms,
        timeout_label=_overall_label,
    )


class QueryCursor(Generic[TRAW], AbstractCursor[TRAW]):
    """
    A synchronous cursor over the results of a query, as returned by the
    `query` method of a Database. A cursor can be iterated over (lazily
    fetching the next batches from the server), materialized into a list,
    or explicitly advanced one batch at a time.

    The first batch is received when the cursor is created. As long as the
    server announces more batches, the server-side cursor holds resources:
    these are released automatically once the results are drained, or by
    closing the cursor. Using the cursor as a context manager ensures that an
    abandoned cursor is released (best-effort, within `cursor_close_timeout_ms`).
    A bare `for` loop left early outside a `with` block does not release it:
    there is no finalizer, so call `close()` or use the `with` form.

    A cursor cannot be rewound: results are yielded once.

    Example:
        >>> with database.query(
        ...     "FOR doc IN @@coll FILTER doc.seq < @max RETURN doc.seq",
        ...     bind_vars={"@coll": "my_coll", "max": 4},
        ...     batch_size=2,
        ... ) as cursor:
        ...     for value in cursor:
        ...         print(value)
        ...
        0
        1
        2
        3
    """

    _query_engine: _AQLQueryEngine
    _request_timeout_ms: int | None
    _request_timeout_label: str | None
    _cursor_close_timeout_ms: int
    _timeout_manager: MultiCallTimeoutManager
    _fetch_lock: threading.Lock

    def __init__(
        self,
        *,
        query_engine: _AQLQueryEngine,
        first_batch: CursorBatch,
        request_timeout_ms: int | None,
        request_timeout_label: str | None = None,
        cursor_close_timeout_ms: int | None = None,
    ) -> None:
        self._query_engine = query_engine
        self._request_timeout_ms = request_timeout_ms
        self._request_timeout_label = request_timeout_label
        self._cursor_close_timeout_ms = (
            cursor_close_timeout_ms
            if cursor_close_timeout_ms and cursor_close_timeout_ms > 0
            else DEFAULT_CURSOR_CLOSE_TIMEOUT_MS
        )
        self._timeout_manager = MultiCallTimeoutManager(overall_timeout_ms=None)
        self._fetch_lock = threading.Lock()
        AbstractCursor.__init__(self, first_batch)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self._query_engine.database_name}", '
            f"{self._state.value}, "
            f"consumed so far: {self.consumed})"
        )

    def __iter__(self: QueryCursor[TRAW]) -> QueryCursor[TRAW]:
        self._ensure_alive()
        return self

    def __next__(self) -> TRAW:
        if self._state == CursorState.CLOSED:
            raise StopIteration
        self._try_ensure_fill_buffer()
        if not self._buffer:
            raise StopIteration
        # consume one item from buffer
        traw0, rest_buffer = self._buffer[0], self._buffer[1:]
        self._buffer = rest_buffer
        self._consumed += 1
        return traw0

    def __enter__(self: QueryCursor[TRAW]) -> QueryCursor[TRAW]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        self._close_quietly()

    def _fetch_into_buffer(self, timeout_manager: MultiCallTimeoutManager) -> None:
        """
        Fetch the next batch from the server into the buffer.
        A failed fetch leaves the cursor as it was (except for an expired
        server-side cursor, which closes it for good).
        """

        self._ensure_alive()
        if self._state == CursorState.DRAINED or self._server_cursor_id is None:
            return
        if not self._fetch_lock.acquire(blocking=False):
            raise CursorException(
                text="A fetch is already in progress on this cursor.",
                cursor_state=CursorState.FETCHING.value,
            )
        try:
            self._ensure_not_fetching()
            self._state = CursorState.FETCHING
            try:
                batch = self._query_engine._fetch_next(
                    cursor_id=self._server_cursor_id,
                    timeout_context=timeout_manager.remaining_timeout(
                        cap_time_ms=self._request_timeout_ms,
                        cap_timeout_label=self._request_timeout_label,
                    ),
                )
            except CursorExpiredException:
                self._mark_closed()
                raise
            except BaseException:
                if self._state == CursorState.FETCHING:
                    self._state = CursorState.CREATED
                raise
            if self._state == CursorState.FETCHING:
                self._ingest_batch(batch)
        finally:
            self._fetch_lock.release()

    def _try_ensure_fill_buffer(
        self,
        timeout_manager: MultiCallTimeoutManager | None = None,
    ) -> None:
        """
        If buffer is empty, try to fill it with the next batch, if applicable.
        If not possible, silently do nothing.
        """

        _timeout_manager = timeout_manager or self._timeout_manager
        while not self._buffer and self._state == CursorState.CREATED:
            self._fetch_into_buffer(_timeout_manager)

    def _close_timeout_context(self) -> _TimeoutContext:
        return _TimeoutContext(
            nominal_ms=self._cursor_close_timeout_ms,
            request_ms=self._cursor_close_timeout_ms,
            label="cursor_close_timeout_ms",
        )

    def _close_quietly(self) -> None:
        """
        Release the server-side cursor if needed, logging (not raising)
        any failure. Used whenever a cursor is abandoned.
        """

        if self._state == CursorState.FETCHING:
            logger.warning(
                f"cursor {self._server_cursor_id} abandoned while fetching, "
                "cannot release it"
            )
            return
        cursor_id = self._server_cursor_id
        needs_release = self._needs_release()
        self._mark_closed()
        if needs_release and cursor_id is not None:
            try:
                self._query_engine._delete(
                    cursor_id=cursor_id,
                    timeout_context=self._close_timeout_context(),
                )
            except Exception as exc:
                logger.warning(f"could not release cursor {cursor_id}: {exc}")

    def fetch_next_batch(self, *, timeout_ms: int | None = None) -> list[TRAW]:
        """
        Return the next batch of results, marking its items as consumed.

        If the local buffer still holds items (such as the first batch,
        received with the query), those are returned and no request is made.
        Otherwise, the next batch is fetched from the server and returned.
        On a drained cursor with an empty buffer this returns an empty list.

        Args:
            timeout_ms: a timeout, in milliseconds, for the fetch request.
                If not provided, the cursor's per-request timeout applies.

        Returns:
            a list of items.

        Raises:
            CursorException: if the cursor is closed, or a fetch is already
                in progress.
            CursorExpiredException: if the server no longer knows the cursor.
        """

        self._ensure_alive()
        self._ensure_not_fetching()
        if self._buffer:
            return self.consume_buffer()
        if self._state == CursorState.CREATED:
            _timeout_manager = (
                self._timeout_manager
                if timeout_ms is None
                else MultiCallTimeoutManager(
                    overall_timeout_ms=timeout_ms, timeout_label="timeout_ms"
                )
            )
            self._fetch_into_buffer(_timeout_manager)
        return self.consume_buffer()

    def close(self) -> None:
        """
        Close the cursor, regardless of its state, discarding the results
        that have not been consumed yet. If the server still holds further
        batches for this cursor, a request is issued to release them.

        Closing an already-closed (or drained) cursor is a no-op.

        Raises:
            CursorException: if a fetch is in progress on this cursor.
        """

        self._ensure_not_fetching()
        cursor_id = self._server_cursor_id
        needs_release = self._needs_release()
        self._mark_closed()
        if needs_release and cursor_id is not None:
            self._query_engine._delete(
                cursor_id=cursor_id,
                timeout_context=self._timeout_manager.remaining_timeout(
                    cap_time_ms=self._request_timeout_ms,
                    cap_timeout_label=self._request_timeout_label,
                ),
            )

    def has_next(self) -> bool:
        """
        Whether the cursor actually has more items to return.

        This method can trigger the fetch of a new batch, if the current
        buffer is empty. On a closed cursor it always returns False.
        """

        if self._state == CursorState.CLOSED:
            return False
        self._try_ensure_fill_buffer()
        return len(self._buffer) > 0

    def to_list(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TRAW]:
        """
        Materialize all items that remain to be consumed from a cursor into a list.

        Calling this method on a closed cursor results in an error.
        If anything goes wrong while fetching, the cursor is released
        (best-effort) before the error propagates.

        Args:
            general_method_timeout_ms: a timeout, in milliseconds, for the whole
                duration of this method. If not provided, there is no such timeout.
                Note that the per-request timeout set on the cursor still applies.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a list of all items not yet consumed when `to_list` is called.

        Example:
            >>> database.query("FOR i IN 1..3 RETURN i", batch_size=2).to_list()
            [1, 2, 3]
        """

        self._ensure_alive()
        timeout_manager = _to_list_timeout_manager(
            general_method_timeout_ms, timeout_ms
        )
        items: list[TRAW] = []
        try:
            while True:
                items += self.consume_buffer()
                if self._state != CursorState.CREATED:
                    break
                self._fetch_into_buffer(timeout_manager)
        except BaseException:
            self._close_quietly()
            raise
        return items

    def for_each(
        self,
        function: Callable[[TRAW], bool | None],
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Consume the remaining items in the cursor, invoking a provided callback
        function on each of them.

        Calling this method on a closed cursor results in an error.

        The callback function can return any value. The return value is generally
        discarded, with the following exception: if the function returns the boolean
        `False`, it is taken to signify that the method should quit early. In that
        case, as well as if an error occurs, the cursor is closed and released
        (best-effort) before returning.

        Args:
            function: a callback function whose only parameter is of the type returned
                by the cursor. If the callback returns a `False`, the `for_each`
                invocation stops early.
            general_method_timeout_ms: a timeout, in milliseconds, for the whole
                duration of this method. If not provided, there is no such timeout.
                Note that the per-request timeout set on the cursor still applies.
            timeout_ms: an alias for `general_method_timeout_ms`.
        """

        self._ensure_alive()
        timeout_manager = _to_list_timeout_manager(
            general_method_timeout_ms, timeout_ms
        )
        try:
            while True:
                self._try_ensure_fill_buffer(timeout_manager)
                if not self._buffer:
                    break
                for item in self.consume_buffer(1):
                    if function(item) is False:
                        self._close_quietly()
                        return
        except BaseException:
            self._close_quietly()
            raise


class AsyncQueryCursor(Generic[TRAW], AbstractCursor[TRAW]):
    """
    An asynchronous cursor over the results of a query, as returned by the
    `query` method of an AsyncDatabase.

    This class is the async counterpart of the QueryCursor: see that class for
    an overview. Its context-manager form is `async with`, and cancellation of
    a task consuming the cursor also results in the best-effort release of the
    server-side cursor when exiting the block.

    Example:
        >>> async with await async_database.query(
        ...     "FOR i IN 1..10 RETURN i",
        ...     batch_size=4,
        ... ) as cursor:
        ...     async for value in cursor:
        ...         if value > 2:
        ...             break
        ...         print(value)
        ...
        1
        2
    """

    _query_engine: _AQLQueryEngine
    _request_timeout_ms: int | None
    _request_timeout_label: str | None
    _cursor_close_timeout_ms: int
    _timeout_manager: MultiCallTimeoutManager

    def __init__(
        self,
        *,
        query_engine: _AQLQueryEngine,
        first_batch: CursorBatch,
        request_timeout_ms: int | None,
        request_timeout_label: str | None = None,
        cursor_close_timeout_ms: int | None = None,
    ) -> None:
        self._query_engine = query_engine
        self._request_timeout_ms = request_timeout_ms
        self._request_timeout_label = request_timeout_label
        self._cursor_close_timeout_ms = (
            cursor_close_timeout_ms
            if cursor_close_timeout_ms and cursor_close_timeout_ms > 0
            else DEFAULT_CURSOR_CLOSE_TIMEOUT_MS
        )
        self._timeout_manager = MultiCallTimeoutManager(overall_timeout_ms=None)
        AbstractCursor.__init__(self, first_batch)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self._query_engine.database_name}", '
            f"{self._state.value}, "
            f"consumed so far: {self.consumed})"
        )

    def __aiter__(self: AsyncQueryCursor[TRAW]) -> AsyncQueryCursor[TRAW]:
        self._ensure_alive()
        return self

    async def __anext__(self) -> TRAW:
        if self._state == CursorState.CLOSED:
            raise StopAsyncIteration
        await self._try_ensure_fill_buffer()
        if not self._buffer:
            raise StopAsyncIteration
        # consume one item from buffer
        traw0, rest_buffer = self._buffer[0], self._buffer[1:]
        self._buffer = rest_buffer
        self._consumed += 1
        return traw0

    async def __aenter__(self: AsyncQueryCursor[TRAW]) -> AsyncQueryCursor[TRAW]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self._close_quietly()

    async def _fetch_into_buffer(
        self, timeout_manager: MultiCallTimeoutManager
    ) -> None:
        """
        Fetch the next batch from the server into the buffer.
        A failed (or cancelled) fetch leaves the cursor as it was, except for
        an expired server-side cursor, which closes it for good.
        """

        self._ensure_alive()
        self._ensure_not_fetching()
        if self._state == CursorState.DRAINED or self._server_cursor_id is None:
            return
        self._state = CursorState.FETCHING
        try:
            batch = await self._query_engine._async_fetch_next(
                cursor_id=self._server_cursor_id,
                timeout_context=timeout_manager.remaining_timeout(
                    cap_time_ms=self._request_timeout_ms,
                    cap_timeout_label=self._request_timeout_label,
                ),
            )
        except CursorExpiredException:
            self._mark_closed()
            raise
        except BaseException:
            if self._state == CursorState.FETCHING:
                self._state = CursorState.CREATED
            raise
        if self._state == CursorState.FETCHING:
            self._ingest_batch(batch)

    async def _try_ensure_fill_buffer(
        self,
        timeout_manager: MultiCallTimeoutManager | None = None,
    ) -> None:
        """
        If buffer is empty, try to fill it with the next batch, if applicable.
        If not possible, silently do nothing.
        """

        _timeout_manager = timeout_manager or self._timeout_manager
        while not self._buffer and self._state == CursorState.CREATED:
            await self._fetch_into_buffer(_timeout_manager)

    async def _close_quietly(self) -> None:
        """
        Release the server-side cursor if needed, logging (not raising)
        any failure, within the cursor close timeout.
        Used whenever a cursor is abandoned.
        """

        if self._state == CursorState.FETCHING:
            logger.warning(
                f"cursor {self._server_cursor_id} abandoned while fetching, "
                "cannot release it"
            )
            return
        cursor_id = self._server_cursor_id
        needs_release = self._needs_release()
        self._mark_closed()
        if needs_release and cursor_id is not None:
            _close_timeout_s = self._cursor_close_timeout_ms / 1000.0
            try:
                await asyncio.wait_for(
                    self._query_engine._async_delete(
                        cursor_id=cursor_id,
                        timeout_context=_TimeoutContext(
                            nominal_ms=self._cursor_close_timeout_ms,
                            request_ms=self._cursor_close_timeout_ms,
                            label="cursor_close_timeout_ms",
                        ),
                    ),
                    timeout=_close_timeout_s,
                )
            except Exception as exc:
                logger.warning(f"could not release cursor {cursor_id}: {exc!r}")

    async def fetch_next_batch(self, *, timeout_ms: int | None = None) -> list[TRAW]:
        """
        Return the next batch of results: the buffered items if any,
        otherwise a freshly fetched batch. Async version of the method,
        for details see `QueryCursor.fetch_next_batch`.
        """

        self._ensure_alive()
        self._ensure_not_fetching()
        if self._buffer:
            return self.consume_buffer()
        if self._state == CursorState.CREATED:
            _timeout_manager = (
                self._timeout_manager
                if timeout_ms is None
                else MultiCallTimeoutManager(
                    overall_timeout_ms=timeout_ms, timeout_label="timeout_ms"
                )
            )
            await self._fetch_into_buffer(_timeout_manager)
        return self.consume_buffer()

    async def close(self) -> None:
        """
        Close the cursor, regardless of its state, discarding the results
        that have not been consumed yet. Async version of the method, for
        details see `QueryCursor.close`.
        """

        self._ensure_not_fetching()
        cursor_id = self._server_cursor_id
        needs_release = self._needs_release()
        self._mark_closed()
        if needs_release and cursor_id is not None:
            await self._query_engine._async_delete(
                cursor_id=cursor_id,
                timeout_context=self._timeout_manager.remaining_timeout(
                    cap_time_ms=self._request_timeout_ms,
                    cap_timeout_label=self._request_timeout_label,
                ),
            )

    async def has_next(self) -> bool:
        """
        Whether the cursor actually has more items to return.
        Async version of the method, for details see `QueryCursor.has_next`.
        """

        if self._state == CursorState.CLOSED:
            return False
        await self._try_ensure_fill_buffer()
        return len(self._buffer) > 0

    async def to_list(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TRAW]:
        """
        Materialize all items that remain to be consumed from a cursor into a list.
        Async version of the method, for details see `QueryCursor.to_list`.
        """

        self._ensure_alive()
        timeout_manager = _to_list_timeout_manager(
            general_method_timeout_ms, timeout_ms
        )
        items: list[TRAW] = []
        try:
            while True:
                items += self.consume_buffer()
                if self._state != CursorState.CREATED:
                    break
                await self._fetch_into_buffer(timeout_manager)
        except BaseException:
            await self._close_quietly()
            raise
        return items

    async def for_each(
        self,
        function: Callable[[TRAW], bool | None]
        | Callable[[TRAW], Awaitable[bool | None]],
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Consume the remaining items in the cursor, invoking a provided callback
        function -- or coroutine -- on each of them.
        Async version of the method, for details see `QueryCursor.for_each`.
        """

        self._ensure_alive()
        timeout_manager = _to_list_timeout_manager(
            general_method_timeout_ms, timeout_ms
        )
        is_coro = iscoroutinefunction(function)
        try:
            while True:
                await self._try_ensure_fill_buffer(timeout_manager)
                if not self._buffer:
                    break
                for item in self.consume_buffer(1):
                    res: Any
                    if is_coro:
                        res = await function(item)  # type: ignore[misc]
                    else:
                        res = function(item)
                    if res is False:
                        await self._close_quietly()
                        return
        except BaseException:
            await self._close_quietly()
            raise
