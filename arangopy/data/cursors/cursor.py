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

import logging
from abc import ABC
from enum import Enum
from typing import Any, Generic, TypeVar

from arangopy.exceptions import (
    CursorException,
)
from arangopy.info import CursorBatch

# A cursor reads TRAW items (documents or any other query result values)
TRAW = TypeVar("TRAW")


logger = logging.getLogger(__name__)


class CursorState(Enum):
    """
    This enum expresses the possible states for a query cursor.

    Values:
        CREATED: the server holds further batches, none is being fetched.
        FETCHING: a request for the next batch is in flight.
        DRAINED: the server has no further batches (the local buffer may
            still hold items). Nothing is left to release on the server.
        CLOSED: finished or forcibly stopped. Won't return more items.
    """

    CREATED = "created"
    FETCHING = "fetching"
    DRAINED = "drained"
    CLOSED = "closed"


class AbstractCursor(ABC, Generic[TRAW]):
    """
    A cursor over the results of a query run on the database.
    This is the main interface to scroll through the results.

    This class is not meant to be directly instantiated by the user, rather it
    is a superclass capturing the mechanisms shared by the sync and async cursors.

    Cursors provide a seamless interface to the caller code, allowing iteration
    over results while batches of new data are exchanged with the API. For this
    reason, cursors internally manage a local buffer that is progressively emptied
    and re-filled with the next batch in a manner hidden from the user -- except,
    some cursor methods allow to peek into this buffer should it be necessary.
    """

    _state: CursorState
    _buffer: list[TRAW]
    _batches_retrieved: int
    _consumed: int
    _server_cursor_id: str | None
    _count: int | None
    _extra: dict[str, Any]
    _cached: bool

    def __init__(self, first_batch: CursorBatch) -> None:
        self._buffer = []
        self._batches_retrieved = 0
        self._consumed = 0
        self._server_cursor_id = first_batch.id
        self._count = first_batch.count
        self._cached = first_batch.cached
        self._extra = {}
        self._ingest_batch(first_batch)

    def _ingest_batch(self, batch: CursorBatch) -> None:
        """Store a newly-received batch and update the state accordingly."""
        self._buffer = self._buffer + batch.result
        self._extra = batch.extra
        self._batches_retrieved += 1
        if batch.has_more:
            self._state = CursorState.CREATED
        else:
            self._state = CursorState.DRAINED

    def _ensure_alive(self) -> None:
        if self._state == CursorState.CLOSED:
            raise CursorException(
                text="Cursor is closed.",
                cursor_state=self._state.value,
            )

    def _ensure_not_fetching(self) -> None:
        if self._state == CursorState.FETCHING:
            raise CursorException(
                text="A fetch is already in progress on this cursor.",
                cursor_state=self._state.value,
            )

    def _mark_closed(self) -> None:
        self._state = CursorState.CLOSED
        self._buffer = []

    def _needs_release(self) -> bool:
        """
        Whether the server may still hold resources for this cursor, i.e.
        further batches were announced and never retrieved.
        """
        return (
            self._state in {CursorState.CREATED, CursorState.FETCHING}
            and self._server_cursor_id is not None
        )

    @property
    def state(self) -> CursorState:
        """
        The current state of this cursor.

        Returns:
            a value in `arangopy.cursors.CursorState`.
        """

        return self._state

    @property
    def consumed(self) -> int:
        """
        The number of items the cursors has yielded, i.e. how many items
        have been already read by the code consuming the cursor.

        Returns:
            consumed: a non-negative integer, the count of items yielded so far.
        """

        return self._consumed

    @property
    def cursor_id(self) -> str | None:
        """
        The ID of the cursor on the server, or None if the whole result set
        was returned at creation and no server-side cursor was kept.
        """

        return self._server_cursor_id

    @property
    def count(self) -> int | None:
        """
        The total number of results, if the query was created with `count=True`.
        This is fixed at creation time and never changes.
        """

        return self._count

    @property
    def cached(self) -> bool:
        """Whether the results came from the query results cache."""

        return self._cached

    @property
    def has_more(self) -> bool:
        """Whether the server announced further batches still to be fetched."""

        return self._state in {CursorState.CREATED, CursorState.FETCHING}

    @property
    def batches_retrieved(self) -> int:
        """The number of batches received so far (including the first one)."""

        return self._batches_retrieved

    @property
    def extra(self) -> dict[str, Any]:
        """
        The "extra" section of the latest batch, with statistics, warnings
        and (if requested) profiling information.
        """

        return self._extra

    @property
    def statistics(self) -> dict[str, Any]:
        """The query statistics found in the latest batch, if any."""

        _stats = self._extra.get("stats")
        return _stats if isinstance(_stats, dict) else {}

    @property
    def warnings(self) -> list[dict[str, Any]]:
        """The warnings found in the latest batch, if any."""

        _warnings = self._extra.get("warnings") or []
        return [wrn for wrn in _warnings if isinstance(wrn, dict)]

    @property
    def buffered_count(self) -> int:
        """
        The number of items currently stored in the client-side buffer of this
        cursor. Reading this property never triggers new API calls to re-fill
        the buffer.

        Returns:
            buffered_count: a non-negative integer, the amount of items currently
                stored in the local buffer.
        """

        return len(self._buffer)

    def consume_buffer(self, n: int | None = None) -> list[TRAW]:
        """
        Consume (return) up to the requested number of buffered items.
        The returned items are marked as consumed, meaning that subsequently consuming
        the cursor will start after those items.

        This method is an in-place modification of the cursor and only concerns
        the local buffer: it never triggers fetching of new batches from the API.

        This method can be called regardless of the cursor state without exceptions
        being raised.

        Args:
            n: amount of items to return. If omitted, the whole buffer is returned.

        Returns:
            list: a list of items. If there are fewer items than requested,
                the whole buffer is returned without errors: in particular, if it
                is empty (such as when the cursor is closed), an empty list is returned.
        """
        _n = n if n is not None else len(self._buffer)
        if _n < 0:
            raise ValueError("A negative amount of items was requested.")
        returned, remaining = self._buffer[:_n], self._buffer[_n:]
        self._buffer = remaining
        self._consumed += len(returned)
        return returned
