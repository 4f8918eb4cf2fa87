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

from arangopy.utils.envelope import _optional_field, _require_field


@dataclass
class CursorBatch:
    """
    One page of results of a query cursor, as returned by the cursor
    creation and fetch-next endpoints.

    Attributes:
        id: the server-side cursor ID. Present whenever `has_more` is true,
            and possibly None when the whole result fit in one batch.
        has_more: whether the server holds further batches for this cursor.
        result: the documents in this batch.
        count: the total number of results, if requested at creation.
        extra: the "extra" section with query statistics, warnings and profile.
        cached: whether the result was served from the query results cache.
    """

    id: str | None
    has_more: bool
    result: list[Any]
    count: int | None
    extra: dict[str, Any]
    cached: bool

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"id={self.id}" if self.id is not None else None,
                f"has_more={self.has_more}",
                f"result=[{len(self.result)} item(s)]",
                f"count={self.count}" if self.count is not None else None,
                "cached=True" if self.cached else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @property
    def warnings(self) -> list[dict[str, Any]]:
        """The warnings the server attached to this batch, if any."""
        _warnings = self.extra.get("warnings") or []
        return [wrn for wrn in _warnings if isinstance(wrn, dict)]

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> CursorBatch:
        """
        Create an instance of CursorBatch from a (envelope-stripped)
        response of the cursor endpoints.
        """

        has_more = _require_field(raw_dict, "hasMore", bool)
        result = _require_field(raw_dict, "result", list)
        cursor_id = _optional_field(raw_dict, "id", str)
        if has_more and cursor_id is None:
            # the server cannot be asked for more without an ID
            _require_field(raw_dict, "id", str)
        return CursorBatch(
            id=cursor_id,
            has_more=has_more,
            result=result,
            count=_optional_field(raw_dict, "count", int),
            extra=_optional_field(raw_dict, "extra", dict) or {},
            cached=bool(raw_dict.get("cached", False)),
        )
