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
class DatabaseInfo:
    """
    A set of properties of the database a `Database` object is bound to.

    Attributes:
        name: the name of the database.
        id: the server-assigned ID of the database.
        path: the filesystem path of the database on the server (may be
            "none" for cluster deployments).
        is_system: whether this is the `_system` database.
        sharding: the default sharding method, for cluster deployments.
        replication_factor: the default replication factor (an integer, or
            the string "satellite"), for cluster deployments.
        write_concern: the default write concern, for cluster deployments.
        raw: the full payload returned by the API.
    """

    name: str
    id: str
    path: str | None
    is_system: bool
    sharding: str | None
    replication_factor: int | str | None
    write_concern: int | None
    raw: dict[str, Any]

    def __repr__(self) -> str:
        pieces = [
            f"name={self.name}",
            f"id={self.id}",
            f"is_system={self.is_system}",
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> DatabaseInfo:
        """
        Create an instance of DatabaseInfo from the `result` field of
        the current-database endpoint response.
        """

        return DatabaseInfo(
            name=_require_field(raw_dict, "name", str),
            id=_require_field(raw_dict, "id", str),
            path=_optional_field(raw_dict, "path", str),
            is_system=_require_field(raw_dict, "isSystem", bool),
            sharding=_optional_field(raw_dict, "sharding", str),
            replication_factor=_optional_field(
                raw_dict, "replicationFactor", (int, str)
            ),
            write_concern=_optional_field(raw_dict, "writeConcern", int),
            raw=raw_dict,
        )
