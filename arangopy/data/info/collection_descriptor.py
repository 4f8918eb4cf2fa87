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
class CollectionDescriptor:
    """
    A structure describing a collection, as returned when listing
    collections or reading a collection's properties.

    Attributes:
        name: the name of the collection.
        id: the server-assigned ID of the collection.
        collection_type: 2 for document collections, 3 for edge collections
            (see `arangopy.constants.CollectionType`).
        status: the numeric status of the collection (3 = loaded).
        is_system: whether this is a system collection.
        globally_unique_id: the cluster-wide unique ID, if provided.
        raw: the full payload for this collection returned by the API.
    """

    name: str
    id: str
    collection_type: int
    status: int | None
    is_system: bool
    globally_unique_id: str | None
    raw: dict[str, Any]

    def __repr__(self) -> str:
        pieces = [
            f"name={self.name}",
            f"id={self.id}",
            f"collection_type={self.collection_type}",
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> CollectionDescriptor:
        """
        Create an instance of CollectionDescriptor from a dictionary
        such as one from the collection endpoints.
        """

        return CollectionDescriptor(
            name=_require_field(raw_dict, "name", str),
            id=_require_field(raw_dict, "id", str),
            collection_type=_require_field(raw_dict, "type", int),
            status=_optional_field(raw_dict, "status", int),
            is_system=bool(raw_dict.get("isSystem", False)),
            globally_unique_id=_optional_field(raw_dict, "globallyUniqueId", str),
            raw=raw_dict,
        )


@dataclass
class IndexDescriptor:
    """
    A structure describing an index on a collection.

    Attributes:
        id: the index handle, in the form "<collection>/<index id>".
        name: the name of the index.
        index_type: the type of the index, e.g. "primary" or "persistent".
        fields: the list of indexed attribute paths.
        unique: whether the index enforces uniqueness.
        sparse: whether the index skips documents lacking the indexed fields.
        is_newly_created: when returned by an index creation, whether the
            index did not exist before. None otherwise.
        raw: the full payload for this index returned by the API.
    """

    id: str
    name: str | None
    index_type: str
    fields: list[str]
    unique: bool
    sparse: bool
    is_newly_created: bool | None
    raw: dict[str, Any]

    def __repr__(self) -> str:
        pieces = [
            f"id={self.id}",
            f"index_type={self.index_type}",
            f"fields={self.fields}",
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> IndexDescriptor:
        """
        Create an instance of IndexDescriptor from a dictionary
        such as one from the index endpoints.
        """

        return IndexDescriptor(
            id=_require_field(raw_dict, "id", str),
            name=_optional_field(raw_dict, "name", str),
            index_type=_require_field(raw_dict, "type", str),
            fields=_require_field(raw_dict, "fields", list),
            unique=bool(raw_dict.get("unique", False)),
            sparse=bool(raw_dict.get("sparse", False)),
            is_newly_created=_optional_field(raw_dict, "isNewlyCreated", bool),
            raw=raw_dict,
        )
