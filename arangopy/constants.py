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

from typing import Any, Dict, Optional, Tuple, TypeVar

from arangopy.utils.str_enum import StrEnum

DefaultDocumentType = Dict[str, Any]
BindVarsType = Dict[str, Any]
CallerType = Tuple[Optional[str], Optional[str]]


DOC = TypeVar("DOC")


class CollectionType:
    """
    Admitted values for the `collection_type` parameter of the
    database `create_collection` method.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    DOCUMENT = 2
    EDGE = 3


class IndexType:
    """
    Admitted values for the `index_type` parameter of the
    collection `create_index` method.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    PERSISTENT = "persistent"
    TTL = "ttl"
    GEO = "geo"
    FULLTEXT = "fulltext"
    INVERTED = "inverted"
    ZKD = "zkd"


class OverwriteMode:
    """
    Admitted values for the `overwrite_mode` parameter of the
    collection `insert_one` method.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    IGNORE = "ignore"
    REPLACE = "replace"
    UPDATE = "update"
    CONFLICT = "conflict"


class ErrorNum:
    """
    A selection of the server-side error numbers (`errorNum` in the response
    envelope) which callers most commonly need to branch upon.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    FORBIDDEN = 11
    HTTP_UNAUTHORIZED = 401
    ARANGO_DATA_SOURCE_NOT_FOUND = 1203
    ARANGO_DOCUMENT_NOT_FOUND = 1202
    ARANGO_CONFLICT = 1200
    ARANGO_UNIQUE_CONSTRAINT_VIOLATED = 1210
    ARANGO_DUPLICATE_NAME = 1207
    ARANGO_DATABASE_NOT_FOUND = 1228
    QUERY_PARSE = 1501
    QUERY_BIND_PARAMETER_MISSING = 1551
    CURSOR_NOT_FOUND = 1600
    CURSOR_BUSY = 1601


class AsyncJobKind(StrEnum):
    """
    How the server is asked to run a submitted job: `STORE` keeps the
    result for later retrieval, `FIRE_AND_FORGET` discards it.
    """

    STORE = "store"
    FIRE_AND_FORGET = "true"


class JobStatus(StrEnum):
    """
    The processing status of an asynchronous job, as inferred from the
    HTTP status code of the job-status endpoint.
    """

    DONE = "done"
    PENDING = "pending"
    NOT_FOUND = "not_found"


class JobListKind(StrEnum):
    """The two lists of job IDs the server keeps."""

    DONE = "done"
    PENDING = "pending"


__all__ = [
    "AsyncJobKind",
    "CollectionType",
    "ErrorNum",
    "IndexType",
    "JobListKind",
    "JobStatus",
    "OverwriteMode",
]
