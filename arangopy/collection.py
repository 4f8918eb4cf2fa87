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
from types import TracebackType
from typing import Any, Generic, Iterable

from arangopy.constants import DOC, ErrorNum, IndexType
from arangopy.database import AsyncDatabase, Database
from arangopy.exceptions import (
    ArangoAPIException,
    UnexpectedArangoResponseException,
    _select_singlereq_timeout_ca,
    _select_singlereq_timeout_gm,
    _TimeoutContext,
)
from arangopy.info import CollectionDescriptor, DocumentMeta, IndexDescriptor
from arangopy.settings.defaults import (
    COLLECTION_ENDPOINT_PATH,
    DOCUMENT_ENDPOINT_PATH,
    INDEX_ENDPOINT_PATH,
)
from arangopy.utils.api_commander import APICommander
from arangopy.utils.api_options import APIOptions, FullAPIOptions
from arangopy.utils.envelope import (
    _require_field,
    ensure_dict_payload,
    parse_response_json,
)
from arangopy.utils.request_tools import HttpMethod, to_request_params
from arangopy.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)


def _if_match_headers(if_match: str | None) -> dict[str, str] | None:
    if if_match is None:
        return None
    return {"If-Match": if_match}


def _index_handle(collection_name: str, index_id: str) -> str:
    # a bare numeric ID is qualified with the collection name
    if "/" in index_id:
        return index_id
    return f"{collection_name}/{index_id}"


def _is_document_not_found(api_exception: ArangoAPIException) -> bool:
    return api_exception.error_num == ErrorNum.ARANGO_DOCUMENT_NOT_FOUND or (
        api_exception.http_code == 404 and api_exception.error_num is None
    )


def _index_payload(
    fields: Iterable[str],
    *,
    index_type: str,
    unique: bool | None,
    sparse: bool | None,
    name: str | None,
    expire_after: int | None,
) -> dict[str, Any]:
    return {
        k: v
        for k, v in {
            "type": index_type,
            "fields": list(fields),
            "unique": unique,
            "sparse": sparse,
            "name": name,
            "expireAfter": expire_after,
        }.items()
        if v is not None
    }


class Collection(Generic[DOC]):
    """
    A collection of documents in an ArangoDB database, the object to read and
    write single documents and to manage the collection's indexes.
    This class has a synchronous interface.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_collection` of Database,
    wherefrom the Collection inherits its API options and, most importantly,
    its connection (i.e. its credentials, which are renewed in one place for
    the database and all of its collections).

    Args:
        database: a Database object, instantiated earlier. This represents
            the database the collection belongs to.
        name: the collection name. This parameter should match an existing
            collection on the database.
        api_options: a complete specification of the API Options for this instance.

    Example:
        >>> from arangopy import ArangoClient
        >>> database = ArangoClient().get_database(
        ...     "http://localhost:8529",
        ...     database="my_db",
        ...     username="root",
        ...     password="openSesame",
        ... )
        >>> my_collection = database.create_collection("my_events")
        >>> my_collection_2 = database.get_collection("my_events")

    Note:
        creating an instance of Collection does not trigger actual creation
        of the collection on the database. The latter should have been created
        beforehand, e.g. through the `create_collection` method of a Database.
    """

    def __init__(
        self,
        *,
        database: Database,
        name: str,
        api_options: FullAPIOptions,
    ) -> None:
        self.api_options = api_options
        self._name = name
        self._database = database._copy(api_options=self.api_options)
        self._api_commander: APICommander = self._database._api_commander

    def __repr__(self) -> str:
        _db_desc = f'database="{self.database.name}"'
        return (
            f'{self.__class__.__name__}(name="{self.name}", '
            f"{_db_desc}, api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Collection):
            return all(
                [
                    self._name == other._name,
                    self._database == other._database,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    def _copy(
        self: Collection[DOC],
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        final_api_options = self.api_options.with_override(api_options)
        return Collection(
            database=self.database,
            name=self.name,
            api_options=final_api_options,
        )

    def with_options(
        self: Collection[DOC],
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        """
        Create a clone of this collection with some changed attributes.

        Args:
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).

        Returns:
            a new Collection instance.

        Example:
            >>> collection_with_short_timeouts = my_coll.with_options(
            ...     api_options=APIOptions(
            ...         timeout_options=TimeoutOptions(request_timeout_ms=1000),
            ...     ),
            ... )
        """

        return self._copy(api_options=api_options)

    @property
    def database(self) -> Database:
        """
        A Database object, the database this collection belongs to.

        Example:
            >>> my_coll.database.name
            'my_db'
        """

        return self._database

    @property
    def name(self) -> str:
        """
        The name of this collection.

        Example:
            >>> my_coll.name
            'my_events'
        """

        return self._name

    def _collection_path(self, *suffix: str) -> str:
        return "/".join([COLLECTION_ENDPOINT_PATH, self._name, *suffix])

    def _document_path(self, key: str | None = None) -> str:
        if key is None:
            return f"{DOCUMENT_ENDPOINT_PATH}/{self._name}"
        return f"{DOCUMENT_ENDPOINT_PATH}/{self._name}/{key}"

    def info(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDescriptor:
        """
        Information on the collection (name, ID, type and all other properties).

        Args:
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            a CollectionDescriptor instance.

        Example:
            >>> my_coll.info().collection_type
            2
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting properties of '{self.name}'")
        ci_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=self._collection_path("properties"),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished getting properties of '{self.name}'")
        return CollectionDescriptor._from_dict(ensure_dict_payload(ci_response))

    def count(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Count the documents in the collection.

        Args:
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the number of documents in the collection.

        Example:
            >>> my_coll.count()
            37
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"counting documents in '{self.name}'")
        cd_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=self._collection_path("count"),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished counting documents in '{self.name}'")
        return _require_field(ensure_dict_payload(cd_response), "count", int)

    def truncate(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Remove all documents from the collection, keeping the collection
        itself and its indexes.

        Args:
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Example:
            >>> my_coll.truncate()
            >>> my_coll.count()
            0
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"truncating '{self.name}'")
        self._api_commander.request(
            http_method=HttpMethod.PUT,
            additional_path=self._collection_path("truncate"),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished truncating '{self.name}'")

    def insert_one(
        self,
        document: DOC,
        *,
        return_new: bool | None = None,
        overwrite_mode: str | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Insert a single document in the collection.

        Args:
            document: the dictionary expressing the document to insert.
                The `_key` field of the document can be left out, in which
                case it will be assigned by the server.
            return_new: whether to have the full new document returned in
                the `new` attribute of the result.
            overwrite_mode: what to do if a document with the same `_key`
                exists already. See `arangopy.constants.OverwriteMode`; if
                not provided, the insertion fails with a unique-constraint error.
            wait_for_sync: whether to wait until the document is synced to disk.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a DocumentMeta object.

        Example:
            >>> my_coll.insert_one({"_key": "ann", "age": 30})
            DocumentMeta(id=my_events/ann, rev=_hXlW3E2---)
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"inserting document in '{self.name}'")
        io_response = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=document,  # type: ignore[arg-type]
            additional_path=self._document_path(),
            request_params=to_request_params(
                {
                    "returnNew": return_new,
                    "overwriteMode": overwrite_mode,
                    "waitForSync": wait_for_sync,
                }
            ),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished inserting document in '{self.name}'")
        return DocumentMeta._from_dict(ensure_dict_payload(io_response))

    def get(
        self,
        key: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """
        Read a single document by its key.

        Args:
            key: the `_key` of the document.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the document, or None if no document exists with the given key.

        Example:
            >>> my_coll.get("ann")
            {'_key': 'ann', '_id': 'my_events/ann', '_rev': '_hXlW3E2---', 'age': 30}
            >>> my_coll.get("nobody") is None
            True
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting document '{key}' from '{self.name}'")
        try:
            # a document body is not an envelope: its fields are returned as-is
            raw_response = self._api_commander.raw_request(
                http_method=HttpMethod.GET,
                additional_path=self._document_path(key),
                timeout_context=_TimeoutContext(
                    request_ms=_request_timeout_ms, label=_rt_label
                ),
            )
        except ArangoAPIException as api_exc:
            if _is_document_not_found(api_exc):
                logger.info(f"document '{key}' not found in '{self.name}'")
                return None
            raise
        logger.info(f"finished getting document '{key}' from '{self.name}'")
        document = parse_response_json(raw_response)
        if not isinstance(document, dict):
            raise UnexpectedArangoResponseException(
                text="Faulty response from document read API.",
                raw_response=document,
            )
        return document  # type: ignore[return-value]

    def replace(
        self,
        key: str,
        document: DOC,
        *,
        if_match: str | None = None,
        return_new: bool | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Replace a document entirely with a new one, keeping its key.

        Args:
            key: the `_key` of the document to replace.
            document: the new contents of the document.
            if_match: a revision (`_rev`) the document must currently have for the
                replacement to happen. If it does not match, an error is raised.
            return_new: whether to have the new document in the result.
            return_old: whether to have the previous document in the result.
            wait_for_sync: whether to wait until the write is synced to disk.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a DocumentMeta object.

        Example:
            >>> my_coll.replace("ann", {"age": 31}, return_old=True).old
            {'_key': 'ann', '_id': 'my_events/ann', '_rev': '_hXlW3E2---', 'age': 30}
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"replacing document '{key}' in '{self.name}'")
        rd_response = self._api_commander.request(
            http_method=HttpMethod.PUT,
            payload=document,  # type: ignore[arg-type]
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "returnNew": return_new,
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished replacing document '{key}' in '{self.name}'")
        return DocumentMeta._from_dict(ensure_dict_payload(rd_response))

    def update(
        self,
        key: str,
        patch: dict[str, Any],
        *,
        if_match: str | None = None,
        keep_null: bool | None = None,
        merge_objects: bool | None = None,
        return_new: bool | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Partially update a document, merging the provided fields into it.

        Args:
            key: the `_key` of the document to update.
            patch: the fields to set on the document.
            if_match: a revision (`_rev`) the document must currently have for the
                update to happen. If it does not match, an error is raised.
            keep_null: if False, fields set to None in the patch are removed
                from the document instead of being stored as nulls.
            merge_objects: whether object-valued fields are merged (the default
                on the server) or replaced.
            return_new: whether to have the new document in the result.
            return_old: whether to have the previous document in the result.
            wait_for_sync: whether to wait until the write is synced to disk.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a DocumentMeta object.

        Example:
            >>> my_coll.update("ann", {"city": "Rome"}, return_new=True).new
            {'_key': 'ann', '_id': 'my_events/ann', '_rev': '_hXlX0a----', 'age': 31, 'city': 'Rome'}
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"updating document '{key}' in '{self.name}'")
        ud_response = self._api_commander.request(
            http_method=HttpMethod.PATCH,
            payload=patch,
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "keepNull": keep_null,
                    "mergeObjects": merge_objects,
                    "returnNew": return_new,
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished updating document '{key}' in '{self.name}'")
        return DocumentMeta._from_dict(ensure_dict_payload(ud_response))

    def delete(
        self,
        key: str,
        *,
        if_match: str | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Delete a document by its key.

        Args:
            key: the `_key` of the document to delete.
            if_match: a revision (`_rev`) the document must currently have for the
                deletion to happen. If it does not match, an error is raised.
            return_old: whether to have the deleted document in the result.
            wait_for_sync: whether to wait until the deletion is synced to disk.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a DocumentMeta object.

        Example:
            >>> my_coll.delete("ann")
            DocumentMeta(id=my_events/ann, rev=_hXlX0a----)
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleting document '{key}' from '{self.name}'")
        dd_response = self._api_commander.request(
            http_method=HttpMethod.DELETE,
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished deleting document '{key}' from '{self.name}'")
        return DocumentMeta._from_dict(ensure_dict_payload(dd_response))

    def list_indexes(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[IndexDescriptor]:
        """
        List the indexes defined on the collection, including the primary one.

        Args:
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            a list of IndexDescriptor objects.

        Example:
            >>> my_coll.list_indexes()
            [IndexDescriptor(id=my_events/0, index_type=primary, fields=['_key'])]
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"listing indexes of '{self.name}'")
        li_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=INDEX_ENDPOINT_PATH,
            request_params={"collection": self.name},
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished listing indexes of '{self.name}'")
        raw_indexes = _require_field(ensure_dict_payload(li_response), "indexes", list)
        return [IndexDescriptor._from_dict(raw_index) for raw_index in raw_indexes]

    def create_index(
        self,
        fields: Iterable[str],
        *,
        index_type: str = IndexType.PERSISTENT,
        unique: bool | None = None,
        sparse: bool | None = None,
        name: str | None = None,
        expire_after: int | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> IndexDescriptor:
        """
        Create an index on the collection. If an identical index exists already,
        it is returned (with `is_newly_created` set to False).

        Args:
            fields: the attribute paths to index.
            index_type: the type of index, see `arangopy.constants.IndexType`.
            unique: whether the index should enforce uniqueness.
            sparse: whether documents lacking the indexed fields are left out.
            name: a name for the index (the server assigns one if omitted).
            expire_after: for TTL indexes, the number of seconds after which
                documents expire.
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            an IndexDescriptor object.

        Example:
            >>> my_coll.create_index(["city", "age"], name="city_age")
            IndexDescriptor(id=my_events/1097, index_type=persistent, fields=['city', 'age'])
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        ci_payload = _index_payload(
            fields,
            index_type=index_type,
            unique=unique,
            sparse=sparse,
            name=name,
            expire_after=expire_after,
        )
        logger.info(f"creating index on '{self.name}'")
        ci_response = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=ci_payload,
            additional_path=INDEX_ENDPOINT_PATH,
            request_params={"collection": self.name},
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished creating index on '{self.name}'")
        return IndexDescriptor._from_dict(ensure_dict_payload(ci_response))

    def drop_index(
        self,
        index_id: str,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop an index from the collection.

        Args:
            index_id: the index handle ("<collection>/<id>") or just its ID.
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Example:
            >>> my_coll.drop_index("1097")
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        handle = _index_handle(self.name, index_id)
        logger.info(f"dropping index '{handle}'")
        self._api_commander.request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{INDEX_ENDPOINT_PATH}/{handle}",
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished dropping index '{handle}'")


class AsyncCollection(Generic[DOC]):
    """
    A collection of documents in an ArangoDB database, the object to read and
    write single documents and to manage the collection's indexes.
    This class has an asynchronous interface for use with asyncio.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_collection` of AsyncDatabase.
    See the `Collection` class for details on the methods, which have the same
    signatures and semantics.

    Args:
        database: an AsyncDatabase object, the database the collection belongs to.
        name: the collection name. This parameter should match an existing
            collection on the database.
        api_options: a complete specification of the API Options for this instance.

    Example:
        >>> async_coll = async_database.get_collection("my_events")
        >>> asyncio.run(async_coll.count())
        37
    """

    def __init__(
        self,
        *,
        database: AsyncDatabase,
        name: str,
        api_options: FullAPIOptions,
    ) -> None:
        self.api_options = api_options
        self._name = name
        self._database = database._copy(api_options=self.api_options)
        self._api_commander: APICommander = self._database._api_commander

    def __repr__(self) -> str:
        _db_desc = f'database="{self.database.name}"'
        return (
            f'{self.__class__.__name__}(name="{self.name}", '
            f"{_db_desc}, api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AsyncCollection):
            return all(
                [
                    self._name == other._name,
                    self._database == other._database,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    async def __aenter__(self: AsyncCollection[DOC]) -> AsyncCollection[DOC]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self._database.__aexit__(
            exc_type=exc_type,
            exc_value=exc_value,
            traceback=traceback,
        )

    def _copy(
        self: AsyncCollection[DOC],
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        final_api_options = self.api_options.with_override(api_options)
        return AsyncCollection(
            database=self.database,
            name=self.name,
            api_options=final_api_options,
        )

    def with_options(
        self: AsyncCollection[DOC],
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        """
        Create a clone of this collection with some changed attributes.

        Args:
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).

        Returns:
            a new AsyncCollection instance.
        """

        return self._copy(api_options=api_options)

    @property
    def database(self) -> AsyncDatabase:
        """An AsyncDatabase object, the database this collection belongs to."""

        return self._database

    @property
    def name(self) -> str:
        """The name of this collection."""

        return self._name

    def _collection_path(self, *suffix: str) -> str:
        return "/".join([COLLECTION_ENDPOINT_PATH, self._name, *suffix])

    def _document_path(self, key: str | None = None) -> str:
        if key is None:
            return f"{DOCUMENT_ENDPOINT_PATH}/{self._name}"
        return f"{DOCUMENT_ENDPOINT_PATH}/{self._name}/{key}"

    async def info(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDescriptor:
        """
        Information on the collection (name, ID, type and all other properties).
        Async version of the method, for details see `Collection.info`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting properties of '{self.name}', async")
        ci_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=self._collection_path("properties"),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished getting properties of '{self.name}', async")
        return CollectionDescriptor._from_dict(ensure_dict_payload(ci_response))

    async def count(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Count the documents in the collection.
        Async version of the method, for details see `Collection.count`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"counting documents in '{self.name}', async")
        cd_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=self._collection_path("count"),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished counting documents in '{self.name}', async")
        return _require_field(ensure_dict_payload(cd_response), "count", int)

    async def truncate(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Remove all documents from the collection.
        Async version of the method, for details see `Collection.truncate`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"truncating '{self.name}', async")
        await self._api_commander.async_request(
            http_method=HttpMethod.PUT,
            additional_path=self._collection_path("truncate"),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished truncating '{self.name}', async")

    async def insert_one(
        self,
        document: DOC,
        *,
        return_new: bool | None = None,
        overwrite_mode: str | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Insert a single document in the collection.
        Async version of the method, for details see `Collection.insert_one`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"inserting document in '{self.name}', async")
        io_response = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=document,  # type: ignore[arg-type]
            additional_path=self._document_path(),
            request_params=to_request_params(
                {
                    "returnNew": return_new,
                    "overwriteMode": overwrite_mode,
                    "waitForSync": wait_for_sync,
                }
            ),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished inserting document in '{self.name}', async")
        return DocumentMeta._from_dict(ensure_dict_payload(io_response))

    async def get(
        self,
        key: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """
        Read a single document by its key, returning None if not found.
        Async version of the method, for details see `Collection.get`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting document '{key}' from '{self.name}', async")
        try:
            raw_response = await self._api_commander.async_raw_request(
                http_method=HttpMethod.GET,
                additional_path=self._document_path(key),
                timeout_context=_TimeoutContext(
                    request_ms=_request_timeout_ms, label=_rt_label
                ),
            )
        except ArangoAPIException as api_exc:
            if _is_document_not_found(api_exc):
                logger.info(f"document '{key}' not found in '{self.name}', async")
                return None
            raise
        logger.info(f"finished getting document '{key}' from '{self.name}', async")
        document = parse_response_json(raw_response)
        if not isinstance(document, dict):
            raise UnexpectedArangoResponseException(
                text="Faulty response from document read API.",
                raw_response=document,
            )
        return document  # type: ignore[return-value]

    async def replace(
        self,
        key: str,
        document: DOC,
        *,
        if_match: str | None = None,
        return_new: bool | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Replace a document entirely with a new one, keeping its key.
        Async version of the method, for details see `Collection.replace`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"replacing document '{key}' in '{self.name}', async")
        rd_response = await self._api_commander.async_request(
            http_method=HttpMethod.PUT,
            payload=document,  # type: ignore[arg-type]
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "returnNew": return_new,
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished replacing document '{key}' in '{self.name}', async")
        return DocumentMeta._from_dict(ensure_dict_payload(rd_response))

    async def update(
        self,
        key: str,
        patch: dict[str, Any],
        *,
        if_match: str | None = None,
        keep_null: bool | None = None,
        merge_objects: bool | None = None,
        return_new: bool | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Partially update a document, merging the provided fields into it.
        Async version of the method, for details see `Collection.update`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"updating document '{key}' in '{self.name}', async")
        ud_response = await self._api_commander.async_request(
            http_method=HttpMethod.PATCH,
            payload=patch,
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "keepNull": keep_null,
                    "mergeObjects": merge_objects,
                    "returnNew": return_new,
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished updating document '{key}' in '{self.name}', async")
        return DocumentMeta._from_dict(ensure_dict_payload(ud_response))

    async def delete(
        self,
        key: str,
        *,
        if_match: str | None = None,
        return_old: bool | None = None,
        wait_for_sync: bool | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DocumentMeta:
        """
        Delete a document by its key.
        Async version of the method, for details see `Collection.delete`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleting document '{key}' from '{self.name}', async")
        dd_response = await self._api_commander.async_request(
            http_method=HttpMethod.DELETE,
            additional_path=self._document_path(key),
            request_params=to_request_params(
                {
                    "returnOld": return_old,
                    "waitForSync": wait_for_sync,
                }
            ),
            additional_headers=_if_match_headers(if_match),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished deleting document '{key}' from '{self.name}', async")
        return DocumentMeta._from_dict(ensure_dict_payload(dd_response))

    async def list_indexes(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[IndexDescriptor]:
        """
        List the indexes defined on the collection, including the primary one.
        Async version of the method, for details see `Collection.list_indexes`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"listing indexes of '{self.name}', async")
        li_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=INDEX_ENDPOINT_PATH,
            request_params={"collection": self.name},
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished listing indexes of '{self.name}', async")
        raw_indexes = _require_field(ensure_dict_payload(li_response), "indexes", list)
        return [IndexDescriptor._from_dict(raw_index) for raw_index in raw_indexes]

    async def create_index(
        self,
        fields: Iterable[str],
        *,
        index_type: str = IndexType.PERSISTENT,
        unique: bool | None = None,
        sparse: bool | None = None,
        name: str | None = None,
        expire_after: int | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> IndexDescriptor:
        """
        Create an index on the collection.
        Async version of the method, for details see `Collection.create_index`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        ci_payload = _index_payload(
            fields,
            index_type=index_type,
            unique=unique,
            sparse=sparse,
            name=name,
            expire_after=expire_after,
        )
        logger.info(f"creating index on '{self.name}', async")
        ci_response = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=ci_payload,
            additional_path=INDEX_ENDPOINT_PATH,
            request_params={"collection": self.name},
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished creating index on '{self.name}', async")
        return IndexDescriptor._from_dict(ensure_dict_payload(ci_response))

    async def drop_index(
        self,
        index_id: str,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop an index from the collection.
        Async version of the method, for details see `Collection.drop_index`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        handle = _index_handle(self.name, index_id)
        logger.info(f"dropping index '{handle}', async")
        await self._api_commander.async_request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{INDEX_ENDPOINT_PATH}/{handle}",
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished dropping index '{handle}', async")
