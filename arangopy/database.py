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
from typing import TYPE_CHECKING, Any, Mapping, overload

import httpx

from arangopy.authentication import Credential
from arangopy.constants import (
    DOC,
    AsyncJobKind,
    BindVarsType,
    DefaultDocumentType,
    JobListKind,
    JobStatus,
)
from arangopy.data.cursors.query_cursor import AsyncQueryCursor, QueryCursor
from arangopy.data.cursors.query_engine import _AQLQueryEngine
from arangopy.data.cursors.query_request import QueryOptions, QueryRequest
from arangopy.exceptions import (
    ArangoHttpException,
    UnexpectedArangoResponseException,
    _select_singlereq_timeout_ca,
    _select_singlereq_timeout_da,
    _select_singlereq_timeout_gm,
    _TimeoutContext,
)
from arangopy.info import CollectionDescriptor, DatabaseInfo
from arangopy.settings.defaults import (
    ASYNC_JOB_HEADER,
    ASYNC_JOB_ID_HEADER,
    COLLECTION_ENDPOINT_PATH,
    DATABASE_CURRENT_ENDPOINT_PATH,
    DATABASE_ENDPOINT_PATH,
    DATABASE_PATH_TEMPLATE,
    DATABASE_USER_ENDPOINT_PATH,
    DEFAULT_DATABASE_NAME,
    JOB_ENDPOINT_PATH,
)
from arangopy.utils.api_commander import APICommander
from arangopy.utils.api_options import APIOptions, FullAPIOptions
from arangopy.utils.authenticator import Authenticator
from arangopy.utils.envelope import (
    DecodedPayload,
    _require_field,
    ensure_dict_payload,
    parse_response_json,
)
from arangopy.utils.request_tools import HttpMethod, to_request_params
from arangopy.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from arangopy.authentication import TokenProvider
    from arangopy.collection import AsyncCollection, Collection


logger = logging.getLogger(__name__)


def _database_path(name: str) -> str:
    return DATABASE_PATH_TEMPLATE.format(database=name)


def _make_authenticator(
    api_endpoint: str, api_options: FullAPIOptions
) -> Authenticator:
    return Authenticator(
        api_endpoint=api_endpoint,
        token_provider=api_options.token,
        headers={
            k: v
            for k, v in api_options.database_additional_headers.items()
            if v is not None
        },
    )


def _to_query_request(
    query: str | QueryRequest,
    *,
    bind_vars: BindVarsType | None,
    count: bool | None,
    batch_size: int | None,
    cache: bool | None,
    memory_limit: int | None,
    ttl: int | None,
    options: QueryOptions | None,
) -> QueryRequest:
    if isinstance(query, QueryRequest):
        if any(
            arg is not None
            for arg in (bind_vars, count, batch_size, cache, memory_limit, ttl, options)
        ):
            raise ValueError(
                "Query settings cannot be passed alongside a QueryRequest object."
            )
        return query
    return QueryRequest(
        query=query,
        bind_vars=bind_vars or {},
        count=count,
        batch_size=batch_size,
        cache=cache,
        memory_limit=memory_limit,
        ttl=ttl,
        options=options,
    )


def _collection_payload(
    name: str,
    *,
    collection_type: int | None,
    wait_for_sync: bool | None,
    key_options: dict[str, Any] | None,
) -> dict[str, Any]:
    return {
        k: v
        for k, v in {
            "name": name,
            "type": collection_type,
            "waitForSync": wait_for_sync,
            "keyOptions": key_options,
        }.items()
        if v is not None
    }


def _to_job_status(raw_response: httpx.Response) -> JobStatus:
    if raw_response.status_code == 200:
        return JobStatus.DONE
    if raw_response.status_code == 204:
        return JobStatus.PENDING
    if raw_response.status_code == 404:
        return JobStatus.NOT_FOUND
    try:
        raw_response.raise_for_status()
    except httpx.HTTPStatusError as http_exc:
        raise ArangoHttpException.from_httpx_error(http_exc)
    raise UnexpectedArangoResponseException(
        text=f"Unexpected status code {raw_response.status_code} from job status API.",
        raw_response=raw_response.text,
    )


def _to_job_id(raw_response: httpx.Response, kind: AsyncJobKind) -> str | None:
    job_id = raw_response.headers.get(ASYNC_JOB_ID_HEADER)
    if kind == AsyncJobKind.STORE and job_id is None:
        raise UnexpectedArangoResponseException(
            text=f"No '{ASYNC_JOB_ID_HEADER}' header in the job submission response.",
            raw_response=dict(raw_response.headers),
        )
    return job_id


def _job_result_is_pending(raw_response: httpx.Response) -> bool:
    # a finished job answers with its own response, tagged with the job ID
    return (
        raw_response.status_code == 204
        and ASYNC_JOB_ID_HEADER not in raw_response.headers
    )


def _to_job_ids(jl_response: DecodedPayload) -> list[str]:
    if not isinstance(jl_response, list) or not all(
        isinstance(job_id, str) for job_id in jl_response
    ):
        raise UnexpectedArangoResponseException(
            text="Faulty response from job listing API.",
            raw_response=jl_response,
        )
    return jl_response


class Database:
    """
    An ArangoDB database. This is the object for running queries, for
    database-level DDL (creating/deleting collections, databases) and for
    obtaining Collection objects themselves. This class has a synchronous interface.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_database` of ArangoClient.

    A Database owns the connection to the server: the current credential
    (and its renewal) is held here and shared by all collections and cursors
    spawned from it.

    Args:
        api_endpoint: the base URL of the server, e.g. "http://localhost:8529".
        name: the name of the database all method calls will target.
        api_options: a complete specification of the API Options for this instance.
        authenticator: the holder of the credential for the connection. If not
            provided, a new one is created from the token in `api_options`.

    Example:
        >>> from arangopy import ArangoClient
        >>> my_client = ArangoClient()
        >>> my_db = my_client.get_database(
        ...     "http://localhost:8529",
        ...     database="my_db",
        ...     username="root",
        ...     password="openSesame",
        ... )

    Note:
        creating an instance of Database does not trigger actual creation
        of the database itself, which should exist beforehand. To create databases,
        see the `create_database` method.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        name: str,
        api_options: FullAPIOptions,
        authenticator: Authenticator | None = None,
    ) -> None:
        self.api_options = api_options
        self.api_endpoint = api_endpoint.strip("/")
        self._name = name
        self._commander_headers = {
            **self.api_options.database_additional_headers,
        }
        self._authenticator = authenticator or _make_authenticator(
            self.api_endpoint, self.api_options
        )
        self._api_commander = self._get_api_commander(database_name=self._name)
        self._system_commander = self._get_api_commander(
            database_name=DEFAULT_DATABASE_NAME
        )

    def __getitem__(self, collection_name: str) -> Collection[DefaultDocumentType]:
        return self.get_collection(name=collection_name)

    def __repr__(self) -> str:
        ep_desc = f'api_endpoint="{self.api_endpoint}"'
        name_desc = f'name="{self._name}"'
        api_options_desc = f"api_options={self.api_options}"
        return f"{self.__class__.__name__}({ep_desc}, {name_desc}, {api_options_desc})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Database):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.name == other.name,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    def __enter__(self) -> Database:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        self.close()

    def _get_api_commander(self, database_name: str) -> APICommander:
        """
        Instantiate a new APICommander targeting the given database,
        bound to this object's credential holder.
        """

        return APICommander(
            api_endpoint=self.api_endpoint,
            path=_database_path(database_name),
            authenticator=self._authenticator,
            headers=self._commander_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _copy(
        self,
        *,
        name: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        arg_api_options = APIOptions(
            token=token,
        )
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        # the connection is shared as long as the credentials do not change
        _authenticator = (
            self._authenticator
            if final_api_options.token == self.api_options.token
            else None
        )
        return Database(
            api_endpoint=self.api_endpoint,
            name=name or self.name,
            api_options=final_api_options,
            authenticator=_authenticator,
        )

    def with_options(
        self,
        *,
        name: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        """
        Create a clone of this database with some changed attributes.

        Args:
            name: the name of another database to target with the clone.
            token: a token (or a TokenProvider) to use for the clone in place
                of the current credentials. A clone with unchanged credentials
                shares the connection (and its token renewals) with this object.
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).
                In case the same setting is also provided as named parameter,
                the latter takes precedence.

        Returns:
            a new `Database` instance.

        Example:
            >>> my_db_2 = my_db.with_options(name="the_other_database")
        """

        return self._copy(
            name=name,
            token=token,
            api_options=api_options,
        )

    @property
    def name(self) -> str:
        """
        The name of this database.

        Example:
            >>> my_db.name
            'my_db'
        """

        return self._name

    def close(self) -> None:
        """
        Release the resources held by this object. The synchronous HTTP client
        is shared across the whole library and is left open, so there is
        nothing else to release: the method exists for symmetry with
        `AsyncDatabase.close`. Using the Database as a context manager calls
        this method on exit.
        """

        logger.info(f"closing database '{self.name}'")

    def info(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DatabaseInfo:
        """
        Additional information on the database as a DatabaseInfo instance.

        Args:
            database_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `database_admin_timeout_ms`.
            timeout_ms: an alias for `database_admin_timeout_ms`.

        Example:
            >>> my_db.info().is_system
            False
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting database info for '{self.name}'")
        di_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_CURRENT_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished getting database info for '{self.name}'")
        return DatabaseInfo._from_dict(
            _require_field(ensure_dict_payload(di_response), "result", dict)
        )

    def list_databases(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of all databases on the server. This requires access
        to the `_system` database.

        Args:
            database_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `database_admin_timeout_ms`.
            timeout_ms: an alias for `database_admin_timeout_ms`.

        Returns:
            a list of database names, in no particular order.

        Example:
            >>> my_db.list_databases()
            ['_system', 'my_db']
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing databases")
        ld_response = self._system_commander.request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info("finished listing databases")
        return _require_field(ensure_dict_payload(ld_response), "result", list)

    def list_user_databases(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of the databases the current user can access.

        Args:
            database_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `database_admin_timeout_ms`.
            timeout_ms: an alias for `database_admin_timeout_ms`.

        Returns:
            a list of database names, in no particular order.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing user databases")
        lu_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_USER_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info("finished listing user databases")
        return _require_field(ensure_dict_payload(lu_response), "result", list)

    def create_database(
        self,
        name: str,
        *,
        users: list[dict[str, Any]] | None = None,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> Database:
        """
        Create a new database on the server. This requires access
        to the `_system` database.

        Args:
            name: the name of the database to create.
            users: an optional list of users to grant access to the new database,
                each a dictionary such as `{"username": "jim", "passwd": "x"}`.
            database_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `database_admin_timeout_ms`.
            timeout_ms: an alias for `database_admin_timeout_ms`.

        Returns:
            a Database instance targeting the new database, sharing the
            connection with this object.

        Example:
            >>> new_db = my_db.create_database("analytics")
            >>> new_db.name
            'analytics'
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        cd_payload: dict[str, Any] = {"name": name}
        if users is not None:
            cd_payload["users"] = users
        logger.info(f"creating database '{name}'")
        self._system_commander.request(
            http_method=HttpMethod.POST,
            payload=cd_payload,
            additional_path=DATABASE_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished creating database '{name}'")
        return self._copy(name=name)

    def drop_database(
        self,
        name: str,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a database from the server, along with all its contents.
        This requires access to the `_system` database.

        Args:
            name: the name of the database to drop.
            database_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `database_admin_timeout_ms`.
            timeout_ms: an alias for `database_admin_timeout_ms`.

        Example:
            >>> my_db.drop_database("analytics")
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"dropping database '{name}'")
        self._system_commander.request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{DATABASE_ENDPOINT_PATH}/{name}",
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished dropping database '{name}'")

    @overload
    def get_collection(
        self,
        name: str,
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DefaultDocumentType]: ...

    @overload
    def get_collection(
        self,
        name: str,
        *,
        document_type: type[DOC],
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]: ...

    def get_collection(
        self,
        name: str,
        *,
        document_type: type[Any] = DefaultDocumentType,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        """
        Spawn a `Collection` object instance representing a collection
        on this database.

        Creating a `Collection` instance does not have any effect on the
        actual state of the database: in other words, for the created
        `Collection` instance to be used meaningfully, the collection
        must exist already (for instance, it should have been created
        previously by calling the `create_collection` method).

        Args:
            name: the name of the collection.
            document_type: this parameter acts a formal specifier for the type checker.
                If omitted, the resulting Collection is implicitly
                a `Collection[dict[str, Any]]`. It has no effect at runtime.
            api_options: any additional options to set for the collection, in the
                form of an APIOptions instance. These are applied on top of the
                options of this database.

        Returns:
            a `Collection` instance, representing the desired collection
                (but without any form of validation).

        Example:
            >>> my_col = my_db.get_collection("my_collection")
            >>> my_col.count()
            1
        """

        # lazy importing here against circular-import error
        from arangopy.collection import Collection

        resulting_api_options = self.api_options.with_override(api_options)
        return Collection(
            database=self,
            name=name,
            api_options=resulting_api_options,
        )

    def create_collection(
        self,
        name: str,
        *,
        collection_type: int | None = None,
        wait_for_sync: bool | None = None,
        key_options: dict[str, Any] | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> Collection[DefaultDocumentType]:
        """
        Creates a collection on the database and return the Collection
        instance that represents it.

        Args:
            name: the name of the collection.
            collection_type: 2 for a document collection (the default), 3 for
                an edge collection. See `arangopy.constants.CollectionType`.
            wait_for_sync: whether writes to the collection are synced to disk
                before returning, by default.
            key_options: the key generation settings for the collection, e.g.
                `{"type": "autoincrement", "allowUserKeys": False}`.
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            a (synchronous) `Collection` instance, representing the
            newly-created collection.

        Example:
            >>> new_col = my_db.create_collection("my_events")
            >>> new_col.count()
            0
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        cc_payload = _collection_payload(
            name,
            collection_type=collection_type,
            wait_for_sync=wait_for_sync,
            key_options=key_options,
        )
        logger.info(f"creating collection '{name}'")
        cc_response = self._api_commander.request(
            http_method=HttpMethod.POST,
            payload=cc_payload,
            additional_path=COLLECTION_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        # validate the response shape
        CollectionDescriptor._from_dict(ensure_dict_payload(cc_response))
        logger.info(f"finished creating collection '{name}'")
        return self.get_collection(name)

    def drop_collection(
        self,
        name_or_collection: str | Collection[Any],
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a collection from the database, along with all documents therein.

        Args:
            name_or_collection: either the name of a collection or
                a `Collection` instance.
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Example:
            >>> my_db.list_collection_names()
            ['a_collection', 'my_events']
            >>> my_db.drop_collection("my_events")
            >>> my_db.list_collection_names()
            ['a_collection']
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _name = (
            name_or_collection
            if isinstance(name_or_collection, str)
            else name_or_collection.name
        )
        logger.info(f"dropping collection '{_name}'")
        self._api_commander.request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{COLLECTION_ENDPOINT_PATH}/{_name}",
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished dropping collection '{_name}'")

    def list_collections(
        self,
        *,
        exclude_system: bool = True,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[CollectionDescriptor]:
        """
        List all collections in this database.

        Args:
            exclude_system: whether to leave out the system collections.
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            a list of CollectionDescriptor instances one for each collection.

        Example:
            >>> my_db.list_collections()
            [CollectionDescriptor(name=my_events, id=1091, collection_type=2)]
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing collections")
        lc_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=COLLECTION_ENDPOINT_PATH,
            request_params=to_request_params({"excludeSystem": exclude_system}),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info("finished listing collections")
        return [
            CollectionDescriptor._from_dict(coll_dict)
            for coll_dict in _require_field(
                ensure_dict_payload(lc_response), "result", list
            )
        ]

    def list_collection_names(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of all (non-system) collections in this database.

        Args:
            collection_admin_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Returns:
            a list of the collection names as strings, in no particular order.

        Example:
            >>> my_db.list_collection_names()
            ['a_collection', 'my_events']
        """

        return [
            coll_desc.name
            for coll_desc in self.list_collections(
                collection_admin_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
        ]

    def query(
        self,
        query: str | QueryRequest,
        *,
        bind_vars: BindVarsType | None = None,
        count: bool | None = None,
        batch_size: int | None = None,
        cache: bool | None = None,
        memory_limit: int | None = None,
        ttl: int | None = None,
        options: QueryOptions | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> QueryCursor[Any]:
        """
        Run a query on the database and return a cursor over its results.

        The query is submitted right away, so that errors in the query (e.g. a
        syntax error or a missing bind parameter) are raised by this method. The
        returned cursor holds the first batch of results and fetches the next ones
        while it is consumed.

        Args:
            query: the query text, or a full `QueryRequest` object (in which case
                none of the other query settings can be passed).
            bind_vars: a dictionary of values for the bind parameters in the query.
            count: whether the total number of results should be computed and
                made available as the `count` attribute of the cursor.
            batch_size: the maximum number of results per batch. Must be positive.
            cache: whether the query results cache may be used.
            memory_limit: the maximum memory the query may use, in bytes.
            ttl: the time-to-live, in seconds, of the cursor on the server.
            options: a `QueryOptions` object with further settings.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                cursor-creation request. If not provided, this object's defaults apply.
                The subsequent batch fetches obey the `request_timeout_ms` of this
                object's API options.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a QueryCursor instance.

        Example:
            >>> cursor = my_db.query(
            ...     "FOR doc IN @@coll FILTER doc.age > @min_age RETURN doc.name",
            ...     bind_vars={"@coll": "my_events", "min_age": 30},
            ...     batch_size=100,
            ... )
            >>> cursor.to_list()
            ['Ann', 'John']
        """

        query_request = _to_query_request(
            query,
            bind_vars=bind_vars,
            count=count,
            batch_size=batch_size,
            cache=cache,
            memory_limit=memory_limit,
            ttl=ttl,
            options=options,
        )
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        query_engine = _AQLQueryEngine(
            api_commander=self._api_commander,
            database_name=self.name,
        )
        first_batch = query_engine._create(
            query_request=query_request,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        return QueryCursor(
            query_engine=query_engine,
            first_batch=first_batch,
            request_timeout_ms=self.api_options.timeout_options.request_timeout_ms,
            request_timeout_label="request_timeout_ms",
            cursor_close_timeout_ms=(
                self.api_options.timeout_options.cursor_close_timeout_ms
            ),
        )

    def authenticate(
        self,
        *,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> Credential:
        """
        Exchange the username/password pair for a fresh token right away, instead
        of waiting for the server to ask for it. For a pre-issued token,
        which the client cannot renew, this does nothing.

        Args:
            request_timeout_ms: a timeout, in milliseconds, for the token request.
            timeout_ms: an alias for `request_timeout_ms`.

        Returns:
            the credential in use from now on.

        Example:
            >>> my_db.authenticate()
            Credential(username="root", password=***, token="eyJhbGciOi...")
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=None,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return self._authenticator.renew(
            self._authenticator.current(),
            client=APICommander.client,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )

    def command(
        self,
        http_method: str,
        path: str,
        *,
        payload: DecodedPayload | None = None,
        request_params: Mapping[str, Any] | None = None,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DecodedPayload:
        """
        Send a request to an arbitrary endpoint of this database, with
        an arbitrary, caller-provided payload.

        Args:
            http_method: the HTTP verb, e.g. "GET".
            path: the endpoint path, relative to this database, such as
                "_api/view" or "_api/collection/my_events/figures".
            payload: a JSON-serializable object, the body of the request.
            request_params: query-string parameters for the request.
            raise_api_errors: if True, error responses result in an exception
                being raised. If False, the response body is returned as-is,
                including its envelope fields.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
                (This method issues a single API request, hence all timeout parameters
                are treated the same.)
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the decoded response body.

        Example:
            >>> my_db.command("GET", "_api/collection/my_events/count")["count"]
            37
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"command {http_method} '{path}' on {self.__class__.__name__}")
        raw_response = self._api_commander.raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=path,
            request_params=request_params or {},
            raise_api_errors=raise_api_errors,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(
            f"finished command {http_method} '{path}' on {self.__class__.__name__}"
        )
        if raise_api_errors:
            return self._api_commander._raw_response_to_json(raw_response)
        else:
            return parse_response_json(raw_response)  # type: ignore[no-any-return]

    def submit_job(
        self,
        http_method: str,
        path: str,
        *,
        payload: DecodedPayload | None = None,
        request_params: Mapping[str, Any] | None = None,
        kind: str | AsyncJobKind = AsyncJobKind.STORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> str | None:
        """
        Submit a request to be executed asynchronously by the server.

        Args:
            http_method: the HTTP verb of the request to run, e.g. "POST".
            path: the endpoint path, relative to this database.
            payload: a JSON-serializable object, the body of the request.
            request_params: query-string parameters for the request.
            kind: `AsyncJobKind.STORE` (the default) to have the result stored
                on the server for later retrieval, `AsyncJobKind.FIRE_AND_FORGET`
                to discard it.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                submission request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the job ID for stored jobs, None for fire-and-forget ones.

        Example:
            >>> job_id = my_db.submit_job("GET", "_api/collection/my_events/count")
            >>> my_db.job_status(job_id)
            <JobStatus.DONE: 'done'>
            >>> my_db.fetch_job_result(job_id)["count"]
            37
        """

        _kind = AsyncJobKind.coerce(kind)
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"submitting job {http_method} '{path}'")
        raw_response = self._api_commander.raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=path,
            request_params=request_params or {},
            additional_headers={ASYNC_JOB_HEADER: _kind.value},
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        job_id = _to_job_id(raw_response, _kind)
        logger.info(f"finished submitting job {http_method} '{path}': {job_id}")
        return job_id

    def job_status(
        self,
        job_id: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> JobStatus:
        """
        Check the processing status of an asynchronous job.

        Args:
            job_id: the ID returned by `submit_job`.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a `JobStatus` value: DONE, PENDING or NOT_FOUND.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting status of job '{job_id}'")
        raw_response = self._api_commander.raw_request(
            http_method=HttpMethod.GET,
            additional_path=f"{JOB_ENDPOINT_PATH}/{job_id}",
            raise_api_errors=False,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished getting status of job '{job_id}'")
        return _to_job_status(raw_response)

    def fetch_job_result(
        self,
        job_id: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DecodedPayload | None:
        """
        Retrieve the result of a stored asynchronous job. Once fetched, the
        result is removed from the server.

        An error response of the job itself is raised as it would have been
        by a regular request.

        Args:
            job_id: the ID returned by `submit_job`.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the decoded response of the job, or None if the job is still pending.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"fetching result of job '{job_id}'")
        raw_response = self._api_commander.raw_request(
            http_method=HttpMethod.PUT,
            additional_path=f"{JOB_ENDPOINT_PATH}/{job_id}",
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        if _job_result_is_pending(raw_response):
            logger.info(f"job '{job_id}' still pending")
            return None
        logger.info(f"finished fetching result of job '{job_id}'")
        return self._api_commander._raw_response_to_json(raw_response)

    def list_job_ids(
        self,
        kind: str | JobListKind = JobListKind.DONE,
        *,
        count: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the IDs of the asynchronous jobs which are done or pending.

        Args:
            kind: `JobListKind.DONE` (the default) or `JobListKind.PENDING`.
            count: the maximum number of IDs to return.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a list of job IDs.
        """

        _kind = JobListKind.coerce(kind)
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"listing {_kind.value} jobs")
        jl_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=f"{JOB_ENDPOINT_PATH}/{_kind.value}",
            request_params=to_request_params({"count": count}),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished listing {_kind.value} jobs")
        return _to_job_ids(jl_response)

    def delete_jobs(
        self,
        target: str = "all",
        *,
        stamp: float | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Delete the stored results of asynchronous jobs.

        Args:
            target: a job ID, or "all" for all jobs (the default), or "expired"
                for the jobs older than `stamp`.
            stamp: a Unix timestamp, used with `target="expired"`.
            general_method_timeout_ms: a timeout, in milliseconds, to impose on the
                underlying API request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleting jobs '{target}'")
        self._api_commander.request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{JOB_ENDPOINT_PATH}/{target}",
            request_params=to_request_params({"stamp": stamp}),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished deleting jobs '{target}'")


class AsyncDatabase:
    """
    An ArangoDB database. This is the object for running queries, for
    database-level DDL (creating/deleting collections, databases) and for
    obtaining AsyncCollection objects themselves.
    This class has an asynchronous interface for use with asyncio.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_async_database`
    of ArangoClient.

    An AsyncDatabase owns the connection to the server: the current credential
    (and its renewal) and the asynchronous HTTP client are held here and shared
    by all collections, cursors and copies spawned from it. Closing the
    database (or exiting its `async with` block) closes the HTTP client.

    Args:
        api_endpoint: the base URL of the server, e.g. "http://localhost:8529".
        name: the name of the database all method calls will target.
        api_options: a complete specification of the API Options for this instance.
        authenticator: the holder of the credential for the connection. If not
            provided, a new one is created from the token in `api_options`.
        async_client: the httpx.AsyncClient to issue requests with. If not
            provided, a new one is created.

    Example:
        >>> from arangopy import ArangoClient
        >>> my_client = ArangoClient()
        >>> my_async_db = my_client.get_async_database(
        ...     "http://localhost:8529",
        ...     database="my_db",
        ...     username="root",
        ...     password="openSesame",
        ... )
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        name: str,
        api_options: FullAPIOptions,
        authenticator: Authenticator | None = None,
        async_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_options = api_options
        self.api_endpoint = api_endpoint.strip("/")
        self._name = name
        self._commander_headers = {
            **self.api_options.database_additional_headers,
        }
        self._authenticator = authenticator or _make_authenticator(
            self.api_endpoint, self.api_options
        )
        self._async_client = async_client or httpx.AsyncClient()
        self._api_commander = self._get_api_commander(database_name=self._name)
        self._system_commander = self._get_api_commander(
            database_name=DEFAULT_DATABASE_NAME
        )

    def __getitem__(
        self, collection_name: str
    ) -> AsyncCollection[DefaultDocumentType]:
        return self.get_collection(name=collection_name)

    def __repr__(self) -> str:
        ep_desc = f'api_endpoint="{self.api_endpoint}"'
        name_desc = f'name="{self._name}"'
        api_options_desc = f"api_options={self.api_options}"
        return f"{self.__class__.__name__}({ep_desc}, {name_desc}, {api_options_desc})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AsyncDatabase):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.name == other.name,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> AsyncDatabase:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.close()

    def _get_api_commander(self, database_name: str) -> APICommander:
        """
        Instantiate a new APICommander targeting the given database,
        bound to this object's credential holder and HTTP client.
        """

        return APICommander(
            api_endpoint=self.api_endpoint,
            path=_database_path(database_name),
            authenticator=self._authenticator,
            headers=self._commander_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
            async_client=self._async_client,
        )

    def _copy(
        self,
        *,
        name: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        arg_api_options = APIOptions(
            token=token,
        )
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        # the connection is shared as long as the credentials do not change
        _authenticator = (
            self._authenticator
            if final_api_options.token == self.api_options.token
            else None
        )
        return AsyncDatabase(
            api_endpoint=self.api_endpoint,
            name=name or self.name,
            api_options=final_api_options,
            authenticator=_authenticator,
            async_client=self._async_client,
        )

    def with_options(
        self,
        *,
        name: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        """
        Create a clone of this database with some changed attributes.
        The clone shares the HTTP client with this object.

        Args:
            name: the name of another database to target with the clone.
            token: a token (or a TokenProvider) to use for the clone in place
                of the current credentials. A clone with unchanged credentials
                shares the connection (and its token renewals) with this object.
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).
                In case the same setting is also provided as named parameter,
                the latter takes precedence.

        Returns:
            a new `AsyncDatabase` instance.

        Example:
            >>> my_async_db_2 = my_async_db.with_options(name="the_other_database")
        """

        return self._copy(
            name=name,
            token=token,
            api_options=api_options,
        )

    @property
    def name(self) -> str:
        """The name of this database."""

        return self._name

    async def close(self) -> None:
        """
        Close the asynchronous HTTP client held by this object (and shared
        with all objects spawned from it). After this, no further requests
        can be issued through them.
        """

        logger.info(f"closing database '{self.name}', async")
        await self._async_client.aclose()

    async def info(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DatabaseInfo:
        """
        Additional information on the database as a DatabaseInfo instance.
        Async version of the method, for details see `Database.info`.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting database info for '{self.name}', async")
        di_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_CURRENT_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished getting database info for '{self.name}', async")
        return DatabaseInfo._from_dict(
            _require_field(ensure_dict_payload(di_response), "result", dict)
        )

    async def list_databases(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of all databases on the server.
        Async version of the method, for details see `Database.list_databases`.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing databases, async")
        ld_response = await self._system_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info("finished listing databases, async")
        return _require_field(ensure_dict_payload(ld_response), "result", list)

    async def list_user_databases(
        self,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of the databases the current user can access.
        Async version of the method, for details see `Database.list_user_databases`.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing user databases, async")
        lu_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=DATABASE_USER_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info("finished listing user databases, async")
        return _require_field(ensure_dict_payload(lu_response), "result", list)

    async def create_database(
        self,
        name: str,
        *,
        users: list[dict[str, Any]] | None = None,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncDatabase:
        """
        Create a new database on the server.
        Async version of the method, for details see `Database.create_database`.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        cd_payload: dict[str, Any] = {"name": name}
        if users is not None:
            cd_payload["users"] = users
        logger.info(f"creating database '{name}', async")
        await self._system_commander.async_request(
            http_method=HttpMethod.POST,
            payload=cd_payload,
            additional_path=DATABASE_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished creating database '{name}', async")
        return self._copy(name=name)

    async def drop_database(
        self,
        name: str,
        *,
        database_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a database from the server, along with all its contents.
        Async version of the method, for details see `Database.drop_database`.
        """

        _database_admin_timeout_ms, _da_label = _select_singlereq_timeout_da(
            timeout_options=self.api_options.timeout_options,
            database_admin_timeout_ms=database_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"dropping database '{name}', async")
        await self._system_commander.async_request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{DATABASE_ENDPOINT_PATH}/{name}",
            timeout_context=_TimeoutContext(
                request_ms=_database_admin_timeout_ms, label=_da_label
            ),
        )
        logger.info(f"finished dropping database '{name}', async")

    @overload
    def get_collection(
        self,
        name: str,
        *,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DefaultDocumentType]: ...

    @overload
    def get_collection(
        self,
        name: str,
        *,
        document_type: type[DOC],
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]: ...

    def get_collection(
        self,
        name: str,
        *,
        document_type: type[Any] = DefaultDocumentType,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        """
        Spawn an `AsyncCollection` object instance representing a collection
        on this database. No request is issued (and the collection is not
        checked for existence).
        For details see `Database.get_collection`.
        """

        # lazy importing here against circular-import error
        from arangopy.collection import AsyncCollection

        resulting_api_options = self.api_options.with_override(api_options)
        return AsyncCollection(
            database=self,
            name=name,
            api_options=resulting_api_options,
        )

    async def create_collection(
        self,
        name: str,
        *,
        collection_type: int | None = None,
        wait_for_sync: bool | None = None,
        key_options: dict[str, Any] | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncCollection[DefaultDocumentType]:
        """
        Creates a collection on the database and return the AsyncCollection
        instance that represents it.
        Async version of the method, for details see `Database.create_collection`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        cc_payload = _collection_payload(
            name,
            collection_type=collection_type,
            wait_for_sync=wait_for_sync,
            key_options=key_options,
        )
        logger.info(f"creating collection '{name}', async")
        cc_response = await self._api_commander.async_request(
            http_method=HttpMethod.POST,
            payload=cc_payload,
            additional_path=COLLECTION_ENDPOINT_PATH,
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        CollectionDescriptor._from_dict(ensure_dict_payload(cc_response))
        logger.info(f"finished creating collection '{name}', async")
        return self.get_collection(name)

    async def drop_collection(
        self,
        name_or_collection: str | AsyncCollection[Any],
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a collection from the database, along with all documents therein.
        Async version of the method, for details see `Database.drop_collection`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _name = (
            name_or_collection
            if isinstance(name_or_collection, str)
            else name_or_collection.name
        )
        logger.info(f"dropping collection '{_name}', async")
        await self._api_commander.async_request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{COLLECTION_ENDPOINT_PATH}/{_name}",
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info(f"finished dropping collection '{_name}', async")

    async def list_collections(
        self,
        *,
        exclude_system: bool = True,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[CollectionDescriptor]:
        """
        List all collections in this database.
        Async version of the method, for details see `Database.list_collections`.
        """

        _collection_admin_timeout_ms, _ca_label = _select_singlereq_timeout_ca(
            timeout_options=self.api_options.timeout_options,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info("listing collections, async")
        lc_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=COLLECTION_ENDPOINT_PATH,
            request_params=to_request_params({"excludeSystem": exclude_system}),
            timeout_context=_TimeoutContext(
                request_ms=_collection_admin_timeout_ms, label=_ca_label
            ),
        )
        logger.info("finished listing collections, async")
        return [
            CollectionDescriptor._from_dict(coll_dict)
            for coll_dict in _require_field(
                ensure_dict_payload(lc_response), "result", list
            )
        ]

    async def list_collection_names(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of all (non-system) collections in this database.
        Async version of the method, for details see `Database.list_collection_names`.
        """

        return [
            coll_desc.name
            for coll_desc in await self.list_collections(
                collection_admin_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
        ]

    async def query(
        self,
        query: str | QueryRequest,
        *,
        bind_vars: BindVarsType | None = None,
        count: bool | None = None,
        batch_size: int | None = None,
        cache: bool | None = None,
        memory_limit: int | None = None,
        ttl: int | None = None,
        options: QueryOptions | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncQueryCursor[Any]:
        """
        Run a query on the database and return an async cursor over its results.
        Async version of the method, for details see `Database.query`.

        Example:
            >>> async def names(adb: AsyncDatabase) -> list[str]:
            ...     async with await adb.query(
            ...         "FOR doc IN my_events RETURN doc.name",
            ...         batch_size=100,
            ...     ) as cursor:
            ...         return [name async for name in cursor]
            ...
            >>> asyncio.run(names(my_async_db))
            ['Ann', 'John']
        """

        query_request = _to_query_request(
            query,
            bind_vars=bind_vars,
            count=count,
            batch_size=batch_size,
            cache=cache,
            memory_limit=memory_limit,
            ttl=ttl,
            options=options,
        )
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        query_engine = _AQLQueryEngine(
            api_commander=self._api_commander,
            database_name=self.name,
        )
        first_batch = await query_engine._async_create(
            query_request=query_request,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        return AsyncQueryCursor(
            query_engine=query_engine,
            first_batch=first_batch,
            request_timeout_ms=self.api_options.timeout_options.request_timeout_ms,
            request_timeout_label="request_timeout_ms",
            cursor_close_timeout_ms=(
                self.api_options.timeout_options.cursor_close_timeout_ms
            ),
        )

    async def authenticate(
        self,
        *,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> Credential:
        """
        Exchange the username/password pair for a fresh token right away.
        Async version of the method, for details see `Database.authenticate`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=None,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return await self._authenticator.async_renew(
            self._authenticator.current(),
            async_client=self._async_client,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )

    async def command(
        self,
        http_method: str,
        path: str,
        *,
        payload: DecodedPayload | None = None,
        request_params: Mapping[str, Any] | None = None,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DecodedPayload:
        """
        Send a request to an arbitrary endpoint of this database.
        Async version of the method, for details see `Database.command`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"command {http_method} '{path}' on {self.__class__.__name__}")
        raw_response = await self._api_commander.async_raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=path,
            request_params=request_params or {},
            raise_api_errors=raise_api_errors,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(
            f"finished command {http_method} '{path}' on {self.__class__.__name__}"
        )
        if raise_api_errors:
            return self._api_commander._raw_response_to_json(raw_response)
        else:
            return parse_response_json(raw_response)  # type: ignore[no-any-return]

    async def submit_job(
        self,
        http_method: str,
        path: str,
        *,
        payload: DecodedPayload | None = None,
        request_params: Mapping[str, Any] | None = None,
        kind: str | AsyncJobKind = AsyncJobKind.STORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> str | None:
        """
        Submit a request to be executed asynchronously by the server.
        Async version of the method, for details see `Database.submit_job`.
        """

        _kind = AsyncJobKind.coerce(kind)
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"submitting job {http_method} '{path}', async")
        raw_response = await self._api_commander.async_raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=path,
            request_params=request_params or {},
            additional_headers={ASYNC_JOB_HEADER: _kind.value},
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        job_id = _to_job_id(raw_response, _kind)
        logger.info(
            f"finished submitting job {http_method} '{path}': {job_id}, async"
        )
        return job_id

    async def job_status(
        self,
        job_id: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> JobStatus:
        """
        Check the processing status of an asynchronous job.
        Async version of the method, for details see `Database.job_status`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"getting status of job '{job_id}', async")
        raw_response = await self._api_commander.async_raw_request(
            http_method=HttpMethod.GET,
            additional_path=f"{JOB_ENDPOINT_PATH}/{job_id}",
            raise_api_errors=False,
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished getting status of job '{job_id}', async")
        return _to_job_status(raw_response)

    async def fetch_job_result(
        self,
        job_id: str,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DecodedPayload | None:
        """
        Retrieve the result of a stored asynchronous job, or None if pending.
        Async version of the method, for details see `Database.fetch_job_result`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"fetching result of job '{job_id}', async")
        raw_response = await self._api_commander.async_raw_request(
            http_method=HttpMethod.PUT,
            additional_path=f"{JOB_ENDPOINT_PATH}/{job_id}",
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        if _job_result_is_pending(raw_response):
            logger.info(f"job '{job_id}' still pending, async")
            return None
        logger.info(f"finished fetching result of job '{job_id}', async")
        return self._api_commander._raw_response_to_json(raw_response)

    async def list_job_ids(
        self,
        kind: str | JobListKind = JobListKind.DONE,
        *,
        count: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the IDs of the asynchronous jobs which are done or pending.
        Async version of the method, for details see `Database.list_job_ids`.
        """

        _kind = JobListKind.coerce(kind)
        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"listing {_kind.value} jobs, async")
        jl_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=f"{JOB_ENDPOINT_PATH}/{_kind.value}",
            request_params=to_request_params({"count": count}),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished listing {_kind.value} jobs, async")
        return _to_job_ids(jl_response)

    async def delete_jobs(
        self,
        target: str = "all",
        *,
        stamp: float | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Delete the stored results of asynchronous jobs.
        Async version of the method, for details see `Database.delete_jobs`.
        """

        _request_timeout_ms, _rt_label = _select_singlereq_timeout_gm(
            timeout_options=self.api_options.timeout_options,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleting jobs '{target}', async")
        await self._api_commander.async_request(
            http_method=HttpMethod.DELETE,
            additional_path=f"{JOB_ENDPOINT_PATH}/{target}",
            request_params=to_request_params({"stamp": stamp}),
            timeout_context=_TimeoutContext(
                request_ms=_request_timeout_ms, label=_rt_label
            ),
        )
        logger.info(f"finished deleting jobs '{target}', async")
