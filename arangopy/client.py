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
from typing import TYPE_CHECKING, Any, Sequence

from arangopy.authentication import UsernamePasswordTokenProvider
from arangopy.constants import CallerType
from arangopy.settings.defaults import DEFAULT_DATABASE_NAME
from arangopy.utils.api_options import (
    APIOptions,
    FullAPIOptions,
    defaultAPIOptions,
)
from arangopy.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from arangopy import AsyncDatabase, Database
    from arangopy.authentication import TokenProvider


logger = logging.getLogger(__name__)


def _resolve_credentials(
    *,
    token: str | TokenProvider | None,
    username: str | None,
    password: str | None,
) -> APIOptions:
    if username is not None or password is not None:
        if token is not None:
            raise ValueError(
                "Parameters `username`/`password` and `token` cannot be "
                "passed at the same time."
            )
        if username is None or password is None:
            raise ValueError(
                "Parameters `username` and `password` must be passed together."
            )
        return APIOptions(token=UsernamePasswordTokenProvider(username, password))
    if token is not None:
        return APIOptions(token=token)
    return APIOptions()


class ArangoClient:
    """
    A client for using the ArangoDB HTTP API. This is the entry point, sitting
    at the top of the conceptual "client -> database -> collection" hierarchy.

    A client holds no connection itself: it only stores the API Options that
    are passed down to the databases spawned from it. Each `Database` (or
    `AsyncDatabase`) then owns its connection, i.e. its credential and
    the HTTP client used to issue requests.

    Args:
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which API calls are performed. These end up in the
            request user-agent.
            Each caller identity is a ("caller_name", "caller_version") pair.
        api_options: a specification - complete or partial - of the API Options
            to override the system defaults. If this is passed alongside the
            named parameters, those will take precedence.

    Example:
        >>> from arangopy import ArangoClient
        >>> my_client = ArangoClient()
        >>> my_db = my_client.get_database(
        ...     "http://localhost:8529",
        ...     database="my_db",
        ...     username="root",
        ...     password="openSesame",
        ... )
        >>> my_coll = my_db.create_collection("movies")
        >>> my_coll.insert_one({"_key": "m1", "title": "The Title"})
        DocumentMeta(id=movies/m1, rev=_hV4xq3C---)
    """

    def __init__(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType | None = None,
    ) -> None:
        arg_api_options = APIOptions(
            callers=callers,
        )
        self.api_options = defaultAPIOptions.with_override(
            api_options
        ).with_override(arg_api_options)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.api_options})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ArangoClient):
            return self.api_options == other.api_options
        else:
            return False

    def _copy(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType | None = None,
    ) -> ArangoClient:
        arg_api_options = APIOptions(
            callers=callers,
        )
        final_api_options = self.api_options.with_override(
            api_options
        ).with_override(arg_api_options)
        return ArangoClient(api_options=final_api_options)

    def with_options(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType | None = None,
    ) -> ArangoClient:
        """
        Create a clone of this ArangoClient with some changed attributes.

        Args:
            callers: a list of caller identities, i.e. applications, or frameworks,
                on behalf of which API calls are performed. These end up in
                the request user-agent.
            api_options: any additional options to set for the clone, in the form
                of an APIOptions instance (where one can set just the needed
                attributes). In case the same setting is also provided as named
                parameter, the latter takes precedence.

        Returns:
            a new ArangoClient instance.

        Example:
            >>> other_client = my_client.with_options(
            ...     callers=[("caller_identity", "1.2.0")],
            ... )
        """

        return self._copy(
            callers=callers,
            api_options=api_options,
        )

    def _database_api_options(
        self,
        *,
        token: str | TokenProvider | None,
        username: str | None,
        password: str | None,
        api_options: APIOptions | UnsetType | None,
    ) -> FullAPIOptions:
        return self.api_options.with_override(api_options).with_override(
            _resolve_credentials(token=token, username=username, password=password)
        )

    def get_database(
        self,
        url: str,
        *,
        database: str = DEFAULT_DATABASE_NAME,
        token: str | TokenProvider | None = None,
        username: str | None = None,
        password: str | None = None,
        api_options: APIOptions | UnsetType | None = None,
    ) -> Database:
        """
        Get a Database object from this client, for doing data-related work.
        No request is issued: the database is not checked for existence and
        no authentication takes place until the first actual API call.

        Args:
            url: the base URL of the server, e.g. "http://localhost:8529".
            database: the name of the database to target.
            token: a ready-made JWT (or a TokenProvider) to authenticate with.
                Such a credential cannot be renewed by the client.
            username: the username to authenticate with. Must be passed
                together with `password` and cannot be used with `token`.
                A username/password pair is exchanged for a JWT, which is then
                renewed automatically as it expires.
            password: the password going with `username`.
            api_options: a specification - complete or partial - of the
                API Options to override the client settings. If this is passed
                together with the equivalent named parameters, the latter take
                precedence in their respective settings.

        Returns:
            a Database object with which to work on collections and queries.

        Example:
            >>> my_db = my_client.get_database(
            ...     "http://localhost:8529",
            ...     database="my_db",
            ...     token="eyJhbGciOiJIUzI1NiIs...",
            ... )
            >>> my_db.list_collection_names()
            ['movies', 'another_coll']
        """

        # lazy importing here against circular-import error
        from arangopy.database import Database

        resulting_api_options = self._database_api_options(
            token=token,
            username=username,
            password=password,
            api_options=api_options,
        )
        logger.info(f"spawning Database '{database}' at '{url}'")
        return Database(
            api_endpoint=url,
            name=database,
            api_options=resulting_api_options,
        )

    def get_async_database(
        self,
        url: str,
        *,
        database: str = DEFAULT_DATABASE_NAME,
        token: str | TokenProvider | None = None,
        username: str | None = None,
        password: str | None = None,
        api_options: APIOptions | UnsetType | None = None,
    ) -> AsyncDatabase:
        """
        Get an AsyncDatabase object from this client, for doing data-related work.
        For details on the parameters, see `ArangoClient.get_database`.

        Returns:
            an AsyncDatabase object with which to work on collections and queries.

        Example:
            >>> async def list_names(cl: ArangoClient, url: str) -> list[str]:
            ...     async with cl.get_async_database(url, token=my_jwt) as adb:
            ...         return await adb.list_collection_names()
            ...
            >>> asyncio.run(list_names(my_client, "http://localhost:8529"))
            ['movies', 'another_coll']
        """

        # lazy importing here against circular-import error
        from arangopy.database import AsyncDatabase

        resulting_api_options = self._database_api_options(
            token=token,
            username=username,
            password=password,
            api_options=api_options,
        )
        logger.info(f"spawning AsyncDatabase '{database}' at '{url}'")
        return AsyncDatabase(
            api_endpoint=url,
            name=database,
            api_options=resulting_api_options,
        )
