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
from typing import Any, Iterable, Sequence

from arangopy.authentication import (
    StaticTokenProvider,
    TokenProvider,
    coerce_possible_token_provider,
)
from arangopy.constants import CallerType
from arangopy.settings.defaults import (
    DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS,
    DEFAULT_CURSOR_CLOSE_TIMEOUT_MS,
    DEFAULT_DATABASE_ADMIN_TIMEOUT_MS,
    DEFAULT_GENERAL_METHOD_TIMEOUT_MS,
    DEFAULT_REQUEST_TIMEOUT_MS,
    FIXED_SECRET_PLACEHOLDER,
)
from arangopy.utils.unset import _UNSET, UnsetType


def _pick(override: Any, inherited: Any) -> Any:
    return inherited if isinstance(override, UnsetType) else override


@dataclass
class TimeoutOptions:
    """
    Timeouts, in milliseconds, applied to the requests sent to ArangoDB.
    Zero means "wait indefinitely".

    Any field left unset keeps the value of the object the options are
    applied to (a client, a database or a collection). Most methods also
    accept per-call timeout parameters, which win over these settings.

    Attributes:
        request_timeout_ms: bound on each single HTTP request, including
            every page fetch of a query cursor. Defaults to 10 s.
        general_method_timeout_ms: bound on a whole document or query method
            call. Methods issuing one request use the smaller of this and
            `request_timeout_ms`. Defaults to 30 s.
        collection_admin_timeout_ms: bound on collection management calls,
            such as creating, dropping, truncating and listing collections,
            or handling their indexes. Defaults to 60 s.
        database_admin_timeout_ms: bound on the calls that create, drop
            or list databases. Defaults to 60 s.
        cursor_close_timeout_ms: bound on the best-effort DELETE that frees
            a server-side cursor left undrained, for instance on an early
            exit from a `with` block. Defaults to 5 s. This one is always
            bounded: zero or negative values raise a ValueError.
    """

    request_timeout_ms: int | UnsetType = _UNSET
    general_method_timeout_ms: int | UnsetType = _UNSET
    collection_admin_timeout_ms: int | UnsetType = _UNSET
    database_admin_timeout_ms: int | UnsetType = _UNSET
    cursor_close_timeout_ms: int | UnsetType = _UNSET

    def __post_init__(self) -> None:
        if not isinstance(self.cursor_close_timeout_ms, UnsetType) and (
            self.cursor_close_timeout_ms <= 0
        ):
            raise ValueError(
                "cursor_close_timeout_ms must be a positive number of milliseconds."
            )


@dataclass
class FullTimeoutOptions(TimeoutOptions):
    """
    A `TimeoutOptions` with every field set. This is what the `.api_options`
    of clients, databases and collections hold.
    """

    request_timeout_ms: int
    general_method_timeout_ms: int
    collection_admin_timeout_ms: int
    database_admin_timeout_ms: int
    cursor_close_timeout_ms: int

    def __init__(
        self,
        *,
        request_timeout_ms: int,
        general_method_timeout_ms: int,
        collection_admin_timeout_ms: int,
        database_admin_timeout_ms: int,
        cursor_close_timeout_ms: int,
    ) -> None:
        TimeoutOptions.__init__(
            self,
            request_timeout_ms=request_timeout_ms,
            general_method_timeout_ms=general_method_timeout_ms,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            database_admin_timeout_ms=database_admin_timeout_ms,
            cursor_close_timeout_ms=cursor_close_timeout_ms,
        )

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """Return a copy where every field set in `other` replaces ours."""

        return FullTimeoutOptions(
            request_timeout_ms=_pick(
                other.request_timeout_ms, self.request_timeout_ms
            ),
            general_method_timeout_ms=_pick(
                other.general_method_timeout_ms, self.general_method_timeout_ms
            ),
            collection_admin_timeout_ms=_pick(
                other.collection_admin_timeout_ms, self.collection_admin_timeout_ms
            ),
            database_admin_timeout_ms=_pick(
                other.database_admin_timeout_ms, self.database_admin_timeout_ms
            ),
            cursor_close_timeout_ms=_pick(
                other.cursor_close_timeout_ms, self.cursor_close_timeout_ms
            ),
        )


@dataclass
class APIOptions:
    """
    Settings governing how arangopy talks to the ArangoDB HTTP API.

    Clients, databases and collections each carry a complete set of these.
    To change some of them, build an `APIOptions` with just the fields of
    interest and pass it to the `ArangoClient` constructor, to `get_database`
    or to a `with_options` method: the result is a new object whose unset
    fields are inherited from the one the method was called on.

    A field given here (None included) replaces the inherited value, with
    two exceptions: `database_additional_headers` is merged key by key and
    `redacted_header_names` is merged as a set.

    Attributes:
        callers: `(name, version)` pairs, either item possibly None, that
            are prepended to the User-Agent header of every request.
        database_additional_headers: extra headers sent with each request.
            A None value removes that header from the outgoing requests.
        redacted_header_names: header names, compared case-insensitively,
            whose values are masked in debug logs.
        token: the `TokenProvider` supplying the Authorization header. A
            string or None is wrapped into a `StaticTokenProvider`; use a
            `UsernamePasswordTokenProvider` for a token that can be renewed.
        timeout_options: a `TimeoutOptions` (see) for the request timeouts.

    Example:
        >>> from arangopy import ArangoClient
        >>> from arangopy.api_options import APIOptions, TimeoutOptions
        >>>
        >>> my_client = ArangoClient(
        ...     api_options=APIOptions(callers=[("my_app", "1.2.3")]),
        ... )
        >>> my_database = my_client.get_database(
        ...     "http://localhost:8529",
        ...     database="my_db",
        ...     username="root",
        ...     password="openSesame",
        ... )
        >>> my_slow_database = my_database.with_options(
        ...     api_options=APIOptions(
        ...         timeout_options=TimeoutOptions(request_timeout_ms=60000),
        ...     ),
        ... )
    """

    callers: Sequence[CallerType] | UnsetType = _UNSET
    database_additional_headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: set[str] | UnsetType = _UNSET
    token: TokenProvider | UnsetType = _UNSET

    timeout_options: TimeoutOptions | UnsetType = _UNSET

    def __init__(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        database_additional_headers: dict[str, str | None] | UnsetType = _UNSET,
        redacted_header_names: Iterable[str] | UnsetType = _UNSET,
        token: str | TokenProvider | None | UnsetType = _UNSET,
        timeout_options: TimeoutOptions | UnsetType = _UNSET,
    ) -> None:
        self.callers = callers
        self.database_additional_headers = database_additional_headers
        self.redacted_header_names = (
            _UNSET
            if isinstance(redacted_header_names, UnsetType)
            else set(redacted_header_names)
        )
        self.token = coerce_possible_token_provider(token)
        self.timeout_options = timeout_options

    def __repr__(self) -> str:
        masked = (
            set()
            if isinstance(self.redacted_header_names, UnsetType)
            else {name.upper() for name in self.redacted_header_names}
        )
        pieces: list[str] = []
        if not isinstance(self.callers, UnsetType):
            pieces.append(f"callers={self.callers}")
        if not isinstance(self.database_additional_headers, UnsetType):
            shown_headers = {
                k: FIXED_SECRET_PLACEHOLDER if k.upper() in masked else v
                for k, v in self.database_additional_headers.items()
            }
            pieces.append(f"database_additional_headers={shown_headers}")
        if not isinstance(self.redacted_header_names, UnsetType):
            pieces.append(f"redacted_header_names={self.redacted_header_names}")
        if not isinstance(self.token, UnsetType) and self.token:
            pieces.append(f"token={self.token}")
        if not isinstance(self.timeout_options, UnsetType):
            pieces.append(f"timeout_options={self.timeout_options}")
        return f"{self.__class__.__name__}({', '.join(pieces)})"


@dataclass
class FullAPIOptions(APIOptions):
    """
    An `APIOptions` with every field set, as held in the `.api_options`
    attribute of clients, databases and collections. See `APIOptions`
    for the fields.
    """

    callers: Sequence[CallerType]
    database_additional_headers: dict[str, str | None]
    redacted_header_names: set[str]
    token: TokenProvider

    timeout_options: FullTimeoutOptions

    def __init__(
        self,
        *,
        callers: Sequence[CallerType],
        database_additional_headers: dict[str, str | None],
        redacted_header_names: set[str],
        token: str | TokenProvider | None,
        timeout_options: FullTimeoutOptions,
    ) -> None:
        APIOptions.__init__(
            self,
            callers=callers,
            database_additional_headers=database_additional_headers,
            redacted_header_names=redacted_header_names,
            token=token,
            timeout_options=timeout_options,
        )

    def __repr__(self) -> str:
        token_piece = f"token={self.token}, " if self.token else ""
        return f"{self.__class__.__name__}({token_piece}...)"

    def with_override(self, other: APIOptions | None | UnsetType) -> FullAPIOptions:
        """
        Apply a partial `APIOptions` on top of this one and return the
        resulting full options. Passing None (or nothing) returns `self`.
        """

        if isinstance(other, UnsetType) or other is None:
            return self

        database_additional_headers: dict[str, str | None] = {
            **self.database_additional_headers,
            **_pick(other.database_additional_headers, {}),
        }
        redacted_header_names: set[str] = self.redacted_header_names | _pick(
            other.redacted_header_names, set()
        )
        timeout_options: FullTimeoutOptions = (
            self.timeout_options.with_override(other.timeout_options)
            if isinstance(other.timeout_options, TimeoutOptions)
            else self.timeout_options
        )

        return FullAPIOptions(
            callers=_pick(other.callers, self.callers),
            database_additional_headers=database_additional_headers,
            redacted_header_names=redacted_header_names,
            token=_pick(other.token, self.token),
            timeout_options=timeout_options,
        )


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
    general_method_timeout_ms=DEFAULT_GENERAL_METHOD_TIMEOUT_MS,
    collection_admin_timeout_ms=DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS,
    database_admin_timeout_ms=DEFAULT_DATABASE_ADMIN_TIMEOUT_MS,
    cursor_close_timeout_ms=DEFAULT_CURSOR_CLOSE_TIMEOUT_MS,
)
defaultAPIOptions = FullAPIOptions(
    callers=[],
    database_additional_headers={},
    redacted_header_names=set(),
    token=StaticTokenProvider(None),
    timeout_options=defaultTimeoutOptions,
)
