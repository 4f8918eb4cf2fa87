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

import base64
import binascii
import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any

from typing_extensions import override

from arangopy.settings.defaults import (
    DEFAULT_AUTH_HEADER,
    DEFAULT_BASIC_AUTH_PREFIX,
    DEFAULT_BEARER_AUTH_PREFIX,
    FIXED_SECRET_PLACEHOLDER,
    SECRETS_REDACT_CHAR,
    SECRETS_REDACT_ENDING,
    SECRETS_REDACT_ENDING_LENGTH,
    TOKEN_EXPIRY_MARGIN_S,
)
from arangopy.utils.unset import _UNSET, UnsetType


def coerce_token_provider(
    token: str | TokenProvider | None,
) -> TokenProvider:
    if isinstance(token, TokenProvider):
        return token
    else:
        return StaticTokenProvider(token)


def coerce_possible_token_provider(
    token: str | TokenProvider | None | UnsetType,
) -> TokenProvider | UnsetType:
    if isinstance(token, UnsetType):
        return _UNSET
    else:
        return coerce_token_provider(token)


def _redact_secret(secret: str, max_length: int, hide_if_short: bool = True) -> str:
    """
    Return a shortened-if-necessary version of a 'secret' string (with ellipsis).

    Args:
        secret: a secret string to redact
        max_length: if the secret and the fixed ending exceed this size,
            shortening takes place.
        hide_if_short: this controls what to do when the input secret is
            shorter, i.e. when no shortening takes place.
            if False, the secret is returned as-is;
            If True, a masked string is returned of the same length as secret.

    Returns:
        a 'redacted' form of the secret string as per the rules outlined above.
    """
    secret_len = len(secret)
    if secret_len + SECRETS_REDACT_ENDING_LENGTH > max_length:
        return (
            secret[: max_length - SECRETS_REDACT_ENDING_LENGTH] + SECRETS_REDACT_ENDING
        )
    else:
        if hide_if_short:
            return SECRETS_REDACT_CHAR * len(secret)
        else:
            return secret


def _b64(cleartext: str) -> str:
    return base64.b64encode(cleartext.encode()).decode()


def jwt_expiry(token: str) -> float | None:
    """
    Read the `exp` claim (epoch seconds) out of a JWT without verifying it.

    Returns None whenever the token is not a decodable JWT or carries no
    numeric expiry: in that case the token is simply used until rejected.
    """
    pieces = token.split(".")
    if len(pieces) != 3:
        return None
    payload_b64 = pieces[1] + "=" * (-len(pieces[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload_b64.encode()))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        return float(exp)
    return None


@dataclass(frozen=True)
class Credential:
    """
    The authentication material attached to requests at a given moment.

    A credential is never mutated: a renewal produces a new instance which
    replaces the old one wholesale, so that a reader always sees a
    consistent (username, password, token) triple.

    Attributes:
        username: the username, if the credential is renewable.
        password: the password, if the credential is renewable.
        token: the bearer token (a JWT as issued by the server, or any
            pre-issued token supplied by the user). If None, requests
            fall back to HTTP Basic authentication with username/password.
        expires_at: the expiry of `token` as epoch seconds, when known.
    """

    username: str | None = None
    password: str | None = None
    token: str | None = None
    expires_at: float | None = None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                None
                if self.username is None
                else f"username={_redact_secret(self.username, 6)}",
                None if self.password is None else f"password={FIXED_SECRET_PLACEHOLDER}",
                None if self.token is None else f"token={_redact_secret(self.token, 15)}",
                None if self.expires_at is None else f"expires_at={self.expires_at}",
            )
            if pc is not None
        ]
        inner_desc = ", ".join(pieces)
        return f"{self.__class__.__name__}({inner_desc})"

    @property
    def renewable(self) -> bool:
        """Whether the client can obtain a fresh token by itself."""
        return self.username is not None and self.password is not None

    def is_expired(
        self,
        *,
        margin_s: float = TOKEN_EXPIRY_MARGIN_S,
        now: float | None = None,
    ) -> bool:
        """
        Whether the token is known to be expired, or about to be within
        `margin_s` seconds. A token with unknown expiry is never deemed expired.
        """
        if self.token is None or self.expires_at is None:
            return False
        _now = time.time() if now is None else now
        return _now + margin_s >= self.expires_at

    def with_token(self, token: str) -> Credential:
        """Return a new credential carrying the given token (and its expiry)."""
        return replace(self, token=token, expires_at=jwt_expiry(token))

    def authorization_header(self) -> dict[str, str]:
        if self.token is not None:
            return {DEFAULT_AUTH_HEADER: f"{DEFAULT_BEARER_AUTH_PREFIX}{self.token}"}
        if self.username is not None and self.password is not None:
            basic = _b64(f"{self.username}:{self.password}")
            return {DEFAULT_AUTH_HEADER: f"{DEFAULT_BASIC_AUTH_PREFIX}{basic}"}
        return {}


class TokenProvider(ABC):
    """
    Abstract base class for a token provider.
    The relevant methods in this interface are returning a string to use as token
    and the initial `Credential` that a connection starts with.

    The __str__ / __repr__ methods are NOT to be used as source of tokens:
    use get_token instead.

    Note that equality (__eq__) checks if the generated tokens match
    under all circumstances (e.g. a literal passthrough matches a
    different-encoding token provider that yields the same token).
    """

    def __eq__(self, other: Any) -> bool:
        my_token = self.get_token()
        if isinstance(other, TokenProvider):
            if my_token is None:
                return other.get_token() is None
            else:
                return other.get_token() == my_token
        else:
            return False

    @abstractmethod
    def __repr__(self) -> str: ...

    def __bool__(self) -> bool:
        """
        All providers, unless their token is None, evaluate to True.
        """
        return self.get_token() is not None

    @abstractmethod
    def get_token(self) -> str | None:
        """
        Produce a string for direct use as token in a subsequent API request,
        or None for no token.
        """
        ...

    def get_credential(self) -> Credential:
        """Produce the credential a new connection starts with."""
        token = self.get_token()
        if token is None:
            return Credential()
        return Credential().with_token(token)


class StaticTokenProvider(TokenProvider):
    """
    A "pass-through" provider that wraps a supplied literal token, such as
    a JWT obtained out-of-band. Such a credential cannot be renewed by
    the client: once rejected, a fresh token must be supplied.

    Args:
        token: an access token for subsequent use in the client.

    Example:
        >>> from arangopy import ArangoClient
        >>> from arangopy.authentication import StaticTokenProvider
        >>> token_provider = StaticTokenProvider("eyJhbGciOiJIUzI1NiIs...")
        >>> database = ArangoClient().get_database(
        ...     "http://localhost:8529",
        ...     token=token_provider,
        ... )
    """

    def __init__(self, token: str | None) -> None:
        self.token = token

    @override
    def __repr__(self) -> str:
        if self.token is None:
            return "(none)"
        else:
            return f"{self.__class__.__name__}({_redact_secret(self.token, 15)})"

    @override
    def get_token(self) -> str | None:
        return self.token


class UsernamePasswordTokenProvider(TokenProvider):
    """
    A token provider encoding username/password-based authentication.

    Requests are first sent with HTTP Basic authentication; whenever the
    server asks for it (or a token approaches its expiry), the client
    exchanges the pair for a JWT at the token-issuance endpoint and uses
    that as bearer token from then on.

    Args:
        username: the username for accessing the database.
        password: the corresponding password.

    Example:
        >>> from arangopy import ArangoClient
        >>> from arangopy.authentication import UsernamePasswordTokenProvider
        >>> token_provider = UsernamePasswordTokenProvider("root", "openSesame")
        >>> database = ArangoClient().get_database(
        ...     "http://localhost:8529",
        ...     token=token_provider,
        ... )
    """

    def __init__(self, username: str, password: str) -> None:
        self.username = username
        self.password = password
        self.token = _b64(f"{self.username}:{self.password}")

    @override
    def __repr__(self) -> str:
        _r_username = _redact_secret(self.username, 6)
        _r_password = FIXED_SECRET_PLACEHOLDER
        return f'{self.__class__.__name__}("username={_r_username}, password={_r_password}")'

    @override
    def get_token(self) -> str:
        return self.token

    @override
    def get_credential(self) -> Credential:
        return Credential(username=self.username, password=self.password)
