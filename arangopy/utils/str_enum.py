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

from enum import Enum, EnumMeta
from typing import TypeVar

T = TypeVar("T", bound="StrEnum")


class StrEnumMeta(EnumMeta):
    def _name_lookup(cls, value: str) -> str | None:
        """Return the member name matching a name or a value, case-insensitively."""
        by_name = {k.upper(): k for k in cls._member_map_}
        u_value = value.upper()
        if u_value in by_name:
            return by_name[u_value]
        by_value = {v.value.upper(): k for k, v in cls._member_map_.items()}
        return by_value.get(u_value)

    def __contains__(cls, value: object) -> bool:
        """Return True if the provided string belongs to the enum."""
        if isinstance(value, str):
            return cls._name_lookup(value) is not None
        return isinstance(value, cls)


class StrEnum(str, Enum, metaclass=StrEnumMeta):
    """
    An Enum whose members are also strings, so that they can be used
    as-is in headers, URL paths and payloads.
    """

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def coerce(cls: type[T], value: str | T) -> T:
        """
        Accept either a string or an instance of the Enum itself and return
        the corresponding member. String matching is case-insensitive and works
        both on member names and on member values.

        Raises:
            ValueError: if the string does not match any member.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            member_name = cls._name_lookup(value)
            if member_name is not None:
                return cls[member_name]
        raise ValueError(
            f"Invalid value '{value}' for {cls.__name__}. "
            f"Allowed values are: {[e.value for e in cls]}"
        )
