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
class DocumentMeta:
    """
    The outcome of a single-document write, i.e. the identity and revision
    of the document involved plus, when requested, its full contents.

    Attributes:
        id: the document handle, "<collection>/<key>".
        key: the document key.
        rev: the revision of the document after the write.
        old_rev: the revision before the write, for replace/update/overwrite.
        new: the full new document, if requested with `return_new`.
        old: the full previous document, if requested with `return_old`.
    """

    id: str
    key: str
    rev: str
    old_rev: str | None
    new: dict[str, Any] | None
    old: dict[str, Any] | None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"id={self.id}",
                f"rev={self.rev}",
                f"old_rev={self.old_rev}" if self.old_rev is not None else None,
                "new=..." if self.new is not None else None,
                "old=..." if self.old is not None else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> DocumentMeta:
        return DocumentMeta(
            id=_require_field(raw_dict, "_id", str),
            key=_require_field(raw_dict, "_key", str),
            rev=_require_field(raw_dict, "_rev", str),
            old_rev=_optional_field(raw_dict, "_oldRev", str),
            new=_optional_field(raw_dict, "new", dict),
            old=_optional_field(raw_dict, "old", dict),
        )
