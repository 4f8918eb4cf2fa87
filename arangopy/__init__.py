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

import importlib.metadata


def get_version() -> str:
    try:
        # an installed distribution knows its own version
        return importlib.metadata.version(__package__)

    # if the package is not installed, fall back to the version module
    except importlib.metadata.PackageNotFoundError:
        from arangopy._version import __version__ as _source_version

        return _source_version


__version__: str = get_version()


import arangopy.constants  # noqa: E402
import arangopy.cursors  # noqa: F401, E402
from arangopy.client import ArangoClient  # noqa: E402
from arangopy.collection import AsyncCollection, Collection  # noqa: E402

# A circular-import issue requires this to happen at the end of this module:
from arangopy.database import AsyncDatabase, Database  # noqa: E402

__all__ = [
    "ArangoClient",
    "AsyncCollection",
    "AsyncDatabase",
    "Collection",
    "Database",
    "__version__",
]


__pdoc__ = {
    "api_options": False,
    "utils": False,
}
