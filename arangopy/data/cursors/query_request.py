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

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class QueryOptions:
    """
    The less common settings of a query, sent in the `options` section
    of the cursor creation request. All of them are optional and left
    to the server defaults if not provided.

    Attributes:
        full_count: whether to compute the number of documents the last
            top-level LIMIT would have discarded (in `extra.stats.fullCount`).
        fail_on_warning: whether the query should abort on the first warning.
        max_runtime: a server-side timeout for the query, in seconds.
        stream: whether to execute the query lazily, producing batches on demand.
        profile: 1 (or True) to return profiling information in `extra.profile`,
            2 to also get per-node execution statistics.
        max_plans: the maximum number of plans the optimizer may create.
        max_warning_count: the maximum number of warnings returned.
        max_transaction_size: the transaction size limit in bytes.
        intermediate_commit_count: the number of operations after which an
            intermediate commit is performed automatically.
        intermediate_commit_size: the total size of operations after which an
            intermediate commit is performed automatically.
        optimizer_rules: a list of optimizer rules to enable ("+rule") or
            disable ("-rule").
    """

    full_count: bool | None = None
    fail_on_warning: bool | None = None
    max_runtime: float | None = None
    stream: bool | None = None
    profile: bool | int | None = None
    max_plans: int | None = None
    max_warning_count: int | None = None
    max_transaction_size: int | None = None
    intermediate_commit_count: int | None = None
    intermediate_commit_size: int | None = None
    optimizer_rules: Sequence[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Recast this object into a dictionary for the request payload."""

        return {
            k: v
            for k, v in {
                "fullCount": self.full_count,
                "failOnWarning": self.fail_on_warning,
                "maxRuntime": self.max_runtime,
                "stream": self.stream,
                "profile": self.profile,
                "maxPlans": self.max_plans,
                "maxWarningCount": self.max_warning_count,
                "maxTransactionSize": self.max_transaction_size,
                "intermediateCommitCount": self.intermediate_commit_count,
                "intermediateCommitSize": self.intermediate_commit_size,
                "optimizer": (
                    {"rules": list(self.optimizer_rules)}
                    if self.optimizer_rules is not None
                    else None
                ),
            }.items()
            if v is not None
        }


@dataclass(frozen=True)
class QueryRequest:
    """
    The full description of a query to run through a cursor. The query text
    is never inspected by the client and is sent as-is.

    Attributes:
        query: the AQL query text.
        bind_vars: a mapping from bind parameter names (without the leading
            "@") to JSON-serializable values.
        count: whether the server should compute the total number of results.
        batch_size: the maximum number of documents per batch. Zero is invalid.
        cache: whether the query results cache may be used.
        memory_limit: the maximum memory the query may use, in bytes.
        ttl: the time-to-live of the server-side cursor, in seconds.
        options: a `QueryOptions` object with further settings.
    """

    query: str
    bind_vars: Mapping[str, Any] = field(default_factory=dict)
    count: bool | None = None
    batch_size: int | None = None
    cache: bool | None = None
    memory_limit: int | None = None
    ttl: int | None = None
    options: QueryOptions | None = None

    def __post_init__(self) -> None:
        if self.batch_size is not None and self.batch_size <= 0:
            raise ValueError(
                f"Invalid batch_size {self.batch_size}: a positive integer is required."
            )
        if self.ttl is not None and self.ttl < 0:
            raise ValueError(f"Invalid ttl {self.ttl}: cannot be negative.")
        # detach from the caller's (mutable) mapping
        object.__setattr__(self, "bind_vars", deepcopy(dict(self.bind_vars)))

    def as_payload(self) -> dict[str, Any]:
        """Build the body of the cursor creation request."""

        _options = self.options.as_dict() if self.options is not None else {}
        return {
            k: v
            for k, v in {
                "query": self.query,
                "bindVars": dict(self.bind_vars) if self.bind_vars else None,
                "count": self.count,
                "batchSize": self.batch_size,
                "cache": self.cache,
                "memoryLimit": self.memory_limit,
                "ttl": self.ttl,
                "options": _options or None,
            }.items()
            if v is not None
        }
