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

# Path prefix under which database-scoped endpoints live
DATABASE_PATH_TEMPLATE = "_db/{database}"
DEFAULT_DATABASE_NAME = "_system"

# Endpoints (relative to the database path, unless stated otherwise)
AUTH_ENDPOINT_PATH = "_open/auth"  # relative to the server root
CURSOR_ENDPOINT_PATH = "_api/cursor"
DATABASE_ENDPOINT_PATH = "_api/database"
DATABASE_CURRENT_ENDPOINT_PATH = "_api/database/current"
DATABASE_USER_ENDPOINT_PATH = "_api/database/user"
COLLECTION_ENDPOINT_PATH = "_api/collection"
DOCUMENT_ENDPOINT_PATH = "_api/document"
INDEX_ENDPOINT_PATH = "_api/index"
JOB_ENDPOINT_PATH = "_api/job"

# Defaults/settings for HTTP requests
DEFAULT_REQUEST_TIMEOUT_MS = 10000
DEFAULT_GENERAL_METHOD_TIMEOUT_MS = 30000
DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS = 60000
DEFAULT_DATABASE_ADMIN_TIMEOUT_MS = 60000
DEFAULT_CURSOR_CLOSE_TIMEOUT_MS = 5000

# Authentication
DEFAULT_AUTH_HEADER = "Authorization"
DEFAULT_BEARER_AUTH_PREFIX = "Bearer "
DEFAULT_BASIC_AUTH_PREFIX = "Basic "
# a JWT closer than this to its expiry is renewed before use
TOKEN_EXPIRY_MARGIN_S = 30

# Asynchronous job submission
ASYNC_JOB_HEADER = "x-arango-async"
ASYNC_JOB_ID_HEADER = "x-arango-async-id"

# Envelope fields, stripped from every decoded response
ENVELOPE_FIELDS = {"error", "code", "errorNum", "errorMessage"}

# Settings for redacting secrets in string representations and logging
SECRETS_REDACT_ENDING = "..."
SECRETS_REDACT_CHAR = "*"
SECRETS_REDACT_ENDING_LENGTH = 3
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    DEFAULT_AUTH_HEADER,
}
