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

"""
Unit tests for the asynchronous-job operations of the databases
"""

from __future__ import annotations

import json

import pytest
from pytest_httpserver import HTTPServer

from arangopy import AsyncDatabase, Database
from arangopy.constants import AsyncJobKind, JobListKind, JobStatus
from arangopy.exceptions import (
    ArangoHttpException,
    UnexpectedArangoResponseException,
)

from ..conftest import DATABASE_PATH, error_body, ok_body, requests_to

JOB_PATH = f"{DATABASE_PATH}/_api/job"
JOB_ID = "1001"
TRUNCATE_PATH = f"{DATABASE_PATH}/_api/collection/my_events/truncate"


class TestJobsSync:
    @pytest.mark.describe("test of job submission")
    def test_submit_job(self, httpserver: HTTPServer, database: Database) -> None:
        httpserver.expect_oneshot_request(
            TRUNCATE_PATH, method="PUT"
        ).respond_with_data("", status=202, headers={"x-arango-async-id": JOB_ID})
        httpserver.expect_oneshot_request(
            f"{DATABASE_PATH}/_api/document/my_events", method="POST"
        ).respond_with_data("", status=202)

        job_id = database.submit_job("PUT", "_api/collection/my_events/truncate")
        assert job_id == JOB_ID
        sj_request = requests_to(httpserver, TRUNCATE_PATH)[0]
        assert sj_request.headers.get("x-arango-async") == "store"

        no_job_id = database.submit_job(
            "POST",
            "_api/document/my_events",
            payload={"a": 1},
            kind=AsyncJobKind.FIRE_AND_FORGET,
        )
        assert no_job_id is None
        ff_request = requests_to(
            httpserver, f"{DATABASE_PATH}/_api/document/my_events"
        )[0]
        assert ff_request.headers.get("x-arango-async") == "true"
        assert json.loads(ff_request.data) == {"a": 1}

    @pytest.mark.describe("test of job submission without a job ID back")
    def test_submit_job_no_id(self, httpserver: HTTPServer, database: Database) -> None:
        httpserver.expect_oneshot_request(
            TRUNCATE_PATH, method="PUT"
        ).respond_with_data("", status=202)
        with pytest.raises(UnexpectedArangoResponseException):
            database.submit_job("PUT", "_api/collection/my_events/truncate")
        with pytest.raises(ValueError):
            database.submit_job("GET", "_api/version", kind="sometimes")

    @pytest.mark.describe("test of job status")
    def test_job_status(self, httpserver: HTTPServer, database: Database) -> None:
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="GET"
        ).respond_with_data("", status=204)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="GET"
        ).respond_with_json(ok_body(), headers={"x-arango-async-id": JOB_ID})
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/unknown", method="GET"
        ).respond_with_json(error_body(404, 404, "not found"), status=404)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/broken", method="GET"
        ).respond_with_json(error_body(400, 400, "bad parameter"), status=400)

        assert database.job_status(JOB_ID) == JobStatus.PENDING
        assert database.job_status(JOB_ID) == JobStatus.DONE
        assert database.job_status("unknown") == JobStatus.NOT_FOUND
        with pytest.raises(ArangoHttpException) as exc_info:
            database.job_status("broken")
        assert exc_info.value.http_code == 400

    @pytest.mark.describe("test of job result retrieval")
    def test_fetch_job_result(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="PUT"
        ).respond_with_data("", status=204)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="PUT"
        ).respond_with_json(
            ok_body(id="9876", name="my_events", count=37),
            headers={"x-arango-async-id": JOB_ID},
        )
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/1002", method="PUT"
        ).respond_with_json(
            error_body(404, 1203, "collection or view not found"),
            status=404,
            headers={"x-arango-async-id": "1002"},
        )

        assert database.fetch_job_result(JOB_ID) is None
        assert database.fetch_job_result(JOB_ID) == {
            "id": "9876",
            "name": "my_events",
            "count": 37,
        }
        # the job's own failure surfaces as a regular API error
        with pytest.raises(ArangoHttpException) as exc_info:
            database.fetch_job_result("1002")
        assert exc_info.value.error_num == 1203

    @pytest.mark.describe("test of job listing and deletion")
    def test_list_and_delete_jobs(
        self, httpserver: HTTPServer, database: Database
    ) -> None:
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/done", method="GET"
        ).respond_with_json(["1001", "1002"])
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/pending", method="GET", query_string="count=5"
        ).respond_with_json([])
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/done", method="GET"
        ).respond_with_json([1001])
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/expired", method="DELETE"
        ).respond_with_json(ok_body(result=True))
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/all", method="DELETE"
        ).respond_with_json(ok_body(result=True))

        assert database.list_job_ids() == ["1001", "1002"]
        assert database.list_job_ids(JobListKind.PENDING, count=5) == []
        with pytest.raises(UnexpectedArangoResponseException):
            database.list_job_ids("done")

        database.delete_jobs("expired", stamp=1700000000.5)
        database.delete_jobs()
        dj_request = requests_to(httpserver, f"{JOB_PATH}/expired", "DELETE")[0]
        assert dj_request.args.to_dict() == {"stamp": "1700000000.5"}
        assert requests_to(httpserver, f"{JOB_PATH}/all", "DELETE")[0].args == {}


class TestJobsAsync:
    @pytest.mark.describe("test of the job lifecycle, async")
    async def test_job_lifecycle_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            TRUNCATE_PATH, method="PUT"
        ).respond_with_data("", status=202, headers={"x-arango-async-id": JOB_ID})
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/pending", method="GET"
        ).respond_with_json([JOB_ID])
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="GET"
        ).respond_with_data("", status=204)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="PUT"
        ).respond_with_data("", status=204)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="GET"
        ).respond_with_json(ok_body(), headers={"x-arango-async-id": JOB_ID})
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="PUT"
        ).respond_with_json(
            ok_body(id="9876", name="my_events"),
            headers={"x-arango-async-id": JOB_ID},
        )
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/{JOB_ID}", method="GET"
        ).respond_with_json(error_body(404, 404, "not found"), status=404)
        httpserver.expect_oneshot_request(
            f"{JOB_PATH}/all", method="DELETE"
        ).respond_with_json(ok_body(result=True))

        job_id = await async_database.submit_job(
            "PUT", "_api/collection/my_events/truncate"
        )
        assert job_id == JOB_ID
        assert await async_database.list_job_ids("pending") == [JOB_ID]
        assert await async_database.job_status(JOB_ID) == JobStatus.PENDING
        assert await async_database.fetch_job_result(JOB_ID) is None
        assert await async_database.job_status(JOB_ID) == JobStatus.DONE
        assert await async_database.fetch_job_result(JOB_ID) == {
            "id": "9876",
            "name": "my_events",
        }
        assert await async_database.job_status(JOB_ID) == JobStatus.NOT_FOUND
        await async_database.delete_jobs()

    @pytest.mark.describe("test of fire-and-forget submission, async")
    async def test_fire_and_forget_async(
        self, httpserver: HTTPServer, async_database: AsyncDatabase
    ) -> None:
        httpserver.expect_oneshot_request(
            TRUNCATE_PATH, method="PUT"
        ).respond_with_data("", status=202)
        assert (
            await async_database.submit_job(
                "PUT",
                "_api/collection/my_events/truncate",
                kind="true",
            )
            is None
        )
        assert requests_to(httpserver, TRUNCATE_PATH)[0].headers.get(
            "x-arango-async"
        ) == "true"
