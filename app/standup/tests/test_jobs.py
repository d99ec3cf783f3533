"""Tests for the scheduler job model, REST client and create-or-replace."""

from __future__ import annotations

from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from app.standup.errors import JobRegistryError
from app.standup.scheduler.jobs import (
    CloudSchedulerClient,
    HttpTarget,
    Job,
    OidcToken,
    RetryConfig,
    create_or_replace_job,
    is_identical,
)
from app.standup.tests.fakes import FakeCredentials, FakeJobRegistry

NAME = "projects/proj/locations/us-central1/jobs/ROOM"


def _job(schedule: str = "every mon,tue 10:00", time_zone: str | None = "UTC", **kwargs: Any) -> Job:
    return Job(name=NAME, schedule=schedule, time_zone=time_zone, **kwargs)


class TestModel:
    def test_names(self) -> None:
        job = _job()
        assert job.short_name == "ROOM"
        assert job.parent == "projects/proj/locations/us-central1/jobs"

    def test_to_dict_uses_api_field_names(self) -> None:
        job = _job(
            http_target=HttpTarget(
                uri="https://x.test",
                headers={"content-type": "application/json"},
                body="e30=",
                oidc_token=OidcToken("sa@proj.iam.gserviceaccount.com", "https://x.test"),
            ),
            retry_config=RetryConfig(retry_count=3, max_doublings=5),
        )
        data = job.to_dict()
        assert data["timeZone"] == "UTC"
        assert data["httpTarget"]["httpMethod"] == "POST"
        assert data["httpTarget"]["oidcToken"]["serviceAccountEmail"] == "sa@proj.iam.gserviceaccount.com"
        assert data["retryConfig"] == {"retryCount": 3, "maxDoublings": 5}
        assert Job.from_dict(data) == job


class TestIsIdentical:
    def test_missing_side(self) -> None:
        assert not is_identical(None, _job())
        assert not is_identical(_job(), None)

    def test_http_target_ignored(self) -> None:
        a = _job(http_target=HttpTarget(uri="https://a.test"))
        b = _job(http_target=HttpTarget(uri="https://b.test"))
        assert is_identical(a, b)

    @pytest.mark.parametrize(
        "other",
        [
            _job(schedule="every fri 10:00"),
            _job(time_zone="Europe/Paris"),
            _job(retry_config=RetryConfig(retry_count=1)),
        ],
    )
    def test_compared_fields(self, other: Job) -> None:
        assert not is_identical(_job(), other)


class TestCreateOrReplace:
    @pytest.mark.asyncio
    async def test_creates_when_absent(self) -> None:
        registry = FakeJobRegistry()
        result = await create_or_replace_job(registry, _job())
        assert result is not None
        assert registry.mutations == [("create", NAME)]

    @pytest.mark.asyncio
    async def test_noop_when_identical(self) -> None:
        registry = FakeJobRegistry()
        registry.jobs[NAME] = _job()
        assert await create_or_replace_job(registry, _job()) is None
        assert registry.mutations == []

    @pytest.mark.asyncio
    async def test_updates_when_different(self) -> None:
        registry = FakeJobRegistry()
        registry.jobs[NAME] = _job()
        result = await create_or_replace_job(registry, _job(schedule="every fri 11:00"))
        assert result is not None and result.schedule == "every fri 11:00"
        assert registry.mutations == [("update", NAME)]

    @pytest.mark.asyncio
    async def test_idempotent(self) -> None:
        registry = FakeJobRegistry()
        await create_or_replace_job(registry, _job())
        await create_or_replace_job(registry, _job())
        assert registry.mutations == [("create", NAME)]

    @pytest.mark.asyncio
    async def test_missing_time_zone_takes_default(self) -> None:
        registry = FakeJobRegistry()
        registry.jobs[NAME] = _job(time_zone="America/Los_Angeles")
        result = await create_or_replace_job(registry, _job(time_zone=None), "America/Los_Angeles")
        assert result is None
        assert registry.mutations == []

    @pytest.mark.asyncio
    async def test_lost_creation_race_falls_through_to_update(self) -> None:
        registry = FakeJobRegistry()
        racer = _job(schedule="every sat 08:00")
        original_get = registry.get_job
        gets = 0

        async def get_job(name: str) -> Job | None:
            nonlocal gets
            gets += 1
            if gets == 1:
                # another reconciliation creates the job between get and create
                registry.jobs[NAME] = racer
                return None
            return await original_get(name)

        registry.get_job = get_job  # type: ignore[method-assign]
        result = await create_or_replace_job(registry, _job())
        assert result is not None and result.schedule == "every mon,tue 10:00"
        assert registry.mutations == [("create", NAME), ("update", NAME)]

    @pytest.mark.asyncio
    async def test_create_failure_is_wrapped(self) -> None:
        registry = FakeJobRegistry()

        async def create_job(job: Job) -> Job:
            raise JobRegistryError("CreateJob failed with status 403: denied", status=403)

        registry.create_job = create_job  # type: ignore[method-assign]
        with pytest.raises(JobRegistryError) as excinfo:
            await create_or_replace_job(registry, _job())
        assert str(excinfo.value).startswith(f"Failed to create scheduler job {NAME}: ")
        assert "status 403" in str(excinfo.value)
        assert excinfo.value.status == 403

    @pytest.mark.asyncio
    async def test_update_failure_is_wrapped(self) -> None:
        registry = FakeJobRegistry()
        registry.jobs[NAME] = _job()

        async def update_job(job: Job) -> Job:
            raise JobRegistryError("UpdateJob failed with status 500: boom", status=500)

        registry.update_job = update_job  # type: ignore[method-assign]
        with pytest.raises(JobRegistryError, match=f"Failed to update scheduler job {NAME}: "):
            await create_or_replace_job(registry, _job(schedule="every sun 07:00"))


def _fake_scheduler(requests: list[dict[str, Any]], jobs: dict[str, dict[str, Any]]) -> web.Application:
    async def handler(req: web.Request) -> web.Response:
        path = req.path.removeprefix("/v1beta1/")
        body = await req.json() if req.can_read_body else None
        requests.append({"method": req.method, "path": path, "body": body, "auth": req.headers.get("Authorization")})
        if req.method == "GET":
            if path not in jobs:
                return web.json_response({"error": {"code": 404}}, status=404)
            return web.json_response(jobs[path])
        if req.method == "POST":
            if body["name"] in jobs:
                return web.json_response({"error": {"code": 409}}, status=409)
            jobs[body["name"]] = body
            return web.json_response(body)
        if req.method == "PATCH":
            jobs[path] = body
            return web.json_response(body)
        if path not in jobs:
            return web.json_response({"error": {"code": 404}}, status=404)
        del jobs[path]
        return web.json_response({})

    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handler)
    return app


class TestCloudSchedulerClient:
    @pytest.mark.asyncio
    async def test_round_trip_against_rest_api(self) -> None:
        requests: list[dict[str, Any]] = []
        jobs: dict[str, dict[str, Any]] = {}
        async with TestClient(TestServer(_fake_scheduler(requests, jobs))) as client:
            registry = CloudSchedulerClient(
                FakeCredentials(), origin=str(client.make_url("/v1beta1/")), default_time_zone="UTC",
            )
            assert await registry.get_job(NAME) is None
            created = await registry.create_job(_job(time_zone=None))
            assert created.time_zone == "UTC"
            fetched = await registry.get_job(NAME)
            assert fetched is not None and fetched.schedule == "every mon,tue 10:00"
            await registry.update_job(_job(schedule="every fri 09:00"))
            await registry.delete_job(NAME)

        assert [(r["method"], r["path"]) for r in requests] == [
            ("GET", NAME),
            ("POST", "projects/proj/locations/us-central1/jobs"),
            ("GET", NAME),
            ("PATCH", NAME),
            ("DELETE", NAME),
        ]
        assert requests[0]["auth"] == "Bearer token-1"
        assert jobs == {}

    @pytest.mark.asyncio
    async def test_conflict_and_missing_delete_raise(self) -> None:
        requests: list[dict[str, Any]] = []
        jobs: dict[str, dict[str, Any]] = {NAME: _job().to_dict()}
        async with TestClient(TestServer(_fake_scheduler(requests, jobs))) as client:
            registry = CloudSchedulerClient(FakeCredentials(), origin=str(client.make_url("/v1beta1/")))
            with pytest.raises(JobRegistryError) as conflict:
                await registry.create_job(_job())
            await registry.delete_job(NAME)
            with pytest.raises(JobRegistryError) as missing:
                await registry.delete_job(NAME)
        assert conflict.value.conflict
        assert "CreateJob failed with status 409" in str(conflict.value)
        assert missing.value.not_found
