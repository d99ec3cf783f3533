"""Cloud Scheduler jobs -- model, REST client and create-or-replace.

The registry is eventually consistent and shared with concurrent
reconciliations of the same room, so :func:`create_or_replace_job` treats
a lost creation race (HTTP 409) as "already exists" and carries on with
the compare/update branch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from ..config.settings import SCHEDULER_API_ORIGIN
from ..errors import JobRegistryError
from ..services.google_auth import GoogleCredentials

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "America/Los_Angeles"


@dataclass
class OidcToken:
    service_account_email: str = ""
    audience: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"serviceAccountEmail": self.service_account_email, "audience": self.audience}


@dataclass
class HttpTarget:
    uri: str = ""
    http_method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    oidc_token: OidcToken | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"uri": self.uri, "httpMethod": self.http_method}
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.body is not None:
            data["body"] = self.body
        if self.oidc_token is not None:
            data["oidcToken"] = self.oidc_token.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HttpTarget:
        oidc = data.get("oidcToken")
        return cls(
            uri=data.get("uri", ""),
            http_method=data.get("httpMethod", "POST"),
            headers=dict(data.get("headers") or {}),
            body=data.get("body"),
            oidc_token=OidcToken(
                service_account_email=oidc.get("serviceAccountEmail", ""),
                audience=oidc.get("audience", ""),
            ) if oidc else None,
        )


_RETRY_FIELDS = {
    "retry_count": "retryCount",
    "max_retry_duration": "maxRetryDuration",
    "min_backoff_duration": "minBackoffDuration",
    "max_backoff_duration": "maxBackoffDuration",
    "max_doublings": "maxDoublings",
}


@dataclass
class RetryConfig:
    retry_count: int | None = None
    max_retry_duration: str | None = None
    min_backoff_duration: str | None = None
    max_backoff_duration: str | None = None
    max_doublings: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            api: getattr(self, attr)
            for attr, api in _RETRY_FIELDS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RetryConfig:
        return cls(**{attr: data.get(api) for attr, api in _RETRY_FIELDS.items()})


@dataclass
class Job:
    name: str
    schedule: str
    time_zone: str | None = None
    description: str | None = None
    http_target: HttpTarget | None = None
    retry_config: RetryConfig | None = None

    @property
    def short_name(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @property
    def parent(self) -> str:
        return self.name.rsplit("/", 1)[0]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "schedule": self.schedule}
        if self.time_zone is not None:
            data["timeZone"] = self.time_zone
        if self.description is not None:
            data["description"] = self.description
        if self.http_target is not None:
            data["httpTarget"] = self.http_target.to_dict()
        if self.retry_config is not None:
            data["retryConfig"] = self.retry_config.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        target = data.get("httpTarget")
        retry = data.get("retryConfig")
        return cls(
            name=data.get("name", ""),
            schedule=data.get("schedule", ""),
            time_zone=data.get("timeZone"),
            description=data.get("description"),
            http_target=HttpTarget.from_dict(target) if target else None,
            retry_config=RetryConfig.from_dict(retry) if retry is not None else None,
        )


class JobRegistry(Protocol):
    async def get_job(self, name: str) -> Job | None: ...

    async def create_job(self, job: Job) -> Job: ...

    async def update_job(self, job: Job) -> Job: ...

    async def delete_job(self, name: str) -> None: ...


class CloudSchedulerClient:
    """Thin REST client for ``cloudscheduler.googleapis.com``."""

    def __init__(
        self,
        credentials: GoogleCredentials,
        origin: str = SCHEDULER_API_ORIGIN,
        default_time_zone: str = DEFAULT_TIME_ZONE,
    ) -> None:
        self._credentials = credentials
        self._origin = origin if origin.endswith("/") else origin + "/"
        self._default_time_zone = default_time_zone

    async def _call(self, method: str, path: str, action: str, payload: dict | None = None) -> tuple[int, Any]:
        token = await self._credentials.get_token()
        headers = {"Authorization": f"Bearer {token}"}
        async with aiohttp.ClientSession() as session:
            async with session.request(
                method, f"{self._origin}{path}", json=payload, headers=headers,
            ) as resp:
                if resp.status == 404 and method == "GET":
                    return resp.status, None
                if resp.status >= 300:
                    text = await resp.text()
                    raise JobRegistryError(
                        f"{action} failed with status {resp.status}: {text}",
                        status=resp.status,
                    )
                return resp.status, await resp.json(content_type=None)

    def _payload(self, job: Job) -> dict[str, Any]:
        return {"timeZone": self._default_time_zone, **job.to_dict()}

    async def get_job(self, name: str) -> Job | None:
        """Fetch a job; ``None`` when it does not exist."""
        _, data = await self._call("GET", name, "GetJob")
        return Job.from_dict(data) if data else None

    async def create_job(self, job: Job) -> Job:
        """Create *job* under its parent; 409 when the name is taken."""
        _, data = await self._call("POST", job.parent, "CreateJob", self._payload(job))
        return Job.from_dict(data or {})

    async def update_job(self, job: Job) -> Job:
        """Replace *job*; 404 when it does not exist."""
        _, data = await self._call("PATCH", job.name, "UpdateJob", self._payload(job))
        return Job.from_dict(data or {})

    async def delete_job(self, name: str) -> None:
        """Delete a job; 404 when it does not exist."""
        await self._call("DELETE", name, "DeleteJob")


def is_identical(job: Job | None, other: Job | None) -> bool:
    """Whether two jobs are functionally equivalent.

    Only the schedule, time zone and retry configuration take part; the
    HTTP target (URI, body, OIDC token) is not compared.
    """
    if job is None or other is None:
        return False
    return (
        job.schedule == other.schedule
        and job.time_zone == other.time_zone
        and _retry_dict(job) == _retry_dict(other)
    )


def _retry_dict(job: Job) -> dict[str, Any] | None:
    return job.retry_config.to_dict() if job.retry_config is not None else None


async def create_or_replace_job(
    registry: JobRegistry,
    job: Job,
    default_time_zone: str = DEFAULT_TIME_ZONE,
) -> Job | None:
    """Converge the registry onto *job*.

    Creates the job when absent, leaves it alone when it is already
    equivalent, otherwise replaces it.  Returns the job the registry holds
    after a mutation, or ``None`` when nothing had to change.

    Raises :class:`JobRegistryError` (with the job name in the message) if
    creating or updating fails.
    """
    existing = await registry.get_job(job.name)
    if existing is None:
        try:
            created = await registry.create_job(job)
            logger.debug("[scheduler] created scheduler job %s", job.short_name)
            return created
        except JobRegistryError as exc:
            if not exc.conflict:
                raise JobRegistryError(
                    f"Failed to create scheduler job {job.name}: {exc}", status=exc.status,
                ) from exc
            logger.info("[scheduler] job %s was created concurrently; comparing instead", job.short_name)
        existing = await registry.get_job(job.name)

    if not job.time_zone:
        # the registry fills in the default zone; match it so the compare holds
        job.time_zone = default_time_zone
    if is_identical(existing, job):
        logger.debug("[scheduler] scheduler job %s is up to date, no changes required", job.short_name)
        return None

    try:
        updated = await registry.update_job(job)
    except JobRegistryError as exc:
        raise JobRegistryError(
            f"Failed to update scheduler job {job.name}: {exc}", status=exc.status,
        ) from exc
    logger.debug("[scheduler] updated scheduler job %s", job.short_name)
    return updated
