"""Keeps each room's Cloud Scheduler job in step with its stored schedule."""

from __future__ import annotations

import base64
import json
import logging
from typing import TYPE_CHECKING, Any

from ..errors import JobRegistryError
from ..state import paths
from .jobs import HttpTarget, Job, OidcToken, create_or_replace_job

if TYPE_CHECKING:
    from ..context import AppContext

logger = logging.getLogger(__name__)


class Reconciler:
    """Derives the desired job for a room and converges the registry to it."""

    def __init__(self, ctx: AppContext) -> None:
        self._ctx = ctx

    def job_name(self, room_id: str) -> str:
        return self._ctx.job_location.job_name(room_id)

    async def desired_job(self, room_id: str, room: dict[str, Any] | None = None) -> Job:
        if room is None:
            room = await self._ctx.store.get(paths.space(room_id)) or {}
        defaults = self._ctx.schedule_defaults
        time = room.get("schedule") or defaults.time
        days = room.get("days") or defaults.days
        time_zone = room.get("timeZone") or defaults.time_zone
        target = self._ctx.job_location.target_url
        body = base64.b64encode(json.dumps({"spaceId": room_id}).encode()).decode()
        return Job(
            name=self.job_name(room_id),
            schedule=f"every {days} {time}",
            time_zone=time_zone,
            http_target=HttpTarget(
                uri=target,
                http_method="POST",
                headers={"content-type": "application/json"},
                body=body,
                oidc_token=OidcToken(
                    service_account_email=await self._ctx.credentials.get_email(),
                    audience=target,
                ),
            ),
        )

    async def reconcile(self, room_id: str) -> Job | None:
        job = await self.desired_job(room_id)
        logger.debug("[scheduler] Scheduling job %s", json.dumps(job.to_dict(), indent=2))
        return await create_or_replace_job(
            self._ctx.jobs, job, self._ctx.schedule_defaults.time_zone,
        )

    async def reconcile_if_scheduled(self, room_id: str) -> Job | None:
        """Reconcile only rooms that currently have a schedule."""
        room = await self._ctx.store.get(paths.space(room_id)) or {}
        if not room.get("schedule"):
            logger.debug("[scheduler] room %s has no schedule; nothing to reconcile", room_id)
            return None
        job = await self.desired_job(room_id, room)
        return await create_or_replace_job(
            self._ctx.jobs, job, self._ctx.schedule_defaults.time_zone,
        )

    async def unschedule(self, room_id: str) -> None:
        await self._ctx.jobs.delete_job(self.job_name(room_id))
        logger.info("[scheduler] deleted scheduler job for room %s", room_id)

    async def remove_room(self, room_id: str, room: dict[str, Any] | None) -> None:
        """Drop the job of a room whose schedule is gone, if it had one.

        A job that is already missing counts as removed.
        """
        if not room or not room.get("schedule"):
            return
        try:
            await self.unschedule(room_id)
        except JobRegistryError as exc:
            if not exc.not_found:
                raise
            logger.info("[scheduler] job for room %s was already gone", room_id)
