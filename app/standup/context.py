"""Per-process application context.

Built once at startup and handed to every component.  It is frozen and its
members keep no per-request state, so concurrent requests share it freely.
"""

from __future__ import annotations

from dataclasses import dataclass

from .chat.client import ChatClient
from .config.settings import JobLocation, ScheduleDefaults, Settings
from .scheduler.jobs import CloudSchedulerClient, JobRegistry
from .services.google_auth import GoogleCredentials
from .state import StateStore, create_store


@dataclass(frozen=True)
class AppContext:
    store: StateStore
    jobs: JobRegistry
    chat: ChatClient
    credentials: GoogleCredentials
    schedule_defaults: ScheduleDefaults = ScheduleDefaults()
    job_location: JobLocation = JobLocation()
    default_space_id: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> AppContext:
        credentials = GoogleCredentials(service_account_email=settings.service_account_email)
        return cls(
            store=create_store(settings),
            jobs=CloudSchedulerClient(
                credentials,
                origin=settings.scheduler_api_origin,
                default_time_zone=settings.default_time_zone,
            ),
            chat=ChatClient(credentials, origin=settings.chat_api_origin),
            credentials=credentials,
            schedule_defaults=settings.schedule_defaults,
            job_location=settings.job_location,
            default_space_id=settings.default_space_id,
        )
