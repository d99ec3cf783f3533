"""Application settings -- reads from environment and ``.env`` file.

All configuration is consolidated here.  Values that shape the
reconciled Cloud Scheduler job are grouped in :class:`ScheduleDefaults`
and :class:`JobLocation` so they can be frozen into the request context.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

SCHEDULER_API_ORIGIN = "https://cloudscheduler.googleapis.com/v1beta1/"
CHAT_API_ORIGIN = "https://chat.googleapis.com/v1/"


@dataclass(frozen=True)
class ScheduleDefaults:
    time: str = "10:00"
    days: str = "mon,tue,wed,thu,fri"
    time_zone: str = "America/Los_Angeles"


@dataclass(frozen=True)
class JobLocation:
    project: str = ""
    location: str = "us-central1"
    target_url: str = ""

    @property
    def parent(self) -> str:
        return f"projects/{self.project}/locations/{self.location}/jobs"

    def job_name(self, room_id: str) -> str:
        return f"{self.parent}/{room_id}"


class Settings:
    """Runtime configuration sourced from environment variables and ``.env``."""

    _DATA_DIR_ENV: ClassVar[str] = "STANDUP_DATA_DIR"

    def __init__(self) -> None:
        # Resolve .env path: explicit DOTENV_PATH > data_dir/.env > CWD/.env
        dotenv = os.getenv("DOTENV_PATH")
        if not dotenv:
            data_dir = os.getenv(self._DATA_DIR_ENV)
            dotenv = str(Path(data_dir) / ".env") if data_dir else ".env"
        self.env = EnvFile(dotenv)
        self.reload()

    def reload(self) -> None:
        """Re-read the ``.env`` file and environment variables."""
        self.env.reload()
        e = self._read

        self.project: str = e("GOOGLE_CLOUD_PROJECT") or e("GCLOUD_PROJECT")
        self.scheduler_location: str = e("SCHEDULER_LOCATION") or "us-central1"
        self.scheduler_api_origin: str = e("SCHEDULER_API_ORIGIN") or SCHEDULER_API_ORIGIN
        self.chat_api_origin: str = e("CHAT_API_ORIGIN") or CHAT_API_ORIGIN
        self.standup_target_url: str = e("STANDUP_TARGET_URL")
        self.service_account_email: str = e("SERVICE_ACCOUNT_EMAIL")

        self.state_backend: str = (e("STATE_BACKEND") or "json").lower()
        self.firebase_database_url: str = e("FIREBASE_DATABASE_URL")

        self.default_schedule_time: str = e("DEFAULT_SCHEDULE_TIME") or "10:00"
        self.default_schedule_days: str = e("DEFAULT_SCHEDULE_DAYS") or "mon,tue,wed,thu,fri"
        self.default_time_zone: str = e("DEFAULT_TIME_ZONE") or "America/Los_Angeles"
        self.default_space_id: str = e("DEFAULT_SPACE_ID")

        self.port: int = int(e("PORT") or "8080")
        self.log_level: str = (e("LOG_LEVEL") or "INFO").upper()

    # -- derived values ----------------------------------------------------

    @property
    def data_dir(self) -> Path:
        return Path(os.getenv(self._DATA_DIR_ENV, str(Path.home() / ".standup-bot")))

    @property
    def state_path(self) -> Path:
        return self.data_dir / "state.json"

    @property
    def schedule_defaults(self) -> ScheduleDefaults:
        return ScheduleDefaults(
            time=self.default_schedule_time,
            days=self.default_schedule_days,
            time_zone=self.default_time_zone,
        )

    @property
    def job_location(self) -> JobLocation:
        return JobLocation(
            project=self.project,
            location=self.scheduler_location,
            target_url=self.standup_target_url,
        )

    # -- helpers -----------------------------------------------------------

    def _read(self, key: str) -> str:
        return os.getenv(key) or self.env.read(key)

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton
cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton(_reset_cfg)
