"""Cloud Scheduler integration -- job model, client and reconciler."""

from .jobs import (
    CloudSchedulerClient,
    HttpTarget,
    Job,
    JobRegistry,
    OidcToken,
    RetryConfig,
    create_or_replace_job,
    is_identical,
)
from .reconciler import Reconciler

__all__ = [
    "CloudSchedulerClient",
    "HttpTarget",
    "Job",
    "JobRegistry",
    "OidcToken",
    "Reconciler",
    "RetryConfig",
    "create_or_replace_job",
    "is_identical",
]
