"""Display snapshots and site resolution for jobs, workers and businesses."""

from __future__ import annotations

from typing import Optional

from ..common.references import resolved_value
from ..core.constants import UNKNOWN_WORKER
from ..geo.location import format_location_label, normalize_location, parse_location_input, require_location
from ..geo.model import SiteLocation
from .model import Job, Worker


def build_worker_name(worker: Optional[Worker], snapshot: Optional[str] = None) -> str:
    if snapshot:
        return snapshot
    if worker is None:
        return UNKNOWN_WORKER
    if worker.full_name:
        return worker.full_name
    parts = [p for p in (worker.first_name, worker.last_name) if p]
    if parts:
        return " ".join(parts)
    if worker.email:
        return worker.email
    return UNKNOWN_WORKER


def pick_job_location_label(job: Optional[Job]) -> Optional[str]:
    if job is None:
        return None

    from_job = format_location_label(job.location, f"{job.title} Location" if job.title else None)
    if from_job:
        return from_job

    business = resolved_value(job.business)
    if business is not None and business.location is not None:
        from_business = format_location_label(
            business.location,
            f"{business.name} Location" if business.name else None,
        )
        if from_business:
            return from_business
        if business.name:
            return business.name

    return None


def build_location_snapshot(job: Job, *, override=None, job_title: Optional[str] = None) -> str:
    return (
        format_location_label(override)
        or pick_job_location_label(job)
        or job.business_address
        or job_title
        or job.title
        or "Job location"
    )


def _job_radius(job: Job) -> Optional[float]:
    value = parse_location_input(job.location)
    return getattr(value, "allowed_radius", None)


def resolve_job_location(job: Job, *, override=None, label: Optional[str] = None) -> Optional[SiteLocation]:
    """Site used for geofencing: explicit override, then the job, then its business."""

    if override is not None:
        return require_location(
            override,
            "jobLocation",
            formatted_address=label,
            fallback_label=label,
            allowed_radius=_job_radius(job),
        )

    from_job = normalize_location(job.location, formatted_address=job.business_address, fallback_label=label)
    if from_job is not None:
        return from_job

    business = resolved_value(job.business)
    if business is not None:
        return normalize_location(business.location, fallback_label=business.name)
    return None
