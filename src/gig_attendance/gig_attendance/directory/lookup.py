from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..common.references import resolve
from .model import Job
from .repository import BusinessRepository, JobRepository


def find_job(jobs: JobRepository, businesses: Optional[BusinessRepository], job_id: Optional[int]) -> Optional[Job]:
    """Load a job and resolve its business reference when a business lookup is available."""

    if not job_id:
        return None
    job = jobs.get_by_id(job_id)
    if job is None or businesses is None:
        return job
    business = resolve(job.business, businesses.get_by_id)
    return replace(job, business=business) if business is not None else job
