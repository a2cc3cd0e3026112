from __future__ import annotations

from typing import Optional, Protocol

from .model import Business, Job, Worker


class JobRepository(Protocol):
    def get_by_id(self, job_id: int) -> Optional[Job]:
        raise NotImplementedError


class WorkerRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[Worker]:
        raise NotImplementedError


class BusinessRepository(Protocol):
    def get_by_id(self, business_id: int) -> Optional[Business]:
        raise NotImplementedError
