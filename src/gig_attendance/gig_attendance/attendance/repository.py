from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, NewAttendance
from .query import AttendanceQuery

DUPLICATE_OCCURRENCE = "A shift already exists for this worker at that start time"


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        raise NotImplementedError

    def insert_many(self, items: Sequence[NewAttendance]) -> int:
        """Insert all items, skipping duplicate `(worker, job, scheduled_start)` keys.

        Returns the number of rows actually created.
        """

        raise NotImplementedError

    def existing_starts(self, *, worker_id: int, job_id: int, starts: Iterable[datetime]) -> set[datetime]:
        raise NotImplementedError

    def save_transition(self, record: AttendanceRecord, *, expected_status: AttendanceStatus) -> bool:
        """Persist `record` only if the stored status still equals `expected_status`."""

        raise NotImplementedError

    def save_hours(self, record: AttendanceRecord) -> bool:
        """Persist a manual hours edit.

        Only hours, rate, earnings and display snapshots are written; lifecycle
        columns keep whatever is stored. Returns False when the record is gone.
        """

        raise NotImplementedError

    def find(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
