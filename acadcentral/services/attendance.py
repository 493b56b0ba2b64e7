"""
AcadCentral Department Portal
Daily attendance, one record per (date, course, student)
"""

from typing import Iterable, List, Optional

from ..store import keys
from ..utils.helpers import generate_id, utc_now_iso
from .base import BaseService, Record, upsert_by_natural_key

ATTENDANCE_KEY_FIELDS = ("date", "courseId", "studentId")


class AttendanceService(BaseService):

    def get_attendance(
        self,
        date: Optional[str] = None,
        course_id: Optional[str] = None,
        student_id: Optional[str] = None
    ) -> List[Record]:
        records = self._read(keys.ATTENDANCE)
        if date:
            records = [r for r in records if r.get("date") == date]
        if course_id:
            records = [r for r in records if r.get("courseId") == course_id]
        if student_id:
            records = [r for r in records if r.get("studentId") == student_id]
        return records

    def save_attendance(self, records: Iterable[Record], user: Record) -> List[Record]:
        """Record statuses; re-marking a student for the same date and course overwrites the status"""
        records = list(records)

        def update(existing: Record, new: Record) -> Record:
            return {**existing, "status": new.get("status"), "takenBy": user.get("id")}

        def create(new: Record) -> Record:
            return {
                "id": generate_id("att"),
                "date": new.get("date"),
                "courseId": new.get("courseId"),
                "studentId": new.get("studentId"),
                "status": new.get("status"),
                "takenBy": user.get("id"),
                "createdAt": utc_now_iso(),
            }

        stored = upsert_by_natural_key(
            self._read(keys.ATTENDANCE), records, ATTENDANCE_KEY_FIELDS, update, create
        )
        self._write(keys.ATTENDANCE, stored)
        self.audit.log("TAKE_ATTENDANCE", user, f"Recorded attendance for {len(records)} students")
        return stored


__all__ = ["AttendanceService", "ATTENDANCE_KEY_FIELDS"]
