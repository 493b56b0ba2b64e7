"""
AcadCentral Department Portal
Weekly timetable per course group (e.g. "BCA-A")
"""

from typing import Any, Dict, Iterable, List, Optional

from ..store import keys
from ..utils.helpers import generate_id, utc_now_iso
from .base import BaseService, Record


class TimetableService(BaseService):

    def get_timetable(self, course_id: Optional[str] = None, teacher_id: Optional[str] = None) -> List[Record]:
        slots = self._read(keys.TIMETABLE)
        if course_id:
            slots = [s for s in slots if s.get("courseId") == course_id]
        if teacher_id:
            slots = [s for s in slots if s.get("teacherId") == teacher_id]
        return slots

    def save_timetable(self, course_id: str, periods: Iterable[Dict[str, Any]], user: Record) -> bool:
        """
        Replace every period of ``course_id`` with ``periods``, each a dict of
        dayOfWeek, startTime, endTime, sub, name, room and teacher fields.
        """
        slots = [s for s in self._read(keys.TIMETABLE) if s.get("courseId") != course_id]
        created_at = utc_now_iso()
        slots.extend(
            {
                "id": generate_id("tt"),
                "courseId": course_id,
                **period,
                "createdBy": user.get("id"),
                "createdAt": created_at,
            }
            for period in periods
        )
        self._write(keys.TIMETABLE, slots)
        self.audit.log("UPDATE_TIMETABLE", user, f"Updated schedule for {course_id}")
        return True


__all__ = ["TimetableService"]
