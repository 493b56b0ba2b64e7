"""
AcadCentral Department Portal
Assessment results, one record per (assessment, course, student)
"""

from typing import Iterable, List, Optional, Tuple, Union

from ..store import keys
from ..utils.helpers import generate_id, utc_now_iso
from .base import BaseService, Record, upsert_by_natural_key

RESULT_KEY_FIELDS = ("assessmentName", "courseId", "studentId")

# Theory is out of 30, viva out of 15
MAX_MARKS = 45

# (minimum percentage, grade), checked top down
GRADE_TABLE = (
    (90, "O"),
    (80, "A+"),
    (70, "A"),
    (60, "B+"),
    (50, "B"),
)
FAILING_GRADE = "F"


def _marks(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def compute_grade(theory, viva) -> Tuple[float, str]:
    """Total marks and letter grade; blank or non-numeric scores count as zero"""
    total = _marks(theory) + _marks(viva)
    percentage = total / MAX_MARKS * 100
    grade = next((g for threshold, g in GRADE_TABLE if percentage >= threshold), FAILING_GRADE)
    return total, grade


class ResultService(BaseService):

    def get_results(self, course_id: Optional[str] = None, student_id: Optional[str] = None) -> List[Record]:
        results = self._read(keys.RESULTS)
        if course_id:
            results = [r for r in results if r.get("courseId") == course_id]
        if student_id:
            results = [r for r in results if r.get("studentId") == student_id]
        return results

    def save_results(self, records: Union[Record, Iterable[Record]], user: Record) -> List[Record]:
        """Publish one result or a batch; an existing result for the same key is updated field by field"""
        records = [records] if isinstance(records, dict) else list(records)

        def create(new: Record) -> Record:
            return {**new, "id": generate_id("res"), "createdAt": utc_now_iso()}

        def update(existing: Record, new: Record) -> Record:
            # Stored id wins over an incoming one
            return {**existing, **{k: v for k, v in new.items() if k != "id"}}

        stored = upsert_by_natural_key(
            self._read(keys.RESULTS),
            records,
            RESULT_KEY_FIELDS,
            update=update,
            create=create,
        )
        self._write(keys.RESULTS, stored)
        self.audit.log("SAVE_RESULTS", user, f"Saved {len(records)} result(s)")
        return stored


__all__ = ["ResultService", "compute_grade", "GRADE_TABLE", "MAX_MARKS", "RESULT_KEY_FIELDS"]
