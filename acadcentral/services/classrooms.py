"""
AcadCentral Department Portal
Classrooms with shared notes, assignments and student submissions
"""

from typing import Any, Dict, List, Optional

from ..store import keys
from ..utils.helpers import generate_id, timestamp_sort_key, utc_now_iso
from .base import BaseService, Record, as_list


class ClassroomService(BaseService):

    # --- classrooms ------------------------------------------------------

    def get_classrooms(self) -> List[Record]:
        return self._read(keys.CLASSROOMS)

    def get_classrooms_for_user(self, user: Record) -> List[Record]:
        """Students see rooms they belong to, faculty the rooms they teach, admins everything"""
        classrooms = self.get_classrooms()
        role = user.get("role")
        if role == "student":
            return [c for c in classrooms if user.get("id") in as_list(c.get("studentIds"))]
        if role == "faculty":
            return [c for c in classrooms if c.get("teacherId") == user.get("id")]
        if role == "admin":
            return classrooms
        return []

    def create_classroom(self, data: Dict[str, Any], user: Record) -> Record:
        classroom = {
            "id": generate_id("class"),
            "name": data.get("name"),
            "subject": data.get("subject"),
            "teacherId": user.get("id"),
            "teacherName": user.get("name"),
            "studentIds": as_list(data.get("studentIds")),
            "notes": [],
            "createdAt": utc_now_iso(),
        }
        classrooms = self.get_classrooms()
        classrooms.append(classroom)
        self._write(keys.CLASSROOMS, classrooms)
        self.audit.log("CREATE_CLASSROOM", user, f"Created classroom: {classroom['name']}")
        return classroom

    def update_classroom(self, classroom_id: str, updates: Dict[str, Any]) -> Optional[Record]:
        classrooms = self.get_classrooms()
        idx = self._find_index(classrooms, classroom_id)
        if idx == -1:
            return None

        classrooms[idx] = {**classrooms[idx], **updates}
        self._write(keys.CLASSROOMS, classrooms)
        return classrooms[idx]

    def delete_classroom(self, classroom_id: str, user: Record) -> None:
        classrooms = self.get_classrooms()
        self._write(keys.CLASSROOMS, [c for c in classrooms if c.get("id") != classroom_id])
        self.audit.log("DELETE_CLASSROOM", user, f"Deleted classroom {classroom_id}")

    # --- notes -----------------------------------------------------------

    def add_note(self, classroom_id: str, note: Dict[str, Any], user: Record) -> Optional[Record]:
        classrooms = self.get_classrooms()
        idx = self._find_index(classrooms, classroom_id)
        if idx == -1:
            return None

        new_note = {
            "id": generate_id("note"),
            "name": note.get("name"),
            "fileData": note.get("fileData"),
            "type": note.get("type"),
            "uploadedBy": user.get("name"),
            "uploadedAt": utc_now_iso(),
        }
        classrooms[idx]["notes"] = as_list(classrooms[idx].get("notes")) + [new_note]
        self._write(keys.CLASSROOMS, classrooms)
        self.audit.log("UPLOAD_NOTE", user, f'Uploaded note "{new_note["name"]}" to classroom {classroom_id}')
        return new_note

    def delete_note(self, classroom_id: str, note_id: str, user: Record) -> None:
        classrooms = self.get_classrooms()
        idx = self._find_index(classrooms, classroom_id)
        if idx == -1:
            return

        classrooms[idx]["notes"] = [
            n for n in as_list(classrooms[idx].get("notes"))
            if not (isinstance(n, dict) and n.get("id") == note_id)
        ]
        self._write(keys.CLASSROOMS, classrooms)
        self.audit.log("DELETE_NOTE", user, f"Deleted note {note_id}")

    # --- assignments -----------------------------------------------------

    def get_assignments(self, classroom_id: str) -> List[Record]:
        assignments = [a for a in self._read(keys.ASSIGNMENTS) if a.get("classroomId") == classroom_id]
        return sorted(assignments, key=lambda a: timestamp_sort_key(a.get("createdAt")), reverse=True)

    def create_assignment(self, data: Dict[str, Any], user: Record) -> Record:
        assignment = {
            "id": generate_id("assign"),
            "classroomId": data.get("classroomId"),
            "title": data.get("title"),
            "description": data.get("description") or "",
            "dueDate": data.get("dueDate") or None,
            "createdBy": user.get("name"),
            "createdById": user.get("id"),
            "createdAt": utc_now_iso(),
        }
        assignments = self._read(keys.ASSIGNMENTS)
        assignments.append(assignment)
        self._write(keys.ASSIGNMENTS, assignments)
        self.audit.log("CREATE_ASSIGNMENT", user, f"Created assignment: {assignment['title']}")
        return assignment

    def delete_assignment(self, assignment_id: str, user: Record) -> None:
        """Deletes the assignment together with its submissions"""
        assignments = self._read(keys.ASSIGNMENTS)
        self._write(keys.ASSIGNMENTS, [a for a in assignments if a.get("id") != assignment_id])

        submissions = self._read(keys.SUBMISSIONS)
        self._write(keys.SUBMISSIONS, [s for s in submissions if s.get("assignmentId") != assignment_id])
        self.audit.log("DELETE_ASSIGNMENT", user, f"Deleted assignment {assignment_id}")

    # --- submissions -----------------------------------------------------

    def get_submissions(self, assignment_id: str) -> List[Record]:
        return [s for s in self._read(keys.SUBMISSIONS) if s.get("assignmentId") == assignment_id]

    def get_my_submission(self, assignment_id: str, student_id: str) -> Optional[Record]:
        return next(
            (
                s for s in self._read(keys.SUBMISSIONS)
                if s.get("assignmentId") == assignment_id and s.get("studentId") == student_id
            ),
            None,
        )

    def submit_assignment(self, assignment_id: str, file_data: Dict[str, Any], user: Record) -> Record:
        """Store the student's submission, replacing any earlier one for the same assignment"""
        submissions = [
            s for s in self._read(keys.SUBMISSIONS)
            if not (s.get("assignmentId") == assignment_id and s.get("studentId") == user.get("id"))
        ]
        submission = {
            "id": generate_id("sub"),
            "assignmentId": assignment_id,
            "studentId": user.get("id"),
            "studentName": user.get("name"),
            "studentUsn": user.get("usn"),
            "fileName": file_data.get("name"),
            "fileData": file_data.get("data"),
            "fileType": file_data.get("type"),
            "submittedAt": utc_now_iso(),
        }
        submissions.append(submission)
        self._write(keys.SUBMISSIONS, submissions)
        self.audit.log("SUBMIT_ASSIGNMENT", user, f"Submitted assignment {assignment_id}")
        return submission


__all__ = ["ClassroomService"]
