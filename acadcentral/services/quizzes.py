"""
AcadCentral Department Portal
Live quiz rooms joined by room code, and student attempts
"""

import secrets
from typing import Any, Dict, List, Optional, Sequence

from ..store import keys
from ..utils.helpers import generate_id, timestamp_sort_key, utc_now_iso
from .base import BaseService, Record, as_list

# No 0/O or 1/I so codes read unambiguously off a projector
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def score_answers(questions: Sequence[Dict[str, Any]], answers: Sequence[Any]) -> int:
    """Count answers equal to their question's correctIndex; unanswered questions score nothing"""
    return sum(
        1 for i, question in enumerate(questions)
        if isinstance(question, dict) and i < len(answers)
        and answers[i] is not None and answers[i] == question.get("correctIndex")
    )


class QuizService(BaseService):

    # --- rooms -----------------------------------------------------------

    def get_quiz_rooms(self) -> List[Record]:
        return self._read(keys.QUIZ_ROOMS)

    def get_quiz_rooms_for_user(self, user: Record) -> List[Record]:
        rooms = self.get_quiz_rooms()
        role = user.get("role")
        if role == "faculty":
            return [r for r in rooms if r.get("teacherId") == user.get("id")]
        if role == "admin":
            return rooms
        return []

    def create_quiz_room(self, data: Dict[str, Any], user: Record) -> Record:
        rooms = self.get_quiz_rooms()
        taken = {r.get("code") for r in rooms}
        code = generate_room_code()
        while code in taken:
            code = generate_room_code()

        room = {
            "id": generate_id("quiz"),
            "code": code,
            "title": data.get("title"),
            "teacherId": user.get("id"),
            "teacherName": user.get("name"),
            "questions": as_list(data.get("questions")),
            "status": "open",
            "createdAt": utc_now_iso(),
        }
        rooms.append(room)
        self._write(keys.QUIZ_ROOMS, rooms)
        self.audit.log("CREATE_QUIZ", user, f"Created quiz room: {room['title']} ({code})")
        return room

    def get_quiz_by_code(self, code: str) -> Optional[Record]:
        code = (code or "").upper().strip()
        return next((r for r in self.get_quiz_rooms() if r.get("code") == code), None)

    def close_quiz_room(self, room_id: str, user: Record) -> None:
        rooms = self.get_quiz_rooms()
        idx = self._find_index(rooms, room_id)
        if idx == -1:
            return

        rooms[idx]["status"] = "closed"
        self._write(keys.QUIZ_ROOMS, rooms)
        self.audit.log("CLOSE_QUIZ", user, f"Closed quiz room {room_id}")

    def delete_quiz_room(self, room_id: str, user: Record) -> None:
        rooms = self.get_quiz_rooms()
        self._write(keys.QUIZ_ROOMS, [r for r in rooms if r.get("id") != room_id])
        self.audit.log("DELETE_QUIZ", user, f"Deleted quiz room {room_id}")

    # --- attempts --------------------------------------------------------

    def get_attempts(self, room_id: str) -> List[Record]:
        attempts = [a for a in self._read(keys.QUIZ_ATTEMPTS) if a.get("roomId") == room_id]
        return sorted(attempts, key=lambda a: timestamp_sort_key(a.get("submittedAt")), reverse=True)

    def get_my_attempt(self, room_id: str, student_id: str) -> Optional[Record]:
        return next(
            (
                a for a in self._read(keys.QUIZ_ATTEMPTS)
                if a.get("roomId") == room_id and a.get("studentId") == student_id
            ),
            None,
        )

    def submit_quiz_attempt(
        self,
        room_id: str,
        answers: Sequence[Any],
        room: Record,
        user: Record
    ) -> Record:
        """Score and store an attempt; a student keeps only their latest attempt per room"""
        questions = as_list(room.get("questions"))
        score = score_answers(questions, answers)
        attempt = {
            "id": generate_id("attempt"),
            "roomId": room_id,
            "studentId": user.get("id"),
            "studentName": user.get("name"),
            "studentUsn": user.get("usn"),
            "answers": list(answers),
            "score": score,
            "total": len(questions),
            "submittedAt": utc_now_iso(),
        }

        attempts = [
            a for a in self._read(keys.QUIZ_ATTEMPTS)
            if not (a.get("roomId") == room_id and a.get("studentId") == user.get("id"))
        ]
        attempts.append(attempt)
        self._write(keys.QUIZ_ATTEMPTS, attempts)
        self.audit.log("QUIZ_ATTEMPT", user, f"Attempted quiz {room.get('title')}: {score}/{len(questions)}")
        return attempt

    generate_room_code = staticmethod(generate_room_code)


__all__ = ["QuizService", "generate_room_code", "score_answers", "ROOM_CODE_ALPHABET", "ROOM_CODE_LENGTH"]
