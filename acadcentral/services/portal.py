"""
AcadCentral Department Portal
One object holding every domain service over a shared Local Store
"""

from typing import Optional

from ..config import get_settings
from ..store import LocalStore
from .attendance import AttendanceService
from .base import AuditLog
from .calendar import CalendarService
from .chat import ChatService
from .classrooms import ClassroomService
from .files import FileService
from .notices import NoticeService
from .quizzes import QuizService
from .results import ResultService
from .timetable import TimetableService
from .users import UserService


class Portal:
    """
    Entry point for domain operations. Services share the store and the
    audit log; pair the store with a SyncEngine to mirror their writes.
    """

    def __init__(self, store: Optional[LocalStore] = None):
        self.store = store if store is not None else LocalStore(get_settings().LOCAL_STORE_PATH)
        self.audit = AuditLog(self.store)

        self.users = UserService(self.store, self.audit)
        self.files = FileService(self.store, self.audit)
        self.notices = NoticeService(self.store, self.audit)
        self.classrooms = ClassroomService(self.store, self.audit)
        self.quizzes = QuizService(self.store, self.audit)
        self.chat = ChatService(self.store, self.audit)
        self.calendar = CalendarService(self.store, self.audit)
        self.attendance = AttendanceService(self.store, self.audit)
        self.timetable = TimetableService(self.store, self.audit)
        self.results = ResultService(self.store, self.audit)


__all__ = ["Portal"]
