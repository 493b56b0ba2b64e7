from .attendance import AttendanceService
from .base import AuditLog, OperationResult
from .calendar import CalendarService
from .chat import ChatService, conversation_key
from .classrooms import ClassroomService
from .files import FileService
from .notices import NoticeService, is_new_notice
from .portal import Portal
from .quizzes import QuizService, generate_room_code
from .results import ResultService, compute_grade
from .timetable import TimetableService
from .users import UserService

__all__ = [
    "Portal",
    "OperationResult",
    "AuditLog",
    "UserService",
    "FileService",
    "NoticeService",
    "ClassroomService",
    "QuizService",
    "ChatService",
    "CalendarService",
    "AttendanceService",
    "TimetableService",
    "ResultService",
    "conversation_key",
    "generate_room_code",
    "is_new_notice",
    "compute_grade",
]
