"""
AcadCentral Department Portal
SQLAlchemy table models for the remote mirror, one table per collection
"""

from sqlalchemy import Column, Date, DateTime, Index, Integer, SmallInteger, String, Text, func
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base

# Base class for all models
Base = declarative_base()

# Inline file blobs and JSON lists can be large on MariaDB
LongText = Text().with_variant(mysql.LONGTEXT(), "mysql", "mariadb")
# Keep the millisecond part of client timestamps on MariaDB
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=3), "mysql", "mariadb")

CREATED_AT_COLUMN = "created_at"


class CollectionModel(Base):
    """Shared columns: the record id and the mirror-only row creation time"""
    __abstract__ = True

    id = Column(String(100), primary_key=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class User(CollectionModel):
    __tablename__ = "acportal_users"

    role = Column(String(20))
    name = Column(String(255))
    email = Column(String(255), index=True)
    password = Column(String(255))
    usn = Column(String(100))
    semester = Column(String(10))
    program = Column(String(50))
    section = Column(String(20))
    allocations = Column(LongText)
    avatar = Column(String(10))


class RepositoryFile(CollectionModel):
    __tablename__ = "acportal_files"

    name = Column(String(500))
    subject = Column(String(255))
    subjectName = Column(String(255))
    semester = Column(String(10))
    unit = Column(String(100))
    status = Column(String(20), server_default="pending")
    uploadedBy = Column(String(255))
    uploaderId = Column(String(100))
    uploaderRole = Column(String(20))
    downloads = Column(Integer, server_default="0")
    uploadDate = Column(Timestamp)
    fileData = Column(LongText)
    fileType = Column(String(100))
    size = Column(String(50))


class Notice(CollectionModel):
    __tablename__ = "acportal_notices"

    title = Column(String(500))
    content = Column(Text)
    category = Column(String(100))
    priority = Column(String(20))
    urgent = Column(SmallInteger, server_default="0")
    postedBy = Column(String(255))
    posterId = Column(String(100))
    postedDate = Column(Timestamp)


class Classroom(CollectionModel):
    __tablename__ = "acportal_classrooms"

    name = Column(String(500))
    subject = Column(String(255))
    teacherId = Column(String(100), index=True)
    teacherName = Column(String(255))
    studentIds = Column(LongText)
    notes = Column(LongText)
    createdAt = Column(Timestamp)


class Assignment(CollectionModel):
    __tablename__ = "acportal_assignments"

    classroomId = Column(String(100), index=True)
    title = Column(String(500))
    description = Column(Text)
    dueDate = Column(String(50))
    createdBy = Column(String(255))
    createdById = Column(String(100))
    createdAt = Column(Timestamp)


class Submission(CollectionModel):
    __tablename__ = "acportal_submissions"

    assignmentId = Column(String(100), index=True)
    studentId = Column(String(100))
    studentName = Column(String(255))
    studentUsn = Column(String(100))
    fileName = Column(String(500))
    fileData = Column(LongText)
    fileType = Column(String(100))
    submittedAt = Column(Timestamp)


class QuizRoom(CollectionModel):
    __tablename__ = "acportal_quiz_rooms"

    code = Column(String(10), index=True)
    title = Column(String(500))
    teacherId = Column(String(100))
    teacherName = Column(String(255))
    questions = Column(LongText)
    status = Column(String(20), server_default="open")
    createdAt = Column(Timestamp)


class QuizAttempt(CollectionModel):
    __tablename__ = "acportal_quiz_attempts"

    roomId = Column(String(100), index=True)
    studentId = Column(String(100))
    studentName = Column(String(255))
    studentUsn = Column(String(100))
    answers = Column(LongText)
    score = Column(Integer, server_default="0")
    total = Column(Integer, server_default="0")
    submittedAt = Column(Timestamp)


class ChatMessage(CollectionModel):
    __tablename__ = "acportal_chat_messages"

    key = Column(String(200), index=True)
    senderId = Column(String(100))
    senderName = Column(String(255))
    senderRole = Column(String(20))
    receiverId = Column(String(100))
    text = Column(Text)
    timestamp = Column(Timestamp)
    isRead = Column(SmallInteger, server_default="0")


class ExamEvent(CollectionModel):
    __tablename__ = "acportal_exam_events"

    title = Column(String(500))
    details = Column(Text)
    type = Column(String(20), server_default="event")
    startDate = Column(Date)
    endDate = Column(Date)
    createdBy = Column(String(255))
    createdById = Column(String(100))
    createdAt = Column(Timestamp)


class AuditLog(CollectionModel):
    __tablename__ = "acportal_audit_logs"

    action = Column(String(100))
    userId = Column(String(100))
    userName = Column(String(255))
    role = Column(String(20))
    detail = Column(Text)
    timestamp = Column(Timestamp)


class Attendance(CollectionModel):
    __tablename__ = "acportal_attendance"
    __table_args__ = (
        Index("ix_acportal_attendance_natural_key", "date", "courseId", "studentId"),
    )

    date = Column(String(20))
    courseId = Column(String(100))
    studentId = Column(String(100))
    status = Column(String(20))
    takenBy = Column(String(100))
    createdAt = Column(Timestamp)


class TimetableSlot(CollectionModel):
    __tablename__ = "acportal_timetable"

    dayOfWeek = Column(String(20))
    startTime = Column(String(20))
    endTime = Column(String(20))
    courseId = Column(String(100), index=True)
    sub = Column(String(100))
    name = Column(String(255))
    room = Column(String(100))
    teacher = Column(String(255))
    teacherId = Column(String(100))
    createdBy = Column(String(100))
    createdAt = Column(Timestamp)


class Result(CollectionModel):
    __tablename__ = "acportal_results"
    __table_args__ = (
        Index("ix_acportal_results_natural_key", "assessmentName", "courseId", "studentId"),
    )

    assessmentName = Column(String(255))
    courseId = Column(String(100))
    program = Column(String(255))
    studentGroup = Column(String(100))
    studentId = Column(String(100))
    theoryScore = Column(String(20))
    vivaScore = Column(String(20))
    comments = Column(Text)
    totalScore = Column(String(20))
    grade = Column(String(10))
    createdAt = Column(Timestamp)


__all__ = [
    "Base",
    "CollectionModel",
    "CREATED_AT_COLUMN",
    "User",
    "RepositoryFile",
    "Notice",
    "Classroom",
    "Assignment",
    "Submission",
    "QuizRoom",
    "QuizAttempt",
    "ChatMessage",
    "ExamEvent",
    "AuditLog",
    "Attendance",
    "TimetableSlot",
    "Result",
]
