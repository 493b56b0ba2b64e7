"""
Local Store key layout: one key per collection, one for the signed-in user
and one for the store migration version.
"""

USERS = "acportal_users"
FILES = "acportal_files"
NOTICES = "acportal_notices"
CLASSROOMS = "acportal_classrooms"
ASSIGNMENTS = "acportal_assignments"
SUBMISSIONS = "acportal_submissions"
QUIZ_ROOMS = "acportal_quiz_rooms"
QUIZ_ATTEMPTS = "acportal_quiz_attempts"
CHAT_MESSAGES = "acportal_chat_messages"
AUDIT_LOGS = "acportal_audit_logs"
EXAM_EVENTS = "acportal_exam_events"
ATTENDANCE = "acportal_attendance"
TIMETABLE = "acportal_timetable"
RESULTS = "acportal_results"

CURRENT_USER_KEY = "acportal_current_user"
MIGRATION_VERSION_KEY = "acportal_migration_version"
# Marker written by the pre-versioned migration; still honoured on old stores
LEGACY_MIGRATION_MARKER = "acportal_migrated_v2"

# Order matters only for snapshots and seeding
COLLECTION_KEYS = (
    USERS,
    FILES,
    NOTICES,
    CLASSROOMS,
    ASSIGNMENTS,
    SUBMISSIONS,
    QUIZ_ROOMS,
    QUIZ_ATTEMPTS,
    CHAT_MESSAGES,
    AUDIT_LOGS,
    EXAM_EVENTS,
    ATTENDANCE,
    TIMETABLE,
    RESULTS,
)

# Session and migration keys never leave the process
SYNC_KEYS = frozenset(COLLECTION_KEYS)
