"""
AcadCentral Department Portal
Accounts: sign-in, registration, faculty management and bulk admin tools
"""

import logging
import random
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import (
    BusinessLogicException,
    DuplicateResourceException,
    InvalidCredentialsException,
    UserNotFoundException,
    ValidationException,
)
from ..store import keys
from ..utils.helpers import generate_id, make_initials
from .base import BaseService, Record, as_list, public_user, returns_result

logger = logging.getLogger(__name__)

STAFF_ROLES = ("faculty", "admin")
MIN_PASSWORD_LENGTH = 4


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserService(BaseService):

    # --- session ---------------------------------------------------------

    def _sign_in(self, user: Record) -> Record:
        safe = public_user(user)
        self.store.write_json(keys.CURRENT_USER_KEY, safe)
        return safe

    @returns_result
    def login(self, email: str, password: str, role: str) -> Record:
        normalized = normalize_email(email)
        user = next(
            (
                u for u in self._read(keys.USERS)
                if u.get("email") == normalized and u.get("password") == password and u.get("role") == role
            ),
            None,
        )
        if user is None:
            raise InvalidCredentialsException()

        safe = self._sign_in(user)
        self.audit.log("LOGIN", safe, f"Logged in as {role}")
        return safe

    @returns_result
    def google_auth(self, email: str, name: str) -> Record:
        """Sign in with a Google identity, auto-registering unknown emails as students"""
        users = self._read(keys.USERS)
        normalized = normalize_email(email)

        user = next((u for u in users if u.get("email") == normalized and u.get("role") == "student"), None)
        if user is None:
            if any(u.get("email") == normalized for u in users):
                raise BusinessLogicException(
                    "This email is registered as Faculty or Admin. Use the password login.",
                    rule_name="google_students_only",
                )
            user = {
                "id": generate_id("student-g"),
                "role": "student",
                "name": name,
                "email": normalized,
                "password": None,
                "usn": f"G-{random.randint(10000, 99999)}",
                "semester": "1",
                "program": "BCA",
                "section": "A",
                "avatar": make_initials(name),
            }
            users.append(user)
            self._write(keys.USERS, users)
            self.audit.log("GOOGLE_REGISTER", user, "Auto-registered via Google OAuth")

        safe = self._sign_in(user)
        self.audit.log("GOOGLE_LOGIN", safe, "Signed in via Google")
        return safe

    @returns_result
    def register_student(
        self,
        usn: str,
        name: str,
        semester: str,
        program: str,
        section: str,
        password: str,
        email: str
    ) -> Record:
        users = self._read(keys.USERS)
        usn = usn.upper()
        if any(u.get("usn") == usn for u in users):
            raise DuplicateResourceException("student", "usn", usn, message=f"USN {usn} already registered.")

        normalized = normalize_email(email)
        if any(u.get("email") == normalized for u in users):
            raise DuplicateResourceException(
                "user", "email", normalized, message="An account with this email already exists."
            )

        user = {
            "id": generate_id("student"),
            "role": "student",
            "name": name,
            "email": normalized,
            "password": password,
            "usn": usn,
            "semester": semester,
            "program": program,
            "section": section,
            "avatar": make_initials(name),
        }
        users.append(user)
        self._write(keys.USERS, users)

        safe = self._sign_in(user)
        self.audit.log("REGISTER", safe, "Student self-registered")
        return safe

    def get_current_user(self) -> Optional[Record]:
        user = self.store.read_json(keys.CURRENT_USER_KEY)
        return user if isinstance(user, dict) else None

    def logout(self, user: Optional[Record] = None) -> None:
        if user:
            self.audit.log("LOGOUT", user, "User logged out")
        self.store.remove_item(keys.CURRENT_USER_KEY)

    # --- lookups ---------------------------------------------------------

    def get_all_users(self) -> List[Record]:
        return self._read(keys.USERS)

    def get_students(self) -> List[Record]:
        return [u for u in self.get_all_users() if u.get("role") == "student"]

    def get_faculty(self) -> List[Record]:
        return [u for u in self.get_all_users() if u.get("role") == "faculty"]

    def get_all_staff(self) -> List[Record]:
        return [u for u in self.get_all_users() if u.get("role") in STAFF_ROLES]

    # --- changes ---------------------------------------------------------

    @returns_result
    def update_user(self, user_id: str, updates: Dict[str, Any]) -> Record:
        users = self._read(keys.USERS)
        idx = self._find_index(users, user_id)
        if idx == -1:
            raise UserNotFoundException(user_id)

        users[idx] = {**users[idx], **updates}
        self._write(keys.USERS, users)

        current = self.get_current_user()
        if current and current.get("id") == user_id:
            self.store.write_json(keys.CURRENT_USER_KEY, public_user({**current, **updates}))
        return dict(users[idx])

    @returns_result
    def change_password(self, user_id: str, new_password: str, admin: Optional[Record] = None) -> None:
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
                field="password",
            )

        users = self._read(keys.USERS)
        idx = self._find_index(users, user_id)
        if idx == -1:
            raise UserNotFoundException(user_id, message="User not found.")

        users[idx]["password"] = new_password
        self._write(keys.USERS, users)
        self.audit.log(
            "CHANGE_PASSWORD",
            admin,
            f"Changed password for user: {users[idx].get('name')} ({users[idx].get('role')})",
        )

    @returns_result
    def add_faculty(self, name: str, email: str, password: str) -> Record:
        users = self._read(keys.USERS)
        normalized = normalize_email(email)
        if any(u.get("email") == normalized for u in users):
            raise DuplicateResourceException(
                "user", "email", normalized, message="A user with this email already exists."
            )

        name = name.strip()
        faculty = {
            "id": generate_id("faculty"),
            "role": "faculty",
            "name": name,
            "email": normalized,
            "password": password,
            "usn": None,
            "semester": None,
            "avatar": make_initials(name),
        }
        users.append(faculty)
        self._write(keys.USERS, users)
        return faculty

    def delete_faculty(self, faculty_id: str) -> bool:
        users = self._read(keys.USERS)
        self._write(keys.USERS, [u for u in users if u.get("id") != faculty_id])
        return True

    # --- admin bulk tools ------------------------------------------------

    def bulk_import_users(self, rows: Iterable[Dict[str, Any]], admin: Optional[Record] = None) -> Dict[str, Any]:
        """
        Create accounts from spreadsheet rows (name, email, role, password
        required; usn, program, section, semester optional). Rows whose
        email is taken are skipped. Error messages count from row 2, the
        first data row under the header.
        """
        users = self._read(keys.USERS)
        summary = {"created": 0, "skipped": 0, "errors": []}

        for idx, row in enumerate(rows):
            name, email, role, password = (row.get(f) for f in ("name", "email", "role", "password"))
            if not (name and email and role and password):
                summary["errors"].append(f"Row {idx + 2}: Missing required fields")
                continue

            normalized = normalize_email(email)
            if any(u.get("email") == normalized for u in users):
                summary["skipped"] += 1
                continue

            is_student = role.lower() == "student"
            role = "faculty" if role.lower() == "faculty" else "student"
            usn, program, section = row.get("usn"), row.get("program"), row.get("section")
            users.append({
                "id": generate_id(f"{role}-imp"),
                "role": role,
                "name": name.strip(),
                "email": normalized,
                "password": password.strip(),
                "usn": usn.upper() if usn else None,
                "semester": row.get("semester") or None,
                "program": program.upper() if program else ("BCA" if is_student else None),
                "section": section.upper() if section else ("A" if is_student else None),
                "avatar": make_initials(name.strip()),
            })
            summary["created"] += 1

        self._write(keys.USERS, users)
        self.audit.log(
            "BULK_IMPORT",
            admin,
            f"Imported {summary['created']} users, skipped {summary['skipped']}",
        )
        return summary

    def allocate_faculty(self, rows: Iterable[Dict[str, Any]], admin: Optional[Record] = None) -> Dict[str, Any]:
        """Append program/section/subject allocations to faculty accounts; subjects are ';' separated"""
        users = self._read(keys.USERS)
        summary = {"updated": 0, "notFound": 0, "errors": []}

        for idx, row in enumerate(rows):
            email, program, section, subjects = (row.get(f) for f in ("email", "program", "section", "subjects"))
            if not (email and program and section and subjects):
                summary["errors"].append(
                    f"Row {idx + 2}: Missing required fields (email, program, section, subjects)"
                )
                continue

            normalized = normalize_email(email)
            faculty = next(
                (u for u in users if u.get("email") == normalized and u.get("role") == "faculty"),
                None,
            )
            if faculty is None:
                summary["notFound"] += 1
                continue

            faculty["allocations"] = as_list(faculty.get("allocations"))
            faculty["allocations"].append({
                "program": program.upper(),
                "section": section.upper(),
                "subjects": [s.strip() for s in subjects.split(";") if s.strip()],
            })
            summary["updated"] += 1

        self._write(keys.USERS, users)
        self.audit.log("FACULTY_ALLOCATION", admin, f"Allocated classes for {summary['updated']} faculty.")
        return summary


__all__ = ["UserService", "normalize_email", "STAFF_ROLES"]
