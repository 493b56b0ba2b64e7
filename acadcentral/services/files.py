"""
AcadCentral Department Portal
File repository with the student-upload approval workflow
"""

from typing import Any, Dict, List, Optional

from ..store import keys
from ..utils.helpers import generate_id, timestamp_sort_key, utc_now_iso
from .base import BaseService, Record


def _contains(value: Optional[str], needle: str) -> bool:
    return needle in (value or "").lower()


class FileService(BaseService):

    def get_files(
        self,
        approved_only: bool = False,
        status: Optional[str] = None,
        semester: Optional[str] = None,
        subject: Optional[str] = None,
        professor: Optional[str] = None,
        query: Optional[str] = None
    ) -> List[Record]:
        """Filtered files, most recently uploaded first; text filters are case-insensitive substrings"""
        files = self._read(keys.FILES)

        if approved_only:
            files = [f for f in files if f.get("status") == "approved"]
        if status:
            files = [f for f in files if f.get("status") == status]
        if semester:
            files = [f for f in files if f.get("semester") == semester]
        if subject:
            needle = subject.lower()
            files = [
                f for f in files
                if _contains(f.get("subject"), needle) or _contains(f.get("subjectName"), needle)
            ]
        if professor:
            needle = professor.lower()
            files = [f for f in files if _contains(f.get("uploadedBy"), needle)]
        if query:
            needle = query.lower()
            files = [
                f for f in files
                if any(_contains(f.get(field), needle) for field in ("name", "subject", "subjectName", "uploadedBy"))
            ]

        return sorted(files, key=lambda f: timestamp_sort_key(f.get("uploadDate")), reverse=True)

    def upload_file(self, file_data: Dict[str, Any], user: Record) -> Record:
        """Students' uploads wait for approval; staff uploads are published immediately"""
        is_student = user.get("role") == "student"
        record = {
            **file_data,
            "id": generate_id("file"),
            "uploadedBy": f"{user.get('usn')} - {user.get('name')}" if is_student else user.get("name"),
            "uploaderId": user.get("id"),
            "uploaderRole": user.get("role"),
            "status": "pending" if is_student else "approved",
            "uploadDate": utc_now_iso(),
            "downloads": 0,
        }

        files = self._read(keys.FILES)
        files.append(record)
        self._write(keys.FILES, files)
        self.audit.log("UPLOAD_FILE", user, f"Uploaded: {file_data.get('name')}")
        return record

    def approve_file(self, file_id: str, user: Record) -> bool:
        files = self._read(keys.FILES)
        idx = self._find_index(files, file_id)
        if idx == -1:
            return False

        files[idx]["status"] = "approved"
        self._write(keys.FILES, files)
        self.audit.log("APPROVE_FILE", user, f"Approved file {file_id}")
        return True

    def _remove(self, file_id: str, user: Record, action: str, verb: str) -> bool:
        files = self._read(keys.FILES)
        self._write(keys.FILES, [f for f in files if f.get("id") != file_id])
        self.audit.log(action, user, f"{verb} file {file_id}")
        return True

    def reject_file(self, file_id: str, user: Record) -> bool:
        """Rejected uploads are removed outright"""
        return self._remove(file_id, user, "REJECT_FILE", "Rejected")

    def delete_file(self, file_id: str, user: Record) -> bool:
        return self._remove(file_id, user, "DELETE_FILE", "Deleted")

    def record_download(self, file_id: str) -> Optional[int]:
        """Bump a file's download counter; returns the new count, None for unknown files"""
        files = self._read(keys.FILES)
        idx = self._find_index(files, file_id)
        if idx == -1:
            return None

        files[idx]["downloads"] = int(files[idx].get("downloads") or 0) + 1
        self._write(keys.FILES, files)
        return files[idx]["downloads"]


__all__ = ["FileService"]
