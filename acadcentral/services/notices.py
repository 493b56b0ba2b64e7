"""
AcadCentral Department Portal
Department notices
"""

from datetime import timedelta
from typing import Any, Dict, List

from ..store import keys
from ..utils.helpers import generate_id, parse_timestamp, timestamp_sort_key, utc_now, utc_now_iso
from .base import BaseService, Record

NEW_NOTICE_WINDOW = timedelta(hours=24)


def is_new_notice(posted_date) -> bool:
    """True for notices posted within the last 24 hours"""
    posted = parse_timestamp(posted_date)
    if posted is None:
        return False
    return utc_now() - posted <= NEW_NOTICE_WINDOW


class NoticeService(BaseService):

    def get_notices(self) -> List[Record]:
        notices = self._read(keys.NOTICES)
        return sorted(notices, key=lambda n: timestamp_sort_key(n.get("postedDate")), reverse=True)

    def post_notice(self, notice_data: Dict[str, Any], user: Record) -> Record:
        notice = {
            **notice_data,
            "id": generate_id("notice"),
            "postedBy": user.get("name"),
            "posterId": user.get("id"),
            "postedDate": utc_now_iso(),
        }
        notices = self._read(keys.NOTICES)
        notices.append(notice)
        self._write(keys.NOTICES, notices)
        self.audit.log("POST_NOTICE", user, f"Posted: {notice_data.get('title')}")
        return notice

    def delete_notice(self, notice_id: str, user: Record) -> bool:
        notices = self._read(keys.NOTICES)
        self._write(keys.NOTICES, [n for n in notices if n.get("id") != notice_id])
        self.audit.log("DELETE_NOTICE", user, f"Deleted notice {notice_id}")
        return True

    is_new_notice = staticmethod(is_new_notice)


__all__ = ["NoticeService", "is_new_notice", "NEW_NOTICE_WINDOW"]
